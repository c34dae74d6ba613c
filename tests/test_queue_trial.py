"""Tests for the shared-fate queue trial and the line simulator."""

import numpy as np
import pytest

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.errors import ConfigurationError, ValidationError
from leadtime_sim.generators.distributions import NormalSampler
from leadtime_sim.network.core import ProductionLine
from leadtime_sim.product.core import DemandProfile
from leadtime_sim.simulation.engine import (
    LineSimulator,
    summarize_trials,
    trial_maxima,
)
from leadtime_sim.simulation.queue import QueueTrial


@pytest.fixture
def sampler() -> NormalSampler:
    return NormalSampler(np.random.default_rng(1234))


def test_no_backlog_growth_when_demand_below_capacity(sampler):
    """Deterministic demand 7 against capacity 10 never queues."""
    trial = QueueTrial(10.0, 0.0, np.array([3.0, 4.0]), np.array([0.0, 0.0]))
    result = trial.run(sampler, 365)
    assert result.max_queue_observed == 0.0


def test_deterministic_overload_grows_linearly(sampler):
    """Demand 12 against capacity 10 adds 2 units per day."""
    trial = QueueTrial(10.0, 0.0, np.array([12.0]), np.array([0.0]))

    path = trial.trajectory(sampler, 10)
    assert np.allclose(path, np.arange(2.0, 22.0, 2.0))
    assert trial.run(sampler, 10).max_queue_observed == pytest.approx(20.0)


def test_zero_horizon_returns_start_backlog(sampler):
    trial = QueueTrial(10.0, 4.5, np.array([30.0]), np.array([5.0]))
    assert trial.run(sampler, 0).max_queue_observed == 4.5


def test_start_backlog_drains_and_counts_as_maximum(sampler):
    trial = QueueTrial(10.0, 5.0, np.array([3.0, 4.0]), np.array([0.0, 0.0]))
    path = trial.trajectory(sampler, 5)
    assert np.allclose(path, [2.0, 0.0, 0.0, 0.0, 0.0])
    assert trial.run(sampler, 5).max_queue_observed == 5.0


def test_queue_floor_does_not_bank_negative_credit():
    """Idle days do not offset a later spike."""
    trial = QueueTrial(10.0, 0.0, np.array([0.0]), np.array([0.0]))
    path = trial.queue_path(np.array([0.0, 0.0, 15.0, 12.0, 0.0]))
    assert np.allclose(path, [0.0, 0.0, 5.0, 7.0, 0.0])


def test_negative_draws_are_floored_per_product(sampler):
    """A zero-mean product cannot offset its neighbour's demand."""
    trial = QueueTrial(100.0, 0.0, np.array([0.0, 5.0]), np.array([10.0, 0.0]))
    demand = trial.daily_demand(sampler, 1000)
    assert np.all(demand >= 5.0)


def test_deterministic_trials_are_repeatable():
    line = ProductionLine(
        "LINE-D",
        9.0,
        1.0,
        (DemandProfile("A", 4.0, 0.0), DemandProfile("B", 5.5, 0.0)),
    )
    first = LineSimulator(SimulationConfig(random_seed=1)).run_trials(line, 60, 5)
    second = LineSimulator(SimulationConfig(random_seed=99)).run_trials(line, 60, 5)

    assert [r.max_queue_observed for r in first] == [
        r.max_queue_observed for r in second
    ]
    assert len({r.max_queue_observed for r in first}) == 1


class TestLineSimulator:
    @pytest.fixture
    def line(self) -> ProductionLine:
        return ProductionLine(
            "LINE-S",
            10.0,
            0.0,
            (DemandProfile("A", 4.0, 1.0), DemandProfile("B", 5.0, 2.5)),
        )

    def test_runs_requested_number_of_trials(self, line):
        sim = LineSimulator(SimulationConfig(random_seed=3))
        results = sim.run_trials(line, horizon=30, trial_count=25)

        maxima = trial_maxima(results)
        assert len(results) == 25
        assert maxima.shape == (25,)
        assert np.all(maxima >= 0.0)

    def test_defaults_come_from_config(self, line):
        config = SimulationConfig(trial_count=7, horizon_days=12, random_seed=3)
        results = LineSimulator(config).run_trials(line)
        assert len(results) == 7

    def test_fixed_seed_reproduces_results(self, line):
        a = LineSimulator(SimulationConfig(random_seed=21)).run_trials(line, 50, 20)
        b = LineSimulator(SimulationConfig(random_seed=21)).run_trials(line, 50, 20)
        assert np.array_equal(trial_maxima(a), trial_maxima(b))

    def test_trials_are_independent(self, line):
        results = LineSimulator(SimulationConfig(random_seed=8)).run_trials(
            line, 50, 40
        )
        assert len(set(trial_maxima(results))) > 1

    def test_trajectories_shape(self, line):
        sim = LineSimulator(SimulationConfig(random_seed=4))
        paths = sim.run_trajectories(line, horizon=15, trial_count=6)
        assert paths.shape == (6, 15)
        assert np.all(paths >= 0.0)

    @pytest.mark.parametrize(
        "horizon, trial_count", [(30, 0), (-5, 3), (0, 10), (10, -1)]
    )
    def test_non_positive_run_size_rejected(self, line, horizon, trial_count):
        sim = LineSimulator(SimulationConfig(random_seed=1))
        with pytest.raises(ConfigurationError):
            sim.run_trials(line, horizon, trial_count)
        with pytest.raises(ConfigurationError):
            sim.run_trajectories(line, horizon, trial_count)

    def test_run_size_checked_before_line(self):
        bad = ProductionLine("LINE-X", 0.0, 0.0, (DemandProfile("A", 1.0, 1.0),))
        with pytest.raises(ConfigurationError):
            LineSimulator(SimulationConfig()).run_trials(bad, 10, 0)

    def test_invalid_line_fails_before_simulating(self):
        bad = ProductionLine("LINE-X", 0.0, 0.0, (DemandProfile("A", 1.0, 1.0),))
        with pytest.raises(ValidationError) as exc:
            LineSimulator(SimulationConfig()).run_trials(bad, 10, 10)
        assert exc.value.field == "capacity"

    def test_negative_std_dev_rejected(self):
        bad = ProductionLine("LINE-X", 5.0, 0.0, (DemandProfile("A", 1.0, -1.0),))
        with pytest.raises(ValidationError) as exc:
            LineSimulator(SimulationConfig()).run_trials(bad, 10, 10)
        assert exc.value.field == "std_dev"

    def test_summary_statistics(self, line):
        results = LineSimulator(SimulationConfig(random_seed=5)).run_trials(
            line, 30, 30
        )
        summary = summarize_trials(results)
        maxima = trial_maxima(results)

        assert summary.count == 30
        assert np.isclose(summary.mean, maxima.mean())
        assert np.isclose(summary.std_dev, maxima.std(ddof=1))
