"""End-to-end tests for the lead time risk engine."""

import numpy as np
import pytest

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.errors import ConfigurationError
from leadtime_sim.network.core import BufferMethod, ProductionLine
from leadtime_sim.product.core import DemandProfile
from leadtime_sim.simulation.orchestrator import Orchestrator
from leadtime_sim.simulation.report import (
    PRODUCT_MAPPINGS,
    HealthStatus,
    LineFailure,
)


@pytest.fixture
def fast_config() -> SimulationConfig:
    return SimulationConfig(
        trial_count=60,
        horizon_days=90,
        volatility_trial_count=5,
        random_seed=7,
    )


@pytest.fixture
def volatile_line() -> ProductionLine:
    return ProductionLine(
        "LINE-V",
        10.0,
        2.0,
        (
            DemandProfile("STABLE", 4.0, 0.2, 10.0),
            DemandProfile("SPIKY", 4.5, 2.5, 12.0),
        ),
    )


class TestScenarios:
    def test_deterministic_line_without_growth(self):
        config = SimulationConfig(trial_count=20, horizon_days=365, random_seed=1)
        line = ProductionLine(
            "LINE-A",
            10.0,
            0.0,
            (DemandProfile("A", 3.0, 0.0, 5.0), DemandProfile("B", 4.0, 0.0, 8.0)),
        )
        report = Orchestrator(config).analyze_line(line)

        assert report.quantile_queue == 0.0
        assert report.mean_max_queue == 0.0
        assert report.shared_line_buffer == 0.0
        assert report.per_product_buffer == {"A": 0.0, "B": 0.0}
        assert report.weighted_buffer == {"A": 0.0, "B": 0.0}
        assert report.quoted_lead_time == {"A": 5.0, "B": 8.0}
        assert report.system_buffer == 3.0
        assert report.health == HealthStatus.HEALTHY
        assert report.overloaded is False

    def test_deterministic_overload(self):
        config = SimulationConfig(trial_count=20, horizon_days=10, random_seed=1)
        line = ProductionLine("LINE-B", 10.0, 0.0, (DemandProfile("X", 12.0, 0.0),))
        report = Orchestrator(config).analyze_line(line)

        assert report.quantile_queue == pytest.approx(20.0)
        assert report.shared_line_buffer == pytest.approx(2.0)
        assert report.overloaded is True
        assert report.recommended_capacity == pytest.approx(13.2)
        assert report.system_buffer == -2.0
        assert report.health == HealthStatus.CRITICAL


def test_report_fields_are_consistent(fast_config, volatile_line):
    report = Orchestrator(fast_config).analyze_line(volatile_line)

    assert report.trial_count == 60
    assert report.horizon_days == 90
    assert report.products == ["STABLE", "SPIKY"]
    assert report.quantile_queue >= volatile_line.start_backlog
    assert report.shared_line_buffer == pytest.approx(report.quantile_queue / 10.0)
    assert sum(report.per_product_buffer.values()) == pytest.approx(
        report.shared_line_buffer
    )
    assert report.large_order_qty["SPIKY"] == pytest.approx(9.5)
    assert report.large_order_lead_time["SPIKY"] == pytest.approx(
        12.0 + report.weighted_buffer["SPIKY"] + 0.5
    )
    assert report.max_safe_order_qty["STABLE"] == pytest.approx(4.0 + 1.5)


@pytest.mark.parametrize("field", PRODUCT_MAPPINGS)
def test_report_mappings_are_read_only(fast_config, volatile_line, field):
    report = Orchestrator(fast_config).analyze_line(volatile_line)
    mapping = getattr(report, field)
    before = dict(mapping)

    with pytest.raises(TypeError):
        mapping["STABLE"] = 99.0
    with pytest.raises(TypeError):
        del mapping["SPIKY"]
    assert dict(mapping) == before


def test_uniform_line_reports_uniform_buffers(fast_config, volatile_line):
    uniform = ProductionLine(
        volatile_line.name,
        volatile_line.capacity,
        volatile_line.start_backlog,
        volatile_line.members,
        BufferMethod.UNIFORM,
    )
    report = Orchestrator(fast_config).analyze_line(uniform)

    assert report.buffer_method == "uniform"
    assert set(report.per_product_buffer.values()) == {report.shared_line_buffer}
    # Large-order quotes still use the variance-weighted split
    assert report.weighted_buffer["SPIKY"] > report.weighted_buffer["STABLE"]


def test_invalid_line_does_not_block_others(fast_config, volatile_line):
    broken = ProductionLine("LINE-BAD", -1.0, 0.0, (DemandProfile("Q", 1.0, 0.1),))
    upstream = LineFailure("LINE-MISSING", "demand_statistics", None, "missing", "Z")

    result = Orchestrator(fast_config).run([broken, volatile_line], [upstream])

    assert [r.line for r in result.reports] == ["LINE-V"]
    assert [f.line for f in result.failures] == ["LINE-MISSING", "LINE-BAD"]
    failure = result.failures[1]
    assert failure.field == "capacity"
    assert failure.value == -1.0


def test_run_preserves_input_order_and_samples_volatility(fast_config, volatile_line):
    calm = ProductionLine("LINE-CALM", 12.0, 0.0, (DemandProfile("C", 5.0, 0.5),))
    result = Orchestrator(fast_config).run([volatile_line, calm])

    assert [r.line for r in result.reports] == ["LINE-V", "LINE-CALM"]
    assert result.get_report("LINE-CALM").health == HealthStatus.HEALTHY
    assert result.get_report("LINE-NONE") is None
    assert [s.line for s in result.volatility] == ["LINE-V"]
    assert result.volatility[0].trajectories.shape == (5, 90)


def test_volatility_sampling_can_be_skipped(fast_config, volatile_line):
    result = Orchestrator(fast_config).run([volatile_line], sample_volatility=False)
    assert result.volatility == ()


def test_fixed_seed_is_reproducible_across_worker_counts(fast_config, volatile_line):
    second = ProductionLine(
        "LINE-W", 9.0, 0.0, (DemandProfile("W1", 5.0, 1.0), DemandProfile("W2", 3.0, 1.2))
    )
    lines = [volatile_line, second]

    serial = Orchestrator(fast_config).run(lines)
    parallel = Orchestrator(fast_config.with_overrides(max_workers=2)).run(lines)

    for a, b in zip(serial.reports, parallel.reports):
        assert a.line == b.line
        assert a.quantile_queue == b.quantile_queue
        assert a.mean_max_queue == b.mean_max_queue
    assert np.array_equal(
        serial.volatility[0].trajectories, parallel.volatility[0].trajectories
    )


def test_overloaded_lines_listed(fast_config):
    hot = ProductionLine("LINE-HOT", 5.0, 0.0, (DemandProfile("H", 6.0, 0.5),))
    result = Orchestrator(fast_config).run([hot], sample_volatility=False)
    assert result.overloaded_lines == ["LINE-HOT"]


def test_invalid_config_is_fatal():
    with pytest.raises(ConfigurationError):
        Orchestrator(SimulationConfig(trial_count=0))
    with pytest.raises(ConfigurationError):
        Orchestrator(SimulationConfig(horizon_days=-5))
