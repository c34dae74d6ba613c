"""
Monte Carlo line simulator.

Runs many independent QueueTrials for one production line. Every trial owns
a NumPy generator spawned from a SeedSequence, so trials share no mutable
random state and a fixed seed reproduces the whole run.
"""

import logging

import numpy as np

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.errors import ConfigurationError
from leadtime_sim.generators.distributions import NormalSampler
from leadtime_sim.network.core import ProductionLine
from leadtime_sim.simulation.monitor import WelfordAccumulator
from leadtime_sim.simulation.queue import QueueTrial, TrialResult

logger = logging.getLogger(__name__)

SeedLike = int | np.random.SeedSequence | None


def as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


class LineSimulator:
    """Runs independent full-horizon queue trials for a production line."""

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self._seed_root = as_seed_sequence(config.random_seed)

    def next_seed(self) -> np.random.SeedSequence:
        """Fresh child stream for one line (not thread-safe; call serially)."""
        return self._seed_root.spawn(1)[0]

    def _samplers(self, seed: SeedLike, count: int) -> list[NormalSampler]:
        seed_seq = self.next_seed() if seed is None else as_seed_sequence(seed)
        return [
            NormalSampler(np.random.default_rng(child), self.config.uniform_epsilon)
            for child in seed_seq.spawn(count)
        ]

    def _run_size(
        self, horizon: int | None, trial_count: int | None
    ) -> tuple[int, int]:
        """Resolve defaults from config; both must be positive."""
        horizon = self.config.horizon_days if horizon is None else horizon
        trial_count = self.config.trial_count if trial_count is None else trial_count
        if trial_count <= 0:
            raise ConfigurationError(
                f"trial_count must be positive, got {trial_count}"
            )
        if horizon <= 0:
            raise ConfigurationError(f"horizon must be positive, got {horizon}")
        return int(horizon), int(trial_count)

    def run_trials(
        self,
        line: ProductionLine,
        horizon: int | None = None,
        trial_count: int | None = None,
        seed: SeedLike = None,
    ) -> list[TrialResult]:
        """
        Simulate `trial_count` independent trajectories of `horizon` days.

        Raises:
            ConfigurationError: non-positive horizon or trial count.
            ValidationError: invalid capacity or demand profile. Checked once
                before any trial runs.
        """
        horizon, trial_count = self._run_size(horizon, trial_count)

        line.validate()

        trial = QueueTrial.for_line(line)
        results = [
            trial.run(sampler, horizon)
            for sampler in self._samplers(seed, trial_count)
        ]

        logger.debug(
            "Line %s: %d trials over %d days, max queue range [%.2f, %.2f]",
            line.name,
            trial_count,
            horizon,
            min(r.max_queue_observed for r in results) if results else 0.0,
            max(r.max_queue_observed for r in results) if results else 0.0,
        )
        return results

    def run_trajectories(
        self,
        line: ProductionLine,
        horizon: int | None = None,
        trial_count: int | None = None,
        seed: SeedLike = None,
    ) -> np.ndarray:
        """
        Same trials as run_trials but keeping every daily queue value.

        Returns:
            Array of shape [trial_count, horizon].
        """
        horizon, trial_count = self._run_size(horizon, trial_count)

        line.validate()

        trial = QueueTrial.for_line(line)
        trajectories = np.zeros((trial_count, horizon), dtype=np.float64)
        for i, sampler in enumerate(self._samplers(seed, trial_count)):
            trajectories[i, :] = trial.trajectory(sampler, horizon)
        return trajectories


def trial_maxima(results: list[TrialResult]) -> np.ndarray:
    return np.array([r.max_queue_observed for r in results], dtype=np.float64)


def summarize_trials(results: list[TrialResult]) -> WelfordAccumulator:
    """Single-pass mean / std of trial maxima."""
    acc = WelfordAccumulator()
    for r in results:
        acc.update(r.max_queue_observed)
    return acc
