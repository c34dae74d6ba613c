"""Reduced-scale trajectory sampling for high-variability products."""

import logging
from dataclasses import dataclass

import numpy as np

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.network.core import ProductionLine
from leadtime_sim.product.core import DemandProfile
from leadtime_sim.simulation.engine import LineSimulator, SeedLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class VolatilitySample:
    """
    Daily queue trajectories of a line carrying volatile products.

    trajectories has shape [trials, horizon]; row i is the end-of-day
    backlog of trial i.
    """

    line: str
    products: tuple[str, ...]
    capacity: float
    trajectories: np.ndarray

    @property
    def trial_count(self) -> int:
        return int(self.trajectories.shape[0])

    @property
    def horizon_days(self) -> int:
        return int(self.trajectories.shape[1])

    def percentile_band(
        self, quantiles: tuple[float, ...] = (0.05, 0.5, 0.95)
    ) -> dict[float, np.ndarray]:
        """Per-day spread of the queue across trials, for plotting."""
        if self.trajectories.size == 0:
            return {q: np.zeros(self.horizon_days) for q in quantiles}
        values = np.quantile(self.trajectories, quantiles, axis=0)
        return {q: values[i] for i, q in enumerate(quantiles)}


class VolatilitySampler:
    """
    Picks members whose coefficient of variation exceeds the configured
    threshold and records full queue trajectories for their lines.

    The queue is shared, so each selected line is simulated with all of its
    members; the volatile products only decide which lines are sampled.
    Zero-mean products have no CV and are never selected.
    """

    def __init__(
        self, config: SimulationConfig, simulator: LineSimulator | None = None
    ) -> None:
        self.config = config
        self.cv_threshold = config.volatility_cv_threshold
        self.trial_count = config.volatility_trial_count
        self.simulator = simulator or LineSimulator(config)

    def volatile_members(self, line: ProductionLine) -> list[DemandProfile]:
        selected = []
        for m in line.members:
            cv = m.coefficient_of_variation
            if cv is not None and cv > self.cv_threshold:
                selected.append(m)
        return selected

    def sample_line(
        self, line: ProductionLine, seed: SeedLike = None
    ) -> VolatilitySample | None:
        volatile = self.volatile_members(line)
        if not volatile:
            return None

        trajectories = self.simulator.run_trajectories(
            line,
            horizon=self.config.horizon_days,
            trial_count=self.trial_count,
            seed=seed,
        )
        logger.debug(
            "Line %s: sampled %d trajectories for %d volatile product(s)",
            line.name,
            self.trial_count,
            len(volatile),
        )
        return VolatilitySample(
            line=line.name,
            products=tuple(m.name for m in volatile),
            capacity=line.capacity,
            trajectories=trajectories,
        )

    def sample(self, lines: list[ProductionLine]) -> list[VolatilitySample]:
        """Samples in input order; empty when nothing clears the threshold."""
        samples = []
        for line in lines:
            result = self.sample_line(line)
            if result is not None:
                samples.append(result)
        return samples
