from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.network.core import ProductionLine
from leadtime_sim.simulation.report import HealthStatus, read_only

MIN_SAMPLES_FOR_VARIANCE = 2


@dataclass
class WelfordAccumulator:
    """
    Implements Welford's online algorithm for calculating mean and variance
    in a single pass (O(1) update).
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0  # Sum of squares of differences from the current mean

    def update(self, new_value: float) -> None:
        self.count += 1
        delta = new_value - self.mean
        self.mean += delta / self.count
        delta2 = new_value - self.mean
        self.m2 += delta * delta2

    @property
    def variance(self) -> float:
        if self.count < MIN_SAMPLES_FOR_VARIANCE:
            return 0.0
        return self.m2 / (self.count - 1)

    @property
    def std_dev(self) -> float:
        return float(np.sqrt(self.variance))


@dataclass(frozen=True)
class CapacityHealth:
    """Spare-capacity view of a line at average demand."""

    total_mean_demand: float
    system_buffer: float
    status: HealthStatus
    overloaded: bool
    recommended_capacity: float | None
    max_safe_order_qty: Mapping[str, float]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "max_safe_order_qty", read_only(self.max_safe_order_qty)
        )


class CapacityHealthAnalyzer:
    """
    Classifies a line by spare daily capacity (system buffer).

    system_buffer = capacity - sum(mean demand):
      <= 0                        -> critical
      0 < buffer < fragile limit  -> fragile
      >= fragile limit            -> healthy

    A line is overloaded only when average demand strictly exceeds
    capacity; the recommended capacity is then the average demand times
    the configured margin. Overload is reported, it never stops a run.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.fragile_threshold = config.fragile_threshold
        self.overload_margin_factor = config.overload_margin_factor

    def classify(self, system_buffer: float) -> HealthStatus:
        if system_buffer <= 0:
            return HealthStatus.CRITICAL
        if system_buffer < self.fragile_threshold:
            return HealthStatus.FRAGILE
        return HealthStatus.HEALTHY

    def analyze(self, line: ProductionLine) -> CapacityHealth:
        total_mean = line.total_mean_demand
        system_buffer = line.capacity - total_mean
        overloaded = total_mean > line.capacity

        return CapacityHealth(
            total_mean_demand=total_mean,
            system_buffer=system_buffer,
            status=self.classify(system_buffer),
            overloaded=overloaded,
            recommended_capacity=(
                total_mean * self.overload_margin_factor if overloaded else None
            ),
            max_safe_order_qty={
                m.name: m.mean_demand + system_buffer for m in line.members
            },
        )
