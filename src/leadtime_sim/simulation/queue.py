"""
Single-trajectory "shared fate" queue simulation.

All members of a line draw against one common backlog: each day the summed
demand of every product is added and one day of capacity is served.
"""

from dataclasses import dataclass

import numpy as np

from leadtime_sim.generators.distributions import NormalSampler
from leadtime_sim.network.core import ProductionLine


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one independent trial."""

    max_queue_observed: float


class QueueTrial:
    """
    Simulates backlog for one line over a fixed horizon.

    Per day: one Gaussian draw per member, each floored at zero, summed into
    total demand; queue <- max(0, queue + total_demand - capacity). Served
    backlog does not carry negative credit into later days.
    """

    def __init__(
        self,
        capacity: float,
        start_backlog: float,
        means: np.ndarray,
        std_devs: np.ndarray,
    ) -> None:
        self.capacity = float(capacity)
        self.start_backlog = float(start_backlog)
        self.means = np.asarray(means, dtype=np.float64)
        self.std_devs = np.asarray(std_devs, dtype=np.float64)

    @classmethod
    def for_line(cls, line: ProductionLine) -> "QueueTrial":
        return cls(line.capacity, line.start_backlog, line.mean_vector, line.std_vector)

    def daily_demand(self, sampler: NormalSampler, horizon: int) -> np.ndarray:
        """Total clamped line demand per day, shape [horizon]."""
        if horizon <= 0 or self.means.size == 0:
            return np.zeros(max(horizon, 0), dtype=np.float64)
        draws = sampler.sample_matrix(self.means, self.std_devs, horizon)
        np.maximum(draws, 0.0, out=draws)
        return draws.sum(axis=1)

    def queue_path(self, demand: np.ndarray) -> np.ndarray:
        """
        Backlog at the end of each day for a given daily demand series.

        Closed form of the floored recursion: with S the running sum of
        (demand - capacity), queue_t = S_t - min(-start_backlog, min_{k<=t} S_k).
        """
        if demand.size == 0:
            return np.zeros(0, dtype=np.float64)
        cumulative = np.cumsum(demand - self.capacity)
        floor = np.minimum(np.minimum.accumulate(cumulative), -self.start_backlog)
        return cumulative - floor

    def trajectory(self, sampler: NormalSampler, horizon: int) -> np.ndarray:
        """Full daily backlog trajectory, shape [horizon]."""
        return self.queue_path(self.daily_demand(sampler, horizon))

    def run(self, sampler: NormalSampler, horizon: int) -> TrialResult:
        """Maximum backlog reached, including the starting backlog."""
        path = self.trajectory(sampler, horizon)
        max_queue = self.start_backlog
        if path.size:
            max_queue = max(max_queue, float(path.max()))
        return TrialResult(max_queue_observed=max_queue)
