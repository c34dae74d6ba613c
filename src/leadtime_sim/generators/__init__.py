"""Generators module for demand sampling and demand statistics."""

from leadtime_sim.generators.distributions import NormalSampler
from leadtime_sim.generators.history import (
    load_demand_history,
    summarize_demand_history,
)

__all__ = [
    "NormalSampler",
    "load_demand_history",
    "summarize_demand_history",
]
