"""Configuration loading for leadtime_sim."""

from leadtime_sim.config.loader import (
    load_demand_statistics,
    load_line_assignments,
    load_simulation_config,
)
from leadtime_sim.config.settings import SimulationConfig

__all__ = [
    "SimulationConfig",
    "load_demand_statistics",
    "load_line_assignments",
    "load_simulation_config",
]
