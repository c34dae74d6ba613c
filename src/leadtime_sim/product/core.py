from dataclasses import dataclass


@dataclass(frozen=True)
class DemandStatistic:
    """Historical daily demand statistics for a single product."""

    mean_demand: float
    std_dev: float


@dataclass(frozen=True)
class DemandProfile:
    """
    Daily demand of one product on a shared production line.

    Range checks (non-negative mean, deviation and lead time) belong to the
    owning ProductionLine so that a bad value excludes the line rather than
    aborting the whole run.
    """

    name: str
    mean_demand: float
    std_dev: float

    # Fixed floor added on top of the simulated queue buffer (days)
    material_lead_time: float = 0.0

    @property
    def coefficient_of_variation(self) -> float | None:
        """stdDev / mean, undefined (None) for zero-mean products."""
        if self.mean_demand <= 0:
            return None
        return self.std_dev / self.mean_demand

    @property
    def is_deterministic(self) -> bool:
        return self.std_dev == 0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("DemandProfile name cannot be empty")
