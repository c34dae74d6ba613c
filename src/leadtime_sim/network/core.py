import enum
from dataclasses import dataclass

import numpy as np

from leadtime_sim.errors import ValidationError
from leadtime_sim.product.core import DemandProfile


class BufferMethod(enum.Enum):
    UNIFORM = "uniform"  # Every member carries the full line buffer
    VARIANCE_WEIGHTED = "variance_weighted"  # Split in proportion to stdDev

    @classmethod
    def parse(cls, value: "str | BufferMethod | None") -> "BufferMethod":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.VARIANCE_WEIGHTED
        normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        if normalized in ("variance", "weighted"):
            return cls.VARIANCE_WEIGHTED
        return cls(normalized)


@dataclass(frozen=True)
class ProductionLine:
    """
    A finite-capacity resource shared by an ordered group of products.

    Capacity and starting backlog are line-level scalars; member order is
    the input order and is preserved in every per-product output.
    """

    name: str
    capacity: float
    start_backlog: float
    members: tuple[DemandProfile, ...]
    buffer_method: BufferMethod = BufferMethod.VARIANCE_WEIGHTED

    @property
    def product_names(self) -> list[str]:
        return [m.name for m in self.members]

    @property
    def mean_vector(self) -> np.ndarray:
        return np.array([m.mean_demand for m in self.members], dtype=np.float64)

    @property
    def std_vector(self) -> np.ndarray:
        return np.array([m.std_dev for m in self.members], dtype=np.float64)

    @property
    def total_mean_demand(self) -> float:
        return float(sum(m.mean_demand for m in self.members))

    @property
    def total_std_dev(self) -> float:
        return float(sum(m.std_dev for m in self.members))

    def get_member(self, name: str) -> DemandProfile | None:
        for member in self.members:
            if member.name == name:
                return member
        return None

    def validate(self) -> None:
        """
        Raises ValidationError for the first invalid field found.
        Called once per line before any trial runs.
        """
        if not self.capacity > 0:
            raise ValidationError(
                self.name, "capacity", self.capacity, "capacity must be positive"
            )
        if not self.start_backlog >= 0:
            raise ValidationError(
                self.name,
                "start_backlog",
                self.start_backlog,
                "starting backlog cannot be negative",
            )
        if not self.members:
            raise ValidationError(
                self.name, "members", 0, "line has no demand profiles"
            )

        seen: set[str] = set()
        for m in self.members:
            if m.name in seen:
                raise ValidationError(
                    self.name, "name", m.name, "duplicate product on line", m.name
                )
            seen.add(m.name)

            for field_name in ("mean_demand", "std_dev", "material_lead_time"):
                value = getattr(m, field_name)
                # NaN fails the comparison as well
                if not value >= 0:
                    raise ValidationError(
                        self.name,
                        field_name,
                        value,
                        f"{field_name} cannot be negative",
                        m.name,
                    )
