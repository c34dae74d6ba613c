"""Immutable per-line results handed to the output boundary."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from leadtime_sim.errors import ValidationError

if TYPE_CHECKING:
    from leadtime_sim.simulation.volatility import VolatilitySample


PRODUCT_MAPPINGS = (
    "per_product_buffer",
    "weighted_buffer",
    "quoted_lead_time",
    "max_safe_order_qty",
    "large_order_qty",
    "large_order_lead_time",
)


def read_only(mapping: Mapping[str, float]) -> Mapping[str, float]:
    """Snapshot a mapping behind a read-only view, keeping key order."""
    return MappingProxyType(dict(mapping))


class HealthStatus(enum.Enum):
    CRITICAL = "critical"  # No spare capacity at average demand
    FRAGILE = "fragile"  # Positive but thin spare capacity
    HEALTHY = "healthy"


@dataclass(frozen=True)
class LineFailure:
    """Structured description of a line excluded from simulation."""

    line: str
    field: str
    value: Any
    message: str
    product: str | None = None

    @classmethod
    def from_error(cls, error: ValidationError) -> LineFailure:
        return cls(
            line=error.line,
            field=error.field,
            value=error.value,
            message=error.message,
            product=error.product,
        )


@dataclass(frozen=True)
class LineRiskReport:
    """
    Risk metrics for one production line, produced once per run.

    Per-product mappings are keyed by product name and iterate in line
    member order.
    """

    line: str
    capacity: float
    start_backlog: float
    buffer_method: str
    trial_count: int
    horizon_days: int
    risk_quantile: float

    # Queue statistics (units)
    quantile_queue: float
    mean_max_queue: float
    std_max_queue: float

    # Line buffer in days (quantile_queue / capacity)
    shared_line_buffer: float
    per_product_buffer: Mapping[str, float]
    weighted_buffer: Mapping[str, float]
    quoted_lead_time: Mapping[str, float]

    # Capacity health
    total_mean_demand: float
    system_buffer: float
    health: HealthStatus
    overloaded: bool
    recommended_capacity: float | None
    max_safe_order_qty: Mapping[str, float]

    # Large-order quotes
    large_order_qty: Mapping[str, float]
    large_order_lead_time: Mapping[str, float]

    def __post_init__(self) -> None:
        for name in PRODUCT_MAPPINGS:
            object.__setattr__(self, name, read_only(getattr(self, name)))

    @property
    def products(self) -> list[str]:
        return list(self.per_product_buffer)

    def product_rows(self) -> list[dict[str, Any]]:
        """Flatten to one row per product for tabular export."""
        rows = []
        for product in self.products:
            rows.append(
                {
                    "line": self.line,
                    "product": product,
                    "capacity": self.capacity,
                    "start_backlog": self.start_backlog,
                    "buffer_method": self.buffer_method,
                    "quantile_queue": self.quantile_queue,
                    "shared_line_buffer": self.shared_line_buffer,
                    "product_buffer": self.per_product_buffer[product],
                    "quoted_lead_time": self.quoted_lead_time[product],
                    "system_buffer": self.system_buffer,
                    "health": self.health.value,
                    "max_safe_order_qty": self.max_safe_order_qty[product],
                    "large_order_qty": self.large_order_qty[product],
                    "large_order_lead_time": self.large_order_lead_time[product],
                    "overloaded": self.overloaded,
                    "recommended_capacity": self.recommended_capacity,
                }
            )
        return rows


@dataclass(frozen=True)
class RunResult:
    """Everything one orchestrator run produced, in input line order."""

    reports: tuple[LineRiskReport, ...]
    failures: tuple[LineFailure, ...] = ()
    volatility: tuple[VolatilitySample, ...] = ()

    def get_report(self, line: str) -> LineRiskReport | None:
        for report in self.reports:
            if report.line == line:
                return report
        return None

    @property
    def overloaded_lines(self) -> list[str]:
        return [r.line for r in self.reports if r.overloaded]
