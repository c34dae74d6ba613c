"""Builds ProductionLine groupings from flat product-to-line assignment rows."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from leadtime_sim.errors import ValidationError
from leadtime_sim.network.core import BufferMethod, ProductionLine
from leadtime_sim.product.core import DemandProfile, DemandStatistic
from leadtime_sim.simulation.report import LineFailure

logger = logging.getLogger(__name__)


class LineBuilder:
    """
    Groups assignment rows by line and attaches demand statistics.

    Each row names a product, its line and the line-level capacity and
    starting backlog. The line -> row-index mapping only lives for the
    duration of build().
    """

    def __init__(
        self,
        assignments: Sequence[Mapping[str, Any]],
        statistics: Mapping[str, DemandStatistic],
    ) -> None:
        self.assignments = assignments
        self.statistics = statistics

    def _group_rows_by_line(self) -> dict[str, list[int]]:
        """Line key -> row indices, both in first-appearance order."""
        rows_by_line: dict[str, list[int]] = {}
        for idx, row in enumerate(self.assignments):
            key = str(row.get("line", "")).strip()
            if key not in rows_by_line:
                rows_by_line[key] = []
            rows_by_line[key].append(idx)
        return rows_by_line

    @staticmethod
    def _parse_float(line: str, row: Mapping[str, Any], column: str) -> float:
        raw = row.get(column)
        if raw is None or raw == "":
            raise ValidationError(line, column, raw, f"missing {column}")
        try:
            return float(raw)
        except (TypeError, ValueError):
            raise ValidationError(
                line, column, raw, f"{column} is not a number"
            ) from None

    def _build_line(self, line: str, row_indices: list[int]) -> ProductionLine:
        if not line:
            raise ValidationError(line, "line", line, "row has no line assigned")

        first = self.assignments[row_indices[0]]
        capacity = self._parse_float(line, first, "capacity")
        start_backlog = self._parse_float(line, first, "start_backlog")
        method_raw = first.get("buffer_method")
        try:
            buffer_method = BufferMethod.parse(method_raw)
        except ValueError:
            raise ValidationError(
                line, "buffer_method", method_raw, "unknown buffer method"
            ) from None

        members = []
        for idx in row_indices:
            row = self.assignments[idx]
            product = str(row.get("product", "")).strip()
            if not product:
                raise ValidationError(line, "product", product, "missing product name")

            stats = self.statistics.get(product)
            if stats is None:
                raise ValidationError(
                    line,
                    "demand_statistics",
                    None,
                    "no demand statistics for product",
                    product,
                )

            lead_time = row.get("material_lead_time")
            members.append(
                DemandProfile(
                    name=product,
                    mean_demand=stats.mean_demand,
                    std_dev=stats.std_dev,
                    material_lead_time=(
                        0.0
                        if lead_time in (None, "")
                        else self._parse_float(line, row, "material_lead_time")
                    ),
                )
            )

        production_line = ProductionLine(
            name=line,
            capacity=capacity,
            start_backlog=start_backlog,
            members=tuple(members),
            buffer_method=buffer_method,
        )
        production_line.validate()
        return production_line

    @staticmethod
    def _check_unclaimed(line: ProductionLine, owners: Mapping[str, str]) -> None:
        """A product runs on one line only; the first line to list it keeps it."""
        for member in line.members:
            owner = owners.get(member.name)
            if owner is not None:
                raise ValidationError(
                    line.name,
                    "product",
                    member.name,
                    f"product already assigned to line {owner!r}",
                    member.name,
                )

    def build(self) -> tuple[list[ProductionLine], list[LineFailure]]:
        """Returns valid lines and structured failures, both in input order."""
        lines: list[ProductionLine] = []
        failures: list[LineFailure] = []
        owners: dict[str, str] = {}

        for line, row_indices in self._group_rows_by_line().items():
            try:
                production_line = self._build_line(line, row_indices)
                self._check_unclaimed(production_line, owners)
            except ValidationError as e:
                logger.warning("Excluding line %r: %s", line, e)
                failures.append(LineFailure.from_error(e))
                continue
            for member in production_line.members:
                owners[member.name] = line
            lines.append(production_line)

        logger.info(
            "LineBuilder: %d valid line(s), %d excluded", len(lines), len(failures)
        )
        return lines, failures
