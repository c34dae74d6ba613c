"""Writes run results (reports, failures, trajectories) to an output directory."""

import csv
import json
import logging
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from leadtime_sim.simulation.report import RunResult
from leadtime_sim.simulation.volatility import VolatilitySample
from leadtime_sim.writers.base import BaseWriter

logger = logging.getLogger(__name__)

REPORT_FIELDS = [
    "line",
    "product",
    "capacity",
    "start_backlog",
    "buffer_method",
    "quantile_queue",
    "shared_line_buffer",
    "product_buffer",
    "quoted_lead_time",
    "system_buffer",
    "health",
    "max_safe_order_qty",
    "large_order_qty",
    "large_order_lead_time",
    "overloaded",
    "recommended_capacity",
]

FAILURE_FIELDS = ["line", "product", "field", "value", "message"]

TRAJECTORY_SCHEMA = pa.schema(
    [
        ("line", pa.string()),
        ("trial", pa.int32()),
        ("day", pa.int32()),
        ("queue", pa.float64()),
    ]
)


class ReportWriter(BaseWriter):
    """
    Exports one run's results.

    Files:
        line_reports.csv: one row per line member.
        line_failures.csv: lines excluded by validation.
        run_summary.json: per-line headline metrics.
        volatility_trajectories.parquet: long-format daily queue values
            (only when volatility samples exist).
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _write_csv(
        self, filename: str, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> Path:
        filepath = self.output_dir / filename
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)
        return filepath

    def write_reports(self, result: RunResult) -> Path:
        rows = [row for report in result.reports for row in report.product_rows()]
        return self._write_csv("line_reports.csv", REPORT_FIELDS, rows)

    def write_failures(self, result: RunResult) -> Path:
        rows = [
            {
                "line": f.line,
                "product": f.product or "",
                "field": f.field,
                "value": f.value,
                "message": f.message,
            }
            for f in result.failures
        ]
        return self._write_csv("line_failures.csv", FAILURE_FIELDS, rows)

    def write_summary(self, result: RunResult) -> Path:
        summary = {
            "lines": [
                {
                    "line": r.line,
                    "trial_count": r.trial_count,
                    "horizon_days": r.horizon_days,
                    "risk_quantile": r.risk_quantile,
                    "quantile_queue": r.quantile_queue,
                    "mean_max_queue": r.mean_max_queue,
                    "std_max_queue": r.std_max_queue,
                    "shared_line_buffer": r.shared_line_buffer,
                    "system_buffer": r.system_buffer,
                    "health": r.health.value,
                    "overloaded": r.overloaded,
                    "recommended_capacity": r.recommended_capacity,
                }
                for r in result.reports
            ],
            "failures": len(result.failures),
            "volatile_lines": [s.line for s in result.volatility],
        }
        filepath = self.output_dir / "run_summary.json"
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        return filepath

    @staticmethod
    def _trajectory_rows(sample: VolatilitySample) -> list[dict[str, Any]]:
        rows = []
        for trial_idx, path in enumerate(sample.trajectories):
            for day_idx, queue in enumerate(path):
                rows.append(
                    {
                        "line": sample.line,
                        "trial": trial_idx,
                        "day": day_idx + 1,
                        "queue": float(queue),
                    }
                )
        return rows

    def write_trajectories(self, result: RunResult) -> Path | None:
        if not result.volatility:
            return None
        rows = [row for s in result.volatility for row in self._trajectory_rows(s)]
        filepath = self.output_dir / "volatility_trajectories.parquet"
        table = pa.Table.from_pylist(rows, schema=TRAJECTORY_SCHEMA)
        pq.write_table(table, filepath)
        return filepath

    def write(self, data: RunResult) -> None:
        self.write_reports(data)
        self.write_failures(data)
        self.write_summary(data)
        self.write_trajectories(data)
        logger.info("Results written to %s", self.output_dir)
