import csv
import json
from pathlib import Path
from typing import Any

from leadtime_sim.product.core import DemandStatistic


def load_simulation_config(config_path: str | None = None) -> dict[str, Any]:
    """
    Loads the simulation runtime configuration.
    If no path is provided, looks for simulation_config.json in the config directory.
    """
    if config_path is None:
        # Default to the file next to this script
        final_path = Path(__file__).parent / "simulation_config.json"
    else:
        final_path = Path(config_path)

    with open(final_path) as f:
        data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict from {final_path}, got {type(data)}")
        return data


def load_line_assignments(assignments_path: str | Path) -> list[dict[str, str]]:
    """
    Loads product-to-line assignment rows.

    Expected columns: product, line, capacity, start_backlog,
    material_lead_time and, optionally, buffer_method. Values are returned
    as raw strings; LineBuilder parses and validates them per line.
    """
    with open(assignments_path, newline="", encoding="utf-8") as f:
        return [
            {key.strip(): (value or "").strip() for key, value in row.items() if key}
            for row in csv.DictReader(f)
        ]


def load_demand_statistics(stats_path: str | Path) -> dict[str, DemandStatistic]:
    """
    Loads per-product daily demand statistics.

    Expected columns: product, mean_demand, std_dev.
    """
    statistics: dict[str, DemandStatistic] = {}
    with open(stats_path, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            name = row["product"].strip()
            statistics[name] = DemandStatistic(
                mean_demand=float(row["mean_demand"]),
                std_dev=float(row["std_dev"]),
            )
    return statistics
