"""Derives per-product demand statistics from historical daily records."""

from pathlib import Path

import pandas as pd

from leadtime_sim.product.core import DemandStatistic

HISTORY_COLUMNS = ("product", "day", "quantity")


def summarize_demand_history(history: pd.DataFrame) -> dict[str, DemandStatistic]:
    """
    Mean and sample standard deviation of daily demand per product.

    The table is long format (product, day, quantity). Multiple records for
    the same product/day are summed; days inside the observed range with no
    record for a product count as zero demand.
    """
    missing = [c for c in HISTORY_COLUMNS if c not in history.columns]
    if missing:
        raise ValueError(f"Demand history is missing columns: {missing}")

    if history.empty:
        return {}

    daily = history.pivot_table(
        index="day",
        columns="product",
        values="quantity",
        aggfunc="sum",
        fill_value=0.0,
    )

    # Re-index over the full day range so silent days count as zero
    days = daily.index
    if pd.api.types.is_integer_dtype(days):
        daily = daily.reindex(range(days.min(), days.max() + 1), fill_value=0.0)
    elif pd.api.types.is_datetime64_any_dtype(days):
        daily = daily.reindex(
            pd.date_range(days.min(), days.max(), freq="D"), fill_value=0.0
        )

    means = daily.mean(axis=0)
    # ddof=1; a single observed day has no spread
    stds = daily.std(axis=0, ddof=1).fillna(0.0)

    return {
        str(product): DemandStatistic(
            mean_demand=float(means[product]), std_dev=float(stds[product])
        )
        for product in daily.columns
    }


def load_demand_history(history_path: str | Path) -> dict[str, DemandStatistic]:
    """Reads a product/day/quantity CSV and summarizes it."""
    history = pd.read_csv(history_path)
    history.columns = [str(c).strip() for c in history.columns]
    if "day" in history.columns and not pd.api.types.is_numeric_dtype(history["day"]):
        history["day"] = pd.to_datetime(history["day"])
    return summarize_demand_history(history)
