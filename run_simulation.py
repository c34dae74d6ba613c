"""
Lead Time Risk Simulation Runner.

Usage:
    poetry run python run_simulation.py --assignments lines.csv --stats stats.csv
    poetry run python run_simulation.py --assignments lines.csv --history sales.csv
    poetry run python run_simulation.py ... --trials 5000 --seed 7 --workers 4
"""

import argparse
import logging
import time

from leadtime_sim.config.loader import load_demand_statistics, load_line_assignments
from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.errors import ConfigurationError
from leadtime_sim.generators.history import load_demand_history
from leadtime_sim.network.builder import LineBuilder
from leadtime_sim.simulation.orchestrator import Orchestrator
from leadtime_sim.simulation.report import RunResult
from leadtime_sim.writers.report_writer import ReportWriter


def format_result(result: RunResult) -> str:
    """Plain-text per-line summary."""
    out = []
    out.append("=" * 72)
    out.append("LEAD TIME RISK REPORT")
    out.append("=" * 72)

    for r in result.reports:
        out.append(
            f"\nLine {r.line}  (capacity {r.capacity:,.2f}/day, "
            f"method {r.buffer_method})"
        )
        out.append(
            f"  q{r.risk_quantile * 100:.0f} max queue: {r.quantile_queue:,.2f} units"
            f"  ->  line buffer {r.shared_line_buffer:.2f} days"
        )
        out.append(
            f"  System buffer: {r.system_buffer:,.2f}/day  [{r.health.value.upper()}]"
        )
        if r.overloaded:
            out.append(
                f"  OVERLOADED: demand {r.total_mean_demand:,.2f} > capacity "
                f"{r.capacity:,.2f}; recommended capacity "
                f"{r.recommended_capacity:,.2f}"
            )
        out.append(
            f"  {'Product':<20} {'Buffer':>8} {'Lead time':>10} "
            f"{'Max safe':>10} {'Large qty':>10} {'Large LT':>9}"
        )
        for p in r.products:
            out.append(
                f"  {p:<20} {r.per_product_buffer[p]:>8.2f} "
                f"{r.quoted_lead_time[p]:>10.2f} {r.max_safe_order_qty[p]:>10.2f} "
                f"{r.large_order_qty[p]:>10.2f} {r.large_order_lead_time[p]:>9.2f}"
            )

    if result.failures:
        out.append("\nEXCLUDED LINES")
        for f in result.failures:
            target = f" / {f.product}" if f.product else ""
            out.append(f"  {f.line}{target}: {f.message} ({f.field}={f.value!r})")

    if result.volatility:
        out.append("\nVOLATILE PRODUCTS (trajectories sampled)")
        for s in result.volatility:
            out.append(f"  {s.line}: {', '.join(s.products)}")

    return "\n".join(out)


def main() -> None:
    """Run the lead time risk simulation."""
    parser = argparse.ArgumentParser(
        description="Lead Time Risk Simulation Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  poetry run python run_simulation.py --assignments lines.csv --stats stats.csv
  poetry run python run_simulation.py --assignments lines.csv --history sales.csv --no-export
        """,
    )

    # Inputs
    parser.add_argument(
        "--assignments",
        required=True,
        help="CSV of product -> line assignments with capacity and backlog",
    )
    stats_group = parser.add_mutually_exclusive_group(required=True)
    stats_group.add_argument(
        "--stats", help="CSV of per-product mean_demand and std_dev"
    )
    stats_group.add_argument(
        "--history", help="CSV of daily demand records (product, day, quantity)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Simulation config JSON (default: bundled simulation_config.json)",
    )

    # Parameter overrides
    parser.add_argument("--trials", type=int, default=None, help="Trials per line")
    parser.add_argument("--horizon", type=int, default=None, help="Horizon in days")
    parser.add_argument(
        "--quantile", type=float, default=None, help="Risk quantile, e.g. 0.95"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--workers", type=int, default=None, help="Lines simulated in parallel"
    )

    # Output
    parser.add_argument(
        "--output-dir",
        type=str,
        default="data/output",
        help="Directory for output artifacts",
    )
    parser.add_argument(
        "--no-export", action="store_true", help="Print the report only"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SimulationConfig.load(args.config).with_overrides(
            trial_count=args.trials,
            horizon_days=args.horizon,
            risk_quantile=args.quantile,
            random_seed=args.seed,
            max_workers=args.workers,
        )
        config.validate()
    except ConfigurationError as e:
        parser.error(str(e))

    if args.stats:
        statistics = load_demand_statistics(args.stats)
    else:
        statistics = load_demand_history(args.history)

    assignments = load_line_assignments(args.assignments)
    lines, failures = LineBuilder(assignments, statistics).build()

    print(
        f"Simulating {len(lines)} line(s) "
        f"(Trials={config.trial_count}, Days={config.horizon_days}, "
        f"Quantile={config.risk_quantile})..."
    )
    start_time = time.time()

    result = Orchestrator(config).run(lines, failures)

    duration = time.time() - start_time
    print(f"Simulation completed in {duration:.2f} seconds.")

    print("\n" + format_result(result) + "\n")

    if not args.no_export:
        ReportWriter(args.output_dir).write(result)
        print(f"Artifacts saved to {args.output_dir}")


if __name__ == "__main__":
    main()
