import time

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.network.core import ProductionLine
from leadtime_sim.product.core import DemandProfile
from leadtime_sim.simulation.orchestrator import Orchestrator


def build_benchmark_lines(n_lines: int = 4) -> list[ProductionLine]:
    lines = []
    for i in range(n_lines):
        members = (
            DemandProfile(f"SKU-{i}-STABLE", 3.0, 0.3, 5.0),
            DemandProfile(f"SKU-{i}-MID", 2.5, 0.9, 5.0),
            DemandProfile(f"SKU-{i}-SPIKY", 2.0, 1.8, 7.0),
        )
        lines.append(ProductionLine(f"LINE-{i}", 8.2, 2.0, members))
    return lines


def run_full_scale():
    print("Initializing benchmark (default trial count and horizon)...")
    config = SimulationConfig.load().with_overrides(random_seed=42)
    sim = Orchestrator(config)
    lines = build_benchmark_lines()

    start_time = time.time()
    result = sim.run(lines)
    duration = time.time() - start_time

    trials = config.trial_count * len(lines)
    print(f"\n{trials} trials x {config.horizon_days} days in {duration:.2f} seconds.")
    for r in result.reports:
        print(
            f"  {r.line}: q{r.risk_quantile * 100:.0f}={r.quantile_queue:.2f}, "
            f"buffer={r.shared_line_buffer:.2f} days"
        )


if __name__ == "__main__":
    run_full_scale()
