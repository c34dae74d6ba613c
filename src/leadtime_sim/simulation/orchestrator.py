import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from leadtime_sim.agents.allocation import BufferAllocator
from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.errors import ValidationError
from leadtime_sim.network.core import BufferMethod, ProductionLine
from leadtime_sim.simulation.engine import (
    LineSimulator,
    summarize_trials,
    trial_maxima,
)
from leadtime_sim.simulation.large_order import LargeOrderAnalyzer
from leadtime_sim.simulation.monitor import CapacityHealthAnalyzer
from leadtime_sim.simulation.quantile import sample_quantile
from leadtime_sim.simulation.report import LineFailure, LineRiskReport, RunResult
from leadtime_sim.simulation.volatility import VolatilitySampler

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Runs the risk engine for a set of production lines.

    Each line is validated once, simulated, reduced to a quantile backlog
    and turned into an immutable LineRiskReport. Lines are independent: an
    invalid line becomes a LineFailure and the rest carry on.
    """

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self.config = config or SimulationConfig.load()
        self.config.validate()

        self.simulator = LineSimulator(self.config)
        self.allocator = BufferAllocator()
        self.health = CapacityHealthAnalyzer(self.config)
        self.large_orders = LargeOrderAnalyzer(self.config)
        self.volatility = VolatilitySampler(self.config, self.simulator)

    def analyze_line(
        self, line: ProductionLine, seed: np.random.SeedSequence | None = None
    ) -> LineRiskReport:
        """Simulate one line and derive all risk metrics from the trial maxima."""
        results = self.simulator.run_trials(line, seed=seed)
        summary = summarize_trials(results)

        quantile_queue = sample_quantile(
            trial_maxima(results), self.config.risk_quantile
        )
        shared_line_buffer = quantile_queue / line.capacity

        product_buffer = self.allocator.allocate(line, shared_line_buffer)
        weighted_buffer = self.allocator.allocate(
            line, shared_line_buffer, BufferMethod.VARIANCE_WEIGHTED
        )
        health = self.health.analyze(line)
        quotes = self.large_orders.quote(line, weighted_buffer)

        if health.overloaded:
            logger.warning(
                "Line %s overloaded: mean demand %.2f > capacity %.2f "
                "(recommended %.2f)",
                line.name,
                health.total_mean_demand,
                line.capacity,
                health.recommended_capacity,
            )

        return LineRiskReport(
            line=line.name,
            capacity=line.capacity,
            start_backlog=line.start_backlog,
            buffer_method=line.buffer_method.value,
            trial_count=len(results),
            horizon_days=self.config.horizon_days,
            risk_quantile=self.config.risk_quantile,
            quantile_queue=quantile_queue,
            mean_max_queue=summary.mean,
            std_max_queue=summary.std_dev,
            shared_line_buffer=shared_line_buffer,
            per_product_buffer=product_buffer,
            weighted_buffer=weighted_buffer,
            quoted_lead_time=self.allocator.quoted_lead_times(line, product_buffer),
            total_mean_demand=health.total_mean_demand,
            system_buffer=health.system_buffer,
            health=health.status,
            overloaded=health.overloaded,
            recommended_capacity=health.recommended_capacity,
            max_safe_order_qty=health.max_safe_order_qty,
            large_order_qty={p: q.quantity for p, q in quotes.items()},
            large_order_lead_time={p: q.lead_time for p, q in quotes.items()},
        )

    def _split_valid(
        self, lines: Iterable[ProductionLine]
    ) -> tuple[list[ProductionLine], list[LineFailure]]:
        valid: list[ProductionLine] = []
        failures: list[LineFailure] = []
        for line in lines:
            try:
                line.validate()
            except ValidationError as e:
                logger.warning("Excluding line %r: %s", line.name, e)
                failures.append(LineFailure.from_error(e))
            else:
                valid.append(line)
        return valid, failures

    def run(
        self,
        lines: Sequence[ProductionLine],
        failures: Iterable[LineFailure] = (),
        sample_volatility: bool = True,
    ) -> RunResult:
        """
        Analyse every line and return reports in input order.

        Failures already detected upstream (e.g. by LineBuilder) are passed
        through ahead of those found here.
        """
        valid, new_failures = self._split_valid(lines)
        all_failures = tuple(failures) + tuple(new_failures)

        # Seeds are spawned up front so results do not depend on worker count
        seeds = [self.simulator.next_seed() for _ in valid]

        logger.info(
            "Simulating %d line(s): %d trials x %d days, q=%.2f",
            len(valid),
            self.config.trial_count,
            self.config.horizon_days,
            self.config.risk_quantile,
        )

        if self.config.max_workers > 1 and len(valid) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                reports = list(pool.map(self.analyze_line, valid, seeds))
        else:
            reports = [
                self.analyze_line(line, seed) for line, seed in zip(valid, seeds)
            ]

        for report in reports:
            logger.info(
                "Line %s: q%.0f queue=%.2f, line buffer=%.2f days, health=%s",
                report.line,
                report.risk_quantile * 100,
                report.quantile_queue,
                report.shared_line_buffer,
                report.health.value,
            )

        volatility = []
        if sample_volatility:
            for line in valid:
                sample = self.volatility.sample_line(line, self.simulator.next_seed())
                if sample is not None:
                    volatility.append(sample)

        return RunResult(
            reports=tuple(reports),
            failures=all_failures,
            volatility=tuple(volatility),
        )
