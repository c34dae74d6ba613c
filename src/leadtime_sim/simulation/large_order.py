from dataclasses import dataclass

from leadtime_sim.config.settings import SimulationConfig
from leadtime_sim.network.core import ProductionLine


@dataclass(frozen=True)
class LargeOrderQuote:
    """Lead time quoted for an order at the statistical spike threshold."""

    product: str
    quantity: float
    excess_qty: float
    extra_days: float
    lead_time: float


class LargeOrderAnalyzer:
    """
    Quotes lead times for unusually large orders.

    The large-order threshold is mean + k * stdDev (k = 2 by default). The
    excess over the mean is worked off at line capacity, adding
    excess / capacity days on top of the product's material lead time and
    its variance-weighted buffer.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.sigma_multiplier = config.large_order_sigma

    def quote(
        self, line: ProductionLine, weighted_buffers: dict[str, float]
    ) -> dict[str, LargeOrderQuote]:
        quotes: dict[str, LargeOrderQuote] = {}
        for m in line.members:
            quantity = m.mean_demand + self.sigma_multiplier * m.std_dev
            excess = quantity - m.mean_demand
            extra_days = excess / line.capacity if line.capacity > 0 else 0.0
            quotes[m.name] = LargeOrderQuote(
                product=m.name,
                quantity=quantity,
                excess_qty=excess,
                extra_days=extra_days,
                lead_time=m.material_lead_time + weighted_buffers[m.name] + extra_days,
            )
        return quotes
