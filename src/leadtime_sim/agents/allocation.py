from leadtime_sim.network.core import BufferMethod, ProductionLine


class BufferAllocator:
    """
    Splits a line-level time buffer across the products sharing the line.

    Uniform treatment gives every product the full line buffer, so stable
    products pay for the volatility of their neighbours. Variance weighting
    charges each product its share of the summed standard deviations while
    keeping the total equal to the line buffer.
    """

    def uniform(
        self, line: ProductionLine, shared_line_buffer: float
    ) -> dict[str, float]:
        return {m.name: shared_line_buffer for m in line.members}

    def variance_weighted(
        self, line: ProductionLine, shared_line_buffer: float
    ) -> dict[str, float]:
        if not line.members:
            return {}

        total_std = line.total_std_dev
        if total_std <= 0:
            # All members deterministic: even split
            share = shared_line_buffer / len(line.members)
            return {m.name: share for m in line.members}

        return {
            m.name: (m.std_dev / total_std) * shared_line_buffer
            for m in line.members
        }

    def allocate(
        self,
        line: ProductionLine,
        shared_line_buffer: float,
        method: BufferMethod | None = None,
    ) -> dict[str, float]:
        """Per-product buffer (days) using the line's method unless overridden."""
        method = method or line.buffer_method
        if method == BufferMethod.UNIFORM:
            return self.uniform(line, shared_line_buffer)
        return self.variance_weighted(line, shared_line_buffer)

    @staticmethod
    def quoted_lead_times(
        line: ProductionLine, product_buffers: dict[str, float]
    ) -> dict[str, float]:
        """Material lead time floor plus the allocated buffer."""
        return {
            m.name: m.material_lead_time + product_buffers[m.name]
            for m in line.members
        }
