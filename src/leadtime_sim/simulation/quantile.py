from collections.abc import Iterable

import numpy as np


def sample_quantile(values: Iterable[float], p: float) -> float:
    """
    Nearest-rank quantile of a sample.

    Sorts ascending and returns the element at floor(p * (n - 1)), clamped
    to the last index. No interpolation: the result is always one of the
    input values, and the input order does not matter.

    Args:
        values: Trial outcomes (any order).
        p: Quantile in [0, 1], e.g. 0.95.
    """
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Quantile must lie in [0, 1], got {p}")

    if not isinstance(values, np.ndarray):
        values = list(values)
    ordered = np.sort(np.asarray(values, dtype=np.float64))
    n = ordered.size
    if n == 0:
        raise ValueError("Cannot take a quantile of an empty sample")

    index = min(int(np.floor(p * (n - 1))), n - 1)
    return float(ordered[index])
