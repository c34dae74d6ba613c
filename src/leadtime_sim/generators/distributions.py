"""Gaussian demand sampling by inverse-CDF transform."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.stats import norm

if TYPE_CHECKING:
    from numpy.random import Generator

DEFAULT_EPSILON = 1e-5


class NormalSampler:
    """
    Draws Gaussian demand values from uniform draws.

    u ~ U(0, 1) is clamped into [eps, 1 - eps] before applying the standard
    normal quantile function, so a draw can never land on +/- infinity.
    Results are NOT floored at zero; callers decide how to treat negative
    demand.

    Args:
        rng: NumPy random generator. Each independent trial should own one.
        epsilon: Clamp width at both tails of the uniform draw.
    """

    def __init__(
        self, rng: Generator | None = None, epsilon: float = DEFAULT_EPSILON
    ) -> None:
        if rng is None:
            rng = np.random.default_rng()
        self.rng = rng
        self.epsilon = epsilon

    def standard_normal(self, u: float | np.ndarray) -> float | np.ndarray:
        """z = Phi^-1(u) after clamping u. Deterministic for a given u."""
        clamped = np.clip(u, self.epsilon, 1.0 - self.epsilon)
        z = norm.ppf(clamped)
        if np.ndim(z) == 0:
            return float(z)
        return z

    def sample(self, mean: float, std_dev: float) -> float:
        """Single draw of mean + z * std_dev."""
        u = self.rng.uniform(0.0, 1.0)
        return mean + float(self.standard_normal(u)) * std_dev

    def sample_matrix(
        self, means: np.ndarray, std_devs: np.ndarray, n_days: int
    ) -> np.ndarray:
        """
        Vectorized draws for several profiles over several days.

        Returns:
            Array of shape [n_days, n_profiles].
        """
        means = np.asarray(means, dtype=np.float64)
        std_devs = np.asarray(std_devs, dtype=np.float64)
        u = self.rng.uniform(0.0, 1.0, size=(n_days, means.shape[0]))
        return means + self.standard_normal(u) * std_devs
