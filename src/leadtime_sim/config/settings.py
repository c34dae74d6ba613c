"""Typed, immutable view over the simulation configuration dict."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from leadtime_sim.config.loader import load_simulation_config
from leadtime_sim.errors import ConfigurationError


@dataclass(frozen=True)
class SimulationConfig:
    """
    Tunable parameters for one simulation run.

    Passed explicitly into every engine so that runs with different
    parameters can coexist in one process.
    """

    trial_count: int = 2000
    horizon_days: int = 365
    risk_quantile: float = 0.95
    random_seed: int | None = None
    max_workers: int = 1

    volatility_cv_threshold: float = 0.30
    volatility_trial_count: int = 100

    fragile_threshold: float = 2.0
    overload_margin_factor: float = 1.10

    large_order_sigma: float = 2.0

    uniform_epsilon: float = 1e-5

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> SimulationConfig:
        sim_params = config.get("simulation_parameters", {})
        mc_config = sim_params.get("monte_carlo", {})
        vol_config = sim_params.get("volatility", {})
        cap_config = sim_params.get("capacity", {})
        order_config = sim_params.get("large_order", {})
        sampling_config = sim_params.get("sampling", {})

        seed = mc_config.get("random_seed")

        return cls(
            trial_count=int(mc_config.get("trial_count", 2000)),
            horizon_days=int(mc_config.get("horizon_days", 365)),
            risk_quantile=float(mc_config.get("risk_quantile", 0.95)),
            random_seed=None if seed is None else int(seed),
            max_workers=int(mc_config.get("max_workers", 1)),
            volatility_cv_threshold=float(vol_config.get("cv_threshold", 0.30)),
            volatility_trial_count=int(vol_config.get("trial_count", 100)),
            fragile_threshold=float(cap_config.get("fragile_threshold", 2.0)),
            overload_margin_factor=float(
                cap_config.get("overload_margin_factor", 1.10)
            ),
            large_order_sigma=float(order_config.get("sigma_multiplier", 2.0)),
            uniform_epsilon=float(sampling_config.get("uniform_epsilon", 1e-5)),
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> SimulationConfig:
        """Read the JSON config (bundled default if no path) and validate it."""
        config = cls.from_dict(load_simulation_config(config_path))
        config.validate()
        return config

    def with_overrides(self, **overrides: Any) -> SimulationConfig:
        """Return a copy with the given non-None fields replaced."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def validate(self) -> None:
        if self.trial_count <= 0:
            raise ConfigurationError(
                f"trial_count must be positive, got {self.trial_count}"
            )
        if self.horizon_days <= 0:
            raise ConfigurationError(
                f"horizon_days must be positive, got {self.horizon_days}"
            )
        if self.volatility_trial_count <= 0:
            raise ConfigurationError(
                "volatility trial_count must be positive, "
                f"got {self.volatility_trial_count}"
            )
        if self.max_workers <= 0:
            raise ConfigurationError(
                f"max_workers must be positive, got {self.max_workers}"
            )
        if not 0.0 <= self.risk_quantile <= 1.0:
            raise ConfigurationError(
                f"risk_quantile must lie in [0, 1], got {self.risk_quantile}"
            )
        if self.overload_margin_factor <= 0:
            raise ConfigurationError(
                "overload_margin_factor must be positive, "
                f"got {self.overload_margin_factor}"
            )
        for name in (
            "volatility_cv_threshold",
            "fragile_threshold",
            "large_order_sigma",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    f"{name} must not be negative, got {value}"
                )
        if not 0.0 < self.uniform_epsilon < 0.5:
            raise ConfigurationError(
                f"uniform_epsilon must lie in (0, 0.5), got {self.uniform_epsilon}"
            )
