"""
Numerical settings for the iterative solvers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from .errors import ConfigError


@dataclass(frozen=True, slots=True)
class SolverSettings:
    """
    Search budget and tolerances shared by the contribution and income solvers.

    Attributes:
        growth_factor: Multiplier applied to the upper bound while bracketing a root
        max_growth_iterations: Bracketing attempts before giving up
        max_bisection_iterations: Halvings of the bracketing interval
        tolerance: Objective magnitude accepted as a root
        initial_high: First upper bound tried (currency per month)
        zero_tolerance: Closing capital magnitude treated as exactly zero
        rate_epsilon: Monthly rates below this magnitude are treated as zero
    """

    growth_factor: float = 1.8
    max_growth_iterations: int = 28
    max_bisection_iterations: int = 32
    tolerance: float = 1e-6
    initial_high: float = 1_000.0
    zero_tolerance: float = 1e-6
    rate_epsilon: float = 1e-10

    def __post_init__(self):
        if self.growth_factor <= 1.0:
            raise ConfigError("growth_factor must be > 1")
        if self.initial_high <= 0.0:
            raise ConfigError("initial_high must be > 0")
        if self.max_growth_iterations < 0 or self.max_bisection_iterations < 0:
            raise ConfigError("iteration budgets must be >= 0")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SolverSettings:
        """Build settings from a mapping, rejecting unknown keys."""
        if not data:
            return DEFAULT_SETTINGS
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown solver settings: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS = SolverSettings()
