"""
Result containers for the retirement projection engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from .rates import finite_or_zero

CASH_FLOW_COLUMNS = [
    "age",
    "phase",
    "opening_capital",
    "events_net",
    "contribution",
    "investment_return",
    "withdrawal",
    "closing_capital",
]


class Phase(str, Enum):
    ACCUMULATION = "Accumulation"
    CONSUMPTION = "Consumption"


@dataclass(frozen=True, slots=True)
class TrajectoryPoint:
    """Capital held at a given age, floored at zero."""

    age: int
    capital: float


@dataclass(frozen=True, slots=True)
class CashFlowRow:
    """
    One simulated year.

    The row satisfies
    closing = opening + events_net + contribution + investment_return - withdrawal,
    except in years where depletion clamps capital to zero.
    """

    age: int
    phase: Phase
    opening_capital: float
    events_net: float
    contribution: float
    investment_return: float
    withdrawal: float
    closing_capital: float

    @classmethod
    def build(
        cls,
        age: int,
        phase: Phase,
        opening_capital: float,
        events_net: float,
        contribution: float,
        investment_return: float,
        withdrawal: float,
        closing_capital: float,
    ) -> CashFlowRow:
        """Create a row with every amount sanitized for display."""
        return cls(
            age=age,
            phase=phase,
            opening_capital=finite_or_zero(opening_capital),
            events_net=finite_or_zero(events_net),
            contribution=finite_or_zero(contribution),
            investment_return=finite_or_zero(investment_return),
            withdrawal=finite_or_zero(withdrawal),
            closing_capital=finite_or_zero(closing_capital),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


@dataclass(frozen=True)
class ProjectionResult:
    """
    Output of :func:`retirelab.core.projection.compute_retirement_projection`.

    Attributes:
        required_capital: Capital needed at retirement
        monthly_contribution: Contribution actually used (solved or overridden)
        monthly_income: Withdrawal actually used
        capital_trajectory: (age, capital) points from the current age to the horizon
        annual_cash_flow_table: One row per simulated year
        depletion_age: First age at which capital reaches zero, None if it survives
        retirement_age: Age at which consumption starts
        horizon_end_age: Age at which the consumption horizon ends
    """

    required_capital: float
    monthly_contribution: float
    monthly_income: float
    capital_trajectory: tuple[TrajectoryPoint, ...]
    annual_cash_flow_table: tuple[CashFlowRow, ...]
    depletion_age: int | None
    retirement_age: int
    horizon_end_age: int

    def to_frame(self) -> pd.DataFrame:
        """Annual cash-flow table as a DataFrame indexed by position."""
        if not self.annual_cash_flow_table:
            return pd.DataFrame(columns=CASH_FLOW_COLUMNS)
        return pd.DataFrame(
            [row.to_dict() for row in self.annual_cash_flow_table],
            columns=CASH_FLOW_COLUMNS,
        )

    def trajectory_series(self) -> pd.Series:
        """Capital by age."""
        return pd.Series(
            [p.capital for p in self.capital_trajectory],
            index=pd.Index([p.age for p in self.capital_trajectory], name="age"),
            name="capital",
            dtype=float,
        )

    def capital_array(self) -> np.ndarray:
        return np.array([p.capital for p in self.capital_trajectory], dtype=float)

    def capital_at_retirement(self) -> float:
        """Trajectory value at the retirement age (0.0 if outside the trajectory)."""
        for point in self.capital_trajectory:
            if point.age == self.retirement_age:
                return point.capital
        return 0.0

    def summary(self) -> dict[str, Any]:
        """Headline numbers, without the per-year detail."""
        final = self.capital_trajectory[-1].capital if self.capital_trajectory else 0.0
        return {
            "required_capital": self.required_capital,
            "monthly_contribution": self.monthly_contribution,
            "monthly_income": self.monthly_income,
            "capital_at_retirement": self.capital_at_retirement(),
            "final_capital": final,
            "depletion_age": self.depletion_age,
            "retirement_age": self.retirement_age,
            "horizon_end_age": self.horizon_end_age,
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        data = self.summary()
        data["capital_trajectory"] = [
            {"age": p.age, "capital": p.capital} for p in self.capital_trajectory
        ]
        data["annual_cash_flow_table"] = [
            row.to_dict() for row in self.annual_cash_flow_table
        ]
        return data
