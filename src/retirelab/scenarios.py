"""
Retirement-age scenario tables.

Recomputes the projection for a range of candidate retirement ages so a report
can show how the required contribution and capital move with the retirement
date.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from .core.events import LiquidityEvent
from .core.params import SimulationParameters
from .core.projection import compute_retirement_projection
from .core.settings import SolverSettings

SCENARIO_COLUMNS = [
    "retirement_age",
    "monthly_contribution",
    "required_capital",
    "depletion_age",
]


def retirement_age_scenarios(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None = None,
    ages: Iterable[int] | None = None,
    *,
    settings: SolverSettings | None = None,
) -> pd.DataFrame:
    """
    Solve the contribution and required capital for each candidate retirement age.

    The contribution is always solved (any override on `params` is dropped),
    so each row answers "what would I need to save to retire at this age".

    Args:
        params: Baseline parameters; only the retirement age changes per row
        events: Liquidity events shared by every scenario
        ages: Candidate retirement ages (default: the baseline age and the
            next four five-year steps)
        settings: Solver settings

    Returns:
        DataFrame with one row per age and columns retirement_age,
        monthly_contribution, required_capital, depletion_age (nullable Int64)

    Example:
        ```python
        table = retirement_age_scenarios(params, events, ages=range(55, 71, 5))
        table.set_index("retirement_age")["monthly_contribution"]
        ```
    """
    snapshot = tuple(events or ())
    if ages is None:
        ages = range(params.retirement_age, params.retirement_age + 25, 5)

    records = []
    for age in ages:
        result = compute_retirement_projection(
            params.replace(retirement_age=int(age), monthly_contribution=None),
            snapshot,
            settings=settings,
        )
        records.append(
            {
                "retirement_age": result.retirement_age,
                "monthly_contribution": result.monthly_contribution,
                "required_capital": result.required_capital,
                "depletion_age": result.depletion_age,
            }
        )

    df = pd.DataFrame(records, columns=SCENARIO_COLUMNS)
    df["depletion_age"] = df["depletion_age"].astype("Int64")
    return df
