"""
Indicators derived from a retirement projection.

These helpers read a :class:`~retirelab.core.results.ProjectionResult` (or an
event list) and never rerun the engine.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .core.events import LiquidityEvent, is_active_at_age
from .core.results import ProjectionResult


def funded_ratio(result: ProjectionResult) -> float:
    """
    Capital projected at retirement over the capital required.

    A ratio of 1.0 or more means the plan is funded. When nothing is required
    (post-retirement inflows cover the withdrawals) the ratio is infinite.

    Args:
        result: Projection result

    Returns:
        Funded ratio as a float
    """
    if result.required_capital <= 0.0:
        return float(np.inf)
    return result.capital_at_retirement() / result.required_capital


def capital_at_age(result: ProjectionResult, age: int) -> float:
    """
    Capital on the trajectory at `age`.

    Raises:
        KeyError: If `age` is outside the projected trajectory
    """
    series = result.trajectory_series()
    if age not in series.index:
        raise KeyError(
            f"age {age} is outside the trajectory "
            f"[{series.index.min()}, {series.index.max()}]"
        )
    return float(series.loc[age])


def depletes_before(result: ProjectionResult, age: int) -> bool:
    """Whether capital runs out strictly before `age` (e.g. the life expectancy)."""
    return result.depletion_age is not None and result.depletion_age < age


def years_of_coverage(result: ProjectionResult) -> int:
    """Consumption years funded before depletion or the end of the horizon."""
    end = result.depletion_age
    if end is None:
        end = result.horizon_end_age
    return max(end - result.retirement_age, 0)


def event_markers(
    events: Iterable[LiquidityEvent],
    ages: Iterable[int],
    current_age: int,
) -> dict[int, list[str]]:
    """
    Names of the enabled events occurring at each age, for chart annotation.

    Ages without events are omitted. Open-ended recurring events are marked
    at their start age only.
    """
    snapshot = tuple(events)
    markers: dict[int, list[str]] = {}
    for age in ages:
        names = [e.name for e in snapshot if is_active_at_age(e, age, current_age)]
        if names:
            markers[age] = names
    return markers
