"""
Present/future value aggregation of liquidity events around the retirement date.

Every calculation that needs the value of liquidity events goes through this
module: the capital requirement, both solvers and the year-by-year simulator.
They share one booking convention per year row at age `a`:

- one-time and annual events are booked at the start of the year;
- monthly events are twelve end-of-month payments, worth
  `value * ((1 + r)^12 - 1) / r` at the end of the year.

Only ages at or after the current age are ever counted.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from enum import Enum

import numpy as np

from .events import (
    LiquidityEvent,
    Recurrence,
    active_events,
    effective_start_age,
    event_ages,
    is_open_ended,
)
from .rates import (
    ZERO_RATE_EPSILON,
    annual_rate,
    annuity_fv_factor,
    annuity_pv_factor,
    finite_or_zero,
    is_zero_rate,
)


class Direction(str, Enum):
    """Which side of the retirement date is valued."""

    FUTURE_VALUE = "future_value"  # pre-retirement events compounded to retirement
    PRESENT_VALUE = "present_value"  # post-retirement events discounted to retirement


def annual_equivalent(
    event: LiquidityEvent, rate: float, epsilon: float = ZERO_RATE_EPSILON
) -> float:
    """
    Unsigned amount one year of the event is worth at its booking point.

    Monthly events are valued at the end of the year, everything else at the
    start.
    """
    if event.recurrence is Recurrence.MONTHLY:
        return event.value * annuity_fv_factor(rate, 12, epsilon)
    return event.value


def aggregate_events(
    events: Iterable[LiquidityEvent] | None,
    *,
    current_age: int,
    retirement_age: int,
    monthly_rate: float,
    direction: Direction,
    cap_age: int,
    perpetual: bool = False,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """
    Signed value at the retirement date of the active events on one side of it.

    Args:
        events: Liquidity events; disabled events are skipped
        current_age: Occurrences before this age are ignored
        retirement_age: Valuation date
        monthly_rate: Monthly effective rate used to compound or discount
        direction: FUTURE_VALUE for ages before retirement, PRESENT_VALUE for
            ages from retirement up to cap_age
        cap_age: Last age counted after retirement; open-ended recurring
            events stop here
        perpetual: Value open-ended recurring events as perpetuities
            (PRESENT_VALUE only)
        epsilon: Rates below this magnitude are treated as zero

    Returns:
        Sum of inflows minus outflows, valued at retirement_age. Non-finite
        intermediate results are mapped to 0.0.
    """
    total = 0.0
    for event in active_events(events):
        if direction is Direction.FUTURE_VALUE:
            value = _future_value(
                event, current_age, retirement_age, monthly_rate, epsilon
            )
        else:
            value = _present_value(
                event,
                current_age,
                retirement_age,
                monthly_rate,
                cap_age,
                perpetual,
                epsilon,
            )
        total += event.sign * finite_or_zero(value)
    return finite_or_zero(total)


def future_value_at_retirement(
    events: Iterable[LiquidityEvent] | None,
    *,
    current_age: int,
    retirement_age: int,
    monthly_rate: float,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """Value at retirement of the events that occur before it."""
    return aggregate_events(
        events,
        current_age=current_age,
        retirement_age=retirement_age,
        monthly_rate=monthly_rate,
        direction=Direction.FUTURE_VALUE,
        cap_age=retirement_age - 1,
        epsilon=epsilon,
    )


def present_value_at_retirement(
    events: Iterable[LiquidityEvent] | None,
    *,
    current_age: int,
    retirement_age: int,
    monthly_rate: float,
    cap_age: int,
    perpetual: bool = False,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """Value at retirement of the events from retirement up to cap_age."""
    return aggregate_events(
        events,
        current_age=current_age,
        retirement_age=retirement_age,
        monthly_rate=monthly_rate,
        direction=Direction.PRESENT_VALUE,
        cap_age=cap_age,
        perpetual=perpetual,
        epsilon=epsilon,
    )


def _future_value(
    event: LiquidityEvent,
    current_age: int,
    retirement_age: int,
    rate: float,
    epsilon: float,
) -> float:
    ages = event_ages(
        event,
        first_age=current_age,
        last_age=retirement_age - 1,
        fallback_age=current_age,
    )
    if not ages:
        return 0.0
    years = retirement_age - np.asarray(ages, dtype=float)
    if event.recurrence is Recurrence.MONTHLY:
        # year-end value, compounded over the remaining full years
        years = years - 1.0
    factors = (1.0 + rate) ** (12.0 * years)
    return annual_equivalent(event, rate, epsilon) * float(np.sum(factors))


def _present_value(
    event: LiquidityEvent,
    current_age: int,
    retirement_age: int,
    rate: float,
    cap_age: int,
    perpetual: bool,
    epsilon: float,
) -> float:
    first_age = max(retirement_age, current_age)

    if perpetual and is_open_ended(event, cap_age) and not is_zero_rate(rate, epsilon):
        start = max(effective_start_age(event, current_age), first_age)
        discount = (1.0 + rate) ** (-12.0 * (start - retirement_age))
        if event.recurrence is Recurrence.MONTHLY:
            return event.value / rate * discount
        yearly = annual_rate(rate)
        # start-of-year payments forever
        return event.value * (1.0 + yearly) / yearly * discount

    ages = event_ages(
        event, first_age=first_age, last_age=cap_age, fallback_age=current_age
    )
    if not ages:
        return 0.0

    if event.recurrence is Recurrence.MONTHLY:
        months = 12 * len(ages)
        discount = (1.0 + rate) ** (-12.0 * (ages[0] - retirement_age))
        return event.value * annuity_pv_factor(rate, months, epsilon) * discount

    years = np.asarray(ages, dtype=float) - retirement_age
    factors = (1.0 + rate) ** (-12.0 * years)
    return event.value * float(np.sum(factors))


def event_schedule(
    events: Iterable[LiquidityEvent] | None,
    *,
    current_age: int,
    cap_age: int,
) -> dict[int, tuple[float, float]]:
    """
    Per-age booking of the active events for the simulator.

    Returns:
        Mapping age -> (lump, monthly) where lump is the signed start-of-year
        amount of one-time and annual events, and monthly is the signed
        monthly amount of monthly events. The simulator turns the monthly
        amount into its year-end equivalent with the rate of the year's phase.
    """
    lumps: dict[int, float] = defaultdict(float)
    monthly: dict[int, float] = defaultdict(float)
    for event in active_events(events):
        for age in event_ages(
            event, first_age=current_age, last_age=cap_age, fallback_age=current_age
        ):
            if event.recurrence is Recurrence.MONTHLY:
                monthly[age] += event.signed_value
            else:
                lumps[age] += event.signed_value
    return {
        age: (lumps.get(age, 0.0), monthly.get(age, 0.0))
        for age in sorted(set(lumps) | set(monthly))
    }


def events_for_age(
    events: Iterable[LiquidityEvent] | None,
    age: int,
    *,
    monthly_rate: float,
    current_age: int,
    cap_age: int,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """Signed net event amount booked in the year row at `age`."""
    schedule = event_schedule(events, current_age=current_age, cap_age=cap_age)
    lump, monthly = schedule.get(age, (0.0, 0.0))
    return lump + monthly * annuity_fv_factor(monthly_rate, 12, epsilon)
