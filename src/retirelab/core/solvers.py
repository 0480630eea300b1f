"""
Solvers for the required contribution and the sustainable income.

Both unknowns have closed forms only without liquidity events and depletion
constraints. The perpetuity variants keep the closed form; the finite-horizon
variants search with bisection on the year-by-year simulator, growing the
upper bound geometrically until it brackets the root.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .aggregation import future_value_at_retirement, present_value_at_retirement
from .capital import required_capital
from .events import LiquidityEvent
from .params import SimulationParameters
from .rates import annuity_fv_factor, finite_or_zero, monthly_rate, pmt
from .settings import DEFAULT_SETTINGS, SolverSettings
from .simulator import simulate_cash_flow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BisectionResult:
    """
    Outcome of :func:`bisect_root`.

    Attributes:
        value: Midpoint returned as the root (or the last upper bound tried
            when no bracket was found)
        low: Last lower bound, where the objective was negative
        high: Last upper bound, where the objective was positive
        growth_steps: Upper-bound expansions performed
        iterations: Bisection halvings performed
        bracketed: Whether a sign change was found
    """

    value: float
    low: float
    high: float
    growth_steps: int
    iterations: int
    bracketed: bool


def bisect_root(
    objective: Callable[[float], float],
    *,
    settings: SolverSettings | None = None,
    label: str = "objective",
) -> BisectionResult:
    """
    Find x >= 0 where a non-decreasing objective crosses zero.

    1. objective(0) >= 0: the root is 0.
    2. Grow `high` from settings.initial_high by settings.growth_factor until
       objective(high) > 0, at most settings.max_growth_iterations times. If
       no bracket is found, the largest `high` tried is returned.
    3. Bisect [0, high] at most settings.max_bisection_iterations times,
       stopping early when |objective(mid)| <= settings.tolerance.

    Args:
        objective: Function to search; only its sign matters for bracketing
        settings: Search budget and tolerances
        label: Name used in log messages

    Returns:
        BisectionResult
    """
    settings = settings or DEFAULT_SETTINGS

    if objective(0.0) >= 0.0:
        return BisectionResult(0.0, 0.0, 0.0, 0, 0, True)

    high = settings.initial_high
    f_high = objective(high)
    steps = 0
    while f_high <= 0.0 and steps < settings.max_growth_iterations:
        high *= settings.growth_factor
        f_high = objective(high)
        steps += 1

    if f_high <= 0.0:
        logger.warning(
            "%s: no sign change found up to %.6g after %d growth steps; "
            "returning the largest bound tried",
            label,
            high,
            steps,
        )
        return BisectionResult(high, high, high, steps, 0, False)

    low = 0.0
    mid = (low + high) / 2.0
    iterations = 0
    for iterations in range(1, settings.max_bisection_iterations + 1):
        mid = (low + high) / 2.0
        f_mid = objective(mid)
        if abs(f_mid) <= settings.tolerance:
            break
        if f_mid > 0.0:
            high = mid
        else:
            low = mid
    else:
        mid = (low + high) / 2.0

    logger.debug(
        "%s: root %.10g in [%.10g, %.10g] after %d growth steps, %d halvings",
        label,
        mid,
        low,
        high,
        steps,
        iterations,
    )
    return BisectionResult(mid, low, high, steps, iterations, True)


def required_contribution(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None = None,
    *,
    settings: SolverSettings | None = None,
) -> float:
    """
    Monthly contribution needed during accumulation to fund the desired withdrawal.

    **Perpetuity**: closed form. The shortfall between the perpetuity capital
    and the future value of today's capital plus pre-retirement events is
    closed with the annuity payment (PMT) over the accumulation months.

    **Finite horizon**: bisection on the raw signed capital at the horizon
    end, simulated with the desired withdrawal and no depletion clamping or
    final-year adjustment.

    Returns:
        The contribution, 0.0 when none is needed, when there is no
        accumulation phase, or when the goal is unreachable (non-finite).
    """
    settings = settings or DEFAULT_SETTINGS
    months = params.accumulation_months
    if months <= 0:
        return 0.0

    if params.is_perpetuity:
        return _perpetuity_contribution(params, events, settings)

    def objective(contribution: float) -> float:
        run = simulate_cash_flow(
            params,
            events,
            contribution=contribution,
            withdrawal=params.desired_monthly_withdrawal,
            force_final_zero=False,
            clamp=False,
            settings=settings,
        )
        return run.terminal_capital

    result = bisect_root(objective, settings=settings, label="required_contribution")
    return max(finite_or_zero(result.value), 0.0)


def _perpetuity_contribution(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None,
    settings: SolverSettings,
) -> float:
    target = required_capital(params, events, epsilon=settings.rate_epsilon)
    if not math.isfinite(target):
        logger.warning(
            "required_contribution: perpetuity capital is unbounded at a zero "
            "consumption rate; goal unreachable"
        )
        return 0.0

    rate = monthly_rate(params.real_return_accumulation)
    months = params.accumulation_months
    future_capital = params.current_capital * (1.0 + rate) ** months
    future_events = future_value_at_retirement(
        events,
        current_age=params.current_age,
        retirement_age=params.effective_retirement_age,
        monthly_rate=rate,
        epsilon=settings.rate_epsilon,
    )
    if future_capital + future_events >= target:
        return 0.0

    payment = pmt(
        rate,
        months,
        params.current_capital,
        -(target - future_events),
        epsilon=settings.rate_epsilon,
    )
    return max(finite_or_zero(payment), 0.0)


def sustainable_income(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None = None,
    *,
    contribution: float | None = None,
    target_age: int | None = None,
    settings: SolverSettings | None = None,
) -> float:
    """
    Largest monthly withdrawal the capital sustains until target_age.

    **Perpetuity**: the monthly yield of the capital available at retirement
    (today's capital, contributions and pre-retirement events compounded,
    plus the perpetual value of later events).

    **Finite horizon**: bisection on the depletion age of the clamped
    simulation ending at target_age. If the capital depletes even without
    withdrawals, the sustainable income is 0. Otherwise the result is the
    smallest income found to deplete, so simulating it depletes exactly at
    target_age.

    Args:
        params: Simulation parameters
        events: Liquidity events
        contribution: Monthly contribution held fixed (default: the
            parameters' contribution, or 0)
        target_age: Age at which capital should be exhausted (default: horizon end)
        settings: Search budget and tolerances

    Returns:
        Monthly income, never negative.
    """
    settings = settings or DEFAULT_SETTINGS
    if contribution is None:
        contribution = params.monthly_contribution or 0.0
    target = params.horizon_end_age if target_age is None else target_age
    retirement = params.effective_retirement_age
    if target <= retirement:
        return 0.0

    if params.is_perpetuity:
        return _perpetuity_income(params, events, contribution, target, settings)

    def objective(income: float) -> float:
        run = simulate_cash_flow(
            params,
            events,
            contribution=contribution,
            withdrawal=income,
            force_final_zero=False,
            end_age=target,
            settings=settings,
        )
        return 1.0 if run.depletion_age is not None else -1.0

    result = bisect_root(objective, settings=settings, label="sustainable_income")
    income = result.high if result.bracketed else result.value
    return max(finite_or_zero(income), 0.0)


def _perpetuity_income(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None,
    contribution: float,
    target: int,
    settings: SolverSettings,
) -> float:
    eps = settings.rate_epsilon
    acc_rate = monthly_rate(params.real_return_accumulation)
    con_rate = monthly_rate(params.real_return_consumption)
    months = params.accumulation_months
    retirement = params.effective_retirement_age

    capital = (
        params.current_capital * (1.0 + acc_rate) ** months
        + contribution * annuity_fv_factor(acc_rate, months, eps)
        + future_value_at_retirement(
            events,
            current_age=params.current_age,
            retirement_age=retirement,
            monthly_rate=acc_rate,
            epsilon=eps,
        )
        + present_value_at_retirement(
            events,
            current_age=params.current_age,
            retirement_age=retirement,
            monthly_rate=con_rate,
            cap_age=target - 1,
            perpetual=True,
            epsilon=eps,
        )
    )
    return max(finite_or_zero(capital * con_rate), 0.0)
