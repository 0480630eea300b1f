"""
Retirement projection engine entry point.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from .capital import required_capital
from .events import LiquidityEvent
from .params import SimulationParameters
from .rates import annuity_fv_factor, finite_or_zero, monthly_rate
from .results import Phase, ProjectionResult
from .settings import DEFAULT_SETTINGS, SolverSettings
from .simulator import SimulationRun, simulate_cash_flow
from .solvers import required_contribution, sustainable_income

logger = logging.getLogger(__name__)


def compute_retirement_projection(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None = None,
    *,
    settings: SolverSettings | None = None,
) -> ProjectionResult:
    """
    Compute the full retirement projection for one parameter snapshot.

    The engine is a pure function: it keeps no state between calls and
    never mutates its inputs, so the caller decides when to recompute.

    Steps:
        1. Capital required at retirement (net of post-retirement events).
        2. Contribution: the parameters' override, or the solved contribution.
        3. Final zero-out policy, resolved once: applies only in finite mode
           when force_final_zero_at_end is set and a contribution is needed.
        4. Withdrawal: the desired one in perpetuity mode or when locked,
           otherwise the sustainable income for the resolved contribution.
        5. Year-by-year simulation with depletion clamping.

    Args:
        params: Simulation parameters
        events: Liquidity events; the sequence is copied on entry
        settings: Solver search budget and tolerances

    Returns:
        ProjectionResult with every numeric field finite

    Example:
        ```python
        from retirelab import SimulationParameters, compute_retirement_projection

        params = SimulationParameters(
            current_age=65, retirement_age=65, current_capital=2_000_000,
            monthly_contribution=0, desired_monthly_withdrawal=10_000,
        )
        result = compute_retirement_projection(params)
        result.depletion_age  # capital runs out in the late 80s
        ```
    """
    settings = settings or DEFAULT_SETTINGS
    snapshot = tuple(events or ())

    capital_needed = required_capital(params, snapshot, epsilon=settings.rate_epsilon)
    if not math.isfinite(capital_needed):
        logger.warning(
            "Perpetuity of %.2f per month cannot be funded at a zero real return; "
            "reporting required capital as 0",
            params.desired_monthly_withdrawal,
        )

    solved = required_contribution(
        params.replace(monthly_contribution=None), snapshot, settings=settings
    )
    if params.monthly_contribution is None:
        contribution = solved
    else:
        contribution = float(params.monthly_contribution)

    force_final_zero = (
        params.force_final_zero_at_end and not params.is_perpetuity and solved > 0.0
    )

    if params.is_perpetuity or params.lock_withdrawal_to_target:
        withdrawal = params.desired_monthly_withdrawal
    else:
        withdrawal = sustainable_income(
            params, snapshot, contribution=contribution, settings=settings
        )

    run = simulate_cash_flow(
        params,
        snapshot,
        contribution=contribution,
        withdrawal=withdrawal,
        force_final_zero=force_final_zero,
        settings=settings,
    )

    income = withdrawal
    if params.is_perpetuity and not params.lock_withdrawal_to_target:
        income = _yield_income(run, params, settings)

    logger.debug(
        "projection: required=%.2f contribution=%.2f income=%.2f depletion=%s",
        capital_needed,
        contribution,
        income,
        run.depletion_age,
    )

    return ProjectionResult(
        required_capital=finite_or_zero(capital_needed),
        monthly_contribution=finite_or_zero(contribution),
        monthly_income=finite_or_zero(income),
        capital_trajectory=run.trajectory,
        annual_cash_flow_table=run.rows,
        depletion_age=run.depletion_age,
        retirement_age=params.effective_retirement_age,
        horizon_end_age=params.horizon_end_age,
    )


def _yield_income(
    run: SimulationRun, params: SimulationParameters, settings: SolverSettings
) -> float:
    """Monthly equivalent of the first consumption year's withdrawn yield."""
    s12 = annuity_fv_factor(
        monthly_rate(params.real_return_consumption), 12, settings.rate_epsilon
    )
    for row in run.rows:
        if row.phase is Phase.CONSUMPTION:
            return row.withdrawal / s12
    return 0.0
