"""
Year-by-year cash-flow simulation of the accumulation and consumption phases.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .aggregation import event_schedule
from .events import LiquidityEvent
from .params import SimulationParameters
from .rates import annuity_fv_factor, finite_or_zero, monthly_rate
from .results import CashFlowRow, Phase, TrajectoryPoint
from .settings import DEFAULT_SETTINGS, SolverSettings


@dataclass(frozen=True)
class SimulationRun:
    """
    Raw output of one simulated trajectory.

    Attributes:
        rows: One cash-flow row per simulated year
        trajectory: Capital at the current age and at the end of every year
        depletion_age: First age at which capital reached zero, or None
        terminal_capital: Signed closing capital of the last year (before
            display flooring); equals the current capital when nothing is simulated
    """

    rows: tuple[CashFlowRow, ...]
    trajectory: tuple[TrajectoryPoint, ...]
    depletion_age: int | None
    terminal_capital: float


def simulate_cash_flow(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None,
    *,
    contribution: float,
    withdrawal: float,
    force_final_zero: bool = False,
    clamp: bool = True,
    end_age: int | None = None,
    settings: SolverSettings | None = None,
) -> SimulationRun:
    """
    Walk the ages from params.current_age to end_age.

    Each row at age `a` covers the year from `a` to `a + 1`. One-time and
    annual events are booked at the start of the year, monthly events,
    contributions and withdrawals are end-of-month streams valued at the end
    of the year with the phase's monthly rate.

    **Accumulation** (age < retirement): capital grows with events, returns
    and contributions. Capital may turn negative; it is not clamped.

    **Consumption, finite**: the year's withdrawal is the future value of
    twelve monthly withdrawals. When capital would go negative the
    withdrawal is cut to the available funds, the depletion age is recorded
    and every later year is frozen at zero.

    **Consumption, perpetuity**: with lock_withdrawal_to_target the desired
    withdrawal is taken and clamped to the available funds each year (later
    inflows may refill capital); otherwise only the year's investment return
    is withdrawn.

    Args:
        params: Simulation parameters
        events: Liquidity events (disabled ones are ignored)
        contribution: Monthly contribution during accumulation
        withdrawal: Monthly withdrawal during consumption
        force_final_zero: Withdraw everything that is left in the final year
            (finite consumption only)
        clamp: False disables depletion clamping and freezing, giving the
            raw signed capital the solvers search on
        end_age: Age at which the simulation stops (default: horizon end)
        settings: Tolerances; zero_tolerance decides when a final capital
            counts as exactly zero

    Returns:
        SimulationRun with rows, trajectory, depletion age and terminal capital
    """
    settings = settings or DEFAULT_SETTINGS
    eps = settings.rate_epsilon
    end = params.horizon_end_age if end_age is None else end_age
    retirement = params.effective_retirement_age
    perpetuity = params.is_perpetuity
    yield_only = perpetuity and not params.lock_withdrawal_to_target

    acc_rate = monthly_rate(params.real_return_accumulation)
    con_rate = monthly_rate(params.real_return_consumption)
    acc_growth, acc_s12 = (1.0 + acc_rate) ** 12, annuity_fv_factor(acc_rate, 12, eps)
    con_growth, con_s12 = (1.0 + con_rate) ** 12, annuity_fv_factor(con_rate, 12, eps)

    schedule = event_schedule(events, current_age=params.current_age, cap_age=end - 1)

    capital = float(params.current_capital)
    rows: list[CashFlowRow] = []
    trajectory = [TrajectoryPoint(params.current_age, _display(capital))]
    depletion_age: int | None = None
    exhausted = False

    for age in range(params.current_age, end):
        opening = capital
        lump, monthly = schedule.get(age, (0.0, 0.0))

        if age < retirement:
            base = opening + lump
            events_net = lump + monthly * acc_s12
            investment_return = (
                base * (acc_growth - 1.0) + contribution * (acc_s12 - 12.0)
            )
            closing = base * acc_growth + monthly * acc_s12 + contribution * acc_s12
            rows.append(
                CashFlowRow.build(
                    age,
                    Phase.ACCUMULATION,
                    opening,
                    events_net,
                    contribution * 12.0,
                    investment_return,
                    0.0,
                    closing,
                )
            )
            capital = closing
            trajectory.append(TrajectoryPoint(age + 1, _display(capital)))
            continue

        if exhausted:
            rows.append(
                CashFlowRow.build(age, Phase.CONSUMPTION, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
            )
            capital = 0.0
            trajectory.append(TrajectoryPoint(age + 1, 0.0))
            continue

        base = opening + lump
        events_net = lump + monthly * con_s12
        investment_return = base * (con_growth - 1.0)
        available = base * con_growth + monthly * con_s12

        if yield_only:
            year_withdrawal = max(investment_return, 0.0)
        else:
            year_withdrawal = withdrawal * con_s12
        is_final = age == end - 1
        if force_final_zero and clamp and is_final and not perpetuity:
            year_withdrawal = max(available, 0.0)

        closing = available - year_withdrawal
        if clamp and closing < 0.0:
            year_withdrawal = max(available, 0.0)
            closing = 0.0
            if depletion_age is None:
                depletion_age = age + 1
            if not perpetuity:
                exhausted = True
        elif clamp and is_final and abs(closing) <= settings.zero_tolerance:
            closing = 0.0
            if depletion_age is None:
                depletion_age = end

        rows.append(
            CashFlowRow.build(
                age,
                Phase.CONSUMPTION,
                opening,
                events_net,
                0.0,
                investment_return,
                year_withdrawal,
                closing,
            )
        )
        capital = closing
        trajectory.append(TrajectoryPoint(age + 1, _display(capital)))

    return SimulationRun(
        rows=tuple(rows),
        trajectory=tuple(trajectory),
        depletion_age=depletion_age,
        terminal_capital=finite_or_zero(capital),
    )


def _display(capital: float) -> float:
    """Trajectory values are floored at zero and sanitized."""
    return max(finite_or_zero(capital), 0.0)
