"""
Capital required at retirement to fund the desired withdrawal.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .aggregation import present_value_at_retirement
from .events import LiquidityEvent
from .params import SimulationParameters
from .rates import ZERO_RATE_EPSILON, annuity_pv_factor, is_zero_rate, monthly_rate


def required_capital(
    params: SimulationParameters,
    events: Iterable[LiquidityEvent] | None = None,
    *,
    withdrawal: float | None = None,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """
    Capital needed at the retirement date, net of post-retirement events.

    - Perpetuity: withdrawal / monthly_rate, so the yield alone pays the withdrawal.
    - Finite: present value of the monthly withdrawals from retirement to
      the horizon end, W * (1 - (1 + r)^-n) / r.

    The present value of post-retirement liquidity events is subtracted
    (inflows reduce the requirement, outflows increase it) and the result is
    floored at zero.

    Args:
        params: Simulation parameters; the consumption rate and horizon are used
        events: Liquidity events
        withdrawal: Monthly withdrawal to fund (default: the desired withdrawal)
        epsilon: Rates below this magnitude are treated as zero

    Returns:
        Required capital. A perpetuity at a zero rate with a positive
        withdrawal cannot be funded and returns math.inf; callers sanitize it.

    Example:
        ```python
        params = SimulationParameters(
            current_age=65, retirement_age=65, current_capital=0,
            desired_monthly_withdrawal=10_000, is_perpetuity=True,
        )
        required_capital(params)  # 10_000 / monthly_rate(0.03)
        ```
    """
    amount = params.desired_monthly_withdrawal if withdrawal is None else withdrawal
    rate = monthly_rate(params.real_return_consumption)
    retirement = params.effective_retirement_age

    if params.is_perpetuity:
        if is_zero_rate(rate, epsilon):
            base = math.inf if amount > 0 else 0.0
        else:
            base = amount / rate
    else:
        base = amount * annuity_pv_factor(rate, params.consumption_months, epsilon)

    events_pv = present_value_at_retirement(
        events,
        current_age=params.current_age,
        retirement_age=retirement,
        monthly_rate=rate,
        cap_age=params.event_cap_age,
        perpetual=params.is_perpetuity,
        epsilon=epsilon,
    )
    return max(base - events_pv, 0.0)
