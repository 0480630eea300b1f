"""
Rate conversion and time-value-of-money factors.

All rates are effective rates expressed as fractions (0.03 for 3%). Monthly
rates are the compound equivalent of an annual rate, never annual / 12.
"""

from __future__ import annotations

import math

ZERO_RATE_EPSILON = 1e-10


def monthly_rate(annual_rate: float) -> float:
    """
    Convert an annual effective rate to the equivalent monthly effective rate.

    Args:
        annual_rate: Annual effective rate, must be > -1

    Returns:
        (1 + annual_rate) ** (1/12) - 1

    Example:
        ```python
        >>> round(monthly_rate(0.12682503), 6)
        0.01
        ```
    """
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def annual_rate(monthly: float) -> float:
    """Inverse of :func:`monthly_rate`."""
    return (1.0 + monthly) ** 12 - 1.0


def is_zero_rate(rate: float, epsilon: float = ZERO_RATE_EPSILON) -> bool:
    return abs(rate) < epsilon


def growth_factor(rate: float, periods: float) -> float:
    """Compound growth (1 + rate) ** periods."""
    return (1.0 + rate) ** periods


def annuity_fv_factor(
    rate: float, periods: float, epsilon: float = ZERO_RATE_EPSILON
) -> float:
    """
    Future value of `periods` end-of-period payments of 1.

    ((1 + r)^n - 1) / r, or n when the rate is zero.
    """
    if is_zero_rate(rate, epsilon):
        return float(periods)
    return ((1.0 + rate) ** periods - 1.0) / rate


def annuity_pv_factor(
    rate: float, periods: float, epsilon: float = ZERO_RATE_EPSILON
) -> float:
    """
    Present value of `periods` end-of-period payments of 1.

    (1 - (1 + r)^-n) / r, or n when the rate is zero.
    """
    if is_zero_rate(rate, epsilon):
        return float(periods)
    return (1.0 - (1.0 + rate) ** (-periods)) / rate


def pmt(
    rate: float,
    nper: float,
    pv: float,
    fv: float = 0.0,
    when: int = 0,
    epsilon: float = ZERO_RATE_EPSILON,
) -> float:
    """
    Periodic payment with spreadsheet PMT sign conventions.

    Money received is positive, money paid is negative, so paying off a loan
    of 1000 yields a negative payment.

    Args:
        rate: Rate per period
        nper: Number of periods
        pv: Present value
        fv: Future value to reach after the last payment
        when: 0 for end-of-period payments, 1 for beginning-of-period

    Returns:
        The payment per period. NaN when nper is zero.
    """
    if nper == 0:
        return math.nan
    if is_zero_rate(rate, epsilon):
        return -(pv + fv) / nper
    x = (1.0 + rate) ** nper
    return -(pv * x + fv) * rate / ((x - 1.0) * (1.0 + rate * when))


def finite_or_zero(value: float) -> float:
    """Map NaN/Infinity to 0.0 and normalize negative zero."""
    if value is None or not math.isfinite(value):
        return 0.0
    if value == 0.0:
        return 0.0
    return float(value)
