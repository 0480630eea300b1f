"""
Tests for rate conversion and annuity factors.
"""

import math

import pytest
from retirelab.core.rates import (
    annual_rate,
    annuity_fv_factor,
    annuity_pv_factor,
    finite_or_zero,
    growth_factor,
    is_zero_rate,
    monthly_rate,
    pmt,
)


class TestRateConversion:
    """Monthly rates are compound equivalents of annual rates."""

    def test_monthly_rate_compounds_back_to_annual(self):
        r = monthly_rate(0.03)
        assert (1 + r) ** 12 == pytest.approx(1.03, rel=1e-12)
        assert r < 0.03 / 12

    def test_annual_rate_is_inverse(self):
        assert annual_rate(monthly_rate(0.07)) == pytest.approx(0.07, rel=1e-12)

    def test_zero_rate(self):
        assert monthly_rate(0.0) == 0.0
        assert is_zero_rate(0.0)
        assert is_zero_rate(1e-12)
        assert not is_zero_rate(1e-6)

    def test_negative_real_rate(self):
        r = monthly_rate(-0.02)
        assert r < 0
        assert growth_factor(r, 12) == pytest.approx(0.98, rel=1e-12)


class TestAnnuityFactors:
    """Annuity factors and their zero-rate limits."""

    def test_fv_factor_matches_sum_of_payments(self):
        r = 0.004
        expected = sum((1 + r) ** k for k in range(12))
        assert annuity_fv_factor(r, 12) == pytest.approx(expected, rel=1e-12)

    def test_pv_factor_matches_sum_of_discounts(self):
        r = 0.0025
        expected = sum((1 + r) ** -k for k in range(1, 241))
        assert annuity_pv_factor(r, 240) == pytest.approx(expected, rel=1e-12)

    def test_zero_rate_factors_are_period_counts(self):
        assert annuity_fv_factor(0.0, 12) == 12.0
        assert annuity_pv_factor(0.0, 420) == 420.0
        assert annuity_pv_factor(1e-12, 36) == 36.0


class TestPMT:
    """Spreadsheet PMT sign conventions."""

    def test_loan_payment_is_negative(self):
        payment = pmt(0.005, 360, 200_000)
        assert payment == pytest.approx(-1199.10, abs=0.01)

    def test_savings_payment_to_reach_future_value(self):
        r = monthly_rate(0.04)
        payment = pmt(r, 240, 0.0, -1_000_000)
        assert payment > 0
        assert payment * annuity_fv_factor(r, 240) == pytest.approx(1_000_000)

    def test_zero_rate(self):
        assert pmt(0.0, 10, 1000) == -100.0

    def test_beginning_of_period(self):
        end = pmt(0.01, 12, 1000)
        begin = pmt(0.01, 12, 1000, when=1)
        assert begin == pytest.approx(end / 1.01)

    def test_zero_periods_is_nan(self):
        assert math.isnan(pmt(0.01, 0, 1000))


class TestFiniteOrZero:
    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, None])
    def test_non_finite_maps_to_zero(self, value):
        assert finite_or_zero(value) == 0.0

    def test_negative_zero_is_normalized(self):
        assert math.copysign(1.0, finite_or_zero(-0.0)) == 1.0

    def test_finite_values_pass_through(self):
        assert finite_or_zero(-12.5) == -12.5
