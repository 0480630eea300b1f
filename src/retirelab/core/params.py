"""
Simulation parameters for the retirement projection engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from .errors import ConfigError

RETIRED_HORIZON_END_AGE = 100  # horizon when consumption has already started
DEFAULT_HORIZON_END_AGE = 99  # horizon when still accumulating

# wire (camelCase) name -> field name
_ALIASES = {
    "currentAge": "current_age",
    "retirementAge": "retirement_age",
    "lifeExpectancy": "life_expectancy",
    "currentCapital": "current_capital",
    "monthlyContribution": "monthly_contribution",
    "desiredMonthlyWithdrawal": "desired_monthly_withdrawal",
    "realReturnAccumulation": "real_return_accumulation",
    "realReturnConsumption": "real_return_consumption",
    "isPerpetuity": "is_perpetuity",
    "lockWithdrawalToTarget": "lock_withdrawal_to_target",
    "forceFinalZeroAtEnd": "force_final_zero_at_end",
    "overrideEndAge": "override_end_age",
}

_REQUIRED = ("current_age", "retirement_age", "current_capital")
_INT_FIELDS = ("current_age", "retirement_age", "life_expectancy", "override_end_age")
_BOOL_FIELDS = ("is_perpetuity", "lock_withdrawal_to_target", "force_final_zero_at_end")


@dataclass(frozen=True)
class SimulationParameters:
    """
    Flat parameter snapshot consumed by the engine.

    Rates are annual effective real rates expressed as fractions. All
    currency amounts share the same unit.

    Attributes:
        current_age: Age today
        retirement_age: Age at which consumption starts; may equal current_age
        life_expectancy: Expected age at death (used for indicators only)
        current_capital: Investable wealth today
        monthly_contribution: Contribution during accumulation; None means solve for it
        desired_monthly_withdrawal: Target consumption per month
        real_return_accumulation: Annual real return before retirement
        real_return_consumption: Annual real return after retirement
        is_perpetuity: Preserve principal and withdraw only the yield
        lock_withdrawal_to_target: Use the desired withdrawal as-is instead of
            solving for the withdrawal that zeroes capital at the horizon
        force_final_zero_at_end: Adjust the last simulated year so capital
            ends at exactly zero when a contribution is needed
        override_end_age: Age at which the consumption horizon ends

    Example:
        ```python
        params = SimulationParameters(
            current_age=40, retirement_age=65, current_capital=200_000,
            desired_monthly_withdrawal=8_000,
        )
        params.horizon_end_age  # 99
        ```
    """

    current_age: int
    retirement_age: int
    current_capital: float
    life_expectancy: int = 100
    monthly_contribution: float | None = None
    desired_monthly_withdrawal: float = 0.0
    real_return_accumulation: float = 0.03
    real_return_consumption: float = 0.03
    is_perpetuity: bool = False
    lock_withdrawal_to_target: bool = True
    force_final_zero_at_end: bool = True
    override_end_age: int | None = None

    @property
    def is_retired(self) -> bool:
        return self.retirement_age <= self.current_age

    @property
    def effective_retirement_age(self) -> int:
        return max(self.retirement_age, self.current_age)

    @property
    def horizon_end_age(self) -> int:
        """Age at which the consumption horizon ends."""
        if self.override_end_age is not None:
            return self.override_end_age
        if self.is_retired:
            return RETIRED_HORIZON_END_AGE
        return DEFAULT_HORIZON_END_AGE

    @property
    def event_cap_age(self) -> int:
        """Last simulated age; open-ended recurring events stop here."""
        return self.horizon_end_age - 1

    @property
    def accumulation_months(self) -> int:
        return 12 * (self.effective_retirement_age - self.current_age)

    @property
    def consumption_months(self) -> int:
        return 12 * max(0, self.horizon_end_age - self.effective_retirement_age)

    def replace(self, **changes: Any) -> SimulationParameters:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationParameters:
        """
        Build parameters from camelCase or snake_case keys.

        Raises:
            ConfigError: If required fields are missing, keys are unknown or
                values cannot be converted
        """
        if not isinstance(data, dict):
            raise ConfigError("parameters must be a mapping")

        kwargs: dict[str, Any] = {}
        known = set(_ALIASES.values())
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigError(f"Unknown parameter '{key}'")
            if value is not None:
                kwargs[name] = value

        missing = [name for name in _REQUIRED if kwargs.get(name) is None]
        if missing:
            raise ConfigError(f"Missing required parameters: {', '.join(missing)}")

        try:
            for name, value in list(kwargs.items()):
                if name in _INT_FIELDS:
                    kwargs[name] = int(value)
                elif name in _BOOL_FIELDS:
                    if not isinstance(value, bool):
                        raise ConfigError(f"'{name}' must be a boolean, got {value!r}")
                else:
                    kwargs[name] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid parameter value: {e}") from e

        for name in ("real_return_accumulation", "real_return_consumption"):
            if name in kwargs and kwargs[name] <= -1.0:
                raise ConfigError(f"'{name}' must be > -1")

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the report payload."""
        reverse = {v: k for k, v in _ALIASES.items()}
        return {reverse[k]: v for k, v in asdict(self).items()}
