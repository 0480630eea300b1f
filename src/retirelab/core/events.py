"""
Liquidity events: one-time or recurring cash inflows/outflows anchored to ages.

Events are immutable. The wire format carries `enabled` as an optional field
where only an explicit `false` disables the event; that tri-state is resolved
once in :meth:`LiquidityEvent.from_dict`, so everything downstream works with a
plain boolean.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .errors import ConfigError, warn_once


class Recurrence(str, Enum):
    """How often a liquidity event repeats."""

    ONCE = "once"
    ANNUAL = "annual"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value: Recurrence | str | None) -> Recurrence:
        if value is None:
            return cls.ONCE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ConfigError(
                f"Unknown recurrence {value!r}; expected one of "
                f"{', '.join(r.value for r in cls)}"
            ) from e


@dataclass(frozen=True)
class LiquidityEvent:
    """
    A modeled cash inflow or outflow independent of the regular
    contribution/withdrawal stream.

    Attributes:
        id: Stable identifier
        name: Display label, irrelevant to the computation
        value: Magnitude in currency units (per month for monthly events)
        is_positive: True for inflows, False for outflows
        recurrence: once, annual or monthly
        start_age: First age of the event (the only age for one-time events)
        end_age: Inclusive last age for recurring events; None means open-ended
        enabled: Disabled events are excluded from every calculation
        age: Legacy single-age field, used when start_age is missing

    Example:
        ```python
        inheritance = LiquidityEvent(
            id="inh", name="Inheritance", value=500_000, is_positive=True,
            start_age=70,
        )
        rent = LiquidityEvent(
            id="rent", name="Rental income", value=3_000, is_positive=True,
            recurrence="monthly", start_age=60, end_age=80,
        )
        ```
    """

    id: str
    name: str
    value: float
    is_positive: bool = True
    recurrence: Recurrence = Recurrence.ONCE
    start_age: int | None = None
    end_age: int | None = None
    enabled: bool = True
    age: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "recurrence", Recurrence.coerce(self.recurrence))
        object.__setattr__(self, "value", abs(float(self.value)))
        object.__setattr__(self, "enabled", self.enabled is not False)
        if (
            self.recurrence is not Recurrence.ONCE
            and self.end_age is not None
            and self.start_age is not None
            and self.end_age < self.start_age
        ):
            warn_once(
                "END_BEFORE_START",
                self.id,
                f"[{self.id}] end_age {self.end_age} is before start_age "
                f"{self.start_age}; the event has no active years.",
            )

    @property
    def sign(self) -> float:
        return 1.0 if self.is_positive else -1.0

    @property
    def signed_value(self) -> float:
        return self.sign * self.value

    def with_enabled(self, enabled: bool) -> LiquidityEvent:
        """Return a copy with the enabled flag changed."""
        return replace(self, enabled=enabled)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, index: int = 0) -> LiquidityEvent:
        """
        Build an event from a mapping using either camelCase or snake_case keys.

        `enabled` follows the wire convention: missing or null means enabled.
        """
        if not isinstance(data, dict):
            raise ConfigError(
                f"event #{index} must be a mapping, got {type(data).__name__}"
            )

        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        value = pick("value")
        if value is None:
            raise ConfigError(f"event #{index}: missing required field 'value'")

        try:
            return cls(
                id=str(pick("id", default=f"event-{index}")),
                name=str(pick("name", default="")),
                value=float(value),
                is_positive=bool(pick("isPositive", "is_positive", default=True)),
                recurrence=pick("recurrence", default=Recurrence.ONCE),
                start_age=_opt_int(pick("startAge", "start_age")),
                end_age=_opt_int(pick("endAge", "end_age")),
                enabled=data.get("enabled") is not False,
                age=_opt_int(pick("age")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"event #{index}: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the report payload."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "isPositive": self.is_positive,
            "recurrence": self.recurrence.value,
            "startAge": self.start_age,
            "endAge": self.end_age,
            "enabled": self.enabled,
            "age": self.age,
        }


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def is_active(event: LiquidityEvent) -> bool:
    return event.enabled


def active_events(
    events: Iterable[LiquidityEvent] | None,
) -> tuple[LiquidityEvent, ...]:
    """Snapshot the enabled events into a tuple."""
    return tuple(e for e in (events or ()) if is_active(e))


def effective_start_age(event: LiquidityEvent, fallback_age: int) -> int:
    """start_age, else the legacy age field, else the fallback (current age)."""
    if event.start_age is not None:
        return event.start_age
    if event.age is not None:
        return event.age
    return fallback_age


def effective_end_age(event: LiquidityEvent, cap_age: int, fallback_age: int) -> int:
    """
    Inclusive last age of the event, clamped to cap_age.

    One-time events end where they start. The result may be smaller than the
    start age for malformed or capped ranges; callers iterate an empty range
    in that case.
    """
    start = effective_start_age(event, fallback_age)
    if event.recurrence is Recurrence.ONCE:
        return start
    end = event.end_age if event.end_age is not None else cap_age
    return min(end, cap_age)


def is_open_ended(event: LiquidityEvent, cap_age: int) -> bool:
    """True when a recurring event runs at least until cap_age."""
    if event.recurrence is Recurrence.ONCE:
        return False
    return event.end_age is None or event.end_age >= cap_age


def event_ages(
    event: LiquidityEvent,
    *,
    first_age: int,
    last_age: int,
    fallback_age: int,
) -> range:
    """
    Ages at which the event books an amount, restricted to [first_age, last_age].
    """
    start = max(effective_start_age(event, fallback_age), first_age)
    end = min(effective_end_age(event, last_age, fallback_age), last_age)
    if end < start:
        return range(0)
    return range(start, end + 1)


def is_active_at_age(event: LiquidityEvent, age: int, fallback_age: int) -> bool:
    """
    Whether an enabled event occurs at `age`, for chart annotation.

    Open-ended recurring events are marked at their start age only.
    """
    if not is_active(event):
        return False
    start = effective_start_age(event, fallback_age)
    if event.recurrence is Recurrence.ONCE:
        return age == start
    end = event.end_age if event.end_age is not None else start
    return start <= age <= end
