"""
Input validation for liquidity events and simulation parameters.

The engine tolerates malformed input; these checks belong to the input layer
and reproduce the rules the report editor applies before an event is saved.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .events import LiquidityEvent, Recurrence, effective_start_age
from .params import SimulationParameters


@dataclass
class ValidationIssue:
    """A single problem found in an event or in the parameters."""

    subject: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.subject}] {self.field}: {self.message}"


@dataclass
class EventValidationReport:
    """
    Errors block an input; warnings flag inputs the engine will clamp.

    Exit codes follow the CLI convention: 0 valid, 1 errors, 2 warnings only.
    """

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def is_valid(self) -> bool:
        return not self.has_errors()

    def get_exit_code(self) -> int:
        if self.has_errors():
            return 1
        elif self.has_warnings():
            return 2
        else:
            return 0

    def extend(self, other: EventValidationReport) -> EventValidationReport:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "errors": [vars(i) for i in self.errors],
            "warnings": [vars(i) for i in self.warnings],
            "has_errors": self.has_errors(),
            "has_warnings": self.has_warnings(),
            "is_valid": self.is_valid(),
            "exit_code": self.get_exit_code(),
        }

    def __str__(self) -> str:
        lines = ["Validation passed" if self.is_valid() else "Validation failed"]
        lines.extend(f"error {issue}" for issue in self.errors)
        lines.extend(f"warning {issue}" for issue in self.warnings)
        return "\n".join(lines)


def validate_event(
    event: LiquidityEvent, *, current_age: int
) -> EventValidationReport:
    """
    Check one event against the editor rules.

    Errors: empty name, non-positive value, start before the current age,
    recurring event ending before it starts.
    Warnings: disabled events (ignored by the engine), end age on a one-time
    event (ignored), missing start age (falls back to the legacy age or the
    current age).
    """
    report = EventValidationReport()
    subject = event.id

    if not event.name.strip():
        report.errors.append(ValidationIssue(subject, "name", "must not be empty"))
    if event.value <= 0:
        report.errors.append(ValidationIssue(subject, "value", "must be > 0"))

    start = effective_start_age(event, current_age)
    if event.start_age is None:
        report.warnings.append(
            ValidationIssue(subject, "start_age", f"missing; using age {start}")
        )
    if start < current_age:
        report.errors.append(
            ValidationIssue(
                subject, "start_age", f"{start} is before the current age {current_age}"
            )
        )

    if event.recurrence is Recurrence.ONCE:
        if event.end_age is not None:
            report.warnings.append(
                ValidationIssue(subject, "end_age", "ignored for one-time events")
            )
    elif event.end_age is not None and event.end_age < start:
        report.errors.append(
            ValidationIssue(
                subject, "end_age", f"{event.end_age} is before start age {start}"
            )
        )

    if not event.enabled:
        report.warnings.append(ValidationIssue(subject, "enabled", "event is disabled"))

    return report


def validate_events(
    events: Iterable[LiquidityEvent], *, current_age: int
) -> EventValidationReport:
    """Validate every event and flag duplicated ids."""
    report = EventValidationReport()
    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            report.errors.append(ValidationIssue(event.id, "id", "duplicated id"))
        seen.add(event.id)
        report.extend(validate_event(event, current_age=current_age))
    return report


def validate_parameters(params: SimulationParameters) -> EventValidationReport:
    """
    Check the parameter snapshot for values the engine would clamp silently.
    """
    report = EventValidationReport()
    subject = "parameters"

    if params.retirement_age < params.current_age:
        report.warnings.append(
            ValidationIssue(
                subject,
                "retirement_age",
                f"{params.retirement_age} is before the current age; "
                "treated as retired",
            )
        )
    if params.horizon_end_age <= params.effective_retirement_age:
        report.errors.append(
            ValidationIssue(
                subject,
                "override_end_age",
                f"horizon end {params.horizon_end_age} leaves no consumption years",
            )
        )
    if params.life_expectancy < params.current_age:
        report.errors.append(
            ValidationIssue(subject, "life_expectancy", "is before the current age")
        )
    for name in ("current_capital", "desired_monthly_withdrawal"):
        if getattr(params, name) < 0:
            report.errors.append(ValidationIssue(subject, name, "must be >= 0"))
    if params.monthly_contribution is not None and params.monthly_contribution < 0:
        report.errors.append(
            ValidationIssue(subject, "monthly_contribution", "must be >= 0")
        )
    for name in ("real_return_accumulation", "real_return_consumption"):
        if getattr(params, name) <= -1.0:
            report.errors.append(ValidationIssue(subject, name, "must be > -100%"))
    if params.is_perpetuity and abs(params.real_return_consumption) < 1e-12:
        report.warnings.append(
            ValidationIssue(
                subject,
                "real_return_consumption",
                "a perpetuity cannot be funded at a zero real return",
            )
        )
    return report
