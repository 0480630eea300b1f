"""
Error and warning classes for RetireLab.

The projection engine itself never raises on numeric edge cases; it clamps and
sanitizes instead. The classes here are raised by the configuration layer
(scenario files, solver settings, parameter parsing) and emitted as warnings
when the engine tolerates malformed input.
"""

from __future__ import annotations

import warnings


class ConfigError(Exception):
    """
    Configuration error while building parameters, events or solver settings.

    **Common Causes:**
    - Missing required parameters in a scenario file
    - Unknown recurrence kinds or solver setting names
    - Values that cannot be converted to numbers

    **Example Usage:**
        ```python
        from retirelab.core.errors import ConfigError
        from retirelab.core.params import SimulationParameters

        try:
            params = SimulationParameters.from_dict({"currentAge": 40})
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class ScenarioFileError(ConfigError):
    """Raised when a scenario file cannot be read or parsed."""


class RetireLabWarning(UserWarning):
    """Warning for inputs the engine tolerates but that are probably mistakes."""


# Tracks (subject_id, code) pairs already reported
_warned: set[tuple[str, str]] = set()


def warn_once(code: str, subject_id: str, msg: str, *, category=RetireLabWarning):
    """Warn once per (subject_id, code) to avoid spam on repeated recalculation."""
    key = (subject_id, code)
    if key not in _warned:
        _warned.add(key)
        warnings.warn(msg, category, stacklevel=3)
