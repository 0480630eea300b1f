"""Loading retirement scenarios from YAML/JSON sources."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, ScenarioFileError
from .events import LiquidityEvent
from .params import SimulationParameters
from .settings import DEFAULT_SETTINGS, SolverSettings

__all__ = ["ScenarioDefinition", "load_scenario", "dump_scenario"]

_SECTIONS = {"version", "name", "description", "parameters", "events", "solver"}


@dataclass(slots=True)
class ScenarioDefinition:
    """Structured representation of a scenario file."""

    params: SimulationParameters
    events: tuple[LiquidityEvent, ...] = ()
    settings: SolverSettings = DEFAULT_SETTINGS
    metadata: dict[str, Any] = field(default_factory=dict)
    source: str = "<memory>"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.metadata.get("version", 1)}
        for key in ("name", "description"):
            if self.metadata.get(key) is not None:
                data[key] = self.metadata[key]
        data["parameters"] = self.params.to_dict()
        data["events"] = [e.to_dict() for e in self.events]
        if self.settings != DEFAULT_SETTINGS:
            data["solver"] = self.settings.to_dict()
        return data


def load_scenario(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> ScenarioDefinition:
    """
    Parse a scenario from a YAML/JSON file or an in-memory mapping.

    A scenario holds a ``parameters`` mapping (camelCase or snake_case keys),
    an optional ``events`` list and an optional ``solver`` mapping:

    ```yaml
    name: Early retirement
    parameters:
      currentAge: 40
      retirementAge: 60
      currentCapital: 100000
      desiredMonthlyWithdrawal: 8000
    events:
      - name: Inheritance
        value: 500000
        startAge: 70
    ```

    Raises:
        FileNotFoundError: If the path does not exist
        ScenarioFileError: If the document cannot be parsed or a section is invalid
    """
    mapping, label = _read_source(source, format=format)

    unknown = sorted(set(mapping) - _SECTIONS)
    if unknown:
        raise ScenarioFileError(f"{label}: unknown sections {', '.join(unknown)}")

    try:
        params = SimulationParameters.from_dict(
            _ensure_dict(mapping.get("parameters"), f"{label}::parameters")
        )
        events = tuple(
            LiquidityEvent.from_dict(entry, index=idx)
            for idx, entry in enumerate(
                _ensure_list(mapping.get("events"), f"{label}::events")
            )
        )
        settings = SolverSettings.from_dict(
            _ensure_dict(mapping.get("solver"), f"{label}::solver")
        )
    except ScenarioFileError:
        raise
    except (ConfigError, TypeError) as e:
        raise ScenarioFileError(f"{label}: {e}") from e

    ids = [e.id for e in events]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ScenarioFileError(
            f"{label}: duplicated event ids {', '.join(duplicates)}"
        )

    metadata = {
        "version": mapping.get("version", 1),
        "name": mapping.get("name"),
        "description": mapping.get("description"),
    }
    return ScenarioDefinition(
        params=params,
        events=events,
        settings=settings,
        metadata=metadata,
        source=label,
    )


def dump_scenario(scenario: ScenarioDefinition, *, format: str = "yaml") -> str:
    """Serialize a scenario back to YAML or JSON text."""
    data = scenario.to_dict()
    if format == "json":
        return json.dumps(data, indent=2)
    if format in {"yaml", "yml"}:
        return yaml.safe_dump(data, sort_keys=False)
    raise ScenarioFileError(f"Unsupported scenario format '{format}'")


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise ScenarioFileError(f"Unsupported scenario format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ScenarioFileError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ScenarioFileError(f"Scenario root must be a mapping (source={path})")
    return data, str(path)


def _ensure_dict(value: Any, ctx: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ScenarioFileError(f"{ctx} must be a mapping")
    return value


def _ensure_list(value: Any, ctx: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ScenarioFileError(f"{ctx} must be a list")
    return value
