"""
Mapping between liquidity events and the persistence records of the report API.

The API stores one record per event with Portuguese keys and no recurrence:

    {"session_id": "...", "nome": "Venda imóvel", "idade": 70,
     "tipo": "entrada", "valor": 800000}

A session without events is stored as a single record holding only the
session id.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .errors import ConfigError
from .events import LiquidityEvent, Recurrence

__all__ = ["INFLOW", "OUTFLOW", "events_from_payload", "events_to_payload"]

INFLOW = "entrada"
OUTFLOW = "saida"


def events_from_payload(records: Iterable[dict[str, Any]]) -> list[LiquidityEvent]:
    """
    Decode API records into one-time, enabled events.

    Ids are assigned by position (``event-<index>``). Session marker records
    (no ``valor``) are skipped.

    Raises:
        ConfigError: If a record is not a mapping or carries non-numeric fields
    """
    events: list[LiquidityEvent] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ConfigError(f"record #{index} must be a mapping")
        if record.get("valor") is None:
            continue
        try:
            age = int(record["idade"]) if record.get("idade") is not None else None
            value = float(record["valor"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"record #{index}: {e}") from e
        events.append(
            LiquidityEvent(
                id=f"event-{index}",
                name=str(record.get("nome") or ""),
                value=value,
                is_positive=record.get("tipo") == INFLOW,
                recurrence=Recurrence.ONCE,
                start_age=age,
                end_age=None,
                enabled=True,
                age=age,
            )
        )
    return events


def events_to_payload(
    events: Iterable[LiquidityEvent], session_id: str, *, current_age: int
) -> list[dict[str, Any]]:
    """
    Encode events as API records for one session.

    The stored age is the start age, else the legacy age, else the year after
    ``current_age``. Recurrence and end age are not persisted by the API.
    """
    records = [
        {
            "session_id": session_id,
            "nome": e.name,
            "idade": _stored_age(e, current_age),
            "tipo": INFLOW if e.is_positive else OUTFLOW,
            "valor": e.value,
        }
        for e in events
    ]
    if not records:
        return [{"session_id": session_id}]
    return records


def _stored_age(event: LiquidityEvent, current_age: int) -> int:
    if event.start_age is not None:
        return event.start_age
    if event.age is not None:
        return event.age
    return current_age + 1
