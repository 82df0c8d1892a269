"""Factory for normalized Event instances.

Raw event records come from the session API and are only loosely shaped.
This module turns each record into an :class:`Event` that is safe for the
block expander:
- a non-empty, unique ``id`` (synthetic and deterministic when missing)
- a recognised ``event_type`` (``unknown`` otherwise)
- string ``created_at`` / ``session_id``

The payload is never validated here; unexpected payloads are passed through
and handled by the expander's fallback rendering.
"""

import hashlib
import json
import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union, cast

from ..models import Event, EventType
from ..parser import parse_timestamp

logger = logging.getLogger(__name__)

RECOGNISED_EVENT_TYPES = frozenset(
    {
        EventType.USER.value,
        EventType.ASSISTANT.value,
        EventType.TOOL_USE.value,
        EventType.TOOL_RESULT.value,
    }
)

RawEvent = Union[Event, Mapping[str, Any]]


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def synthetic_event_id(created_at: str, payload: Any) -> str:
    """Derive a stable id for an event that arrived without one."""
    try:
        payload_key = json.dumps(payload, sort_keys=True, default=str)
    except (TypeError, ValueError):
        payload_key = repr(payload)
    digest = hashlib.sha1(f"{created_at}\0{payload_key}".encode("utf-8"))
    return f"anon-{digest.hexdigest()[:12]}"


def normalize_event(raw: RawEvent) -> Event:
    """Normalize one raw event record.

    Never raises: any record, even a non-mapping, yields an Event.
    """
    if isinstance(raw, Event):
        data: Mapping[str, Any] = raw.model_dump()
    elif isinstance(raw, Mapping):
        data = cast(Mapping[str, Any], raw)
    else:
        logger.debug("Event record is not an object: %r", raw)
        data = {"payload": raw}

    created_at = _as_str(data.get("created_at"))
    payload = data.get("payload")

    event_type = _as_str(data.get("event_type"))
    if event_type not in RECOGNISED_EVENT_TYPES:
        if event_type:
            logger.debug("Unrecognised event_type %r", event_type)
        event_type = EventType.UNKNOWN.value

    event_id = _as_str(data.get("id")).strip()
    if not event_id:
        event_id = synthetic_event_id(created_at, payload)

    return Event(
        id=event_id,
        session_id=_as_str(data.get("session_id")),
        event_type=event_type,
        payload=payload,
        created_at=created_at,
    )


def _sort_events(events: list[Event]) -> list[Event]:
    """Stable sort by ``created_at``.

    Events whose timestamp cannot be parsed inherit the sort time of the
    preceding event, so they keep their position relative to it.
    """
    keys: list[Optional[datetime]] = []
    last: Optional[datetime] = None
    for event in events:
        parsed = parse_timestamp(event.created_at)
        if parsed is not None:
            last = parsed
        keys.append(last)

    # Events before the first parseable timestamp sort first, in input order
    def sort_key(index: int) -> tuple[int, Any]:
        key = keys[index]
        return (0, 0) if key is None else (1, key)

    order = sorted(range(len(events)), key=sort_key)
    return [events[i] for i in order]


def _dedupe_ids(events: list[Event]) -> list[Event]:
    seen: dict[str, int] = {}
    result: list[Event] = []
    for event in events:
        count = seen.get(event.id, 0)
        seen[event.id] = count + 1
        if count:
            new_id = f"{event.id}-dup{count}"
            while new_id in seen:
                count += 1
                new_id = f"{event.id}-dup{count}"
            seen[new_id] = 1
            logger.debug("Duplicate event id %s renamed to %s", event.id, new_id)
            event = event.model_copy(update={"id": new_id})
        result.append(event)
    return result


def normalize_events(raw_events: Iterable[RawEvent]) -> list[Event]:
    """Normalize, stable-sort and de-duplicate a session's event records."""
    events = [normalize_event(raw) for raw in raw_events]
    return _dedupe_ids(_sort_events(events))
