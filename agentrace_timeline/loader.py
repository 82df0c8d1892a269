"""Load session event logs from disk.

Three layouts are accepted:

- a JSON array of event objects
- a session API response, ``{"events": [...]}``
- JSONL, one event object per line
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class EventLoadError(ValueError):
    """Raised when an event file cannot be read as events at all."""


def _events_from_document(document: Any, path: Path) -> list[Any]:
    if isinstance(document, dict) and "events" in document:
        document = document["events"]
    if not isinstance(document, list):
        raise EventLoadError(
            f"{path} does not contain an event array or an events response"
        )
    return document


def _load_jsonl(text: str, path: Path) -> list[dict[str, Any]]:
    events: list[dict[str, Any]] = []
    for line_no, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Line %d of %s is not valid JSON: %s", line_no, path, e)
            continue
        if not isinstance(record, dict):
            logger.warning("Line %d of %s is not a JSON object: %s", line_no, path, line)
            continue
        events.append(record)
    return events


def load_events(path: Path) -> list[Any]:
    """Read the raw events of one session from ``path``.

    Records are returned as decoded; normalization happens in the compiler.

    Raises:
        FileNotFoundError: if ``path`` does not exist
        EventLoadError: if the file is neither a JSON document of events nor
            JSONL
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()

    stripped = text.lstrip()
    if not stripped:
        return []

    if path.suffix == ".jsonl":
        return _load_jsonl(text, path)

    try:
        document = json.loads(stripped)
    except json.JSONDecodeError as e:
        if stripped.startswith("{") and "\n" in stripped.strip():
            # Several objects on separate lines
            logger.debug("%s is not a single JSON document, reading as JSONL", path)
            return _load_jsonl(text, path)
        raise EventLoadError(f"Could not decode {path}: {e}") from e

    if isinstance(document, dict) and "events" not in document:
        # A one-line JSONL file
        return [document]
    return _events_from_document(document, path)
