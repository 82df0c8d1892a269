"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

EventFactory = Callable[..., dict[str, Any]]


def _event(
    event_id: Optional[str],
    event_type: str,
    payload: Any,
    created_at: str = "2025-01-01T10:00:00Z",
    session_id: str = "session-1",
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "session_id": session_id,
        "event_type": event_type,
        "payload": payload,
        "created_at": created_at,
    }
    if event_id is not None:
        event["id"] = event_id
    return event


@pytest.fixture
def user_event() -> EventFactory:
    """Build a user event whose message content is ``content``."""

    def make(
        event_id: Optional[str],
        content: Any,
        created_at: str = "2025-01-01T10:00:00Z",
        **payload_fields: Any,
    ) -> dict[str, Any]:
        payload = {
            "type": "user",
            "timestamp": created_at,
            "message": {"role": "user", "content": content},
            **payload_fields,
        }
        return _event(event_id, "user", payload, created_at)

    return make


@pytest.fixture
def assistant_event() -> EventFactory:
    """Build an assistant event whose message content is ``content``."""

    def make(
        event_id: Optional[str],
        content: Any,
        created_at: str = "2025-01-01T10:00:01Z",
        **payload_fields: Any,
    ) -> dict[str, Any]:
        payload = {
            "type": "assistant",
            "timestamp": created_at,
            "message": {"role": "assistant", "content": content},
            **payload_fields,
        }
        return _event(event_id, "assistant", payload, created_at)

    return make


@pytest.fixture
def tool_use_event(assistant_event: EventFactory) -> EventFactory:
    """Build an assistant event carrying a single tool_use item."""

    def make(
        event_id: str,
        tool_use_id: Optional[str],
        name: str,
        tool_input: Any,
        created_at: str = "2025-01-01T10:00:02Z",
    ) -> dict[str, Any]:
        item = {"type": "tool_use", "id": tool_use_id, "name": name, "input": tool_input}
        return assistant_event(event_id, [item], created_at)

    return make


@pytest.fixture
def tool_result_event(user_event: EventFactory) -> EventFactory:
    """Build a user event carrying a single tool_result item."""

    def make(
        event_id: str,
        tool_use_id: Optional[str],
        content: Any = "ok",
        created_at: str = "2025-01-01T10:00:03Z",
        is_error: bool = False,
    ) -> dict[str, Any]:
        item = {
            "type": "tool_result",
            "tool_use_id": tool_use_id,
            "content": content,
            "is_error": is_error,
        }
        return user_event(event_id, [item], created_at)

    return make


@pytest.fixture
def sample_events(
    user_event: EventFactory,
    assistant_event: EventFactory,
    tool_use_event: EventFactory,
    tool_result_event: EventFactory,
) -> list[dict[str, Any]]:
    """A short session: question, answer with a tool call, result, summary."""
    return [
        user_event("e1", "Please read the config file", "2025-01-01T10:00:00Z"),
        assistant_event(
            "e2",
            [
                {"type": "thinking", "thinking": "Need to open it."},
                {"type": "text", "text": "Reading it now."},
            ],
            "2025-01-01T10:00:01Z",
        ),
        tool_use_event(
            "e3",
            "toolu_1",
            "Read",
            {"file_path": "/repo/config.toml"},
            "2025-01-01T10:00:02Z",
        ),
        tool_result_event("e4", "toolu_1", "[server]\nport = 80", "2025-01-01T10:00:03Z"),
        assistant_event("e5", "The port is 80.", "2025-01-01T10:00:04Z"),
    ]


@pytest.fixture
def write_events(tmp_path: Path) -> Callable[[Any, str], Path]:
    """Write ``data`` to a file under tmp_path and return its path.

    Lists go to ``.jsonl`` files one record per line when the name says so.
    """

    def write(data: Any, name: str = "session.json") -> Path:
        path = tmp_path / name
        if name.endswith(".jsonl"):
            path.write_text(
                "\n".join(json.dumps(record) for record in data) + "\n",
                encoding="utf-8",
            )
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return write
