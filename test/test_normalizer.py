#!/usr/bin/env python3
"""Tests for event normalization, ordering and id assignment."""

from agentrace_timeline.factories import normalize_event, normalize_events, synthetic_event_id
from agentrace_timeline.models import Event, EventType


class TestNormalizeEvent:
    """Tests for normalizing a single raw record."""

    def test_recognised_event_passes_through(self):
        event = normalize_event(
            {
                "id": "e1",
                "session_id": "s1",
                "event_type": "assistant",
                "payload": {"message": {"content": "hi"}},
                "created_at": "2025-01-01T10:00:00Z",
            }
        )
        assert isinstance(event, Event)
        assert event.id == "e1"
        assert event.session_id == "s1"
        assert event.event_type == EventType.ASSISTANT
        assert event.payload == {"message": {"content": "hi"}}

    def test_unrecognised_event_type_becomes_unknown(self):
        event = normalize_event({"id": "e1", "event_type": "file-history-snapshot"})
        assert event.event_type == "unknown"

    def test_missing_event_type_becomes_unknown(self):
        assert normalize_event({"id": "e1"}).event_type == "unknown"

    def test_missing_id_gets_deterministic_synthetic_id(self):
        raw = {"event_type": "user", "payload": {"a": 1}, "created_at": "2025-01-01"}
        first = normalize_event(raw)
        second = normalize_event(dict(raw))
        assert first.id.startswith("anon-")
        assert first.id == second.id
        assert first.id == synthetic_event_id("2025-01-01", {"a": 1})

    def test_synthetic_id_depends_on_payload(self):
        assert synthetic_event_id("t", {"a": 1}) != synthetic_event_id("t", {"a": 2})

    def test_blank_id_is_replaced(self):
        assert normalize_event({"id": "   ", "payload": None}).id.startswith("anon-")

    def test_non_mapping_record_is_kept_as_payload(self):
        event = normalize_event(["not", "an", "object"])
        assert event.event_type == "unknown"
        assert event.payload == ["not", "an", "object"]

    def test_non_string_fields_are_coerced(self):
        event = normalize_event({"id": 42, "session_id": 7, "created_at": None})
        assert event.id == "42"
        assert event.session_id == "7"
        assert event.created_at == ""

    def test_event_instance_is_accepted(self):
        event = Event(id="x", event_type="user", payload={}, created_at="")
        assert normalize_event(event).id == "x"


class TestNormalizeEvents:
    """Tests for ordering and duplicate handling across a session."""

    def test_sorted_by_created_at(self):
        events = normalize_events(
            [
                {"id": "b", "created_at": "2025-01-01T10:00:02Z"},
                {"id": "a", "created_at": "2025-01-01T10:00:01Z"},
                {"id": "c", "created_at": "2025-01-01T10:00:03Z"},
            ]
        )
        assert [e.id for e in events] == ["a", "b", "c"]

    def test_sort_is_stable_for_equal_timestamps(self):
        events = normalize_events(
            [
                {"id": "first", "created_at": "2025-01-01T10:00:00Z"},
                {"id": "second", "created_at": "2025-01-01T10:00:00Z"},
                {"id": "third", "created_at": "2025-01-01T10:00:00Z"},
            ]
        )
        assert [e.id for e in events] == ["first", "second", "third"]

    def test_timezone_offsets_are_compared_as_instants(self):
        events = normalize_events(
            [
                {"id": "later", "created_at": "2025-01-01T11:30:00+01:00"},
                {"id": "earlier", "created_at": "2025-01-01T10:00:00Z"},
            ]
        )
        assert [e.id for e in events] == ["earlier", "later"]

    def test_unparseable_timestamp_stays_after_predecessor(self):
        events = normalize_events(
            [
                {"id": "b", "created_at": "2025-01-01T10:00:05Z"},
                {"id": "b2", "created_at": "not a date"},
                {"id": "a", "created_at": "2025-01-01T10:00:01Z"},
            ]
        )
        assert [e.id for e in events] == ["a", "b", "b2"]

    def test_leading_unparseable_timestamps_sort_first(self):
        events = normalize_events(
            [
                {"id": "x", "created_at": ""},
                {"id": "a", "created_at": "2025-01-01T10:00:01Z"},
            ]
        )
        assert [e.id for e in events] == ["x", "a"]

    def test_duplicate_ids_are_disambiguated(self):
        events = normalize_events(
            [
                {"id": "e1", "created_at": "2025-01-01T10:00:00Z"},
                {"id": "e1", "created_at": "2025-01-01T10:00:01Z"},
                {"id": "e1", "created_at": "2025-01-01T10:00:02Z"},
            ]
        )
        assert [e.id for e in events] == ["e1", "e1-dup1", "e1-dup2"]

    def test_input_is_not_mutated(self):
        raw = [
            {"id": "b", "created_at": "2025-01-01T10:00:02Z"},
            {"id": "a", "created_at": "2025-01-01T10:00:01Z"},
        ]
        normalize_events(raw)
        assert [r["id"] for r in raw] == ["b", "a"]

    def test_empty_input(self):
        assert normalize_events([]) == []
