#!/usr/bin/env python3
"""Tests for grouping local commands with their output."""

from agentrace_timeline import compile_timeline
from agentrace_timeline.models import BlockType

CAVEAT = "Caveat: The messages below were generated by the user while running local commands."
CLEAR = "<command-name>/clear</command-name>\n<command-message>clear</command-message>\n<command-args></command-args>"
STDOUT = "<local-command-stdout>Conversation cleared</local-command-stdout>"


class TestLocalCommandGrouping:
    """Tests for local_command_group construction."""

    def test_command_with_output(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                user_event("o", STDOUT, "2025-01-01T10:00:01Z"),
            ]
        )
        assert len(timeline.blocks) == 1
        group = timeline.blocks[0]
        assert group.block_type == BlockType.LOCAL_COMMAND_GROUP
        assert group.id == "c"
        assert group.label.text == "/clear"
        assert [c.id for c in group.child_blocks] == ["o"]
        assert group.child_blocks[0].block_type == BlockType.LOCAL_COMMAND_OUTPUT

    def test_command_without_output_is_empty_group(self, user_event, assistant_event):
        timeline = compile_timeline(
            [
                user_event("c", "<bash-input>pwd</bash-input>", "2025-01-01T10:00:00Z"),
                assistant_event("a", "Next", "2025-01-01T10:00:01Z"),
            ]
        )
        group = timeline.blocks[0]
        assert group.block_type == BlockType.LOCAL_COMMAND_GROUP
        assert group.child_blocks == []
        assert timeline.blocks[1].id == "a"

    def test_multiple_outputs_keep_source_order(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", "<bash-input>make</bash-input>", "2025-01-01T10:00:00Z"),
                user_event("o1", "<bash-stdout>built</bash-stdout>", "2025-01-01T10:00:01Z"),
                user_event("o2", "<bash-stderr>warning</bash-stderr>", "2025-01-01T10:00:02Z"),
            ]
        )
        assert [c.id for c in timeline.blocks[0].child_blocks] == ["o1", "o2"]

    def test_output_separated_by_conversation_is_not_grouped(
        self, user_event, assistant_event
    ):
        timeline = compile_timeline(
            [
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                assistant_event("a", "Hello", "2025-01-01T10:00:01Z"),
                user_event("o", STDOUT, "2025-01-01T10:00:02Z"),
            ]
        )
        assert [b.block_type for b in timeline.blocks] == [
            BlockType.LOCAL_COMMAND_GROUP,
            BlockType.TEXT,
            BlockType.LOCAL_COMMAND_OUTPUT,
        ]
        assert timeline.blocks[0].child_blocks == []

    def test_meta_caveat_with_same_timestamp_is_folded_in(self, user_event):
        timeline = compile_timeline(
            [
                user_event("m", CAVEAT, "2025-01-01T10:00:00Z", isMeta=True),
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                user_event("o", STDOUT, "2025-01-01T10:00:01Z"),
            ]
        )
        assert len(timeline.blocks) == 1
        assert [c.id for c in timeline.blocks[0].child_blocks] == ["m", "o"]

    def test_meta_note_between_command_and_output_is_folded_in(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                user_event("m", CAVEAT, "2025-01-01T10:00:01Z", isMeta=True),
                user_event("o", STDOUT, "2025-01-01T10:00:02Z"),
            ]
        )
        assert [c.id for c in timeline.blocks[0].child_blocks] == ["m", "o"]

    def test_trailing_meta_note_without_output_stays_top_level(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                user_event("m", CAVEAT, "2025-01-01T10:00:01Z", isMeta=True),
            ]
        )
        assert [b.id for b in timeline.blocks] == ["c", "m"]

    def test_compact_summary_after_command_is_child(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", "<command-name>/compact</command-name>", "2025-01-01T10:00:00Z"),
                user_event("s", "Summary of the work so far", "2025-01-01T10:00:01Z", isCompactSummary=True),
            ]
        )
        group = timeline.blocks[0]
        assert group.child_blocks[0].block_type == BlockType.COMPACT_SUMMARY

    def test_orphan_output_stays_standalone(self, user_event):
        timeline = compile_timeline([user_event("o", STDOUT)])
        assert timeline.blocks[0].block_type == BlockType.LOCAL_COMMAND_OUTPUT

    def test_command_group_is_not_navigable(self, user_event):
        timeline = compile_timeline(
            [
                user_event("c", CLEAR, "2025-01-01T10:00:00Z"),
                user_event("o", STDOUT, "2025-01-01T10:00:01Z"),
            ]
        )
        assert timeline.message_blocks == []
