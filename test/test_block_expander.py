#!/usr/bin/env python3
"""Tests for expanding events into primitive display blocks."""

from agentrace_timeline.factories import (
    expand_event,
    get_display_path,
    normalize_event,
    plan_tool_operation,
)
from agentrace_timeline.models import BlockType
from agentrace_timeline.options import TimelineOptions


def _expand(raw, options=None):
    event = normalize_event(raw)
    return expand_event(event, options) if options else expand_event(event)


class TestUserAndAssistantText:
    """Tests for text classification in user and assistant turns."""

    def test_string_content_uses_event_id(self, user_event):
        blocks = _expand(user_event("e1", "Hello there"))
        assert len(blocks) == 1
        block = blocks[0]
        assert block.id == "e1"
        assert block.block_type == BlockType.TEXT
        assert block.role == "user"
        assert block.label.text == "User"
        assert block.content == "Hello there"

    def test_list_content_gets_indexed_ids(self, assistant_event):
        blocks = _expand(
            assistant_event(
                "e2",
                [
                    {"type": "thinking", "thinking": "hmm"},
                    {"type": "text", "text": "Answer"},
                ],
            )
        )
        assert [b.id for b in blocks] == ["e2-0", "e2-1"]
        assert [b.block_type for b in blocks] == [BlockType.THINKING, BlockType.TEXT]
        assert blocks[1].role == "assistant"
        assert blocks[0].role is None

    def test_timestamp_prefers_payload_timestamp(self, user_event):
        raw = user_event("e1", "hi", "2025-01-01T10:00:00Z")
        raw["payload"]["timestamp"] = "2025-01-01T09:59:59Z"
        assert _expand(raw)[0].timestamp == "2025-01-01T09:59:59Z"

    def test_meta_user_text_is_secondary(self, user_event):
        blocks = _expand(user_event("e1", "Caveat: injected note", isMeta=True))
        assert blocks[0].block_type == BlockType.TEXT
        assert blocks[0].role is None
        assert blocks[0].label.text == "User (meta)"
        assert not blocks[0].is_primary

    def test_empty_content_list_yields_no_blocks(self, user_event):
        assert _expand(user_event("e1", [])) == []

    def test_missing_message_is_unknown(self):
        blocks = _expand({"id": "e1", "event_type": "user", "payload": {"foo": 1}})
        assert len(blocks) == 1
        assert blocks[0].block_type == BlockType.UNKNOWN
        assert blocks[0].content == {"foo": 1}


class TestLocalCommands:
    """Tests for local command, output and summary recognition."""

    def test_slash_command(self, user_event):
        text = "<command-name>/clear</command-name>\n<command-message>clear</command-message>\n<command-args>all</command-args>"
        block = _expand(user_event("e1", text))[0]
        assert block.block_type == BlockType.LOCAL_COMMAND
        assert block.label.text == "/clear"
        assert block.label.params == "all"
        assert block.role is None

    def test_command_name_must_start_the_text(self, user_event):
        text = "Remember that <command-name>/clear</command-name> wipes history."
        block = _expand(user_event("e1", text))[0]
        assert block.block_type == BlockType.TEXT
        assert block.role == "user"

    def test_bash_input(self, user_event):
        block = _expand(user_event("e1", "<bash-input>ls -la</bash-input>"))[0]
        assert block.block_type == BlockType.LOCAL_COMMAND
        assert block.label.text == "Shell"
        assert block.label.params == "ls -la"

    def test_local_command_output(self, user_event):
        text = "<local-command-stdout>Cleared</local-command-stdout>"
        block = _expand(user_event("e1", text))[0]
        assert block.block_type == BlockType.LOCAL_COMMAND_OUTPUT
        assert block.label.text == "Command Output"

    def test_compact_summary_flag(self, user_event):
        block = _expand(
            user_event("e1", "Summary of earlier work", isCompactSummary=True)
        )[0]
        assert block.block_type == BlockType.COMPACT_SUMMARY
        assert block.role is None

    def test_compact_summary_prefix(self, user_event):
        text = "This session is being continued from a previous conversation that ran out of context. Details..."
        block = _expand(user_event("e1", text))[0]
        assert block.block_type == BlockType.COMPACT_SUMMARY

    def test_compact_summary_takes_priority_over_command(self, user_event):
        text = "<command-name>/compact</command-name>"
        block = _expand(user_event("e1", text, isCompactSummary=True))[0]
        assert block.block_type == BlockType.COMPACT_SUMMARY


class TestToolBlocks:
    """Tests for tool_use and tool_result items and standalone tool events."""

    def test_tool_use_item(self, tool_use_event):
        block = _expand(
            tool_use_event("e3", "toolu_1", "Read", {"file_path": "/repo/src/app.py"})
        )[0]
        assert block.id == "e3-0"
        assert block.block_type == BlockType.TOOL_USE
        assert block.label.text == "Tool: Read"
        assert block.label.params == "app.py"
        assert block.tool_use_id == "toolu_1"
        assert block.tool_name == "Read"

    def test_tool_use_path_relative_to_cwd(self, assistant_event):
        raw = assistant_event(
            "e3",
            [{"type": "tool_use", "id": "t", "name": "Edit", "input": {"file_path": "/repo/src/app.py"}}],
            cwd="/repo",
        )
        assert _expand(raw)[0].label.params == "src/app.py"

    def test_project_path_option_overrides_cwd(self, tool_use_event):
        options = TimelineOptions(project_path="/repo/src")
        block = _expand(
            tool_use_event("e3", "t", "Write", {"file_path": "/repo/src/app.py"}),
            options,
        )[0]
        assert block.label.params == "app.py"

    def test_bash_params_truncated(self, tool_use_event):
        command = "echo " + "x" * 80
        block = _expand(tool_use_event("e3", "t", "Bash", {"command": command}))[0]
        assert block.label.params == command[:50] + "..."

    def test_unknown_tool_has_no_params(self, tool_use_event):
        block = _expand(tool_use_event("e3", "t", "SomethingNew", {"x": 1}))[0]
        assert block.label.text == "Tool: SomethingNew"
        assert block.label.params is None

    def test_tool_result_item(self, tool_result_event):
        block = _expand(tool_result_event("e4", "toolu_1", "done", is_error=True))[0]
        assert block.block_type == BlockType.TOOL_RESULT
        assert block.label.text == "Tool Result"
        assert block.tool_use_id == "toolu_1"
        assert block.is_error is True

    def test_standalone_tool_use_event_with_hook_fields(self):
        blocks = _expand(
            {
                "id": "h1",
                "event_type": "tool_use",
                "payload": {
                    "tool_use_id": "toolu_9",
                    "tool_name": "Grep",
                    "tool_input": {"pattern": "TODO"},
                },
            }
        )
        assert len(blocks) == 1
        assert blocks[0].id == "h1"
        assert blocks[0].block_type == BlockType.TOOL_USE
        assert blocks[0].tool_use_id == "toolu_9"
        assert blocks[0].label.params == "TODO"

    def test_standalone_tool_result_event(self):
        blocks = _expand(
            {
                "id": "h2",
                "event_type": "tool_result",
                "payload": {"tool_use_id": "toolu_9", "tool_response": "3 matches"},
            }
        )
        assert blocks[0].block_type == BlockType.TOOL_RESULT
        assert blocks[0].tool_use_id == "toolu_9"


class TestUnknownElements:
    """Tests for the fallback path."""

    def test_image_item_is_unknown(self, user_event):
        blocks = _expand(
            user_event(
                "e1",
                [
                    {"type": "text", "text": "look"},
                    {"type": "image", "source": {"type": "base64", "data": "AAA"}},
                ],
            )
        )
        assert blocks[1].block_type == BlockType.UNKNOWN
        assert blocks[1].label.params == "image"
        assert blocks[1].content["source"]["data"] == "AAA"

    def test_unknown_event_type(self):
        blocks = _expand({"id": "x", "event_type": "mystery", "payload": [1, 2]})
        assert blocks[0].block_type == BlockType.UNKNOWN
        assert blocks[0].content == [1, 2]

    def test_non_dict_item_is_unknown(self, assistant_event):
        blocks = _expand(assistant_event("e2", [42]))
        assert blocks[0].block_type == BlockType.UNKNOWN
        assert blocks[0].content == 42


class TestDisplayPath:
    """Tests for file path shortening in tool labels."""

    def test_under_cwd(self):
        assert get_display_path("/a/b/c.py", "/a") == "b/c.py"

    def test_sibling_directory(self):
        assert get_display_path("/a/x/c.py", "/a/b") == "../x/c.py"

    def test_too_far_up_uses_file_name(self):
        assert get_display_path("/a/x.py", "/a/b/c/d/e") == "x.py"

    def test_no_cwd_uses_file_name(self):
        assert get_display_path("/a/b/c.py", None) == "c.py"


class TestPlanToolNames:
    """Tests for plan tool recognition."""

    def test_bare_and_qualified_names(self):
        options = TimelineOptions()
        assert plan_tool_operation("create_plan", options) == "create_plan"
        assert plan_tool_operation("mcp__agentrace__set_plan_status", options) == "set_plan_status"

    def test_read_only_and_foreign_tools_are_not_plan_tools(self):
        options = TimelineOptions()
        assert plan_tool_operation("read_plan", options) is None
        assert plan_tool_operation("mcp__other__create_plan", options) is None
        assert plan_tool_operation(None, options) is None
