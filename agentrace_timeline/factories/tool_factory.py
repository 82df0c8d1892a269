"""Factory for tool use and tool result blocks.

This module handles creation of tool-related DisplayBlocks:
- tool_use: tool invocations, labelled with the tool name and a short
  parameter summary extracted per tool
- tool_result: tool outcomes, carrying the correlation id and error flag

Also provides:
- TOOL_PARAMS_EXTRACTORS: per-tool label parameter extraction
- get_display_path(): shorten absolute file paths for labels
- is_plan_tool(): recognise the session's own plan-management tools
"""

import re
from typing import Any, Callable, Optional

from ..models import BlockLabel, BlockType, DisplayBlock
from ..options import TimelineOptions


# =============================================================================
# Display Paths
# =============================================================================


def get_display_path(file_path: str, cwd: Optional[str]) -> str:
    """Return ``file_path`` relative to ``cwd`` when reasonable.

    - Under cwd: the relative path
    - Within three directories above cwd: a ``../`` path
    - Otherwise: just the file name
    """
    if not file_path:
        return ""

    file_name = file_path.rstrip("/").split("/")[-1] or file_path
    if not cwd:
        return file_name

    normalized_cwd = cwd.rstrip("/")
    normalized_path = file_path.rstrip("/")

    if normalized_path.startswith(normalized_cwd + "/"):
        return normalized_path[len(normalized_cwd) + 1 :]

    cwd_parts = normalized_cwd.split("/")
    path_parts = normalized_path.split("/")
    common_length = 0
    for cwd_part, path_part in zip(cwd_parts, path_parts):
        if cwd_part != path_part:
            break
        common_length += 1

    if common_length > 0:
        up_count = len(cwd_parts) - common_length
        if up_count <= 3:
            return "../" * up_count + "/".join(path_parts[common_length:])

    return file_name


# =============================================================================
# Tool Params Extractors
# =============================================================================


class ParamsContext:
    """Context available to params extractors."""

    def __init__(self, options: TimelineOptions, cwd: Optional[str] = None):
        self.options = options
        self.cwd = cwd

    @property
    def base_path(self) -> Optional[str]:
        return self.options.project_path or self.cwd


ToolParamsExtractor = Callable[[dict[str, Any], ParamsContext], Optional[str]]


def _string_field(name: str) -> ToolParamsExtractor:
    def extract(tool_input: dict[str, Any], ctx: ParamsContext) -> Optional[str]:
        value = tool_input.get(name)
        return value if isinstance(value, str) and value else None

    return extract


def _file_path_params(tool_input: dict[str, Any], ctx: ParamsContext) -> Optional[str]:
    file_path = tool_input.get("file_path") or tool_input.get("notebook_path")
    if not isinstance(file_path, str) or not file_path:
        return None
    return get_display_path(file_path, ctx.base_path)


def _bash_params(tool_input: dict[str, Any], ctx: ParamsContext) -> Optional[str]:
    command = tool_input.get("command")
    if not isinstance(command, str) or not command:
        return None
    max_length = ctx.options.bash_params_max_length
    return command[:max_length] + "..." if len(command) > max_length else command


TOOL_PARAMS_EXTRACTORS: dict[str, ToolParamsExtractor] = {
    "Read": _file_path_params,
    "Edit": _file_path_params,
    "MultiEdit": _file_path_params,
    "Write": _file_path_params,
    "NotebookEdit": _file_path_params,
    "Bash": _bash_params,
    "Task": _string_field("description"),
    "Glob": _string_field("pattern"),
    "Grep": _string_field("pattern"),
    "WebFetch": _string_field("url"),
    "WebSearch": _string_field("query"),
}


def extract_tool_params(
    tool_name: str,
    tool_input: Any,
    ctx: ParamsContext,
) -> Optional[str]:
    """Return the label parameter summary for a tool call, if any."""
    if not isinstance(tool_input, dict):
        return None
    extractor = TOOL_PARAMS_EXTRACTORS.get(tool_name)
    if extractor is None and plan_tool_operation(tool_name, ctx.options):
        extractor = _string_field("id")
    return extractor(tool_input, ctx) if extractor else None


# =============================================================================
# Plan Tool Recognition
# =============================================================================

# Plan tools that create or modify a plan document
PLAN_TOOL_OPERATIONS = ("create_plan", "update_plan", "set_plan_status")


def plan_tool_operation(tool_name: Optional[str], options: TimelineOptions) -> Optional[str]:
    """Return the plan operation for a plan create/update tool name.

    Accepts both the bare tool name and the MCP-qualified form
    ``mcp__<server>__<operation>``.
    """
    if not tool_name:
        return None
    pattern = re.compile(
        rf"^(?:mcp__{re.escape(options.plan_tool_server)}__)?"
        rf"({'|'.join(PLAN_TOOL_OPERATIONS)})$"
    )
    match = pattern.match(tool_name)
    return match.group(1) if match else None


def is_plan_tool(tool_name: Optional[str], options: TimelineOptions) -> bool:
    return plan_tool_operation(tool_name, options) is not None


# =============================================================================
# Block Creation
# =============================================================================


def _correlation_id(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def create_tool_use_block(
    block_id: str,
    item: dict[str, Any],
    event_type: str,
    timestamp: str,
    ctx: ParamsContext,
) -> DisplayBlock:
    """Create a tool_use block from a ``tool_use`` content item."""
    raw_name = item.get("name")
    tool_name = raw_name if isinstance(raw_name, str) and raw_name else "Unknown"
    params = extract_tool_params(tool_name, item.get("input"), ctx)
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.TOOL_USE,
        event_type=event_type,
        timestamp=timestamp,
        label=BlockLabel(text=f"Tool: {tool_name}", params=params),
        content=item,
        tool_use_id=_correlation_id(item.get("id")),
        tool_name=tool_name,
    )


def create_tool_result_block(
    block_id: str,
    item: dict[str, Any],
    event_type: str,
    timestamp: str,
) -> DisplayBlock:
    """Create a tool_result block from a ``tool_result`` content item."""
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.TOOL_RESULT,
        event_type=event_type,
        timestamp=timestamp,
        label=BlockLabel(text="Tool Result"),
        content=item,
        tool_use_id=_correlation_id(item.get("tool_use_id")),
        is_error=item.get("is_error") is True,
    )


def tool_result_text(content: Any) -> str:
    """Flatten tool result content (string or list of items) into text."""
    if isinstance(content, dict):
        content = content.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "\n".join(parts)
    return ""
