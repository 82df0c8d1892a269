"""Factory modules for creating typed objects from raw event data."""

from .event_factory import (
    # Event normalization
    normalize_event,
    normalize_events,
    synthetic_event_id,
    RECOGNISED_EVENT_TYPES,
)
from .block_factory import (
    # Block expansion
    expand_event,
    expand_events,
    expand_item,
    create_unknown_block,
    ITEM_MATCHERS,
)
from .user_factory import (
    # User message type detection
    is_compact_summary,
    is_local_command,
    is_local_command_output,
    # Tag extraction
    extract_bash_command,
    extract_command_args,
    extract_command_name,
    extract_command_output,
    # Patterns and constants
    COMPACTED_SUMMARY_PREFIX,
)
from .tool_factory import (
    # Tool labels
    extract_tool_params,
    get_display_path,
    tool_result_text,
    TOOL_PARAMS_EXTRACTORS,
    # Plan tool recognition
    is_plan_tool,
    plan_tool_operation,
    PLAN_TOOL_OPERATIONS,
)

__all__ = [
    # Event normalization
    "normalize_event",
    "normalize_events",
    "synthetic_event_id",
    "RECOGNISED_EVENT_TYPES",
    # Block expansion
    "expand_event",
    "expand_events",
    "expand_item",
    "create_unknown_block",
    "ITEM_MATCHERS",
    # User message type detection
    "is_compact_summary",
    "is_local_command",
    "is_local_command_output",
    # Tag extraction
    "extract_bash_command",
    "extract_command_args",
    "extract_command_name",
    "extract_command_output",
    # Patterns and constants
    "COMPACTED_SUMMARY_PREFIX",
    # Tool labels
    "extract_tool_params",
    "get_display_path",
    "tool_result_text",
    "TOOL_PARAMS_EXTRACTORS",
    # Plan tool recognition
    "is_plan_tool",
    "plan_tool_operation",
    "PLAN_TOOL_OPERATIONS",
]
