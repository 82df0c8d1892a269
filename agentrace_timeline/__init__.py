"""Compile recorded agent sessions into navigable timelines."""

from .models import (
    BlockLabel,
    BlockType,
    CompiledTimeline,
    DisplayBlock,
    Event,
    EventType,
    MessageBlockInfo,
    PlanLinkInfo,
)
from .navigation import ActiveBlockTracker, extract_message_blocks, find_active_block
from .options import DEFAULT_OPTIONS, TimelineOptions
from .permalinks import PermalinkIndex, fragment_for, permalink_url, resolve_fragment
from .plan_links import extract_plan_links
from .timeline import compile_timeline

__all__ = [
    # Models
    "BlockLabel",
    "BlockType",
    "CompiledTimeline",
    "DisplayBlock",
    "Event",
    "EventType",
    "MessageBlockInfo",
    "PlanLinkInfo",
    # Compilation
    "compile_timeline",
    "extract_plan_links",
    "DEFAULT_OPTIONS",
    "TimelineOptions",
    # Navigation and permalinks
    "ActiveBlockTracker",
    "extract_message_blocks",
    "find_active_block",
    "PermalinkIndex",
    "fragment_for",
    "permalink_url",
    "resolve_fragment",
]
