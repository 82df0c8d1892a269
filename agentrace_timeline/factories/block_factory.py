"""Factory for expanding normalized events into primitive display blocks.

Each content element of an event is classified by an ordered list of shape
matchers. A matcher returns a block or None; the first match wins and
anything left unmatched becomes an ``unknown`` block that preserves the raw
element. Matchers are side-effect free, so their order is the only
tie-break rule.

Block ids are ``<event id>-<index>`` for elements of a content list and the
bare event id for single-element events, so recompiling the same events
always reproduces the same ids.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..models import BlockLabel, BlockType, DisplayBlock, Event, EventType
from ..options import DEFAULT_OPTIONS, TimelineOptions
from .assistant_factory import (
    THINKING_ITEM_TYPES,
    create_assistant_text_block,
    create_thinking_block,
)
from .tool_factory import ParamsContext, create_tool_result_block, create_tool_use_block
from .user_factory import create_user_text_block

logger = logging.getLogger(__name__)


@dataclass
class ExpansionContext:
    """Per-event state shared by the matchers."""

    event: Event
    timestamp: str
    options: TimelineOptions

    @property
    def params_context(self) -> ParamsContext:
        cwd = None
        if isinstance(self.event.payload, dict):
            raw_cwd = self.event.payload.get("cwd")
            cwd = raw_cwd if isinstance(raw_cwd, str) else None
        return ParamsContext(self.options, cwd=cwd)


ItemMatcher = Callable[[ExpansionContext, str, Any], Optional[DisplayBlock]]


def _item_type(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        item_type = item.get("type")
        return item_type if isinstance(item_type, str) else None
    return None


# =============================================================================
# Item Matchers
# =============================================================================


def _match_text(ctx: ExpansionContext, block_id: str, item: Any) -> Optional[DisplayBlock]:
    if isinstance(item, str):
        text = item
    elif _item_type(item) == "text" and isinstance(item.get("text"), str):
        text = item["text"]
    else:
        return None

    if ctx.event.event_type == EventType.USER:
        return create_user_text_block(
            ctx.event,
            block_id,
            text,
            item,
            ctx.timestamp,
            ctx.options.bash_params_max_length,
        )
    return create_assistant_text_block(ctx.event, block_id, item, ctx.timestamp)


def _match_tool_result(
    ctx: ExpansionContext, block_id: str, item: Any
) -> Optional[DisplayBlock]:
    if _item_type(item) != "tool_result":
        return None
    return create_tool_result_block(block_id, item, ctx.event.event_type, ctx.timestamp)


def _match_tool_use(ctx: ExpansionContext, block_id: str, item: Any) -> Optional[DisplayBlock]:
    if _item_type(item) != "tool_use":
        return None
    return create_tool_use_block(
        block_id, item, ctx.event.event_type, ctx.timestamp, ctx.params_context
    )


def _match_thinking(ctx: ExpansionContext, block_id: str, item: Any) -> Optional[DisplayBlock]:
    if _item_type(item) not in THINKING_ITEM_TYPES:
        return None
    return create_thinking_block(ctx.event, block_id, item, ctx.timestamp)


# Priority order; text covers summaries and local commands before plain text
ITEM_MATCHERS: tuple[ItemMatcher, ...] = (
    _match_text,
    _match_tool_result,
    _match_tool_use,
    _match_thinking,
)


def create_unknown_block(
    event: Event, block_id: str, content: Any, timestamp: str
) -> DisplayBlock:
    """Fallback block that keeps the raw content for generic rendering."""
    item_type = _item_type(content)
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.UNKNOWN,
        event_type=event.event_type,
        timestamp=timestamp,
        label=BlockLabel(text="Unknown", params=item_type),
        content=content,
    )


def expand_item(ctx: ExpansionContext, block_id: str, item: Any) -> DisplayBlock:
    """Classify a single content element."""
    for matcher in ITEM_MATCHERS:
        block = matcher(ctx, block_id, item)
        if block is not None:
            return block
    logger.debug("Unrecognised content element in event %s", ctx.event.id)
    return create_unknown_block(ctx.event, block_id, item, ctx.timestamp)


# =============================================================================
# Standalone Tool Events
# =============================================================================


def _first_present(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _tool_use_item(payload: dict[str, Any]) -> dict[str, Any]:
    """Build a tool_use item from a tool_use event payload.

    Accepts both content-item field names and hook field names.
    """
    return {
        "type": "tool_use",
        "id": _first_present(payload, "id", "tool_use_id"),
        "name": _first_present(payload, "name", "tool_name"),
        "input": _first_present(payload, "input", "tool_input"),
    }


def _tool_result_item(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "tool_result",
        "tool_use_id": _first_present(payload, "tool_use_id", "id"),
        "content": _first_present(payload, "content", "tool_response"),
        "is_error": payload.get("is_error") is True,
    }


# =============================================================================
# Event Expansion
# =============================================================================


def expand_event(
    event: Event, options: TimelineOptions = DEFAULT_OPTIONS
) -> list[DisplayBlock]:
    """Expand one normalized event into its primitive blocks, in order."""
    ctx = ExpansionContext(
        event=event, timestamp=event.display_timestamp, options=options
    )
    payload = event.payload

    if event.event_type in (EventType.USER, EventType.ASSISTANT):
        message = event.message
        content = message.get("content") if message is not None else None
        if isinstance(content, str):
            return [expand_item(ctx, event.id, content)]
        if isinstance(content, list):
            return [
                expand_item(ctx, f"{event.id}-{index}", item)
                for index, item in enumerate(content)
            ]
        logger.debug("Event %s has no message content", event.id)
        return [create_unknown_block(event, event.id, payload, ctx.timestamp)]

    if event.event_type == EventType.TOOL_USE and isinstance(payload, dict):
        return [
            create_tool_use_block(
                event.id,
                _tool_use_item(payload),
                event.event_type,
                ctx.timestamp,
                ctx.params_context,
            )
        ]

    if event.event_type == EventType.TOOL_RESULT and isinstance(payload, dict):
        return [
            create_tool_result_block(
                event.id, _tool_result_item(payload), event.event_type, ctx.timestamp
            )
        ]

    return [create_unknown_block(event, event.id, payload, ctx.timestamp)]


def expand_events(
    events: list[Event], options: TimelineOptions = DEFAULT_OPTIONS
) -> list[DisplayBlock]:
    """Expand a session's normalized events into a flat primitive sequence."""
    blocks: list[DisplayBlock] = []
    for event in events:
        blocks.extend(expand_event(event, options))
    return blocks
