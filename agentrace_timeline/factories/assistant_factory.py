"""Factory for blocks produced by assistant turns.

- text: the assistant's prose, rendered as markdown
- thinking: extended thinking / reasoning segments
"""

from ..models import BlockLabel, BlockType, DisplayBlock, Event

THINKING_ITEM_TYPES = ("thinking", "redacted_thinking")


def create_assistant_text_block(
    event: Event,
    block_id: str,
    content: object,
    timestamp: str,
) -> DisplayBlock:
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.TEXT,
        event_type=event.event_type,
        timestamp=timestamp,
        label=BlockLabel(text="Assistant"),
        content=content,
        role="assistant",
    )


def create_thinking_block(
    event: Event,
    block_id: str,
    content: object,
    timestamp: str,
) -> DisplayBlock:
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.THINKING,
        event_type=event.event_type,
        timestamp=timestamp,
        label=BlockLabel(text="Thinking"),
        content=content,
    )
