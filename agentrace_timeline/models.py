"""Models for session events and compiled timeline blocks.

Events are parsed with Pydantic because they arrive as loosely-shaped JSON.
Display blocks are plain dataclasses: they are produced by the compiler and
only read by renderers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class EventType(str, Enum):
    """Event types recognised by the normalizer.

    Using str as base class keeps plain string comparisons working.
    """

    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    UNKNOWN = "unknown"


class BlockType(str, Enum):
    """Display block classification.

    Primitive types are produced by the block expander, composite types
    (groups and agentrace tools) by the pairing and grouping engine.
    """

    # Primitive blocks
    TEXT = "text"
    THINKING = "thinking"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    LOCAL_COMMAND = "local_command"
    LOCAL_COMMAND_OUTPUT = "local_command_output"
    COMPACT_SUMMARY = "compact_summary"
    UNKNOWN = "unknown"

    # Composite blocks
    TOOL_GROUP = "tool_group"
    AGENTRACE_TOOL = "agentrace_tool"
    LOCAL_COMMAND_GROUP = "local_command_group"


# Blocks rendered collapsed and excluded from navigation
SECONDARY_BLOCK_TYPES = frozenset(
    {
        BlockType.THINKING,
        BlockType.TOOL_USE,
        BlockType.TOOL_RESULT,
        BlockType.TOOL_GROUP,
        BlockType.AGENTRACE_TOOL,
        BlockType.LOCAL_COMMAND,
        BlockType.LOCAL_COMMAND_OUTPUT,
        BlockType.LOCAL_COMMAND_GROUP,
        BlockType.COMPACT_SUMMARY,
    }
)


# =============================================================================
# Input Models
# =============================================================================


class Event(BaseModel):
    """One record of a session's event log, as returned by the session API."""

    id: str = ""
    session_id: str = ""
    event_type: str = EventType.UNKNOWN.value
    payload: Any = None
    created_at: str = ""

    model_config = {"frozen": True}

    @property
    def message(self) -> Optional[dict[str, Any]]:
        """The transcript ``message`` object carried by the payload, if any."""
        if isinstance(self.payload, dict):
            message = self.payload.get("message")
            if isinstance(message, dict):
                return message
        return None

    @property
    def display_timestamp(self) -> str:
        """Timestamp recorded by the agent, falling back to ingestion time."""
        if isinstance(self.payload, dict):
            timestamp = self.payload.get("timestamp")
            if isinstance(timestamp, str) and timestamp:
                return timestamp
        return self.created_at

    def payload_flag(self, name: str) -> bool:
        """Return True if the payload carries ``name: true``."""
        return isinstance(self.payload, dict) and self.payload.get(name) is True


# =============================================================================
# Output Models
# =============================================================================


@dataclass(frozen=True)
class BlockLabel:
    """Header text for a block, with an optional short parameter summary."""

    text: str
    params: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.params is not None:
            data["params"] = self.params
        return data


@dataclass(frozen=True)
class PlanLinkInfo:
    """Reference from a plan tool call to a plan document."""

    id: str
    changed_status: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id}
        if self.changed_status is not None:
            data["changedStatus"] = self.changed_status
        return data


@dataclass
class DisplayBlock:
    """One node of the compiled timeline tree.

    ``role`` is set to "user" or "assistant" only for primary conversation
    text; every other block is secondary.

    ``tool_result_id`` is a non-owning reference: the result block itself is
    owned by ``child_blocks`` and looked up by id through
    :attr:`tool_result_block`.
    """

    id: str
    block_type: BlockType
    event_type: str
    timestamp: str
    label: BlockLabel
    content: Any
    role: Optional[str] = None
    child_blocks: Optional[list["DisplayBlock"]] = None
    tool_result_id: Optional[str] = None
    plan_links: Optional[list[PlanLinkInfo]] = None
    # Correlation id for tool_use / tool_result blocks
    tool_use_id: Optional[str] = None
    tool_name: Optional[str] = None
    is_error: bool = False

    @property
    def is_primary(self) -> bool:
        return self.role is not None and self.block_type not in SECONDARY_BLOCK_TYPES

    @property
    def has_children(self) -> bool:
        return bool(self.child_blocks)

    @property
    def tool_result_block(self) -> Optional["DisplayBlock"]:
        """The paired tool result, resolved from this block's own children."""
        if self.tool_result_id is None or not self.child_blocks:
            return None
        for child in self.child_blocks:
            if child.id == self.tool_result_id:
                return child
        return None

    def iter_tree(self):
        """Yield this block and all descendants in pre-order."""
        yield self
        for child in self.child_blocks or []:
            yield from child.iter_tree()

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the field names expected by the web client."""
        data: dict[str, Any] = {
            "id": self.id,
            "blockType": self.block_type.value,
            "eventType": self.event_type,
            "timestamp": self.timestamp,
            "label": self.label.to_dict(),
            "content": self.content,
        }
        if self.role is not None:
            data["role"] = self.role
        if self.child_blocks is not None:
            data["childBlocks"] = [child.to_dict() for child in self.child_blocks]
        result_block = self.tool_result_block
        if result_block is not None:
            # Referenced by id only; the full block is already in childBlocks
            data["toolResultBlock"] = result_block.id
        if self.plan_links is not None:
            data["planLinks"] = [link.to_dict() for link in self.plan_links]
        return data


@dataclass(frozen=True)
class MessageBlockInfo:
    """Navigation entry for one primary user or assistant block."""

    id: str
    role: str
    timestamp: str
    preview: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "timestamp": self.timestamp,
            "preview": self.preview,
        }


@dataclass
class CompiledTimeline:
    """Result of compiling one session's events."""

    blocks: list[DisplayBlock] = field(default_factory=lambda: [])
    message_blocks: list[MessageBlockInfo] = field(default_factory=lambda: [])

    def iter_blocks(self):
        """Yield every block of the tree in pre-order."""
        for block in self.blocks:
            yield from block.iter_tree()

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocks": [block.to_dict() for block in self.blocks],
            "messages": [info.to_dict() for info in self.message_blocks],
        }
