"""Navigation index and active-entry tracking for the message sidebar.

The sidebar lists the primary user and assistant blocks of a compiled
timeline. While the reader scrolls, the active entry is the first indexed
block whose element intersects the viewport band (from the top of the
viewport down to ``band_ratio`` of its height).

``find_active_block`` is the pure algorithm. ``ActiveBlockTracker`` applies the
same rule to callback-driven observers (native intersection events, scroll
polling) and ignores callbacks for blocks that have been unmounted.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .models import BlockType, DisplayBlock, MessageBlockInfo
from .parser import extract_text_content
from .permalinks import fragment_for

logger = logging.getLogger(__name__)

PLACEHOLDER_PREVIEWS = {
    "user": "User message",
    "assistant": "Assistant message",
}

DEFAULT_BAND_RATIO = 0.7


# -- Navigation Index ---------------------------------------------------------


def create_preview(text: str, max_length: int = 100) -> str:
    """Return the first non-empty line of ``text``, truncated."""
    for line in text.splitlines():
        line = line.strip()
        if line:
            if len(line) > max_length:
                return line[:max_length].rstrip() + "..."
            return line
    return ""


def is_navigable(block: DisplayBlock) -> bool:
    """True for top-level primary conversation text blocks."""
    return block.block_type == BlockType.TEXT and block.role in PLACEHOLDER_PREVIEWS


def extract_message_blocks(
    blocks: Iterable[DisplayBlock], preview_length: int = 100
) -> list[MessageBlockInfo]:
    """Build the ordered navigation index from top-level blocks."""
    message_blocks: list[MessageBlockInfo] = []
    for block in blocks:
        if not is_navigable(block):
            continue
        role = block.role or "user"
        preview = create_preview(extract_text_content(block.content), preview_length)
        message_blocks.append(
            MessageBlockInfo(
                id=block.id,
                role=role,
                timestamp=block.timestamp,
                preview=preview or PLACEHOLDER_PREVIEWS[role],
            )
        )
    return message_blocks


# -- Active Entry Tracking ----------------------------------------------------


@dataclass(frozen=True)
class Band:
    """Vertical span of the viewport, in document coordinates."""

    top: float
    bottom: float

    @classmethod
    def for_viewport(
        cls,
        scroll_top: float,
        viewport_height: float,
        band_ratio: float = DEFAULT_BAND_RATIO,
    ) -> "Band":
        return cls(top=scroll_top, bottom=scroll_top + viewport_height * band_ratio)

    def intersects(self, rect: "Rect") -> bool:
        return rect.top < self.bottom and rect.bottom > self.top


@dataclass(frozen=True)
class Rect:
    """Vertical extent of a rendered block element."""

    top: float
    bottom: float


def find_active_block(
    band: Band,
    rects: Mapping[str, Rect],
    order: Iterable[str],
) -> Optional[str]:
    """Return the first block id (in ``order``) whose element meets ``band``.

    Blocks without a known rect (not rendered) are skipped.
    """
    for block_id in order:
        rect = rects.get(block_id)
        if rect is not None and band.intersects(rect):
            return block_id
    return None


@dataclass(frozen=True)
class ScrollRequest:
    """Instruction for the host page to scroll a block into view."""

    element_id: str
    behavior: str = "smooth"
    block: str = "start"


def scroll_request(block_id: str) -> ScrollRequest:
    """Smooth scroll bringing the block to the top of the viewport."""
    return ScrollRequest(element_id=fragment_for(block_id))


class ActiveBlockTracker:
    """Track the active navigation entry from asynchronous observer callbacks.

    Observers report only the entries whose intersection state changed, so
    the set of blocks currently inside the band is accumulated across
    callbacks. Callbacks may arrive after a block's element was unmounted
    (for example when the reader switched sessions); those are ignored, as is
    everything after :meth:`disconnect`. When no observed block intersects,
    the previous active entry is kept.
    """

    def __init__(self, message_blocks: Iterable[MessageBlockInfo]):
        self._order = [info.id for info in message_blocks]
        self._observed: set[str] = set()
        self._intersecting: set[str] = set()
        self._connected = True
        self.active_block_id: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._connected

    def observe(self, block_id: str) -> None:
        if self._connected and block_id in self._order:
            self._observed.add(block_id)

    def unobserve(self, block_id: str) -> None:
        self._observed.discard(block_id)
        self._intersecting.discard(block_id)

    def disconnect(self) -> None:
        self._observed.clear()
        self._intersecting.clear()
        self._connected = False

    def _select_active(self) -> Optional[str]:
        for block_id in self._order:
            if block_id in self._intersecting:
                self.active_block_id = block_id
                break
        return self.active_block_id

    def on_intersection(self, entries: Iterable[tuple[str, bool]]) -> Optional[str]:
        """Handle an intersection callback of ``(block_id, is_intersecting)``.

        The first block inside the band, in index order, becomes active.
        """
        if not self._connected:
            return self.active_block_id
        for block_id, is_intersecting in entries:
            if block_id not in self._observed:
                continue
            if is_intersecting:
                self._intersecting.add(block_id)
            else:
                self._intersecting.discard(block_id)
        return self._select_active()

    def update_geometry(self, band: Band, rects: Mapping[str, Rect]) -> Optional[str]:
        """Recompute the active entry from element geometry (scroll polling)."""
        if not self._connected:
            return self.active_block_id
        self._intersecting = {
            block_id
            for block_id, rect in rects.items()
            if block_id in self._observed and band.intersects(rect)
        }
        return self._select_active()

    def navigate(self, block_id: str) -> Optional[ScrollRequest]:
        """Scroll request for a sidebar click, or None for unknown blocks."""
        if block_id not in self._order:
            logger.debug("Navigation to unknown block %s ignored", block_id)
            return None
        return scroll_request(block_id)
