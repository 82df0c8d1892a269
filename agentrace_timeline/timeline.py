"""Compile a session's event log into a tree of display blocks.

This is the format-neutral step shared by every renderer:

1. Normalize and stable-sort the events (factories.event_factory)
2. Expand each event into primitive blocks (factories.block_factory)
3. Pair tool uses with their results into tool groups
4. Fold local commands with their output into local command groups
5. Re-tag plan tool groups as agentrace tools and extract their plan links
6. Build the navigation index

The pipeline is a pure function of its input: no clock, randomness or
external state is consulted, so the same events always give the same tree.
"""

import logging
import time
from collections import deque
from dataclasses import replace
from typing import Iterable, Optional

from .factories import expand_events, normalize_events
from .factories.event_factory import RawEvent
from .factories.tool_factory import is_plan_tool
from .models import BlockType, CompiledTimeline, DisplayBlock
from .navigation import extract_message_blocks
from .options import DEFAULT_OPTIONS, TimelineOptions
from .plan_links import attach_plan_links
from .timings import log_timing

logger = logging.getLogger(__name__)

# Blocks that may follow a local command inside its group
LOCAL_COMMAND_CHILD_TYPES = (
    BlockType.LOCAL_COMMAND_OUTPUT,
    BlockType.COMPACT_SUMMARY,
)


# -- Tool Pairing -------------------------------------------------------------


def _make_tool_group(tool_use: DisplayBlock, tool_result: DisplayBlock) -> DisplayBlock:
    return replace(
        tool_use,
        block_type=BlockType.TOOL_GROUP,
        child_blocks=[tool_result],
        tool_result_id=tool_result.id,
    )


def pair_tool_blocks(blocks: list[DisplayBlock]) -> list[DisplayBlock]:
    """Pair each tool_use with the first later tool_result sharing its id.

    The look-ahead covers the remainder of the session. When several
    unmatched tool uses share a correlation id, results are assigned in
    FIFO order. A result consumed by one tool use is never reused, and
    results without a pending tool use (or without an id) stay standalone.
    """
    pending: dict[str, deque[int]] = {}
    paired: list[DisplayBlock] = []

    for block in blocks:
        if block.block_type == BlockType.TOOL_USE:
            paired.append(block)
            if block.tool_use_id:
                pending.setdefault(block.tool_use_id, deque()).append(len(paired) - 1)
            continue

        if block.block_type == BlockType.TOOL_RESULT and block.tool_use_id:
            waiting = pending.get(block.tool_use_id)
            if waiting:
                index = waiting.popleft()
                paired[index] = _make_tool_group(paired[index], block)
                continue
            logger.debug("Tool result %s has no pending tool use", block.id)

        paired.append(block)

    return paired


# -- Local Command Grouping ---------------------------------------------------


def _is_meta_note(block: DisplayBlock) -> bool:
    """Agent-injected user text (e.g. the local command caveat)."""
    return block.block_type == BlockType.TEXT and block.role is None


def group_local_commands(blocks: list[DisplayBlock]) -> list[DisplayBlock]:
    """Fold each local command and its contiguous output into one group.

    Output and compaction summary blocks directly following a command become
    the group's children, in source order. Meta notes recorded with the same
    timestamp as the command (written just before it) and meta notes between
    the command and its output are folded in as well, since they are not
    primary blocks.
    """
    grouped: list[DisplayBlock] = []
    i = 0
    while i < len(blocks):
        block = blocks[i]
        if block.block_type != BlockType.LOCAL_COMMAND:
            grouped.append(block)
            i += 1
            continue

        children: list[DisplayBlock] = []
        while (
            grouped
            and _is_meta_note(grouped[-1])
            and grouped[-1].timestamp == block.timestamp
        ):
            children.insert(0, grouped.pop())

        j = i + 1
        while j < len(blocks):
            candidate = blocks[j]
            if candidate.block_type in LOCAL_COMMAND_CHILD_TYPES:
                children.append(candidate)
            elif _is_meta_note(candidate) and _followed_by_output(blocks, j):
                children.append(candidate)
            else:
                break
            j += 1

        grouped.append(
            replace(
                block,
                block_type=BlockType.LOCAL_COMMAND_GROUP,
                child_blocks=children,
            )
        )
        i = j

    return grouped


def _followed_by_output(blocks: list[DisplayBlock], index: int) -> bool:
    """True if the meta notes starting at ``index`` lead to command output."""
    for block in blocks[index:]:
        if _is_meta_note(block):
            continue
        return block.block_type in LOCAL_COMMAND_CHILD_TYPES
    return False


# -- Plan Tool Recognition ----------------------------------------------------


def tag_plan_tools(
    blocks: list[DisplayBlock], options: TimelineOptions = DEFAULT_OPTIONS
) -> None:
    """Re-tag tool groups of the plan create/update tools as agentrace tools."""
    for block in blocks:
        if block.block_type == BlockType.TOOL_GROUP and is_plan_tool(
            block.tool_name, options
        ):
            block.block_type = BlockType.AGENTRACE_TOOL


# -- Id Uniqueness ------------------------------------------------------------


def _ensure_unique_ids(blocks: list[DisplayBlock], seen: set[str]) -> None:
    """Rename blocks whose id collides with an earlier block in the tree.

    Event ids are unique after normalization, so a collision needs an event
    id that looks like a derived one (``a`` and ``a-0``). Renaming is
    deterministic: ``<id>-dup<n>`` with the smallest free n.
    """
    for block in blocks:
        if block.id in seen:
            n = 1
            while f"{block.id}-dup{n}" in seen:
                n += 1
            new_id = f"{block.id}-dup{n}"
            logger.debug("Block id %s renamed to %s", block.id, new_id)
            block.id = new_id
        seen.add(block.id)

        if block.child_blocks:
            old_result_id = block.tool_result_id
            result = block.tool_result_block
            _ensure_unique_ids(block.child_blocks, seen)
            if result is not None and result.id != old_result_id:
                block.tool_result_id = result.id


# -- Pipeline -----------------------------------------------------------------


def build_blocks(
    raw_events: Iterable[RawEvent],
    options: TimelineOptions = DEFAULT_OPTIONS,
    t_start: Optional[float] = None,
) -> list[DisplayBlock]:
    """Run the block pipeline and return the top-level block sequence."""
    with log_timing(lambda: f"Normalize events ({len(events)} events)", t_start):
        events = normalize_events(raw_events)

    with log_timing(lambda: f"Expand events ({len(blocks)} blocks)", t_start):
        blocks = expand_events(events, options)

    with log_timing("Pair tool blocks", t_start):
        blocks = pair_tool_blocks(blocks)

    with log_timing("Group local commands", t_start):
        blocks = group_local_commands(blocks)

    with log_timing("Extract plan links", t_start):
        tag_plan_tools(blocks, options)
        attach_plan_links(blocks, options)

    _ensure_unique_ids(blocks, set())
    return blocks


def compile_timeline(
    raw_events: Iterable[RawEvent],
    options: Optional[TimelineOptions] = None,
) -> CompiledTimeline:
    """Compile a session's events into display blocks and a navigation index.

    Never raises for malformed input: unrecognised events and elements are
    kept as ``unknown`` blocks. An empty event list yields an empty timeline.
    """
    options = options or DEFAULT_OPTIONS
    t_start = time.perf_counter()

    blocks = build_blocks(raw_events, options, t_start)

    with log_timing(
        lambda: f"Build navigation index ({len(message_blocks)} entries)", t_start
    ):
        message_blocks = extract_message_blocks(blocks, options.preview_length)

    return CompiledTimeline(blocks=blocks, message_blocks=message_blocks)
