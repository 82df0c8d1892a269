"""Extract plan document references from agentrace plan tool calls.

The plan tools reply with plain text such as::

    Plan status updated successfully.

    ID: p-42
    Description: Refactor the loader
    Status: complete

Plan ids are taken from the tool input (``id``) and from ``ID:`` lines or a
JSON ``id`` field in the result. A status change is reported for
``set_plan_status`` and for ``update_plan`` calls whose input carries a
``status``. Failed calls keep their links but never report a status change.
"""

import logging
import re
from typing import Any, Optional

from .factories.tool_factory import plan_tool_operation, tool_result_text
from .models import BlockType, DisplayBlock, PlanLinkInfo
from .options import DEFAULT_OPTIONS, TimelineOptions
from .parser import parse_json_text

logger = logging.getLogger(__name__)

PLAN_ID_PATTERN = re.compile(r"^ID:[ \t]*(\S+)[ \t]*$", re.MULTILINE)
PLAN_STATUS_PATTERN = re.compile(r"^Status:[ \t]*(\S+)[ \t]*$", re.MULTILINE)


def _string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _tool_input(block: DisplayBlock) -> dict[str, Any]:
    if isinstance(block.content, dict):
        tool_input = block.content.get("input")
        if isinstance(tool_input, dict):
            return tool_input
    return {}


def _result_fields(result_text: str) -> tuple[list[str], Optional[str]]:
    """Return (plan ids, status) found in a plan tool result."""
    ids = PLAN_ID_PATTERN.findall(result_text)
    status_match = PLAN_STATUS_PATTERN.search(result_text)
    status = status_match.group(1) if status_match else None

    parsed = parse_json_text(result_text)
    if isinstance(parsed, dict):
        json_id = _string(parsed.get("id"))
        if json_id:
            ids.append(json_id)
        status = status or _string(parsed.get("status"))
    return ids, status


def extract_plan_links(
    block: DisplayBlock, options: TimelineOptions = DEFAULT_OPTIONS
) -> list[PlanLinkInfo]:
    """Derive plan links for an agentrace tool block.

    Returns an empty list for blocks without a recognisable plan reference.
    """
    operation = plan_tool_operation(block.tool_name, options)
    if operation is None:
        return []

    tool_input = _tool_input(block)
    result = block.tool_result_block
    is_error = result.is_error if result is not None else False
    result_text = tool_result_text(result.content) if result is not None else ""
    result_ids, result_status = _result_fields(result_text)

    ids: list[str] = []
    input_id = _string(tool_input.get("id"))
    for plan_id in ([input_id] if input_id else []) + result_ids:
        if plan_id not in ids:
            ids.append(plan_id)
    if not ids:
        logger.debug("No plan id found for %s block %s", operation, block.id)
        return []

    changed_status: Optional[str] = None
    if not is_error:
        if operation == "set_plan_status":
            changed_status = result_status or _string(tool_input.get("status"))
        elif operation == "update_plan":
            changed_status = _string(tool_input.get("status"))

    # The status change applies to the targeted plan, which is listed first
    return [
        PlanLinkInfo(id=plan_id, changed_status=changed_status if i == 0 else None)
        for i, plan_id in enumerate(ids)
    ]


def attach_plan_links(
    blocks: list[DisplayBlock], options: TimelineOptions = DEFAULT_OPTIONS
) -> None:
    """Populate ``plan_links`` on every top-level agentrace tool block."""
    for block in blocks:
        if block.block_type == BlockType.AGENTRACE_TOOL:
            block.plan_links = extract_plan_links(block, options)
