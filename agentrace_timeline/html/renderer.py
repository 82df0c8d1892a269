"""Render a compiled timeline as a standalone HTML page."""

from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from ..factories import (
    extract_bash_command,
    extract_command_args,
    extract_command_name,
    extract_command_output,
    tool_result_text,
)
from ..models import BlockType, CompiledTimeline, DisplayBlock
from ..options import DEFAULT_OPTIONS, TimelineOptions
from ..parser import extract_text_content
from ..timings import log_timing
from .utils import (
    escape_html,
    get_template_environment,
    highlight_json,
    pygments_css,
    render_markdown,
)


@dataclass
class PlanLinkView:
    """Link from a plan tool card to its plan document."""

    id: str
    url: str
    changed_status: Optional[str] = None


@dataclass
class BlockView:
    """Template-facing wrapper around a display block."""

    block: DisplayBlock
    body_html: str
    collapsed: bool
    children: list["BlockView"] = field(default_factory=lambda: [])
    plan_links: list[PlanLinkView] = field(default_factory=lambda: [])


# -- Block Body Rendering -----------------------------------------------------


def _render_pre(text: str, css_class: str) -> str:
    return f"<pre class='{css_class}'>{escape_html(text)}</pre>"


def _render_thinking(content: Any) -> str:
    if isinstance(content, dict):
        thinking = content.get("thinking")
        if isinstance(thinking, str):
            return render_markdown(thinking)
        if content.get("type") == "redacted_thinking":
            return "<p class='redacted'>Redacted thinking</p>"
    return highlight_json(content)


def _render_tool_input(content: Any) -> str:
    if isinstance(content, dict) and "input" in content:
        return highlight_json(content["input"])
    return highlight_json(content)


def _render_tool_result(content: Any) -> str:
    text = tool_result_text(content.get("content") if isinstance(content, dict) else content)
    if not text:
        return "<p class='empty'>No output</p>"
    return _render_pre(text, "tool-output")


def _render_command(text: str) -> str:
    name = extract_command_name(text)
    if name is not None:
        args = extract_command_args(text)
        return _render_pre(f"/{name} {args}".rstrip(), "command-line")
    return _render_pre(f"$ {extract_bash_command(text) or ''}", "command-line")


def _render_command_output(text: str) -> str:
    stdout, stderr = extract_command_output(text)
    parts: list[str] = []
    if stdout:
        parts.append(_render_pre(stdout, "stdout"))
    if stderr:
        parts.append(_render_pre(stderr, "stderr"))
    return "".join(parts) or "<p class='empty'>No output</p>"


def render_block_body(block: DisplayBlock) -> str:
    """Render the body HTML of a single block (children excluded)."""
    block_type = block.block_type
    content = block.content

    if block_type in (BlockType.TEXT, BlockType.COMPACT_SUMMARY):
        return render_markdown(extract_text_content(content))
    if block_type == BlockType.THINKING:
        return _render_thinking(content)
    if block_type in (
        BlockType.TOOL_USE,
        BlockType.TOOL_GROUP,
        BlockType.AGENTRACE_TOOL,
    ):
        return _render_tool_input(content)
    if block_type == BlockType.TOOL_RESULT:
        return _render_tool_result(content)
    if block_type in (BlockType.LOCAL_COMMAND, BlockType.LOCAL_COMMAND_GROUP):
        return _render_command(extract_text_content(content))
    if block_type == BlockType.LOCAL_COMMAND_OUTPUT:
        return _render_command_output(extract_text_content(content))
    return highlight_json(content)


def _plan_url(base_url: str, plan_id: str) -> str:
    return f"{base_url.rstrip('/')}/{quote(plan_id, safe='')}"


def build_block_view(
    block: DisplayBlock, options: TimelineOptions = DEFAULT_OPTIONS
) -> BlockView:
    """Build the template view of a block and its children."""
    return BlockView(
        block=block,
        body_html=render_block_body(block),
        collapsed=not block.is_primary,
        children=[build_block_view(child, options) for child in block.child_blocks or []],
        plan_links=[
            PlanLinkView(
                id=link.id,
                url=_plan_url(options.plan_base_url, link.id),
                changed_status=link.changed_status,
            )
            for link in block.plan_links or []
        ],
    )


# -- Page Generation ----------------------------------------------------------


def generate_html(
    timeline: CompiledTimeline,
    title: Optional[str] = None,
    options: Optional[TimelineOptions] = None,
) -> str:
    """Generate the HTML page for a compiled timeline."""
    options = options or DEFAULT_OPTIONS
    title = title or "Session Timeline"

    with log_timing(lambda: f"Build block views ({len(views)} blocks)"):
        views = [build_block_view(block, options) for block in timeline.blocks]

    user_count = sum(1 for info in timeline.message_blocks if info.role == "user")
    assistant_count = len(timeline.message_blocks) - user_count

    with log_timing("Render template"):
        template = get_template_environment().get_template("timeline.html")
        return str(
            template.render(
                title=title,
                blocks=views,
                message_blocks=timeline.message_blocks,
                user_count=user_count,
                assistant_count=assistant_count,
                pygments_css=pygments_css(),
            )
        )
