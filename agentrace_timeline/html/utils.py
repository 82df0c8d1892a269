"""HTML-specific rendering utilities.

This module contains the HTML helpers used by the timeline template:
- CSS class and emoji computation from block type
- HTML escaping and markdown rendering
- JSON highlighting for tool inputs
- Template environment management
"""

import functools
import html
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import mistune
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pygments import highlight  # type: ignore[reportUnknownVariableType]
from pygments.formatters import HtmlFormatter  # type: ignore[reportUnknownVariableType]
from pygments.lexers import JsonLexer, TextLexer, get_lexer_by_name  # type: ignore[reportUnknownVariableType]
from pygments.util import ClassNotFound  # type: ignore[reportUnknownVariableType]

from ..models import BlockType, DisplayBlock
from ..parser import parse_timestamp
from ..permalinks import fragment_for


# -- CSS Class Registry -------------------------------------------------------
# Maps block types to their CSS classes.
# The first class is the base family (user, assistant, tool, command, ...),
# followed by static modifiers.

CSS_CLASS_REGISTRY: dict[BlockType, list[str]] = {
    BlockType.TEXT: ["text"],  # role added dynamically
    BlockType.THINKING: ["thinking"],
    BlockType.TOOL_USE: ["tool", "tool-use"],
    BlockType.TOOL_RESULT: ["tool", "tool-result"],  # error added dynamically
    BlockType.TOOL_GROUP: ["tool", "tool-group"],
    BlockType.AGENTRACE_TOOL: ["tool", "agentrace-tool"],
    BlockType.LOCAL_COMMAND: ["command"],
    BlockType.LOCAL_COMMAND_OUTPUT: ["command", "command-output"],
    BlockType.LOCAL_COMMAND_GROUP: ["command", "command-group"],
    BlockType.COMPACT_SUMMARY: ["compacted"],
    BlockType.UNKNOWN: ["unknown"],
}


def css_class_from_block(block: DisplayBlock) -> str:
    """Generate the CSS class string for a block card.

    Returns:
        Space-separated CSS class string (e.g., "text user" or
        "tool tool-result error")
    """
    parts = list(CSS_CLASS_REGISTRY.get(block.block_type, ["unknown"]))
    if block.block_type == BlockType.TEXT:
        parts.append(block.role or "meta")
    if block.is_error:
        parts.append("error")
    result = block.tool_result_block
    if result is not None and result.is_error:
        parts.append("error")
    return " ".join(parts)


def get_block_emoji(block: DisplayBlock) -> str:
    """Return the emoji shown before a block's label, or an empty string."""
    block_type = block.block_type
    if block_type == BlockType.TEXT:
        if block.role == "user":
            return "🤷"
        if block.role == "assistant":
            return "🤖"
        return ""
    elif block_type == BlockType.THINKING:
        return "💭"
    elif block_type in (BlockType.TOOL_USE, BlockType.TOOL_GROUP):
        return "🛠️"
    elif block_type == BlockType.AGENTRACE_TOOL:
        return "📋"
    elif block_type == BlockType.TOOL_RESULT:
        return "🚨" if block.is_error else "🧰"
    elif block_type in (BlockType.LOCAL_COMMAND, BlockType.LOCAL_COMMAND_GROUP):
        return "💻"
    elif block_type == BlockType.COMPACT_SUMMARY:
        return "📦"
    return ""


# -- HTML Utilities -----------------------------------------------------------


def escape_html(text: str) -> str:
    """Escape HTML special characters in text.

    Also normalizes line endings (CRLF -> LF) to prevent double spacing in <pre> blocks.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return html.escape(normalized)


def format_time(timestamp: Optional[str]) -> str:
    """Format a timestamp as HH:MM:SS (UTC), or "" if it cannot be parsed."""
    dt: Optional[datetime] = parse_timestamp(timestamp)
    if dt is None:
        return ""
    return dt.strftime("%H:%M:%S")


def _create_pygments_plugin() -> Any:
    """Create a mistune plugin that uses Pygments for code block syntax highlighting."""

    def plugin_pygments(md: Any) -> None:
        """Plugin to add Pygments syntax highlighting to code blocks."""
        original_render = md.renderer.block_code

        def block_code(code: str, info: Optional[str] = None) -> str:
            """Render code block with Pygments syntax highlighting if language is specified."""
            if info:
                lang = info.split()[0]
                try:
                    lexer = get_lexer_by_name(lang, stripall=False)  # type: ignore[reportUnknownVariableType]
                except ClassNotFound:
                    lexer = TextLexer()  # type: ignore[reportUnknownVariableType]

                formatter = HtmlFormatter(  # type: ignore[reportUnknownVariableType]
                    linenos=False,
                    cssclass="highlight",
                    wrapcode=True,
                )
                return str(highlight(code, lexer, formatter))  # type: ignore[reportUnknownArgumentType]
            return original_render(code, info)

        md.renderer.block_code = block_code

    return plugin_pygments


@functools.lru_cache(maxsize=1)
def _get_markdown_renderer() -> mistune.Markdown:
    """Get cached Mistune markdown renderer with Pygments syntax highlighting."""
    return mistune.create_markdown(
        plugins=[
            "strikethrough",
            "table",
            "url",
            "task_lists",
            _create_pygments_plugin(),
        ],
        # Session text is untrusted: raw HTML in it is escaped
        escape=True,
        hard_wrap=True,
    )


def render_markdown(text: str) -> str:
    """Convert markdown text to HTML using mistune with Pygments syntax highlighting."""
    renderer = _get_markdown_renderer()
    return str(renderer(text))


def highlight_json(value: Any) -> str:
    """Pretty-print ``value`` as JSON and highlight it with Pygments."""
    try:
        code = json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return f"<pre>{escape_html(repr(value))}</pre>"
    formatter = HtmlFormatter(cssclass="highlight", wrapcode=True)  # type: ignore[reportUnknownVariableType]
    return str(highlight(code, JsonLexer(), formatter))  # type: ignore[reportUnknownArgumentType]


def pygments_css() -> str:
    """CSS rules for the ``highlight`` class used by every highlighted block."""
    return str(HtmlFormatter(cssclass="highlight").get_style_defs(".highlight"))  # type: ignore[reportUnknownMemberType]


# -- Template Environment -----------------------------------------------------


@functools.lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """Get cached Jinja2 template environment for HTML rendering.

    Creates a Jinja2 environment configured with:
    - Template loading from the templates directory
    - HTML auto-escaping
    - Filters for block classes, emojis, times, markdown and JSON

    Returns:
        Configured Jinja2 Environment (cached after first call)
    """
    templates_dir = Path(__file__).parent / "templates"
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["block_class"] = css_class_from_block  # type: ignore[index]
    env.filters["block_emoji"] = get_block_emoji  # type: ignore[index]
    env.filters["time"] = format_time  # type: ignore[index]
    env.filters["fragment"] = fragment_for  # type: ignore[index]
    return env
