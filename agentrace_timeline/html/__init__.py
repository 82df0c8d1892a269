"""HTML rendering of compiled timelines.

Re-exports the page generator and the helpers used by the template.
"""

from .renderer import (
    BlockView,
    PlanLinkView,
    build_block_view,
    generate_html,
    render_block_body,
)
from .utils import (
    css_class_from_block,
    escape_html,
    format_time,
    get_block_emoji,
    get_template_environment,
    highlight_json,
    render_markdown,
)

__all__ = [
    # Page generation
    "BlockView",
    "PlanLinkView",
    "build_block_view",
    "generate_html",
    "render_block_body",
    # Template helpers
    "css_class_from_block",
    "escape_html",
    "format_time",
    "get_block_emoji",
    "get_template_environment",
    "highlight_json",
    "render_markdown",
]
