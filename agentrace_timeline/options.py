"""Configuration for timeline compilation and rendering."""

import os
from dataclasses import dataclass
from typing import Optional


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer")


@dataclass(frozen=True)
class TimelineOptions:
    """Options that influence labels, previews and plan tool recognition.

    Attributes:
        project_path: Project root used to shorten file paths in tool labels.
            Falls back to the ``cwd`` recorded in each event when unset.
        preview_length: Maximum characters of a navigation preview.
        bash_params_max_length: Maximum characters of a Bash command label.
        plan_tool_server: MCP server name that provides the plan tools.
        plan_base_url: URL prefix for plan links in rendered output.
    """

    project_path: Optional[str] = None
    preview_length: int = 100
    bash_params_max_length: int = 50
    plan_tool_server: str = "agentrace"
    plan_base_url: str = "/plans"

    @classmethod
    def from_env(cls, **overrides: object) -> "TimelineOptions":
        """Build options from ``AGENTRACE_TIMELINE_*`` environment variables.

        Keyword overrides that are not None take precedence over the
        environment.
        """
        values: dict[str, object] = {
            "project_path": os.environ.get("AGENTRACE_TIMELINE_PROJECT_PATH")
            or None,
            "preview_length": _int_from_env(
                "AGENTRACE_TIMELINE_PREVIEW_LENGTH", cls.preview_length
            ),
            "plan_base_url": os.environ.get(
                "AGENTRACE_TIMELINE_PLAN_BASE_URL", cls.plan_base_url
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


DEFAULT_OPTIONS = TimelineOptions()
