"""Factory for blocks embedded in user turns.

The transcript format does not distinguish local shell commands, their
output, or compaction summaries from ordinary user turns at the top level.
They are recognised here by structural markers in the text:
- local_command: ``<command-name>/...`` slash commands and ``<bash-input>``
- local_command_output: ``<local-command-stdout>``, ``<bash-stdout>``,
  ``<bash-stderr>``
- compact_summary: the ``isCompactSummary`` payload flag or the
  continuation prefix written by the agent

Also provides helpers used by renderers to pull the command name, arguments
and output out of the tagged text.
"""

import re
from typing import Optional

from ..models import BlockLabel, BlockType, DisplayBlock, Event


# =============================================================================
# Patterns and Constants
# =============================================================================

COMPACTED_SUMMARY_PREFIX = "This session is being continued from a previous conversation that ran out of context"

COMMAND_NAME_PATTERN = re.compile(r"<command-name>/?([^<]+)</command-name>")
COMMAND_ARGS_PATTERN = re.compile(r"<command-args>([^<]*)</command-args>")
LOCAL_COMMAND_STDOUT_PATTERN = re.compile(
    r"<local-command-stdout>(.*?)</local-command-stdout>", re.DOTALL
)
BASH_INPUT_PATTERN = re.compile(r"<bash-input>(.*?)</bash-input>", re.DOTALL)
BASH_STDOUT_PATTERN = re.compile(r"<bash-stdout>(.*?)</bash-stdout>", re.DOTALL)
BASH_STDERR_PATTERN = re.compile(r"<bash-stderr>(.*?)</bash-stderr>", re.DOTALL)


# =============================================================================
# Message Type Detection
# =============================================================================


def is_slash_command(text: str) -> bool:
    """Check if text is a local slash command echo.

    Must start with the tag: summaries often mention the pattern in prose.
    """
    return text.lstrip().startswith("<command-name>/")


def is_bash_input(text: str) -> bool:
    return "<bash-input>" in text and "</bash-input>" in text


def is_local_command(text: str) -> bool:
    return is_slash_command(text) or is_bash_input(text)


def is_local_command_output(text: str) -> bool:
    return (
        "<local-command-stdout>" in text
        or "<bash-stdout>" in text
        or "<bash-stderr>" in text
    )


def is_compact_summary(event: Event, text: str) -> bool:
    return event.payload_flag("isCompactSummary") or text.startswith(
        COMPACTED_SUMMARY_PREFIX
    )


# =============================================================================
# Tag Extraction
# =============================================================================


def extract_command_name(text: str) -> Optional[str]:
    match = COMMAND_NAME_PATTERN.search(text)
    return match.group(1).strip() if match else None


def extract_command_args(text: str) -> str:
    match = COMMAND_ARGS_PATTERN.search(text)
    return match.group(1).strip() if match else ""


def extract_bash_command(text: str) -> Optional[str]:
    match = BASH_INPUT_PATTERN.search(text)
    return match.group(1).strip() if match else None


def extract_command_output(text: str) -> tuple[str, str]:
    """Return (stdout, stderr) from local command output text."""
    stdout_parts = [m.group(1) for m in LOCAL_COMMAND_STDOUT_PATTERN.finditer(text)]
    stdout_parts += [m.group(1) for m in BASH_STDOUT_PATTERN.finditer(text)]
    stderr_parts = [m.group(1) for m in BASH_STDERR_PATTERN.finditer(text)]
    return (
        "\n".join(part.strip() for part in stdout_parts).strip(),
        "\n".join(part.strip() for part in stderr_parts).strip(),
    )


# =============================================================================
# Block Creation
# =============================================================================


def _command_label(text: str, max_length: int) -> BlockLabel:
    if is_slash_command(text):
        name = extract_command_name(text) or "command"
        args = extract_command_args(text)
        return BlockLabel(text=f"/{name}", params=args or None)

    command = extract_bash_command(text) or ""
    if len(command) > max_length:
        command = command[:max_length] + "..."
    return BlockLabel(text="Shell", params=command or None)


def create_user_text_block(
    event: Event,
    block_id: str,
    text: str,
    content: object,
    timestamp: str,
    bash_params_max_length: int = 50,
) -> DisplayBlock:
    """Classify text from a user turn and create its block.

    Priority: compaction summary, local command, local command output,
    then plain text.
    """
    event_type = event.event_type

    if is_compact_summary(event, text):
        return DisplayBlock(
            id=block_id,
            block_type=BlockType.COMPACT_SUMMARY,
            event_type=event_type,
            timestamp=timestamp,
            label=BlockLabel(text="Summary"),
            content=content,
        )

    if is_local_command(text):
        return DisplayBlock(
            id=block_id,
            block_type=BlockType.LOCAL_COMMAND,
            event_type=event_type,
            timestamp=timestamp,
            label=_command_label(text, bash_params_max_length),
            content=content,
        )

    if is_local_command_output(text):
        return DisplayBlock(
            id=block_id,
            block_type=BlockType.LOCAL_COMMAND_OUTPUT,
            event_type=event_type,
            timestamp=timestamp,
            label=BlockLabel(text="Command Output"),
            content=content,
        )

    # Meta messages are notes injected by the agent, not typed by the user
    is_meta = event.payload_flag("isMeta")
    return DisplayBlock(
        id=block_id,
        block_type=BlockType.TEXT,
        event_type=event_type,
        timestamp=timestamp,
        label=BlockLabel(text="User (meta)" if is_meta else "User"),
        content=content,
        role=None if is_meta else "user",
    )
