"""Parse and extract data from raw event payloads.

This module provides utility functions shared by the factories:
- parse_timestamp: Parse ISO timestamps
- extract_text_content: Extract text from message content
- parse_json_text: Lenient JSON decoding of embedded text

For block creation, see factories/.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional


def parse_timestamp(timestamp_str: Any) -> Optional[datetime]:
    """Parse ISO timestamp to a timezone-aware datetime.

    Naive timestamps are assumed to be UTC so that all parsed values are
    mutually comparable.
    """
    if not isinstance(timestamp_str, str) or not timestamp_str:
        return None
    try:
        dt = datetime.fromisoformat(timestamp_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def extract_text_content(content: Any) -> str:
    """Extract text from message content (string, text item or item list)."""
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        text = content.get("text")
        return text if isinstance(text, str) else ""
    if isinstance(content, list):
        return "\n".join(
            item["text"]
            for item in content
            if isinstance(item, dict)
            and item.get("type") == "text"
            and isinstance(item.get("text"), str)
        )
    return ""


def parse_json_text(text: str) -> Optional[Any]:
    """Decode ``text`` as JSON, returning None when it is not JSON."""
    stripped = text.strip()
    if not stripped or stripped[0] not in "[{":
        return None
    try:
        return json.loads(stripped)
    except (json.JSONDecodeError, ValueError):
        return None
