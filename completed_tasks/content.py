"""
Block content reconciliation for Completed Tasks.

The host keeps a block's properties twice: structurally, and as "key:: value"
lines in the block text. When properties are added or removed through a
content rewrite, the text must be changed to match, otherwise the editor shows
stale property lines.
"""

import re
from typing import Any, Iterable, List, Mapping, Optional

from .models import PropertyUpdate

# Logbook lines are rendered by the host and are not part of the editable text.
# The logbook itself is kept by the host when the content is rewritten.
LOGBOOK_RE = re.compile(r"^(:LOGBOOK:|CLOCK:|:END:)")


def strip_logbook(lines: Iterable[str]) -> List[str]:
    """Drop logbook lines, keeping every other line in order."""
    return [line for line in lines if not LOGBOOK_RE.match(line)]


def format_property_line(key: str, value: Any) -> str:
    return f"{key}:: {value}"


def get_updated_block_content(content: str,
                              properties: Optional[Mapping[str, Any]],
                              update: PropertyUpdate) -> str:
    """
    Return block content matching what the editor should show after an update.

    Additions are appended only for keys the block does not already have;
    removals only touch keys the block has. Lines for other properties are
    never modified.

    Args:
        content: Current raw text of the block
        properties: Current property map of the block
        update: Properties to add and remove

    Returns:
        The revised text content
    """
    properties = properties or {}
    updated_lines = strip_logbook(content.split("\n"))

    for key, value in update.add:
        if key not in properties:
            updated_lines.append(format_property_line(key, value))

    for key in update.remove:
        if key in properties:
            prefix = f"{key}::"
            updated_lines = [line for line in updated_lines if not line.startswith(prefix)]

    return "\n".join(updated_lines)
