"""
Task marker parsing for Completed Tasks.

Markers are configured as comma-separated strings (e.g. "DONE, CANCELLED").
This module turns those strings into sets and bundles the two sets the
reactor needs into a single immutable value.
"""

from dataclasses import dataclass
from typing import Any, FrozenSet, List, Mapping, Optional


def split_task_markers(task_markers: Any) -> List[str]:
    """
    Split a comma-separated marker string into trimmed tokens.

    Args:
        task_markers: The configured string; None or "" yields no markers

    Returns:
        The tokens in configuration order, case preserved
    """
    if not task_markers:
        return []

    return [marker.strip() for marker in str(task_markers).split(",")]


def parse_marker_set(task_markers: Any) -> FrozenSet[str]:
    """Parse a comma-separated marker string into a set of markers."""
    return frozenset(split_task_markers(task_markers))


@dataclass(frozen=True)
class MarkerSets:
    """
    The tracked marker vocabulary and the subset that counts as 'complete'.

    The complete set is not validated against the tracked set.
    """
    tracked: FrozenSet[str] = frozenset()
    complete: FrozenSet[str] = frozenset()

    @classmethod
    def from_strings(cls, task_markers: Any, task_markers_complete: Any) -> "MarkerSets":
        return cls(
            tracked=parse_marker_set(task_markers),
            complete=parse_marker_set(task_markers_complete)
        )

    @classmethod
    def from_settings(cls, settings: Optional[Mapping[str, Any]]) -> "MarkerSets":
        """
        Build both sets from a host settings mapping.

        Args:
            settings: Mapping holding 'taskMarkers' and 'taskMarkersComplete'

        Returns:
            A new MarkerSets; empty sets for missing keys
        """
        settings = settings or {}
        return cls.from_strings(
            settings.get("taskMarkers"),
            settings.get("taskMarkersComplete")
        )

    def is_tracked(self, marker: Optional[str]) -> bool:
        return bool(marker) and marker in self.tracked

    def is_complete(self, marker: Optional[str]) -> bool:
        return bool(marker) and marker in self.complete
