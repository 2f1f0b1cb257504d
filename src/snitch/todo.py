"""TODO marker value type shared with the issue-tracker clients."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Todo:
    """A code-embedded TODO marker, optionally linked to a remote issue.

    Attributes:
        title: Text of the marker, used as the issue title.
        id: Tracker-formatted issue reference (e.g. "#42"), None until the
            issue exists remotely.
    """

    title: str
    id: str | None = None

    def with_id(self, issue_id: str) -> Todo:
        """Return a copy of this marker linked to ``issue_id``."""
        return replace(self, id=issue_id)
