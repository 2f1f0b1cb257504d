"""Issue tracker capability shared by every tracker flavour."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from snitch.todo import Todo


class IssueAPIError(Exception):
    """Base exception for issue tracker errors."""


class IssueAuthError(IssueAPIError):
    """The credential has no token to authenticate with."""


class TransportError(IssueAPIError):
    """Network, HTTP status, or JSON decoding failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code  # None for network and decode failures


class MalformedResponseError(IssueAPIError):
    """The tracker answered successfully but with an unusable payload."""


class IssueAPI(ABC):
    """Abstract base class for issue tracker clients."""

    def __enter__(self) -> IssueAPI:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Release any held connections."""

    @abstractmethod
    def get_host(self) -> str:
        """Return the tracker host this client talks to."""

    @abstractmethod
    def get_issue(self, repo: str, todo: Todo) -> dict[str, Any]:
        """Fetch the issue linked to a TODO marker.

        Args:
            repo: Repository identifier (e.g. "owner/project").
            todo: Marker whose ``id`` references the issue ("#<number>").

        Returns:
            Raw issue fields as returned by the tracker.
        """

    @abstractmethod
    def post_issue(self, repo: str, todo: Todo, body: str) -> Todo:
        """Create an issue for a TODO marker.

        Args:
            repo: Repository identifier (e.g. "owner/project").
            todo: Marker providing the issue title.
            body: Issue description.

        Returns:
            A copy of ``todo`` linked to the new issue.
        """
