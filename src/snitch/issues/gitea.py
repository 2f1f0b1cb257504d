"""Gitea issue tracker client.

Gitea serves a GitLab-compatible subset of the issues API under
``/api/v1``. The personal token travels in a ``TOKEN`` header, never in the
URL.
"""

from __future__ import annotations

import logging
from typing import Any, Literal
from urllib.parse import quote

import httpx

from snitch.credentials import CredentialRecord
from snitch.issues.base import IssueAPI, IssueAuthError, MalformedResponseError
from snitch.issues.transport import query_http
from snitch.todo import Todo

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
TOKEN_HEADER = "TOKEN"

Scheme = Literal["http", "https"]


# =============================================================================
# Request building
# =============================================================================


def issue_number(todo_id: str | None) -> int:
    """Strip the leading '#' from a tracker-formatted issue reference.

    Raises:
        ValueError: If ``todo_id`` is None or not of the form "#<number>".
    """
    if todo_id is None or not todo_id.startswith("#") or not (todo_id[1:].isascii() and todo_id[1:].isdigit()):
        raise ValueError(f"Expected an issue reference like '#42', got {todo_id!r}")
    return int(todo_id[1:])


def issues_url(scheme: str, host: str, repo: str, number: int | None = None) -> str:
    """Build the issues endpoint URL for ``repo`` on ``host``.

    The repository identifier is quoted as a single path segment, so
    "owner/project" becomes "owner%2Fproject".
    """
    url = f"{scheme}://{host}/api/v1/repos/{quote(repo, safe='')}/issues"
    if number is not None:
        url = f"{url}/{number}"
    return url


# =============================================================================
# Response mapping
# =============================================================================


def parse_issue_fields(payload: Any) -> dict[str, Any]:
    """Validate a fetched issue payload."""
    if not isinstance(payload, dict) or not payload:
        raise MalformedResponseError(f"Expected a non-empty issue object, got {type(payload).__name__}")
    return payload


def parse_created_issue_id(payload: Any) -> str:
    """Extract the tracker-assigned ``iid`` and format it as "#<iid>".

    Raises:
        MalformedResponseError: If ``iid`` is missing, not a number, or not
            a whole number.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Expected an issue object, got {type(payload).__name__}")

    iid = payload.get("iid")
    # bool is an int subclass
    if isinstance(iid, bool) or not isinstance(iid, (int, float)):
        raise MalformedResponseError(f"Response has no numeric 'iid': {iid!r}")
    if isinstance(iid, float) and not iid.is_integer():
        raise MalformedResponseError(f"Response 'iid' is not a whole number: {iid!r}")

    return f"#{int(iid)}"


# =============================================================================
# Client
# =============================================================================


class GiteaIssueAPI(IssueAPI):
    """Issue tracker client backed by one CredentialRecord.

    Holds no mutable domain state; a single instance may serve concurrent
    calls from several threads.
    """

    def __init__(
        self,
        credentials: CredentialRecord,
        scheme: Scheme = "https",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Host and token to use.
            scheme: URL scheme for every API call.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (for testing).
        """
        self.credentials = credentials
        self.scheme = scheme
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def __repr__(self) -> str:
        return f"GiteaIssueAPI(host={self.credentials.host!r}, scheme={self.scheme!r})"

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _query(self, method: str, url: str, params: dict[str, str] | None = None) -> Any:
        """Send an authenticated request and return the decoded JSON."""
        if not self.credentials.token:
            raise IssueAuthError(f"No personal token configured for {self.credentials.host}")

        request = self.client.build_request(
            method,
            url,
            params=params,
            headers={TOKEN_HEADER: self.credentials.token},
        )
        return query_http(self.client, request)

    def get_host(self) -> str:
        return self.credentials.host

    def get_issue(self, repo: str, todo: Todo) -> dict[str, Any]:
        """Fetch the issue referenced by ``todo.id``.

        Raises:
            ValueError: If ``todo.id`` is not of the form "#<number>".
            IssueAuthError: If the credential has no token.
            TransportError: If the request fails.
            MalformedResponseError: If the body is empty or not an object.
        """
        url = issues_url(self.scheme, self.credentials.host, repo, issue_number(todo.id))
        return parse_issue_fields(self._query("GET", url))

    def post_issue(self, repo: str, todo: Todo, body: str) -> Todo:
        """Create an issue titled after ``todo`` and return the linked copy.

        ``todo`` itself is never modified, so on any error the caller still
        holds the unlinked marker. A TransportError does not prove the issue
        wasn't created.

        Raises:
            IssueAuthError: If the credential has no token.
            TransportError: If the request fails.
            MalformedResponseError: If the response lacks a usable 'iid'.
        """
        url = issues_url(self.scheme, self.credentials.host, repo)
        payload = self._query("POST", url, params={"title": todo.title, "description": body})

        issue_id = parse_created_issue_id(payload)
        logger.info(f"Created issue {issue_id} on {self.credentials.host}: {todo.title}")
        return todo.with_id(issue_id)
