"""Issue tracker clients."""

from snitch.issues.base import (
    IssueAPI,
    IssueAPIError,
    IssueAuthError,
    MalformedResponseError,
    TransportError,
)
from snitch.issues.gitea import GiteaIssueAPI
from snitch.issues.registry import find_issue_api, issue_apis_from_credentials, resolve_issue_apis

__all__ = [
    "GiteaIssueAPI",
    "IssueAPI",
    "IssueAPIError",
    "IssueAuthError",
    "MalformedResponseError",
    "TransportError",
    "find_issue_api",
    "issue_apis_from_credentials",
    "resolve_issue_apis",
]
