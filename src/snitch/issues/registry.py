"""Adapt resolved credentials into issue tracker clients and route by host."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import httpx

from snitch.config import Config, CredentialEnvironment
from snitch.credentials import CredentialRecord, resolve_credentials
from snitch.issues.base import IssueAPI
from snitch.issues.gitea import GiteaIssueAPI


def issue_apis_from_credentials(
    records: Iterable[CredentialRecord],
    config: Config,
    transport: httpx.BaseTransport | None = None,
) -> list[IssueAPI]:
    """Wrap each record in a client, keeping precedence order."""
    return [
        GiteaIssueAPI(record, scheme=config.scheme, timeout=config.timeout, transport=transport)
        for record in records
    ]


def resolve_issue_apis(
    env: CredentialEnvironment,
    config: Config,
    transport: httpx.BaseTransport | None = None,
) -> list[IssueAPI]:
    """Resolve credentials from every source and wrap them as clients.

    Raises:
        HomeResolutionError: If the home directory can't be resolved.
    """
    records = resolve_credentials(env, default_host=config.default_host)
    return issue_apis_from_credentials(records, config, transport=transport)


def find_issue_api(apis: Sequence[IssueAPI], host: str) -> IssueAPI | None:
    """Return the first client for ``host``, or None."""
    for api in apis:
        if api.get_host() == host:
            return api
    return None
