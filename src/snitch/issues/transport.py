"""HTTP transport: send one request, return decoded JSON."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from snitch.issues.base import TransportError

logger = logging.getLogger(__name__)


def query_http(client: httpx.Client, request: httpx.Request) -> Any:
    """Send ``request`` and decode the JSON response.

    Args:
        client: HTTP client used to send the request.
        request: Fully built request.

    Returns:
        Decoded JSON value, or None when the response body is empty.

    Raises:
        TransportError: On network failure, a non-2xx HTTP status, or a body that
            is not valid JSON.
    """
    logger.debug(f"{request.method} {request.url.scheme}://{request.url.host}{request.url.path}")

    try:
        response = client.send(request)
    except httpx.HTTPError as e:
        raise TransportError(f"{request.method} {request.url.host} failed: {e}") from e

    if not response.is_success:
        raise TransportError(
            f"{request.method} {request.url.path} returned HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    if not response.content.strip():
        return None

    try:
        return response.json()
    except ValueError as e:
        raise TransportError(f"Invalid JSON from {request.url.host}: {e}", status_code=response.status_code) from e
