"""Single-attempt request execution and outcome classification.

:func:`execute_request` and :func:`aexecute_request` send exactly one
request through an :mod:`httpx` client and turn what happens into either a
decoded JSON payload or one of two exception classes:

* :class:`~tfetch.exceptions.TransportFailure` -- the transport raised
  (connection refused, timeout, protocol error, malformed URL) or a 2xx
  body could not be decoded (:class:`~tfetch.exceptions.DecodeFailure`).
  The retry controller retries these.
* :class:`~tfetch.exceptions.HttpStatusFailure` -- the server answered
  with a non-2xx status.  Never retried.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

import httpx

from tfetch.exceptions import DecodeFailure, HttpStatusFailure, TransportFailure

RequestContent = Union[str, bytes, None]


def execute_request(
    client: httpx.Client,
    method: str,
    url: str,
    headers: Optional[dict[str, str]] = None,
    params: Optional[dict[str, Any]] = None,
    content: RequestContent = None,
) -> Any:
    """Send one request and return its decoded JSON body.

    Args:
        client: An open :class:`httpx.Client`.
        method: HTTP method.
        url: Absolute URL, or a path relative to the client's ``base_url``.
        headers: Request headers.
        params: Query parameters.
        content: Already-serialised request body.

    Returns:
        The decoded JSON payload (never ``None``).

    Raises:
        TransportFailure: The transport failed or the body was not JSON.
        HttpStatusFailure: The response status was not 2xx.
    """
    try:
        response = client.request(
            method, url, headers=headers, params=params, content=content
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportFailure(_describe(exc)) from exc
    return _classify(response)


async def aexecute_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: Optional[dict[str, str]] = None,
    params: Optional[dict[str, Any]] = None,
    content: RequestContent = None,
) -> Any:
    """Async counterpart of :func:`execute_request`."""
    try:
        response = await client.request(
            method, url, headers=headers, params=params, content=content
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportFailure(_describe(exc)) from exc
    return _classify(response)


def _classify(response: httpx.Response) -> Any:
    """Map a completed response to its payload or a typed failure."""
    if not response.is_success:
        raise HttpStatusFailure(response.status_code, response.text)

    if not response.content:
        raise DecodeFailure(f"HTTP {response.status_code}: empty response body")
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeFailure(f"Invalid JSON in response body: {exc}") from exc
    if data is None:
        raise DecodeFailure("Response body decoded to null")
    return data


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__
