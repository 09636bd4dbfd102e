"""Asynchronous HTTP client with retry, response caching and body encoding.

This module provides :class:`AsyncClient`, the primary tfetch client.  It
wraps :class:`httpx.AsyncClient` and layers on:

- **Retry** -- transport failures are retried up to ``retry.count`` times
  with a fixed :func:`asyncio.sleep` delay; non-2xx responses are not.
- **Response caching** -- decoded GET payloads are kept in an in-memory
  :class:`~tfetch.cache.CacheStore` owned by the client.
- **Body encoding** -- ``submit``/``replace`` serialise a
  :class:`~tfetch.models.ContentWrapper` and set ``Content-Type``.

Every verb returns an :class:`~tfetch.models.Outcome`; request failures
are never raised.

See Also:
    :class:`~tfetch.client.sync_client.SyncClient` for the blocking
    equivalent.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping, Optional

import httpx

from tfetch.client.base import BaseClient, ConfigInput, URLTypes
from tfetch.client.body import ContentInput, prepare_body
from tfetch.client.executor import RequestContent, aexecute_request
from tfetch.models import Outcome


class AsyncClient(BaseClient):
    """Asynchronous HTTP client returning :class:`~tfetch.models.Outcome` values.

    Best used as an async context manager so the connection pool is
    closed deterministically; if it is not, the transport is opened on
    the first request and must be closed with :meth:`aclose`.

    Args:
        config: :class:`~tfetch.models.ClientConfig`, partial mapping, or
            ``None`` for defaults.
        transport: Optional :class:`httpx.AsyncBaseTransport`, e.g. an
            :class:`httpx.MockTransport` in tests.
        clock: Monotonic clock (seconds) used for cache ages.

    Example::

        async with AsyncClient({"retry": {"count": 2}, "cache": {"enabled": True}}) as client:
            outcome = await client.fetch("https://api.example.com/posts/1")
            if outcome.ok:
                print(outcome.data["title"])
    """

    def __init__(
        self,
        config: ConfigInput = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(config, clock=clock)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public verbs
    # ------------------------------------------------------------------ #

    async def fetch(
        self,
        url: URLTypes,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a GET request, serving it from the cache when possible.

        Args:
            url: Absolute URL, or a path relative to ``base_url``.
            headers: Request headers; part of the cache key.
            params: Query parameters; part of the cache key.
            response_model: Optional type the decoded JSON is validated
                against (any type :class:`pydantic.TypeAdapter` accepts).

        Returns:
            ``Outcome.success(payload)`` or ``Outcome.failure(error)``.
        """
        key, cached = self._cache_lookup(url, headers, params)
        if cached is not None:
            return self._finish(Outcome.success(cached), response_model)

        outcome = await self._send("GET", url, headers=headers, params=params)
        self._cache_store(key, outcome)
        return self._finish(outcome, response_model)

    async def submit(
        self,
        url: URLTypes,
        content: ContentInput,
        headers: Optional[Mapping[str, str]] = None,
        *,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a POST request with an encoded body.

        Raises:
            ConfigurationError: Unsupported content type or unencodable
                data.  Raised before any network activity.
        """
        request_headers, body = prepare_body(content, headers)
        outcome = await self._send("POST", url, headers=request_headers, content=body)
        return self._finish(outcome, response_model)

    async def replace(
        self,
        url: URLTypes,
        content: ContentInput,
        headers: Optional[Mapping[str, str]] = None,
        *,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a PUT request with an encoded body.

        Raises:
            ConfigurationError: Unsupported content type or unencodable
                data.  Raised before any network activity.
        """
        request_headers, body = prepare_body(content, headers)
        outcome = await self._send("PUT", url, headers=request_headers, content=body)
        return self._finish(outcome, response_model)

    async def remove(
        self,
        url: URLTypes,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a DELETE request.  The cache is never consulted."""
        outcome = await self._send("DELETE", url, headers=headers, params=params)
        return self._finish(outcome, response_model)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _open(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport, **self._client_options()
            )
        return self._client

    async def _send(
        self,
        method: str,
        url: URLTypes,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        content: RequestContent = None,
    ) -> Outcome[Any]:
        client = self._open()
        request_headers = dict(headers) if headers else None
        request_params = dict(params) if params else None
        return await self._retry.arun(
            lambda: aexecute_request(
                client,
                method,
                str(url),
                headers=request_headers,
                params=request_params,
                content=content,
            )
        )
