"""Synchronous HTTP client with retry, response caching and body encoding.

:class:`SyncClient` is the blocking mirror of
:class:`~tfetch.client.async_client.AsyncClient`: same verbs, same
:class:`~tfetch.models.Outcome` results, backed by :class:`httpx.Client`
and :func:`time.sleep`.  The cache store is lock-protected, so a single
instance may be shared between threads.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping, Optional

import httpx

from tfetch.client.base import BaseClient, ConfigInput, URLTypes
from tfetch.client.body import ContentInput, prepare_body
from tfetch.client.executor import RequestContent, execute_request
from tfetch.models import Outcome


class SyncClient(BaseClient):
    """Blocking HTTP client returning :class:`~tfetch.models.Outcome` values.

    Args:
        config: :class:`~tfetch.models.ClientConfig`, partial mapping, or
            ``None`` for defaults.
        transport: Optional :class:`httpx.BaseTransport`, e.g. an
            :class:`httpx.MockTransport` in tests.
        clock: Monotonic clock (seconds) used for cache ages.

    Example::

        with SyncClient({"cache": {"enabled": True}}) as client:
            outcome = client.fetch("https://api.example.com/posts/1")
    """

    def __init__(
        self,
        config: ConfigInput = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(config, clock=clock)
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._open_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        self._open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client`."""
        with self._open_lock:
            if self._client:
                self._client.close()
                self._client = None

    # ------------------------------------------------------------------ #
    # Public verbs
    # ------------------------------------------------------------------ #

    def fetch(
        self,
        url: URLTypes,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a GET request, serving it from the cache when possible.

        See :meth:`AsyncClient.fetch <tfetch.client.async_client.AsyncClient.fetch>`.
        """
        key, cached = self._cache_lookup(url, headers, params)
        if cached is not None:
            return self._finish(Outcome.success(cached), response_model)

        outcome = self._send("GET", url, headers=headers, params=params)
        self._cache_store(key, outcome)
        return self._finish(outcome, response_model)

    def submit(
        self,
        url: URLTypes,
        content: ContentInput,
        headers: Optional[Mapping[str, str]] = None,
        *,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a POST request with an encoded body."""
        request_headers, body = prepare_body(content, headers)
        outcome = self._send("POST", url, headers=request_headers, content=body)
        return self._finish(outcome, response_model)

    def replace(
        self,
        url: URLTypes,
        content: ContentInput,
        headers: Optional[Mapping[str, str]] = None,
        *,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a PUT request with an encoded body."""
        request_headers, body = prepare_body(content, headers)
        outcome = self._send("PUT", url, headers=request_headers, content=body)
        return self._finish(outcome, response_model)

    def remove(
        self,
        url: URLTypes,
        headers: Optional[Mapping[str, str]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        response_model: Any = None,
    ) -> Outcome[Any]:
        """Send a DELETE request.  The cache is never consulted."""
        outcome = self._send("DELETE", url, headers=headers, params=params)
        return self._finish(outcome, response_model)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _open(self) -> httpx.Client:
        with self._open_lock:
            if self._client is None:
                self._client = httpx.Client(
                    transport=self._transport, **self._client_options()
                )
            return self._client

    def _send(
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
        return self._retry.run(
            lambda: execute_request(
                client,
                method,
                str(url),
                headers=request_headers,
                params=request_params,
                content=content,
            )
        )
