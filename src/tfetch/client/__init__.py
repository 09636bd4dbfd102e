"""HTTP client module for tfetch.

Provides asynchronous and synchronous clients that wrap :mod:`httpx` with
bounded retry, in-memory GET response caching and content-type-aware body
encoding.

Classes:
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`.

Both return an :class:`~tfetch.models.Outcome` from every verb
(``fetch``, ``submit``, ``replace``, ``remove``) and never raise for
request-level failures.

Example::

    from tfetch.client import AsyncClient

    async with AsyncClient({"retry": {"count": 3}}) as client:
        outcome = await client.fetch("https://api.example.com/users")
"""

from tfetch.client.async_client import AsyncClient
from tfetch.client.sync_client import SyncClient

__all__ = ["AsyncClient", "SyncClient"]
