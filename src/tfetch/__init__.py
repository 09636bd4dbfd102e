"""tfetch -- an httpx wrapper with bounded retry, response caching and body encoding.

Every request goes through the same pipeline: an optional in-memory cache
lookup (GET only), a bounded retry loop with a fixed delay, and a single
classified attempt that yields decoded JSON or a typed failure.  Callers
get back an :class:`Outcome` holding exactly one of ``data`` and
``error``::

    from tfetch import AsyncClient

    async with AsyncClient({"cache": {"enabled": True}}) as client:
        outcome = await client.fetch("https://api.example.com/posts/1")

Modules:
    client: :class:`AsyncClient` and :class:`SyncClient`.
    cache: The bounded in-memory :class:`~tfetch.cache.CacheStore`.
    models: Pydantic configuration models and the :class:`Outcome` type.
    config: Config file / environment resolution.
    exceptions: Error taxonomy with exit-code mapping.
    output: stdout/stderr output used for debug traces and the CLI.
    app: The ``tfetch`` command-line entry point.
"""

__version__ = "0.1.0"

from tfetch.client import AsyncClient, SyncClient
from tfetch.exceptions import (
    ConfigurationError,
    DecodeFailure,
    HttpStatusFailure,
    TFetchError,
    TransportFailure,
)
from tfetch.models import (
    CacheConfig,
    ClientConfig,
    ContentType,
    ContentWrapper,
    Outcome,
    RetryConfig,
)

__all__ = [
    "AsyncClient",
    "CacheConfig",
    "ClientConfig",
    "ConfigurationError",
    "ContentType",
    "ContentWrapper",
    "DecodeFailure",
    "HttpStatusFailure",
    "Outcome",
    "RetryConfig",
    "SyncClient",
    "TFetchError",
    "TransportFailure",
]
