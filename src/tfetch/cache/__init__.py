"""In-memory response caching for tfetch.

This package provides :class:`CacheStore`, a bounded store for decoded
GET payloads with lazy age-based expiry and batch eviction, and
:func:`make_cache_key`, the request fingerprint used to address it.

The store is owned by a single client instance
(:class:`~tfetch.client.AsyncClient` or :class:`~tfetch.client.SyncClient`)
and lives exactly as long as that client.  It is controlled by the
``cache`` section of :class:`~tfetch.models.ClientConfig`.
"""

from tfetch.cache.store import CacheEntry, CacheStore, make_cache_key

__all__ = ["CacheEntry", "CacheStore", "make_cache_key"]
