"""State and helpers shared by :class:`~tfetch.client.SyncClient` and
:class:`~tfetch.client.AsyncClient`.

Everything here is free of I/O: configuration coercion, URL resolution,
cache orchestration and response-model validation.  The two clients only
differ in how they drive the transport and the retry delay.
"""

from __future__ import annotations

import copy
import time
from typing import Any, Callable, Mapping, Optional, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from tfetch.cache import CacheStore, make_cache_key
from tfetch.client.retry import RetryController
from tfetch.config import build_config
from tfetch.exceptions import DecodeFailure
from tfetch.models import ClientConfig, Outcome
from tfetch.output import get_output

ConfigInput = Union[ClientConfig, Mapping[str, Any], None]
URLTypes = Union[str, httpx.URL]


class BaseClient:
    """Common construction and cache handling for the tfetch clients.

    Args:
        config: A :class:`~tfetch.models.ClientConfig`, a partial nested
            mapping of its fields, or ``None`` for all defaults.
        clock: Monotonic clock (seconds) used for cache ages.

    Raises:
        ConfigurationError: *config* has invalid values.
    """

    def __init__(
        self,
        config: ConfigInput = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = build_config(config)
        self._retry = RetryController(self._config.retry)
        self._cache: Optional[CacheStore] = None
        if self._config.cache.enabled:
            self._cache = CacheStore(
                max_age_ms=self._config.cache.max_age_ms,
                max_entries=self._config.cache.max_entries,
                clock=clock,
                debug=self._config.debug,
            )
        self._debug("TFetch client initialized")

    @property
    def config(self) -> ClientConfig:
        """The effective, immutable client configuration."""
        return self._config

    def clear_cache(self) -> None:
        """Drop every cached response."""
        if self._cache is not None:
            self._cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        """Return ``{"enabled": False}`` or the cache size and bounds."""
        if self._cache is None:
            return {"enabled": False}
        return {"enabled": True, **self._cache.stats()}

    # ------------------------------------------------------------------ #
    # Helpers for subclasses
    # ------------------------------------------------------------------ #

    def _client_options(self) -> dict[str, Any]:
        return {
            "base_url": self._config.base_url or "",
            "timeout": self._config.timeout,
            "follow_redirects": True,
        }

    def _full_url(self, url: URLTypes) -> str:
        """Resolve *url* against ``base_url`` for cache keys and traces."""
        url = str(url)
        base = self._config.base_url
        if base and "://" not in url:
            return f"{base.rstrip('/')}/{url.lstrip('/')}"
        return url

    def _cache_lookup(
        self,
        url: URLTypes,
        headers: Optional[Mapping[str, str]],
        params: Optional[Mapping[str, Any]],
    ) -> tuple[Optional[str], Any]:
        """Return ``(key, cached_payload)``; both ``None`` when caching is off."""
        if self._cache is None:
            return None, None
        key = make_cache_key(self._full_url(url), headers, params)
        cached = self._cache.get(key)
        if cached is not None:
            self._debug(f"Cached response found for {url}")
            return key, copy.deepcopy(cached)
        return key, None

    def _cache_store(self, key: Optional[str], outcome: Outcome[Any]) -> None:
        """Cache a successful payload.  Failures are never cached."""
        if self._cache is None or key is None or outcome.data is None:
            return
        self._cache.put(key, copy.deepcopy(outcome.data))

    def _finish(self, outcome: Outcome[Any], response_model: Any) -> Outcome[Any]:
        """Validate a successful payload against *response_model*, if given."""
        if response_model is None or outcome.error is not None:
            return outcome
        try:
            data = TypeAdapter(response_model).validate_python(outcome.data)
        except ValidationError as exc:
            return Outcome.failure(
                DecodeFailure(f"Response does not match {_type_name(response_model)}: {exc}")
            )
        return Outcome.success(data)

    def _debug(self, message: str) -> None:
        if self._config.debug:
            get_output().trace(message)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)
