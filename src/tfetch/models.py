"""Canonical models shared across all tfetch modules.

The models fall into two groups:

**Configuration models** -- immutable pydantic models describing how a
client behaves: :class:`RetryConfig`, :class:`CacheConfig` and the
top-level :class:`ClientConfig`.  Every field has a default, so a client
can be built from a partial (nested) mapping.

**Request/result models** -- :class:`ContentType` and
:class:`ContentWrapper` describe a request body; :class:`Outcome` is the
exactly-one-of ``data``/``error`` result every client operation returns.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tfetch.exceptions import TFetchError

T = TypeVar("T")


# --- Configuration ---


class RetryConfig(BaseModel):
    """Retry policy applied to every request made by a client.

    Only transport-class failures are retried (see
    :class:`~tfetch.exceptions.TransportFailure`).  ``on_retry`` is called
    with no arguments before each delay and is never serialised.
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(
        default=0, ge=0, description="Additional attempts after the first"
    )
    delay_ms: int = Field(
        default=1000, ge=0, description="Fixed delay between attempts in milliseconds"
    )
    on_retry: Optional[Callable[[], Any]] = Field(
        default=None, exclude=True, description="Called before each retry delay"
    )


class CacheConfig(BaseModel):
    """In-memory GET response cache settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Enable response caching")
    max_age_ms: int = Field(
        default=300_000, ge=0, description="Entry lifetime in milliseconds"
    )
    max_entries: int = Field(
        default=5000,
        gt=0,
        description="Entry count that triggers a cleanup sweep on the next write",
    )


class ClientConfig(BaseModel):
    """Top-level client configuration.

    Built once per client and never mutated afterwards.  Use
    :func:`~tfetch.config.resolve_config` to merge a config file and
    ``TFETCH_*`` environment variables into one of these.

    Example::

        ClientConfig(
            debug=True,
            retry=RetryConfig(count=3, delay_ms=250),
            cache=CacheConfig(enabled=True, max_age_ms=60_000),
        )
    """

    model_config = ConfigDict(frozen=True)

    debug: bool = Field(default=False, description="Emit [DEBUG] trace lines")
    base_url: Optional[str] = Field(
        default=None, description="Joined onto relative request URLs"
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Transport timeout in seconds"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# --- Request bodies ---


class ContentType(str, enum.Enum):
    """Supported request body encodings."""

    JSON = "json"
    FORM = "form"
    TEXT = "text"
    BLOB = "blob"


class ContentWrapper(BaseModel):
    """A request body together with the encoding to send it with.

    Example::

        ContentWrapper(type="json", data={"title": "foo"})
        ContentWrapper(type=ContentType.BLOB, data=b"\\x89PNG...")
    """

    type: ContentType
    data: Any = None


# --- Results ---


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a client operation.

    Exactly one of :attr:`data` and :attr:`error` is set.  Clients never
    raise for request-level failures; callers branch on :attr:`ok` or
    call :meth:`unwrap`.
    """

    data: Optional[T] = None
    error: Optional[TFetchError] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("Outcome requires exactly one of data or error")

    @classmethod
    def success(cls, data: T) -> Outcome[T]:
        return cls(data=data)

    @classmethod
    def failure(cls, error: TFetchError) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """Whether the operation produced data."""
        return self.error is None

    def unwrap(self) -> T:
        """Return :attr:`data`, raising :attr:`error` if the operation failed."""
        if self.error is not None:
            raise self.error
        assert self.data is not None
        return self.data
