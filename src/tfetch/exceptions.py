"""Exception hierarchy for tfetch.

All exceptions inherit from :class:`TFetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`tfetch.exit_codes`.
The clients never raise request-level failures; they hand them back inside
an :class:`~tfetch.models.Outcome`.  Only :class:`ConfigurationError` is
raised directly, before any network activity.

Subclass hierarchy::

    TFetchError (exit 1)
    +-- ConfigurationError  (exit 2)
    +-- TransportFailure    (exit 6)   retried
    |   +-- DecodeFailure   (exit 6)   retried
    +-- HttpStatusFailure   (exit 5)   never retried
"""

from __future__ import annotations

from tfetch.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
)


class TFetchError(Exception):
    """Base exception for all tfetch errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(TFetchError):
    """Raised for invalid client configuration or unsupported request content."""

    exit_code = EXIT_INVALID_USAGE


class TransportFailure(TFetchError):
    """A single attempt failed before a usable response was obtained.

    Covers connection errors, timeouts, protocol errors and malformed URLs.
    The underlying exception is available as ``__cause__``.  This is the
    only failure class the retry controller retries.
    """

    exit_code = EXIT_TRANSPORT_ERROR


class DecodeFailure(TransportFailure):
    """A 2xx response body could not be decoded into the expected payload."""


class HttpStatusFailure(TFetchError):
    """Raised when the server answers with a non-2xx status.

    Args:
        status_code: The HTTP status code of the response.
        body: The response body read as text.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(body or f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body
