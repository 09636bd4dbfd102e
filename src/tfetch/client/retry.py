"""Bounded retry with a fixed delay between attempts.

:class:`RetryController` drives an attempt callable through the state
machine below and always resolves to an :class:`~tfetch.models.Outcome`::

    Attempting(n)
      success               -> Outcome.success
      HttpStatusFailure     -> Outcome.failure          (never retried)
      TransportFailure, n < count
                            -> on_retry(), sleep, Attempting(n + 1)
      TransportFailure, n == count
                            -> Outcome.failure(last error)

At most ``count + 1`` attempts are made.  The delay uses
:func:`time.sleep` in :meth:`RetryController.run` and
:func:`asyncio.sleep` in :meth:`RetryController.arun`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, TypeVar

from tfetch.exceptions import HttpStatusFailure, TransportFailure
from tfetch.models import Outcome, RetryConfig
from tfetch.output import get_output

T = TypeVar("T")


class RetryController:
    """Runs request attempts under a :class:`~tfetch.models.RetryConfig`.

    Exceptions other than :class:`~tfetch.exceptions.TransportFailure` and
    :class:`~tfetch.exceptions.HttpStatusFailure` -- including anything
    raised by ``on_retry`` -- propagate to the caller unchanged.

    Args:
        config: Retry count, delay and observer hook.
    """

    def __init__(self, config: RetryConfig) -> None:
        self._config = config

    @property
    def max_attempts(self) -> int:
        return self._config.count + 1

    def run(self, attempt: Callable[[], T]) -> Outcome[T]:
        """Call *attempt* until it succeeds or the retry budget is spent."""
        for n in range(self.max_attempts):
            try:
                return Outcome.success(attempt())
            except HttpStatusFailure as exc:
                return Outcome.failure(exc)
            except TransportFailure as exc:
                if n >= self._config.count:
                    return Outcome.failure(exc)
                self._before_retry(n, exc)
                time.sleep(self._delay_seconds)

        return Outcome.failure(  # pragma: no cover
            TransportFailure("Request failed after maximum retries")
        )

    async def arun(self, attempt: Callable[[], Awaitable[T]]) -> Outcome[T]:
        """Async counterpart of :meth:`run`."""
        for n in range(self.max_attempts):
            try:
                return Outcome.success(await attempt())
            except HttpStatusFailure as exc:
                return Outcome.failure(exc)
            except TransportFailure as exc:
                if n >= self._config.count:
                    return Outcome.failure(exc)
                self._before_retry(n, exc)
                await asyncio.sleep(self._delay_seconds)

        return Outcome.failure(  # pragma: no cover
            TransportFailure("Request failed after maximum retries")
        )

    @property
    def _delay_seconds(self) -> float:
        return self._config.delay_ms / 1000

    def _before_retry(self, n: int, exc: Exception) -> None:
        get_output().debug(
            f"Transport error: {exc}, retrying in {self._config.delay_ms}ms "
            f"(attempt {n + 1}/{self._config.count})"
        )
        if self._config.on_retry is not None:
            self._config.on_retry()
