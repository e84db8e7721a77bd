"""Retry with exponential backoff for calls to the generative model.

:func:`with_retry` runs an async operation, and when it fails with a
transient error waits and tries again, multiplying the wait after each
attempt.  Once the retries in the :class:`~jyotish.models.RetryPolicy`
are used up, the last error is re-raised exactly as the operation raised
it -- no wrapping -- so callers can still match on its type.

Failures are classified, not just caught: :func:`is_retryable` decides
whether another attempt could help.  A missing API key or malformed
request fails identically every time, so those are raised on the first
attempt.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import httpx

from jyotish.models import RetryPolicy
from jyotish.output import get_output

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Return ``True`` when *exc* is a transient failure worth retrying.

    * Exceptions carrying a ``retryable`` attribute (every
      :class:`~jyotish.exceptions.JyotishError`) are classified by it.
    * :class:`httpx.TransportError` (network failures, timeouts) is
      transient.
    * Any other :class:`Exception` is treated as transient.
    """
    flag = getattr(exc, "retryable", None)
    if isinstance(flag, bool):
        return flag
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, Exception)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Await ``operation()``, retrying transient failures with exponential backoff.

    The operation is invoked at most ``1 + policy.max_attempts`` times.
    Between attempts the coroutine sleeps ``policy.initial_delay`` seconds,
    then ``initial_delay * backoff_multiplier``, and so on.

    Args:
        operation: Zero-argument callable returning a fresh awaitable on
            each call.
        policy: Retry settings.  Defaults to :class:`RetryPolicy()`.
        sleep: Awaitable sleep function; injectable for tests.

    Returns:
        The operation's result from the first successful attempt.

    Raises:
        Exception: The operation's own exception, unchanged, when it is
            terminal or when all retries are exhausted.
    """
    policy = policy or RetryPolicy()
    remaining = policy.max_attempts
    delay = policy.initial_delay
    attempt = 1

    while True:
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc) or remaining <= 0:
                raise
            get_output().debug(
                f"{type(exc).__name__}: {exc}, retrying in {delay:g}s "
                f"(attempt {attempt + 1}/{policy.max_attempts + 1})"
            )
            await sleep(delay)
            remaining -= 1
            delay *= policy.backoff_multiplier
            attempt += 1
