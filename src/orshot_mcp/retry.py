"""Exponential backoff retry for transient Orshot API errors."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .errors import OrshotAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: Exception) -> bool:
    """401/403/404 are caller errors; every other failure is worth another try."""
    if isinstance(exc, OrshotAPIError):
        return exc.retryable
    return True


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay to wait after the 1-based *attempt* failed: base * 2^(attempt-1)."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def with_retry(
    coro_factory: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_delay: float,
    max_delay: float,
    retryable: Callable[[Exception], bool] = is_retryable,
    on_attempt: Callable[[int], None] | None = None,
) -> T:
    """Execute an async callable with exponential backoff on transient errors.

    Args:
        coro_factory: Zero-arg callable that returns a fresh awaitable each attempt.
        max_attempts: Total attempts, including the first.
        base_delay: Seconds to wait after the first failure.
        max_delay: Upper bound on any single wait.
        retryable: Predicate deciding whether an exception is worth retrying.
        on_attempt: Called with the 1-based attempt number before each try.

    Returns:
        The result of the first successful call.

    Raises:
        The last exception if all attempts are exhausted or non-retryable.
    """
    last_exc: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        if on_attempt is not None:
            on_attempt(attempt)
        try:
            return await coro_factory()
        except Exception as exc:
            last_exc = exc
            if not retryable(exc) or attempt == max_attempts:
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "Retry %d/%d after %.1fs: %s", attempt + 1, max_attempts, delay, exc,
            )
            await asyncio.sleep(delay)
    raise last_exc  # unreachable but satisfies type checker
