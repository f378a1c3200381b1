"""Retrying request executor with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from .errors import AuthError, TransientError
from .models.retry import RetryState

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY_S = 1.0
DEFAULT_MAX_DELAY_S = 10.0
JITTER_MIN = 0.75
JITTER_SPAN = 0.5


def next_delay(
    delay: float,
    max_delay: float = DEFAULT_MAX_DELAY_S,
    rand: Callable[[], float] = random.random,
) -> float:
    """Double ``delay`` with a jitter factor in [0.75, 1.25), capped at ``max_delay``."""
    jitter = JITTER_MIN + rand() * JITTER_SPAN
    return min(delay * 2 * jitter, max_delay)


async def retry_request(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay: float = DEFAULT_INITIAL_DELAY_S,
    *,
    max_delay: float = DEFAULT_MAX_DELAY_S,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
    on_retry: Callable[[RetryState, Exception], None] | None = None,
) -> T:
    """Run ``operation`` up to ``max_retries`` times.

    Only :class:`TransientError` is retried. :class:`AuthError` and any other
    exception propagate on the first occurrence. When every attempt fails with
    a transient error the last one is re-raised.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_retries: Total number of attempts (at least one is always made).
        initial_delay: Seconds to wait after the first failure.
        max_delay: Ceiling for the delay between attempts.
        sleep: Awaitable sleep, injectable for tests.
        rand: Source of uniform [0, 1) values for jitter.
        on_retry: Called with the retry state before each wait.
    """
    attempts = max(1, max_retries)
    state = RetryState(attempt=0, delay=initial_delay)

    while True:
        try:
            return await operation()
        except AuthError:
            raise
        except TransientError as e:
            state.attempt += 1
            if state.attempt >= attempts:
                logger.error("All %d retry attempts failed", attempts)
                raise
            logger.warning(
                "Attempt %d failed (%s), retrying in %.2fs",
                state.attempt,
                e,
                state.delay,
            )
            if on_retry is not None:
                on_retry(state, e)
            await sleep(state.delay)
            state.delay = next_delay(state.delay, max_delay, rand)


__all__ = ["retry_request", "next_delay", "RetryState"]
