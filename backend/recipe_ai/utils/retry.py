"""Retry with exponential backoff for flaky upstream calls.

Only transient upstream failures (rate limited, internal error, unavailable)
are retried. Everything else propagates on the first failure.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from recipe_ai.models.errors import RETRYABLE_STATUS_CODES

logger = logging.getLogger(__name__)

T = TypeVar("T")

BASE_DELAY_SECONDS = 1.0
MAX_JITTER_SECONDS = 1.0
DEFAULT_MAX_RETRIES = 3


def error_status_code(exc: BaseException) -> int | None:
    """Pull an HTTP-like status code off a provider or httpx error."""
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def is_retryable_error(exc: BaseException) -> bool:
    return error_status_code(exc) in RETRYABLE_STATUS_CODES


def backoff_delay(
    attempt: int,
    base_delay: float = BASE_DELAY_SECONDS,
    max_jitter: float = MAX_JITTER_SECONDS,
) -> float:
    return base_delay * (2 ** attempt) + random.uniform(0, max_jitter)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    *,
    base_delay: float = BASE_DELAY_SECONDS,
    max_jitter: float = MAX_JITTER_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` and retry it on transient upstream errors.

    The operation is called afresh on every attempt, so up to
    ``max_retries + 1`` calls are made in total. Between attempts the caller
    is suspended for ``base_delay * 2**attempt`` plus up to ``max_jitter``
    seconds of jitter.

    Args:
        operation: Zero-argument callable returning an awaitable.
        max_retries: Retries after the first attempt.
        base_delay: Backoff base in seconds.
        max_jitter: Upper bound of the random jitter in seconds.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        The operation's result.

    Raises:
        The first non-retryable error, or the last error once retries run out.
    """
    if max_retries < 0:
        raise ValueError("max_retries cannot be negative")

    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_retryable_error(e):
                raise
            if attempt >= max_retries:
                logger.warning(f"[RETRY] Giving up after {attempt + 1} attempts: {e}")
                raise
            wait = backoff_delay(attempt, base_delay, max_jitter)
            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries + 1} failed "
                f"({error_status_code(e)}), retrying in {wait:.2f}s"
            )
            await sleep(wait)
            attempt += 1
