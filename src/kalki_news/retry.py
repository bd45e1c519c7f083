"""Exponential backoff for rate-limited remote calls."""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")

QUOTA_MARKERS = ("429", "RESOURCE_EXHAUSTED", "rate_limit_error")


def is_quota_error(exc: BaseException) -> bool:
    """Return True if ``exc`` looks like a rate-limit / quota rejection.

    Matches an HTTP 429 status on the exception (``status_code`` as used by
    the Anthropic and httpx errors, or ``status``) or one of the provider
    markers in its message.
    """
    for attr in ("status_code", "status"):
        if getattr(exc, attr, None) == 429:
            return True
    message = str(exc)
    return any(marker in message for marker in QUOTA_MARKERS)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 3,
    delay: float = 2.0,
) -> T:
    """Invoke ``fn``, retrying quota errors with exponential backoff.

    Args:
        fn: Zero-argument coroutine factory. Called once per attempt.
        retries: Number of retries after the first attempt.
        delay: Seconds to wait before the first retry; doubled each time.

    Returns:
        Whatever ``fn`` returns on the first successful attempt.

    Raises:
        Exception: The last error from ``fn``, unchanged, when it is not a
            quota error or the retry budget is spent.
    """
    while True:
        try:
            return await fn()
        except Exception as e:
            if retries <= 0 or not is_quota_error(e):
                raise
            logger.warning(
                "Quota exceeded. Retrying in %.1fs... (%d retries left)", delay, retries
            )
            await asyncio.sleep(delay)
            delay *= 2
            retries -= 1


def with_retry(
    *, retries: int = 3, delay: float = 2.0
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of :func:`call_with_retry`."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await call_with_retry(
                lambda: func(*args, **kwargs), retries=retries, delay=delay
            )

        return wrapper

    return decorator
