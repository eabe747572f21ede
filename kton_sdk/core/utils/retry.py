from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def exponential_backoff_s(
    attempt: int, *, base_delay_s: float = 0.25, max_delay_s: float | None = None
) -> float:
    delay = base_delay_s * 2**attempt
    return delay if max_delay_s is None else min(delay, max_delay_s)


def is_retryable_http_error(exc: Exception) -> bool:
    """Rate limits, gateway errors and connection failures are worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def retry_after_s(exc: Exception) -> float | None:
    """Seconds from a ``Retry-After`` header, if the server sent one."""
    if not isinstance(exc, httpx.HTTPStatusError):
        return None
    value = exc.response.headers.get("Retry-After")
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay_s: float = 0.25,
    max_delay_s: float | None = None,
    should_retry: Callable[[Exception], bool] | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Await ``fn()`` up to ``max_retries`` times, sleeping between attempts.

    The last error, or the first one ``should_retry`` rejects, is re-raised.
    A server-sent ``Retry-After`` takes precedence over the backoff schedule;
    both are capped at ``max_delay_s``.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be >= 1")

    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:  # noqa: BLE001
            final = attempt == max_retries - 1
            if final or (should_retry is not None and not should_retry(exc)):
                raise
            delay_s = retry_after_s(exc)
            if delay_s is None:
                delay_s = exponential_backoff_s(attempt, base_delay_s=base_delay_s)
            if max_delay_s is not None:
                delay_s = min(delay_s, max_delay_s)
            if on_retry is not None:
                on_retry(attempt, exc, delay_s)
            await asyncio.sleep(delay_s)
            attempt += 1
