"""Bounded retry helper shared by the outbound fetchers."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from statscard.utils.logger import redact_secrets

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_backoff(step_seconds: float) -> Callable[[int], float]:
    """Delay of ``attempt * step_seconds`` after the given failed attempt."""

    def _delay(attempt: int) -> float:
        return max(attempt, 0) * step_seconds

    return _delay


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    backoff: Callable[[int], float],
    should_retry: Callable[[T], bool] | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` up to ``max_attempts`` times.

    An attempt is repeated when it raises one of ``retry_on`` or when its
    result satisfies ``should_retry``. Once attempts are exhausted the last
    suspicious result is returned, or the last exception re-raised.
    """
    attempts = max(int(max_attempts), 1)

    for attempt in range(1, attempts + 1):
        try:
            result = await operation()
        except retry_on as exc:
            if attempt == attempts:
                raise
            logger.warning(
                f"{description} failed on attempt {attempt}/{attempts}: {redact_secrets(exc)}"
            )
        else:
            if should_retry is None or not should_retry(result):
                return result
            if attempt == attempts:
                return result
            logger.info(f"{description} returned a suspicious result on attempt {attempt}/{attempts}, retrying")

        await sleeper(backoff(attempt))

    raise AssertionError("unreachable")  # pragma: no cover
