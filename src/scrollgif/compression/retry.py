"""
Retry With Backoff
==================

Generic "attempt N times with an exponential backoff schedule" combinator.

The sleep function is injected so tests can record the schedule instead
of waiting for it.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Tuple, Type, TypeVar


logger = logging.getLogger(__name__)


T = TypeVar("T")


class RetryExhausted(Exception):
    """Raised when every attempt failed. Chains the last error."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"All {attempts} attempts failed; last error: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def backoff_schedule(attempts: int, base_delay: float) -> List[float]:
    """Delays slept between consecutive attempts: base, 2*base, 4*base, ..."""
    return [base_delay * (2 ** i) for i in range(max(0, attempts - 1))]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
) -> T:
    """
    Run `operation` until it succeeds or `attempts` runs have failed.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        attempts: Maximum number of attempts (>= 1)
        base_delay: First backoff delay in seconds; doubles every retry
        sleep: Awaitable sleep used between attempts
        retry_on: Exception types that trigger a retry
        description: Label used in log messages

    Returns:
        The first successful result

    Raises:
        RetryExhausted: After the final failed attempt
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    delays = backoff_schedule(attempts, base_delay)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                logger.error(f"{description} failed after {attempts} attempts: {e}")
                raise RetryExhausted(attempts, e) from e
            delay = delays[attempt - 1]
            logger.warning(
                f"{description} failed (attempt {attempt}/{attempts}): {e}. "
                f"Retrying in {delay:.1f}s"
            )
            await sleep(delay)

    raise AssertionError("unreachable")
