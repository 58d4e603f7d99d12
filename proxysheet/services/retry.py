"""
Retry policy and a generic async retry helper.

The policy is data; retry_async() is the only place that loops. Each attempt
gets its own timeout, enforced by cancelling the attempt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from proxysheet.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors worth another attempt: timeouts, transport failures, non-2xx statuses
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (TimeoutError, httpx.HTTPError)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Bounded retry with linear backoff.

    Attributes:
        max_attempts: Hard ceiling on attempts (>= 1)
        backoff_step: Seconds to wait after attempt N is N * backoff_step
        timeout: Seconds allowed for each individual attempt
    """

    max_attempts: int = 4
    backoff_step: float = 0.25
    timeout: float = 12.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    def backoff(self, attempt: int) -> float:
        """Delay in seconds after failed attempt number `attempt` (1-based)."""
        return self.backoff_step * attempt


def retry_policy_from_settings() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.fetch_max_attempts,
        backoff_step=settings.fetch_backoff_seconds,
        timeout=settings.fetch_timeout_seconds,
    )


class RetryExhaustedError(Exception):
    """Every attempt failed. `last_error` is the final attempt's exception."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error!r}")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "operation",
) -> T:
    """
    Run `operation` until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Attempt ceiling, backoff and per-attempt timeout
        retry_on: Exception types that trigger another attempt
        sleep: Awaitable sleep, injectable for tests
        label: Used in log messages

    Returns:
        The first successful result

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error
        Exception: Non-retryable errors propagate immediately
    """
    attempt = 1
    while True:
        try:
            async with asyncio.timeout(policy.timeout):
                return await operation()
        except retry_on as e:
            if attempt >= policy.max_attempts:
                raise RetryExhaustedError(attempt, e) from e
            delay = policy.backoff(attempt)
            logger.info(
                "%s failed (attempt %d/%d): %r; retrying in %.2fs",
                label,
                attempt,
                policy.max_attempts,
                e,
                delay,
            )
            await sleep(delay)
            attempt += 1
