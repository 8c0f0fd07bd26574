"""Wrapping policies around a wait - RetryPolicy, run_with_retry, run_with_deadline."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from core.domain.exceptions import ExecutionWaitTimeoutError, RemoteServiceError
from core.infrastructure.logging import get_logger

T = TypeVar("T")

_logger = get_logger("orchestration.policies")


@dataclass
class RetryPolicy:
    """Retry policy for calls to the job server."""

    max_attempts: int = 3
    backoff_seconds: float = 0.0
    retry_on: tuple[type[BaseException], ...] = field(default=(RemoteServiceError,))

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {self.max_attempts}")


async def run_with_retry(policy: RetryPolicy, factory: Callable[[], Awaitable[T]]) -> T:
    """Await ``factory()`` until it succeeds or the policy is exhausted.

    Args:
        policy: RetryPolicy to apply
        factory: Callable creating a fresh awaitable for every attempt

    Returns:
        Result of the first successful attempt

    Raises:
        The last error when every attempt failed, or immediately any
        error not listed in ``policy.retry_on``
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await factory()
        except policy.retry_on as exc:
            if attempt == policy.max_attempts:
                _logger.error(
                    f"Giving up after {attempt} attempt(s): {exc}"
                )
                raise
            _logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} failed, retrying: {exc}"
            )
            if policy.backoff_seconds > 0:
                await asyncio.sleep(policy.backoff_seconds)


async def run_with_deadline(awaitable: Awaitable[T], seconds: float | None) -> T:
    """Bound an awaitable by wall-clock time.

    Args:
        awaitable: Awaitable to run, e.g. ``monitor.wait(execution_id)``
        seconds: Maximum duration, None for no bound

    Returns:
        Result of the awaitable

    Raises:
        ExecutionWaitTimeoutError: If the bound expired (the awaitable is cancelled)
    """
    if seconds is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        _logger.warning(f"Wait cancelled after {seconds:g} seconds")
        raise ExecutionWaitTimeoutError(seconds) from exc
