"""Tests for wrapping policies - retry and deadline."""

import asyncio

import pytest

from core.application.services.execution_monitor import ExecutionMonitor
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import (
    AuthenticationError,
    ExecutionWaitTimeoutError,
    RemoteServiceError,
)
from core.infrastructure.adapters.rundeck import make_execution
from orchestration.policies import RetryPolicy, run_with_deadline, run_with_retry


@pytest.mark.asyncio
async def test_retry_success_after_failures():
    """Test retry succeeds after initial failures."""
    counter = {"n": 0}

    async def flaky_call() -> str:
        counter["n"] += 1
        if counter["n"] < 3:
            raise RemoteServiceError("temporary error")
        return "ok"

    result = await run_with_retry(RetryPolicy(max_attempts=3), flaky_call)

    assert result == "ok"
    assert counter["n"] == 3


@pytest.mark.asyncio
async def test_retry_exhausted_raises_last_error():
    counter = {"n": 0}

    async def always_fails() -> None:
        counter["n"] += 1
        raise RemoteServiceError(f"failure {counter['n']}")

    with pytest.raises(RemoteServiceError, match="failure 2"):
        await run_with_retry(RetryPolicy(max_attempts=2), always_fails)

    assert counter["n"] == 2


@pytest.mark.asyncio
async def test_authentication_error_is_not_retried():
    counter = {"n": 0}

    async def rejected() -> None:
        counter["n"] += 1
        raise AuthenticationError("bad token")

    with pytest.raises(AuthenticationError):
        await run_with_retry(RetryPolicy(max_attempts=5), rejected)

    assert counter["n"] == 1


@pytest.mark.asyncio
async def test_retry_wraps_a_whole_wait(client, sink, running, succeeded):
    """A status failure ends one wait; the policy starts a fresh one."""
    client.script_execution("1", [running, RemoteServiceError("HTTP 502"), succeeded])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0, tail_log=False)

    result = await run_with_retry(
        RetryPolicy(max_attempts=2), lambda: monitor.wait("1")
    )

    assert result.execution.status is ExecutionStatus.SUCCEEDED
    assert len(client.status_calls) == 3


def test_retry_policy_needs_one_attempt():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_deadline_none_is_unbounded():
    async def slow() -> str:
        await asyncio.sleep(0.01)
        return "done"

    assert await run_with_deadline(slow(), None) == "done"


@pytest.mark.asyncio
async def test_deadline_cancels_the_wait(client, sink):
    client.script_execution("9", [make_execution("9", ExecutionStatus.RUNNING)])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=10, tail_log=False)

    with pytest.raises(ExecutionWaitTimeoutError) as exc_info:
        await run_with_deadline(monitor.wait("9"), 0.05)

    assert exc_info.value.seconds == 0.05
    polls = len(client.status_calls)
    assert polls >= 1
    await asyncio.sleep(0.05)
    # wait was cancelled, nothing polls anymore
    assert len(client.status_calls) == polls
