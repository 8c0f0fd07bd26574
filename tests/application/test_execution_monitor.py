"""Tests for ExecutionMonitor."""

import asyncio
import logging
from datetime import timedelta

import pytest

from core.application import messages
from core.application.services.execution_monitor import ExecutionMonitor
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import (
    AuthenticationError,
    MonitorStoppedError,
    ProtocolError,
    RemoteServiceError,
)
from core.domain.value_objects import LogSegment
from core.infrastructure.adapters.rundeck import make_execution
from tests.mocks.log_factories import entry, rundeck_style_segments

SUMMARY = "RunDeck execution #1 finished in 3 minutes 27 seconds, with status : SUCCEEDED"


@pytest.mark.asyncio
async def test_wait_without_tailing(client, sink, succeeded):
    """Disabled tailing: one placeholder line and no output calls."""
    client.script_execution("1", [succeeded], rundeck_style_segments())
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0, tail_log=False)

    result = await monitor.wait("1")

    assert result.summary == SUMMARY
    assert result.execution.status is ExecutionStatus.SUCCEEDED
    assert result.output_tailed is False
    assert sink.count(messages.OUTPUT_NOT_TAILED) == 1
    assert client.log_calls == []
    assert sink.lines == [messages.WAITING_FOR_EXECUTION, messages.OUTPUT_NOT_TAILED, SUMMARY]


@pytest.mark.asyncio
async def test_terminal_status_drains_remaining_output(client, sink, succeeded):
    """Job already done on the first poll: the whole buffered log is still delivered."""
    client.script_execution("1", [succeeded], rundeck_style_segments())
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("1")

    assert result.output_tailed is True
    assert result.status_polls == 1
    assert client.log_calls_for("1") == 4
    assert messages.OUTPUT_START_MARKER in sink.lines
    assert ">>>> Finished Command <<<<" in sink.lines
    assert sink.lines.index(messages.OUTPUT_END_MARKER) < sink.lines.index(SUMMARY)
    assert sink.lines[-1] == SUMMARY


@pytest.mark.asyncio
async def test_one_output_fetch_per_running_tick(client, sink, running, succeeded):
    """Status and output are polled in lock-step while running."""
    client.script_execution("1", [running, running, running, succeeded], rundeck_style_segments())
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("1")

    assert result.status_polls == 4
    # 3 fetches during the running ticks, 1 during the drain
    assert client.log_calls == [("1", 0), ("1", 1), ("1", 2), ("1", 3)]
    assert sink.lines[-1] == SUMMARY


@pytest.mark.asyncio
async def test_no_output_fetch_after_tail_complete(client, sink, running, succeeded):
    """Tail completes while the job still runs: status keeps being polled alone."""
    client.script_execution(
        "1",
        [running, running, running, running, succeeded],
        [LogSegment("1", 1, entries=(entry("only"),)), LogSegment("1", 1, tail_complete=True)],
    )
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("1")

    assert result.status_polls == 5
    assert client.log_calls_for("1") == 2
    assert sink.count(messages.OUTPUT_END_MARKER) == 1


@pytest.mark.asyncio
async def test_execution_complete_before_tail_complete_keeps_tailing(client, sink, succeeded):
    """execution_complete without tail_complete never stops the drain."""
    client.script_execution(
        "1",
        [succeeded],
        [
            LogSegment("1", 1, execution_complete=True, entries=(entry("a"),)),
            LogSegment("1", 1, execution_complete=True),
            LogSegment("1", 2, execution_complete=True, entries=(entry("b"),)),
            LogSegment("1", 2, tail_complete=True, execution_complete=True),
        ],
    )
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("1")

    assert result.output_tailed is True
    assert client.log_calls_for("1") == 4
    assert "a" in sink.lines and "b" in sink.lines


@pytest.mark.asyncio
async def test_status_error_stops_the_wait(client, sink, running):
    """A failed status poll surfaces as is, without summary."""
    error = RemoteServiceError("connection refused")
    client.script_execution("1", [running, running, error], rundeck_style_segments())
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    with pytest.raises(RemoteServiceError) as exc_info:
        await monitor.wait("1")

    assert exc_info.value is error
    assert len(client.status_calls) == 3
    assert not any("finished in" in line for line in sink.lines)


@pytest.mark.asyncio
async def test_authentication_error_on_status_is_fatal(client, sink):
    client.script_execution("1", [AuthenticationError("bad token")])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0, tail_log=False)

    with pytest.raises(AuthenticationError):
        await monitor.wait("1")


@pytest.mark.asyncio
async def test_tailing_error_keeps_status_polling(client, sink, running, succeeded, caplog):
    """A failed output fetch abandons tailing only."""
    client.script_execution(
        "1",
        [running, running, running, succeeded],
        [LogSegment("1", 1, entries=(entry("first"),)), ProtocolError("garbled output")],
    )
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    with caplog.at_level(logging.WARNING):
        result = await monitor.wait("1")

    assert result.summary == SUMMARY
    assert result.output_tailed is False
    assert result.status_polls == 4
    # first fetch ok, second fails, none afterwards
    assert client.log_calls_for("1") == 2
    assert messages.tailing_stopped(ProtocolError("garbled output")) in sink.lines
    assert messages.OUTPUT_END_MARKER not in sink.lines
    assert any("garbled output" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_tailing_error_during_drain(client, sink, succeeded):
    client.script_execution("1", [succeeded], [RemoteServiceError("timeout")])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("1")

    assert result.summary == SUMMARY
    assert client.log_calls_for("1") == 1


@pytest.mark.asyncio
async def test_summary_for_failed_execution(client, sink):
    failed = make_execution("12", ExecutionStatus.FAILED, duration=timedelta(seconds=59))
    client.script_execution("12", [failed])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0, tail_log=False)

    result = await monitor.wait("12")

    assert result.summary == "RunDeck execution #12 finished in 0 minutes 59 seconds, with status : FAILED"


@pytest.mark.asyncio
async def test_full_log_delivered_through_monitor(client, sink):
    """Well-behaved server: every line reaches the sink exactly once, in order."""
    log = [entry(f"step {i}", command="deploy") for i in range(10)]
    client.simulate_execution(
        make_execution("5", ExecutionStatus.SUCCEEDED), log, polls_until_done=4, page_size=2
    )
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=0)

    result = await monitor.wait("5")

    assert result.output_tailed is True
    assert [line for line in sink.lines if line.startswith("step")] == [e.message for e in log]
    offsets = [offset for _, offset in client.log_calls]
    assert offsets == sorted(offsets)


@pytest.mark.asyncio
async def test_per_wait_overrides(client, sink, succeeded):
    client.script_execution("1", [succeeded], rundeck_style_segments())
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=60_000, tail_log=True)

    result = await monitor.wait("1", poll_interval_ms=0, tail_log=False)

    assert result.summary == SUMMARY
    assert client.log_calls == []


@pytest.mark.asyncio
async def test_stop_between_ticks(client, sink, running):
    """stop() ends the wait without summary, output already written stays."""
    client.script_execution("1", [running], [LogSegment("1", 1, entries=(entry("hello"),))])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=10_000)

    task = asyncio.create_task(monitor.wait("1"))
    while not client.log_calls:
        await asyncio.sleep(0)
    monitor.stop()

    with pytest.raises(MonitorStoppedError):
        await asyncio.wait_for(task, timeout=5)

    assert monitor.stopped is True
    assert "hello" in sink.lines
    assert not any("finished in" in line for line in sink.lines)


@pytest.mark.asyncio
async def test_stopped_monitor_can_wait_again(client, sink, running, succeeded):
    """stop() ends the wait in progress only."""
    client.script_execution("1", [running, succeeded])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=10_000, tail_log=False)

    task = asyncio.create_task(monitor.wait("1"))
    while not client.status_calls:
        await asyncio.sleep(0)
    monitor.stop()
    with pytest.raises(MonitorStoppedError):
        await asyncio.wait_for(task, timeout=5)

    result = await monitor.wait("1")

    assert result.summary == SUMMARY
    assert monitor.stopped is False


@pytest.mark.asyncio
async def test_cancelling_the_task_abandons_the_wait(client, sink, running):
    client.script_execution("1", [running])
    monitor = ExecutionMonitor(client, sink, poll_interval_ms=10_000, tail_log=False)

    task = asyncio.create_task(monitor.wait("1"))
    while not client.status_calls:
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert sink.lines[-1] == messages.OUTPUT_NOT_TAILED


@pytest.mark.asyncio
async def test_independent_monitors_share_one_client(client, sink):
    """Concurrent waits on different executions do not interfere."""
    client.simulate_execution(
        make_execution("a", ExecutionStatus.SUCCEEDED), [entry("from a")], polls_until_done=2
    )
    client.simulate_execution(
        make_execution("b", ExecutionStatus.ABORTED), [entry("from b")], polls_until_done=3
    )

    results = await asyncio.gather(
        ExecutionMonitor(client, sink, poll_interval_ms=0).wait("a"),
        ExecutionMonitor(client, sink, poll_interval_ms=0).wait("b"),
    )

    assert [r.execution.status for r in results] == [ExecutionStatus.SUCCEEDED, ExecutionStatus.ABORTED]
    assert sink.count("from a") == 1
    assert sink.count("from b") == 1


def test_negative_poll_interval_is_rejected(client, sink):
    with pytest.raises(ValueError):
        ExecutionMonitor(client, sink, poll_interval_ms=-1)
