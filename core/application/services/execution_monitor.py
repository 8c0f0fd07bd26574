"""
Execution monitor - wait for a remote execution to finish.

Polls the execution status and, when tailing is enabled, drives a
LogTailer in lock-step with the status polls. Once the status is
terminal the remaining buffered output is drained before the summary
line is written.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from core.application import messages
from core.application.interfaces import IOutputSink, IRemoteExecutionClient
from core.domain.entities import Execution
from core.domain.exceptions import MonitorStoppedError, RundeckError
from core.domain.value_objects import LogSegment
from core.infrastructure.logging import get_logger

from .log_tailer import LogTailer


@dataclass(frozen=True)
class MonitorResult:
    """Outcome of a completed wait."""

    execution: Execution
    summary: str
    status_polls: int
    output_tailed: bool


class ExecutionMonitor:
    """
    Wait for one execution at a time, polling status and output.

    The monitor never retries: a failed status poll ends the wait with
    the client's error, a failed output fetch only stops the tailing.
    ``stop()`` may be called from another task to abandon the wait
    between two ticks.
    """

    def __init__(
        self,
        client: IRemoteExecutionClient,
        sink: IOutputSink,
        poll_interval_ms: int = 5000,
        tail_log: bool = True,
    ) -> None:
        """Initialize execution monitor.

        Args:
            client: Remote job server client
            sink: Writer receiving markers, output lines and the summary
            poll_interval_ms: Default delay between two ticks
            tail_log: Default for tailing the execution output
        """
        if poll_interval_ms < 0:
            raise ValueError(f"poll_interval_ms cannot be negative, got: {poll_interval_ms}")

        self._client = client
        self._sink = sink
        self._poll_interval_ms = poll_interval_ms
        self._tail_log = tail_log
        self._stop_event = asyncio.Event()
        self._logger = get_logger("rundeck.monitor")

    def stop(self) -> None:
        """Ask the running wait to end before its next tick.

        A later call to wait() starts again with the signal cleared.
        """
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def wait(
        self,
        execution_id: str,
        poll_interval_ms: Optional[int] = None,
        tail_log: Optional[bool] = None,
    ) -> MonitorResult:
        """Wait until the execution is terminal and its output is drained.

        Args:
            execution_id: Execution to wait for
            poll_interval_ms: Overrides the monitor default for this wait
            tail_log: Overrides the monitor default for this wait

        Returns:
            MonitorResult with the terminal snapshot and the summary line

        Raises:
            RundeckError: If a status poll failed
            MonitorStoppedError: If stop() was called before completion
        """
        # stop() only ends the wait in progress
        self._stop_event.clear()
        interval_ms = self._poll_interval_ms if poll_interval_ms is None else poll_interval_ms
        interval = max(interval_ms, 0) / 1000
        tail = self._tail_log if tail_log is None else tail_log

        self._logger.info(
            f"Waiting for execution #{execution_id} "
            f"(poll_interval_ms={interval_ms}, tail_log={tail})"
        )
        self._sink.write(messages.WAITING_FOR_EXECUTION)

        tailer: Optional[LogTailer] = None
        if tail:
            tailer = LogTailer(self._client, self._sink, execution_id)
        else:
            self._sink.write(messages.OUTPUT_NOT_TAILED)

        offset = 0
        polls = 0

        while True:
            self._raise_if_stopped(execution_id)

            polls += 1
            try:
                execution = await self._client.get_status(execution_id)
            except RundeckError as exc:
                self._logger.error(
                    f"Status poll #{polls} of execution #{execution_id} failed: {exc}"
                )
                raise

            if execution.is_terminal:
                break

            if tailer is not None and not tailer.complete:
                segment = await self._tail_once(tailer, offset)
                if segment is None:
                    tailer = None
                else:
                    offset = segment.offset

            await self._sleep(interval, execution_id)

        # Job is done, flush whatever output the server still buffers
        while tailer is not None and not tailer.complete:
            self._raise_if_stopped(execution_id)
            segment = await self._tail_once(tailer, offset)
            if segment is None:
                tailer = None
                break
            offset = segment.offset
            if not segment.entries and not tailer.complete:
                await self._sleep(interval, execution_id)

        summary = messages.format_summary(execution)
        self._sink.write(summary)
        self._logger.info(
            f"Execution #{execution_id} finished with status {execution.status.value} "
            f"after {polls} status poll(s)"
        )

        return MonitorResult(
            execution=execution,
            summary=summary,
            status_polls=polls,
            output_tailed=tailer is not None and tailer.complete,
        )

    async def _tail_once(self, tailer: LogTailer, offset: int) -> Optional[LogSegment]:
        """Fetch one segment; returns None when tailing had to be abandoned."""
        try:
            return await tailer.fetch_next(tailer.execution_id, offset)
        except RundeckError as exc:
            self._logger.warning(
                f"Tailing output of execution #{tailer.execution_id} failed at "
                f"offset {offset}, giving up on output: {exc}"
            )
            self._sink.write(messages.tailing_stopped(exc))
            return None

    async def _sleep(self, seconds: float, execution_id: str) -> None:
        """Suspend until the next tick, waking up early on stop()."""
        if seconds <= 0:
            await asyncio.sleep(0)
        else:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                pass
        self._raise_if_stopped(execution_id)

    def _raise_if_stopped(self, execution_id: str) -> None:
        if self._stop_event.is_set():
            self._logger.warning(f"Monitoring of execution #{execution_id} stopped")
            raise MonitorStoppedError(execution_id)
