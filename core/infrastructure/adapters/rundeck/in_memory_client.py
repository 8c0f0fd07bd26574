"""
In-Memory RunDeck Client Implementation.

This simulates a RunDeck server for testing and demos.
"""
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Union
import logging

from core.application.interfaces import IRemoteExecutionClient
from core.domain.entities import Execution
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import InvalidArgumentError
from core.domain.value_objects import LogEntry, LogSegment


logger = logging.getLogger(__name__)

StatusStep = Union[Execution, Exception]
SegmentStep = Union[LogSegment, Exception]


class _ScriptedExecution:
    """Replays fixed answers; the last answer repeats once the script is used up."""

    def __init__(self, statuses: Sequence[StatusStep], segments: Sequence[SegmentStep]):
        if not statuses:
            raise ValueError("A scripted execution needs at least one status")
        self._statuses = list(statuses)
        self._segments = list(segments)
        self._status_index = 0
        self._segment_index = 0

    def first_snapshot(self) -> Execution:
        for step in self._statuses:
            if isinstance(step, Execution):
                return step
        raise ValueError("A scripted execution needs at least one Execution snapshot")

    def status(self) -> Execution:
        step = self._statuses[min(self._status_index, len(self._statuses) - 1)]
        self._status_index += 1
        if isinstance(step, Exception):
            raise step
        return step

    def segment(self, execution_id: str, offset: int) -> LogSegment:
        if not self._segments:
            return LogSegment(
                execution_id=execution_id,
                offset=offset,
                tail_complete=True,
                execution_complete=True,
            )
        step = self._segments[min(self._segment_index, len(self._segments) - 1)]
        self._segment_index += 1
        if isinstance(step, Exception):
            raise step
        return step


class _SimulatedExecution:
    """
    A well-behaved server: output grows with every status poll and is
    served by offset (one offset unit per entry), ``page_size`` entries
    at a time.
    """

    def __init__(
        self,
        final: Execution,
        entries: Sequence[LogEntry],
        polls_until_done: int,
        page_size: int,
    ):
        if polls_until_done < 1:
            raise ValueError("polls_until_done must be at least 1")
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._final = final
        self._running = replace(final, status=ExecutionStatus.RUNNING, ended_at=None)
        self._entries = list(entries)
        self._polls_until_done = polls_until_done
        self._page_size = page_size
        self._polls = 0

    @property
    def _done(self) -> bool:
        return self._polls >= self._polls_until_done

    @property
    def _available(self) -> int:
        if self._done:
            return len(self._entries)
        per_poll = -(-len(self._entries) // self._polls_until_done)
        return min(len(self._entries), self._polls * per_poll)

    def first_snapshot(self) -> Execution:
        return self._running

    def status(self) -> Execution:
        self._polls += 1
        return self._final if self._done else self._running

    def segment(self, execution_id: str, offset: int) -> LogSegment:
        if offset > len(self._entries):
            raise InvalidArgumentError(
                f"Offset {offset} is past the end of execution #{execution_id} output"
            )
        end = min(self._available, offset + self._page_size)
        page = tuple(self._entries[offset:end])
        drained = self._done and not page and offset == len(self._entries)
        return LogSegment(
            execution_id=execution_id,
            offset=max(offset, end),
            tail_complete=drained,
            execution_complete=self._done,
            execution_state=self._final.status.value if self._done else "RUNNING",
            percent_complete=100.0 * end / len(self._entries) if self._entries else 100.0,
            total_size=len(self._entries),
            entries=page,
        )


class InMemoryRundeckClient(IRemoteExecutionClient):
    """
    In-memory implementation of the remote execution client.

    Records every call so tests can assert on call counts.
    Useful for testing and demos.
    """

    def __init__(self):
        """Initialize in-memory client."""
        self._executions: Dict[str, Union[_ScriptedExecution, _SimulatedExecution]] = {}
        self._jobs: Dict[str, str] = {}
        self.status_calls: List[str] = []
        self.log_calls: List[tuple] = []
        self.triggered: List[dict] = []
        logger.info("InMemoryRundeckClient initialized (no real RunDeck connection)")

    # =========================================================================
    # Setup helpers
    # =========================================================================

    def script_execution(
        self,
        execution_id: str,
        statuses: Sequence[StatusStep],
        segments: Sequence[SegmentStep] = (),
    ) -> None:
        """
        Register an execution answering with fixed sequences.

        Args:
            execution_id: Execution identifier
            statuses: Answers to successive get_status calls
            segments: Answers to successive get_log_segment calls
        """
        self._executions[execution_id] = _ScriptedExecution(statuses, segments)

    def simulate_execution(
        self,
        final: Execution,
        entries: Sequence[LogEntry] = (),
        polls_until_done: int = 3,
        page_size: int = 2,
    ) -> None:
        """
        Register an execution that runs for a few polls, then ends as ``final``.

        Args:
            final: Terminal snapshot returned once the job is done
            entries: Full output of the job
            polls_until_done: Status polls answered RUNNING before ``final``
            page_size: Maximum entries per segment
        """
        self._executions[final.id] = _SimulatedExecution(
            final, entries, polls_until_done, page_size
        )

    def register_job(self, job_id: str, execution_id: str) -> None:
        """Make trigger_job(job_id) start the registered execution."""
        if execution_id not in self._executions:
            raise ValueError(f"Execution #{execution_id} is not registered")
        self._jobs[job_id] = execution_id

    # =========================================================================
    # IRemoteExecutionClient
    # =========================================================================

    async def get_status(self, execution_id: str) -> Execution:
        self.status_calls.append(execution_id)
        return self._get(execution_id).status()

    async def get_log_segment(self, execution_id: str, from_offset: int) -> LogSegment:
        self.log_calls.append((execution_id, from_offset))
        if from_offset < 0:
            raise InvalidArgumentError(f"Log offset cannot be negative, got: {from_offset}")
        return self._get(execution_id).segment(execution_id, from_offset)

    async def trigger_job(
        self,
        job_id: str,
        options: Optional[Dict[str, str]] = None,
        node_filters: Optional[Dict[str, str]] = None,
    ) -> Execution:
        self.triggered.append(
            {"job_id": job_id, "options": dict(options or {}), "node_filters": dict(node_filters or {})}
        )
        execution_id = self._jobs.get(job_id)
        if execution_id is None:
            raise InvalidArgumentError(f"Unknown job: {job_id}")

        snapshot = self._executions[execution_id].first_snapshot()
        logger.info(f"In-memory RunDeck: job {job_id} started execution #{execution_id}")
        return replace(snapshot, status=ExecutionStatus.RUNNING, ended_at=None)

    def log_calls_for(self, execution_id: str) -> int:
        return sum(1 for call_id, _ in self.log_calls if call_id == execution_id)

    def _get(self, execution_id: str):
        try:
            return self._executions[execution_id]
        except KeyError:
            raise InvalidArgumentError(f"Unknown execution: #{execution_id}") from None


def make_execution(
    execution_id: str = "1",
    status: ExecutionStatus = ExecutionStatus.SUCCEEDED,
    started_at: Optional[datetime] = None,
    duration: timedelta = timedelta(minutes=3, seconds=27),
    url: Optional[str] = None,
) -> Execution:
    """Build an execution snapshot; terminal ones end ``duration`` after start."""
    started = started_at or datetime(2011, 7, 8, 21, 3, 34, 640000, tzinfo=timezone.utc)
    return Execution(
        id=execution_id,
        status=status,
        started_at=started,
        ended_at=started + duration if status.is_terminal else None,
        url=url or f"http://localhost:4440/execution/follow/{execution_id}",
    )
