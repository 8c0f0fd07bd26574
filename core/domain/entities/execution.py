"""
Execution entity.

One run of a remotely triggered job, as last reported by the job server.
Each status poll yields a new snapshot; snapshots are never mutated.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..enums.execution_status import ExecutionStatus


@dataclass(frozen=True)
class Execution:
    """Immutable snapshot of a remote execution."""

    id: str
    status: ExecutionStatus
    started_at: datetime
    url: str = ""
    ended_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Execution id is required")

        if not isinstance(self.status, ExecutionStatus):
            object.__setattr__(self, "status", ExecutionStatus(self.status))

        # ended_at only makes sense once the job stopped
        if self.status is ExecutionStatus.RUNNING and self.ended_at is not None:
            raise ValueError(
                f"Execution #{self.id} is RUNNING but has ended_at={self.ended_at}"
            )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        """
        Elapsed time between start and end of the execution.

        Falls back to ``now`` (or the current UTC time) when the server has
        not reported an end date.

        Args:
            now: Reference time used when ended_at is absent

        Returns:
            Elapsed time, never negative
        """
        end = self.ended_at
        if end is None:
            end = now or datetime.now(timezone.utc)
            if self.started_at.tzinfo is None:
                end = end.replace(tzinfo=None)

        elapsed = end - self.started_at
        if elapsed < timedelta(0):
            return timedelta(0)
        return elapsed
