"""Log output value objects - LogEntry and LogSegment."""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class LogEntry:
    """
    One line of execution output.

    Every field is an opaque display string; None when the server
    did not send it.
    """

    message: Optional[str] = None
    time: Optional[str] = None
    level: Optional[str] = None
    user: Optional[str] = None
    command: Optional[str] = None
    node: Optional[str] = None


@dataclass(frozen=True)
class LogSegment:
    """
    One page of incremental execution output.

    ``offset`` is the cursor to send on the next request.
    ``execution_complete`` and ``tail_complete`` are independent: the job
    can be finished while buffered output is still being served.
    """

    execution_id: str
    offset: int
    tail_complete: bool = False
    execution_complete: bool = False
    had_error: bool = False
    execution_state: Optional[str] = None
    percent_complete: Optional[float] = None
    total_size: Optional[int] = None
    entries: Tuple[LogEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.offset < 0:
            raise ValueError(f"Log offset cannot be negative, got: {self.offset}")
        # Accept any iterable (including None) for entries
        object.__setattr__(self, "entries", tuple(self.entries or ()))
