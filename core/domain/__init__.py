"""Domain layer - pure domain models and errors."""

from .entities import Execution
from .enums import ExecutionStatus
from .value_objects import LogEntry, LogSegment

__all__ = [
    "Execution",
    "ExecutionStatus",
    "LogEntry",
    "LogSegment",
]
