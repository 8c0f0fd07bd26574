"""Domain value objects."""

from .log_segment import LogEntry, LogSegment

__all__ = [
    "LogEntry",
    "LogSegment",
]
