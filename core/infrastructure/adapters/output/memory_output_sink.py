"""
In-Memory Output Sink Implementation.

Keeps written lines in a list, for tests and demos.
"""
from typing import List
import logging

from core.application.interfaces import IOutputSink


logger = logging.getLogger(__name__)


class InMemoryOutputSink(IOutputSink):
    """Collect lines instead of writing them anywhere."""

    def __init__(self):
        self.lines: List[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line)
        logger.debug(f"sink <- {line}")

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def count(self, line: str) -> int:
        """Number of times exactly ``line`` was written."""
        return sum(1 for written in self.lines if written == line)

    def clear(self) -> None:
        """Clear lines (for testing)."""
        self.lines.clear()
