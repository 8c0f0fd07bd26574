"""
Stream Output Sink Implementation.

Writes operator-facing lines to a text stream (stdout, a build log file).
"""
from typing import Optional, TextIO
import logging
import sys
import threading

from core.application.interfaces import IOutputSink


logger = logging.getLogger(__name__)


class StreamOutputSink(IOutputSink):
    """
    Append lines to a text stream, flushing after each one.

    Several monitors may share one sink; a lock keeps lines whole.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        """
        Initialize stream sink.

        Args:
            stream: Target stream, stdout when omitted
        """
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    def write(self, line: str) -> None:
        try:
            with self._lock:
                self.stream.write(f"{line}\n")
                self.stream.flush()
        except (OSError, ValueError) as e:
            # Closed or broken stream: the build log is best-effort
            logger.error(f"Failed to write to output stream: {e}", exc_info=True)
