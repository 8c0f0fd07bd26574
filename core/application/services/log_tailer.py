"""
Log tailer - incremental retrieval of a remote execution's output.

The tailer asks the job server for the output produced since a given
offset, writes the entries that were not delivered before to the output
sink, and frames the whole stream with start/end markers.

Design Decisions:
    - The caller owns the offset and advances it only after fetch_next
      returned, so a failed call never loses or repeats output
    - A segment whose offset does not move past the last delivered one
      carries nothing new and its entries are skipped
    - Errors from the remote client propagate untouched; the monitor
      decides whether they are fatal
"""
from dataclasses import replace
from typing import Optional

from core.application import messages
from core.application.interfaces import IOutputSink, IRemoteExecutionClient
from core.domain.value_objects import LogEntry, LogSegment
from core.infrastructure.logging import get_logger


class TailCompleteError(RuntimeError):
    """Raised when fetch_next is called after the tail was completed."""


class LogTailer:
    """
    Tail the output of one execution.

    Attributes:
        execution_id: Execution whose output is tailed.
        started: True once the start marker was written.
        complete: True once a segment reported tail_complete.
        delivered_offset: Highest offset whose entries reached the sink.

    Example:
        >>> tailer = LogTailer(client, sink, "42")
        >>> offset = 0
        >>> while not tailer.complete:
        ...     offset = (await tailer.fetch_next("42", offset)).offset
    """

    def __init__(
        self,
        client: IRemoteExecutionClient,
        sink: IOutputSink,
        execution_id: str,
    ) -> None:
        self._client = client
        self._sink = sink
        self._logger = get_logger("rundeck.tailer")
        self.execution_id = execution_id
        self.started = False
        self.complete = False
        self.delivered_offset = 0
        # Command of the previous entry, a header is written when it changes
        self._last_command: Optional[str] = None
        self._header_pending = False

    async def fetch_next(self, execution_id: str, last_offset: int) -> LogSegment:
        """
        Fetch and emit the output produced since ``last_offset``.

        Args:
            execution_id: Execution to tail, must match the tailer's
            last_offset: Offset returned by the previous call (0 at start)

        Returns:
            The segment, with ``offset`` never lower than ``last_offset``
            and ``entries`` limited to what was newly emitted

        Raises:
            TailCompleteError: If the tail was already completed
            RundeckError: Whatever the remote client raised
        """
        if execution_id != self.execution_id:
            raise ValueError(
                f"Tailer for execution #{self.execution_id} "
                f"cannot fetch output of #{execution_id}"
            )
        if self.complete:
            raise TailCompleteError(
                f"Output of execution #{execution_id} was already fully tailed"
            )

        baseline = max(last_offset, self.delivered_offset)
        segment = await self._client.get_log_segment(execution_id, last_offset)

        if not self.started:
            self._sink.write(messages.OUTPUT_START_MARKER)
            self.started = True

        entries = segment.entries
        if entries and segment.offset <= baseline:
            # Offset did not advance: these lines were already delivered
            self._logger.debug(
                f"Skipping {len(entries)} already delivered entries "
                f"of execution #{execution_id} (offset={segment.offset})"
            )
            entries = ()

        for entry in entries:
            self._emit(entry)

        offset = max(baseline, segment.offset)
        self.delivered_offset = offset

        if segment.tail_complete:
            self._sink.write(messages.OUTPUT_END_MARKER)
            self.complete = True
            self._logger.info(
                f"Output of execution #{execution_id} fully tailed (offset={offset})"
            )

        if offset == segment.offset and entries is segment.entries:
            return segment
        return replace(segment, offset=offset, entries=entries)

    def _emit(self, entry: LogEntry) -> None:
        """Write one entry, preceded by a header when its command changed.

        Entries without a message write nothing but still set the command,
        its header then goes before the next message.
        """
        if entry.command and entry.command != self._last_command:
            self._last_command = entry.command
            self._header_pending = True
        if entry.message is None:
            return
        if self._header_pending:
            self._sink.write(messages.command_header(self._last_command))
            self._header_pending = False
        self._sink.write(entry.message)
