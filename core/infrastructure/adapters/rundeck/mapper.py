"""RunDeck API payload to domain mapper."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from core.domain.entities import Execution
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import ProtocolError
from core.domain.value_objects import LogEntry, LogSegment

from .schemas import DatePayload, ExecutionPayload, OutputPayload

# RunDeck status strings, anything else is a protocol error
STATUS_MAP = {
    "running": ExecutionStatus.RUNNING,
    "scheduled": ExecutionStatus.RUNNING,
    "queued": ExecutionStatus.RUNNING,
    "succeeded": ExecutionStatus.SUCCEEDED,
    "failed": ExecutionStatus.FAILED,
    "failed-with-retry": ExecutionStatus.FAILED,
    "timedout": ExecutionStatus.FAILED,
    "aborted": ExecutionStatus.ABORTED,
}


class RundeckMapper:
    """Mapper for converting RunDeck JSON responses to domain objects."""

    @staticmethod
    def to_execution(data: Dict[str, Any], base_url: str = "") -> Execution:
        """Convert an execution response to an Execution snapshot.

        Args:
            data: Decoded JSON body
            base_url: Server URL used when the payload has no link

        Returns:
            Execution domain entity

        Raises:
            ProtocolError: If required fields are missing or invalid
        """
        try:
            payload = ExecutionPayload.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"Malformed execution response: {exc}") from exc

        execution_id = str(payload.id)
        status = STATUS_MAP.get(payload.status.strip().lower())
        if status is None:
            raise ProtocolError(
                f"Unknown status {payload.status!r} for execution #{execution_id}"
            )

        started_at = RundeckMapper._to_datetime(payload.date_started)
        if started_at is None:
            raise ProtocolError(f"Execution #{execution_id} has no start date")

        ended_at = None
        if status.is_terminal:
            ended_at = RundeckMapper._to_datetime(payload.date_ended)

        url = payload.permalink or payload.href or f"{base_url}/execution/follow/{execution_id}"

        return Execution(
            id=execution_id,
            status=status,
            started_at=started_at,
            ended_at=ended_at,
            url=url,
        )

    @staticmethod
    def to_log_segment(data: Dict[str, Any], execution_id: str) -> LogSegment:
        """Convert an output response to a LogSegment.

        Absent flags are read as false and absent entries as empty.

        Raises:
            ProtocolError: If the payload has no usable offset
        """
        try:
            payload = OutputPayload.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"Malformed output response: {exc}") from exc

        entries = tuple(
            LogEntry(
                message=entry.log if entry.log is not None else entry.message,
                time=entry.time,
                level=entry.level,
                user=entry.user,
                command=entry.command,
                node=entry.node,
            )
            for entry in payload.entries or ()
        )

        return LogSegment(
            execution_id=execution_id,
            offset=payload.offset,
            tail_complete=bool(payload.completed),
            execution_complete=bool(payload.exec_completed),
            had_error=bool(payload.has_failed_nodes) or bool(payload.error),
            execution_state=payload.exec_state,
            percent_complete=payload.percent_loaded,
            total_size=payload.total_size,
            entries=entries,
        )

    @staticmethod
    def _to_datetime(date: Optional[DatePayload]) -> Optional[datetime]:
        if date is None:
            return None
        if date.unixtime is not None:
            seconds, millis = divmod(date.unixtime, 1000)
            try:
                return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)
            except (OverflowError, OSError, ValueError) as exc:
                raise ProtocolError(f"Invalid timestamp: {date.unixtime}") from exc
        if date.date:
            try:
                parsed = datetime.fromisoformat(date.date.replace("Z", "+00:00"))
            except ValueError as exc:
                raise ProtocolError(f"Invalid date format: {date.date}") from exc
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        return None
