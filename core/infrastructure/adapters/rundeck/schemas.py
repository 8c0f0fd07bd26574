"""
RunDeck REST API payload schemas.

Only the fields the adapter reads are declared; everything else the
server sends is ignored. Optional fields may be absent or null.
"""
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DatePayload(_Payload):
    """``date-started`` / ``date-ended`` object."""

    unixtime: Optional[int] = None
    date: Optional[str] = None


class ExecutionPayload(_Payload):
    """Response of ``GET /execution/{id}`` and ``POST /job/{id}/run``."""

    id: Union[int, str]
    status: str
    href: Optional[str] = None
    permalink: Optional[str] = None
    date_started: Optional[DatePayload] = Field(default=None, alias="date-started")
    date_ended: Optional[DatePayload] = Field(default=None, alias="date-ended")


class OutputEntryPayload(_Payload):
    """One entry of ``GET /execution/{id}/output``."""

    time: Optional[str] = None
    level: Optional[str] = None
    user: Optional[str] = None
    command: Optional[str] = None
    node: Optional[str] = None
    log: Optional[str] = None
    message: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def to_text(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        return str(v)


class OutputPayload(_Payload):
    """Response of ``GET /execution/{id}/output``."""

    id: Optional[Union[int, str]] = None
    offset: int = Field(..., ge=0)
    completed: Optional[bool] = None
    exec_completed: Optional[bool] = Field(default=None, alias="execCompleted")
    has_failed_nodes: Optional[bool] = Field(default=None, alias="hasFailedNodes")
    exec_state: Optional[str] = Field(default=None, alias="execState")
    percent_loaded: Optional[float] = Field(default=None, alias="percentLoaded")
    total_size: Optional[int] = Field(default=None, alias="totalSize")
    error: Optional[str] = None
    entries: Optional[List[OutputEntryPayload]] = None
