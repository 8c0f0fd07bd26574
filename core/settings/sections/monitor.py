from typing import Optional

from pydantic import Field

from core.settings.base import RundeckBaseSettings


class MonitorSettings(RundeckBaseSettings):
    """
    Settings for waiting on executions.

    ``max_wait_seconds`` unset means the wait is unbounded.
    """

    poll_interval_ms: int = Field(default=5000, ge=0, alias="RUNDECK_POLL_INTERVAL_MS")
    tail_log: bool = Field(default=True, alias="RUNDECK_TAIL_LOG")
    max_wait_seconds: Optional[float] = Field(
        default=None, gt=0, alias="RUNDECK_MAX_WAIT_SECONDS"
    )
