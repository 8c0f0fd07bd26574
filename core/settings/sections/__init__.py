"""Settings sections."""
from .logs import LoggingSettings
from .monitor import MonitorSettings
from .rundeck import RundeckSettings

__all__ = ["LoggingSettings", "MonitorSettings", "RundeckSettings"]
