"""Application services."""
from .execution_monitor import ExecutionMonitor, MonitorResult
from .log_tailer import LogTailer, TailCompleteError

__all__ = ["ExecutionMonitor", "LogTailer", "MonitorResult", "TailCompleteError"]
