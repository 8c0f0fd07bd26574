"""Application layer - services, use cases, interfaces, and DTOs."""

from .dtos import BuildContext, ChangeEntry, NotificationResult, NotifierConfig
from .interfaces import IOutputSink, IRemoteExecutionClient
from .services import ExecutionMonitor, LogTailer, MonitorResult
from .use_cases import NotifyRundeckUseCase

__all__ = [
    # DTOs
    "BuildContext",
    "ChangeEntry",
    "NotificationResult",
    "NotifierConfig",
    # Services
    "ExecutionMonitor",
    "LogTailer",
    "MonitorResult",
    # Use Cases
    "NotifyRundeckUseCase",
    # Interfaces
    "IOutputSink",
    "IRemoteExecutionClient",
]
