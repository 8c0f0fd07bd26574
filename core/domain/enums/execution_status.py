"""
Execution Status Enum.

Status values reported by the remote job server for one execution.
"""
from enum import Enum


class ExecutionStatus(str, Enum):
    """Execution status values."""
    
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"

    @property
    def is_terminal(self) -> bool:
        """True once no further transition can occur."""
        return self is not ExecutionStatus.RUNNING
