"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from core.domain.entities import Execution
from core.domain.value_objects import LogSegment


class IRemoteExecutionClient(ABC):
    """
    Interface for the remote job server.
    
    The execution monitor only depends on ``get_status`` and
    ``get_log_segment``; implementations must be safe to share between
    independent monitors (no per-call session state).
    """
    
    @abstractmethod
    async def get_status(self, execution_id: str) -> Execution:
        """
        Fetch a fresh snapshot of an execution.
        
        Args:
            execution_id: Execution identifier assigned by the server
        
        Returns:
            Execution snapshot
        
        Raises:
            RemoteServiceError: On network or server failure
            AuthenticationError: On rejected credentials
        """
        pass
    
    @abstractmethod
    async def get_log_segment(self, execution_id: str, from_offset: int) -> LogSegment:
        """
        Fetch the output produced since ``from_offset``.
        
        Args:
            execution_id: Execution identifier
            from_offset: Cursor returned by the previous segment (0 at start)
        
        Returns:
            Next log segment
        
        Raises:
            RemoteServiceError: On network or server failure
            AuthenticationError: On rejected credentials
            InvalidArgumentError: On negative offset or unknown execution
        """
        pass
    
    @abstractmethod
    async def trigger_job(
        self,
        job_id: str,
        options: Optional[Dict[str, str]] = None,
        node_filters: Optional[Dict[str, str]] = None,
    ) -> Execution:
        """
        Start a new execution of a job.
        
        Args:
            job_id: Job identifier on the server
            options: Job option values
            node_filters: Node filter values
        
        Returns:
            Snapshot of the started execution (normally RUNNING)
        """
        pass
    
    async def ping(self) -> None:
        """Check that the server is reachable."""
        pass
    
    async def test_credentials(self) -> None:
        """Check that the configured credentials are accepted."""
        pass


class IOutputSink(ABC):
    """
    Append-only writer for operator-facing text.
    
    Writes are best-effort: implementations never raise.
    """
    
    @abstractmethod
    def write(self, line: str) -> None:
        """
        Append one line.
        
        Args:
            line: Text without trailing newline
        """
        pass


__all__ = ["IRemoteExecutionClient", "IOutputSink"]
