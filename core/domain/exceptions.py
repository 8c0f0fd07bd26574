"""
Domain exceptions.

Error taxonomy shared by the remote client adapters, the execution
monitor and the notifier use case.
"""


class RundeckError(Exception):
    """Base class for every error raised while talking to the job server."""


class RemoteServiceError(RundeckError):
    """Network failure or unexpected server response (transient)."""


class AuthenticationError(RundeckError):
    """Credentials were rejected by the job server."""


class InvalidArgumentError(RundeckError):
    """Caller misuse: negative offset, unknown execution, bad job id."""


class ProtocolError(RundeckError):
    """The server answered with a payload that could not be understood."""


class NotifierConfigurationError(InvalidArgumentError):
    """Notifier configuration cannot be turned into a trigger request."""


class MonitorStoppedError(Exception):
    """The execution monitor was stopped before the execution finished."""

    def __init__(self, execution_id: str):
        super().__init__(f"Monitoring of execution #{execution_id} was stopped")
        self.execution_id = execution_id


class ExecutionWaitTimeoutError(Exception):
    """The wall-clock bound around a wait expired."""

    def __init__(self, seconds: float):
        super().__init__(f"Execution did not finish within {seconds:g} seconds")
        self.seconds = seconds
