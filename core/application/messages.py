"""
Operator-facing messages.

Downstream consumers grep build logs for these strings, keep them stable.
"""
from datetime import datetime
from typing import Optional

from core.domain.entities import Execution

OUTPUT_START_MARKER = "--------- RunDeck execution output: start ---------"
OUTPUT_END_MARKER = "--------- RunDeck execution output: end ---------"
OUTPUT_NOT_TAILED = "(RunDeck execution output will not be tailed)"
WAITING_FOR_EXECUTION = "Waiting for RunDeck execution to finish..."
NOTIFYING = "Notifying RunDeck..."


def command_header(command: str) -> str:
    return f">>>> {command} <<<<"


def tailing_stopped(error: Exception) -> str:
    return f"(RunDeck execution output tailing stopped : {error})"


def format_duration(execution: Execution, now: Optional[datetime] = None) -> str:
    """Render the execution duration as ``<m> minutes <s> seconds``."""
    total_seconds = int(execution.duration(now).total_seconds())
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes} minutes {seconds} seconds"


def format_summary(execution: Execution, now: Optional[datetime] = None) -> str:
    """
    Build the single summary line written once an execution is terminal.

    Example:
        RunDeck execution #1 finished in 3 minutes 27 seconds, with status : SUCCEEDED
    """
    return (
        f"RunDeck execution #{execution.id} finished in "
        f"{format_duration(execution, now)}, "
        f"with status : {execution.status.value}"
    )


def notification_succeeded(execution: Execution) -> str:
    return (
        f"Notification succeeded ! Execution #{execution.id}, "
        f"at {execution.url} (status : {execution.status.value})"
    )


def found_tag(tag: str, author: Optional[str], upstream: Optional[str] = None) -> str:
    text = f"Found tag {tag} in changelog (author : {author or 'unknown'})"
    if upstream:
        text += f" in upstream build ({upstream})"
    return text


def login_failed(url: str, error: Exception) -> str:
    return f"Login failed on {url} : {error}"


def api_error(url: str, error: Exception) -> str:
    return f"Error while talking to RunDeck's API at {url} : {error}"


def configuration_error(error: Exception) -> str:
    return f"Configuration error : {error}"


def wait_timed_out(error: Exception) -> str:
    return f"Stopped waiting for RunDeck execution : {error}"
