"""
Dependency wiring.

Builds the shared RunDeck client, output sink and use case from the
application settings.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional
from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.infrastructure.adapters.output import StreamOutputSink
from core.infrastructure.logging import configure_logging
from core.settings import get_app_settings

if TYPE_CHECKING:
    from core.application.interfaces import IOutputSink, IRemoteExecutionClient
    from core.application.services.execution_monitor import ExecutionMonitor
    from core.application.use_cases.notify_rundeck import NotifyRundeckUseCase

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_rundeck_client = None
_output_sink = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def setup_logging() -> None:
    configure_logging(get_app_settings().logging.level)


def get_rundeck_client() -> IRemoteExecutionClient:
    """Shared RunDeck client: built once, reused by every monitor."""
    global _rundeck_client
    if _rundeck_client is None:
        from core.infrastructure.adapters.rundeck.client import RundeckClient
        _rundeck_client = RundeckClient(get_app_settings().rundeck)
        logger.info("Created RundeckClient instance")
    return _rundeck_client


def get_output_sink() -> IOutputSink:
    global _output_sink
    if _output_sink is None:
        _output_sink = StreamOutputSink()
        logger.info("Created StreamOutputSink instance (stdout)")
    return _output_sink


def get_execution_monitor(sink: Optional[IOutputSink] = None) -> ExecutionMonitor:
    """New monitor per execution, sharing the client."""
    from core.application.services.execution_monitor import ExecutionMonitor

    settings = get_app_settings().monitor
    return ExecutionMonitor(
        client=get_rundeck_client(),
        sink=sink or get_output_sink(),
        poll_interval_ms=settings.poll_interval_ms,
        tail_log=settings.tail_log,
    )


def get_notify_use_case(sink: Optional[IOutputSink] = None) -> NotifyRundeckUseCase:
    from core.application.use_cases.notify_rundeck import NotifyRundeckUseCase

    settings = get_app_settings()
    return NotifyRundeckUseCase(
        client=get_rundeck_client(),
        sink=sink or get_output_sink(),
        server_url=settings.rundeck.url,
        poll_interval_ms=settings.monitor.poll_interval_ms,
        max_wait_seconds=settings.monitor.max_wait_seconds,
    )


# =============================================================================
# RESET (for testing)
# =============================================================================

async def reset_dependencies() -> None:
    global _rundeck_client, _output_sink

    if _rundeck_client is not None:
        await _rundeck_client.close()

    _rundeck_client = None
    _output_sink = None
    get_app_settings.cache_clear()

    logger.info("Dependencies reset")
