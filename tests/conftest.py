"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from core.domain.enums.execution_status import ExecutionStatus
from core.infrastructure.adapters.output import InMemoryOutputSink
from core.infrastructure.adapters.rundeck import InMemoryRundeckClient, make_execution

STARTED_AT = datetime(2011, 7, 8, 21, 3, 34, 640000, tzinfo=timezone.utc)


@pytest.fixture
def sink() -> InMemoryOutputSink:
    return InMemoryOutputSink()


@pytest.fixture
def client() -> InMemoryRundeckClient:
    return InMemoryRundeckClient()


@pytest.fixture
def running():
    return make_execution("1", ExecutionStatus.RUNNING, started_at=STARTED_AT)


@pytest.fixture
def succeeded():
    return make_execution("1", ExecutionStatus.SUCCEEDED, started_at=STARTED_AT)

