"""
Notify RunDeck Use Case.

Triggers a RunDeck job once a build succeeded and, when configured,
waits for the execution to finish while streaming its output.

Flow:
1. Skip unsuccessful builds
2. Check the changelog (and upstream changelogs) for the tag
3. Expand job options with build variables and trigger the job
4. Optionally wait for the execution through the ExecutionMonitor
5. Translate errors into operator messages and a build verdict
"""
from typing import Optional
import logging

from core.application import messages
from core.application.dtos import BuildContext, NotificationResult, NotifierConfig
from core.application.interfaces import IOutputSink, IRemoteExecutionClient
from core.application.services.execution_monitor import ExecutionMonitor
from core.application.services.job_options import build_job_options
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import (
    AuthenticationError,
    ExecutionWaitTimeoutError,
    NotifierConfigurationError,
    RundeckError,
)
from orchestration.policies import run_with_deadline


logger = logging.getLogger(__name__)


class NotifyRundeckUseCase:
    """
    Use case for notifying RunDeck about a finished build.

    The trigger call is made at most once per run, it is never retried.
    """

    def __init__(
        self,
        client: IRemoteExecutionClient,
        sink: IOutputSink,
        server_url: str = "",
        poll_interval_ms: int = 5000,
        max_wait_seconds: Optional[float] = None,
    ):
        """
        Initialize use case with dependencies.

        Args:
            client: RunDeck client
            sink: Build log writer
            server_url: RunDeck URL shown in error messages
            poll_interval_ms: Delay between status polls while waiting
            max_wait_seconds: Optional wall-clock bound on the wait
        """
        self.client = client
        self.sink = sink
        self.server_url = server_url
        self.poll_interval_ms = poll_interval_ms
        self.max_wait_seconds = max_wait_seconds

    def should_notify(self, build: BuildContext, config: NotifierConfig) -> bool:
        """
        Decide whether this build should trigger the job.

        Args:
            build: Finished build
            config: Notifier configuration

        Returns:
            True when the build succeeded and the tag (if any) is found
        """
        if not build.succeeded:
            return False

        tag = (config.tag or "").strip()
        if not tag:
            return True

        for change in build.changes:
            if tag in change.message:
                self.sink.write(messages.found_tag(tag, change.author))
                return True

        for upstream in build.upstream_builds:
            for change in upstream.changes:
                if tag in change.message:
                    self.sink.write(
                        messages.found_tag(tag, change.author, upstream.display_name)
                    )
                    return True

        return False

    async def execute(self, build: BuildContext, config: NotifierConfig) -> NotificationResult:
        """
        Run the notifier for one build.

        Args:
            build: Finished build
            config: Notifier configuration

        Returns:
            NotificationResult describing what happened

        Raises:
            No RundeckError - they are written to the sink and returned
        """
        if not self.should_notify(build, config):
            logger.info(f"[{build.display_name}] No RunDeck notification needed")
            return NotificationResult(notified=False, succeeded=True)

        self.sink.write(messages.NOTIFYING)
        logger.info(f"[{build.display_name}] Triggering RunDeck job {config.job_id}")

        try:
            variables = build.variables()
            options = build_job_options(config.options, variables)
            node_filters = build_job_options(config.node_filters, variables)

            execution = await self.client.trigger_job(config.job_id, options, node_filters)
            self.sink.write(messages.notification_succeeded(execution))

            if not config.should_wait_for_job:
                return NotificationResult(notified=True, succeeded=True, execution=execution)

            monitor = ExecutionMonitor(
                self.client,
                self.sink,
                poll_interval_ms=self.poll_interval_ms,
                tail_log=bool(config.tail_log),
            )
            result = await run_with_deadline(
                monitor.wait(execution.id), self.max_wait_seconds
            )
        except NotifierConfigurationError as exc:
            return self._failure(config, messages.configuration_error(exc), exc)
        except AuthenticationError as exc:
            return self._failure(config, messages.login_failed(self.server_url, exc), exc)
        except RundeckError as exc:
            return self._failure(config, messages.api_error(self.server_url, exc), exc)
        except ExecutionWaitTimeoutError as exc:
            return self._failure(config, messages.wait_timed_out(exc), exc)

        succeeded = result.execution.status is ExecutionStatus.SUCCEEDED
        return NotificationResult(
            notified=True,
            succeeded=succeeded,
            execution=result.execution,
            summary=result.summary,
            should_fail_build=config.should_fail_the_build and not succeeded,
        )

    def _failure(
        self, config: NotifierConfig, line: str, exc: Exception
    ) -> NotificationResult:
        self.sink.write(line)
        logger.error(line)
        return NotificationResult(
            notified=True,
            succeeded=False,
            should_fail_build=config.should_fail_the_build,
            error=str(exc),
        )
