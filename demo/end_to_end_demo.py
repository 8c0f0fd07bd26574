"""
End-to-End Demo: Build notification with execution monitoring

This demonstrates the complete workflow:
1. Decide whether the build should notify RunDeck (tag in changelog)
2. Trigger the job with expanded options
3. Wait for the execution while tailing its output
4. Print the summary line

Uses the in-memory RunDeck client (no real server needed).
"""
import asyncio
import logging

from core.infrastructure.logging import configure_logging

configure_logging("INFO")
logger = logging.getLogger(__name__)

from core.application.dtos import BuildContext, ChangeEntry, NotifierConfig
from core.application.services.execution_monitor import ExecutionMonitor
from core.application.use_cases.notify_rundeck import NotifyRundeckUseCase
from core.domain.enums import ExecutionStatus
from core.domain.exceptions import RemoteServiceError
from core.domain.value_objects import LogEntry
from core.infrastructure.adapters.output import StreamOutputSink
from core.infrastructure.adapters.rundeck import InMemoryRundeckClient, make_execution
from orchestration.policies import RetryPolicy, run_with_retry

DEPLOY_OPTIONS = """
# deployment options
environment=staging
artifact=${JOB_NAME}-${BUILD_NUMBER}.tar.gz
"""


async def demo_tagged_build():
    """Demo: Tagged commit triggers a job and waits for it."""

    print("\n" + "="*80)
    print("DEMO: Tagged build triggers a deployment")
    print("="*80 + "\n")

    client = InMemoryRundeckClient()
    client.simulate_execution(
        make_execution("42", ExecutionStatus.SUCCEEDED),
        entries=[
            LogEntry(message="Fetching artifact", command="fetch", node="web-1"),
            LogEntry(message="Stopping service", command="deploy", node="web-1"),
            LogEntry(message="Unpacking", command="deploy", node="web-1"),
            LogEntry(message="Starting service", command="deploy", node="web-1"),
            LogEntry(message="Health check OK", command="verify", node="web-1"),
        ],
        polls_until_done=3,
        page_size=2,
    )
    client.register_job("deploy-staging", "42")

    # Connection check before notifying, transient failures retried
    await run_with_retry(RetryPolicy(max_attempts=3, backoff_seconds=0.5), client.test_credentials)

    use_case = NotifyRundeckUseCase(
        client=client,
        sink=StreamOutputSink(),
        server_url="http://localhost:4440",
        poll_interval_ms=200,
    )

    build = BuildContext(
        display_name="webapp #17",
        job_name="webapp",
        number=17,
        changes=[ChangeEntry(message="Fix login redirect - #deploy", author="dev")],
    )
    config = NotifierConfig(
        job_id="deploy-staging",
        options=DEPLOY_OPTIONS,
        tag="#deploy",
        should_wait_for_job=True,
        should_fail_the_build=True,
        tail_log=True,
    )

    result = await use_case.execute(build, config)

    print("\n📊 RESULTS:")
    print(f"   Notified: {result.notified}")
    print(f"   Succeeded: {result.succeeded}")
    print(f"   Options sent: {client.triggered[0]['options']}")
    print(f"   Fail the build: {result.should_fail_build}")
    return result


async def demo_flaky_output():
    """Demo: Output tailing breaks, status polling carries on."""

    print("\n" + "="*80)
    print("DEMO: Output tailing failure is not fatal")
    print("="*80 + "\n")

    client = InMemoryRundeckClient()
    running = make_execution("7", ExecutionStatus.RUNNING)
    client.script_execution(
        "7",
        statuses=[running, running, make_execution("7", ExecutionStatus.FAILED)],
        segments=[RemoteServiceError("connection reset by peer")],
    )

    monitor = ExecutionMonitor(client, StreamOutputSink(), poll_interval_ms=100)
    result = await monitor.wait("7")

    print("\n📊 RESULTS:")
    print(f"   Status: {result.execution.status.value}")
    print(f"   Status polls: {result.status_polls}")
    print(f"   Output tailed: {result.output_tailed}")
    return result


async def main():
    """Run all demos."""

    try:
        await demo_tagged_build()
        await demo_flaky_output()
        print("\n✅ All demos completed successfully!")
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        print(f"\n❌ Demo failed: {e}")


if __name__ == "__main__":
    asyncio.run(main())
