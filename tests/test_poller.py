"""Tests for runcake/domain/executions/poller.py

Covers:
- All instances succeed after a pending tick
- One failing instance fails the execution and surfaces its stderr
- Attempt budget exhaustion at exactly the last tick
- Transient status query faults and their escalation
- Report masking of sensitive variables
"""

from __future__ import annotations

import asyncio

import pytest

from runcake.domain.executions import ExecutionMode, ExecutionStatus
from runcake.domain.executions.poller import ExecutionPoller, PollJob
from runcake.domain.rendering import MASK
from runcake.domain.targets import CloudProviderError

from .conftest import FakeCloudProvider, invocation

INSTANCES = ["i-a", "i-b", "i-c"]


async def _running_job(tracker, provider, instance_ids=INSTANCES, **variables) -> PollJob:
    record = await tracker.open(
        script_id="script-1",
        target_group_id="tg-1",
        mode=ExecutionMode.ALL,
        variables=variables,
    )
    await tracker.mark_running(record.id, command_id="cmd-1", instance_ids=instance_ids)
    return PollJob(
        execution_id=record.id,
        command_id="cmd-1",
        instance_ids=list(instance_ids),
        provider=provider,
        script_name="deploy",
        runner_name="bash",
        variables=variables,
    )


def _poller(tracker, sleep, **kwargs) -> ExecutionPoller:
    return ExecutionPoller(tracker=tracker, interval=5.0, sleep=sleep, **kwargs)


@pytest.mark.asyncio
async def test_all_instances_succeed_by_second_tick(tracker, repository, sleep) -> None:
    provider = FakeCloudProvider(INSTANCES)
    for instance_id in INSTANCES:
        provider.script(instance_id, "InProgress", invocation(instance_id, "Success", stdout=f"hello from {instance_id}"))
    job = await _running_job(tracker, provider)

    record = await _poller(tracker, sleep).run(job)

    assert record.status is ExecutionStatus.SUCCESS
    assert "Successful: 3" in record.output
    assert "Failed: 0" in record.output
    assert "=== Instance i-b Output ===\nhello from i-b" in record.output
    assert record.error_message is None
    assert sleep.calls == [5.0]
    assert provider.status_calls == 6


@pytest.mark.asyncio
async def test_one_failed_instance_fails_execution_with_its_stderr(tracker, sleep) -> None:
    provider = FakeCloudProvider(INSTANCES)
    provider.script("i-a", invocation("i-a", "Success", stdout="ok"))
    provider.script("i-b", "InProgress", invocation("i-b", "Failed", stderr="disk full"))
    provider.script("i-c", invocation("i-c", "Success", stdout="ok"))
    job = await _running_job(tracker, provider)

    record = await _poller(tracker, sleep).run(job)

    assert record.status is ExecutionStatus.FAILED
    assert "=== Instance i-b Errors ===\ndisk full" in record.error_message
    assert "❌ i-b: Failed (3s)" in record.output
    assert "✅ i-a: Success (3s)" in record.output
    assert "Successful: 2" in record.output


@pytest.mark.asyncio
async def test_failure_without_stderr_uses_default_message(tracker, sleep) -> None:
    provider = FakeCloudProvider(["i-a"])
    provider.script("i-a", "TimedOut")
    job = await _running_job(tracker, provider, ["i-a"])

    record = await _poller(tracker, sleep).run(job)

    assert record.status is ExecutionStatus.FAILED
    assert record.error_message == "Script execution failed on one or more instances"


@pytest.mark.asyncio
async def test_budget_exhaustion_fails_at_exactly_last_tick(tracker, repository, sleep) -> None:
    provider = FakeCloudProvider(INSTANCES)
    for instance_id in INSTANCES:
        provider.script(instance_id, "InProgress")
    job = await _running_job(tracker, provider)
    writes = repository.writes

    record = await _poller(tracker, sleep, max_attempts=120).run(job)

    assert record.status is ExecutionStatus.FAILED
    assert record.error_message.startswith("Execution timeout - no terminal status after 120 polling attempts")
    assert "i-a, i-b, i-c" in record.error_message
    assert provider.status_calls == 120 * len(INSTANCES)
    assert len(sleep.calls) == 119
    # non-terminal ticks write nothing
    assert repository.writes == writes + 1


@pytest.mark.asyncio
async def test_terminal_status_on_last_tick_still_completes(tracker, sleep) -> None:
    provider = FakeCloudProvider(["i-a"])
    provider.script("i-a", "Pending", "Pending", "Success")
    job = await _running_job(tracker, provider, ["i-a"])

    record = await _poller(tracker, sleep, max_attempts=3).run(job)

    assert record.status is ExecutionStatus.SUCCESS
    assert len(sleep.calls) == 2


@pytest.mark.asyncio
async def test_transient_query_fault_does_not_fail_execution(tracker, sleep) -> None:
    provider = FakeCloudProvider(["i-a", "i-b"])
    provider.script("i-a", CloudProviderError("Throttling: rate exceeded"), "Success")
    provider.script("i-b", "Success")
    job = await _running_job(tracker, provider, ["i-a", "i-b"])

    record = await _poller(tracker, sleep).run(job)

    assert record.status is ExecutionStatus.SUCCESS
    assert len(sleep.calls) == 1


@pytest.mark.asyncio
async def test_repeated_query_faults_escalate(tracker, sleep) -> None:
    provider = FakeCloudProvider(["i-a"])
    provider.script("i-a", CloudProviderError("AccessDenied: nope"))
    job = await _running_job(tracker, provider, ["i-a"])

    record = await _poller(tracker, sleep, max_consecutive_errors=3).run(job)

    assert record.status is ExecutionStatus.FAILED
    assert record.error_message == "Polling error: i-a: AccessDenied: nope"
    assert provider.status_calls == 3


@pytest.mark.asyncio
async def test_unexpected_fault_fails_immediately(tracker, sleep) -> None:
    job = await _running_job(tracker, FakeCloudProvider(["i-a"]), ["i-a"])

    async def broken_sleep(seconds: float) -> None:
        raise RuntimeError("event loop hiccup")

    record = await _poller(tracker, broken_sleep).run(job)

    assert record.status is ExecutionStatus.FAILED
    assert record.error_message == "Polling error: event loop hiccup"


@pytest.mark.asyncio
async def test_cancellation_propagates_without_writing(tracker, repository) -> None:
    job = await _running_job(tracker, FakeCloudProvider(["i-a"]), ["i-a"])
    writes = repository.writes
    task = asyncio.create_task(ExecutionPoller(tracker=tracker, interval=60).run(job))
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert repository.writes == writes
    assert (await tracker.get(job.execution_id)).status is ExecutionStatus.RUNNING


@pytest.mark.asyncio
async def test_report_masks_sensitive_variables(tracker, sleep) -> None:
    provider = FakeCloudProvider(["i-a"])
    provider.script("i-a", "Success")
    job = await _running_job(tracker, provider, ["i-a"], user="deploy", db_password="hunter2")

    record = await _poller(tracker, sleep).run(job)

    assert "=== Template Variables ===" in record.output
    assert "user: deploy" in record.output
    assert f"db_password: {MASK}" in record.output
    assert "hunter2" not in record.output
