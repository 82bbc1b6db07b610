"""Shared fixtures for the execution core tests.

Provides an in-memory execution store, a scripted fake cloud provider, a
catalog backed by transient ORM rows and a recording no-op sleep.
"""

from __future__ import annotations

import copy
import random
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from runcake.core.config import ExecutionSettings
from runcake.db import models
from runcake.domain.catalog import CatalogService
from runcake.domain.executions.models import ExecutionRecord, ExecutionStatus
from runcake.domain.executions.scheduler import ExecutionScheduler
from runcake.domain.executions.service import ExecutionService
from runcake.domain.executions.tracker import ExecutionTracker
from runcake.domain.targets import CommandInvocation, CommandSubmission, InstanceInfo
from runcake.infrastructure.database.base import Base

BASH_WRAPPER = "#!/bin/bash\nset -e\n{{SCRIPT_CONTENT}}\n"
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Execution store
# ---------------------------------------------------------------------------


class InMemoryExecutionRepository:
    def __init__(self) -> None:
        self.records: dict[str, ExecutionRecord] = {}
        self.history: dict[str, list[ExecutionStatus]] = defaultdict(list)
        self.writes = 0

    async def create(self, record: ExecutionRecord) -> ExecutionRecord:
        self._store(record)
        return copy.deepcopy(record)

    async def get(self, execution_id: str) -> ExecutionRecord | None:
        record = self.records.get(execution_id)
        return copy.deepcopy(record) if record else None

    async def save(self, record: ExecutionRecord) -> None:
        if record.id not in self.records:
            raise LookupError(record.id)
        self._store(record)

    async def list_for_script(self, script_id: str, limit: int, offset: int) -> Sequence[ExecutionRecord]:
        matching = sorted(
            (r for r in self.records.values() if r.script_id == script_id),
            key=lambda r: r.requested_at,
            reverse=True,
        )
        return [copy.deepcopy(r) for r in matching[offset : offset + limit]]

    async def list_by_status(self, status: ExecutionStatus) -> Sequence[ExecutionRecord]:
        return [copy.deepcopy(r) for r in self.records.values() if r.status is status]

    def _store(self, record: ExecutionRecord) -> None:
        self.writes += 1
        self.records[record.id] = copy.deepcopy(record)
        self.history[record.id].append(record.status)


def memory_scope(repository: InMemoryExecutionRepository):
    @asynccontextmanager
    async def scope():
        yield repository

    return scope


# ---------------------------------------------------------------------------
# Cloud provider
# ---------------------------------------------------------------------------


def invocation(instance_id: str, status: str, stdout: str = "", stderr: str = "", seconds: int = 3) -> CommandInvocation:
    terminal = status not in {"Pending", "InProgress", "Delayed", "Cancelling"}
    return CommandInvocation(
        instance_id=instance_id,
        status=status,
        stdout=stdout,
        stderr=stderr,
        started_at=T0,
        ended_at=T0 + timedelta(seconds=seconds) if terminal else None,
    )


class FakeCloudProvider:
    """Serves scripted per-instance status sequences; the last entry repeats."""

    def __init__(
        self,
        instances: Sequence[str] = (),
        *,
        list_error: Exception | None = None,
        send_error: Exception | None = None,
        command_id: str = "cmd-0001",
    ) -> None:
        self.instances = [InstanceInfo(instance_id=i, private_ip="10.0.0.1") for i in instances]
        self.list_error = list_error
        self.send_error = send_error
        self.command_id = command_id
        self.sent: list[dict[str, Any]] = []
        self.statuses: dict[str, list[Any]] = {}
        self.status_calls = 0

    def script(self, instance_id: str, *steps: Any) -> None:
        self.statuses[instance_id] = list(steps)

    async def list_running_instances_by_tag(self, tag_key: str, tag_value: str) -> list[InstanceInfo]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.instances)

    async def send_command(self, instance_ids, text, *, timeout_seconds, comment) -> CommandSubmission:
        self.sent.append(
            {"instance_ids": list(instance_ids), "text": text, "timeout_seconds": timeout_seconds, "comment": comment}
        )
        if self.send_error is not None:
            raise self.send_error
        return CommandSubmission(command_id=self.command_id, instance_ids=list(instance_ids))

    async def get_command_status(self, command_id: str, instance_id: str) -> CommandInvocation:
        self.status_calls += 1
        steps = self.statuses.get(instance_id) or ["Pending"]
        step = steps.pop(0) if len(steps) > 1 else steps[0]
        if isinstance(step, Exception):
            raise step
        if isinstance(step, str):
            return invocation(instance_id, step)
        return step


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class FakeCatalogRepository:
    def __init__(self) -> None:
        self.scripts: dict[str, models.Script] = {}
        self.runners: dict[str, models.Runner] = {}
        self.target_groups: dict[str, models.TargetGroup] = {}

    async def get_script(self, script_id: str):
        return self.scripts.get(script_id)

    async def get_runner(self, runner_id: str):
        return self.runners.get(runner_id)

    async def get_target_group(self, target_group_id: str):
        return self.target_groups.get(target_group_id)

    async def add_runner(self, *, name: str, description: str | None, init_code: str):
        runner = models.Runner(id=f"runner-{name}", name=name, description=description, init_code=init_code)
        self.runners[runner.id] = runner
        return runner

    def add_script(self, script_id: str, content: str, runner_id: str | None = "runner-bash", name: str = "deploy"):
        self.scripts[script_id] = models.Script(
            id=script_id,
            name=name,
            content=content,
            runner_id=runner_id,
            permission_level="admin_only",
        )

    def add_target_group(self, target_group_id: str = "tg-1", region: str | None = "eu-west-1"):
        credential = models.IamCredential(
            id="cred-1",
            name="ops",
            access_key_id="AKIAEXAMPLE",
            secret_access_key="secret",
            region="us-east-2",
        )
        self.target_groups[target_group_id] = models.TargetGroup(
            id=target_group_id,
            name="web",
            aws_tag_key="Role",
            aws_tag_value="web",
            region=region,
            iam_credential_id=credential.id,
            credential=credential,
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def repository() -> InMemoryExecutionRepository:
    return InMemoryExecutionRepository()


@pytest.fixture()
def tracker(repository: InMemoryExecutionRepository) -> ExecutionTracker:
    return ExecutionTracker(memory_scope(repository), clock=lambda: T0)


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def catalog_repository() -> FakeCatalogRepository:
    repo = FakeCatalogRepository()
    repo.runners["runner-bash"] = models.Runner(
        id="runner-bash", name="bash", description="bash", init_code=BASH_WRAPPER
    )
    repo.add_script("script-1", "echo {{ name }} on {{port}}")
    repo.add_target_group("tg-1")
    return repo


@pytest.fixture()
def provider() -> FakeCloudProvider:
    return FakeCloudProvider(["i-a", "i-b", "i-c"])


@pytest.fixture()
def provider_calls() -> list[tuple[Any, str]]:
    return []


@pytest.fixture()
def execution_service(
    catalog_repository: FakeCatalogRepository,
    tracker: ExecutionTracker,
    provider: FakeCloudProvider,
    provider_calls: list[tuple[Any, str]],
    sleep: RecordingSleep,
) -> ExecutionService:
    def factory(credential, region):
        provider_calls.append((credential, region))
        return provider

    return ExecutionService(
        catalog=CatalogService(catalog_repository),
        tracker=tracker,
        provider_factory=factory,
        scheduler=ExecutionScheduler(),
        settings=ExecutionSettings(poll_interval_seconds=5, max_poll_attempts=120),
        rng=random.Random(7),
        sleep=sleep,
    )


@pytest_asyncio.fixture()
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()
