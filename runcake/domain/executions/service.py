"""Domain service for accepting, dispatching and querying script executions."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from runcake.core.config import ExecutionSettings
from runcake.domain.catalog import CatalogService, RunnerDefinition, ScriptDefinition, TargetGroupSpec
from runcake.domain.rendering import (
    VariableInfo,
    describe_variables,
    embed_script,
    extract_variables,
    mask_variables,
    prepare_command,
    render_command,
)
from runcake.domain.targets import CloudProvider, CloudProviderFactory, InstanceInfo, ResolutionFailure, TargetResolver

from .dispatcher import CommandDispatcher
from .exceptions import DispatchAlreadyCommittedError, ExecutionError, ResolutionError
from .models import ExecutionMode, ExecutionRecord, ExecutionStatus
from .poller import ExecutionPoller, PollJob
from .scheduler import ExecutionScheduler
from .tracker import ExecutionTracker

logger = logging.getLogger(__name__)

DEFAULT_RUNNER_NAME = "bash"


@dataclass(slots=True)
class ExecutionPreview:
    command: str
    variables: dict[str, Any]
    required_variables: list[str]


@dataclass(slots=True)
class ExecutionService:
    catalog: CatalogService
    tracker: ExecutionTracker
    provider_factory: CloudProviderFactory
    scheduler: ExecutionScheduler
    settings: ExecutionSettings = field(default_factory=ExecutionSettings)
    rng: random.Random = field(default_factory=random.Random)
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    async def submit(
        self,
        *,
        script_id: str,
        target_group_id: str,
        mode: ExecutionMode | None = None,
        variables: Mapping[str, Any],
    ) -> ExecutionRecord:
        """Accept an execution request and dispatch it.

        Validation problems raise before anything is stored. Once the record
        exists every failure lands in it as FAILED and the record is returned;
        callers follow progress through :meth:`get_execution`.
        """
        mode = mode or ExecutionMode(self.settings.default_mode)
        script = await self.catalog.require_script(script_id)
        runner = await self.catalog.get_runner_for(script)
        command = prepare_command(runner.wrapper if runner else None, script.content, variables)
        target_group = await self.catalog.require_target_group(target_group_id)

        record = await self.tracker.open(
            script_id=script.id,
            target_group_id=target_group.id,
            mode=mode,
            variables=variables,
        )
        job = await self._dispatch(record, script, runner, target_group, command)
        if job is not None:
            self.scheduler.schedule(record.id, self.poller().run(job))
        return await self.tracker.get(record.id)

    async def preview(self, script_id: str, variables: Mapping[str, Any]) -> ExecutionPreview:
        script = await self.catalog.require_script(script_id)
        runner = await self.catalog.get_runner_for(script)
        wrapper = runner.wrapper if runner else None
        # same validation as submit, on the values as sent
        prepare_command(wrapper, script.content, variables)
        masked = mask_variables(variables)
        return ExecutionPreview(
            command=render_command(wrapper, script.content, masked).text,
            variables=masked,
            required_variables=extract_variables(embed_script(wrapper, script.content)),
        )

    async def describe_variables(self, script_id: str) -> list[VariableInfo]:
        script = await self.catalog.require_script(script_id)
        runner = await self.catalog.get_runner_for(script)
        return describe_variables(embed_script(runner.wrapper if runner else None, script.content))

    async def get_execution(self, execution_id: str) -> ExecutionRecord:
        return await self.tracker.get(execution_id)

    async def list_executions(self, script_id: str, *, limit: int = 50, offset: int = 0) -> list[ExecutionRecord]:
        return await self.tracker.list_for_script(script_id, limit=limit, offset=offset)

    async def preview_target_group(self, target_group_id: str) -> list[InstanceInfo]:
        target_group = await self.catalog.require_target_group(target_group_id)
        provider = self.provider_factory(target_group.credential, target_group.region)
        result = await TargetResolver(provider).resolve(target_group.tag_key, target_group.tag_value)
        if isinstance(result, ResolutionFailure):
            raise ResolutionError(result.message)
        return result

    async def resume_inflight(self) -> int:
        """Re-attach polling to RUNNING records and fail PENDING leftovers."""
        for record in await self.tracker.list_by_status(ExecutionStatus.PENDING):
            await self.tracker.fail(record.id, "Execution interrupted before dispatch")

        resumed = 0
        for record in await self.tracker.list_by_status(ExecutionStatus.RUNNING):
            if record.command_id is None or not record.instance_ids:
                await self.tracker.fail(record.id, "Execution has no committed command to poll")
                continue
            try:
                script = await self.catalog.require_script(record.script_id)
                runner = await self.catalog.get_runner_for(script)
                target_group = await self.catalog.require_target_group(record.target_group_id)
            except ExecutionError as exc:
                await self.tracker.fail(record.id, str(exc))
                continue
            provider = self.provider_factory(target_group.credential, target_group.region)
            job = self._job(record, record.command_id, record.instance_ids, provider, script, runner)
            self.scheduler.schedule(record.id, self.poller().run(job))
            resumed += 1
        if resumed:
            logger.info("Resumed polling for %d running execution(s)", resumed)
        return resumed

    def poller(self) -> ExecutionPoller:
        return ExecutionPoller(
            tracker=self.tracker,
            interval=self.settings.poll_interval_seconds,
            max_attempts=self.settings.max_poll_attempts,
            max_consecutive_errors=self.settings.max_consecutive_poll_errors,
            sleep=self.sleep,
        )

    async def _dispatch(
        self,
        record: ExecutionRecord,
        script: ScriptDefinition,
        runner: RunnerDefinition | None,
        target_group: TargetGroupSpec,
        command: str,
    ) -> PollJob | None:
        try:
            provider = self.provider_factory(target_group.credential, target_group.region)
            instance_ids = await self._resolve(provider, target_group)
            await self.tracker.ensure_dispatchable(record.id)
            dispatcher = CommandDispatcher(
                provider=provider,
                timeout_seconds=self.settings.command_timeout_seconds,
                comment_prefix=self.settings.comment_prefix,
                rng=self.rng,
            )
            submission = await dispatcher.dispatch(
                instance_ids,
                command,
                record.mode,
                execution_id=record.id,
                runner_name=runner.name if runner else DEFAULT_RUNNER_NAME,
            )
            await self.tracker.mark_running(
                record.id,
                command_id=submission.command_id,
                instance_ids=submission.instance_ids,
            )
        except DispatchAlreadyCommittedError:
            raise
        except ExecutionError as exc:
            await self.tracker.fail(record.id, str(exc))
            return None
        except Exception as exc:
            logger.exception("Execution %s: unexpected error before polling", record.id)
            await self.tracker.fail(record.id, str(exc) or exc.__class__.__name__)
            return None
        return self._job(record, submission.command_id, submission.instance_ids, provider, script, runner)

    @staticmethod
    async def _resolve(provider: CloudProvider, target_group: TargetGroupSpec) -> list[str]:
        result = await TargetResolver(provider).resolve(target_group.tag_key, target_group.tag_value)
        if isinstance(result, ResolutionFailure):
            raise ResolutionError(f"Failed to resolve target group {target_group.name}: {result.message}")
        if not result:
            raise ResolutionError(
                f"No running instances found for target group {target_group.name} "
                f"({target_group.tag_key}={target_group.tag_value})"
            )
        return [instance.instance_id for instance in result]

    @staticmethod
    def _job(
        record: ExecutionRecord,
        command_id: str,
        instance_ids: list[str],
        provider: CloudProvider,
        script: ScriptDefinition,
        runner: RunnerDefinition | None,
    ) -> PollJob:
        return PollJob(
            execution_id=record.id,
            command_id=command_id,
            instance_ids=list(instance_ids),
            provider=provider,
            script_name=script.name,
            runner_name=runner.name if runner else DEFAULT_RUNNER_NAME,
            variables=dict(record.variables),
        )
