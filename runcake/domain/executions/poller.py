"""Bounded polling loop that drives a RUNNING execution to a terminal status."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from runcake.domain.targets.models import CommandInvocation
from runcake.domain.targets.provider import CloudProvider

from .exceptions import ExecutionTimeoutError, PollError
from .models import ExecutionRecord
from .report import build_report
from .tracker import ExecutionTracker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PollJob:
    execution_id: str
    command_id: str
    instance_ids: list[str]
    provider: CloudProvider
    script_name: str
    runner_name: str
    variables: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class PollTick:
    attempt: int
    invocations: list[CommandInvocation]
    errors: list[PollError]

    @property
    def pending(self) -> list[str]:
        return [invocation.instance_id for invocation in self.invocations if not invocation.is_terminal]

    @property
    def complete(self) -> bool:
        return not self.errors and not self.pending


@dataclass(slots=True)
class ExecutionPoller:
    tracker: ExecutionTracker
    interval: float = 5.0
    max_attempts: int = 120
    max_consecutive_errors: int = 5
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    async def run(self, job: PollJob) -> ExecutionRecord | None:
        """Poll until every committed instance is terminal or the budget is spent."""
        try:
            return await self._poll(job)
        except asyncio.CancelledError:
            logger.info("Execution %s: polling cancelled", job.execution_id)
            raise
        except ExecutionTimeoutError as exc:
            logger.warning("Execution %s: %s", job.execution_id, exc)
            return await self.tracker.fail(job.execution_id, str(exc))
        except PollError as exc:
            return await self.tracker.fail(job.execution_id, f"Polling error: {exc}")
        except Exception as exc:
            logger.exception("Execution %s: error during polling", job.execution_id)
            return await self.tracker.fail(job.execution_id, f"Polling error: {exc}")

    async def _poll(self, job: PollJob) -> ExecutionRecord | None:
        consecutive_errors = 0
        attempt = 0
        tick: PollTick | None = None
        while attempt < self.max_attempts:
            attempt += 1
            tick = await self.poll_once(job, attempt)
            if tick.complete:
                return await self._finish(job, tick)

            if tick.errors:
                consecutive_errors += 1
                if consecutive_errors >= self.max_consecutive_errors:
                    raise tick.errors[-1]
            else:
                consecutive_errors = 0

            if attempt < self.max_attempts:
                await self.sleep(self.interval)

        still_running = tick.pending if tick is not None else job.instance_ids
        raise ExecutionTimeoutError(
            f"Execution timeout - no terminal status after {attempt} polling attempts "
            f"(~{int(attempt * self.interval)}s); still running: {', '.join(still_running) or 'unknown'}"
        )

    async def poll_once(self, job: PollJob, attempt: int) -> PollTick:
        logger.debug("Execution %s: polling attempt %d/%d", job.execution_id, attempt, self.max_attempts)
        results = await asyncio.gather(
            *(self._query(job, instance_id) for instance_id in job.instance_ids),
            return_exceptions=True,
        )

        invocations: list[CommandInvocation] = []
        errors: list[PollError] = []
        for instance_id, result in zip(job.instance_ids, results):
            if isinstance(result, PollError):
                logger.warning("Execution %s: status query failed for %s", job.execution_id, result)
                errors.append(result)
                invocations.append(CommandInvocation(instance_id=instance_id, status="Pending"))
            elif isinstance(result, BaseException):
                raise result
            else:
                logger.debug("Execution %s: instance %s status %s", job.execution_id, instance_id, result.status)
                invocations.append(result)
        return PollTick(attempt=attempt, invocations=invocations, errors=errors)

    @staticmethod
    async def _query(job: PollJob, instance_id: str) -> CommandInvocation:
        try:
            return await job.provider.get_command_status(job.command_id, instance_id)
        except Exception as exc:
            raise PollError(instance_id, str(exc) or exc.__class__.__name__) from exc

    async def _finish(self, job: PollJob, tick: PollTick) -> ExecutionRecord | None:
        report = build_report(
            tick.invocations,
            script_name=job.script_name,
            runner_name=job.runner_name,
            variables=job.variables,
        )
        logger.info(
            "Execution %s: all instances finished, %d/%d successful",
            job.execution_id,
            report.successful,
            report.total,
        )
        return await self.tracker.complete(
            job.execution_id,
            succeeded=report.succeeded,
            output=report.summary,
            error_message=report.error_message,
        )
