"""Lifecycle owner of execution records.

Every status change goes through this class. Each transition is one
read-check-write in its own unit of work, and nothing is written unless
the status actually moves along the execution state graph.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence

from runcake.domain.rendering import format_variables

from .exceptions import DispatchAlreadyCommittedError, ExecutionNotFoundError, InvalidTransitionError
from .models import ExecutionMode, ExecutionRecord, ExecutionStatus
from .repository import ExecutionRepository, ExecutionRepositoryScope

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ExecutionTracker:
    repository_scope: ExecutionRepositoryScope
    clock: Callable[[], datetime] = _utcnow

    async def open(
        self,
        *,
        script_id: str,
        target_group_id: str,
        mode: ExecutionMode,
        variables: Mapping[str, Any],
    ) -> ExecutionRecord:
        record = ExecutionRecord(
            id=str(uuid.uuid4()),
            script_id=script_id,
            target_group_id=target_group_id,
            mode=mode,
            variables=dict(variables),
            status=ExecutionStatus.PENDING,
            requested_at=self.clock(),
        )
        async with self.repository_scope() as repository:
            record = await repository.create(record)
        logger.info(
            "Execution %s accepted: script=%s target_group=%s mode=%s variables=[%s]",
            record.id,
            script_id,
            target_group_id,
            mode.value,
            format_variables(variables),
        )
        return record

    async def get(self, execution_id: str) -> ExecutionRecord:
        async with self.repository_scope() as repository:
            return await self._load(repository, execution_id)

    async def ensure_dispatchable(self, execution_id: str) -> ExecutionRecord:
        """Guard that makes dispatch at-most-once per record."""
        record = await self.get(execution_id)
        if record.command_id is not None or record.status is not ExecutionStatus.PENDING:
            raise DispatchAlreadyCommittedError(
                f"Execution {execution_id} was already dispatched (status={record.status.value})"
            )
        return record

    async def mark_running(
        self,
        execution_id: str,
        *,
        command_id: str,
        instance_ids: Sequence[str],
    ) -> ExecutionRecord:
        async with self.repository_scope() as repository:
            record = await self._load(repository, execution_id)
            if record.command_id is not None:
                raise DispatchAlreadyCommittedError(
                    f"Execution {execution_id} already bound to command {record.command_id}"
                )
            self._check(record, ExecutionStatus.RUNNING)
            record.status = ExecutionStatus.RUNNING
            record.command_id = command_id
            record.instance_ids = list(instance_ids)
            record.started_at = self.clock()
            await repository.save(record)
        logger.info("Execution %s running: command %s on %d instance(s)", execution_id, command_id, len(instance_ids))
        return record

    async def complete(
        self,
        execution_id: str,
        *,
        succeeded: bool,
        output: str | None,
        error_message: str | None = None,
    ) -> ExecutionRecord:
        status = ExecutionStatus.SUCCESS if succeeded else ExecutionStatus.FAILED
        async with self.repository_scope() as repository:
            record = await self._load(repository, execution_id)
            self._check(record, status)
            record.status = status
            record.output = output
            record.error_message = None if succeeded else error_message
            record.completed_at = self.clock()
            await repository.save(record)
        logger.info("Execution %s finished with status %s", execution_id, status.value)
        return record

    async def fail(self, execution_id: str, message: str) -> ExecutionRecord | None:
        """Force FAILED; returns ``None`` when the record is already terminal."""
        async with self.repository_scope() as repository:
            record = await self._load(repository, execution_id)
            if record.is_terminal:
                logger.warning(
                    "Execution %s already %s, ignoring failure: %s", execution_id, record.status.value, message
                )
                return None
            record.status = ExecutionStatus.FAILED
            record.error_message = message
            record.completed_at = self.clock()
            await repository.save(record)
        logger.warning("Execution %s failed: %s", execution_id, message)
        return record

    async def list_for_script(self, script_id: str, *, limit: int = 50, offset: int = 0) -> list[ExecutionRecord]:
        async with self.repository_scope() as repository:
            return list(await repository.list_for_script(script_id, limit, offset))

    async def list_by_status(self, status: ExecutionStatus) -> list[ExecutionRecord]:
        async with self.repository_scope() as repository:
            return list(await repository.list_by_status(status))

    @staticmethod
    async def _load(repository: ExecutionRepository, execution_id: str) -> ExecutionRecord:
        record = await repository.get(execution_id)
        if record is None:
            raise ExecutionNotFoundError(f"Execution {execution_id} not found")
        return record

    @staticmethod
    def _check(record: ExecutionRecord, status: ExecutionStatus) -> None:
        if not record.can_transition_to(status):
            raise InvalidTransitionError(
                f"Execution {record.id} cannot move from {record.status.value} to {status.value}"
            )
