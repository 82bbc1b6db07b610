"""SQLAlchemy implementation for ExecutionRepository"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from runcake.db.models import ScriptExecution
from runcake.domain.executions.models import ExecutionMode, ExecutionRecord, ExecutionStatus
from runcake.infrastructure.database.session import session_scope


class SqlExecutionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, record: ExecutionRecord) -> ExecutionRecord:
        model = ScriptExecution(id=record.id)
        self._apply(model, record)
        self.session.add(model)
        await self.session.flush()
        return record

    async def get(self, execution_id: str) -> ExecutionRecord | None:
        model = await self._get_model(execution_id)
        return self._to_record(model) if model else None

    async def save(self, record: ExecutionRecord) -> None:
        model = await self._get_model(record.id)
        if model is None:
            raise LookupError(f"Execution {record.id} does not exist")
        self._apply(model, record)
        await self.session.flush()

    async def list_for_script(self, script_id: str, limit: int, offset: int) -> Sequence[ExecutionRecord]:
        stmt = (
            select(ScriptExecution)
            .where(ScriptExecution.script_id == script_id)
            .order_by(desc(ScriptExecution.requested_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_record(model) for model in result.scalars().all()]

    async def list_by_status(self, status: ExecutionStatus) -> Sequence[ExecutionRecord]:
        stmt = (
            select(ScriptExecution)
            .where(ScriptExecution.status == status.value)
            .order_by(ScriptExecution.requested_at)
        )
        result = await self.session.execute(stmt)
        return [self._to_record(model) for model in result.scalars().all()]

    async def _get_model(self, execution_id: str) -> ScriptExecution | None:
        stmt = select(ScriptExecution).where(ScriptExecution.id == execution_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    def _apply(model: ScriptExecution, record: ExecutionRecord) -> None:
        model.script_id = record.script_id
        model.target_group_id = record.target_group_id
        model.execution_mode = record.mode.value
        model.template_variables = json.dumps(record.variables, ensure_ascii=False)
        model.status = record.status.value
        model.instance_ids = json.dumps(record.instance_ids) if record.instance_ids else None
        model.command_id = record.command_id
        model.output = record.output
        model.error_message = record.error_message
        model.requested_at = record.requested_at
        model.started_at = record.started_at
        model.completed_at = record.completed_at

    @staticmethod
    def _to_record(model: ScriptExecution) -> ExecutionRecord:
        return ExecutionRecord(
            id=model.id,
            script_id=model.script_id,
            target_group_id=model.target_group_id,
            mode=ExecutionMode(model.execution_mode),
            variables=json.loads(model.template_variables) if model.template_variables else {},
            status=ExecutionStatus(model.status),
            requested_at=model.requested_at,
            instance_ids=json.loads(model.instance_ids) if model.instance_ids else [],
            command_id=model.command_id,
            output=model.output,
            error_message=model.error_message,
            started_at=model.started_at,
            completed_at=model.completed_at,
        )


def execution_repository_scope(factory: async_sessionmaker[AsyncSession] | None = None):
    """Build a scope factory that opens one committed session per use."""

    @asynccontextmanager
    async def scope() -> AsyncIterator[SqlExecutionRepository]:
        async with session_scope(factory) as session:
            yield SqlExecutionRepository(session)

    return scope
