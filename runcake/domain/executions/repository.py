"""Protocol for execution record persistence"""

from __future__ import annotations

from typing import AsyncContextManager, Callable, Protocol, Sequence

from .models import ExecutionRecord, ExecutionStatus


class ExecutionRepository(Protocol):
    async def create(self, record: ExecutionRecord) -> ExecutionRecord:
        ...

    async def get(self, execution_id: str) -> ExecutionRecord | None:
        ...

    async def save(self, record: ExecutionRecord) -> None:
        ...

    async def list_for_script(self, script_id: str, limit: int, offset: int) -> Sequence[ExecutionRecord]:
        ...

    async def list_by_status(self, status: ExecutionStatus) -> Sequence[ExecutionRecord]:
        ...


# Opens a repository bound to its own unit of work; the write commits on exit.
ExecutionRepositoryScope = Callable[[], AsyncContextManager[ExecutionRepository]]
