"""Registry of in-flight polling tasks on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Coroutine, Any

logger = logging.getLogger(__name__)


class ExecutionScheduler:
    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def schedule(self, execution_id: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        if execution_id in self._tasks:
            coro.close()
            logger.warning("Execution %s is already being polled", execution_id)
            return self._tasks[execution_id]

        task = asyncio.create_task(coro, name=f"poll-{execution_id}")
        self._tasks[execution_id] = task
        task.add_done_callback(lambda done: self._on_done(execution_id, done))
        return task

    def _on_done(self, execution_id: str, task: asyncio.Task[Any]) -> None:
        self._tasks.pop(execution_id, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Execution %s: polling task crashed", execution_id, exc_info=exc)

    def is_active(self, execution_id: str) -> bool:
        return execution_id in self._tasks

    @property
    def active(self) -> list[str]:
        return list(self._tasks)

    async def wait(self, execution_id: str) -> None:
        task = self._tasks.get(execution_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d in-flight polling task(s)", len(tasks))
        self._tasks.clear()
