"""Protocol for the definitions consumed by the execution core."""

from __future__ import annotations

from typing import Protocol

from runcake.db.models import Runner as RunnerModel, Script as ScriptModel, TargetGroup as TargetGroupModel


class CatalogRepository(Protocol):
    async def get_script(self, script_id: str) -> ScriptModel | None:
        ...

    async def get_runner(self, runner_id: str) -> RunnerModel | None:
        ...

    async def get_target_group(self, target_group_id: str) -> TargetGroupModel | None:
        ...

    async def add_runner(self, *, name: str, description: str | None, init_code: str) -> RunnerModel:
        ...
