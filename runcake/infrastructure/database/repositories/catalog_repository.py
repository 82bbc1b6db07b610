"""SQLAlchemy implementation for CatalogRepository"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from runcake.db.models import Runner, Script, TargetGroup


class SqlCatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_script(self, script_id: str) -> Script | None:
        stmt = select(Script).where(Script.id == script_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_runner(self, runner_id: str) -> Runner | None:
        stmt = select(Runner).where(Runner.id == runner_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_target_group(self, target_group_id: str) -> TargetGroup | None:
        stmt = (
            select(TargetGroup)
            .options(joinedload(TargetGroup.credential))
            .where(TargetGroup.id == target_group_id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_runner_by_name(self, name: str) -> Runner | None:
        stmt = select(Runner).where(Runner.name == name)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_runner(self, *, name: str, description: str | None, init_code: str) -> Runner:
        runner = Runner(name=name, description=description, init_code=init_code)
        self.session.add(runner)
        await self.session.flush()
        await self.session.refresh(runner)
        return runner
