"""Lookups and runner registration for the execution core."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from runcake.db.models import Runner as RunnerModel, Script as ScriptModel, TargetGroup as TargetGroupModel
from runcake.domain.executions.exceptions import (
    RunnerDefinitionError,
    ScriptNotFoundError,
    TargetGroupNotFoundError,
)
from runcake.domain.rendering import SCRIPT_MARKER, is_valid_runner_wrapper
from runcake.infrastructure.database.repositories.catalog_repository import SqlCatalogRepository

from .models import Credential, RunnerDefinition, ScriptDefinition, TargetGroupSpec
from .repository import CatalogRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CatalogService:
    repository: CatalogRepository
    default_region: str = "us-east-1"

    @classmethod
    def with_session(cls, session: AsyncSession, default_region: str = "us-east-1") -> "CatalogService":
        return cls(SqlCatalogRepository(session), default_region)

    async def register_runner(self, *, name: str, description: str | None, wrapper: str) -> RunnerDefinition:
        """Store a runner after checking it embeds the script marker exactly once."""
        if not is_valid_runner_wrapper(wrapper):
            raise RunnerDefinitionError(f"Runner {name!r} must contain exactly one {SCRIPT_MARKER} placeholder")
        model = await self.repository.add_runner(name=name, description=description, init_code=wrapper)
        logger.info("Registered runner %s (%s)", model.name, model.id)
        return self._to_runner(model)

    async def require_script(self, script_id: str) -> ScriptDefinition:
        model = await self.repository.get_script(script_id)
        if model is None:
            raise ScriptNotFoundError(f"Script {script_id} not found")
        return self._to_script(model)

    async def require_target_group(self, target_group_id: str) -> TargetGroupSpec:
        model = await self.repository.get_target_group(target_group_id)
        if model is None:
            raise TargetGroupNotFoundError(f"Target group {target_group_id} not found")
        return self._to_target_group(model)

    async def get_runner_for(self, script: ScriptDefinition) -> RunnerDefinition | None:
        if not script.runner_id:
            return None
        model = await self.repository.get_runner(script.runner_id)
        if model is None:
            logger.warning("Runner %s of script %s not found, running script as-is", script.runner_id, script.id)
            return None
        return self._to_runner(model)

    @staticmethod
    def _to_script(model: ScriptModel) -> ScriptDefinition:
        return ScriptDefinition(
            id=model.id,
            name=model.name,
            content=model.content,
            runner_id=model.runner_id,
            permission_level=model.permission_level,
        )

    @staticmethod
    def _to_runner(model: RunnerModel) -> RunnerDefinition:
        return RunnerDefinition(
            id=model.id,
            name=model.name,
            description=model.description,
            wrapper=model.init_code,
        )

    def _to_target_group(self, model: TargetGroupModel) -> TargetGroupSpec:
        credential = model.credential
        region = model.region or credential.region or self.default_region
        return TargetGroupSpec(
            id=model.id,
            name=model.name,
            credential=Credential(
                id=credential.id,
                name=credential.name,
                access_key_id=credential.access_key_id,
                secret_access_key=credential.secret_access_key,
                region=credential.region or self.default_region,
            ),
            region=region,
            tag_key=model.aws_tag_key,
            tag_value=model.aws_tag_value,
        )
