"""Simple dependency container for wiring core services."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from runcake.core.config import Settings, get_settings
from runcake.domain.catalog import CatalogService
from runcake.domain.executions.repository import ExecutionRepositoryScope
from runcake.domain.executions.scheduler import ExecutionScheduler
from runcake.domain.executions.service import ExecutionService
from runcake.domain.executions.tracker import ExecutionTracker
from runcake.domain.targets import CloudProviderFactory
from runcake.infrastructure.aws import cloud_provider_factory
from runcake.infrastructure.database.repositories import execution_repository_scope
from runcake.infrastructure.database.session import get_engine


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    repository_scope: ExecutionRepositoryScope
    provider_factory: CloudProviderFactory
    scheduler: ExecutionScheduler = field(default_factory=ExecutionScheduler)
    rng: random.Random = field(default_factory=random.Random)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    @property
    def tracker(self) -> ExecutionTracker:
        return ExecutionTracker(self.repository_scope)

    def catalog_service(self, session: AsyncSession) -> CatalogService:
        return CatalogService.with_session(session, self.settings.aws.default_region)

    def execution_service(self, session: AsyncSession) -> ExecutionService:
        return ExecutionService(
            catalog=self.catalog_service(session),
            tracker=self.tracker,
            provider_factory=self.provider_factory,
            scheduler=self.scheduler,
            settings=self.settings.execution,
            rng=self.rng,
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    settings = get_settings()
    container = ApplicationContainer(
        settings=settings,
        repository_scope=execution_repository_scope(),
        provider_factory=cloud_provider_factory(settings.aws, settings.execution),
    )
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
