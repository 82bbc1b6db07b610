"""Execution related dependency providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from runcake.core.container import ApplicationContainer, get_container
from runcake.domain.executions.service import ExecutionService

from .database import get_db_session


def get_execution_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> ExecutionService:
    return container.execution_service(db)


__all__ = ["get_execution_service"]
