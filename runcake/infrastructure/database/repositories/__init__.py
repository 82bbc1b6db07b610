"""SQLAlchemy-backed repository implementations."""

from .catalog_repository import SqlCatalogRepository
from .execution_repository import SqlExecutionRepository, execution_repository_scope

__all__ = [
    "SqlCatalogRepository",
    "SqlExecutionRepository",
    "execution_repository_scope",
]
