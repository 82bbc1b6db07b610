"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .execution import get_execution_service

__all__ = [
    "get_db_session",
    "get_execution_service",
]
