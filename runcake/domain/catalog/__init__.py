"""Exports for the script/runner/target group catalog"""

from .models import Credential, RunnerDefinition, ScriptDefinition, TargetGroupSpec
from .service import CatalogService

__all__ = [
    "CatalogService",
    "Credential",
    "RunnerDefinition",
    "ScriptDefinition",
    "TargetGroupSpec",
]
