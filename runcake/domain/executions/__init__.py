"""Exports for the script execution domain"""

from .exceptions import (
    DispatchAlreadyCommittedError,
    DispatchError,
    ExecutionError,
    ExecutionNotFoundError,
    ExecutionTimeoutError,
    ExecutionValidationError,
    InvalidTransitionError,
    PollError,
    ResolutionError,
    RunnerDefinitionError,
    ScriptNotFoundError,
    TargetGroupNotFoundError,
)
from .models import ExecutionMode, ExecutionRecord, ExecutionStatus

__all__ = [
    "DispatchAlreadyCommittedError",
    "DispatchError",
    "ExecutionError",
    "ExecutionMode",
    "ExecutionNotFoundError",
    "ExecutionRecord",
    "ExecutionStatus",
    "ExecutionTimeoutError",
    "ExecutionValidationError",
    "InvalidTransitionError",
    "PollError",
    "ResolutionError",
    "RunnerDefinitionError",
    "ScriptNotFoundError",
    "TargetGroupNotFoundError",
]
