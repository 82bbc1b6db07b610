"""Execution domain specific exceptions."""

from __future__ import annotations

from typing import Iterable


class ExecutionError(Exception):
    """Base class for script execution domain errors."""


class ExecutionValidationError(ExecutionError):
    """Raised when submitted variables cannot be used to render a script.

    Nothing is persisted when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        invalid_names: Iterable[str] = (),
        missing: Iterable[str] = (),
        reserved: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.invalid_names = list(invalid_names)
        self.missing = list(missing)
        self.reserved = list(reserved)


class RunnerDefinitionError(ExecutionError):
    """Raised when a runner template does not embed exactly one script marker."""


class ResolutionError(ExecutionError):
    """Raised when a target group resolves to a provider failure or no instances."""


class DispatchError(ExecutionError):
    """Raised when a command could not be submitted to the instances."""


class PollError(ExecutionError):
    """Raised when one instance status query fails inside a polling tick."""

    def __init__(self, instance_id: str, message: str) -> None:
        super().__init__(f"{instance_id}: {message}")
        self.instance_id = instance_id


class ExecutionTimeoutError(ExecutionError):
    """Raised when the polling budget runs out before every instance finished."""


class InvalidTransitionError(ExecutionError):
    """Raised when a status change would leave the execution state graph."""


class DispatchAlreadyCommittedError(InvalidTransitionError):
    """Raised when a second dispatch is attempted for the same record."""


class ScriptNotFoundError(ExecutionError):
    """Raised when the requested script could not be found."""


class TargetGroupNotFoundError(ExecutionError):
    """Raised when the requested target group could not be found."""


class ExecutionNotFoundError(ExecutionError):
    """Raised when the requested execution record could not be found."""
