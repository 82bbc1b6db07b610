"""Domain representations for script executions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.SUCCESS, ExecutionStatus.FAILED)


class ExecutionMode(str, Enum):
    ALL = "all"
    RANDOM = "random"


# Allowed forward edges of the execution state graph.
TRANSITIONS: dict[ExecutionStatus, frozenset[ExecutionStatus]] = {
    ExecutionStatus.PENDING: frozenset({ExecutionStatus.RUNNING, ExecutionStatus.FAILED}),
    ExecutionStatus.RUNNING: frozenset({ExecutionStatus.SUCCESS, ExecutionStatus.FAILED}),
    ExecutionStatus.SUCCESS: frozenset(),
    ExecutionStatus.FAILED: frozenset(),
}


@dataclass(slots=True)
class ExecutionRecord:
    id: str
    script_id: str
    target_group_id: str
    mode: ExecutionMode
    variables: dict[str, Any]
    status: ExecutionStatus
    requested_at: datetime
    instance_ids: list[str] = field(default_factory=list)
    command_id: Optional[str] = None
    output: Optional[str] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def can_transition_to(self, status: ExecutionStatus) -> bool:
        return status in TRANSITIONS[self.status]
