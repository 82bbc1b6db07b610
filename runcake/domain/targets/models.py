"""Live instance and remote command descriptors returned by the cloud provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

PENDING_STATUSES = frozenset({"Pending", "InProgress", "Delayed", "Cancelling"})
SUCCESS_STATUS = "Success"


@dataclass(slots=True)
class InstanceInfo:
    instance_id: str
    private_ip: Optional[str] = None
    public_ip: Optional[str] = None
    instance_type: Optional[str] = None
    state: str = "running"
    platform: str = "linux"
    tags: dict[str, str] = field(default_factory=dict)
    launch_time: Optional[datetime] = None


@dataclass(slots=True)
class ResolutionFailure:
    """A provider or network fault while listing instances, kept apart from an empty result."""

    message: str


@dataclass(slots=True)
class CommandSubmission:
    command_id: str
    instance_ids: list[str]


@dataclass(slots=True)
class CommandInvocation:
    instance_id: str
    status: str
    stdout: str = ""
    stderr: str = ""
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status not in PENDING_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS

    @property
    def duration_seconds(self) -> Optional[int]:
        if self.started_at is None or self.ended_at is None:
            return None
        return round((self.ended_at - self.started_at).total_seconds())
