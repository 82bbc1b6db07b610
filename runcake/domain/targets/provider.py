"""Protocol for the cloud inventory and remote command collaborator."""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from runcake.domain.catalog.models import Credential

from .models import CommandInvocation, CommandSubmission, InstanceInfo


class CloudProviderError(Exception):
    """Raised by a provider when the remote API rejects or fails a call."""


class CloudProvider(Protocol):
    async def list_running_instances_by_tag(self, tag_key: str, tag_value: str) -> list[InstanceInfo]:
        ...

    async def send_command(
        self,
        instance_ids: Sequence[str],
        text: str,
        *,
        timeout_seconds: int,
        comment: str,
    ) -> CommandSubmission:
        ...

    async def get_command_status(self, command_id: str, instance_id: str) -> CommandInvocation:
        ...


# Builds a short-lived client for one credential and region.
CloudProviderFactory = Callable[[Credential, str], CloudProvider]
