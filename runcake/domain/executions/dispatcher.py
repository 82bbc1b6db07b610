"""Target selection and submission of the single remote command."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from runcake.domain.targets.models import CommandSubmission
from runcake.domain.targets.provider import CloudProvider

from .exceptions import DispatchError
from .models import ExecutionMode

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 100


def select_targets(instance_ids: Sequence[str], mode: ExecutionMode, rng: random.Random) -> list[str]:
    if not instance_ids:
        raise DispatchError("No instances available for execution")
    if mode is ExecutionMode.RANDOM:
        return [instance_ids[rng.randrange(len(instance_ids))]]
    return list(instance_ids)


def build_comment(prefix: str, runner_name: str, execution_id: str, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    comment = f"{prefix} ({runner_name}) - {execution_id} - {now.isoformat(timespec='seconds')}"
    return comment[:COMMENT_MAX_LENGTH]


@dataclass(slots=True)
class CommandDispatcher:
    provider: CloudProvider
    timeout_seconds: int = 3600
    comment_prefix: str = "Runcake script execution"
    rng: random.Random = field(default_factory=random.Random)

    async def dispatch(
        self,
        instance_ids: Sequence[str],
        text: str,
        mode: ExecutionMode,
        *,
        execution_id: str,
        runner_name: str = "bash",
    ) -> CommandSubmission:
        """Submit ``text`` once and return the command id with the committed instances.

        The returned instance list, not ``instance_ids``, is what the record binds.
        """
        targets = select_targets(instance_ids, mode, self.rng)
        comment = build_comment(self.comment_prefix, runner_name, execution_id)
        try:
            submission = await self.provider.send_command(
                targets,
                text,
                timeout_seconds=self.timeout_seconds,
                comment=comment,
            )
        except Exception as exc:
            raise DispatchError(str(exc) or exc.__class__.__name__) from exc
        if not submission.command_id:
            raise DispatchError("Provider accepted the command without returning a command id")

        logger.info(
            "Execution %s: command %s submitted to %s",
            execution_id,
            submission.command_id,
            ", ".join(targets),
        )
        return CommandSubmission(command_id=submission.command_id, instance_ids=targets)
