"""Resolution of a tag-based target group into live instance descriptors."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import InstanceInfo, ResolutionFailure
from .provider import CloudProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TargetResolver:
    provider: CloudProvider

    async def resolve(self, tag_key: str, tag_value: str) -> list[InstanceInfo] | ResolutionFailure:
        """Return running instances tagged ``tag_key=tag_value``.

        Never raises: any provider fault becomes a :class:`ResolutionFailure`
        carrying the provider message.
        """
        try:
            instances = await self.provider.list_running_instances_by_tag(tag_key, tag_value)
        except Exception as exc:
            logger.warning("Instance lookup for tag %s=%s failed: %s", tag_key, tag_value, exc)
            return ResolutionFailure(message=str(exc) or exc.__class__.__name__)

        running = [instance for instance in instances if instance.state == "running"]
        if not running:
            logger.warning("No running instances tagged %s=%s", tag_key, tag_value)
        return running
