"""EC2 inventory and SSM Run Command client built on boto3.

boto3 is synchronous, so every call runs in a worker thread to keep the
event loop free while many executions poll at once.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from runcake.core.config import AwsSettings, ExecutionSettings
from runcake.domain.catalog.models import Credential
from runcake.domain.targets import CloudProviderError, CommandInvocation, CommandSubmission, InstanceInfo

logger = logging.getLogger(__name__)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code") or "ClientError"
        return f"{code}: {error.get('Message') or exc}"
    return str(exc)


class Boto3CloudProvider:
    def __init__(
        self,
        credential: Credential,
        region: str,
        *,
        document_name: str = "AWS-RunShellScript",
        aws_settings: AwsSettings | None = None,
        ec2_client: Any = None,
        ssm_client: Any = None,
    ) -> None:
        aws_settings = aws_settings or AwsSettings()
        self.region = region
        self.document_name = document_name
        if ec2_client is None or ssm_client is None:
            session = boto3.session.Session(
                aws_access_key_id=credential.access_key_id,
                aws_secret_access_key=credential.secret_access_key,
                region_name=region,
            )
            config = Config(
                retries={"max_attempts": aws_settings.max_retry_attempts, "mode": "standard"},
                connect_timeout=aws_settings.connect_timeout,
                read_timeout=aws_settings.read_timeout,
            )
            ec2_client = ec2_client or session.client("ec2", config=config)
            ssm_client = ssm_client or session.client("ssm", config=config)
        self._ec2 = ec2_client
        self._ssm = ssm_client

    async def list_running_instances_by_tag(self, tag_key: str, tag_value: str) -> list[InstanceInfo]:
        return await asyncio.to_thread(self._describe_instances, tag_key, tag_value)

    async def send_command(
        self,
        instance_ids: Sequence[str],
        text: str,
        *,
        timeout_seconds: int,
        comment: str,
    ) -> CommandSubmission:
        return await asyncio.to_thread(self._send_command, list(instance_ids), text, timeout_seconds, comment)

    async def get_command_status(self, command_id: str, instance_id: str) -> CommandInvocation:
        return await asyncio.to_thread(self._get_command_invocation, command_id, instance_id)

    def _describe_instances(self, tag_key: str, tag_value: str) -> list[InstanceInfo]:
        filters = [
            {"Name": f"tag:{tag_key}", "Values": [tag_value]},
            {"Name": "instance-state-name", "Values": ["running"]},
        ]
        instances: list[InstanceInfo] = []
        try:
            paginator = self._ec2.get_paginator("describe_instances")
            for page in paginator.paginate(Filters=filters):
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        instances.append(self._to_instance(instance))
        except (BotoCoreError, ClientError) as exc:
            raise CloudProviderError(_error_message(exc)) from exc
        logger.debug("Found %d running instance(s) for %s=%s in %s", len(instances), tag_key, tag_value, self.region)
        return instances

    def _send_command(
        self,
        instance_ids: list[str],
        text: str,
        timeout_seconds: int,
        comment: str,
    ) -> CommandSubmission:
        try:
            response = self._ssm.send_command(
                DocumentName=self.document_name,
                InstanceIds=instance_ids,
                Parameters={"commands": [text]},
                Comment=comment,
                TimeoutSeconds=timeout_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise CloudProviderError(_error_message(exc)) from exc
        command = response.get("Command") or {}
        return CommandSubmission(
            command_id=command.get("CommandId") or "",
            instance_ids=list(command.get("InstanceIds") or instance_ids),
        )

    def _get_command_invocation(self, command_id: str, instance_id: str) -> CommandInvocation:
        try:
            response = self._ssm.get_command_invocation(CommandId=command_id, InstanceId=instance_id)
        except ClientError as exc:
            # the invocation is not visible for a short while after send_command
            if exc.response.get("Error", {}).get("Code") == "InvocationDoesNotExist":
                return CommandInvocation(instance_id=instance_id, status="Pending")
            raise CloudProviderError(_error_message(exc)) from exc
        except BotoCoreError as exc:
            raise CloudProviderError(_error_message(exc)) from exc
        return CommandInvocation(
            instance_id=instance_id,
            status=response.get("Status") or "Pending",
            stdout=response.get("StandardOutputContent") or "",
            stderr=response.get("StandardErrorContent") or "",
            started_at=_parse_timestamp(response.get("ExecutionStartDateTime")),
            ended_at=_parse_timestamp(response.get("ExecutionEndDateTime")),
        )

    @staticmethod
    def _to_instance(instance: dict[str, Any]) -> InstanceInfo:
        return InstanceInfo(
            instance_id=instance["InstanceId"],
            private_ip=instance.get("PrivateIpAddress"),
            public_ip=instance.get("PublicIpAddress"),
            instance_type=instance.get("InstanceType"),
            state=(instance.get("State") or {}).get("Name", "running"),
            platform=instance.get("Platform") or "linux",
            tags={tag["Key"]: tag.get("Value", "") for tag in instance.get("Tags", [])},
            launch_time=instance.get("LaunchTime"),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    """SSM returns invocation times as ISO-8601 strings, empty while running."""
    if not value:
        return None
    if not isinstance(value, str):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable SSM timestamp %r", value)
        return None


def cloud_provider_factory(aws_settings: AwsSettings, execution_settings: ExecutionSettings):
    def build(credential: Credential, region: str) -> Boto3CloudProvider:
        return Boto3CloudProvider(
            credential,
            region,
            document_name=execution_settings.document_name,
            aws_settings=aws_settings,
        )

    return build


__all__ = ["Boto3CloudProvider", "cloud_provider_factory"]
