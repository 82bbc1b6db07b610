"""Pydantic schemas used across the project."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from runcake.domain.executions.models import ExecutionMode, ExecutionRecord, ExecutionStatus
from runcake.domain.rendering import mask_variables


class ExecutionCreateRequest(BaseModel):
    target_group_id: str = Field(..., min_length=1)
    execution_mode: Optional[ExecutionMode] = None
    template_variables: dict[str, Any] = Field(default_factory=dict)


class ExecutionPreviewRequest(BaseModel):
    template_variables: dict[str, Any] = Field(default_factory=dict)


class ExecutionAcceptedResponse(BaseModel):
    execution_id: str
    status: ExecutionStatus


class ExecutionResponse(BaseModel):
    """Read view of an execution record; variables are always masked."""

    id: str
    script_id: str
    target_group_id: str
    execution_mode: ExecutionMode
    status: ExecutionStatus
    template_variables: dict[str, Any] = Field(default_factory=dict)
    instance_ids: list[str] = Field(default_factory=list)
    command_id: Optional[str] = None
    output: Optional[str] = None
    error_message: Optional[str] = None
    requested_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, record: ExecutionRecord) -> "ExecutionResponse":
        return cls(
            id=record.id,
            script_id=record.script_id,
            target_group_id=record.target_group_id,
            execution_mode=record.mode,
            status=record.status,
            template_variables=mask_variables(record.variables),
            instance_ids=list(record.instance_ids),
            command_id=record.command_id,
            output=record.output,
            error_message=record.error_message,
            requested_at=record.requested_at,
            started_at=record.started_at,
            completed_at=record.completed_at,
        )


class ExecutionListResponse(BaseModel):
    executions: list[ExecutionResponse]


class ExecutionPreviewResponse(BaseModel):
    command: str
    template_variables: dict[str, Any]
    required_variables: list[str]


class TemplateVariableResponse(BaseModel):
    name: str
    required: bool = True
    type: str = "string"
    example: str
    description: str
    sensitive: bool = False

    model_config = ConfigDict(from_attributes=True)


class TemplateVariableListResponse(BaseModel):
    script_id: str
    variables: list[TemplateVariableResponse]


class InstanceResponse(BaseModel):
    instance_id: str
    private_ip: Optional[str] = None
    public_ip: Optional[str] = None
    instance_type: Optional[str] = None
    state: str
    platform: str
    tags: dict[str, str] = Field(default_factory=dict)
    launch_time: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TargetGroupInstancesResponse(BaseModel):
    target_group_id: str
    total: int
    instances: list[InstanceResponse]
