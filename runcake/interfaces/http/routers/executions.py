"""Script execution endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from runcake.domain.executions import (
    ExecutionNotFoundError,
    ExecutionValidationError,
    ScriptNotFoundError,
    TargetGroupNotFoundError,
)
from runcake.domain.executions.service import ExecutionService
from runcake.interfaces.http.deps import get_execution_service
from runcake.schemas import (
    ExecutionAcceptedResponse,
    ExecutionCreateRequest,
    ExecutionListResponse,
    ExecutionPreviewRequest,
    ExecutionPreviewResponse,
    ExecutionResponse,
    TemplateVariableListResponse,
    TemplateVariableResponse,
)

router = APIRouter()


@router.post(
    "/scripts/{script_id}/executions",
    response_model=ExecutionAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Run a script against a target group",
)
async def submit_execution(
    script_id: str,
    payload: ExecutionCreateRequest,
    service: ExecutionService = Depends(get_execution_service),
) -> ExecutionAcceptedResponse:
    try:
        record = await service.submit(
            script_id=script_id,
            target_group_id=payload.target_group_id,
            mode=payload.execution_mode,
            variables=payload.template_variables,
        )
    except (ScriptNotFoundError, TargetGroupNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ExecutionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ExecutionAcceptedResponse(execution_id=record.id, status=record.status)


@router.get(
    "/executions/{execution_id}",
    response_model=ExecutionResponse,
    summary="Get execution status",
)
async def get_execution(
    execution_id: str,
    service: ExecutionService = Depends(get_execution_service),
) -> ExecutionResponse:
    try:
        record = await service.get_execution(execution_id)
    except ExecutionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Execution not found") from exc
    return ExecutionResponse.from_record(record)


@router.get(
    "/scripts/{script_id}/executions",
    response_model=ExecutionListResponse,
    summary="List executions of a script",
)
async def list_executions(
    script_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ExecutionService = Depends(get_execution_service),
) -> ExecutionListResponse:
    records = await service.list_executions(script_id, limit=limit, offset=offset)
    return ExecutionListResponse(executions=[ExecutionResponse.from_record(record) for record in records])


@router.post(
    "/scripts/{script_id}/preview",
    response_model=ExecutionPreviewResponse,
    summary="Render the final command without running it",
)
async def preview_execution(
    script_id: str,
    payload: ExecutionPreviewRequest,
    service: ExecutionService = Depends(get_execution_service),
) -> ExecutionPreviewResponse:
    try:
        preview = await service.preview(script_id, payload.template_variables)
    except ScriptNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ExecutionValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ExecutionPreviewResponse(
        command=preview.command,
        template_variables=preview.variables,
        required_variables=preview.required_variables,
    )


@router.get(
    "/scripts/{script_id}/template-variables",
    response_model=TemplateVariableListResponse,
    summary="Describe the variables a script expects",
)
async def get_template_variables(
    script_id: str,
    service: ExecutionService = Depends(get_execution_service),
) -> TemplateVariableListResponse:
    try:
        variables = await service.describe_variables(script_id)
    except ScriptNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TemplateVariableListResponse(
        script_id=script_id,
        variables=[TemplateVariableResponse.model_validate(variable) for variable in variables],
    )
