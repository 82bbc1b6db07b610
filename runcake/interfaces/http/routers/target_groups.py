"""Target group inspection endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from runcake.domain.executions import ResolutionError, TargetGroupNotFoundError
from runcake.domain.executions.service import ExecutionService
from runcake.interfaces.http.deps import get_execution_service
from runcake.schemas import InstanceResponse, TargetGroupInstancesResponse

router = APIRouter()


@router.get(
    "/{target_group_id}/instances",
    response_model=TargetGroupInstancesResponse,
    summary="Preview the running instances of a target group",
)
async def preview_target_group(
    target_group_id: str,
    service: ExecutionService = Depends(get_execution_service),
) -> TargetGroupInstancesResponse:
    try:
        instances = await service.preview_target_group(target_group_id)
    except TargetGroupNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ResolutionError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to preview instances: {exc}",
        ) from exc
    return TargetGroupInstancesResponse(
        target_group_id=target_group_id,
        total=len(instances),
        instances=[InstanceResponse.model_validate(instance) for instance in instances],
    )
