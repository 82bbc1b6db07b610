from fastapi import APIRouter

from runcake.interfaces.http.routers import executions, target_groups


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(executions.router, tags=["executions"])
    router.include_router(target_groups.router, prefix="/target-groups", tags=["target groups"])
    return router


__all__ = [
    "create_api_router",
]
