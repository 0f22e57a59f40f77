"""健康检查接口。"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from teamsync_api.core.config import get_settings
from teamsync_api.db.session import get_db
from teamsync_api.models.permission import Role
from teamsync_api.schemas.common import ErrorResponse, SuccessResponse
from teamsync_api.schemas.responses import HealthStatusData
from teamsync_api.utils.response import success

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    summary="存活探针",
    response_model=SuccessResponse[HealthStatusData],
    responses={500: {"model": ErrorResponse}},
)
def live(request: Request):
    settings = get_settings()
    return success(request, {"status": "ok", "app_env": settings.app_env})


@router.get(
    "/ready",
    summary="就绪探针",
    description="查询角色表确认数据库可用；角色种子缺失时注册与首次登录都会失败，状态报告为 degraded。",
    response_model=SuccessResponse[HealthStatusData],
    responses={500: {"model": ErrorResponse}},
)
def ready(request: Request, db: Session = Depends(get_db)):
    role_count = db.execute(select(func.count()).select_from(Role)).scalar_one()
    return success(
        request,
        {
            "status": "ready" if role_count else "degraded",
            "app_env": get_settings().app_env,
            "roles_seeded": role_count > 0,
        },
    )
