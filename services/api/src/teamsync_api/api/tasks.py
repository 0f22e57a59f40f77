"""任务管理接口。"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from teamsync_api.db.session import get_db
from teamsync_api.dependencies import PageParams, get_current_user, get_page_params
from teamsync_api.exceptions import BadRequestError
from teamsync_api.models.enums import Permission
from teamsync_api.models.user import User
from teamsync_api.schemas.common import ErrorResponse, SuccessResponse
from teamsync_api.schemas.project import TaskCreateRequest, TaskUpdateRequest
from teamsync_api.schemas.responses import TaskData
from teamsync_api.services import require_workspace_permissions
from teamsync_api.services import task as task_service
from teamsync_api.utils.response import page_meta, success

router = APIRouter(prefix="/workspaces/{workspace_id}", tags=["tasks"])

_GUARDED_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _split_csv(value: str | None) -> list[str]:
    """解析逗号分隔的多值查询参数。"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_user_ids(value: str | None) -> list[UUID]:
    try:
        return [UUID(item) for item in _split_csv(value)]
    except ValueError as exc:
        raise BadRequestError("Invalid assigned_to user id") from exc


@router.post(
    "/projects/{project_id}/tasks",
    summary="创建任务",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[TaskData],
    responses=_GUARDED_RESPONSES,
)
def create_task(
    payload: TaskCreateRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.CREATE_TASK])
    task = task_service.create_task(
        db,
        workspace_id=workspace_id,
        project_id=project_id,
        user_id=user.id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        status=payload.status,
        assigned_to=payload.assigned_to,
        due_date=payload.due_date,
    )
    return success(request, task_service.task_views(db, [task])[0])


@router.get(
    "/tasks",
    summary="任务列表",
    description=(
        "分页筛选工作空间内任务。status / priority / assigned_to 支持逗号分隔多值；"
        "keyword 按标题不区分大小写模糊匹配。"
    ),
    response_model=SuccessResponse[list[TaskData]],
    responses=_GUARDED_RESPONSES,
)
def list_tasks(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID | None = Query(default=None, description="按项目过滤。"),
    status_filter: str | None = Query(default=None, alias="status", description="状态，逗号分隔。"),
    priority: str | None = Query(default=None, description="优先级，逗号分隔。"),
    assigned_to: str | None = Query(default=None, description="指派人用户 ID，逗号分隔。"),
    keyword: str | None = Query(default=None, max_length=255, description="标题关键词。"),
    due_date: datetime | None = Query(default=None, description="截止时间。"),
    page: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    filters = task_service.TaskFilters(
        project_id=project_id,
        status=_split_csv(status_filter),
        priority=_split_csv(priority),
        assigned_to=_parse_user_ids(assigned_to),
        keyword=keyword,
        due_date=due_date,
    )
    tasks, total_count = task_service.get_all_tasks(
        db,
        workspace_id=workspace_id,
        filters=filters,
        page_size=page.page_size,
        page_number=page.page_number,
    )
    return success(
        request,
        task_service.task_views(db, tasks),
        meta=page_meta(page_number=page.page_number, page_size=page.page_size, total_count=total_count),
    )


@router.get(
    "/projects/{project_id}/tasks/{task_id}",
    summary="任务详情",
    response_model=SuccessResponse[TaskData],
    responses=_GUARDED_RESPONSES,
)
def get_task(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    task_id: UUID = Path(description="任务 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    task = task_service.get_task_by_id(db, workspace_id=workspace_id, project_id=project_id, task_id=task_id)
    return success(request, task_service.task_views(db, [task])[0])


@router.patch(
    "/projects/{project_id}/tasks/{task_id}",
    summary="更新任务",
    response_model=SuccessResponse[TaskData],
    responses=_GUARDED_RESPONSES,
)
def update_task(
    payload: TaskUpdateRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    task_id: UUID = Path(description="任务 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.EDIT_TASK])
    task = task_service.update_task(
        db,
        workspace_id=workspace_id,
        project_id=project_id,
        task_id=task_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return success(request, task_service.task_views(db, [task])[0])


@router.delete(
    "/tasks/{task_id}",
    summary="删除任务",
    response_model=SuccessResponse[dict],
    responses=_GUARDED_RESPONSES,
)
def delete_task(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    task_id: UUID = Path(description="任务 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.DELETE_TASK])
    task_service.delete_task(db, workspace_id=workspace_id, task_id=task_id)
    return success(request, {"task_id": task_id})
