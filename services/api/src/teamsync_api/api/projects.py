"""项目管理接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from teamsync_api.db.session import get_db
from teamsync_api.dependencies import PageParams, get_current_user, get_page_params
from teamsync_api.models.enums import Permission
from teamsync_api.models.project import Project
from teamsync_api.models.user import User
from teamsync_api.schemas.common import ErrorResponse, SuccessResponse
from teamsync_api.schemas.project import ProjectCreateRequest, ProjectUpdateRequest
from teamsync_api.schemas.responses import AnalyticsData, ProjectData
from teamsync_api.services import require_workspace_permissions
from teamsync_api.services import project as project_service
from teamsync_api.utils.response import page_meta, success

router = APIRouter(prefix="/workspaces/{workspace_id}/projects", tags=["projects"])

_GUARDED_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _project_view(project: Project) -> dict:
    return {
        "id": project.id,
        "workspace_id": project.workspace_id,
        "name": project.name,
        "description": project.description,
        "emoji": project.emoji,
        "created_by": project.created_by,
        "created_at": project.created_at,
    }


@router.post(
    "",
    summary="创建项目",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[ProjectData],
    responses=_GUARDED_RESPONSES,
)
def create_project(
    payload: ProjectCreateRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.CREATE_PROJECT],
    )
    project = project_service.create_project(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        name=payload.name,
        description=payload.description,
        emoji=payload.emoji,
    )
    return success(request, _project_view(project))


@router.get(
    "",
    summary="项目列表",
    description="分页返回工作空间内项目，按创建时间倒序；分页信息位于 meta.pagination。",
    response_model=SuccessResponse[list[ProjectData]],
    responses=_GUARDED_RESPONSES,
)
def list_projects(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    page: PageParams = Depends(get_page_params),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    projects, total_count, _, _ = project_service.get_projects_in_workspace(
        db,
        workspace_id=workspace_id,
        page_size=page.page_size,
        page_number=page.page_number,
    )
    return success(
        request,
        [_project_view(project) for project in projects],
        meta=page_meta(page_number=page.page_number, page_size=page.page_size, total_count=total_count),
    )


@router.get(
    "/{project_id}",
    summary="项目详情",
    response_model=SuccessResponse[ProjectData],
    responses=_GUARDED_RESPONSES,
)
def get_project(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    project = project_service.get_project_by_id_and_workspace_id(db, workspace_id=workspace_id, project_id=project_id)
    return success(request, _project_view(project))


@router.get(
    "/{project_id}/analytics",
    summary="项目任务统计",
    response_model=SuccessResponse[AnalyticsData],
    responses=_GUARDED_RESPONSES,
)
def project_analytics(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    analytics = project_service.get_project_analytics(db, workspace_id=workspace_id, project_id=project_id)
    return success(request, analytics)


@router.patch(
    "/{project_id}",
    summary="更新项目",
    response_model=SuccessResponse[ProjectData],
    responses=_GUARDED_RESPONSES,
)
def update_project(
    payload: ProjectUpdateRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.EDIT_PROJECT],
    )
    project = project_service.update_project(
        db,
        workspace_id=workspace_id,
        project_id=project_id,
        name=payload.name,
        emoji=payload.emoji,
        description=payload.description,
    )
    return success(request, _project_view(project))


@router.delete(
    "/{project_id}",
    summary="删除项目",
    description="删除项目及其全部任务。",
    response_model=SuccessResponse[dict],
    responses=_GUARDED_RESPONSES,
)
def delete_project(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    project_id: UUID = Path(description="项目 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.DELETE_PROJECT],
    )
    project_service.delete_project(db, workspace_id=workspace_id, project_id=project_id)
    return success(request, {"project_id": project_id})
