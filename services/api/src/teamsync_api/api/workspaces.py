"""工作空间管理接口。"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.orm import Session

from teamsync_api.db.session import get_db
from teamsync_api.dependencies import get_current_user
from teamsync_api.models.enums import Permission
from teamsync_api.models.user import User
from teamsync_api.models.workspace import Workspace
from teamsync_api.schemas.common import ErrorResponse, SuccessResponse
from teamsync_api.schemas.responses import (
    AnalyticsData,
    InviteCodeData,
    MemberRoleData,
    WorkspaceData,
    WorkspaceDeleteData,
    WorkspaceDetailData,
    WorkspaceJoinData,
    WorkspaceMemberData,
)
from teamsync_api.schemas.workspace import MemberRoleChangeRequest, WorkspaceCreateRequest, WorkspaceUpdateRequest
from teamsync_api.services import get_member_role_in_workspace, require_workspace_permissions
from teamsync_api.services import workspace as workspace_service
from teamsync_api.utils.response import success

router = APIRouter(prefix="/workspaces", tags=["workspaces"])

_GUARDED_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _workspace_view(workspace: Workspace) -> dict:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "description": workspace.description,
        "owner_id": workspace.owner_id,
        "invite_code": workspace.invite_code,
        "created_at": workspace.created_at,
    }


@router.post(
    "",
    summary="创建工作空间",
    description="创建工作空间，创建者成为 OWNER，并切换为当前工作空间。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[WorkspaceData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_workspace(
    payload: WorkspaceCreateRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    workspace = workspace_service.create_workspace(
        db,
        user_id=user.id,
        name=payload.name,
        description=payload.description,
    )
    return success(request, _workspace_view(workspace))


@router.get(
    "",
    summary="我的工作空间",
    description="返回当前用户已加入的全部工作空间。",
    response_model=SuccessResponse[list[WorkspaceData]],
    responses={401: {"model": ErrorResponse}},
)
def list_workspaces(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    workspaces = workspace_service.get_user_workspaces(db, user_id=user.id)
    return success(request, [_workspace_view(workspace) for workspace in workspaces])


@router.post(
    "/join/{invite_code}",
    summary="通过邀请码加入",
    description="以 MEMBER 角色加入邀请码对应的工作空间。",
    response_model=SuccessResponse[WorkspaceJoinData],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def join_workspace(
    request: Request,
    invite_code: str = Path(min_length=1, max_length=32, description="工作空间邀请码。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    workspace, role_name = workspace_service.join_workspace_by_invite(db, user_id=user.id, invite_code=invite_code)
    return success(request, {"workspace_id": workspace.id, "role": role_name})


@router.get(
    "/{workspace_id}",
    summary="工作空间详情",
    description="返回工作空间信息与成员列表，要求当前用户为成员。",
    response_model=SuccessResponse[WorkspaceDetailData],
    responses=_GUARDED_RESPONSES,
)
def get_workspace(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_member_role_in_workspace(db, user_id=user.id, workspace_id=workspace_id)
    workspace, members = workspace_service.get_workspace_with_members(db, workspace_id=workspace_id)
    return success(request, {"workspace": _workspace_view(workspace), "members": members})


@router.get(
    "/{workspace_id}/members",
    summary="工作空间成员",
    response_model=SuccessResponse[list[WorkspaceMemberData]],
    responses=_GUARDED_RESPONSES,
)
def list_members(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    return success(request, workspace_service.get_workspace_members(db, workspace_id=workspace_id))


@router.get(
    "/{workspace_id}/analytics",
    summary="工作空间任务统计",
    description="统计工作空间内任务总数、逾期数与完成数。",
    response_model=SuccessResponse[AnalyticsData],
    responses=_GUARDED_RESPONSES,
)
def workspace_analytics(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.VIEW_ONLY])
    return success(request, workspace_service.get_workspace_analytics(db, workspace_id=workspace_id))


@router.put(
    "/{workspace_id}/members/role",
    summary="变更成员角色",
    response_model=SuccessResponse[MemberRoleData],
    responses=_GUARDED_RESPONSES,
)
def change_member_role(
    payload: MemberRoleChangeRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.CHANGE_MEMBER_ROLE],
    )
    member = workspace_service.change_member_role(
        db,
        workspace_id=workspace_id,
        member_user_id=payload.member_id,
        role_id=payload.role_id,
    )
    return success(request, {"member_id": member.id, "user_id": member.user_id, "role_id": member.role_id})


@router.patch(
    "/{workspace_id}",
    summary="更新工作空间",
    response_model=SuccessResponse[WorkspaceData],
    responses=_GUARDED_RESPONSES,
)
def update_workspace(
    payload: WorkspaceUpdateRequest,
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.EDIT_WORKSPACE],
    )
    workspace = workspace_service.update_workspace(
        db,
        workspace_id=workspace_id,
        name=payload.name,
        description=payload.description,
    )
    return success(request, _workspace_view(workspace))


@router.delete(
    "/{workspace_id}",
    summary="删除工作空间",
    description="仅所有者可删除；同时删除其项目、任务与成员关系。",
    response_model=SuccessResponse[WorkspaceDeleteData],
    responses=_GUARDED_RESPONSES,
)
def delete_workspace(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(
        db,
        user_id=user.id,
        workspace_id=workspace_id,
        permissions=[Permission.DELETE_WORKSPACE],
    )
    current_workspace_id = workspace_service.delete_workspace(db, workspace_id=workspace_id, user_id=user.id)
    return success(request, {"current_workspace_id": current_workspace_id})


@router.put(
    "/{workspace_id}/switch",
    summary="切换当前工作空间",
    response_model=SuccessResponse[WorkspaceData],
    responses=_GUARDED_RESPONSES,
)
def switch_workspace(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    workspace = workspace_service.switch_current_workspace(db, user_id=user.id, workspace_id=workspace_id)
    return success(request, _workspace_view(workspace))


@router.post(
    "/{workspace_id}/invite-code/reset",
    summary="重置邀请码",
    response_model=SuccessResponse[InviteCodeData],
    responses=_GUARDED_RESPONSES,
)
def reset_invite_code(
    request: Request,
    workspace_id: UUID = Path(description="工作空间 ID。"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_workspace_permissions(db, user_id=user.id, workspace_id=workspace_id, permissions=[Permission.ADD_MEMBER])
    invite_code = workspace_service.reset_invite_code(db, workspace_id=workspace_id)
    return success(request, {"invite_code": invite_code})
