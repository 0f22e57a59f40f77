"""工作空间成员鉴权服务。

路由层在执行工作空间/项目/任务变更前调用，
先解析成员角色，再用角色权限点判断是否放行。
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import NotFoundError, UnauthorizedError
from teamsync_api.models.permission import Role
from teamsync_api.models.workspace import Member, Workspace
from teamsync_api.services.permissions import role_guard


def get_membership(db: Session, *, user_id: UUID, workspace_id: UUID) -> Member | None:
    """查询用户在工作空间中的成员关系。

    成员表未对 (user_id, workspace_id) 设唯一约束，存在多条时取最早加入的一条。
    """
    return (
        db.execute(
            select(Member)
            .where(Member.user_id == user_id)
            .where(Member.workspace_id == workspace_id)
            .order_by(Member.joined_at)
        )
        .scalars()
        .first()
    )


def get_member_role_in_workspace(db: Session, *, user_id: UUID, workspace_id: UUID) -> Role:
    """返回用户在工作空间中的角色。

    判定规则：
    1. 工作空间必须存在。
    2. 用户必须是该工作空间成员。
    """
    workspace = db.get(Workspace, workspace_id)
    if not workspace:
        raise NotFoundError("Workspace not found")

    member = get_membership(db, user_id=user_id, workspace_id=workspace_id)
    if not member:
        raise UnauthorizedError("You are not a member of this workspace")

    role = db.get(Role, member.role_id)
    if not role:
        raise NotFoundError("Role not found")
    return role


def require_workspace_permissions(
    db: Session,
    *,
    user_id: UUID,
    workspace_id: UUID,
    permissions: list[str],
) -> Role:
    """校验成员角色具备全部权限点，返回该角色。"""
    role = get_member_role_in_workspace(db, user_id=user_id, workspace_id=workspace_id)
    role_guard(role, permissions)
    return role
