"""工作空间与成员服务。"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from teamsync_api.db.session import transaction_scope
from teamsync_api.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from teamsync_api.models.enums import RoleName
from teamsync_api.models.permission import Role
from teamsync_api.models.project import Project, Task
from teamsync_api.models.user import User
from teamsync_api.models.workspace import Member, Workspace
from teamsync_api.services.authorization import get_member_role_in_workspace, get_membership
from teamsync_api.services.permissions import find_role_by_name
from teamsync_api.services.task import delete_tasks_where, task_analytics

logger = logging.getLogger("teamsync_api.workspace")


def _get_workspace(db: Session, workspace_id: UUID) -> Workspace:
    workspace = db.get(Workspace, workspace_id)
    if not workspace:
        raise NotFoundError("Workspace not found")
    return workspace


def create_workspace(
    db: Session,
    *,
    user_id: UUID,
    name: str,
    description: str | None = None,
) -> Workspace:
    """创建工作空间，创建者成为 OWNER 并切换为当前工作空间。"""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    owner_role = find_role_by_name(db, RoleName.OWNER)
    if not owner_role:
        raise NotFoundError("Owner role not found")

    with transaction_scope(db):
        workspace = Workspace(name=name, description=description, owner_id=user.id)
        db.add(workspace)
        db.flush()

        db.add(Member(user_id=user.id, workspace_id=workspace.id, role_id=owner_role.id))
        user.current_workspace_id = workspace.id

    db.refresh(workspace)
    return workspace


def get_user_workspaces(db: Session, *, user_id: UUID) -> list[Workspace]:
    """返回用户作为成员加入的全部工作空间。"""
    workspace_ids = db.execute(select(Member.workspace_id).where(Member.user_id == user_id)).scalars().all()
    unique_ids = list(set(workspace_ids))
    if not unique_ids:
        return []
    return list(
        db.execute(select(Workspace).where(Workspace.id.in_(unique_ids)).order_by(Workspace.created_at))
        .scalars()
        .all()
    )


def get_workspace_members(db: Session, *, workspace_id: UUID) -> list[dict[str, Any]]:
    """返回工作空间成员视图（用户资料 + 角色名）。"""
    _get_workspace(db, workspace_id)

    rows = db.execute(
        select(Member, User, Role)
        .join(User, User.id == Member.user_id)
        .join(Role, Role.id == Member.role_id)
        .where(Member.workspace_id == workspace_id)
        .order_by(Member.joined_at)
    ).all()
    return [
        {
            "member_id": member.id,
            "user_id": user.id,
            "name": user.name,
            "email": user.email,
            "profile_picture": user.profile_picture,
            "role_id": role.id,
            "role": role.name,
            "joined_at": member.joined_at,
        }
        for member, user, role in rows
    ]


def get_workspace_with_members(db: Session, *, workspace_id: UUID) -> tuple[Workspace, list[dict[str, Any]]]:
    workspace = _get_workspace(db, workspace_id)
    return workspace, get_workspace_members(db, workspace_id=workspace_id)


def get_workspace_analytics(db: Session, *, workspace_id: UUID) -> dict[str, int]:
    _get_workspace(db, workspace_id)
    return task_analytics(db, Task.workspace_id == workspace_id)


def change_member_role(
    db: Session,
    *,
    workspace_id: UUID,
    member_user_id: UUID,
    role_id: UUID,
) -> Member:
    """变更成员角色。"""
    _get_workspace(db, workspace_id)

    role = db.get(Role, role_id)
    if not role:
        raise NotFoundError("Role not found")

    member = get_membership(db, user_id=member_user_id, workspace_id=workspace_id)
    if not member:
        raise NotFoundError("Member not found in the workspace")

    member.role_id = role.id
    db.commit()
    db.refresh(member)
    logger.info("member role changed workspace_id=%s user_id=%s role=%s", workspace_id, member_user_id, role.name)
    return member


def update_workspace(
    db: Session,
    *,
    workspace_id: UUID,
    name: str | None = None,
    description: str | None = None,
) -> Workspace:
    workspace = _get_workspace(db, workspace_id)
    if name:
        workspace.name = name
    if description is not None:
        workspace.description = description
    db.commit()
    db.refresh(workspace)
    return workspace


def _fallback_workspace_id(db: Session, *, user_id: UUID) -> UUID | None:
    return (
        db.execute(select(Member.workspace_id).where(Member.user_id == user_id).order_by(Member.joined_at))
        .scalars()
        .first()
    )


def delete_workspace(db: Session, *, workspace_id: UUID, user_id: UUID) -> UUID | None:
    """删除工作空间及其项目、任务、成员关系，仅所有者可执行。

    以该空间为当前空间的成员都会切换到其余工作空间；返回操作者新的当前工作空间 ID。
    """
    workspace = _get_workspace(db, workspace_id)
    if workspace.owner_id != user_id:
        raise UnauthorizedError("You are not authorized to delete this workspace")

    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    with transaction_scope(db):
        delete_tasks_where(db, Task.workspace_id == workspace_id)
        db.execute(delete(Project).where(Project.workspace_id == workspace_id))
        db.execute(delete(Member).where(Member.workspace_id == workspace_id))

        affected = db.execute(select(User).where(User.current_workspace_id == workspace_id)).scalars().all()
        for affected_user in affected:
            affected_user.current_workspace_id = _fallback_workspace_id(db, user_id=affected_user.id)

        db.delete(workspace)
        current_workspace_id = user.current_workspace_id

    logger.info("workspace deleted workspace_id=%s by user_id=%s", workspace_id, user_id)
    return current_workspace_id


def switch_current_workspace(db: Session, *, user_id: UUID, workspace_id: UUID) -> Workspace:
    """切换用户当前工作空间，要求用户是该工作空间成员。"""
    get_member_role_in_workspace(db, user_id=user_id, workspace_id=workspace_id)

    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.current_workspace_id = workspace_id
    db.commit()
    return _get_workspace(db, workspace_id)


def reset_invite_code(db: Session, *, workspace_id: UUID) -> str:
    workspace = _get_workspace(db, workspace_id)
    invite_code = workspace.reset_invite_code()
    db.commit()
    return invite_code


def join_workspace_by_invite(db: Session, *, user_id: UUID, invite_code: str) -> tuple[Workspace, str]:
    """通过邀请码以 MEMBER 身份加入工作空间，返回 (工作空间, 角色名)。"""
    workspace = (
        db.execute(select(Workspace).where(Workspace.invite_code == invite_code.strip())).scalar_one_or_none()
    )
    if not workspace:
        raise NotFoundError("Invalid invite code or workspace not found")

    if get_membership(db, user_id=user_id, workspace_id=workspace.id):
        raise BadRequestError("You are already a member of this workspace")

    member_role = find_role_by_name(db, RoleName.MEMBER)
    if not member_role:
        raise NotFoundError("Role not found")

    db.add(Member(user_id=user_id, workspace_id=workspace.id, role_id=member_role.id))
    db.commit()
    logger.info("member joined workspace_id=%s user_id=%s", workspace.id, user_id)
    return workspace, member_role.name
