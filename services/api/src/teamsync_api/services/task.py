"""任务服务。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import BadRequestError, NotFoundError
from teamsync_api.models.enums import TaskPriority, TaskStatus
from teamsync_api.models.project import Project, Task
from teamsync_api.models.user import User
from teamsync_api.models.workspace import Member

# 允许通过更新接口修改的字段。
TASK_UPDATABLE_FIELDS = frozenset({"title", "description", "priority", "status", "assigned_to", "due_date"})
# 不允许显式置空的字段。
TASK_REQUIRED_FIELDS = frozenset({"title", "priority", "status"})


@dataclass
class TaskFilters:
    """任务列表过滤条件，空值表示不过滤。"""

    project_id: UUID | None = None
    status: list[str] = field(default_factory=list)
    priority: list[str] = field(default_factory=list)
    assigned_to: list[UUID] = field(default_factory=list)
    keyword: str | None = None
    due_date: datetime | None = None


def _get_project_in_workspace(db: Session, *, workspace_id: UUID, project_id: UUID) -> Project:
    project = db.get(Project, project_id)
    if not project or project.workspace_id != workspace_id:
        raise NotFoundError("Project not found or does not belong to this workspace")
    return project


def _ensure_assignee_is_member(db: Session, *, workspace_id: UUID, user_id: UUID) -> None:
    exists = db.execute(
        select(Member.id).where(Member.user_id == user_id).where(Member.workspace_id == workspace_id).limit(1)
    ).scalar_one_or_none()
    if exists is None:
        raise BadRequestError("Assigned user is not a member of this workspace.")


def create_task(
    db: Session,
    *,
    workspace_id: UUID,
    project_id: UUID,
    user_id: UUID,
    title: str,
    description: str | None = None,
    priority: str | None = None,
    status: str | None = None,
    assigned_to: UUID | None = None,
    due_date: datetime | None = None,
) -> Task:
    """在项目下创建任务，未指定时默认 MEDIUM / TODO。"""
    _get_project_in_workspace(db, workspace_id=workspace_id, project_id=project_id)

    if assigned_to:
        _ensure_assignee_is_member(db, workspace_id=workspace_id, user_id=assigned_to)

    task = Task(
        title=title,
        description=description,
        priority=priority or TaskPriority.MEDIUM,
        status=status or TaskStatus.TODO,
        assigned_to=assigned_to,
        created_by=user_id,
        workspace_id=workspace_id,
        project_id=project_id,
        due_date=due_date,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def update_task(
    db: Session,
    *,
    workspace_id: UUID,
    project_id: UUID,
    task_id: UUID,
    changes: dict[str, Any],
) -> Task:
    """按传入字段更新任务；未出现在 changes 中的字段保持不变。"""
    _get_project_in_workspace(db, workspace_id=workspace_id, project_id=project_id)

    task = db.get(Task, task_id)
    if not task or task.project_id != project_id:
        raise NotFoundError("Task not found or does not belong to this project")

    unknown = set(changes) - TASK_UPDATABLE_FIELDS
    if unknown:
        raise BadRequestError(f"Unsupported task fields: {', '.join(sorted(unknown))}")

    nulled = sorted(key for key in TASK_REQUIRED_FIELDS & set(changes) if changes[key] is None)
    if nulled:
        raise BadRequestError(f"Task fields cannot be null: {', '.join(nulled)}")

    assignee = changes.get("assigned_to")
    if assignee:
        _ensure_assignee_is_member(db, workspace_id=workspace_id, user_id=assignee)

    for key, value in changes.items():
        setattr(task, key, value)
    db.commit()
    db.refresh(task)
    return task


def _task_conditions(workspace_id: UUID, filters: TaskFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [Task.workspace_id == workspace_id]
    if filters.project_id:
        conditions.append(Task.project_id == filters.project_id)
    if filters.status:
        conditions.append(Task.status.in_(filters.status))
    if filters.priority:
        conditions.append(Task.priority.in_(filters.priority))
    if filters.assigned_to:
        conditions.append(Task.assigned_to.in_(filters.assigned_to))
    if filters.keyword:
        conditions.append(Task.title.icontains(filters.keyword, autoescape=True))
    if filters.due_date:
        conditions.append(Task.due_date == filters.due_date)
    return conditions


def get_all_tasks(
    db: Session,
    *,
    workspace_id: UUID,
    filters: TaskFilters,
    page_size: int,
    page_number: int,
) -> tuple[list[Task], int]:
    """按过滤条件分页查询任务，返回 (当前页任务, 总数)，按创建时间倒序。"""
    conditions = _task_conditions(workspace_id, filters)
    skip = (page_number - 1) * page_size

    total_count = db.execute(select(func.count()).select_from(Task).where(*conditions)).scalar_one()
    tasks = (
        db.execute(
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc(), Task.id)
            .offset(skip)
            .limit(page_size)
        )
        .scalars()
        .all()
    )
    return list(tasks), total_count


def get_task_by_id(db: Session, *, workspace_id: UUID, project_id: UUID, task_id: UUID) -> Task:
    _get_project_in_workspace(db, workspace_id=workspace_id, project_id=project_id)

    task = (
        db.execute(
            select(Task)
            .where(Task.id == task_id)
            .where(Task.workspace_id == workspace_id)
            .where(Task.project_id == project_id)
        )
        .scalar_one_or_none()
    )
    if not task:
        raise NotFoundError("Task not found.")
    return task


def delete_task(db: Session, *, workspace_id: UUID, task_id: UUID) -> None:
    task = (
        db.execute(select(Task).where(Task.id == task_id).where(Task.workspace_id == workspace_id))
        .scalar_one_or_none()
    )
    if not task:
        raise NotFoundError("Task not found or does not belong to the specified workspace")
    db.delete(task)
    db.commit()


def delete_tasks_where(db: Session, *conditions: ColumnElement[bool]) -> None:
    """批量删除任务，不提交事务。"""
    db.execute(delete(Task).where(*conditions))


def task_analytics(db: Session, *conditions: ColumnElement[bool]) -> dict[str, int]:
    """统计任务总数、逾期数与完成数。

    逾期：截止时间早于当前时间且状态不是 DONE。
    """
    now = datetime.now(timezone.utc)

    def _count(*extra: ColumnElement[bool]) -> int:
        return db.execute(select(func.count()).select_from(Task).where(*conditions, *extra)).scalar_one()

    return {
        "total_tasks": _count(),
        "overdue_tasks": _count(Task.due_date < now, Task.status != TaskStatus.DONE),
        "completed_tasks": _count(Task.status == TaskStatus.DONE),
    }


def task_views(db: Session, tasks: list[Task]) -> list[dict[str, Any]]:
    """将任务序列化为接口视图，附带指派人与项目摘要。"""
    user_ids = list({task.assigned_to for task in tasks if task.assigned_to})
    project_ids = list({task.project_id for task in tasks})

    user_map: dict[UUID, User] = {}
    if user_ids:
        users = db.execute(select(User).where(User.id.in_(user_ids))).scalars().all()
        user_map = {user.id: user for user in users}
    project_map: dict[UUID, Project] = {}
    if project_ids:
        projects = db.execute(select(Project).where(Project.id.in_(project_ids))).scalars().all()
        project_map = {project.id: project for project in projects}

    views: list[dict[str, Any]] = []
    for task in tasks:
        assignee = user_map.get(task.assigned_to) if task.assigned_to else None
        project = project_map.get(task.project_id)
        views.append(
            {
                "id": task.id,
                "task_code": task.task_code,
                "workspace_id": task.workspace_id,
                "project_id": task.project_id,
                "title": task.title,
                "description": task.description,
                "status": task.status,
                "priority": task.priority,
                "assigned_to": task.assigned_to,
                "due_date": task.due_date,
                "created_by": task.created_by,
                "created_at": task.created_at,
                "assignee": (
                    {"id": assignee.id, "name": assignee.name, "profile_picture": assignee.profile_picture}
                    if assignee
                    else None
                ),
                "project": (
                    {"id": project.id, "emoji": project.emoji, "name": project.name} if project else None
                ),
            }
        )
    return views
