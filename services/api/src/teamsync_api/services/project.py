"""项目服务。"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from teamsync_api.db.session import transaction_scope
from teamsync_api.exceptions import NotFoundError
from teamsync_api.models.project import Project, Task
from teamsync_api.services.task import delete_tasks_where, task_analytics
from teamsync_api.utils.response import total_pages

PROJECT_NOT_FOUND_MESSAGE = "Project not found or does not belong to the specified workspace"


def create_project(
    db: Session,
    *,
    user_id: UUID,
    workspace_id: UUID,
    name: str,
    description: str | None = None,
    emoji: str | None = None,
) -> Project:
    project = Project(
        name=name,
        description=description,
        workspace_id=workspace_id,
        created_by=user_id,
    )
    if emoji:
        project.emoji = emoji
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def get_projects_in_workspace(
    db: Session,
    *,
    workspace_id: UUID,
    page_size: int,
    page_number: int,
) -> tuple[list[Project], int, int, int]:
    """分页查询工作空间项目，返回 (项目列表, 总数, 总页数, 跳过条数)。"""
    total_count = db.execute(
        select(func.count()).select_from(Project).where(Project.workspace_id == workspace_id)
    ).scalar_one()

    skip = (page_number - 1) * page_size
    projects = (
        db.execute(
            select(Project)
            .where(Project.workspace_id == workspace_id)
            .order_by(Project.created_at.desc(), Project.id)
            .offset(skip)
            .limit(page_size)
        )
        .scalars()
        .all()
    )
    return list(projects), total_count, total_pages(total_count, page_size), skip


def get_project_by_id_and_workspace_id(db: Session, *, workspace_id: UUID, project_id: UUID) -> Project:
    project = (
        db.execute(select(Project).where(Project.id == project_id).where(Project.workspace_id == workspace_id))
        .scalar_one_or_none()
    )
    if not project:
        raise NotFoundError(PROJECT_NOT_FOUND_MESSAGE)
    return project


def get_project_analytics(db: Session, *, workspace_id: UUID, project_id: UUID) -> dict[str, int]:
    """统计项目下任务总数、逾期数与完成数。"""
    project = db.get(Project, project_id)
    if not project or project.workspace_id != workspace_id:
        raise NotFoundError("Project not found or does not belong to this workspace")
    return task_analytics(db, Task.project_id == project_id)


def update_project(
    db: Session,
    *,
    workspace_id: UUID,
    project_id: UUID,
    name: str | None = None,
    emoji: str | None = None,
    description: str | None = None,
) -> Project:
    """更新项目；空值字段保持原值。"""
    project = get_project_by_id_and_workspace_id(db, workspace_id=workspace_id, project_id=project_id)

    if emoji:
        project.emoji = emoji
    if name:
        project.name = name
    if description:
        project.description = description

    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, *, workspace_id: UUID, project_id: UUID) -> None:
    """删除项目及其全部任务。"""
    project = get_project_by_id_and_workspace_id(db, workspace_id=workspace_id, project_id=project_id)
    with transaction_scope(db):
        delete_tasks_where(db, Task.project_id == project.id)
        db.delete(project)
