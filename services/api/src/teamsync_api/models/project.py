"""项目与任务模型。"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from teamsync_api.models.enums import TaskPriority, TaskStatus

DEFAULT_PROJECT_EMOJI = "📊"


def generate_task_code() -> str:
    """生成形如 task-3fa 的任务短编码。"""
    return f"task-{uuid4().hex[:3]}"


class Project(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """项目实体，归属单个工作空间。"""

    __tablename__ = "projects"

    # 所属工作空间 ID。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 项目名称。
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 项目描述。
    description: Mapped[str | None] = mapped_column(Text)
    # 项目图标。
    emoji: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_PROJECT_EMOJI)
    # 创建人用户 ID。
    created_by: Mapped[UUID] = mapped_column(nullable=False)


class Task(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """任务实体。"""

    __tablename__ = "tasks"

    # 任务短编码，形如 task-3fa。
    task_code: Mapped[str] = mapped_column(String(32), nullable=False, default=generate_task_code)
    # 冗余工作空间 ID，用于按工作空间过滤。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 所属项目 ID。
    project_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 任务标题。
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # 任务描述。
    description: Mapped[str | None] = mapped_column(Text)
    # 任务状态。
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=TaskStatus.TODO)
    # 任务优先级。
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default=TaskPriority.MEDIUM)
    # 指派人用户 ID。
    assigned_to: Mapped[UUID | None] = mapped_column(index=True)
    # 截止时间。
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # 创建人用户 ID。
    created_by: Mapped[UUID] = mapped_column(nullable=False)
