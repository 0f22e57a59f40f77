"""项目与任务请求结构。"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

TaskStatusLiteral = Literal["BACKLOG", "TODO", "IN_PROGRESS", "IN_REVIEW", "DONE"]
TaskPriorityLiteral = Literal["LOW", "MEDIUM", "HIGH"]


class ProjectCreateRequest(BaseModel):
    """创建项目请求体。"""

    name: str = Field(min_length=1, max_length=255, description="项目名称。", examples=["Website Redesign"])
    description: str | None = Field(default=None, description="项目描述。")
    emoji: str | None = Field(default=None, max_length=16, description="项目图标。", examples=["🚀"])


class ProjectUpdateRequest(BaseModel):
    """更新项目请求体，空值字段不修改。"""

    name: str | None = Field(default=None, min_length=1, max_length=255, description="新的项目名称。")
    description: str | None = Field(default=None, description="新的项目描述。")
    emoji: str | None = Field(default=None, max_length=16, description="新的项目图标。")


class TaskCreateRequest(BaseModel):
    """创建任务请求体。"""

    title: str = Field(min_length=1, max_length=255, description="任务标题。")
    description: str | None = Field(default=None, description="任务描述。")
    priority: TaskPriorityLiteral | None = Field(default=None, description="优先级，默认 MEDIUM。")
    status: TaskStatusLiteral | None = Field(default=None, description="状态，默认 TODO。")
    assigned_to: UUID | None = Field(default=None, description="指派人用户 ID，须为工作空间成员。")
    due_date: datetime | None = Field(default=None, description="截止时间。")


class TaskUpdateRequest(BaseModel):
    """更新任务请求体，仅修改显式传入的字段。"""

    title: str | None = Field(default=None, min_length=1, max_length=255, description="任务标题。")
    description: str | None = Field(default=None, description="任务描述。")
    priority: TaskPriorityLiteral | None = Field(default=None, description="优先级。")
    status: TaskStatusLiteral | None = Field(default=None, description="状态。")
    assigned_to: UUID | None = Field(default=None, description="指派人用户 ID。")
    due_date: datetime | None = Field(default=None, description="截止时间。")

    @field_validator("title", "priority", "status")
    @classmethod
    def reject_explicit_null(cls, value):
        """标题、优先级、状态可以不传，但不能显式置空。"""
        if value is None:
            raise ValueError("field cannot be null")
        return value
