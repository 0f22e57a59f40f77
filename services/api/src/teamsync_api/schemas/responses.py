"""接口成功响应 `data` 字段结构定义。

说明：
1. 所有业务接口统一返回 `SuccessResponse[data=...]`。
2. 本文件专注于定义各接口在 `data` 中的业务字段。
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from teamsync_api.schemas.auth import UserProfileData
from teamsync_api.schemas.common import BaseSchema


class HealthStatusData(BaseSchema):
    """健康检查返回结构。"""

    status: str = Field(description="健康状态值：ok、ready 或 degraded。")
    app_env: str = Field(description="运行环境标识。")
    roles_seeded: bool | None = Field(default=None, description="角色种子是否已写入，仅就绪探针返回。")


class AuthMeData(BaseSchema):
    """`/auth/me` 接口返回的数据结构。"""

    user: UserProfileData = Field(description="当前登录用户信息。")


class WorkspaceData(BaseSchema):
    """工作空间基础信息。"""

    id: UUID = Field(description="工作空间 ID。")
    name: str = Field(description="工作空间名称。")
    description: str | None = Field(default=None, description="工作空间说明。")
    owner_id: UUID = Field(description="所有者用户 ID。")
    invite_code: str = Field(description="邀请码。")
    created_at: datetime | None = Field(default=None, description="创建时间。")


class WorkspaceMemberData(BaseSchema):
    """工作空间成员视图。"""

    member_id: UUID = Field(description="成员关系 ID。")
    user_id: UUID = Field(description="成员用户 ID。")
    name: str | None = Field(default=None, description="成员展示名。")
    email: str = Field(description="成员邮箱。")
    profile_picture: str | None = Field(default=None, description="成员头像。")
    role_id: UUID = Field(description="角色 ID。")
    role: str = Field(description="角色名称。")
    joined_at: datetime = Field(description="加入时间。")


class WorkspaceDetailData(BaseSchema):
    """工作空间详情（含成员）。"""

    workspace: WorkspaceData = Field(description="工作空间信息。")
    members: list[WorkspaceMemberData] = Field(description="成员列表。")


class WorkspaceDeleteData(BaseSchema):
    """删除工作空间结果。"""

    current_workspace_id: UUID | None = Field(default=None, description="删除后用户的当前工作空间 ID。")


class InviteCodeData(BaseSchema):
    invite_code: str = Field(description="新的邀请码。")


class WorkspaceJoinData(BaseSchema):
    """通过邀请码加入工作空间结果。"""

    workspace_id: UUID = Field(description="加入的工作空间 ID。")
    role: str = Field(description="加入后的角色名称。")


class MemberRoleData(BaseSchema):
    """成员角色变更结果。"""

    member_id: UUID = Field(description="成员关系 ID。")
    user_id: UUID = Field(description="成员用户 ID。")
    role_id: UUID = Field(description="新角色 ID。")


class AnalyticsData(BaseSchema):
    """任务统计结构。"""

    total_tasks: int = Field(description="任务总数。")
    overdue_tasks: int = Field(description="逾期未完成任务数。")
    completed_tasks: int = Field(description="已完成任务数。")


class ProjectData(BaseSchema):
    """项目信息。"""

    id: UUID = Field(description="项目 ID。")
    workspace_id: UUID = Field(description="所属工作空间 ID。")
    name: str = Field(description="项目名称。")
    description: str | None = Field(default=None, description="项目描述。")
    emoji: str = Field(description="项目图标。")
    created_by: UUID = Field(description="创建者用户 ID。")
    created_at: datetime | None = Field(default=None, description="创建时间。")


class TaskAssigneeData(BaseSchema):
    id: UUID
    name: str | None = None
    profile_picture: str | None = None


class TaskProjectData(BaseSchema):
    id: UUID
    emoji: str
    name: str


class TaskData(BaseSchema):
    """任务信息。"""

    id: UUID = Field(description="任务 ID。")
    task_code: str = Field(description="任务短编码，例如 task-1a2。")
    workspace_id: UUID = Field(description="所属工作空间 ID。")
    project_id: UUID = Field(description="所属项目 ID。")
    title: str = Field(description="任务标题。")
    description: str | None = Field(default=None, description="任务描述。")
    status: str = Field(description="任务状态。")
    priority: str = Field(description="任务优先级。")
    assigned_to: UUID | None = Field(default=None, description="指派人用户 ID。")
    due_date: datetime | None = Field(default=None, description="截止时间。")
    created_by: UUID = Field(description="创建者用户 ID。")
    created_at: datetime | None = Field(default=None, description="创建时间。")
    assignee: TaskAssigneeData | None = Field(default=None, description="指派人摘要。")
    project: TaskProjectData | None = Field(default=None, description="所属项目摘要。")
