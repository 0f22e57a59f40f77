"""工作空间相关请求结构。"""

from uuid import UUID

from pydantic import BaseModel, Field


class WorkspaceCreateRequest(BaseModel):
    """创建工作空间请求体。"""

    name: str = Field(min_length=1, max_length=128, description="工作空间名称。", examples=["Design Team"])
    description: str | None = Field(default=None, description="工作空间说明。")


class WorkspaceUpdateRequest(BaseModel):
    """更新工作空间请求体。"""

    name: str | None = Field(default=None, min_length=1, max_length=128, description="新的工作空间名称。")
    description: str | None = Field(default=None, description="新的工作空间说明。")


class MemberRoleChangeRequest(BaseModel):
    """变更成员角色请求体。"""

    member_id: UUID = Field(description="目标成员的用户 ID。")
    role_id: UUID = Field(description="目标角色 ID。")
