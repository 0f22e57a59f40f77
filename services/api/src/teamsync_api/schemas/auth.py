"""注册与登录请求结构。"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from teamsync_api.schemas.common import BaseSchema

_EMAIL_PATTERN = r"^\s*[^@\s]+@[^@\s]+\.[^@\s]+\s*$"


class AuthRegisterRequest(BaseModel):
    """邮箱注册请求。"""

    email: str = Field(
        min_length=5,
        max_length=256,
        pattern=_EMAIL_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    name: str = Field(min_length=1, max_length=128, description="展示名。", examples=["Alice"])
    password: str = Field(min_length=4, max_length=128, description="登录密码。", examples=["StrongPassw0rd!"])


class AuthLoginRequest(BaseModel):
    """邮箱登录请求。"""

    email: str = Field(
        min_length=5,
        max_length=256,
        pattern=_EMAIL_PATTERN,
        description="登录邮箱。",
        examples=["alice@example.com"],
    )
    password: str = Field(min_length=1, max_length=128, description="登录密码。")


class AuthOAuthLoginRequest(BaseModel):
    """第三方登录回调请求（由前置 OAuth 网关换取用户资料后调用）。"""

    provider: Literal["GOOGLE", "GITHUB", "FACEBOOK"] = Field(description="登录来源。", examples=["GOOGLE"])
    provider_id: str = Field(min_length=1, max_length=256, description="来源侧用户标识。")
    email: str = Field(min_length=5, max_length=256, pattern=_EMAIL_PATTERN, description="来源返回的邮箱。")
    display_name: str | None = Field(default=None, max_length=128, description="来源返回的展示名。")
    picture: str | None = Field(default=None, max_length=1024, description="来源返回的头像地址。")


class AuthRegisterData(BaseSchema):
    """注册结果结构。"""

    user_id: UUID = Field(description="用户 ID。")
    workspace_id: UUID = Field(description="自动创建的默认工作空间 ID。")


class AuthLoginData(BaseSchema):
    """登录结果结构。"""

    access_token: str = Field(description="访问令牌。")
    token_type: str = Field(default="bearer", description="令牌类型。")
    expires_at: datetime = Field(description="令牌过期时间（UTC）。")
    expires_in: int = Field(description="距过期剩余秒数。")
    user: "UserProfileData" = Field(description="当前登录用户（不含口令）。")


class UserProfileData(BaseSchema):
    """用户资料（不含口令字段）。"""

    id: UUID = Field(description="用户 ID。")
    email: str = Field(description="登录邮箱。")
    name: str | None = Field(default=None, description="展示名。")
    profile_picture: str | None = Field(default=None, description="头像地址。")
    is_active: bool = Field(description="账号是否可用。")
    last_login: datetime | None = Field(default=None, description="最近一次登录时间。")
    current_workspace_id: UUID | None = Field(default=None, description="当前工作空间 ID。")


AuthLoginData.model_rebuild()
