"""工作空间与成员模型。"""

import secrets
import string
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.core.config import get_settings
from teamsync_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

_INVITE_CODE_ALPHABET = string.ascii_letters + string.digits


def generate_invite_code() -> str:
    """生成工作空间邀请码。"""
    length = get_settings().invite_code_length
    return "".join(secrets.choice(_INVITE_CODE_ALPHABET) for _ in range(length))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Workspace(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """工作空间实体，项目与任务的协作隔离边界。"""

    __tablename__ = "workspaces"

    # 工作空间名称。
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    # 可选描述。
    description: Mapped[str | None] = mapped_column(Text)
    # 创建者（所有者）用户 ID。
    owner_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 全局唯一邀请码，可重置。
    invite_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, default=generate_invite_code)

    def reset_invite_code(self) -> str:
        self.invite_code = generate_invite_code()
        return self.invite_code


class Member(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """工作空间成员关系。

    (user_id, workspace_id) 不设唯一约束，重复加入由业务层拦截。
    """

    __tablename__ = "members"

    # 成员用户 ID。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 所属工作空间 ID。
    workspace_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 角色 ID（逻辑关联 roles.id）。
    role_id: Mapped[UUID] = mapped_column(nullable=False)
    # 加入时间。
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utc_now)
