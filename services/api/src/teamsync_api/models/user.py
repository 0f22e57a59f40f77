"""身份模型：用户与登录账号。"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, event, inspect
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.core.passwords import hash_password, verify_password
from teamsync_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from teamsync_api.models.enums import ProviderKind


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """用户实体。"""

    __tablename__ = "users"

    # 登录邮箱，全局唯一，写入前统一去空格并转小写。
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    # 展示名。
    name: Mapped[str | None] = mapped_column(String(128))
    # 口令哈希，仅邮箱注册用户存在；由持久化钩子负责哈希。
    password: Mapped[str | None] = mapped_column(String(256))
    # 头像地址。
    profile_picture: Mapped[str | None] = mapped_column(String(1024))
    # 账号是否可用。
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # 最近一次登录时间。
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # 当前所在工作空间 ID（逻辑关联 workspaces.id）。
    current_workspace_id: Mapped[UUID | None] = mapped_column()

    def compare_password(self, value: str) -> bool:
        """校验明文口令与已存哈希是否一致。"""
        return verify_password(value, self.password)

    def omit_password(self) -> dict[str, object]:
        """返回不含口令字段的用户视图。"""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "profile_picture": self.profile_picture,
            "is_active": self.is_active,
            "last_login": self.last_login,
            "current_workspace_id": self.current_workspace_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class Account(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """用户在某个登录来源下的身份绑定。"""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_id", name="uk_account_provider_identity"),)

    # 所属用户 ID。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    # 登录来源（GOOGLE/GITHUB/FACEBOOK/EMAIL）。
    provider: Mapped[str] = mapped_column(String(32), nullable=False, default=ProviderKind.EMAIL)
    # 来源侧身份标识；邮箱登录时即邮箱本身。
    provider_id: Mapped[str] = mapped_column(String(256), nullable=False)


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _hash_password_before_save(mapper, connection, target: User) -> None:
    """仅在口令字段发生变更时哈希，未变更的口令不重复计算。"""
    history = inspect(target).attrs.password.history
    if not history.added:
        return
    if target.password:
        target.password = hash_password(target.password)
