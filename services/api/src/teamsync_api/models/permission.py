"""角色权限模型。"""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from teamsync_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Role(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """角色及其权限点集合。

    说明：
    1. 角色在系统初始化时由种子流程写入，不随用户创建。
    2. permissions 在写入时从静态映射复制，之后修改静态映射不会自动回写，需要重新执行种子流程。
    """

    __tablename__ = "roles"

    # 角色名称（OWNER/ADMIN/MEMBER），全局唯一。
    name: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    # 权限点编码列表。
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
