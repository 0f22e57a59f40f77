"""角色权限注册表。

静态映射只在种子流程中使用：种子流程把映射复制到 roles 表，
运行期鉴权读取 Role 记录上的 permissions。修改静态映射后需要
以 overwrite_existing=True 重新执行种子流程才会生效。
"""

from collections.abc import Iterable, Mapping
import logging
from types import MappingProxyType

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import ForbiddenError
from teamsync_api.models.enums import Permission, RoleName
from teamsync_api.models.permission import Role

logger = logging.getLogger("teamsync_api.permissions")

RolePermissionMap = Mapping[str, frozenset[Permission]]

_OWNER_PERMISSIONS = frozenset(Permission)
_ADMIN_PERMISSIONS = frozenset(
    {
        Permission.ADD_MEMBER,
        Permission.CREATE_PROJECT,
        Permission.EDIT_PROJECT,
        Permission.DELETE_PROJECT,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
        Permission.DELETE_TASK,
        Permission.MANAGE_WORKSPACE_SETTINGS,
        Permission.VIEW_ONLY,
    }
)
_MEMBER_PERMISSIONS = frozenset(
    {
        Permission.VIEW_ONLY,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
    }
)

DEFAULT_ROLE_PERMISSIONS: RolePermissionMap = MappingProxyType(
    {
        RoleName.OWNER: _OWNER_PERMISSIONS,
        RoleName.ADMIN: _ADMIN_PERMISSIONS,
        RoleName.MEMBER: _MEMBER_PERMISSIONS,
    }
)

PERMISSION_DENIED_MESSAGE = "You do not have the necessary permissions to perform this action"


def permission_catalog() -> list[str]:
    """返回全部权限点编码。"""
    return sorted(permission.value for permission in Permission)


def _role_permission_set(
    role: Role | str,
    role_permissions: RolePermissionMap,
) -> frozenset[str]:
    if isinstance(role, Role):
        return frozenset(role.permissions or ())
    return frozenset(role_permissions.get(role, frozenset()))


def has_permission(
    role: Role | str,
    permission: str,
    *,
    role_permissions: RolePermissionMap = DEFAULT_ROLE_PERMISSIONS,
) -> bool:
    """判断角色是否具备权限点。

    传入 Role 记录时使用其已落库的权限列表；传入角色名时查静态映射，
    未知角色名视为无任何权限。纯函数，不访问数据库。
    """
    return permission in _role_permission_set(role, role_permissions)


def role_guard(
    role: Role | str,
    required_permissions: Iterable[str],
    *,
    role_permissions: RolePermissionMap = DEFAULT_ROLE_PERMISSIONS,
) -> None:
    """要求角色同时具备全部指定权限点，否则抛出 403。"""
    granted = _role_permission_set(role, role_permissions)
    if not all(permission in granted for permission in required_permissions):
        raise ForbiddenError(PERMISSION_DENIED_MESSAGE)


def find_role_by_name(db: Session, name: str) -> Role | None:
    return db.execute(select(Role).where(Role.name == name)).scalar_one_or_none()


def seed_roles(
    db: Session,
    *,
    role_permissions: RolePermissionMap = DEFAULT_ROLE_PERMISSIONS,
    overwrite_existing: bool = False,
) -> list[Role]:
    """按给定映射写入角色。

    默认只补齐缺失角色，已存在的角色保持原权限不变；
    overwrite_existing=True 时用映射覆盖已有角色的权限。
    调用方负责提交事务。
    """
    seeded: list[Role] = []
    for name, permissions in role_permissions.items():
        codes = sorted(str(permission) for permission in permissions)
        role = find_role_by_name(db, name)
        if role is None:
            role = Role(name=str(name), permissions=codes)
            db.add(role)
            logger.info("seeded role name=%s permissions=%d", name, len(codes))
        elif overwrite_existing and sorted(role.permissions or ()) != codes:
            role.permissions = codes
            logger.info("reseeded role name=%s permissions=%d", name, len(codes))
        seeded.append(role)
    db.flush()
    return seeded
