import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import ForbiddenError
from teamsync_api.models.enums import Permission, RoleName
from teamsync_api.models.permission import Role
from teamsync_api.services.permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    find_role_by_name,
    has_permission,
    permission_catalog,
    role_guard,
    seed_roles,
)


def test_owner_has_every_permission():
    for permission in Permission:
        assert has_permission(RoleName.OWNER, permission)


def test_member_cannot_delete_workspace_but_owner_can():
    assert has_permission(RoleName.OWNER, Permission.DELETE_WORKSPACE) is True
    assert has_permission(RoleName.MEMBER, Permission.DELETE_WORKSPACE) is False


def test_default_admin_and_member_permissions():
    assert DEFAULT_ROLE_PERMISSIONS[RoleName.MEMBER] == {
        Permission.VIEW_ONLY,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
    }
    admin = DEFAULT_ROLE_PERMISSIONS[RoleName.ADMIN]
    assert Permission.DELETE_PROJECT in admin
    assert Permission.MANAGE_WORKSPACE_SETTINGS in admin
    assert Permission.DELETE_WORKSPACE not in admin
    assert Permission.CHANGE_MEMBER_ROLE not in admin


def test_unknown_role_has_no_permissions():
    assert has_permission("GUEST", Permission.VIEW_ONLY) is False


def test_explicit_role_table_overrides_default():
    table = {"VIEWER": frozenset({Permission.VIEW_ONLY})}
    assert has_permission("VIEWER", Permission.VIEW_ONLY, role_permissions=table) is True
    assert has_permission(RoleName.OWNER, Permission.VIEW_ONLY, role_permissions=table) is False


def test_role_record_uses_stored_permissions():
    role = Role(name=RoleName.MEMBER, permissions=[Permission.VIEW_ONLY])
    assert has_permission(role, Permission.VIEW_ONLY) is True
    assert has_permission(role, Permission.CREATE_TASK) is False


def test_permission_catalog_lists_all_fourteen_tokens():
    catalog = permission_catalog()
    assert len(catalog) == 14
    assert catalog == sorted(catalog)


def test_role_guard_raises_forbidden_on_missing_permission():
    role_guard(RoleName.ADMIN, [Permission.CREATE_PROJECT, Permission.VIEW_ONLY])
    with pytest.raises(ForbiddenError) as exc:
        role_guard(RoleName.MEMBER, [Permission.VIEW_ONLY, Permission.DELETE_PROJECT])
    assert exc.value.status_code == 403


def test_seed_roles_creates_three_roles(bare_db: Session):
    roles = seed_roles(bare_db)
    bare_db.commit()

    names = set(bare_db.execute(select(Role.name)).scalars().all())
    assert names == {"OWNER", "ADMIN", "MEMBER"}
    assert len(roles) == 3
    owner = find_role_by_name(bare_db, RoleName.OWNER)
    assert set(owner.permissions) == set(permission_catalog())


def test_seed_roles_keeps_existing_permissions_unless_overwrite(bare_db: Session):
    seed_roles(bare_db)
    bare_db.commit()

    narrowed = {RoleName.MEMBER: frozenset({Permission.VIEW_ONLY})}
    seed_roles(bare_db, role_permissions=narrowed)
    bare_db.commit()
    member = find_role_by_name(bare_db, RoleName.MEMBER)
    assert set(member.permissions) == {"VIEW_ONLY", "CREATE_TASK", "EDIT_TASK"}

    seed_roles(bare_db, role_permissions=narrowed, overwrite_existing=True)
    bare_db.commit()
    bare_db.refresh(member)
    assert member.permissions == ["VIEW_ONLY"]
    assert len(bare_db.execute(select(Role)).scalars().all()) == 3
