import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from teamsync_api.models.enums import Permission, RoleName
from teamsync_api.models.project import Project, Task
from teamsync_api.models.user import User
from teamsync_api.models.workspace import Member, Workspace
from teamsync_api.services import get_member_role_in_workspace, register_user, require_workspace_permissions
from teamsync_api.services import workspace as workspace_service
from teamsync_api.services.permissions import find_role_by_name
from teamsync_api.services.project import create_project
from teamsync_api.services.task import create_task


@pytest.fixture
def owner_and_workspace(db_session: Session):
    return register_user(db_session, email="owner@example.com", name="Owner", password="pw-1234")


@pytest.fixture
def outsider_id(db_session: Session):
    user_id, _ = register_user(db_session, email="outsider@example.com", name="Outsider", password="pw-1234")
    return user_id


def test_create_workspace_makes_creator_owner_and_current(db_session: Session, owner_and_workspace):
    owner_id, default_workspace_id = owner_and_workspace

    workspace = workspace_service.create_workspace(db_session, user_id=owner_id, name="Design", description="UI")

    owner = db_session.get(User, owner_id)
    role = get_member_role_in_workspace(db_session, user_id=owner_id, workspace_id=workspace.id)
    assert owner.current_workspace_id == workspace.id
    assert role.name == RoleName.OWNER
    ids = {item.id for item in workspace_service.get_user_workspaces(db_session, user_id=owner_id)}
    assert ids == {default_workspace_id, workspace.id}


def test_join_by_invite_adds_member_role(db_session: Session, owner_and_workspace, outsider_id):
    _, workspace_id = owner_and_workspace
    workspace = db_session.get(Workspace, workspace_id)

    joined, role_name = workspace_service.join_workspace_by_invite(
        db_session,
        user_id=outsider_id,
        invite_code=f" {workspace.invite_code} ",
    )

    assert joined.id == workspace_id
    assert role_name == RoleName.MEMBER
    members = workspace_service.get_workspace_members(db_session, workspace_id=workspace_id)
    assert {item["role"] for item in members} == {"OWNER", "MEMBER"}

    with pytest.raises(BadRequestError):
        workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=workspace.invite_code)


def test_join_with_unknown_invite_code(db_session: Session, outsider_id):
    with pytest.raises(NotFoundError) as exc:
        workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code="nope0000")
    assert exc.value.message == "Invalid invite code or workspace not found"


def test_reset_invite_code_invalidates_old_code(db_session: Session, owner_and_workspace, outsider_id):
    _, workspace_id = owner_and_workspace
    old_code = db_session.get(Workspace, workspace_id).invite_code

    new_code = workspace_service.reset_invite_code(db_session, workspace_id=workspace_id)

    assert new_code != old_code
    with pytest.raises(NotFoundError):
        workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=old_code)


def test_member_role_resolution_and_guard(db_session: Session, owner_and_workspace, outsider_id):
    owner_id, workspace_id = owner_and_workspace

    with pytest.raises(UnauthorizedError) as exc:
        get_member_role_in_workspace(db_session, user_id=outsider_id, workspace_id=workspace_id)
    assert exc.value.message == "You are not a member of this workspace"

    workspace = db_session.get(Workspace, workspace_id)
    workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=workspace.invite_code)

    require_workspace_permissions(
        db_session,
        user_id=outsider_id,
        workspace_id=workspace_id,
        permissions=[Permission.CREATE_TASK],
    )
    with pytest.raises(ForbiddenError):
        require_workspace_permissions(
            db_session,
            user_id=outsider_id,
            workspace_id=workspace_id,
            permissions=[Permission.DELETE_PROJECT],
        )
    role = require_workspace_permissions(
        db_session,
        user_id=owner_id,
        workspace_id=workspace_id,
        permissions=[Permission.DELETE_WORKSPACE],
    )
    assert role.name == RoleName.OWNER


def test_change_member_role(db_session: Session, owner_and_workspace, outsider_id):
    _, workspace_id = owner_and_workspace
    workspace = db_session.get(Workspace, workspace_id)
    workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=workspace.invite_code)
    admin_role = find_role_by_name(db_session, RoleName.ADMIN)

    member = workspace_service.change_member_role(
        db_session,
        workspace_id=workspace_id,
        member_user_id=outsider_id,
        role_id=admin_role.id,
    )

    assert member.role_id == admin_role.id
    role = get_member_role_in_workspace(db_session, user_id=outsider_id, workspace_id=workspace_id)
    assert role.name == RoleName.ADMIN


def test_switch_requires_membership(db_session: Session, owner_and_workspace, outsider_id):
    _, workspace_id = owner_and_workspace
    with pytest.raises(UnauthorizedError):
        workspace_service.switch_current_workspace(db_session, user_id=outsider_id, workspace_id=workspace_id)

    workspace = db_session.get(Workspace, workspace_id)
    workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=workspace.invite_code)
    workspace_service.switch_current_workspace(db_session, user_id=outsider_id, workspace_id=workspace_id)

    assert db_session.get(User, outsider_id).current_workspace_id == workspace_id


def test_update_workspace_changes_only_given_fields(db_session: Session, owner_and_workspace):
    _, workspace_id = owner_and_workspace

    workspace = workspace_service.update_workspace(db_session, workspace_id=workspace_id, name="Renamed")

    assert workspace.name == "Renamed"
    assert workspace.description == "Workspace created for Owner"


def test_delete_workspace_cascades_and_falls_back(db_session: Session, owner_and_workspace):
    owner_id, default_workspace_id = owner_and_workspace
    extra = workspace_service.create_workspace(db_session, user_id=owner_id, name="Extra")
    project = create_project(db_session, user_id=owner_id, workspace_id=extra.id, name="P")
    create_task(db_session, workspace_id=extra.id, project_id=project.id, user_id=owner_id, title="T")

    current = workspace_service.delete_workspace(db_session, workspace_id=extra.id, user_id=owner_id)

    assert current == default_workspace_id
    assert db_session.get(User, owner_id).current_workspace_id == default_workspace_id
    assert db_session.get(Workspace, extra.id) is None
    assert db_session.execute(select(Project).where(Project.workspace_id == extra.id)).first() is None
    assert db_session.execute(select(Task).where(Task.workspace_id == extra.id)).first() is None
    assert db_session.execute(select(Member).where(Member.workspace_id == extra.id)).first() is None


def test_delete_workspace_moves_other_members_off_deleted_workspace(
    db_session: Session, owner_and_workspace, outsider_id
):
    owner_id, _ = owner_and_workspace
    outsider_default_id = db_session.get(User, outsider_id).current_workspace_id
    shared = workspace_service.create_workspace(db_session, user_id=owner_id, name="Shared")
    workspace_service.join_workspace_by_invite(db_session, user_id=outsider_id, invite_code=shared.invite_code)
    workspace_service.switch_current_workspace(db_session, user_id=outsider_id, workspace_id=shared.id)

    workspace_service.delete_workspace(db_session, workspace_id=shared.id, user_id=owner_id)

    db_session.expire_all()
    assert db_session.get(User, outsider_id).current_workspace_id == outsider_default_id


def test_only_owner_can_delete_workspace(db_session: Session, owner_and_workspace, outsider_id):
    _, workspace_id = owner_and_workspace

    with pytest.raises(UnauthorizedError) as exc:
        workspace_service.delete_workspace(db_session, workspace_id=workspace_id, user_id=outsider_id)

    assert exc.value.message == "You are not authorized to delete this workspace"
    assert db_session.get(Workspace, workspace_id) is not None
