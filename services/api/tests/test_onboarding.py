import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamsync_api.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from teamsync_api.models.enums import ProviderKind, RoleName
from teamsync_api.models.permission import Role
from teamsync_api.models.user import Account, User
from teamsync_api.models.workspace import Member, Workspace
from teamsync_api.services import (
    INVALID_CREDENTIALS_MESSAGE,
    Github,
    Google,
    has_permission,
    login_or_create_account,
    register_user,
    verify_user,
)
from teamsync_api.services import onboarding
from teamsync_api.services.local_auth import mark_logged_in


def _count(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_register_creates_user_account_workspace_and_owner_membership(db_session: Session):
    user_id, workspace_id = register_user(
        db_session,
        email="Alice@Example.com",
        name="Alice",
        password="StrongPassw0rd!",
    )

    user = db_session.get(User, user_id)
    workspace = db_session.get(Workspace, workspace_id)
    account = db_session.execute(select(Account).where(Account.user_id == user_id)).scalar_one()
    member = db_session.execute(select(Member).where(Member.user_id == user_id)).scalar_one()
    role = db_session.get(Role, member.role_id)

    assert user.email == "alice@example.com"
    assert user.current_workspace_id == workspace_id
    assert account.provider == ProviderKind.EMAIL
    assert account.provider_id == "alice@example.com"
    assert workspace.name == "My Workspace"
    assert workspace.description == "Workspace created for Alice"
    assert workspace.owner_id == user_id
    assert member.workspace_id == workspace_id
    assert role.name == RoleName.OWNER
    assert len(workspace.invite_code) == 8


def test_register_then_verify_returns_sanitized_user(db_session: Session):
    user_id, _ = register_user(db_session, email="bob@example.com", name="Bob", password="pw-1234")

    profile = verify_user(db_session, email="bob@example.com", password="pw-1234")

    assert profile["id"] == user_id
    assert profile["email"] == "bob@example.com"
    assert "password" not in profile


def test_duplicate_register_fails_and_leaves_single_user(db_session: Session):
    register_user(db_session, email="dup@example.com", name="Dup", password="pw-1234")

    with pytest.raises(BadRequestError) as exc:
        register_user(db_session, email="DUP@example.com", name="Dup 2", password="other-pw")

    assert exc.value.message == "Email already exists"
    assert _count(db_session, User) == 1
    assert _count(db_session, Workspace) == 1
    assert _count(db_session, Member) == 1


def test_password_is_hashed_and_not_rehashed_on_unrelated_update(db_session: Session):
    user_id, _ = register_user(db_session, email="hash@example.com", name="Hash", password="pw-1234")
    user = db_session.get(User, user_id)
    stored = user.password

    assert stored != "pw-1234"
    assert stored.startswith("pbkdf2_sha256$")

    user.name = "Renamed"
    db_session.commit()
    db_session.refresh(user)

    assert user.password == stored
    assert user.compare_password("pw-1234") is True


def test_verify_distinguishes_missing_account_from_wrong_password(db_session: Session):
    register_user(db_session, email="carol@example.com", name="Carol", password="right-pw")

    with pytest.raises(NotFoundError) as missing:
        verify_user(db_session, email="nobody@example.com", password="right-pw")
    with pytest.raises(UnauthorizedError) as mismatch:
        verify_user(db_session, email="carol@example.com", password="wrong-pw")

    assert missing.value.message == INVALID_CREDENTIALS_MESSAGE
    assert mismatch.value.message == INVALID_CREDENTIALS_MESSAGE
    assert missing.value.status_code == 404
    assert mismatch.value.status_code == 401


def test_verify_reports_account_without_user(db_session: Session):
    user_id, _ = register_user(db_session, email="ghost@example.com", name="Ghost", password="pw-1234")
    db_session.delete(db_session.get(User, user_id))
    db_session.commit()

    with pytest.raises(NotFoundError) as exc:
        verify_user(db_session, email="ghost@example.com", password="pw-1234")
    assert exc.value.message == "User not found for the given account"


def test_oauth_first_login_creates_full_bootstrap(db_session: Session):
    user = login_or_create_account(
        db_session,
        provider=Google(provider_id="google-123"),
        display_name="Dana",
        email="dana@example.com",
        picture="https://img.example.com/dana.png",
    )

    account = db_session.execute(select(Account).where(Account.user_id == user.id)).scalar_one()
    assert account.provider == ProviderKind.GOOGLE
    assert account.provider_id == "google-123"
    assert user.password is None
    assert user.profile_picture == "https://img.example.com/dana.png"
    assert user.current_workspace_id is not None

    member = db_session.execute(select(Member).where(Member.user_id == user.id)).scalar_one()
    assert has_permission(db_session.get(Role, member.role_id), "DELETE_WORKSPACE") is True


def test_oauth_login_for_existing_email_makes_no_writes(db_session: Session):
    first = login_or_create_account(
        db_session,
        provider=Google(provider_id="google-1"),
        display_name="Eve",
        email="eve@example.com",
    )
    counts = {model: _count(db_session, model) for model in (User, Account, Workspace, Member)}

    second = login_or_create_account(
        db_session,
        provider=Github(provider_id="github-9"),
        display_name="Someone Else",
        email="EVE@example.com",
    )

    assert second.id == first.id
    assert second.name == "Eve"
    assert {model: _count(db_session, model) for model in counts} == counts


def test_oauth_user_cannot_verify_with_password(db_session: Session):
    login_or_create_account(
        db_session,
        provider=Github(provider_id="gh-7"),
        display_name="Frank",
        email="frank@example.com",
    )
    with pytest.raises(NotFoundError):
        verify_user(db_session, email="frank@example.com", password="anything")


def test_missing_owner_role_rolls_back_every_write(bare_db: Session):
    with pytest.raises(NotFoundError) as exc:
        register_user(bare_db, email="grace@example.com", name="Grace", password="pw-1234")

    assert exc.value.message == "Owner role not found"
    for model in (User, Account, Workspace, Member):
        assert _count(bare_db, model) == 0

    with pytest.raises(NotFoundError):
        login_or_create_account(
            bare_db,
            provider=Google(provider_id="g-9"),
            display_name="Grace",
            email="grace@example.com",
        )
    assert _count(bare_db, User) == 0


def test_mark_logged_in_sets_last_login(db_session: Session):
    user_id, _ = register_user(db_session, email="heidi@example.com", name="Heidi", password="pw-1234")
    user = db_session.get(User, user_id)
    assert user.last_login is None

    mark_logged_in(db_session, user=user)
    db_session.refresh(user)

    assert user.last_login is not None


def test_changing_password_rehashes_new_value(db_session: Session):
    user_id, _ = register_user(db_session, email="ivan@example.com", name="Ivan", password="old-pw")
    user = db_session.get(User, user_id)

    user.password = "new-pw"
    db_session.commit()
    db_session.refresh(user)

    assert user.password.startswith("pbkdf2_sha256$")
    assert user.compare_password("new-pw") is True
    assert user.compare_password("old-pw") is False


def test_password_shaped_like_a_hash_is_still_hashed(db_session: Session):
    raw = "pbkdf2_sha256$1000$AAAA$AAAA"
    user_id, _ = register_user(db_session, email="shape@example.com", name="Shape", password=raw)

    assert db_session.get(User, user_id).password != raw
    profile = verify_user(db_session, email="shape@example.com", password=raw)
    assert profile["id"] == user_id


def test_concurrent_first_login_loser_rolls_back_and_retry_returns_winner(
    db_session: Session,
    session_factory,
    monkeypatch: pytest.MonkeyPatch,
):
    winner_db = session_factory()
    loser_db = session_factory()
    original_lookup = onboarding.find_user_by_email
    winner_ids = []

    def lookup_racing_with_winner(db: Session, email: str):
        # 失败方查询邮箱后、写入前，另一会话完成首次登录并提交。
        if db is loser_db and not winner_ids:
            winner = login_or_create_account(
                winner_db,
                provider=Google(provider_id="google-race"),
                display_name="Winner",
                email="race@example.com",
            )
            winner_ids.append(winner.id)
            return None
        return original_lookup(db, email)

    monkeypatch.setattr(onboarding, "find_user_by_email", lookup_racing_with_winner)
    try:
        with pytest.raises(IntegrityError):
            login_or_create_account(
                loser_db,
                provider=Github(provider_id="github-race"),
                display_name="Loser",
                email="race@example.com",
            )

        for model in (User, Account, Workspace, Member):
            assert _count(loser_db, model) == 1

        retried = login_or_create_account(
            loser_db,
            provider=Github(provider_id="github-race"),
            display_name="Loser",
            email="race@example.com",
        )
        assert retried.id == winner_ids[0]
        assert retried.email == "race@example.com"
        assert retried.name == "Winner"
        assert _count(loser_db, User) == 1
    finally:
        winner_db.close()
        loser_db.close()
