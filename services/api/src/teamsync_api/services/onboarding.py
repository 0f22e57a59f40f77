"""新用户初始化服务。

首次第三方登录与邮箱注册共用同一条创建链路：
User -> Account -> 默认 Workspace -> 查询 OWNER 角色 -> Member -> 回写 current_workspace_id。
整条链路在一个事务内执行，任一步失败时全部回滚，原始错误原样抛给调用方。

并发提示：同一新邮箱的两次并发首次登录可能都查不到用户，
后提交的一方会因 users.email 唯一约束在提交时失败（IntegrityError）。
这里不做重试，由调用方重新发起 login_or_create_account 即可取到胜出方创建的用户。
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.core.config import get_settings
from teamsync_api.db.session import transaction_scope
from teamsync_api.exceptions import AppError, BadRequestError, NotFoundError
from teamsync_api.models.enums import RoleName
from teamsync_api.models.user import Account, User
from teamsync_api.models.workspace import Member, Workspace
from teamsync_api.services.identity import Email, Provider, normalize_email, provider_identity, provider_password
from teamsync_api.services.permissions import find_role_by_name

logger = logging.getLogger("teamsync_api.onboarding")


@dataclass(frozen=True)
class Bootstrapped:
    """创建链路成功结果。"""

    user: User
    account: Account
    workspace: Workspace
    member: Member


@dataclass(frozen=True)
class BootstrapFailure:
    """创建链路失败结果，error 即需要抛给调用方的业务异常。"""

    error: AppError


BootstrapOutcome = Bootstrapped | BootstrapFailure


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()


def bootstrap_user(
    db: Session,
    *,
    email: str,
    name: str | None,
    provider: Provider,
    picture: str | None = None,
) -> BootstrapOutcome:
    """在调用方持有的事务内依次写入新用户的全部初始数据。

    只写入并 flush，不提交；返回 BootstrapFailure 时调用方必须回滚。
    """
    normalized_email = normalize_email(email)
    user = User(
        email=normalized_email,
        name=name.strip() if name else None,
        profile_picture=picture or None,
        password=provider_password(provider),
    )
    db.add(user)
    db.flush()

    provider_kind, provider_id = provider_identity(provider, email=normalized_email)
    account = Account(user_id=user.id, provider=provider_kind, provider_id=provider_id)
    db.add(account)
    db.flush()

    workspace = Workspace(
        name=get_settings().default_workspace_name,
        description=f"Workspace created for {user.name}",
        owner_id=user.id,
    )
    db.add(workspace)
    db.flush()

    owner_role = find_role_by_name(db, RoleName.OWNER)
    if owner_role is None:
        # 角色种子缺失属于部署配置错误。
        logger.error("owner role missing, run role seeding before onboarding users")
        return BootstrapFailure(NotFoundError("Owner role not found"))

    member = Member(user_id=user.id, workspace_id=workspace.id, role_id=owner_role.id)
    db.add(member)
    db.flush()

    user.current_workspace_id = workspace.id
    db.flush()

    return Bootstrapped(user=user, account=account, workspace=workspace, member=member)


def login_or_create_account(
    db: Session,
    *,
    provider: Provider,
    display_name: str | None,
    email: str,
    picture: str | None = None,
) -> User:
    """第三方登录：邮箱已存在时直接返回用户（不做任何写入），否则创建完整初始数据。

    返回完整 User 记录（含口令字段），对外输出前由调用方脱敏。
    """
    with transaction_scope(db):
        user = find_user_by_email(db, email)
        if user is None:
            outcome = bootstrap_user(db, email=email, name=display_name, provider=provider, picture=picture)
            if isinstance(outcome, BootstrapFailure):
                raise outcome.error
            user = outcome.user
            logger.info(
                "created user via oauth provider=%s user_id=%s workspace_id=%s",
                provider.kind,
                user.id,
                outcome.workspace.id,
            )
    return user


def register_user(db: Session, *, email: str, name: str | None, password: str) -> tuple[UUID, UUID]:
    """邮箱注册，返回 (user_id, workspace_id)。"""
    with transaction_scope(db):
        if find_user_by_email(db, email) is not None:
            raise BadRequestError("Email already exists")

        outcome = bootstrap_user(db, email=email, name=name, provider=Email(password=password))
        if isinstance(outcome, BootstrapFailure):
            raise outcome.error

        user_id = outcome.user.id
        workspace_id = outcome.workspace.id

    logger.info("registered user user_id=%s workspace_id=%s", user_id, workspace_id)
    return user_id, workspace_id
