"""邮箱密码认证服务。"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamsync_api.exceptions import NotFoundError, UnauthorizedError
from teamsync_api.models.enums import ProviderKind
from teamsync_api.models.user import Account, User
from teamsync_api.services.identity import normalize_email

logger = logging.getLogger("teamsync_api.auth")

# 账号不存在与口令错误使用同一条提示。
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def verify_user(
    db: Session,
    *,
    email: str,
    password: str,
    provider: str = ProviderKind.EMAIL,
) -> dict[str, Any]:
    """校验邮箱口令，返回不含口令字段的用户视图。"""
    account = (
        db.execute(
            select(Account)
            .where(Account.provider == provider)
            .where(Account.provider_id == normalize_email(email))
        )
        .scalar_one_or_none()
    )
    if not account:
        logger.info("login rejected reason=no_account provider=%s", provider)
        raise NotFoundError(INVALID_CREDENTIALS_MESSAGE)

    user = db.get(User, account.user_id)
    if not user:
        logger.error("account without user account_id=%s user_id=%s", account.id, account.user_id)
        raise NotFoundError("User not found for the given account")

    if not user.compare_password(password):
        logger.info("login rejected reason=password_mismatch user_id=%s", user.id)
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

    return user.omit_password()


def mark_logged_in(db: Session, *, user: User) -> None:
    """记录最近登录时间。"""
    user.last_login = datetime.now(timezone.utc)
    db.commit()
