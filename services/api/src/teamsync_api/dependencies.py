"""请求上下文依赖。

职责:
1. 解析并校验访问令牌。
2. 将认证主体映射为本地 User。
3. 统一分页参数的默认值与上限。
"""

from dataclasses import dataclass

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from teamsync_api.core.config import get_settings
from teamsync_api.core.security import UNAUTHORIZED, AuthenticatedPrincipal, parse_authorization_header
from teamsync_api.db.session import get_db
from teamsync_api.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class PageParams:
    """分页参数，page_number 从 1 开始。"""

    page_size: int
    page_number: int


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedPrincipal:
    """提取并解析当前请求认证主体。"""
    authorization = None
    if credentials is not None and credentials.credentials:
        authorization = f"{credentials.scheme} {credentials.credentials}"
    return parse_authorization_header(authorization)


def get_current_user(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> User:
    """按令牌中的 sub 加载本地用户，用户不存在或已停用视为未登录。"""
    user = db.get(User, principal.user_id)
    if not user or not user.is_active:
        raise UNAUTHORIZED
    return user


def get_page_params(
    page_size: int | None = Query(default=None, ge=1, description="每页条数。"),
    page_number: int = Query(default=1, ge=1, description="页码，从 1 开始。"),
) -> PageParams:
    """读取分页参数，未传 page_size 时使用配置默认值，超出上限时截断。"""
    settings = get_settings()
    size = page_size or settings.default_page_size
    return PageParams(page_size=min(size, settings.max_page_size), page_number=page_number)
