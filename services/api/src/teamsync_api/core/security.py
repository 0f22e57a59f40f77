"""访问令牌签发与校验工具。"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import re
from typing import Any
from uuid import UUID, uuid4

import jwt
from fastapi import HTTPException, status
from jwt import InvalidTokenError

from teamsync_api.core.config import get_settings

UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="unauthorized",
)


@dataclass
class AuthenticatedPrincipal:
    """令牌解析后的认证主体。"""

    # 本地用户 ID（sub）。
    user_id: UUID
    # 登录来源（GOOGLE/GITHUB/FACEBOOK/EMAIL）。
    provider: str
    # 可选邮箱。
    email: str | None
    # 原始声明集，便于下游扩展。
    claims: dict[str, Any]


def issue_access_token(*, user_id: UUID, email: str, provider: str) -> tuple[str, int, datetime]:
    """签发访问令牌，返回（令牌, 过期时间戳, 过期时间）。"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=settings.auth_access_token_ttl_seconds)

    claims: dict[str, object] = {
        "sub": str(user_id),
        "email": email,
        "provider": provider,
        "iss": settings.auth_jwt_issuer or settings.auth_local_issuer,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": str(uuid4()),
    }
    if settings.auth_jwt_audience:
        claims["aud"] = settings.auth_jwt_audience

    token = jwt.encode(claims, settings.auth_jwt_secret, algorithm=settings.auth_algorithms[0])
    return token, int(expires_at.timestamp()), expires_at


def _decode_jwt(token: str) -> dict[str, Any]:
    """按配置解码并校验令牌。"""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            key=settings.auth_jwt_secret,
            algorithms=settings.auth_algorithms,
            issuer=settings.auth_jwt_issuer,
            audience=settings.auth_jwt_audience,
            leeway=settings.auth_jwt_leeway_seconds,
            options={"verify_signature": True, "verify_aud": bool(settings.auth_jwt_audience)},
        )
    except InvalidTokenError as exc:
        raise UNAUTHORIZED from exc


def _extract_bearer_token(authorization: str | None) -> str:
    """从 Authorization 头中提取 Bearer token，兼容重复头被逗号拼接的场景。"""
    if not authorization:
        raise UNAUTHORIZED
    tokens = re.findall(r"Bearer\s+([^,\s]+)", authorization, flags=re.IGNORECASE)
    if not tokens:
        raise UNAUTHORIZED
    return tokens[-1].strip()


def parse_authorization_header(authorization: str | None) -> AuthenticatedPrincipal:
    """解析认证头并返回认证主体。"""
    claims = _decode_jwt(_extract_bearer_token(authorization))

    try:
        user_id = UUID(str(claims.get("sub") or ""))
    except ValueError as exc:
        raise UNAUTHORIZED from exc

    email = claims.get("email")
    provider = claims.get("provider")
    return AuthenticatedPrincipal(
        user_id=user_id,
        provider=provider if isinstance(provider, str) and provider else "EMAIL",
        email=email if isinstance(email, str) else None,
        claims=claims,
    )
