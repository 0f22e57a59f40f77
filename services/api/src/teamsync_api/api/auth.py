"""认证接口。"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from teamsync_api.core.security import issue_access_token
from teamsync_api.db.session import get_db
from teamsync_api.dependencies import get_current_user
from teamsync_api.models.enums import ProviderKind
from teamsync_api.models.user import User
from teamsync_api.schemas.auth import (
    AuthLoginData,
    AuthLoginRequest,
    AuthOAuthLoginRequest,
    AuthRegisterData,
    AuthRegisterRequest,
)
from teamsync_api.schemas.common import ErrorResponse, SuccessResponse
from teamsync_api.schemas.responses import AuthMeData
from teamsync_api.services import login_or_create_account, oauth_provider, register_user, verify_user
from teamsync_api.services.local_auth import mark_logged_in
from teamsync_api.utils.response import success

router = APIRouter(prefix="/auth", tags=["auth"])


def _login_payload(user: User, *, provider: str) -> dict:
    """签发令牌并组装登录结果。"""
    token, exp_ts, expires_at = issue_access_token(user_id=user.id, email=user.email, provider=provider)
    expires_in = max(0, exp_ts - int(datetime.now(timezone.utc).timestamp()))
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_at": expires_at,
        "expires_in": expires_in,
        "user": user.omit_password(),
    }


@router.post(
    "/register",
    summary="邮箱注册",
    description="创建用户、邮箱账号与默认工作空间，注册者成为该工作空间 OWNER。",
    status_code=status.HTTP_201_CREATED,
    response_model=SuccessResponse[AuthRegisterData],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register(payload: AuthRegisterRequest, request: Request, db: Session = Depends(get_db)):
    user_id, workspace_id = register_user(db, email=payload.email, name=payload.name, password=payload.password)
    return success(request, {"user_id": user_id, "workspace_id": workspace_id})


@router.post(
    "/login",
    summary="邮箱登录",
    description="校验邮箱口令并签发访问令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthLoginData],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def login(payload: AuthLoginRequest, request: Request, db: Session = Depends(get_db)):
    """登录成功后回写最近登录时间。"""
    profile = verify_user(db, email=payload.email, password=payload.password)
    user = db.get(User, profile["id"])
    mark_logged_in(db, user=user)
    db.refresh(user)
    return success(request, _login_payload(user, provider=ProviderKind.EMAIL))


@router.post(
    "/oauth/login",
    summary="第三方登录",
    description="按邮箱查找用户，不存在时创建用户、第三方账号与默认工作空间，然后签发访问令牌。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthLoginData],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def oauth_login(payload: AuthOAuthLoginRequest, request: Request, db: Session = Depends(get_db)):
    provider = oauth_provider(payload.provider, payload.provider_id)
    user = login_or_create_account(
        db,
        provider=provider,
        display_name=payload.display_name,
        email=payload.email,
        picture=payload.picture,
    )
    mark_logged_in(db, user=user)
    db.refresh(user)
    return success(request, _login_payload(user, provider=provider.kind))


@router.get(
    "/me",
    summary="当前用户",
    description="返回访问令牌对应的用户资料。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[AuthMeData],
    responses={401: {"model": ErrorResponse}},
)
def me(request: Request, user: User = Depends(get_current_user)):
    return success(request, {"user": user.omit_password()})
