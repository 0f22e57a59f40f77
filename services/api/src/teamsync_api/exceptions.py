"""业务异常定义与应用异常处理注册。

服务层只抛出下列业务异常；路由层不做额外捕获，由此处统一转换为标准错误结构。
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from teamsync_api.utils.response import DEFAULT_ERROR_MESSAGE, error_payload

logger = logging.getLogger("teamsync_api")


class AppError(HTTPException):
    """业务异常基类，携带机器可识别错误码。"""

    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "HTTP_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(status_code=self.status_code_default, detail={"code": self.code, "message": message})
        self.message = message

    def __str__(self) -> str:
        return self.message


class BadRequestError(AppError):
    """请求参数不合法或与现有数据重复。"""

    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"


class UnauthorizedError(AppError):
    """凭据不匹配或未登录。"""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    """已登录但缺少所需权限。"""

    status_code_default = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotFoundError(AppError):
    """目标资源不存在或不属于期望的上级资源。"""

    status_code_default = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


def _default_http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "BAD_REQUEST"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "UNAUTHORIZED"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "FORBIDDEN"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "NOT_FOUND"
    if status_code == status.HTTP_409_CONFLICT:
        return "CONFLICT"
    if status_code == status.HTTP_422_UNPROCESSABLE_CONTENT:
        return "VALIDATION_ERROR"
    return "HTTP_ERROR"


def _default_http_message(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "请求参数不合法。"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "未登录或登录状态已失效。"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "无权限执行该操作。"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "请求资源不存在。"
    return "请求处理失败。"


def _parse_http_detail(detail: object, status_code: int) -> tuple[str, str, dict[str, object]]:
    code = _default_http_error_code(status_code)
    message = _default_http_message(status_code)
    details: dict[str, object] = {"status_code": status_code, "reason": code.lower()}

    if isinstance(detail, dict):
        code = str(detail.get("code") or code)
        message = str(detail.get("message") or message)
        raw_details = detail.get("details")
        if isinstance(raw_details, dict):
            details.update(raw_details)
        return code, message, details

    if isinstance(detail, str) and detail.strip():
        return code, detail, details

    return code, message, details


async def http_exception_handler(request: Request, exc: HTTPException):
    """将协议异常与业务异常统一包装为标准错误结构。"""
    code, message, details = _parse_http_detail(exc.detail, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(request, code=code, message=message, details=details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """统一处理请求参数校验错误。"""
    normalized_errors = [
        {
            "field": ".".join(str(item) for item in err.get("loc", []) if item != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_payload(
            request,
            code="VALIDATION_ERROR",
            message="请求参数校验失败。",
            details={
                "status_code": status.HTTP_422_UNPROCESSABLE_CONTENT,
                "reason": "validation_error",
                "errors": normalized_errors,
            },
        ),
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """唯一约束冲突（例如并发首次登录同一邮箱），调用方重试即可。"""
    logger.warning("integrity conflict path=%s error=%s", request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_payload(
            request,
            code="RETRYABLE_CONFLICT",
            message="请求与并发写入冲突。",
            details={
                "status_code": status.HTTP_409_CONFLICT,
                "reason": "unique_constraint_violation",
                "suggestion": "请直接重试该请求。",
            },
        ),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    """处理未捕获异常，避免内部细节泄露。"""
    logger.exception("unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(
            request,
            code="INTERNAL_ERROR",
            message=DEFAULT_ERROR_MESSAGE,
            details={
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "reason": "unexpected_exception",
            },
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """集中注册异常处理器。"""
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(IntegrityError)(integrity_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)
