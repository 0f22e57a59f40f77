"""FastAPI 应用入口点。"""

from fastapi import FastAPI

from teamsync_api.api.router import api_router
from teamsync_api.core.config import get_settings
from teamsync_api.core.logging import setup_logging
from teamsync_api.exceptions import register_exception_handlers
from teamsync_api.middlewares import register_middlewares

settings = get_settings()


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        description=(
            "多租户项目管理接口。\n\n"
            "所有业务接口统一返回：`{request_id, data, meta}`。\n"
            "通过访问令牌进行认证，工作空间内操作按成员角色权限点授权。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "auth", "description": "注册、登录与当前用户。"},
            {"name": "workspaces", "description": "工作空间生命周期、邀请与成员管理。"},
            {"name": "projects", "description": "工作空间内项目管理。"},
            {"name": "tasks", "description": "项目内任务管理与筛选。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
