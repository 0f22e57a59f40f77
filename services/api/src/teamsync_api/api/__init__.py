"""路由模块导出集合。"""

from . import auth, health, projects, tasks, workspaces

__all__ = [
    "auth",
    "health",
    "projects",
    "tasks",
    "workspaces",
]
