"""数据库基础模型导出。

导入 teamsync_api.models 以确保全部表注册到 Base.metadata；
生产环境结构由迁移脚本维护，init_schema 仅用于本地开发与测试。
"""

from sqlalchemy.engine import Engine

import teamsync_api.models  # noqa: F401
from teamsync_api.models.base import Base


def init_schema(engine: Engine) -> None:
    """按模型定义建表（已存在的表跳过）。"""
    Base.metadata.create_all(engine)


__all__ = ["Base", "init_schema"]
