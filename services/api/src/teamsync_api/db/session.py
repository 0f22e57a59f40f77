"""数据库会话与事务管理。"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from teamsync_api.core.config import get_settings

logger = logging.getLogger("teamsync_api.db")

settings = get_settings()

# 全局数据库引擎，开启连接预检查以减少僵尸连接影响。
engine = create_engine(settings.database_url, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """为每个请求提供独立数据库会话，任何退出路径都只关闭一次。"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction_scope(db: Session) -> Iterator[Session]:
    """将一组写操作作为一个整体提交。

    正常退出时提交；块内或提交阶段出现任何异常都先回滚，再将原异常抛给调用方。
    不做任何重试。
    """
    try:
        yield db
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.info("transaction rolled back error=%s", type(exc).__name__)
        raise
