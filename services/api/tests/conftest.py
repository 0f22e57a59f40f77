from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from teamsync_api.core.config import get_settings
from teamsync_api.db.base import Base
from teamsync_api.services.permissions import seed_roles


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("TS_AUTH_JWT_SECRET", "unit-test-secret-key-at-least-32-bytes")
    monkeypatch.setenv("TS_AUTH_JWT_ALGORITHMS", "HS256")
    # 测试使用较低的迭代次数。
    monkeypatch.setenv("TS_AUTH_PASSWORD_HASH_ITERATIONS", "1000")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(bind=sqlite_engine, autoflush=False, autocommit=False, class_=Session)


@pytest.fixture
def bare_db(session_factory) -> Generator[Session, None, None]:
    """未写入角色种子的会话。"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_session(bare_db: Session) -> Session:
    seed_roles(bare_db)
    bare_db.commit()
    return bare_db
