"""角色种子数据初始化命令。

用法：`teamsync-seed`，在建表后写入 OWNER / ADMIN / MEMBER 三个角色。
已存在的角色保持原有权限不变；权限映射调整后需显式传入 --overwrite。
"""

import argparse
import logging

from teamsync_api.core.logging import setup_logging
from teamsync_api.db.base import init_schema
from teamsync_api.db.session import SessionLocal, engine, transaction_scope
from teamsync_api.services.permissions import DEFAULT_ROLE_PERMISSIONS, seed_roles

logger = logging.getLogger("teamsync_api.seed")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="初始化数据表与角色种子数据。")
    parser.add_argument("--overwrite", action="store_true", help="按当前权限映射覆盖已存在角色的权限。")
    parser.add_argument("--skip-schema", action="store_true", help="跳过建表，仅写入角色。")
    args = parser.parse_args(argv)

    setup_logging()
    if not args.skip_schema:
        init_schema(engine)

    db = SessionLocal()
    try:
        with transaction_scope(db):
            roles = seed_roles(db, role_permissions=DEFAULT_ROLE_PERMISSIONS, overwrite_existing=args.overwrite)
        logger.info("roles seeded count=%s names=%s", len(roles), ",".join(role.name for role in roles))
    finally:
        db.close()


if __name__ == "__main__":
    main()
