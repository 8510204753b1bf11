"""Alembic 环境脚本.

由 ``flask --app invoicedesk db ...`` 调用,依赖 Flask-Migrate 注入的应用上下文.
SQLite 下启用 batch 模式,以便 ALTER 操作可以通过重建表完成.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig
from typing import TYPE_CHECKING, Any

from alembic import context
from flask import current_app

if TYPE_CHECKING:
    from alembic.runtime.environment import MigrationContext
    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.schema import MetaData

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)
logger = logging.getLogger("alembic.env")

target_db = current_app.extensions["migrate"].db


def get_engine() -> Engine:
    """返回当前应用绑定的 Engine(Flask-SQLAlchemy 3)."""
    return target_db.engine


def get_engine_url() -> str:
    """返回保留密码且已转义 ``%`` 的连接串,供 Alembic 配置使用."""
    return get_engine().url.render_as_string(hide_password=False).replace("%", "%%")


def get_metadata() -> MetaData:
    """返回默认 bind 的 MetaData."""
    return target_db.metadatas[None]


def _is_sqlite() -> bool:
    return get_engine().dialect.name == "sqlite"


config.set_main_option("sqlalchemy.url", get_engine_url())


def run_migrations_offline() -> None:
    """离线模式: 只依赖连接串,输出 SQL 脚本."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=get_metadata(),
        literal_binds=True,
        render_as_batch=_is_sqlite(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """在线模式: 直接连接数据库执行变更."""

    def process_revision_directives(
        _context: MigrationContext,
        _revision: tuple[str, str] | str | None,
        directives: list[Any],
    ) -> None:
        """自动生成迁移时跳过没有变更的脚本."""
        if getattr(config.cmd_opts, "autogenerate", False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info("未检测到表结构变更")

    conf_args = dict(current_app.extensions["migrate"].configure_args)
    conf_args.setdefault("process_revision_directives", process_revision_directives)
    conf_args.setdefault("compare_type", True)
    conf_args.setdefault("render_as_batch", _is_sqlite())

    with get_engine().connect() as connection:
        context.configure(connection=connection, target_metadata=get_metadata(), **conf_args)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
