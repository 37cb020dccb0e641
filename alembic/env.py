"""Alembic environment for the resource metadata store.

Migrations run over an async engine built from application settings.
SQLite databases use batch mode so column alterations work; a configured
PostgreSQL schema is created on demand and holds the version table.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from content_api.core.config import get_settings
from content_api.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
settings = get_settings()


def _configure_options() -> dict[str, object]:
    options: dict[str, object] = {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": settings.database_url.startswith("sqlite"),
    }
    if settings.database_schema is not None:
        options["version_table_schema"] = settings.database_schema
    return options


def run_migrations_offline() -> None:
    """Emit migration SQL without a database connection."""
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    if settings.database_schema is not None:
        connection.execute(text(f'SET search_path TO "{settings.database_schema}", public'))
    context.configure(connection=connection, **_configure_options())
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply migrations through the async engine."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = settings.database_url
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    async with engine.connect() as connection:
        if settings.database_schema is not None:
            await connection.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{settings.database_schema}"'))
            await connection.commit()
        await connection.run_sync(_run_with_connection)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
