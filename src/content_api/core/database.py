"""Async engine and session factory for the resource metadata store.

PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for local runs and
tests. The SQL metadata store opens one short-lived session per call from
the factory configured here.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(database_url: str, schema: str | None = None) -> dict[str, Any]:
    """Return ``create_async_engine`` keyword arguments for a database URL.

    An in-memory SQLite database lives inside a single connection, so it is
    pinned with a StaticPool; otherwise every session would see an empty
    database. PostgreSQL gets a bounded pool and, when ``schema`` is set, a
    ``search_path`` for isolated environments.
    """
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url:
            return {"poolclass": StaticPool}
        return {}

    options: dict[str, Any] = {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True}
    if schema is not None:
        options["connect_args"] = {"server_settings": {"search_path": f"{schema},public"}}
    return options


def init_engine(database_url: str, *, schema: str | None = None, echo: bool = False) -> AsyncEngine:
    """Create the module-level engine and session factory.

    Args:
        database_url: Async SQLAlchemy connection string.
        schema: Optional PostgreSQL schema.
        echo: Log emitted SQL.

    Returns:
        The created async engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(database_url, echo=echo, **engine_options(database_url, schema))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory created by ``init_engine``.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    if _session_factory is None:
        msg = "Session factory not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


async def dispose_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
