"""
Combs of Honey — Database Session Management
=============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   One process-wide engine (the connection pool) is built at import time.
       Each request borrows a session through `get_db_session`, which rolls
       back on error; services commit with `commit_or_raise()`. Route
       handlers never open or close the engine; the application lifespan
       creates the tables on startup and disposes the engine on shutdown.

Connection Pooling:
    Server databases (PostgreSQL via asyncpg) get an explicit pool:
        pool_size / max_overflow / pool_pre_ping from settings,
        pool_recycle=3600.
    SQLite keeps the dialect default pool, and every new connection runs
    `PRAGMA foreign_keys=ON` so honey.comb_id → combs.id is enforced the
    same way it is on PostgreSQL.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from combs_of_honey.config import settings
from combs_of_honey.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """
    Create an async engine for `url` with the pool options for its dialect.

    Used once for the application engine below; tests call it to build an
    engine against a temporary database.
    """
    async_engine = create_async_engine(
        url,
        # Echo SQL queries in DEBUG mode for development visibility
        echo=settings.log_level == "DEBUG",
        **_engine_options(url),
    )
    if url.startswith("sqlite"):
        event.listen(async_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return async_engine


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.database_url)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response models are built from ORM objects after
# the session has flushed; expired attributes would trigger lazy IO.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `init_models()` and
    Alembic's autogenerate.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On error: rolls back whatever the service left uncommitted
        4. Always: closes the session (returns connection to pool)

    Services commit their own writes with `commit_or_raise()` before they
    return: the code after `yield` may run after the response is sent.

    Example usage in a route:
        @router.get("/combs")
        async def list_combs(db: AsyncSession = Depends(get_db_session)):
            return await comb_service.list_combs(db)

    Raises:
        Any exception is propagated to the global error handler after
        rollback.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def commit_or_raise(db: AsyncSession, **context: Any) -> None:
    """
    Commit the request transaction.

    Raises:
        DatabaseError: the commit failed; `context` is attached for the log
    """
    try:
        await db.commit()
    except Exception as e:
        logger.error("Commit failed: %s | Context: %s", str(e), context)
        raise DatabaseError(
            message="Could not save changes. Please try again.",
            context={**context, "error_type": type(e).__name__},
        )


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models(target: Optional[AsyncEngine] = None) -> None:
    """
    Create the `combs` and `honey` tables if they do not exist yet.

    When:  Called during application startup (lifespan handler).
    How:   Imports the model modules so they register with Base.metadata,
           then runs `create_all` (which skips existing tables).
    """
    import combs_of_honey.models  # noqa: F401

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    Gracefully close all connections in the pool.

    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
