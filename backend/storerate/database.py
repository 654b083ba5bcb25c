"""
StoreRate Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, unit-of-work scope and the
       FastAPI session dependency.
How:   One AsyncSession per request. The session's transaction is the unit of
       work for every operation: write handlers commit it (Services.commit)
       before building their response, and it rolls back when anything
       raises, so a Rating write and the Store average it triggers are
       applied together or not at all.
Who:   Route handlers (via Depends), tests (via session_scope) and Alembic.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite URLs (used by the test-suite) get the driver's default pool.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storerate.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Turn on foreign key enforcement for every new SQLite connection.

    SQLite ignores ON DELETE CASCADE / SET NULL unless the pragma is set per
    connection; PostgreSQL always enforces them.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create an async engine with pool settings appropriate to the backend."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, **kwargs)
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
        **kwargs,
    )


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: response schemas read attributes after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Unit of Work ──────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Open a session, commit on success, roll back on any error, always close.

    Example:
        async with session_scope() as session:
            services = build_services(session)
            await services.ratings.create(...)
    """
    session_factory = factory or async_session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a transactional session per request.

    Any exception raised by the handler (including application errors that
    the global handlers turn into 4xx responses) rolls the transaction back.
    The commit on exit runs after the response has been sent, so handlers
    that write must not rely on it: they call Services.commit() first.
    """
    async with session_scope() as session:
        yield session


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Close all pooled connections (application shutdown)."""
    await engine.dispose()
