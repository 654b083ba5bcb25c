"""
StoreRate Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite, one
       shared connection through StaticPool, foreign keys switched on), so
       cascades and unique constraints behave as they do in PostgreSQL.

Fixture Hierarchy:
    db_engine         fresh in-memory database with all tables created
    ├── session_factory
    │   ├── session   one open AsyncSession
    │   │   └── services / make_user / make_store
    │   └── test_client  HTTPX AsyncClient whose requests use this database
"""

import os

# Override settings for testing BEFORE any storerate imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storerate.container import Services, build_services
from storerate.database import Base, enable_sqlite_foreign_keys, get_db_session, session_scope
from storerate.models import Store, User, UserRole

DEFAULT_PASSWORD = "password123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


# ══════════════════════════════════════════════════════════════════════════
# Services & factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def services(session) -> Services:
    return build_services(session)


@pytest.fixture
def make_user(services):
    """
    Register a user through IdentityService.

    Usage:
        owner = await make_user(UserRole.STORE_OWNER)
        admin = await make_user(UserRole.SYSTEM_ADMINISTRATOR, email="root@example.com")
    """
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.NORMAL_USER,
        email: Optional[str] = None,
        name: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        return await services.identity.register(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password=password,
            address=f"{n} Main Street",
            role=role,
        )

    return _make


@pytest.fixture
def make_store(services):
    counter = {"n": 0}

    async def _make(owner: User, name: Optional[str] = None) -> Store:
        counter["n"] += 1
        return await services.stores.create(
            name=name or f"Store {counter['n']}",
            email=f"store{counter['n']}@example.com",
            address="1 Market Square",
            owner=owner,
        )

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app instance.

    The app's session dependency is pointed at the per-test database, and a
    new app means a fresh rate limiter for every test.
    """
    from storerate.main import create_app

    app = create_app()

    async def _override_session():
        async with session_scope(session_factory) as s:
            yield s

    app.dependency_overrides[get_db_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
