"""
SnipNet Backend - Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets its own SQLite database file (sqlite+aiosqlite) under
       pytest's tmp_path, created from the model metadata. Services are
       exercised against that real database; route tests reach it through an
       override of get_db_session.

Fixture Hierarchy (all function-scoped):
    ├── engine:           async engine on a fresh SQLite file, tables created
    ├── db:               AsyncSession on that engine
    ├── make_user / make_snippet / make_page: row factories
    ├── alice, bob, carol: three users
    ├── mock_db_session:  AsyncMock session for failure-path tests
    └── test_client:      HTTPX AsyncClient bound to a fresh app instance
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; point them at throwaway values BEFORE
# anything from snipnet is imported.
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="snipnet_test_"), "health.db")
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from snipnet.database import create_all, get_db_session  # noqa: E402
from snipnet.models import CodeSnippet, Page, User  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'snipnet.db'}")
    await create_all(bind=test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for service-level tests.

    Services only flush, so tests see their own writes without committing.
    Route tests must `await db.commit()` after seeding so request sessions
    see the rows.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """AsyncMock standing in for AsyncSession when a test needs a failing database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Row Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(db):
    async def _make_user(username: str, first_name: str = "", last_name: str = "") -> User:
        user = User(
            id=uuid.uuid4(),
            username=username,
            first_name=first_name or username.capitalize(),
            last_name=last_name or "Tester",
            email=f"{username.lower()}@example.com",
        )
        db.add(user)
        await db.flush()
        return user
    return _make_user


@pytest.fixture
def make_snippet(db):
    async def _make_snippet(owner: User, title: str = "Quicksort") -> CodeSnippet:
        snippet = CodeSnippet(
            title=title,
            code_content="def quicksort(xs): ...",
            programming_language="python",
            created_by_id=owner.id,
        )
        db.add(snippet)
        await db.flush()
        return snippet
    return _make_snippet


@pytest.fixture
def make_page(db):
    async def _make_page(owner: User, title: str = "Algorithms") -> Page:
        page = Page(title=title, description="Notes on algorithms", created_by_id=owner.id)
        db.add(page)
        await db.flush()
        return page
    return _make_page


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest_asyncio.fixture
async def carol(make_user) -> User:
    return await make_user("carol")


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    A new app per test keeps rate limiter state from leaking between tests.
    get_db_session is overridden to open sessions on the test engine with the
    same commit/rollback behavior as production.
    """
    from snipnet.main import create_app

    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def as_user():
    """Builds the headers the authenticating gateway forwards for a user."""
    def _as_user(user: User) -> dict:
        return {"X-User-Id": str(user.id)}
    return _as_user
