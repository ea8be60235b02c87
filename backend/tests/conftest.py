"""Shared test fixtures for docshelf backend tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docshelf.api.dependencies import create_access_token, get_db, get_page_cache, get_pdf_renderer
from docshelf.core.permissions import Caller
from docshelf.db.models import Base, Category, Role, Tag, User
from docshelf.main import app
from docshelf.middleware.rate_limiter import limiter
from docshelf.services.pdf_renderer import PdfRenderer

# Use an in-memory SQLite database for tests.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FAKE_PDF = b"%PDF-1.4\n%fake\n"


class RecordingPageCache:
    """In-memory stand-in for PageCache that records every revalidation."""

    def __init__(self):
        self.store: dict[str, object] = {}
        self.invalidated: list[str] = []
        self.invalidated_trees: list[str] = []

    @staticmethod
    def _key(path: str, variant: str | None = None) -> str:
        return f"{path}?{variant}" if variant else path

    async def get(self, path: str, variant: str | None = None):
        return self.store.get(self._key(path, variant))

    async def set(self, path: str, value, variant: str | None = None) -> None:
        self.store[self._key(path, variant)] = value

    async def invalidate(self, *paths: str) -> None:
        for path in paths:
            self.invalidated.append(path)
            for key in list(self.store):
                if key == path or key.startswith(f"{path}?"):
                    del self.store[key]

    async def invalidate_tree(self, path: str) -> None:
        self.invalidated_trees.append(path)
        await self.invalidate(path)
        for key in list(self.store):
            if key.startswith(f"{path}/"):
                del self.store[key]


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test, schema created from the models."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session bound to the per-test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def pages() -> RecordingPageCache:
    return RecordingPageCache()


async def _make_user(db: AsyncSession, email: str, name: str, role: Role) -> User:
    user = User(email=email, name=name, password_hash="fakehash", role=role)
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await _make_user(db, "admin@example.com", "Admin User", Role.ADMIN)


@pytest_asyncio.fixture
async def member_user(db: AsyncSession) -> User:
    return await _make_user(db, "member@example.com", "Member User", Role.MEMBER)


@pytest_asyncio.fixture
async def other_user(db: AsyncSession) -> User:
    return await _make_user(db, "other@example.com", "Other User", Role.MEMBER)


def as_caller(user: User) -> Caller:
    return Caller(id=user.id, role=user.role, name=user.name, email=user.email)


@pytest.fixture
def admin(admin_user: User) -> Caller:
    return as_caller(admin_user)


@pytest.fixture
def member(member_user: User) -> Caller:
    return as_caller(member_user)


@pytest.fixture
def other(other_user: User) -> Caller:
    return as_caller(other_user)


@pytest_asyncio.fixture
async def category(db: AsyncSession) -> Category:
    cat = Category(name="Guides", slug="guides", description="Step-by-step guides")
    db.add(cat)
    await db.commit()
    return cat


@pytest_asyncio.fixture
async def tags(db: AsyncSession) -> list[Tag]:
    items = [Tag(name="python"), Tag(name="howto")]
    db.add_all(items)
    await db.commit()
    return items


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


@pytest.fixture
def auth_headers():
    """Build Authorization headers carrying a valid token for a user."""
    return _bearer


@pytest.fixture
def pdf_renderer() -> PdfRenderer:
    renderer = PdfRenderer()
    renderer.render = AsyncMock(return_value=FAKE_PDF)  # type: ignore[method-assign]
    return renderer


@pytest_asyncio.fixture
async def client(session_factory, pages, pdf_renderer) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with the test database, cache and renderer."""

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_page_cache] = lambda: pages
    app.dependency_overrides[get_pdf_renderer] = lambda: pdf_renderer
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    limiter.enabled = True
