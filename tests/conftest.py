"""Test config and shared fixtures."""
import os
import tempfile

# Settings are read at import time; keep test logs and the default URL out of the project
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="forum-logs-"))
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from typing import AsyncGenerator, Callable
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import apps.models  # noqa: F401  registers every table on SQLModel.metadata
from apps.forum.models import Category, Thread, User
from apps.forum.unit_of_work import ForumUnitOfWork
from framework.security import CurrentUser, StaticUserProvider


@pytest.fixture
def test_user() -> CurrentUser:
    """Create test user."""
    return CurrentUser(id=7, username="moderator", role="MODERATOR")


@pytest.fixture
def user_provider(test_user: CurrentUser) -> StaticUserProvider:
    return StaticUserProvider(test_user)


@pytest.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def open_uow(session_factory, user_provider) -> Callable[..., ForumUnitOfWork]:
    """Factory for fresh units of work; each gets its own session."""
    def _open(provider=None) -> ForumUnitOfWork:
        return ForumUnitOfWork(
            session=session_factory(),
            current_user=provider if provider is not None else user_provider,
        )
    return _open


@pytest.fixture
async def uow(open_uow) -> AsyncGenerator[ForumUnitOfWork, None]:
    """Unit of work acting as the test user."""
    async with open_uow() as unit:
        yield unit


@pytest.fixture
def new_user() -> Callable[..., User]:
    """Build an unsaved user; username/email derive from ``name``."""
    def _new(name: str = "alice", **overrides) -> User:
        fields = dict(
            first_name=name.capitalize(),
            last_name="Tester",
            username=name,
            email=f"{name}@example.com",
            password_hash="hashed_password",
        )
        fields.update(overrides)
        return User(**fields)
    return _new


@pytest.fixture
async def sample_thread(open_uow, new_user) -> Thread:
    """Committed user, category and thread."""
    async with open_uow() as unit:
        author = unit.users.add(new_user("author"))
        category = unit.categories.add(Category(title="General", slug="general"))
        await unit.save_changes()

        thread = unit.threads.add(Thread(
            title="Welcome",
            content="First thread",
            user_id=author.id,
            category_id=category.id,
        ))
        await unit.save_changes()
        return thread


@pytest.fixture
async def client(session_factory, user_provider) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    from main import app
    from apps.forum.api.router import get_db
    from framework.security import get_current_user_provider

    async def _get_db():
        yield session_factory()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user_provider] = lambda: user_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
