"""Pytest fixtures and configuration."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from urovital.core.config import get_settings
from urovital.core.security import create_access_token
from urovital.db.session import Base, get_db
from urovital.main import app
from urovital.models.enums import UserRole, UserStatus
from urovital.models.user import User
from urovital.repositories.user_repository import UserRepository
from urovital.services.notification_service import clear_recipient_caches

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# Test database URL (in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_ID = "00000000-0000-4000-8000-000000000001"
ADMIN_EMAIL = "admin@urovital.example"


def make_token(user_id: str, expire_minutes: int = 30) -> str:
    """Create a bearer token exactly as the service would."""
    return create_access_token(
        user_id,
        settings=get_settings(),
        expires_delta=timedelta(minutes=expire_minutes),
    )


def bearer(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def headers_for() -> Callable[[str], dict[str, str]]:
    """Build bearer headers for any user id."""
    return bearer


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authentication headers for the seeded admin user."""
    return bearer(ADMIN_ID)


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(test_engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with overridden dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async_session_factory = async_sessionmaker(
            test_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        async with async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function", autouse=True)
async def setup_admin_user(db_session: AsyncSession) -> User:
    """Ensure the admin user behind ``auth_headers`` exists."""
    user = await db_session.get(User, ADMIN_ID)
    if not user:
        user = User(
            id=ADMIN_ID,
            email=ADMIN_EMAIL,
            full_name="Clinic Admin",
            role=UserRole.ADMIN.value,
            status=UserStatus.ACTIVE.value,
        )
        db_session.add(user)
        await db_session.commit()
    return user


@pytest.fixture(autouse=True)
def reset_recipient_caches() -> Generator[None, None, None]:
    """Broadcast recipient caches are process-wide; start every test cold."""
    clear_recipient_caches()
    yield
    clear_recipient_caches()


UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """Factory creating users through the repository."""
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.PATIENT,
        status: UserStatus = UserStatus.ACTIVE,
        linked_resource_id: str | None = None,
        email: str | None = None,
    ) -> User:
        counter["n"] += 1
        return await UserRepository(db_session).create(
            email=email or f"{role.value}{counter['n']}@urovital.example",
            full_name=f"Test {role.value.title()} {counter['n']}",
            role=role,
            status=status,
            linked_resource_id=linked_resource_id,
        )

    return _make


@pytest_asyncio.fixture
async def patient_user(make_user: UserFactory) -> User:
    """Active patient linked to patient record ``p1``."""
    return await make_user(UserRole.PATIENT, linked_resource_id="p1")


@pytest_asyncio.fixture
async def doctor_user(make_user: UserFactory) -> User:
    return await make_user(UserRole.DOCTOR)


@pytest.fixture
def patient_headers(patient_user: User) -> dict[str, str]:
    return bearer(patient_user.id)


@pytest.fixture
def doctor_headers(doctor_user: User) -> dict[str, str]:
    return bearer(doctor_user.id)
