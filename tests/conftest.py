"""
Test Configuration and Fixtures

Shared fixtures for the admin API tests.
Provides an isolated SQLite database per test, seeded profiles and organizations,
and an HTTP client with auth dependencies overridden.
"""

import os

# Route tests share one in-memory limiter; keep it out of the way.
os.environ.setdefault("RATE_LIMIT", "10000/minute")
# Appwrite itself is mocked in the auth tests; the client still needs a valid endpoint.
os.environ.setdefault("APPWRITE_ENDPOINT", "http://appwrite.test/v1")
os.environ.setdefault("APPWRITE_PROJECT_ID", "test-project")

from typing import AsyncGenerator, Callable, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core.database.base import Base
from app.core.database.engine import get_db, get_session_factory
from app.features.audit.models import SuperAdminAuditLog  # noqa: F401
from app.features.organizations.models import Organization
from app.features.permissions.models import SystemRole
from app.features.settings.models import SystemSetting  # noqa: F401
from app.features.users.dependencies import get_current_user, get_optional_user
from app.features.users.models import User, ProfileRole


# ==================== Database Fixtures ====================


@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path):
    """
    Async SQLite engine backed by a file, so that several sessions (metrics
    runs its counts on separate ones) see the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ==================== Model Fixtures ====================


async def make_user(
    db: AsyncSession,
    email: str,
    is_super_admin: bool = False,
    super_admin_permissions: Optional[list] = None,
    organization: Optional[Organization] = None,
    is_active: bool = True,
) -> User:
    user = User(
        appwrite_id=f"aw-{email}",
        email=email,
        full_name=email.split("@")[0].title(),
        is_super_admin=is_super_admin,
        super_admin_permissions=super_admin_permissions or [],
        organization_id=organization.id if organization else None,
        role=ProfileRole.AGENT,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_organization(db: AsyncSession, name: str, slug: str) -> Organization:
    organization = Organization(name=name, slug=slug, billing_email=f"billing@{slug}.example")
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    return organization


@pytest_asyncio.fixture(scope="function")
async def super_admin(db_session) -> User:
    """Profile with the super admin flag set."""
    return await make_user(db_session, "root@platform.example", is_super_admin=True)


@pytest_asyncio.fixture(scope="function")
async def regular_user(db_session) -> User:
    """Profile without any platform privileges."""
    return await make_user(db_session, "agent@tenant.example")


@pytest_asyncio.fixture(scope="function")
async def organization(db_session) -> Organization:
    return await make_organization(db_session, "Acme Support", "acme")


@pytest_asyncio.fixture(scope="function")
async def support_role(db_session) -> SystemRole:
    role = SystemRole(
        name="support_admin",
        description="Customer support administration",
        permissions={
            "organizations": ["read", "suspend"],
            "users": ["read"],
            "audit": ["read"],
        },
    )
    db_session.add(role)
    await db_session.commit()
    await db_session.refresh(role)
    return role


# ==================== Application Fixtures ====================


@pytest.fixture(scope="function")
def app(db_session, session_factory):
    """FastAPI app wired to the test database."""
    from app.main import app as fastapi_app

    async def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def login(app) -> Callable[[Optional[User]], None]:
    """
    Make subsequent requests run as `user`; None logs out.
    """
    def _login(user: Optional[User]) -> None:
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides.pop(get_optional_user, None)
            return
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user

    return _login


@pytest_asyncio.fixture(scope="function")
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
