"""Pytest configuration and fixtures for gatekeeper.

Environment is set before any gatekeeper import so Settings validate. Each
test that needs storage gets its own temporary SQLite database
(sqlite+aiosqlite); the app fixture builds app.state the way the lifespan
does, without starting the background workers (the ASGI test transport does
not run the lifespan), so tests drain the audit publisher and run the
outbox dispatcher by hand.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SIGNING_KEY"] = "test-signing-key-0123456789abcdef0123456789abcdef"
os.environ["JWT_ISSUER"] = "https://gatekeeper.test"
os.environ["JWT_AUDIENCE"] = "gatekeeper-tests"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OUTBOX_ENABLED"] = "false"

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from gatekeeper.application.dtos.principal import PrincipalResult
from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.core.config import get_settings
from gatekeeper.core.lifespan import init_app_state
from gatekeeper.infrastructure.persistence.database import (
    configure_engine,
    create_all,
    dispose_engine,
    get_session_factory,
)
from gatekeeper.infrastructure.persistence.repositories import TenantRepository, UserRepository
from gatekeeper.infrastructure.security.password import get_password_hash
from gatekeeper.main import create_app
from gatekeeper.shared.utils.datetime import utc_now

get_settings.cache_clear()

TEST_PASSWORD = "CorrectHorse9!"
ADMIN_SECRET = os.environ["ADMIN_SECRET"]

# bcrypt is slow on purpose; hash the shared test password once per session.
_password_hash_cache: dict[str, str] = {}


def _hash(password: str) -> str:
    if password not in _password_hash_cache:
        _password_hash_cache[password] = get_password_hash(password)
    return _password_hash_cache[password]


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Tests that monkeypatch env must not leak cached Settings into the next test."""
    yield
    get_settings.cache_clear()


@pytest.fixture
async def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """Fresh SQLite database for one test; engine disposed afterwards."""
    configure_engine(f"sqlite+aiosqlite:///{tmp_path / 'gatekeeper.db'}", poolclass=NullPool)
    await create_all()
    yield get_session_factory()
    await dispose_engine()


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Session for repository tests. Rolled back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def app(session_factory) -> FastAPI:
    """Application with app.state wired (token issuer, audit publisher, dispatcher)."""
    application = create_app()
    init_app_state(application, get_settings())
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_tenant(session_factory) -> Callable[..., Awaitable[TenantResult]]:
    """Factory: insert a tenant row (committed)."""

    async def _create(
        tenant_id: str = "acme",
        *,
        name: str = "Acme",
        is_active: bool = True,
        valid_upto: datetime | None = None,
    ) -> TenantResult:
        async with session_factory() as session:
            async with session.begin():
                return await TenantRepository(session).create_tenant(
                    tenant_id,
                    name,
                    valid_upto or utc_now() + timedelta(days=30),
                    is_active=is_active,
                )

    return _create


@pytest.fixture
def create_principal(session_factory) -> Callable[..., Awaitable[PrincipalResult]]:
    """Factory: insert a principal with TEST_PASSWORD (confirmed and active by default)."""

    async def _create(
        tenant_id: str = "acme",
        email: str = "alice@example.com",
        *,
        password: str = TEST_PASSWORD,
        display_name: str = "Alice",
        is_active: bool = True,
        email_confirmed: bool = True,
        roles: tuple[str, ...] = (),
    ) -> PrincipalResult:
        async with session_factory() as session:
            async with session.begin():
                return await UserRepository(session).create_principal(
                    tenant_id,
                    email,
                    email.strip().lower(),
                    display_name,
                    _hash(password),
                    is_active=is_active,
                    email_confirmed=email_confirmed,
                    roles=roles,
                )

    return _create


@pytest.fixture
async def tenant(create_tenant) -> TenantResult:
    return await create_tenant()


@pytest.fixture
async def principal(tenant, create_principal) -> PrincipalResult:
    return await create_principal(tenant.id)


@pytest.fixture
async def admin_principal(tenant, create_principal) -> PrincipalResult:
    return await create_principal(
        tenant.id, "root@example.com", display_name="Root", roles=("admin",)
    )


@pytest.fixture
def tenant_headers(tenant) -> dict[str, str]:
    return {"X-Tenant-ID": tenant.id}


@pytest.fixture
async def login(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: POST /auth/token and return the JSON body (asserts 200)."""

    async def _login(
        email: str = "alice@example.com",
        password: str = TEST_PASSWORD,
        tenant_id: str = "acme",
    ) -> dict:
        response = await client.post(
            "/api/v1/auth/token",
            json={"email": email, "password": password},
            headers={"X-Tenant-ID": tenant_id},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login
