"""Shared fixtures: a fresh SQLite database per test and ASGI clients per auth mode."""

import os

# Must be set before cemse is imported; Settings() is built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH_MODE"] = "production"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FORMAT"] = "console"
os.environ["SENTRY_DSN"] = ""

from typing import AsyncGenerator, Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event, func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from cemse.api import deps  # noqa: E402
from cemse.config import AuthMode, Settings  # noqa: E402
from cemse.core.security import get_password_hash  # noqa: E402
from cemse.db.base import Base  # noqa: E402
from cemse.main import create_app  # noqa: E402
from cemse.models import Profile, User, UserRole  # noqa: E402
from tests.factories import DEFAULT_PASSWORD, company_payload, token_for  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


def _build_app(session_factory, mode: AuthMode, **overrides):
    app = create_app(Settings(AUTH_MODE=mode, **overrides))

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[deps.get_db] = override_get_db
    return app


@pytest.fixture
def app(session_factory):
    return _build_app(session_factory, AuthMode.PRODUCTION)


@pytest.fixture
def dev_app(session_factory):
    return _build_app(session_factory, AuthMode.DEVELOPMENT)


@pytest.fixture
def build_app(session_factory):
    """Build a production-mode app with extra settings overrides."""
    def _build(**overrides):
        return _build_app(session_factory, AuthMode.PRODUCTION, **overrides)

    return _build


@pytest.fixture
def make_client():
    """Open an AsyncClient against an app, optionally carrying an auth cookie."""
    def _make(app, token: Optional[str] = None, **transport_options) -> AsyncClient:
        cookies = {app.state.settings.AUTH_COOKIE_NAME: token} if token else None
        return AsyncClient(
            transport=ASGITransport(app=app, **transport_options),
            base_url="http://test",
            cookies=cookies,
        )

    return _make


@pytest.fixture
async def anon_client(app, make_client):
    async with make_client(app) as client:
        yield client


@pytest.fixture
def create_user(session_factory):
    async def _create(
        username: str,
        role: UserRole = UserRole.SUPERADMIN,
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
        profile: Optional[dict] = None,
    ) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                password_hash=get_password_hash(password),
                role=role.value,
                is_active=is_active,
            )
            session.add(user)
            await session.flush()
            if profile is not None:
                session.add(Profile(user_id=user.id, **profile))
            await session.commit()
            return user

    return _create


@pytest.fixture
async def superadmin(create_user):
    return await create_user("root_admin", UserRole.SUPERADMIN)


@pytest.fixture
async def admin_client(app, make_client, superadmin):
    async with make_client(app, token_for(superadmin)) as client:
        yield client


@pytest.fixture
def count_rows(session_factory):
    async def _count(model, *criteria) -> int:
        async with session_factory() as session:
            query = select(func.count()).select_from(model)
            if criteria:
                query = query.where(*criteria)
            return (await session.execute(query)).scalar_one()

    return _count


@pytest.fixture
async def registered_company(admin_client):
    """A company created through the API; returns the creation response body."""
    response = await admin_client.post("/api/company", json=company_payload())
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def company_client(app, make_client, registered_company, session_factory):
    async with session_factory() as session:
        user = await session.get(User, registered_company["id"])
    async with make_client(app, token_for(user)) as client:
        yield client
