# tests/conftest.py
import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from inmobiliaria.db import get_session
from inmobiliaria.entrypoints.api.deps import StaticTokenAuthenticator
from inmobiliaria.entrypoints.fastapi_app import create_app
from inmobiliaria.models import Base
from inmobiliaria.service_layer.cache import TtlCache
from inmobiliaria.service_layer.unit_of_work import SqlAlchemyUnitOfWork

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def session(async_session_maker):
    async with async_session_maker() as s:
        yield s


@pytest.fixture
def uow(session):
    return SqlAlchemyUnitOfWork(session)


@pytest.fixture
def cache():
    return TtlCache()


@pytest.fixture
def app(async_session_maker, cache):
    app = create_app(
        cache=cache,
        authenticator=StaticTokenAuthenticator(tokens=frozenset({ADMIN_TOKEN})),
        create_tables=False,
    )

    async def _session_override():
        async with async_session_maker() as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
