"""Test fixtures — in-memory SQLite, fake metrics probe and FastAPI test client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hostpanel.database import build_engine, get_db, init_db
from hostpanel.main import create_app
from hostpanel.services import init_services, shutdown_services
from tests.helpers.fakes import FakeProbe


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def app(db_session: AsyncSession, fake_probe: FakeProbe):
    """Application with bootstrapped services and overridden DB dependency."""
    await init_services(db_session, probe=fake_probe)
    application = create_app()

    async def _override_db():
        yield db_session

    application.dependency_overrides[get_db] = _override_db
    yield application

    await shutdown_services()


@pytest_asyncio.fixture
async def client(app):
    """Async test client bound to the ``app`` fixture."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    """Log in as the bootstrapped admin and return the bearer header."""
    resp = await client.post("/api/login", json={"username": "admin", "password": "password"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}
