"""
Test fixtures and configuration.

Every test that touches storage gets its own SQLite file under tmp_path,
so tests never share state.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from monnayeur.config.settings import Settings
from monnayeur.infrastructure.persistence.database import Database
from monnayeur.infrastructure.persistence.migrator import prepare_schema
from monnayeur.main import create_app


class SimulatedClock:
    """Controllable replacement for utc_now."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> SimulatedClock:
    """Provide a simulated clock starting at a fixed instant."""
    return SimulatedClock()


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    """Path of the per-test SQLite file."""
    return tmp_path / "test.db"


@pytest.fixture
def database_url(database_path: Path) -> str:
    return f"sqlite+aiosqlite:///{database_path}"


@pytest_asyncio.fixture(scope="function")
async def raw_database(database_url: str) -> AsyncGenerator[Database, None]:
    """
    Connected database with no schema.

    Used by migrator tests that lay down an older shape first.
    """
    db = Database(database_url=database_url, echo=False)
    await db.connect()

    yield db

    await db.disconnect()


@pytest_asyncio.fixture(scope="function")
async def test_db(raw_database: Database) -> AsyncGenerator[Database, None]:
    """
    Create test database at the current schema.

    Each test gets a clean database.
    """
    await prepare_schema(raw_database)
    yield raw_database


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db: Database) -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for tests."""
    async with test_db.session() as session:
        yield session


@pytest.fixture
def settings(database_url: str) -> Settings:
    """Settings pointing at the per-test database, sweep disabled."""
    return Settings(
        ENV="test",
        DATABASE_URL=database_url,
        SESSION_SWEEP_ENABLED=False,
        WEBAPP_URL="https://mint.example.test",
        MAX_MINTS_PER_USER=3,
        MINT_COOLDOWN_SECONDS=60,
        SESSION_TTL_SECONDS=3600,
    )


@pytest_asyncio.fixture(scope="function")
async def client(
    settings: Settings, clock: SimulatedClock
) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide HTTP client for API testing.

    Runs the application lifespan so the schema is migrated and the
    container is wired to the test database and clock.
    """
    app = create_app(settings=settings, now_fn=clock)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def test_wallet_address() -> str:
    """Provide test wallet address."""
    return "0xA11CE00000000000000000000000000000000001"


@pytest.fixture
def another_wallet_address() -> str:
    """Provide another test wallet address."""
    return "0xB0B0000000000000000000000000000000000002"
