"""Pytest configuration and fixtures."""
import itertools
import os
import random
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test_countryquiz.db"

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
# Never reach the real REST Countries API from tests
os.environ["CATALOG_REFRESH_ON_STARTUP"] = "false"
os.environ["CATALOG_RETRY_DELAY_SECONDS"] = "0"
os.environ["COUNTRIES_LOCAL_FILE"] = str(BASE_DIR / "tests" / "missing_countries.json")

from countryquiz.config import get_settings
from countryquiz.data.fallback_countries import FALLBACK_COUNTRIES
from countryquiz.models.player import Player
from countryquiz.models.round import Round
from countryquiz.services.country_catalog import CountryCatalog
from countryquiz.services.player_service import PlayerService

settings = get_settings()

GERMANY = next(item for item in FALLBACK_COUNTRIES if item["cca3"] == "DEU")


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows, database might still be in use
            pass


@pytest.fixture
async def test_engine():
    """Engine on the migrated test database; tables are emptied before each test."""
    engine = create_async_engine(settings.database_url, echo=False)

    async with engine.begin() as conn:
        await conn.execute(delete(Round))
        await conn.execute(delete(Player))

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
def catalog():
    """Catalog holding the bundled fallback countries, with a seeded random source."""
    return CountryCatalog(settings=settings, rng=random.Random(1234))


@pytest.fixture
def germany_catalog():
    """Catalog that only ever asks about Germany."""
    return CountryCatalog(settings=settings, fallback=[GERMANY], rng=random.Random(1234))


@pytest.fixture
async def test_app(session_factory, catalog):
    """Create test app with database and catalog overrides."""
    from countryquiz.main import app
    from countryquiz.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.catalog = catalog
    yield app
    app.dependency_overrides.clear()
    del app.state.catalog


@pytest.fixture
async def player_factory(db_session):
    """Factory for registering test players with sequential external keys."""
    player_service = PlayerService(db_session)
    keys = itertools.count(100_000_001)

    async def _create_player(
        external_key: int | None = None,
        first_name: str | None = None,
        username: str | None = None,
    ):
        if external_key is None:
            external_key = next(keys)
        return await player_service.get_or_create(
            external_key,
            username=username,
            first_name=first_name,
        )

    return _create_player
