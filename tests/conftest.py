"""Shared test fixtures for the CMS config backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cms.config import Settings
from cms.database import create_engine
from cms.main import create_app
from cms.services.config_service import ConfigService
from cms.store.database_store import DatabaseConfigStore

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from fastapi import FastAPI

    from cms.schemas.config import ConfigDocument
    from cms.store.base import ConfigStore


@asynccontextmanager
async def create_test_client(
    settings: Settings,
    store: ConfigStore | None = None,
    raise_app_exceptions: bool = True,
) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with a fully initialized app.

    Manually performs the work of the application lifespan because
    ASGITransport does not trigger it. A prepared ``store`` replaces the one
    the settings would open.
    """
    from cms.store import open_store

    app: FastAPI = create_app(settings)
    owned = store is None
    if store is None:
        store = await open_store(settings)
    app.state.config_service = ConfigService(store, max_retries=settings.max_write_retries)

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions),
        base_url="http://test",
    ) as ac:
        yield ac

    if owned:
        await store.close()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a temporary SQLite database."""
    db_path = tmp_path / "test.db"
    return Settings(
        _env_file=None,
        debug=True,
        storage_backend="database",
        database_url=f"sqlite+aiosqlite:///{db_path}",
    )


@pytest.fixture
async def db_store(test_settings: Settings) -> AsyncGenerator[DatabaseConfigStore]:
    """Create a database-backed config store with its table in place."""
    engine, session_factory = create_engine(test_settings)
    store = DatabaseConfigStore(engine, session_factory, row_id=test_settings.config_row_id)
    await store.create_tables()
    yield store
    await store.close()


@pytest.fixture
def db_engine(db_store: DatabaseConfigStore) -> AsyncEngine:
    return db_store.engine


@pytest.fixture
async def db_session(db_store: DatabaseConfigStore) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    session_factory: async_sessionmaker[AsyncSession] = db_store.session_factory
    async with session_factory() as session:
        yield session


@pytest.fixture
def config_service(db_store: DatabaseConfigStore) -> ConfigService:
    return ConfigService(db_store)


async def seed(store: ConfigStore, config: ConfigDocument) -> None:
    """Store ``config`` as the current document, whatever is stored now."""
    current = await store.load()
    await store.save(config, current.version)
