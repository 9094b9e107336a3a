"""Config store backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cms.store.base import ConfigStore, VersionedConfig

if TYPE_CHECKING:
    from cms.config import Settings

__all__ = ["ConfigStore", "VersionedConfig", "open_store"]


async def open_store(settings: Settings) -> ConfigStore:
    """Create the store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "database":
        from cms.database import create_engine
        from cms.store.database_store import DatabaseConfigStore

        engine, session_factory = create_engine(settings)
        db_store = DatabaseConfigStore(
            engine,
            session_factory,
            row_id=settings.config_row_id,
            optimistic_concurrency=settings.optimistic_concurrency,
        )
        try:
            await db_store.create_tables()
        except Exception:
            await engine.dispose()
            raise
        return db_store

    from cms.store.supabase_store import SupabaseConfigStore

    return SupabaseConfigStore(
        settings.supabase_url,
        settings.supabase_anon_key,
        table=settings.config_table,
        row_id=settings.config_row_id,
        optimistic_concurrency=settings.optimistic_concurrency,
        timeout=settings.request_timeout,
    )
