"""Config store backed by a SQL database through SQLAlchemy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cms.exceptions import StoreReadError, StoreWriteError, VersionConflictError
from cms.models.base import Base
from cms.models.config import ConfigRow
from cms.store.base import VersionedConfig, dump_document, parse_document

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from cms.schemas.config import ConfigDocument

logger = logging.getLogger(__name__)


class DatabaseConfigStore:
    """Keeps the config document in the ``configs`` table.

    Writes are conditional on the row's ``version`` column, so two writers
    that read the same version cannot both succeed. With
    ``optimistic_concurrency`` off the version is still bumped but never
    checked.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        row_id: int = 1,
        optimistic_concurrency: bool = True,
    ) -> None:
        self.engine = engine
        self.session_factory = session_factory
        self.row_id = row_id
        self.optimistic_concurrency = optimistic_concurrency

    async def create_tables(self) -> None:
        """Create the config table if it does not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def load(self) -> VersionedConfig:
        try:
            async with self.session_factory() as session:
                row = await session.get(ConfigRow, self.row_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to read config row %d: %s", self.row_id, exc)
            raise StoreReadError(str(exc)) from exc

        if row is None:
            return VersionedConfig()
        return VersionedConfig(version=row.version, config=parse_document(row.config))

    async def save(self, config: ConfigDocument, expected_version: int | None) -> int:
        payload = dump_document(config)
        try:
            async with self.session_factory() as session:
                if expected_version is None:
                    new_version = await self._insert(session, payload)
                else:
                    new_version = await self._update(session, payload, expected_version)
                if new_version is None:
                    await session.rollback()
                    raise VersionConflictError(expected_version)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to write config row %d: %s", self.row_id, exc)
            raise StoreWriteError(str(exc)) from exc

        logger.debug("Stored config row %d at version %d", self.row_id, new_version)
        return new_version

    async def _insert(self, session: AsyncSession, payload: dict[str, Any]) -> int | None:
        try:
            await session.execute(
                insert(ConfigRow).values(id=self.row_id, config=payload, version=1)
            )
        except IntegrityError:
            # Another writer created the row first.
            await session.rollback()
            if self.optimistic_concurrency:
                return None
            return await self._update(session, payload, None)
        return 1

    async def _update(
        self, session: AsyncSession, payload: dict[str, Any], expected_version: int | None
    ) -> int | None:
        stmt = (
            update(ConfigRow)
            .where(ConfigRow.id == self.row_id)
            .values(config=payload, version=ConfigRow.version + 1)
            .returning(ConfigRow.version)
        )
        if self.optimistic_concurrency and expected_version is not None:
            stmt = stmt.where(ConfigRow.version == expected_version)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def ping(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Config database ping failed", exc_info=True)
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()
