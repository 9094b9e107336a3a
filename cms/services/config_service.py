"""Config service: read-modify-write operations on the stored document."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cms.exceptions import VersionConflictError
from cms.services import document_service

if TYPE_CHECKING:
    from collections.abc import Callable

    from cms.schemas.config import (
        ConfigDocument,
        ItemChanges,
        ItemCreate,
        Page,
        SidebarItem,
    )
    from cms.store.base import ConfigStore

    _Mutation = tuple[ConfigDocument, SidebarItem | None, Page | None]

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    """Outcome of a successful mutation."""

    message: str
    config: ConfigDocument
    sidebar_item: SidebarItem | None = None
    page: Page | None = None


def _pretty(entry: SidebarItem | Page) -> str:
    return json.dumps(entry.model_dump(mode="json"), indent=2)


def _describe_lists(sidebar_item: SidebarItem | None, page: Page | None) -> str:
    if sidebar_item is not None and page is not None:
        return "sidebar and pages"
    return "sidebar" if sidebar_item is not None else "pages"


class ConfigService:
    """Applies item mutations to the stored config document.

    Each mutation loads the document, applies a pure change, and writes the
    whole document back conditioned on the version it read. A version
    conflict restarts the cycle, up to ``max_retries`` times.
    """

    def __init__(self, store: ConfigStore, max_retries: int = 3) -> None:
        self.store = store
        self.max_retries = max_retries

    async def get_config(self) -> ConfigDocument:
        """Return the stored document, or the empty default."""
        current = await self.store.load()
        return current.config

    async def _apply(self, mutate: Callable[[ConfigDocument], _Mutation]) -> _Mutation:
        attempt = 0
        while True:
            current = await self.store.load()
            result = mutate(current.config)
            try:
                await self.store.save(result[0], current.version)
            except VersionConflictError:
                if attempt >= self.max_retries:
                    logger.warning("Giving up after %d conflicting writes", attempt + 1)
                    raise
                attempt += 1
                logger.info("Config changed during write, retrying (attempt %d)", attempt)
                continue
            return result

    async def add_item(self, item: ItemCreate) -> MutationResult:
        """Add an item to both the sidebar and the pages."""
        config, sidebar_item, page = await self._apply(
            lambda doc: document_service.add_item(doc, item)
        )
        logger.info("Added item %s", item.id)
        message = (
            f"Successfully added item with ID {item.id} to both sidebar and pages "
            "and updated database:\n"
            f"Sidebar Item:\n{_pretty(sidebar_item)}\n"
            f"Page:\n{_pretty(page)}"
        )
        return MutationResult(message=message, config=config, sidebar_item=sidebar_item, page=page)

    async def delete_item(self, item_id: str) -> MutationResult:
        """Remove an item from whichever lists hold it."""
        config, sidebar_item, page = await self._apply(
            lambda doc: document_service.delete_item(doc, item_id)
        )
        where = _describe_lists(sidebar_item, page)
        logger.info("Deleted item %s from %s", item_id, where)
        return MutationResult(
            message=f"Successfully deleted item with ID {item_id} from {where}",
            config=config,
            sidebar_item=sidebar_item,
            page=page,
        )

    async def update_item(self, old_id: str, changes: ItemChanges) -> MutationResult:
        """Update an item's fields and optionally rename it."""
        config, sidebar_item, page = await self._apply(
            lambda doc: document_service.update_item(doc, old_id, changes)
        )
        new_id = changes.id if changes.id is not None else old_id
        where = _describe_lists(sidebar_item, page)
        if new_id != old_id:
            logger.info("Renamed item %s to %s in %s", old_id, new_id, where)
            message = f"Successfully updated item with ID {old_id} (now {new_id}) in {where}"
        else:
            logger.info("Updated item %s in %s", old_id, where)
            message = f"Successfully updated item with ID {old_id} in {where}"
        return MutationResult(message=message, config=config, sidebar_item=sidebar_item, page=page)
