"""Stdio tool server exposing addItem, deleteItem and updateItem.

Usage:
    python -m cms.mcp_server

Client config (.mcp.json):
    {
      "mcpServers": {
        "cms": {
          "command": "cms-mcp",
          "env": {"SUPABASE_URL": "...", "SUPABASE_ANON_KEY": "..."}
        }
      }
    }

Every tool answers with text, failures included.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from cms.config import Settings
from cms.exceptions import ItemError, StoreReadError, StoreWriteError
from cms.log_config import configure_logging
from cms.schemas.config import DeleteItemRequest, ItemChanges, ItemCreate, UpdateItemRequest
from cms.services.config_service import ConfigService, MutationResult
from cms.store import open_store

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "Cms Application",
    instructions="A server for managing page data: pages and their sidebar entries.",
)

# Global state (initialized on first tool call)
_settings: Settings | None = None
_service: ConfigService | None = None
_init_lock = asyncio.Lock()


class NewItemArgs(ItemCreate):
    """``addItem`` arguments; the id is checked inside the tool."""

    id: str = Field(description="Unique identifier for the item")


class ItemChangesArgs(ItemChanges):
    """``updateItem`` changes; the new id is checked inside the tool."""

    id: str | None = Field(default=None, description="New identifier (optional)")


def _validation_text(exc: ValidationError) -> str:
    """Render a validation failure the way the tools report other errors."""
    messages = []
    for err in exc.errors():
        cause = err.get("ctx", {}).get("error")
        messages.append(str(cause) if cause is not None else err["msg"])
    return "; ".join(messages)


async def configure(
    settings: Settings | None = None, service: ConfigService | None = None
) -> None:
    """Set the settings and, optionally, a ready service to use for tool calls.

    A service held from before is replaced and its store closed.
    """
    global _settings, _service
    previous = _service
    _settings = settings
    _service = service
    if previous is not None and previous is not service:
        await previous.store.close()


async def _get_service() -> ConfigService:
    """Lazily open the config store on first use."""
    global _settings, _service

    if _service is not None:
        return _service

    async with _init_lock:
        if _service is not None:
            return _service
        if _settings is None:
            _settings = Settings()
        store = await open_store(_settings)
        _service = ConfigService(store, max_retries=_settings.max_write_retries)
        logger.info("Config store opened (storage=%s)", _settings.storage_backend)
        return _service


async def _run_tool(verb: str, call: Callable[[ConfigService], Awaitable[MutationResult]]) -> str:
    """Run a mutation and render its outcome as text."""
    try:
        service = await _get_service()
        result = await call(service)
    except ItemError as exc:
        logger.info("Rejected %s: %s", verb, exc)
        return f"Failed to {verb} item: {exc}"
    except StoreReadError as exc:
        return f"Failed to load config from database: {exc}"
    except StoreWriteError as exc:
        return f"Failed to update config in database: {exc}"
    except Exception as exc:
        logger.exception("Unexpected error while trying to %s item", verb)
        return f"Failed to {verb} item: {exc}"
    return result.message


@mcp.tool(name="addItem", description="Add a new item to both sidebar and pages")
async def add_item(item: NewItemArgs) -> str:
    try:
        new_item = ItemCreate.model_validate(item.model_dump(exclude_unset=True))
    except ValidationError as exc:
        return f"Failed to add item: {_validation_text(exc)}"
    return await _run_tool("add", lambda service: service.add_item(new_item))


@mcp.tool(name="deleteItem", description="Delete an item from both sidebar and pages")
async def delete_item(
    id: Annotated[str, Field(description="Identifier of the item to delete")],  # noqa: A002
) -> str:
    try:
        request = DeleteItemRequest(id=id)
    except ValidationError as exc:
        return f"Failed to delete item: {_validation_text(exc)}"
    return await _run_tool("delete", lambda service: service.delete_item(request.id))


@mcp.tool(
    name="updateItem",
    description="Update an item in sidebar and pages, optionally changing its ID",
)
async def update_item(
    oldId: Annotated[str, Field(description="Current identifier of the item")],  # noqa: N803
    newItem: Annotated[  # noqa: N803
        ItemChangesArgs, Field(description="Fields to change; omitted fields are kept")
    ],
) -> str:
    try:
        request = UpdateItemRequest.model_validate(
            {"oldId": oldId, "newItem": newItem.model_dump(exclude_unset=True)}
        )
    except ValidationError as exc:
        return f"Failed to update item: {_validation_text(exc)}"
    return await _run_tool(
        "update", lambda service: service.update_item(request.old_id, request.new_item)
    )


def main() -> None:
    """Entry point: validate settings and serve tools over stdio."""
    global _settings

    try:
        settings = Settings()
    except ValidationError as exc:
        configure_logging(False, stream=sys.stderr)
        logger.critical("Invalid configuration: %s", exc)
        sys.exit(1)

    # Logs must not go to stdout, which carries the protocol.
    configure_logging(settings.debug, stream=sys.stderr)
    try:
        settings.validate_storage()
    except ValueError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    _settings = settings
    logger.info("CMS tool server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
