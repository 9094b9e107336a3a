"""Item and config API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from cms.api.deps import get_config_service
from cms.exceptions import DuplicateItemError, ItemNotFoundError
from cms.schemas.config import (
    AddItemRequest,
    ConfigDocument,
    DeleteItemRequest,
    MutationResponse,
    UpdateItemRequest,
)
from cms.services.config_service import ConfigService, MutationResult

router = APIRouter(prefix="/api", tags=["items"])


def _to_response(result: MutationResult) -> MutationResponse:
    return MutationResponse(
        message=result.message,
        sidebar_item=result.sidebar_item,
        page=result.page,
    )


@router.get("/config", response_model=ConfigDocument)
async def get_config(
    service: Annotated[ConfigService, Depends(get_config_service)],
) -> ConfigDocument:
    """Get the stored config document."""
    return await service.get_config()


@router.post("/addItem", response_model=MutationResponse, status_code=201)
async def add_item_endpoint(
    body: AddItemRequest,
    service: Annotated[ConfigService, Depends(get_config_service)],
) -> MutationResponse:
    """Add an item to both the sidebar and the pages."""
    try:
        result = await service.add_item(body.item)
    except DuplicateItemError as exc:
        raise HTTPException(status_code=409, detail=f"Failed to add item: {exc}") from exc
    return _to_response(result)


@router.post("/deleteItem", response_model=MutationResponse)
async def delete_item_endpoint(
    body: DeleteItemRequest,
    service: Annotated[ConfigService, Depends(get_config_service)],
) -> MutationResponse:
    """Delete an item from the sidebar and the pages."""
    try:
        result = await service.delete_item(body.id)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Failed to delete item: {exc}") from exc
    return _to_response(result)


@router.post("/updateItem", response_model=MutationResponse)
async def update_item_endpoint(
    body: UpdateItemRequest,
    service: Annotated[ConfigService, Depends(get_config_service)],
) -> MutationResponse:
    """Update an item, optionally renaming it."""
    try:
        result = await service.update_item(body.old_id, body.new_item)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Failed to update item: {exc}") from exc
    except DuplicateItemError as exc:
        raise HTTPException(status_code=409, detail=f"Failed to update item: {exc}") from exc
    return _to_response(result)
