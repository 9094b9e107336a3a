"""Config document and item request/response schemas."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from cms.services.id_service import fold_id, normalize_id

ItemId = Annotated[
    str,
    Field(min_length=1, max_length=200, description="Unique identifier for the item"),
    AfterValidator(normalize_id),
]


class Page(BaseModel):
    """A page entry of the config document."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    content: str = ""


class SidebarItem(BaseModel):
    """A sidebar navigation entry of the config document."""

    model_config = ConfigDict(extra="allow")

    id: str
    label: str
    active: bool = False


class ConfigDocument(BaseModel):
    """The single stored document: pages plus the parallel sidebar."""

    model_config = ConfigDict(extra="allow")

    pages: list[Page] = Field(default_factory=list)
    sidebar: list[SidebarItem] = Field(default_factory=list)

    # Stored ids may predate folding, so both sides are compared folded.

    def find_page(self, item_id: str) -> Page | None:
        key = fold_id(item_id)
        return next((p for p in self.pages if fold_id(p.id) == key), None)

    def find_sidebar_item(self, item_id: str) -> SidebarItem | None:
        key = fold_id(item_id)
        return next((s for s in self.sidebar if fold_id(s.id) == key), None)

    def has_id(self, item_id: str) -> bool:
        """Return True if either list holds an entry with this id."""
        return self.find_sidebar_item(item_id) is not None or self.find_page(item_id) is not None


class ItemCreate(BaseModel):
    """Fields for a new item; omitted fields get defaults."""

    id: ItemId
    label: str | None = Field(default=None, description="Label for sidebar item (optional)")
    title: str | None = Field(default=None, description="Title for page item (optional)")
    content: str | None = Field(default=None, description="Content for page item (optional)")
    active: bool | None = Field(
        default=None, description="Active status for sidebar item (optional)"
    )


class ItemChanges(BaseModel):
    """Fields to change on an existing item; omitted fields keep their values."""

    id: ItemId | None = Field(default=None, description="New identifier (optional)")
    label: str | None = Field(default=None, description="New sidebar label (optional)")
    title: str | None = Field(default=None, description="New page title (optional)")
    content: str | None = Field(default=None, description="New page content (optional)")
    active: bool | None = Field(default=None, description="New active status (optional)")


class AddItemRequest(BaseModel):
    """Request to add an item to both sidebar and pages."""

    item: ItemCreate


class DeleteItemRequest(BaseModel):
    """Request to delete an item from sidebar and pages."""

    id: ItemId


class UpdateItemRequest(BaseModel):
    """Request to update (and optionally rename) an item."""

    model_config = ConfigDict(populate_by_name=True)

    old_id: ItemId = Field(alias="oldId")
    new_item: ItemChanges = Field(alias="newItem")


class MutationResponse(BaseModel):
    """Response after a successful mutation."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    sidebar_item: SidebarItem | None = Field(default=None, alias="sidebarItem")
    page: Page | None = None
