"""Document service: pure mutations of the config document.

Every function takes a ``ConfigDocument`` and returns a new one; the input
is never modified. Ids reaching these functions are already normalized by
the request schemas; ids read from storage are compared folded, and an
entry rewritten by ``update_item`` is stored under the folded id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cms.exceptions import DuplicateItemError, ItemNotFoundError
from cms.schemas.config import Page, SidebarItem
from cms.services.id_service import default_label, default_title, fold_id

if TYPE_CHECKING:
    from cms.schemas.config import ConfigDocument, ItemChanges, ItemCreate


def build_entries(item: ItemCreate) -> tuple[SidebarItem, Page]:
    """Build the sidebar item and page for a new item, filling in defaults."""
    sidebar_item = SidebarItem(
        id=item.id,
        label=item.label if item.label is not None else default_label(item.id),
        active=item.active if item.active is not None else False,
    )
    page = Page(
        id=item.id,
        title=item.title if item.title is not None else default_title(item.id),
        content=item.content if item.content is not None else "",
    )
    return sidebar_item, page


def add_item(
    config: ConfigDocument, item: ItemCreate
) -> tuple[ConfigDocument, SidebarItem, Page]:
    """Append a new item to both lists.

    Raises DuplicateItemError if the id is already used in either list.
    """
    if config.find_sidebar_item(item.id) is not None:
        raise DuplicateItemError(item.id, f"Sidebar item with ID {item.id} already exists")
    if config.find_page(item.id) is not None:
        raise DuplicateItemError(item.id, f"Page with ID {item.id} already exists")

    sidebar_item, page = build_entries(item)
    updated = config.model_copy(
        update={
            "sidebar": [*config.sidebar, sidebar_item],
            "pages": [*config.pages, page],
        }
    )
    return updated, sidebar_item, page


def delete_item(
    config: ConfigDocument, item_id: str
) -> tuple[ConfigDocument, SidebarItem | None, Page | None]:
    """Remove the item from whichever lists hold it.

    Raises ItemNotFoundError if neither list holds the id.
    """
    sidebar_item = config.find_sidebar_item(item_id)
    page = config.find_page(item_id)
    if sidebar_item is None and page is None:
        raise ItemNotFoundError(item_id)

    updated = config.model_copy(
        update={
            "sidebar": [s for s in config.sidebar if fold_id(s.id) != item_id],
            "pages": [p for p in config.pages if fold_id(p.id) != item_id],
        }
    )
    return updated, sidebar_item, page


def update_item(
    config: ConfigDocument, old_id: str, changes: ItemChanges
) -> tuple[ConfigDocument, SidebarItem | None, Page | None]:
    """Rewrite the entries matching ``old_id`` in place.

    Omitted fields keep the entry's current values. Raises ItemNotFoundError
    if ``old_id`` is in neither list, and DuplicateItemError if the entry is
    renamed to an id that is already taken.
    """
    sidebar_item = config.find_sidebar_item(old_id)
    page = config.find_page(old_id)
    if sidebar_item is None and page is None:
        raise ItemNotFoundError(old_id)

    new_id = changes.id if changes.id is not None else old_id
    if new_id != old_id and config.has_id(new_id):
        raise DuplicateItemError(new_id, f"Item with ID {new_id} already exists")

    new_sidebar_item: SidebarItem | None = None
    if sidebar_item is not None:
        new_sidebar_item = sidebar_item.model_copy(
            update={
                "id": new_id,
                "label": changes.label if changes.label is not None else sidebar_item.label,
                "active": changes.active if changes.active is not None else sidebar_item.active,
            }
        )

    new_page: Page | None = None
    if page is not None:
        new_page = page.model_copy(
            update={
                "id": new_id,
                "title": changes.title if changes.title is not None else page.title,
                "content": changes.content if changes.content is not None else page.content,
            }
        )

    updated = config.model_copy(
        update={
            "sidebar": [
                new_sidebar_item if s is sidebar_item else s for s in config.sidebar
            ],
            "pages": [new_page if p is page else p for p in config.pages],
        }
    )
    return updated, new_sidebar_item, new_page
