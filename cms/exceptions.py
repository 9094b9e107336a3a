"""Application-level exception types.

Convention:
- ``StoreError`` and its subclasses: failures talking to the config store.
  Their message is the underlying storage error and is safe to show to
  callers; the HTTP layer answers 500 and the tool server answers with a
  "Failed to ... database" text.
- ``ItemError`` (a ``ValueError``): business validation failures on the
  config document (duplicate id, unknown id). The HTTP layer maps them to
  409/404 and the tool server renders ``str(exc)``.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for config store failures."""


class StoreReadError(StoreError):
    """Raised when the stored config document cannot be loaded."""


class StoreWriteError(StoreError):
    """Raised when the config document cannot be written back."""


class VersionConflictError(StoreWriteError):
    """Raised when the stored document changed since it was read."""

    def __init__(self, expected_version: int | None) -> None:
        if expected_version is None:
            message = "Config was created concurrently"
        else:
            message = f"Config was modified concurrently (expected version {expected_version})"
        super().__init__(message)
        self.expected_version = expected_version


class ItemError(ValueError):
    """Base class for rejected document mutations."""

    def __init__(self, item_id: str, message: str) -> None:
        super().__init__(message)
        self.item_id = item_id


class DuplicateItemError(ItemError):
    """Raised when an id is already taken in the sidebar or pages."""


class ItemNotFoundError(ItemError):
    """Raised when an id is in neither the sidebar nor the pages."""

    def __init__(self, item_id: str) -> None:
        super().__init__(item_id, f"Item with ID {item_id} not found in sidebar or pages")
