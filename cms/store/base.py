"""Base protocol and data classes for config storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from cms.exceptions import StoreReadError
from cms.schemas.config import ConfigDocument


@dataclass
class VersionedConfig:
    """A config document together with the version it was read at.

    A version of None means no row is stored yet.
    """

    version: int | None = None
    config: ConfigDocument = field(default_factory=ConfigDocument)


@runtime_checkable
class ConfigStore(Protocol):
    """Protocol for backends holding the single config document."""

    async def load(self) -> VersionedConfig:
        """Read the stored document, or the empty default if none is stored."""
        ...

    async def save(self, config: ConfigDocument, expected_version: int | None) -> int:
        """Overwrite the document if it is still at ``expected_version``.

        ``None`` creates the row. Returns the new version.
        """
        ...

    async def ping(self) -> bool:
        """Return True if the backend is reachable."""
        ...

    async def close(self) -> None: ...


def parse_document(raw: Any) -> ConfigDocument:
    """Validate a stored JSON value, treating null as the empty document."""
    if raw is None:
        return ConfigDocument()
    try:
        return ConfigDocument.model_validate(raw)
    except ValidationError as exc:
        raise StoreReadError(f"Stored config is malformed: {exc.error_count()} error(s)") from exc


def dump_document(config: ConfigDocument) -> dict[str, Any]:
    return config.model_dump(mode="json")
