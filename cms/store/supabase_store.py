"""Config store backed by the hosted database's REST endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from cms.exceptions import StoreReadError, StoreWriteError, VersionConflictError
from cms.store.base import VersionedConfig, dump_document, parse_document

if TYPE_CHECKING:
    from cms.schemas.config import ConfigDocument

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Extract the error message PostgREST puts in its JSON error body."""
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text[:200]}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}"


class SupabaseConfigStore:
    """Reads and writes one row of ``table`` over the PostgREST API.

    The row is addressed by ``id = row_id`` and holds the document in a JSON
    ``config`` column. With ``optimistic_concurrency`` on, the table also
    needs an integer ``version`` column; updates filter on it and an empty
    result means another writer got there first.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        table: str = "configs",
        row_id: int = 1,
        optimistic_concurrency: bool = True,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.table = table
        self.row_id = row_id
        self.optimistic_concurrency = optimistic_concurrency
        self.client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": anon_key,
                "Authorization": f"Bearer {anon_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def _columns(self) -> str:
        return "config,version" if self.optimistic_concurrency else "config"

    async def load(self) -> VersionedConfig:
        try:
            resp = await self.client.get(
                f"/{self.table}",
                params={"select": self._columns, "id": f"eq.{self.row_id}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Config read request failed: %s", exc)
            raise StoreReadError(str(exc)) from exc

        if resp.is_error:
            message = _error_message(resp)
            logger.error("Config read rejected (%d): %s", resp.status_code, message)
            raise StoreReadError(message)

        rows = resp.json()
        if not rows:
            return VersionedConfig()
        row: dict[str, Any] = rows[0]
        # A NULL version (column added to an existing row) reads as 0.
        version = int(row.get("version") or 0) if self.optimistic_concurrency else 0
        return VersionedConfig(version=version, config=parse_document(row.get("config")))

    async def save(self, config: ConfigDocument, expected_version: int | None) -> int:
        payload: dict[str, Any] = {"config": dump_document(config)}
        if expected_version is None:
            return await self._insert(payload)

        params = {"id": f"eq.{self.row_id}"}
        new_version = expected_version + 1
        if self.optimistic_concurrency:
            if expected_version == 0:
                params["or"] = "(version.is.null,version.eq.0)"
            else:
                params["version"] = f"eq.{expected_version}"
            payload["version"] = new_version

        rows = await self._write("PATCH", params, payload)
        if not rows:
            raise VersionConflictError(expected_version)
        return new_version

    async def _insert(self, payload: dict[str, Any]) -> int:
        payload = {"id": self.row_id, **payload}
        if self.optimistic_concurrency:
            payload["version"] = 1
        try:
            await self._write("POST", {}, payload)
        except StoreWriteError as exc:
            if "duplicate key" in str(exc):
                raise VersionConflictError(None) from exc
            raise
        return 1

    async def _write(
        self, method: str, params: dict[str, str], payload: dict[str, Any]
    ) -> list[dict[str, Any]]:
        try:
            resp = await self.client.request(
                method,
                f"/{self.table}",
                params=params,
                json=payload,
                headers={"Prefer": "return=representation"},
            )
        except httpx.HTTPError as exc:
            logger.error("Config write request failed: %s", exc)
            raise StoreWriteError(str(exc)) from exc

        if resp.is_error:
            message = _error_message(resp)
            logger.error("Config write rejected (%d): %s", resp.status_code, message)
            raise StoreWriteError(message)

        result: list[dict[str, Any]] = resp.json()
        return result

    async def ping(self) -> bool:
        try:
            resp = await self.client.get(
                f"/{self.table}", params={"select": "id", "id": f"eq.{self.row_id}"}
            )
        except httpx.HTTPError:
            logger.warning("Config store ping failed", exc_info=True)
            return False
        return not resp.is_error

    async def close(self) -> None:
        await self.client.aclose()
