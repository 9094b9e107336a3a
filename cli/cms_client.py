"""CLI client for the CMS config HTTP API."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any
from urllib.parse import urlparse

import httpx

DEFAULT_SERVER = "http://localhost:3000"
_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


class CmsApiError(Exception):
    """Raised when the server rejects a request."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def _detail(resp: httpx.Response) -> str:
    """Render the ``detail`` of an error response as one line."""
    try:
        detail = resp.json().get("detail")
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(detail, list):
        return "; ".join(f"{d.get('field')}: {d.get('message')}" for d in detail)
    return str(detail)


class CmsClient:
    """Client for a CMS config server."""

    def __init__(
        self,
        server_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.client = httpx.Client(base_url=self.server_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> CmsClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _check(self, resp: httpx.Response) -> dict[str, Any]:
        if resp.is_error:
            raise CmsApiError(resp.status_code, _detail(resp))
        result: dict[str, Any] = resp.json()
        return result

    def get_config(self) -> dict[str, Any]:
        """Fetch the stored config document."""
        return self._check(self.client.get("/api/config"))

    def add_item(self, item: dict[str, Any]) -> dict[str, Any]:
        """Add an item; ``item`` holds id and optional label/title/content/active."""
        return self._check(self.client.post("/api/addItem", json={"item": item}))

    def delete_item(self, item_id: str) -> dict[str, Any]:
        return self._check(self.client.post("/api/deleteItem", json={"id": item_id}))

    def update_item(self, old_id: str, new_item: dict[str, Any]) -> dict[str, Any]:
        return self._check(
            self.client.post("/api/updateItem", json={"oldId": old_id, "newItem": new_item})
        )


def validate_server_url(server_url: str, allow_insecure_http: bool = False) -> str:
    """Validate server URL and enforce HTTPS for non-localhost hosts by default."""
    normalized = server_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Server URL must include scheme and host (e.g. https://example.com)")

    hostname = parsed.hostname
    if parsed.scheme == "http" and not allow_insecure_http and hostname not in _LOCALHOST_HOSTS:
        raise ValueError(
            "HTTPS is required for non-localhost servers. "
            "Use --allow-insecure-http only on trusted networks."
        )

    return normalized


def _item_fields(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the item fields given on the command line, skipping omitted ones."""
    fields: dict[str, Any] = {}
    for name in ("label", "title", "content"):
        value = getattr(args, name)
        if value is not None:
            fields[name] = value
    if args.active is not None:
        fields["active"] = args.active
    return fields


def _add_item_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--label", help="Sidebar label")
    parser.add_argument("--title", help="Page title")
    parser.add_argument("--content", help="Page content")
    parser.add_argument(
        "--active",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Sidebar active flag",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cms-client",
        description="Manage pages and sidebar entries on a CMS config server",
    )
    parser.add_argument(
        "--server",
        "-s",
        default=os.environ.get("CMS_SERVER", DEFAULT_SERVER),
        help=f"Server URL (default: $CMS_SERVER or {DEFAULT_SERVER})",
    )
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// server URLs for non-localhost hosts",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("show", help="Print the stored config document")

    add_parser = subparsers.add_parser("add", help="Add an item to sidebar and pages")
    add_parser.add_argument("id", help="Item ID")
    _add_item_arguments(add_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete an item")
    delete_parser.add_argument("id", help="Item ID")

    update_parser = subparsers.add_parser("update", help="Update an item")
    update_parser.add_argument("old_id", help="Current item ID")
    update_parser.add_argument("--id", dest="new_id", help="New item ID")
    _add_item_arguments(update_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    try:
        server_url = validate_server_url(args.server, args.allow_insecure_http)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    with CmsClient(server_url) as client:
        try:
            if args.command == "show":
                print(json.dumps(client.get_config(), indent=2))
                return
            if args.command == "add":
                result = client.add_item({"id": args.id, **_item_fields(args)})
            elif args.command == "delete":
                result = client.delete_item(args.id)
            else:
                changes = _item_fields(args)
                if args.new_id is not None:
                    changes["id"] = args.new_id
                result = client.update_item(args.old_id, changes)
        except CmsApiError as exc:
            print(f"Error ({exc.status_code}): {exc.detail}")
            sys.exit(1)
        except httpx.HTTPError as exc:
            print(f"Error: could not reach {server_url}: {exc}")
            sys.exit(1)

    print(result["message"])


if __name__ == "__main__":
    main()
