"""Tests for the CMS config CLI client."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from cli import cms_client
from cli.cms_client import CmsApiError, CmsClient, build_parser, validate_server_url


class RecordingServer:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body if body is not None else {"message": "ok"}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def payload(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def _client(server: RecordingServer) -> CmsClient:
    return CmsClient("http://localhost:3000/", transport=httpx.MockTransport(server))


class TestValidateServerUrl:
    def test_rejects_insecure_http_for_remote_hosts(self) -> None:
        with pytest.raises(ValueError, match="HTTPS is required"):
            validate_server_url("http://example.com")

    def test_allows_https_for_remote_hosts(self) -> None:
        assert validate_server_url("https://example.com/") == "https://example.com"

    def test_allows_http_for_localhost(self) -> None:
        assert validate_server_url("http://localhost:3000") == "http://localhost:3000"

    def test_allows_insecure_http_when_flag_enabled(self) -> None:
        assert (
            validate_server_url("http://example.com:3000", allow_insecure_http=True)
            == "http://example.com:3000"
        )

    def test_rejects_missing_scheme(self) -> None:
        with pytest.raises(ValueError, match="scheme and host"):
            validate_server_url("example.com")


class TestCmsClient:
    def test_get_config(self) -> None:
        server = RecordingServer(body={"pages": [], "sidebar": []})
        with _client(server) as client:
            assert client.get_config() == {"pages": [], "sidebar": []}
        assert server.requests[0].method == "GET"
        assert server.requests[0].url.path == "/api/config"

    def test_add_item_wraps_payload(self) -> None:
        server = RecordingServer()
        with _client(server) as client:
            client.add_item({"id": "home", "title": "Home"})
        assert server.requests[0].url.path == "/api/addItem"
        assert server.payload() == {"item": {"id": "home", "title": "Home"}}

    def test_delete_item(self) -> None:
        server = RecordingServer()
        with _client(server) as client:
            client.delete_item("home")
        assert server.requests[0].url.path == "/api/deleteItem"
        assert server.payload() == {"id": "home"}

    def test_update_item_uses_wire_names(self) -> None:
        server = RecordingServer()
        with _client(server) as client:
            client.update_item("a", {"id": "b"})
        assert server.requests[0].url.path == "/api/updateItem"
        assert server.payload() == {"oldId": "a", "newItem": {"id": "b"}}

    def test_error_detail_string(self) -> None:
        server = RecordingServer(404, {"detail": "Failed to delete item: not found"})
        with _client(server) as client, pytest.raises(CmsApiError) as exc_info:
            client.delete_item("ghost")
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Failed to delete item: not found"

    def test_error_detail_list(self) -> None:
        server = RecordingServer(
            400, {"detail": [{"field": "body -> item", "message": "Field required"}]}
        )
        with _client(server) as client, pytest.raises(CmsApiError) as exc_info:
            client.add_item({})
        assert exc_info.value.detail == "body -> item: Field required"


class TestParser:
    def test_add_omits_unset_fields(self) -> None:
        args = build_parser().parse_args(["add", "faq", "--title", "FAQ"])
        assert cms_client._item_fields(args) == {"title": "FAQ"}

    def test_active_flags(self) -> None:
        parser = build_parser()
        assert parser.parse_args(["add", "x", "--active"]).active is True
        assert parser.parse_args(["add", "x", "--no-active"]).active is False
        assert parser.parse_args(["add", "x"]).active is None

    def test_update_new_id(self) -> None:
        args = build_parser().parse_args(["update", "a", "--id", "b"])
        assert args.old_id == "a"
        assert args.new_id == "b"


class TestMain:
    def _run(self, server: RecordingServer, argv: list[str]) -> None:
        real_client = CmsClient

        def factory(server_url: str) -> CmsClient:
            return real_client(server_url, transport=httpx.MockTransport(server))

        with patch.object(cms_client, "CmsClient", side_effect=factory):
            cms_client.main(["--server", "http://localhost:3000", *argv])

    def test_add_prints_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        server = RecordingServer(201, {"message": "Successfully added item with ID faq"})
        self._run(server, ["add", "faq", "--label", "FAQ", "--no-active"])
        assert capsys.readouterr().out.strip() == "Successfully added item with ID faq"
        assert server.payload() == {"item": {"id": "faq", "label": "FAQ", "active": False}}

    def test_update_sends_changes(self) -> None:
        server = RecordingServer()
        self._run(server, ["update", "a", "--id", "b", "--content", "body"])
        assert server.payload() == {"oldId": "a", "newItem": {"content": "body", "id": "b"}}

    def test_show_prints_document(self, capsys: pytest.CaptureFixture[str]) -> None:
        doc = {"pages": [{"id": "a", "title": "A", "content": ""}], "sidebar": []}
        self._run(RecordingServer(body=doc), ["show"])
        assert json.loads(capsys.readouterr().out) == doc

    def test_api_error_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        server = RecordingServer(409, {"detail": "Failed to add item: already exists"})
        with pytest.raises(SystemExit) as exc_info:
            self._run(server, ["add", "a"])
        assert exc_info.value.code == 1
        assert "Error (409): Failed to add item: already exists" in capsys.readouterr().out

    def test_insecure_remote_server_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cms_client.main(["--server", "http://example.com", "show"])
        assert exc_info.value.code == 1
        assert "HTTPS is required" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        cms_client.main([])
        assert "usage: cms-client" in capsys.readouterr().out
