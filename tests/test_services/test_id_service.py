"""Tests for item id normalization and default labels."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cms.schemas.config import DeleteItemRequest, ItemCreate, UpdateItemRequest
from cms.services.id_service import (
    capitalize_first_letter,
    default_label,
    default_title,
    fold_id,
    normalize_id,
)


class TestNormalizeId:
    def test_lowercases(self) -> None:
        assert normalize_id("HomePage") == "homepage"

    def test_strips_whitespace(self) -> None:
        assert normalize_id("  about \n") == "about"

    def test_rejects_blank(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            normalize_id("   ")

    def test_fold_id_never_raises(self) -> None:
        assert fold_id(" Home ") == "home"
        assert fold_id("  ") == ""


class TestDefaults:
    def test_capitalize_first_letter(self) -> None:
        assert capitalize_first_letter("home") == "Home"
        assert capitalize_first_letter("getting-started") == "Getting-started"
        assert capitalize_first_letter("aBC") == "ABC"

    def test_capitalize_empty(self) -> None:
        assert capitalize_first_letter("") == ""

    def test_default_label_and_title(self) -> None:
        assert default_label("contact") == "Contact"
        assert default_title("contact") == "Page contact"


class TestSchemaIdFolding:
    def test_item_create_folds_id(self) -> None:
        assert ItemCreate(id=" Home ").id == "home"

    def test_delete_request_folds_id(self) -> None:
        assert DeleteItemRequest(id="ABOUT").id == "about"

    def test_update_request_folds_both_ids(self) -> None:
        req = UpdateItemRequest.model_validate({"oldId": "Old", "newItem": {"id": "NEW"}})
        assert req.old_id == "old"
        assert req.new_item.id == "new"

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ItemCreate(id="  ")

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ItemCreate(id="")
