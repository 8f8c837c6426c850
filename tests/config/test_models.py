"""Tests for the user config model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tasknotes.config.models import UserConfig


class TestUserConfig:
    def test_defaults(self) -> None:
        config = UserConfig()
        assert config.collection_path is None
        assert config.language == "en"

    def test_alias(self) -> None:
        config = UserConfig.model_validate({"collectionPath": "/v"})
        assert config.get_key("collectionPath") == "/v"

    def test_with_key(self) -> None:
        config = UserConfig().with_key("collectionPath", "/v")
        assert config.collection_path == "/v"
        assert config.with_key("language", None).language == "en"

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            UserConfig().language = "de"  # type: ignore[misc]
