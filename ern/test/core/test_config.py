"""Tests for ern.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ern.core.config import (
    DEFAULT_BRANCH,
    DEFAULT_REMOTE,
    CauldronConfig,
    Config,
    load_config,
    load_config_or_default,
)
from ern.core.result import Err, Ok


class TestCauldronConfig:
    """Test CauldronConfig defaults and derived paths."""

    def test_defaults(self) -> None:
        config = CauldronConfig()
        assert config.repository is None
        assert config.branch == DEFAULT_BRANCH == "master"
        assert config.remote == DEFAULT_REMOTE == "upstream"
        assert config.is_active is False

    def test_working_copy_relative_to_ern_home(self, tmp_path: Path) -> None:
        config = CauldronConfig(path="stores/main")
        assert config.working_copy(tmp_path) == tmp_path / "stores" / "main"

    def test_working_copy_absolute(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        config = CauldronConfig(path=str(target))
        assert config.working_copy(Path("/unused")) == target

    def test_frozen(self) -> None:
        config = CauldronConfig()
        with pytest.raises(AttributeError):
            config.branch = "main"  # type: ignore[misc]


class TestConfigFromDict:
    def test_empty_dict_gives_defaults(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_cauldron_section(self) -> None:
        config = Config.from_dict(
            {"cauldron": {"repository": "git@host:org/cauldron.git", "branch": "main"}}
        )
        assert config.cauldron.repository == "git@host:org/cauldron.git"
        assert config.cauldron.branch == "main"
        assert config.cauldron.remote == DEFAULT_REMOTE
        assert config.cauldron.is_active

    def test_wrong_types_fall_back_to_defaults(self) -> None:
        config = Config.from_dict({"cauldron": {"branch": 3, "repository": ["x"]}})
        assert config.cauldron.branch == DEFAULT_BRANCH
        assert config.cauldron.repository is None


class TestLoadConfig:
    def test_load_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            '[cauldron]\nrepository = "https://example.com/cauldron.git"\nremote = "origin"\n',
            encoding="utf-8",
        )

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.cauldron.repository == "https://example.com/cauldron.git"
        assert result.value.cauldron.remote == "origin"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "missing.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[cauldron\nrepository = ", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path
        assert str(path) in result.error.pretty()

    def test_or_default_on_broken_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("not = [valid", encoding="utf-8")
        assert load_config_or_default(path) == Config()
