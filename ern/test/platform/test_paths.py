"""Tests for ern.platform.paths module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ern.platform.paths import clear_caches, ern_home, home, user_config_path


@pytest.fixture(autouse=True)
def clear_path_caches() -> None:
    clear_caches()


class TestErnHome:
    def test_defaults_under_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("ERN_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        clear_caches()

        assert home() == tmp_path
        assert ern_home() == tmp_path / ".ern"
        assert user_config_path() == tmp_path / ".ern" / "config.toml"

    def test_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("ERN_HOME", str(tmp_path / "state"))
        clear_caches()

        assert ern_home() == tmp_path / "state"

    def test_is_cached(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("ERN_HOME", str(tmp_path / "first"))
        clear_caches()
        first = ern_home()

        monkeypatch.setenv("ERN_HOME", str(tmp_path / "second"))
        assert ern_home() is first
