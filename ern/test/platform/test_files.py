from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from ern.platform.files import atomic_write_text, remove_tree


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "cauldron" / "cauldron.json"
    atomic_write_text(path, '{"schemaVersion":3}\n')

    assert path.read_text(encoding="utf-8") == '{"schemaVersion":3}\n'


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "cauldron.json"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload")

    assert list(tmp_path.glob(f".{path.name}.*.tmp")) == []
    assert not path.exists()


def test_remove_tree_missing(tmp_path: Path) -> None:
    assert remove_tree(tmp_path / "absent") is False


def test_remove_tree_with_read_only_files(tmp_path: Path) -> None:
    root = tmp_path / "wc"
    pack = root / ".git" / "objects" / "pack"
    pack.mkdir(parents=True)
    packed = pack / "pack-1.pack"
    packed.write_bytes(b"PACK")
    packed.chmod(stat.S_IREAD)

    assert remove_tree(root) is True
    assert not root.exists()
