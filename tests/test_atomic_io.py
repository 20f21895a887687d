"""Test module for atomic io."""

from __future__ import annotations

from pathlib import Path

import pytest

from mclang_py.core.atomic_io import write_text_atomic


def test_write_text_atomic_creates_parents_and_replaces(tmp_path: Path) -> None:
    """Verify atomic writes create directories and overwrite in place."""
    target = tmp_path / "nested" / "state.json"
    write_text_atomic(target, "first")
    write_text_atomic(target, "séconde")
    assert target.read_text(encoding="utf-8") == "séconde"
    assert [p.name for p in target.parent.iterdir()] == ["state.json"]


def test_write_text_atomic_cleans_temp_file_on_failure(
    tmp_path: Path, monkeypatch
) -> None:
    """Verify a failed rename leaves the old file and no temp files."""
    target = tmp_path / "state.json"
    target.write_text("old", encoding="utf-8")

    def _boom(*_a, **_k):
        raise OSError("rename failed")

    monkeypatch.setattr("mclang_py.core.atomic_io.os.replace", _boom)
    with pytest.raises(OSError):
        write_text_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]
