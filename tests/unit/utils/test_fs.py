"""Unit tests for atomic writes and backups."""

from __future__ import annotations

from pathlib import Path

from act_engine.utils.fs import BACKUP_SUFFIX, atomic_write, backup_file


def test_atomic_write_creates_parents_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "generated" / "contracts" / "node_contract.py"

    atomic_write(target, "x = 1\n")

    assert target.read_text(encoding="utf-8") == "x = 1\n"
    assert sorted(item.name for item in target.parent.iterdir()) == ["node_contract.py"]


def test_atomic_write_replaces_existing_content(tmp_path: Path) -> None:
    target = tmp_path / "out.sql"
    target.write_text("old", encoding="utf-8")

    atomic_write(target, b"new")

    assert target.read_bytes() == b"new"


def test_backup_file_copies_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "out.py"
    assert backup_file(target) is None

    target.write_text("original\n", encoding="utf-8")
    backup = backup_file(target)

    assert backup == tmp_path / f"out.py{BACKUP_SUFFIX}"
    assert backup is not None
    assert backup.read_text(encoding="utf-8") == "original\n"
