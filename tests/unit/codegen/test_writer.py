"""
act-engine - unit tests for the deterministic writer

File: tests/unit/codegen/test_writer.py
Last updated: 2026-10-19

Purpose
- Verify skip-if-equal writes, check and dry-run modes, syntax validation, and backups.

What this test file should cover
- Banner assembly per file suffix.
- Drift reasons for missing and changed files.
- A failed validation leaves the previous content in place.
"""

from __future__ import annotations

from pathlib import Path

from act_engine.codegen.banners import render_banner
from act_engine.codegen.writer import (
    DRIFT_CHECK_MODE_MESSAGE,
    DeterministicWriter,
    check_drift,
)


def test_banners_use_suffix_comment_prefix() -> None:
    assert render_banner("Node contract metadata", Path("a/node.py")) == (
        "# Generated from Node contract metadata - DO NOT EDIT MANUALLY"
    )
    assert render_banner("Node contract metadata", Path("a/node.sql")).startswith("-- Generated from")


def test_first_write_then_skip(tmp_path: Path) -> None:
    target = tmp_path / "out" / "module.py"
    writer = DeterministicWriter()

    first = writer.write(target, "VALUE = 1\n", banner="source")
    second = writer.write(target, "VALUE = 1\n", banner="source")

    assert first.written and first.success
    assert target.read_text(encoding="utf-8") == "# Generated from source - DO NOT EDIT MANUALLY\n\nVALUE = 1\n"
    assert second.skipped and not second.written
    assert writer.written_files == (target,)


def test_line_ending_differences_are_not_drift(tmp_path: Path) -> None:
    target = tmp_path / "module.py"
    target.write_bytes(b"VALUE = 1  \r\n")

    result = DeterministicWriter().write(target, "VALUE = 1\n")

    assert result.skipped


def test_check_mode_reports_drift_without_writing(tmp_path: Path) -> None:
    target = tmp_path / "module.py"
    target.write_text("VALUE = 0\n", encoding="utf-8")

    result = DeterministicWriter(check_mode=True).write(target, "VALUE = 1\n")

    assert not result.success
    assert result.has_drift
    assert result.error == DRIFT_CHECK_MODE_MESSAGE
    assert target.read_text(encoding="utf-8") == "VALUE = 0\n"


def test_check_mode_without_drift_succeeds(tmp_path: Path) -> None:
    target = tmp_path / "module.py"
    target.write_text("VALUE = 1\n", encoding="utf-8")

    result = DeterministicWriter().write(target, "VALUE = 1\n", check_mode=True)

    assert result.success and result.skipped


def test_dry_run_reports_would_write(tmp_path: Path) -> None:
    target = tmp_path / "module.py"

    result = DeterministicWriter(dry_run=True).write(target, "VALUE = 1\n")

    assert result.success
    assert result.has_drift
    assert not result.written
    assert not target.exists()


def test_invalid_python_is_not_written(tmp_path: Path) -> None:
    target = tmp_path / "module.py"
    target.write_text("VALUE = 1\n", encoding="utf-8")

    result = DeterministicWriter().write(target, "def broken(:\n")

    assert not result.success
    assert result.error is not None
    assert result.error.startswith("Syntax validation failed: ")
    assert target.read_text(encoding="utf-8") == "VALUE = 1\n"


def test_sql_is_not_syntax_checked(tmp_path: Path) -> None:
    result = DeterministicWriter().write(tmp_path / "node.sql", "CREATE TABLE nodes (\n", banner="x")

    assert result.written


def test_overwrite_creates_backup(tmp_path: Path) -> None:
    target = tmp_path / "module.py"
    target.write_text("VALUE = 0\n", encoding="utf-8")

    result = DeterministicWriter(backup_existing=True).write(target, "VALUE = 1\n")

    assert result.backup_path == tmp_path / "module.py.bak"
    assert result.backup_path.read_text(encoding="utf-8") == "VALUE = 0\n"


def test_check_drift_reasons(tmp_path: Path) -> None:
    target = tmp_path / "module.py"

    missing = check_drift(target, "VALUE = 1\n")
    target.write_text("VALUE = 2\n", encoding="utf-8")
    differs = check_drift(target, "VALUE = 1\n")
    clean = check_drift(target, "VALUE = 2\n")

    assert (missing.has_drift, missing.reason) == (True, "File does not exist")
    assert (differs.has_drift, differs.reason) == (True, "Content differs")
    assert (clean.has_drift, clean.reason) == (False, None)
