"""
act-engine - deterministic writer and drift detector

File: src/act_engine/codegen/writer.py
Last updated: 2026-10-19

Purpose
- Decide whether a generated artifact must be rewritten, and write it safely when it must.

What should be included in this file
- Banner + content assembly.
- Check mode (report drift, never write) and dry-run mode (never write).
- Hash-equal skip, optional syntax validation, optional backup, atomic replace.
- Stand-alone drift reporting for the drift phase.

Functional requirements
- Hash comparison uses the normalized content hash, so line-ending and trailing
  whitespace differences never count as drift.
- A write that fails validation leaves the existing file untouched.

Non-functional requirements
- Single-threaded; every decision is logged as a structured event.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

from act_engine.codegen.banners import render_banner
from act_engine.utils.fs import atomic_write, backup_file
from act_engine.utils.hashing import content_unchanged

DRIFT_CHECK_MODE_MESSAGE: Final[str] = "Drift detected (check mode)"
REASON_MISSING: Final[str] = "File does not exist"
REASON_DIFFERS: Final[str] = "Content differs"

_PYTHON_SUFFIXES: Final[frozenset[str]] = frozenset({".py"})


@dataclass(frozen=True, slots=True)
class WriteResult:
    path: Path
    success: bool
    written: bool = False
    skipped: bool = False
    has_drift: bool = False
    error: str | None = None
    backup_path: Path | None = None


@dataclass(frozen=True, slots=True)
class DriftReport:
    path: Path
    has_drift: bool
    reason: str | None = None


def check_drift(path: Path, content: str) -> DriftReport:
    """Compare ``content`` with what is on disk, without writing."""

    if not path.exists():
        return DriftReport(path=path, has_drift=True, reason=REASON_MISSING)
    if content_unchanged(path, content):
        return DriftReport(path=path, has_drift=False)
    return DriftReport(path=path, has_drift=True, reason=REASON_DIFFERS)


def compose_artifact(content: str, *, banner: str | None, path: Path) -> str:
    """Prefix ``content`` with the rendered banner for ``banner`` (the artifact's source)."""

    if banner is None:
        return content
    return render_banner(banner, path) + "\n\n" + content


class DeterministicWriter:
    """Skip-if-equal artifact writer that tracks what it wrote."""

    def __init__(
        self,
        *,
        check_mode: bool = False,
        dry_run: bool = False,
        validate_code: bool = True,
        backup_existing: bool = True,
        logger: Any | None = None,
    ) -> None:
        self._check_mode = check_mode
        self._dry_run = dry_run
        self._validate_code = validate_code
        self._backup_existing = backup_existing
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._written: list[Path] = []

    @property
    def written_files(self) -> tuple[Path, ...]:
        return tuple(self._written)

    def write(
        self,
        path: Path,
        content: str,
        *,
        banner: str | None = None,
        check_mode: bool | None = None,
        dry_run: bool | None = None,
    ) -> WriteResult:
        check = self._check_mode if check_mode is None else check_mode
        dry = self._dry_run if dry_run is None else dry_run
        full_text = compose_artifact(content, banner=banner, path=path)

        if check:
            report = check_drift(path, full_text)
            if report.has_drift:
                self._logger.info(
                    "deterministic_write_drift", path=path.as_posix(), reason=report.reason
                )
                return WriteResult(
                    path=path, success=False, has_drift=True, error=DRIFT_CHECK_MODE_MESSAGE
                )
            return WriteResult(path=path, success=True, skipped=True)

        unchanged = content_unchanged(path, full_text)
        if dry:
            self._logger.info(
                "deterministic_write_dry_run", path=path.as_posix(), would_write=not unchanged
            )
            return WriteResult(path=path, success=True, skipped=unchanged, has_drift=not unchanged)

        if unchanged:
            self._logger.debug("deterministic_write_skipped", path=path.as_posix())
            return WriteResult(path=path, success=True, skipped=True)

        if self._validate_code and path.suffix in _PYTHON_SUFFIXES:
            syntax_error = _syntax_error(full_text, path)
            if syntax_error is not None:
                self._logger.warning(
                    "deterministic_write_invalid", path=path.as_posix(), error=syntax_error
                )
                return WriteResult(path=path, success=False, has_drift=True, error=syntax_error)

        backup = backup_file(path) if self._backup_existing else None
        atomic_write(path, full_text)
        self._written.append(path)
        self._logger.info(
            "deterministic_write_completed",
            path=path.as_posix(),
            backup=backup.as_posix() if backup is not None else None,
        )
        return WriteResult(
            path=path, success=True, written=True, has_drift=True, backup_path=backup
        )


def _syntax_error(text: str, path: Path) -> str | None:
    try:
        ast.parse(text, filename=path.as_posix())
    except SyntaxError as exc:
        return f"Syntax validation failed: {exc.msg} (line {exc.lineno})"
    return None


__all__ = [
    "DRIFT_CHECK_MODE_MESSAGE",
    "REASON_DIFFERS",
    "REASON_MISSING",
    "DeterministicWriter",
    "DriftReport",
    "WriteResult",
    "check_drift",
    "compose_artifact",
]
