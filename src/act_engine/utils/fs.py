"""
act-engine - filesystem utilities

File: src/act_engine/utils/fs.py
Last updated: 2026-10-19

Purpose
- Provide atomic writes and copy-before-overwrite backups for generated artifacts.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Missing parent directories are created on demand.
- Backups sit beside the original with a ``.bak`` suffix.

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

BACKUP_SUFFIX = ".bak"

__all__ = [
    "BACKUP_SUFFIX",
    "atomic_write",
    "backup_file",
]


def atomic_write(
    path: PathLike,
    data: bytes | str,
    *,
    encoding: str = "utf-8",
    create_parents: bool = True,
) -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    if create_parents:
        target.parent.mkdir(parents=True, exist_ok=True)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        payload = data.encode(encoding) if isinstance(data, str) else data
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def backup_file(path: PathLike) -> Path | None:
    """Copy ``path`` to ``<path>.bak`` and return the backup path, or ``None`` if absent."""

    source = Path(path)
    if not source.is_file():
        return None
    backup = source.with_name(source.name + BACKUP_SUFFIX)
    shutil.copy2(source, backup)
    return backup


def _fsync_directory(directory: Path) -> None:
    if os.name == "nt":
        return
    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY
    try:
        fd = os.open(directory, flags)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        return
    finally:
        os.close(fd)
