"""
act-engine - content hashing utilities

File: src/act_engine/utils/hashing.py
Last updated: 2026-10-19

Purpose
- Provide a deterministic SHA-256 helper for text.
- Provide the normalized content hash used for drift comparison of generated artifacts.

Functional requirements
- Line endings are normalized to ``\\n`` before digesting.
- Trailing blank lines and trailing whitespace do not change the digest.
- Two contents are equal for drift purposes iff their normalized digests are equal.

Non-functional requirements
- Standard library only; behavior is cross-platform deterministic.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Final

PathLike = str | os.PathLike[str]

GENERATION_MARKERS: Final[tuple[str, ...]] = ("Generated from", "DO NOT EDIT MANUALLY")

__all__ = [
    "GENERATION_MARKERS",
    "content_unchanged",
    "has_generation_banner",
    "hash_content",
    "normalize_content",
    "sha256_text",
]


def sha256_text(text: str, *, encoding: str = "utf-8") -> str:
    """Return SHA-256 hex digest for text encoded with ``encoding``."""

    return hashlib.sha256(text.encode(encoding)).hexdigest()


def normalize_content(content: str) -> str:
    """
    Return ``content`` in its drift-comparison form.

    Normalization steps, in order:
    1. ``\\r\\n`` and lone ``\\r`` become ``\\n``,
    2. trailing newlines are removed,
    3. trailing whitespace is removed.
    """

    normalized = content.replace("\r\n", "\n").replace("\r", "\n")
    normalized = normalized.rstrip("\n")
    return normalized.rstrip()


def hash_content(content: str) -> str:
    """Return the normalized SHA-256 digest of generated artifact text."""

    return sha256_text(normalize_content(content))


def content_unchanged(existing_path: PathLike, new_content: str) -> bool:
    """
    Return ``True`` when ``existing_path`` holds content hash-equal to ``new_content``.

    A missing file is never unchanged. Comparison is by normalized hash only.
    """

    path = Path(existing_path)
    if not path.is_file():
        return False
    existing = path.read_text(encoding="utf-8")
    return hash_content(existing) == hash_content(new_content)


def has_generation_banner(content: str) -> bool:
    """Return ``True`` if ``content`` carries a generation marker."""

    return any(marker in content for marker in GENERATION_MARKERS)
