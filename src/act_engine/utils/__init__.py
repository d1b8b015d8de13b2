"""Utility exports for filesystem and hashing helpers."""

from act_engine.utils.fs import atomic_write, backup_file
from act_engine.utils.hashing import (
    GENERATION_MARKERS,
    content_unchanged,
    has_generation_banner,
    hash_content,
    normalize_content,
    sha256_text,
)

__all__ = [
    "GENERATION_MARKERS",
    "atomic_write",
    "backup_file",
    "content_unchanged",
    "has_generation_banner",
    "hash_content",
    "normalize_content",
    "sha256_text",
]
