"""Deterministic invariant registry loaded from ``invariants/*.yaml``."""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Final, TypeAlias

import yaml

from act_engine.domain.errors import SchemaValidationError
from act_engine.domain.interfaces import InvariantEntry, InvariantMetadata
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    mapping_tuple,
    optional_str,
    require_str,
)

PathLike: TypeAlias = str | os.PathLike[str]

INVARIANT_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Z_]+\.[FIAE]\d+$")

_DEFAULT_REGISTRY_DIR: Final[Path] = Path("invariants")


def is_canonical_invariant_id(invariant_id: str) -> bool:
    """Return whether ``invariant_id`` matches ``CATEGORY.{F|I|A|E}<digits>``."""

    return INVARIANT_ID_PATTERN.fullmatch(invariant_id) is not None


class YamlInvariantRegistry:
    """In-memory view of invariant definitions, keyed by invariant id."""

    __slots__ = ("_entries", "_registry_dir", "_source_files")

    def __init__(
        self,
        entries: Sequence[InvariantEntry],
        *,
        registry_dir: Path | None = None,
        source_files: Sequence[Path] = (),
    ) -> None:
        by_id: dict[str, InvariantEntry] = {}
        for entry in entries:
            if entry.id in by_id:
                raise ValueError(f"duplicate invariant id in memory: {entry.id!r}")
            by_id[entry.id] = entry
        self._entries = by_id
        self._registry_dir = registry_dir
        self._source_files = tuple(source_files)

    @property
    def registry_dir(self) -> Path | None:
        return self._registry_dir

    @property
    def source_files(self) -> tuple[Path, ...]:
        """Return source registry files in deterministic lexicographic order."""

        return self._source_files

    @classmethod
    def load(cls, registry_dir: PathLike = _DEFAULT_REGISTRY_DIR) -> YamlInvariantRegistry:
        """Load and validate all ``*.yaml`` invariant files from ``registry_dir``."""

        root = Path(registry_dir).expanduser()
        if not root.exists():
            raise FileNotFoundError(f"invariant registry directory does not exist: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"invariant registry path is not a directory: {root}")

        files = tuple(sorted(root.glob("*.yaml"), key=lambda path: (path.name, path.as_posix())))
        entries: list[InvariantEntry] = []
        seen_ids: dict[str, Path] = {}
        for source_file in files:
            for entry in _load_invariants_file(source_file):
                first_seen = seen_ids.get(entry.id)
                if first_seen is not None:
                    raise ValueError(
                        "duplicate invariant id "
                        f"{entry.id!r} across files: {first_seen.name} and {source_file.name}"
                    )
                seen_ids[entry.id] = source_file
                entries.append(entry)
        return cls(entries, registry_dir=root, source_files=files)

    @classmethod
    def from_metadata(cls, metadata: Sequence[InvariantMetadata]) -> YamlInvariantRegistry:
        return cls([InvariantEntry(metadata=item) for item in metadata])

    def get_all_invariant_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))

    def get(self, invariant_id: str) -> InvariantEntry | None:
        return self._entries.get(invariant_id)

    def by_category(self, category: str) -> tuple[InvariantEntry, ...]:
        return tuple(
            self._entries[key]
            for key in sorted(self._entries)
            if self._entries[key].metadata.category == category
        )

    def categories(self) -> tuple[str, ...]:
        return tuple(sorted({entry.metadata.category for entry in self._entries.values()}))

    def __len__(self) -> int:
        return len(self._entries)


def _load_invariants_file(path: Path) -> list[InvariantEntry]:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    if payload is None:
        return []
    location = path.name
    document = as_mapping(payload, location)
    entries: list[InvariantEntry] = []
    for item_path, item in mapping_tuple(document, "invariants", location):
        entries.append(InvariantEntry(metadata=_parse_metadata(item, item_path)))
    return entries


def _parse_metadata(payload: dict[str, object], path: str) -> InvariantMetadata:
    invariant_id = require_str(payload, "id", path)
    category_default, _, code_default = invariant_id.partition(".")
    category = optional_str(payload, "category", path) or category_default
    code = optional_str(payload, "code", path) or code_default or invariant_id
    enforce = optional_str(payload, "enforce", path)
    if enforce is not None and not enforce.strip():
        raise SchemaValidationError(child_path(path, "enforce"), "must be non-empty when set")
    return InvariantMetadata(
        id=invariant_id,
        category=category,
        code=code,
        name=optional_str(payload, "name", path, "") or "",
        description=optional_str(payload, "description", path, "") or "",
        enforce=enforce,
    )


__all__ = ["INVARIANT_ID_PATTERN", "YamlInvariantRegistry", "is_canonical_invariant_id"]
