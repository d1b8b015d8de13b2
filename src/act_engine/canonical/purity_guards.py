"""
act-engine - purity guard descriptors

File: src/act_engine/canonical/purity_guards.py
Last updated: 2026-10-19

Purpose
- Parse the six purity guard documents (architectural, form, act, state, intent, epistemic)
  and canonicalize each into a matcher-ready descriptor.

What should be included in this file
- One guard source per guard type: its YAML root key and its file name.
- Invariant and violation-pattern schemas, including path-scoped import and identifier matchers.

Functional requirements
- Invariant ids match ``CATEGORY.<letter><digits>_<NAME>``; anything else is a schema error.
- Every guard declares at least one invariant, and every invariant at least one violation
  pattern with at least one resolution step.
- Invariant ids are unique within a guard.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Final

import yaml

from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.domain.parsing import (
    child_path,
    choice,
    mapping_tuple,
    optional_mapping,
    optional_str,
    require_root,
    require_str,
    string_tuple,
)

GUARD_INVARIANT_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Z_]+\.[A-Z]\d+_[A-Z_]+$")


class GuardType(StrEnum):
    ARCHITECTURAL = "architectural"
    FORM = "form"
    ACT = "act"
    STATE = "state"
    INTENT = "intent"
    EPISTEMIC = "epistemic"


class GuardSeverity(StrEnum):
    ERROR = "error"
    WARN = "warn"


class GuardEnforcement(StrEnum):
    BUILD = "build"
    RUNTIME = "runtime"
    BOTH = "both"


class GitStatus(StrEnum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class GuardSource:
    guard_type: GuardType
    root_key: str
    file_name: str


GUARD_SOURCES: Final[tuple[GuardSource, ...]] = (
    GuardSource(GuardType.ARCHITECTURAL, "architecturalPurityGuard", "architectural-purity.yaml"),
    GuardSource(GuardType.FORM, "formPurityGuard", "form-purity.yaml"),
    GuardSource(GuardType.ACT, "actTeleologyGuard", "act-teleology.yaml"),
    GuardSource(GuardType.STATE, "stateIntegrityGuard", "state-integrity.yaml"),
    GuardSource(GuardType.INTENT, "intentPurityGuard", "intent-purity.yaml"),
    GuardSource(GuardType.EPISTEMIC, "epistemicPurityGuard", "epistemic-purity.yaml"),
)


def _values(enum_type: type[StrEnum]) -> tuple[str, ...]:
    return tuple(item.value for item in enum_type)


@dataclass(frozen=True, slots=True)
class ScopedImport:
    source: str
    within: str | None = None
    not_within: str | None = None


@dataclass(frozen=True, slots=True)
class ScopedIdentifier:
    pattern: str
    description: str | None = None
    within: str | None = None
    not_within: str | None = None
    matching: str | None = None


@dataclass(frozen=True, slots=True)
class FilePattern:
    pattern: str
    exclude: str | None = None


@dataclass(frozen=True, slots=True)
class ViolationMatcher:
    imports: tuple[ScopedImport, ...] = ()
    identifiers: tuple[ScopedIdentifier, ...] = ()
    file_patterns: tuple[FilePattern, ...] = ()
    git_status: GitStatus | None = None
    not_in: str | None = None
    not_generated_by: str | None = None
    missing: str | None = None
    scope: str | None = None
    semantic: str | None = None
    comparison: tuple[tuple[str, str], ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "imports": [
                {"from": item.source, "in": item.within, "not_in": item.not_within}
                for item in self.imports
            ],
            "identifiers": [
                {
                    "pattern": item.pattern,
                    "description": item.description,
                    "in": item.within,
                    "not_in": item.not_within,
                    "matching": item.matching,
                }
                for item in self.identifiers
            ],
            "file_patterns": [
                {"pattern": item.pattern, "exclude": item.exclude} for item in self.file_patterns
            ],
            "git_status": self.git_status.value if self.git_status is not None else None,
            "not_in": self.not_in,
            "not_generated_by": self.not_generated_by,
            "missing": self.missing,
            "scope": self.scope,
            "semantic": self.semantic,
            "comparison": dict(self.comparison),
        }


@dataclass(frozen=True, slots=True)
class ViolationPattern:
    pattern: str
    matcher: ViolationMatcher
    telos_violated: str
    resolution_steps: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "pattern": self.pattern,
            "matcher": self.matcher.to_dict(),
            "telos_violated": self.telos_violated,
            "resolution_steps": list(self.resolution_steps),
        }


@dataclass(frozen=True, slots=True)
class GuardInvariant:
    id: str
    name: str
    description: str
    severity: GuardSeverity
    enforcement: GuardEnforcement
    violations: tuple[ViolationPattern, ...]

    @property
    def checked_at_build(self) -> bool:
        return self.enforcement in {GuardEnforcement.BUILD, GuardEnforcement.BOTH}

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "severity": self.severity.value,
            "enforcement": self.enforcement.value,
            "violations": [item.to_dict() for item in self.violations],
        }


def _require_regex(payload: Mapping[str, object], path: str) -> str:
    pattern = require_str(payload, "pattern", path)
    try:
        re.compile(pattern)
    except re.error as exc:
        raise SchemaValidationError(child_path(path, "pattern"), f"invalid regex: {exc}") from exc
    return pattern


def _parse_matcher(payload: Mapping[str, object], path: str) -> ViolationMatcher:
    comparison = optional_mapping(payload, "comparison", path)
    comparison_path = child_path(path, "comparison")
    git_status = optional_str(payload, "gitStatus", path)
    return ViolationMatcher(
        imports=tuple(
            ScopedImport(
                source=require_str(item, "from", item_path),
                within=optional_str(item, "in", item_path),
                not_within=optional_str(item, "notIn", item_path),
            )
            for item_path, item in mapping_tuple(payload, "imports", path)
        ),
        identifiers=tuple(
            ScopedIdentifier(
                pattern=_require_regex(item, item_path),
                description=optional_str(item, "description", item_path),
                within=optional_str(item, "in", item_path),
                not_within=optional_str(item, "notIn", item_path),
                matching=optional_str(item, "matching", item_path),
            )
            for item_path, item in mapping_tuple(payload, "identifiers", path)
        ),
        file_patterns=tuple(
            FilePattern(
                pattern=require_str(item, "pattern", item_path),
                exclude=optional_str(item, "exclude", item_path),
            )
            for item_path, item in mapping_tuple(payload, "filePatterns", path)
        ),
        git_status=None
        if git_status is None
        else GitStatus(choice(payload, "gitStatus", path, _values(GitStatus))),
        not_in=optional_str(payload, "notIn", path),
        not_generated_by=optional_str(payload, "notGeneratedBy", path),
        missing=optional_str(payload, "missing", path),
        scope=optional_str(payload, "scope", path),
        semantic=optional_str(payload, "semantic", path),
        comparison=tuple(
            (key, require_str(comparison, key, comparison_path))
            for key in ("form", "act", "check")
        )
        if comparison
        else (),
    )


def _parse_invariant(payload: Mapping[str, object], path: str) -> GuardInvariant:
    invariant_id = require_str(payload, "id", path)
    if GUARD_INVARIANT_ID_PATTERN.fullmatch(invariant_id) is None:
        raise SchemaValidationError(
            child_path(path, "id"),
            f"invalid guard invariant id {invariant_id!r} (expected CATEGORY.CODE_NAME)",
        )
    return GuardInvariant(
        id=invariant_id,
        name=require_str(payload, "name", path),
        description=require_str(payload, "description", path),
        severity=GuardSeverity(choice(payload, "severity", path, _values(GuardSeverity))),
        enforcement=GuardEnforcement(
            choice(payload, "enforcement", path, _values(GuardEnforcement))
        ),
        violations=tuple(
            ViolationPattern(
                pattern=require_str(item, "pattern", item_path),
                matcher=_parse_matcher(
                    optional_mapping(item, "matcher", item_path), child_path(item_path, "matcher")
                ),
                telos_violated=require_str(item, "telosViolated", item_path),
                resolution_steps=string_tuple(item, "resolutionSteps", item_path, min_items=1),
            )
            for item_path, item in mapping_tuple(payload, "violations", path, min_items=1)
        ),
    )


@dataclass(frozen=True, slots=True)
class PurityGuardSpec:
    guard_type: GuardType
    version: str
    invariants: tuple[GuardInvariant, ...]
    description: str | None = None
    last_updated: str | None = None

    @classmethod
    def from_document(cls, payload: object, source: GuardSource) -> PurityGuardSpec:
        root = require_root(payload, source.root_key)
        metadata = optional_mapping(root, "metadata", source.root_key)
        metadata_path = child_path(source.root_key, "metadata")
        return cls(
            guard_type=source.guard_type,
            version=require_str(metadata, "version", metadata_path),
            description=optional_str(metadata, "description", metadata_path),
            last_updated=optional_str(metadata, "lastUpdated", metadata_path),
            invariants=tuple(
                _parse_invariant(item, item_path)
                for item_path, item in mapping_tuple(
                    root, "invariants", source.root_key, min_items=1
                )
            ),
        )


def load_purity_guard(path: Path, source: GuardSource) -> PurityGuardSpec:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    return PurityGuardSpec.from_document(payload, source)


@dataclass(frozen=True, slots=True)
class PurityGuardDescriptor:
    guard_type: GuardType
    version: str
    description: str | None
    last_updated: str | None
    invariants: tuple[GuardInvariant, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "guard_type": self.guard_type.value,
            "metadata": {
                "version": self.version,
                "description": self.description,
                "last_updated": self.last_updated,
            },
            "invariants": [item.to_dict() for item in self.invariants],
        }


def canonicalize_purity_guard(spec: PurityGuardSpec) -> PurityGuardDescriptor:
    seen: set[str] = set()
    for invariant in spec.invariants:
        if invariant.id in seen:
            raise CanonicalizationError(
                f'Duplicate invariant id "{invariant.id}" in {spec.guard_type.value} purity guard'
            )
        seen.add(invariant.id)
    return PurityGuardDescriptor(
        guard_type=spec.guard_type,
        version=spec.version,
        description=spec.description,
        last_updated=spec.last_updated,
        invariants=spec.invariants,
    )


__all__ = [
    "GUARD_INVARIANT_ID_PATTERN",
    "GUARD_SOURCES",
    "FilePattern",
    "GitStatus",
    "GuardEnforcement",
    "GuardInvariant",
    "GuardSeverity",
    "GuardSource",
    "GuardType",
    "PurityGuardDescriptor",
    "PurityGuardSpec",
    "ScopedIdentifier",
    "ScopedImport",
    "ViolationMatcher",
    "ViolationPattern",
    "canonicalize_purity_guard",
    "load_purity_guard",
]
