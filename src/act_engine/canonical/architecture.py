"""
act-engine - architecture rule descriptors

File: src/act_engine/canonical/architecture.py
Last updated: 2026-10-19

Purpose
- Parse ``architectureRules:`` documents and canonicalize each rule into a matcher-ready descriptor.

Functional requirements
- Rule ids match ``ARCHITECTURE.F<digits>_<UPPER_SNAKE>``; anything else is a schema error.
- Every rule carries at least one resolution hint.
- Rule ids are unique per document.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Final

import yaml

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.domain.interfaces import InvariantRegistry
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

RULE_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^ARCHITECTURE\.F\d+_[A-Z_]+$")


class RuleScope(StrEnum):
    UI = "ui"
    BACKEND = "backend"
    BOTH = "both"


class RuleLayer(StrEnum):
    BUILD = "build"
    RUNTIME = "runtime"
    BOTH = "both"


class RuleSeverity(StrEnum):
    ERROR = "error"
    WARN = "warn"


class DevtoolsCategory(StrEnum):
    ARCHITECTURE = "architecture"
    UI = "ui"
    BACKEND = "backend"


@dataclass(frozen=True, slots=True)
class ImportMatcher:
    source: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class IdentifierMatcher:
    pattern: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class ArchitectureRule:
    id: str
    description: str
    telos_violated: str
    resolution_hint: tuple[str, ...]
    scope: RuleScope = RuleScope.BOTH
    layer: RuleLayer = RuleLayer.BUILD
    severity: RuleSeverity = RuleSeverity.ERROR
    imports: tuple[ImportMatcher, ...] = ()
    identifiers: tuple[IdentifierMatcher, ...] = ()
    exclude_paths: tuple[str, ...] = ()
    devtools_category: DevtoolsCategory = DevtoolsCategory.ARCHITECTURE

    @property
    def checked_at_build(self) -> bool:
        return self.layer in {RuleLayer.BUILD, RuleLayer.BOTH}

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "description": self.description,
            "scope": self.scope.value,
            "layer": self.layer.value,
            "severity": self.severity.value,
            "matchers": {
                "imports": [
                    {"from": item.source, "description": item.description} for item in self.imports
                ],
                "identifiers": [
                    {"pattern": item.pattern, "description": item.description}
                    for item in self.identifiers
                ],
            },
            "exclude_paths": list(self.exclude_paths),
            "telos_violated": self.telos_violated,
            "resolution_hint": list(self.resolution_hint),
            "devtools_category": self.devtools_category.value,
        }


def _enum_values(enum_type: type[StrEnum]) -> tuple[str, ...]:
    return tuple(item.value for item in enum_type)


def _parse_rule(payload: Mapping[str, object], path: str) -> ArchitectureRule:
    rule_id = require_str(payload, "id", path)
    if RULE_ID_PATTERN.fullmatch(rule_id) is None:
        raise SchemaValidationError(
            child_path(path, "id"),
            f"invalid architecture rule id {rule_id!r} (expected ARCHITECTURE.F<n>_<NAME>)",
        )
    matchers = optional_mapping(payload, "matchers", path)
    matchers_path = child_path(path, "matchers")
    return ArchitectureRule(
        id=rule_id,
        description=require_str(payload, "description", path),
        telos_violated=require_str(payload, "telosViolated", path),
        resolution_hint=string_tuple(payload, "resolutionHint", path, min_items=1),
        scope=RuleScope(choice(payload, "scope", path, _enum_values(RuleScope), RuleScope.BOTH.value)),
        layer=RuleLayer(choice(payload, "layer", path, _enum_values(RuleLayer), RuleLayer.BUILD.value)),
        severity=RuleSeverity(
            choice(payload, "severity", path, _enum_values(RuleSeverity), RuleSeverity.ERROR.value)
        ),
        imports=tuple(
            ImportMatcher(
                source=require_str(item, "from", item_path),
                description=optional_str(item, "description", item_path, "") or "",
            )
            for item_path, item in mapping_tuple(matchers, "imports", matchers_path)
        ),
        identifiers=tuple(
            IdentifierMatcher(
                pattern=_require_regex(item, item_path),
                description=optional_str(item, "description", item_path, "") or "",
            )
            for item_path, item in mapping_tuple(matchers, "identifiers", matchers_path)
        ),
        exclude_paths=string_tuple(payload, "excludePaths", path),
        devtools_category=DevtoolsCategory(
            choice(
                payload,
                "devtoolsCategory",
                path,
                _enum_values(DevtoolsCategory),
                DevtoolsCategory.ARCHITECTURE.value,
            )
        ),
    )


def _require_regex(payload: Mapping[str, object], path: str) -> str:
    pattern = require_str(payload, "pattern", path)
    try:
        re.compile(pattern)
    except re.error as exc:
        raise SchemaValidationError(child_path(path, "pattern"), f"invalid regex: {exc}") from exc
    return pattern


@dataclass(frozen=True, slots=True)
class ArchitectureRulesSpec:
    version: str
    rules: tuple[ArchitectureRule, ...]
    description: str = ""
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)

    @classmethod
    def from_document(cls, payload: object) -> ArchitectureRulesSpec:
        return cls.from_mapping(require_root(payload, "architectureRules"), "architectureRules")

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, object], path: str = "architectureRules"
    ) -> ArchitectureRulesSpec:
        metadata = optional_mapping(payload, "metadata", path)
        metadata_path = child_path(path, "metadata")
        return cls(
            version=require_str(metadata, "version", metadata_path),
            description=optional_str(metadata, "description", metadata_path, "") or "",
            rules=tuple(
                _parse_rule(item, item_path)
                for item_path, item in mapping_tuple(payload, "rules", path, min_items=1)
            ),
            invariants=InvariantsSpec.optional(payload, "invariants", path),
        )


def load_architecture_rules(path: Path) -> ArchitectureRulesSpec:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    return ArchitectureRulesSpec.from_document(payload)


@dataclass(frozen=True, slots=True)
class ArchitectureRulesDescriptor:
    version: str
    description: str
    rules: tuple[ArchitectureRule, ...]
    invariants: InvariantsBlock

    def to_dict(self) -> dict[str, object]:
        return {
            "metadata": {"version": self.version, "description": self.description},
            "rules": [rule.to_dict() for rule in self.rules],
            "invariants": self.invariants.to_dict(),
        }


def canonicalize_architecture_rules(
    spec: ArchitectureRulesSpec, registry: InvariantRegistry | None = None
) -> ArchitectureRulesDescriptor:
    seen: set[str] = set()
    for rule in spec.rules:
        if rule.id in seen:
            raise CanonicalizationError(f'Duplicate architecture rule id "{rule.id}"')
        seen.add(rule.id)
    return ArchitectureRulesDescriptor(
        version=spec.version,
        description=spec.description,
        rules=spec.rules,
        invariants=canonicalize_invariants(spec.invariants, registry),
    )


def glob_to_regex(pattern: str) -> str:
    """``**`` matches anything, ``*`` matches within one path segment."""

    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return "".join(parts)


__all__ = [
    "RULE_ID_PATTERN",
    "ArchitectureRule",
    "ArchitectureRulesDescriptor",
    "ArchitectureRulesSpec",
    "DevtoolsCategory",
    "IdentifierMatcher",
    "ImportMatcher",
    "RuleLayer",
    "RuleScope",
    "RuleSeverity",
    "canonicalize_architecture_rules",
    "glob_to_regex",
    "load_architecture_rules",
]
