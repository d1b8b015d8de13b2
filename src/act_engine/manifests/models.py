"""
act-engine - manifest models

File: src/act_engine/manifests/models.py
Last updated: 2026-10-19

Purpose
- Immutable snapshot of everything a pipeline run will read and produce.

What should be included in this file
- Per-contract derived artifact paths (keys, not content).
- Discovered form inputs with their section ids and field names.
- Invariant registry and ACL summaries.

Functional requirements
- Built once before any phase runs; never mutated afterwards.
- ``to_dict`` output is deterministic for identical inputs and clock.

Non-functional requirements
- Tuples and read-only mappings only, so phases can share a manifest safely.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Final

ARTIFACT_KINDS: Final[tuple[str, ...]] = ("shared", "migration", "service", "route", "test")


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """One expected generated file, labelled for reporting."""

    kind: str
    path: Path
    source: str

    @property
    def label(self) -> str:
        return f"{self.kind} artifact for {self.source}"


@dataclass(frozen=True, slots=True)
class ContractManifest:
    name: str
    domain: str
    metadata_path: Path
    shared_path: Path
    test_path: Path
    migration_path: Path | None = None
    service_path: Path | None = None
    route_path: Path | None = None

    def artifacts(self) -> tuple[ArtifactRef, ...]:
        """Generated artifacts in fixed kind order; absent ones are left out."""

        candidates = (
            ("shared", self.shared_path),
            ("migration", self.migration_path),
            ("service", self.service_path),
            ("route", self.route_path),
            ("test", self.test_path),
        )
        return tuple(
            ArtifactRef(kind=kind, path=path, source=self.name)
            for kind, path in candidates
            if path is not None
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "domain": self.domain,
            "metadata": self.metadata_path.as_posix(),
            "artifacts": {ref.kind: ref.path.as_posix() for ref in self.artifacts()},
        }


@dataclass(frozen=True, slots=True)
class FormManifest:
    contract: str
    variant: str
    yaml_path: Path
    output_path: Path
    sections: tuple[str, ...] = ()
    fields: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.contract}.{self.variant}"

    def artifact(self) -> ArtifactRef:
        return ArtifactRef(kind="form", path=self.output_path, source=self.key)

    def to_dict(self) -> dict[str, object]:
        return {
            "contract": self.contract,
            "variant": self.variant,
            "yaml": self.yaml_path.as_posix(),
            "output": self.output_path.as_posix(),
            "sections": list(self.sections),
            "fields": list(self.fields),
        }


@dataclass(frozen=True, slots=True)
class InvariantManifestSummary:
    registry_path: Path
    mapping_path: Path
    invariant_count: int = 0
    categories: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(sorted(set(self.categories))))

    def artifact(self) -> ArtifactRef:
        return ArtifactRef(kind="invariant-mapping", path=self.mapping_path, source="invariants")

    def to_dict(self) -> dict[str, object]:
        return {
            "registry": self.registry_path.as_posix(),
            "mapping": self.mapping_path.as_posix(),
            "invariant_count": self.invariant_count,
            "categories": list(self.categories),
        }


@dataclass(frozen=True, slots=True)
class AclManifest:
    roles: tuple[str, ...] = ()
    actions: tuple[str, ...] = ()
    role_actions: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", tuple(sorted(set(self.roles))))
        object.__setattr__(self, "actions", tuple(sorted(set(self.actions))))
        ordered = {
            role: tuple(sorted(set(self.role_actions[role]))) for role in sorted(self.role_actions)
        }
        object.__setattr__(self, "role_actions", MappingProxyType(ordered))

    def to_dict(self) -> dict[str, object]:
        return {
            "roles": list(self.roles),
            "actions": list(self.actions),
            "role_actions": {role: list(actions) for role, actions in self.role_actions.items()},
        }


@dataclass(frozen=True, slots=True)
class Manifest:
    contracts: tuple[ContractManifest, ...]
    forms: tuple[FormManifest, ...]
    invariants: InvariantManifestSummary
    acl: AclManifest
    generated_at: datetime

    def __post_init__(self) -> None:
        if self.generated_at.tzinfo is None:
            raise ValueError("Manifest.generated_at must be timezone-aware")
        object.__setattr__(self, "generated_at", self.generated_at.astimezone(UTC))

    def contract(self, name: str) -> ContractManifest | None:
        for item in self.contracts:
            if item.name == name:
                return item
        return None

    def forms_for(self, contract: str) -> tuple[FormManifest, ...]:
        return tuple(item for item in self.forms if item.contract == contract)

    def expected_artifacts(self) -> tuple[ArtifactRef, ...]:
        """Every file a full generation run is expected to produce, in manifest order."""

        refs: list[ArtifactRef] = []
        for contract in self.contracts:
            refs.extend(contract.artifacts())
        refs.extend(form.artifact() for form in self.forms)
        refs.append(self.invariants.artifact())
        return tuple(refs)

    def to_dict(self) -> dict[str, object]:
        return {
            "generated_at": self.generated_at.isoformat().replace("+00:00", "Z"),
            "contracts": [item.to_dict() for item in self.contracts],
            "forms": [item.to_dict() for item in self.forms],
            "invariants": self.invariants.to_dict(),
            "acl": self.acl.to_dict(),
        }


__all__ = [
    "ARTIFACT_KINDS",
    "AclManifest",
    "ArtifactRef",
    "ContractManifest",
    "FormManifest",
    "InvariantManifestSummary",
    "Manifest",
]
