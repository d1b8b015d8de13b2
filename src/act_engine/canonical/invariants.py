"""
act-engine - invariant blocks shared by every canonical descriptor

File: src/act_engine/canonical/invariants.py
Last updated: 2026-10-19

Purpose
- Parse the ``invariants: {invariants: [...], enforceAt: ...}`` block found on every FORM input.
- Resolve declared ids against the injected invariant registry and derive enforcement layers.

Functional requirements
- ``enforceAt`` defaults to ``both``; layer mapping is build -> ACT, runtime -> RUNTIME,
  both -> BOTH.
- An id missing from the registry raises ``UnknownReferenceError`` with the message
  ``Invariant <id> not found in registry``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from act_engine.domain.errors import UnknownReferenceError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.domain.parsing import as_mapping, child_path, choice, string_tuple


class EnforceAt(StrEnum):
    BUILD = "build"
    RUNTIME = "runtime"
    BOTH = "both"


class EnforcementLayer(StrEnum):
    ACT = "ACT"
    RUNTIME = "RUNTIME"
    BOTH = "BOTH"


_LAYER_BY_ENFORCE_AT: Final[Mapping[EnforceAt, EnforcementLayer]] = {
    EnforceAt.BUILD: EnforcementLayer.ACT,
    EnforceAt.RUNTIME: EnforcementLayer.RUNTIME,
    EnforceAt.BOTH: EnforcementLayer.BOTH,
}

_ENFORCE_AT_VALUES: Final[tuple[str, ...]] = tuple(item.value for item in EnforceAt)


def layer_for(enforce_at: EnforceAt) -> EnforcementLayer:
    return _LAYER_BY_ENFORCE_AT[enforce_at]


@dataclass(frozen=True, slots=True)
class InvariantsSpec:
    invariants: tuple[str, ...] = ()
    enforce_at: EnforceAt = EnforceAt.BOTH

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str) -> InvariantsSpec:
        return cls(
            invariants=string_tuple(payload, "invariants", path),
            enforce_at=EnforceAt(
                choice(payload, "enforceAt", path, _ENFORCE_AT_VALUES, EnforceAt.BOTH.value)
            ),
        )

    @classmethod
    def optional(cls, payload: Mapping[str, object], key: str, path: str) -> InvariantsSpec:
        """Parse ``payload[key]`` when present, else return the empty block."""

        value = payload.get(key)
        if value is None:
            return cls()
        location = child_path(path, key)
        return cls.from_mapping(as_mapping(value, location), location)


@dataclass(frozen=True, slots=True)
class EnforcedInvariant:
    id: str
    enforce_at: EnforceAt
    layer: EnforcementLayer

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "enforce_at": self.enforce_at.value, "layer": self.layer.value}


@dataclass(frozen=True, slots=True)
class InvariantsBlock:
    declared: tuple[str, ...] = ()
    enforced: tuple[EnforcedInvariant, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "declared": list(self.declared),
            "enforced": [item.to_dict() for item in self.enforced],
        }


def resolve_invariant(invariant_id: str, registry: InvariantRegistry) -> None:
    if registry.get(invariant_id) is None:
        raise UnknownReferenceError(
            f"Invariant {invariant_id} not found in registry",
            kind="invariant",
            reference=invariant_id,
        )


def canonicalize_invariants(
    spec: InvariantsSpec, registry: InvariantRegistry | None
) -> InvariantsBlock:
    """Return the canonical block; every id must resolve when a registry is supplied."""

    declared = tuple(dict.fromkeys(spec.invariants))
    if registry is not None:
        for invariant_id in declared:
            resolve_invariant(invariant_id, registry)
    layer = layer_for(spec.enforce_at)
    return InvariantsBlock(
        declared=declared,
        enforced=tuple(
            EnforcedInvariant(id=invariant_id, enforce_at=spec.enforce_at, layer=layer)
            for invariant_id in declared
        ),
    )


__all__ = [
    "EnforceAt",
    "EnforcedInvariant",
    "EnforcementLayer",
    "InvariantsBlock",
    "InvariantsSpec",
    "canonicalize_invariants",
    "layer_for",
    "resolve_invariant",
]
