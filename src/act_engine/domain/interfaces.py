"""
act-engine - collaborator interfaces

File: src/act_engine/domain/interfaces.py
Last updated: 2026-10-19

Purpose
- Narrow, explicitly injected seams between the pipeline core and the subsystems it consults.

Functional requirements
- Collaborators are resolved once by the hosting application and passed in; nothing
  here loads modules by path or reads ambient global registries.
- The value types returned across these seams are immutable.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from act_engine.domain.contracts import ContractDefinition


@dataclass(frozen=True, slots=True)
class InvariantMetadata:
    id: str
    category: str
    code: str
    name: str = ""
    description: str = ""
    enforce: str | None = None


@dataclass(frozen=True, slots=True)
class InvariantEntry:
    metadata: InvariantMetadata

    @property
    def id(self) -> str:
        return self.metadata.id


@dataclass(frozen=True, slots=True)
class CompiledRole:
    direct_actions: tuple[str, ...]
    transitive_actions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RoleConflict:
    role_a: str
    role_b: str
    reason: str


@dataclass(frozen=True, slots=True)
class AclCompilation:
    """Result of compiling the role hierarchy into transitive action sets."""

    compiled: Mapping[str, CompiledRole] = field(default_factory=lambda: MappingProxyType({}))
    conflicts: tuple[RoleConflict, ...] = ()
    redundant: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        ordered = {role: self.compiled[role] for role in sorted(self.compiled)}
        object.__setattr__(self, "compiled", MappingProxyType(ordered))


@runtime_checkable
class ContractProvider(Protocol):
    def load_contracts(self) -> Sequence[ContractDefinition]: ...


@runtime_checkable
class InvariantRegistry(Protocol):
    def get_all_invariant_ids(self) -> Sequence[str]: ...

    def get(self, invariant_id: str) -> InvariantEntry | None: ...


@runtime_checkable
class AclCompiler(Protocol):
    def compile_roles(self) -> AclCompilation: ...


@runtime_checkable
class ActionRegistry(Protocol):
    def validate_action_id(self, action_id: str) -> bool: ...

    def get_all_action_ids(self) -> Sequence[str]: ...


class ContractValidator(Protocol):
    def __call__(self, contracts: Sequence[ContractDefinition]) -> None: ...


__all__ = [
    "AclCompilation",
    "AclCompiler",
    "ActionRegistry",
    "CompiledRole",
    "ContractProvider",
    "ContractValidator",
    "InvariantEntry",
    "InvariantMetadata",
    "InvariantRegistry",
    "RoleConflict",
]
