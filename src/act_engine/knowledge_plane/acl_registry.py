"""
act-engine - YAML-backed ACL role hierarchy and action registry

File: src/act_engine/knowledge_plane/acl_registry.py
Last updated: 2026-10-19

Purpose
- Compile ``acl.yaml`` role declarations into transitive action sets.
- Answer action-id validity queries for ACL and functional-binding checks.

Functional requirements
- Unknown parent roles and inheritance cycles are reported as compiler warnings, not raised.
- Roles that exclude each other but end up combined are reported as conflicts.
- Roles with identical transitive action sets are reported as redundant.
- An action id is valid iff it is declared and matches ``^[A-Z][A-Z0-9_]*$``.

Non-functional requirements
- Output ordering is deterministic (sorted role and action names).
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, TypeAlias

import yaml

from act_engine.domain.interfaces import AclCompilation, CompiledRole, RoleConflict
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    coerce_str,
    optional_mapping,
    string_tuple,
)

PathLike: TypeAlias = str | os.PathLike[str]

ACTION_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Z][A-Z0-9_]*$")


@dataclass(frozen=True, slots=True)
class RoleDefinition:
    name: str
    actions: tuple[str, ...] = ()
    inherits: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


class YamlAclRegistry:
    """Role hierarchy compiler and action registry over one ACL document."""

    __slots__ = ("_actions", "_roles", "_source_path")

    def __init__(
        self,
        *,
        actions: Sequence[str],
        roles: Sequence[RoleDefinition],
        source_path: Path | None = None,
    ) -> None:
        self._actions = tuple(dict.fromkeys(actions))
        by_name: dict[str, RoleDefinition] = {}
        for role in roles:
            if role.name in by_name:
                raise ValueError(f"duplicate role name: {role.name!r}")
            by_name[role.name] = role
        self._roles = by_name
        self._source_path = source_path

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    @property
    def roles(self) -> tuple[RoleDefinition, ...]:
        return tuple(self._roles[name] for name in sorted(self._roles))

    @classmethod
    def load(cls, path: PathLike) -> YamlAclRegistry:
        source = Path(path).expanduser()
        if not source.is_file():
            raise FileNotFoundError(f"ACL definition file does not exist: {source}")
        with source.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
        return cls.from_mapping(payload if payload is not None else {}, source_path=source)

    @classmethod
    def from_mapping(
        cls, payload: object, *, source_path: Path | None = None
    ) -> YamlAclRegistry:
        document = as_mapping(payload, "acl")
        actions = string_tuple(document, "actions", "acl")
        roles_raw = optional_mapping(document, "roles", "acl")
        roles: list[RoleDefinition] = []
        for role_name in sorted(roles_raw):
            role_path = child_path("acl.roles", role_name)
            name = coerce_str(role_name, role_path)
            body = as_mapping(roles_raw[role_name] or {}, role_path)
            roles.append(
                RoleDefinition(
                    name=name,
                    actions=string_tuple(body, "actions", role_path),
                    inherits=string_tuple(body, "inherits", role_path),
                    excludes=string_tuple(body, "excludes", role_path),
                )
            )
        return cls(actions=actions, roles=roles, source_path=source_path)

    # ActionRegistry -----------------------------------------------------

    def get_all_action_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self._actions))

    def validate_action_id(self, action_id: str) -> bool:
        if action_id not in self._actions:
            return False
        return ACTION_ID_PATTERN.fullmatch(action_id) is not None

    # AclCompiler --------------------------------------------------------

    def compile_roles(self) -> AclCompilation:
        warnings: list[str] = []
        ancestry: dict[str, tuple[str, ...]] = {}
        for name in sorted(self._roles):
            ancestry[name] = self._ancestors(name, warnings)

        compiled: dict[str, CompiledRole] = {}
        for name, lineage in ancestry.items():
            direct = tuple(dict.fromkeys(self._roles[name].actions))
            transitive: set[str] = set()
            for member in lineage:
                transitive.update(self._roles[member].actions)
            compiled[name] = CompiledRole(
                direct_actions=direct,
                transitive_actions=tuple(sorted(transitive)),
            )

        return AclCompilation(
            compiled=compiled,
            conflicts=self._conflicts(ancestry),
            redundant=_redundant_roles(compiled),
            warnings=tuple(dict.fromkeys(warnings)),
        )

    def _ancestors(self, name: str, warnings: list[str]) -> tuple[str, ...]:
        """Return ``name`` plus every role it inherits from, in discovery order."""

        ordered: list[str] = []
        visiting: list[str] = []

        def visit(current: str) -> None:
            if current in visiting:
                cycle = " -> ".join([*visiting[visiting.index(current) :], current])
                warnings.append(f"Role inheritance cycle detected: {cycle}")
                return
            if current in ordered:
                return
            visiting.append(current)
            ordered.append(current)
            for parent in self._roles[current].inherits:
                if parent not in self._roles:
                    warnings.append(f'Role "{current}" inherits unknown role "{parent}"')
                    continue
                visit(parent)
            visiting.pop()

        visit(name)
        return tuple(ordered)

    def _conflicts(self, ancestry: Mapping[str, tuple[str, ...]]) -> tuple[RoleConflict, ...]:
        found: dict[tuple[str, str], RoleConflict] = {}
        for holder, lineage in ancestry.items():
            held = set(lineage)
            for member in lineage:
                for excluded in self._roles[member].excludes:
                    if excluded not in held:
                        continue
                    role_a, role_b = sorted((member, excluded))
                    found.setdefault(
                        (role_a, role_b),
                        RoleConflict(
                            role_a=role_a,
                            role_b=role_b,
                            reason=f'mutually exclusive roles combined in "{holder}"',
                        ),
                    )
        return tuple(found[key] for key in sorted(found))


def _redundant_roles(compiled: Mapping[str, CompiledRole]) -> tuple[str, ...]:
    groups: dict[tuple[str, ...], list[str]] = {}
    for name, role in compiled.items():
        if not role.transitive_actions:
            continue
        groups.setdefault(role.transitive_actions, []).append(name)
    redundant = {name for members in groups.values() if len(members) > 1 for name in members}
    return tuple(sorted(redundant))


__all__ = ["ACTION_ID_PATTERN", "RoleDefinition", "YamlAclRegistry"]
