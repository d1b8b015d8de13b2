"""
act-engine - command palette descriptors

File: src/act_engine/canonical/commands.py
Last updated: 2026-10-19

Purpose
- Parse ``commands.yaml`` (a top-level ``commands:`` list) into command specs.
- Canonicalize commands and their hotkeys, collecting per-command findings instead of
  stopping at the first bad command.
- Check capabilities against the action registry and intent bindings against the intent graph.

Functional requirements
- Command ids are unique; a duplicate is an error and the later command is dropped.
- Hotkeys are ``[modifier+]...key`` with modifiers ``mod``, ``ctrl``, ``alt``, ``shift``, ``meta``.
- A hotkey bound twice is a warning naming the first command that claimed it.
- Commands outside ``system``/``debug`` without a mutation or navigation binding are warned about.
- Only ``domain`` scope commands may bind an intent, and a bound intent must exist in the graph.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Final

import yaml

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.errors import SchemaValidationError
from act_engine.domain.interfaces import ActionRegistry, InvariantRegistry
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    choice,
    mapping_tuple,
    optional_bool,
    optional_mapping,
    optional_str,
    require_str,
)

HOTKEY_MODIFIERS: Final[frozenset[str]] = frozenset({"mod", "ctrl", "alt", "shift", "meta"})
HTTP_METHODS: Final[tuple[str, ...]] = ("GET", "POST", "PUT", "DELETE", "PATCH")
UI_ONLY_CATEGORIES: Final[frozenset[str]] = frozenset({"system", "debug"})


class CommandCategory(StrEnum):
    WORKSPACE = "workspace"
    NAVIGATION = "navigation"
    SYSTEM = "system"
    DEBUG = "debug"


class CommandScope(StrEnum):
    DOMAIN = "domain"
    NAVIGATION = "navigation"
    SYSTEM = "system"
    DEVTOOLS = "devtools"


class MutationKind(StrEnum):
    INTENT = "intent"
    CONTRACT_ENDPOINT = "contractEndpoint"


class NavigationAction(StrEnum):
    BACK = "back"
    FORWARD = "forward"


class AvailabilityContext(StrEnum):
    WORKSPACE = "workspace"
    DASHBOARD = "dashboard"
    GLOBAL = "global"


class IssueLevel(StrEnum):
    ERROR = "error"
    WARNING = "warning"


def _values(enum_type: type[StrEnum]) -> tuple[str, ...]:
    return tuple(item.value for item in enum_type)


@dataclass(frozen=True, slots=True)
class HotkeySpec:
    key: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CommandMutation:
    kind: MutationKind
    intent_id: str | None = None
    contract: str | None = None
    endpoint: str | None = None
    method: str | None = None

    def to_dict(self) -> dict[str, object]:
        if self.kind is MutationKind.INTENT:
            return {"type": self.kind.value, "intent_id": self.intent_id}
        return {
            "type": self.kind.value,
            "contract": self.contract,
            "endpoint": self.endpoint,
            "method": self.method,
        }


@dataclass(frozen=True, slots=True)
class NavigationBinding:
    route: str | None = None
    action: NavigationAction | None = None


@dataclass(frozen=True, slots=True)
class AvailabilityCondition:
    context: AvailabilityContext
    when: str | None = None


@dataclass(frozen=True, slots=True)
class CommandSpec:
    id: str
    label: str
    category: CommandCategory
    scope: CommandScope
    capability: str
    description: str | None = None
    requires_intent: bool = False
    must_exist_in_intent_graph: bool = False
    mutation: CommandMutation | None = None
    navigation: NavigationBinding | None = None
    hotkeys: tuple[HotkeySpec, ...] = ()
    availability: tuple[AvailabilityCondition, ...] = ()

    @property
    def intent_id(self) -> str | None:
        if self.mutation is not None and self.mutation.kind is MutationKind.INTENT:
            return self.mutation.intent_id
        return None


def _parse_mutation(payload: Mapping[str, object], path: str) -> CommandMutation | None:
    raw = payload.get("mutation")
    if raw is None:
        return None
    location = child_path(path, "mutation")
    mutation = as_mapping(raw, location)
    kind = MutationKind(choice(mutation, "type", location, _values(MutationKind)))
    if kind is MutationKind.INTENT:
        return CommandMutation(kind=kind, intent_id=require_str(mutation, "intentId", location))
    return CommandMutation(
        kind=kind,
        contract=require_str(mutation, "contract", location),
        endpoint=require_str(mutation, "endpoint", location),
        method=choice(mutation, "method", location, HTTP_METHODS),
    )


def _parse_navigation(payload: Mapping[str, object], path: str) -> NavigationBinding | None:
    if payload.get("navigation") is None:
        return None
    navigation = optional_mapping(payload, "navigation", path)
    location = child_path(path, "navigation")
    action = navigation.get("action")
    return NavigationBinding(
        route=optional_str(navigation, "route", location),
        action=None
        if action is None
        else NavigationAction(choice(navigation, "action", location, _values(NavigationAction))),
    )


def _parse_command(payload: Mapping[str, object], path: str) -> CommandSpec:
    return CommandSpec(
        id=require_str(payload, "id", path),
        label=require_str(payload, "label", path),
        description=optional_str(payload, "description", path),
        category=CommandCategory(choice(payload, "category", path, _values(CommandCategory))),
        scope=CommandScope(choice(payload, "scope", path, _values(CommandScope))),
        requires_intent=optional_bool(payload, "requiresIntent", path, False),
        must_exist_in_intent_graph=optional_bool(payload, "mustExistInIntentGraph", path, False),
        capability=require_str(payload, "capability", path),
        mutation=_parse_mutation(payload, path),
        navigation=_parse_navigation(payload, path),
        hotkeys=tuple(
            HotkeySpec(
                key=require_str(item, "key", item_path),
                description=optional_str(item, "description", item_path),
            )
            for item_path, item in mapping_tuple(payload, "hotkeys", path)
        ),
        availability=tuple(
            AvailabilityCondition(
                context=AvailabilityContext(
                    choice(item, "context", item_path, _values(AvailabilityContext))
                ),
                when=optional_str(item, "when", item_path),
            )
            for item_path, item in mapping_tuple(payload, "availability", path)
        ),
    )


@dataclass(frozen=True, slots=True)
class CommandsSpec:
    commands: tuple[CommandSpec, ...] = ()
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)

    @classmethod
    def from_document(cls, payload: object) -> CommandsSpec:
        document = as_mapping(payload, "")
        if "commands" not in document:
            raise SchemaValidationError("commands", "required top-level key is missing")
        return cls(
            commands=tuple(
                _parse_command(item, item_path)
                for item_path, item in mapping_tuple(document, "commands", "")
            ),
            invariants=InvariantsSpec.optional(document, "invariants", ""),
        )


def load_commands(path: Path) -> CommandsSpec:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    return CommandsSpec.from_document(payload)


def hotkey_format_error(key: str) -> str | None:
    """Return why ``key`` is not a valid hotkey, or ``None`` when it is."""

    parts = key.lower().split("+")
    for modifier in parts[:-1]:
        if modifier not in HOTKEY_MODIFIERS:
            return f"Invalid modifier: {modifier}"
    if not parts[-1]:
        return "Missing key after modifiers"
    return None


@dataclass(frozen=True, slots=True)
class CommandIssue:
    command_id: str
    field: str
    message: str
    level: IssueLevel = IssueLevel.ERROR

    def __str__(self) -> str:
        return f'Command "{self.command_id}": {self.field} - {self.message}'


@dataclass(frozen=True, slots=True)
class HotkeyBinding:
    key: str
    command_id: str
    description: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"key": self.key, "command_id": self.command_id, "description": self.description}


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    spec: CommandSpec
    hotkeys: tuple[HotkeyBinding, ...]

    @property
    def id(self) -> str:
        return self.spec.id

    def to_dict(self) -> dict[str, object]:
        spec = self.spec
        navigation = spec.navigation
        return {
            "id": spec.id,
            "label": spec.label,
            "description": spec.description,
            "category": spec.category.value,
            "scope": spec.scope.value,
            "capability": spec.capability,
            "mutation": spec.mutation.to_dict() if spec.mutation is not None else None,
            "navigation": None
            if navigation is None
            else {
                "route": navigation.route,
                "action": navigation.action.value if navigation.action is not None else None,
            },
            "hotkeys": [binding.to_dict() for binding in self.hotkeys],
            "availability": [
                {"context": item.context.value, "when": item.when} for item in spec.availability
            ],
        }


@dataclass(frozen=True, slots=True)
class CommandsDescriptor:
    commands: tuple[CommandDescriptor, ...]
    hotkeys: tuple[HotkeyBinding, ...]
    invariants: InvariantsBlock
    issues: tuple[CommandIssue, ...] = ()

    @property
    def errors(self) -> tuple[CommandIssue, ...]:
        return tuple(issue for issue in self.issues if issue.level is IssueLevel.ERROR)

    @property
    def warnings(self) -> tuple[CommandIssue, ...]:
        return tuple(issue for issue in self.issues if issue.level is IssueLevel.WARNING)

    def to_dict(self) -> dict[str, object]:
        return {
            "commands": [command.to_dict() for command in self.commands],
            "hotkeys": [binding.to_dict() for binding in self.hotkeys],
            "invariants": self.invariants.to_dict(),
        }


def canonicalize_commands(
    spec: CommandsSpec, registry: InvariantRegistry | None = None
) -> CommandsDescriptor:
    """Canonicalize every command; structural problems are returned as ``issues``."""

    issues: list[CommandIssue] = []
    commands: list[CommandDescriptor] = []
    all_hotkeys: list[HotkeyBinding] = []
    seen_ids: set[str] = set()
    hotkey_owner: dict[str, str] = {}

    for command in spec.commands:
        if command.id in seen_ids:
            issues.append(CommandIssue(command.id, "id", f"Duplicate command ID: {command.id}"))
            continue
        seen_ids.add(command.id)

        if (
            command.mutation is None
            and command.navigation is None
            and command.category.value not in UI_ONLY_CATEGORIES
        ):
            issues.append(
                CommandIssue(
                    command.id,
                    "mutation/navigation",
                    "Command has no mutation or navigation binding - "
                    "ensure it's handled by UI layer",
                    IssueLevel.WARNING,
                )
            )

        bindings: list[HotkeyBinding] = []
        for hotkey in command.hotkeys:
            problem = hotkey_format_error(hotkey.key)
            if problem is not None:
                issues.append(
                    CommandIssue(command.id, "hotkeys", f'Invalid hotkey "{hotkey.key}": {problem}')
                )
                continue
            owner = hotkey_owner.get(hotkey.key)
            if owner is not None:
                issues.append(
                    CommandIssue(
                        command.id,
                        "hotkeys",
                        f'Hotkey "{hotkey.key}" conflicts with command "{owner}"',
                        IssueLevel.WARNING,
                    )
                )
            else:
                hotkey_owner[hotkey.key] = command.id
            bindings.append(HotkeyBinding(hotkey.key, command.id, hotkey.description))

        commands.append(CommandDescriptor(spec=command, hotkeys=tuple(bindings)))
        all_hotkeys.extend(bindings)

    return CommandsDescriptor(
        commands=tuple(commands),
        hotkeys=tuple(all_hotkeys),
        invariants=canonicalize_invariants(spec.invariants, registry),
        issues=tuple(issues),
    )


def command_capability_errors(
    commands: Sequence[CommandDescriptor], action_registry: ActionRegistry
) -> tuple[CommandIssue, ...]:
    return tuple(
        CommandIssue(
            command.id,
            "capability",
            f'Invalid ActionID "{command.spec.capability}" not found in ActionRegistry',
        )
        for command in commands
        if not action_registry.validate_action_id(command.spec.capability)
    )


def command_intent_binding_errors(
    commands: Sequence[CommandDescriptor], intent_ids: Collection[str]
) -> tuple[CommandIssue, ...]:
    """Domain commands bind known intents; every other scope binds none."""

    issues: list[CommandIssue] = []
    for command in commands:
        spec = command.spec
        intent_id = spec.intent_id
        if spec.scope is not CommandScope.DOMAIN:
            if intent_id is not None:
                issues.append(
                    CommandIssue(
                        spec.id,
                        "mutation.intentId",
                        f'Command with scope "{spec.scope.value}" must not bind '
                        f'intent "{intent_id}"',
                    )
                )
            continue
        if intent_id is None:
            if spec.requires_intent or spec.must_exist_in_intent_graph:
                issues.append(
                    CommandIssue(spec.id, "mutation", "Domain command requires an intent binding")
                )
            continue
        if intent_id not in intent_ids:
            issues.append(
                CommandIssue(
                    spec.id,
                    "mutation.intentId",
                    f'Invalid IntentID "{intent_id}" not found in intent graph',
                )
            )
    return tuple(issues)


__all__ = [
    "HOTKEY_MODIFIERS",
    "AvailabilityCondition",
    "AvailabilityContext",
    "CommandCategory",
    "CommandDescriptor",
    "CommandIssue",
    "CommandMutation",
    "CommandScope",
    "CommandSpec",
    "CommandsDescriptor",
    "CommandsSpec",
    "HotkeyBinding",
    "HotkeySpec",
    "IssueLevel",
    "MutationKind",
    "NavigationAction",
    "NavigationBinding",
    "canonicalize_commands",
    "command_capability_errors",
    "command_intent_binding_errors",
    "hotkey_format_error",
    "load_commands",
]
