"""
act-engine - intent graph descriptor and mutation factory

File: src/act_engine/canonical/intents.py
Last updated: 2026-10-19

Purpose
- Parse ``intentGraph:`` documents into a canonical graph of intents, their actions,
  invariants, metrics and causal links.
- Derive per-intent mutation metadata, enforcing executor naming policy.

Functional requirements
- Intent ids are unique; action, invariant, metric and causality entries must name declared intents.
- An executor whose name starts with ``use`` is a hook and is rejected (INTENT.F55).
- A mutation hook without a resolvable executor is rejected (ACT.F99).
- Reference problems are reported per intent so one bad intent does not hide the others.

Non-functional requirements
- Pure: descriptors and metadata depend only on the parsed document and injected registries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Final, TypeVar

import yaml

from act_engine.canonical.invariants import EnforceAt
from act_engine.domain.errors import CanonicalizationError, PolicyViolationError, UnknownReferenceError
from act_engine.domain.interfaces import ActionRegistry, InvariantRegistry
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    choice,
    mapping_tuple,
    optional_bool,
    optional_mapping,
    optional_str,
    require_root,
    require_str,
    string_tuple,
)

EXECUTOR_HOOK_PREFIX: Final[str] = "use"
EXECUTOR_CANNOT_BE_HOOK: Final[str] = "INTENT.F55_EXECUTOR_CANNOT_BE_HOOK"
REROUTE_DETECTED: Final[str] = "ACT.F99_REROUTE_DETECTED"

_NODE_ACTIONS: Final[frozenset[str]] = frozenset({"create", "update", "delete"})
_AUTH_ACTIONS: Final[frozenset[str]] = frozenset({"login", "logout"})


class IntentCategory(StrEnum):
    AUTH = "auth"
    WORKSPACE = "workspace"
    SYSTEM = "system"
    NAVIGATION = "navigation"
    DEBUG = "debug"
    OBSERVABILITY = "observability"


class ActionOrder(StrEnum):
    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"


class ViolationPolicy(StrEnum):
    FAIL = "fail"
    WARN = "warn"
    ROLLBACK = "rollback"


class CausalityType(StrEnum):
    TRIGGERS = "triggers"
    ENABLES = "enables"
    REQUIRES = "requires"
    COMPENSATES = "compensates"


def _values(enum_type: type[StrEnum]) -> tuple[str, ...]:
    return tuple(item.value for item in enum_type)


@dataclass(frozen=True, slots=True)
class PayloadField:
    type: str
    required: bool = True


@dataclass(frozen=True, slots=True)
class IntentSpec:
    id: str
    description: str
    category: IntentCategory
    domain: str
    requires_auth: bool = True
    mutation_hook: str | None = None
    executor: str | None = None
    payload_schema: tuple[tuple[str, PayloadField], ...] = ()
    required_context: tuple[tuple[str, object], ...] = ()


@dataclass(frozen=True, slots=True)
class IntentActions:
    intent_id: str
    action_ids: tuple[str, ...]
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    order: ActionOrder = ActionOrder.PARALLEL


@dataclass(frozen=True, slots=True)
class IntentInvariants:
    intent_id: str
    invariant_ids: tuple[str, ...]
    enforce_at: EnforceAt = EnforceAt.BOTH
    on_violation: ViolationPolicy = ViolationPolicy.FAIL


@dataclass(frozen=True, slots=True)
class IntentMetrics:
    intent_id: str
    on_start: tuple[str, ...] = ()
    on_success: tuple[str, ...] = ()
    on_failure: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CausalLink:
    source: str
    target: str
    type: CausalityType
    condition: str | None = None


@dataclass(frozen=True, slots=True)
class IntentGraphSpec:
    version: str
    intents: tuple[IntentSpec, ...]
    description: str = ""
    last_updated: str = ""
    intent_actions: tuple[IntentActions, ...] = ()
    intent_invariants: tuple[IntentInvariants, ...] = ()
    intent_metrics: tuple[IntentMetrics, ...] = ()
    causality: tuple[CausalLink, ...] = ()

    @classmethod
    def from_document(cls, payload: object) -> IntentGraphSpec:
        return cls.from_mapping(require_root(payload, "intentGraph"), "intentGraph")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "intentGraph") -> IntentGraphSpec:
        metadata = optional_mapping(payload, "metadata", path)
        metadata_path = child_path(path, "metadata")
        return cls(
            version=require_str(metadata, "version", metadata_path),
            description=optional_str(metadata, "description", metadata_path, "") or "",
            last_updated=_scalar_text(metadata.get("lastUpdated")),
            intents=tuple(
                _parse_intent(item, item_path)
                for item_path, item in mapping_tuple(payload, "intents", path)
            ),
            intent_actions=tuple(
                IntentActions(
                    intent_id=require_str(item, "intentId", item_path),
                    action_ids=string_tuple(item, "actionIds", item_path, min_items=1),
                    required=string_tuple(item, "required", item_path),
                    optional=string_tuple(item, "optional", item_path),
                    order=ActionOrder(
                        choice(item, "order", item_path, _values(ActionOrder), ActionOrder.PARALLEL.value)
                    ),
                )
                for item_path, item in mapping_tuple(payload, "intentActions", path)
            ),
            intent_invariants=tuple(
                IntentInvariants(
                    intent_id=require_str(item, "intentId", item_path),
                    invariant_ids=string_tuple(item, "invariantIds", item_path, min_items=1),
                    enforce_at=EnforceAt(
                        choice(item, "enforceAt", item_path, _values(EnforceAt), EnforceAt.BOTH.value)
                    ),
                    on_violation=ViolationPolicy(
                        choice(
                            item,
                            "onViolation",
                            item_path,
                            _values(ViolationPolicy),
                            ViolationPolicy.FAIL.value,
                        )
                    ),
                )
                for item_path, item in mapping_tuple(payload, "intentInvariants", path)
            ),
            intent_metrics=tuple(
                IntentMetrics(
                    intent_id=require_str(item, "intentId", item_path),
                    on_start=string_tuple(item, "onStart", item_path),
                    on_success=string_tuple(item, "onSuccess", item_path),
                    on_failure=string_tuple(item, "onFailure", item_path),
                )
                for item_path, item in mapping_tuple(payload, "intentMetrics", path)
            ),
            causality=tuple(
                CausalLink(
                    source=require_str(item, "from", item_path),
                    target=require_str(item, "to", item_path),
                    type=CausalityType(choice(item, "type", item_path, _values(CausalityType))),
                    condition=optional_str(item, "condition", item_path),
                )
                for item_path, item in mapping_tuple(payload, "causality", path)
            ),
        )


def _scalar_text(value: object) -> str:
    # PyYAML turns unquoted ISO dates into ``datetime.date``.
    return "" if value is None else str(value)


def _parse_intent(payload: Mapping[str, object], path: str) -> IntentSpec:
    schema_raw = optional_mapping(payload, "payloadSchema", path)
    schema_path = child_path(path, "payloadSchema")
    payload_schema: list[tuple[str, PayloadField]] = []
    for name in sorted(schema_raw):
        entry_path = child_path(schema_path, name)
        entry = as_mapping(schema_raw[name], entry_path)
        payload_schema.append(
            (
                name,
                PayloadField(
                    type=require_str(entry, "type", entry_path),
                    required=optional_bool(entry, "required", entry_path, True),
                ),
            )
        )
    context_raw = optional_mapping(payload, "requiredContext", path)
    return IntentSpec(
        id=require_str(payload, "id", path),
        description=require_str(payload, "description", path),
        category=IntentCategory(choice(payload, "category", path, _values(IntentCategory))),
        domain=require_str(payload, "domain", path),
        requires_auth=optional_bool(payload, "requiresAuth", path, True),
        mutation_hook=optional_str(payload, "mutationHook", path),
        executor=optional_str(payload, "executor", path),
        payload_schema=tuple(payload_schema),
        required_context=tuple((key, context_raw[key]) for key in sorted(context_raw)),
    )


def load_intent_graph(path: Path) -> IntentGraphSpec:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    return IntentGraphSpec.from_document(payload)


@dataclass(frozen=True, slots=True)
class IntentGraphDescriptor:
    version: str
    description: str
    intents: tuple[IntentSpec, ...]
    actions: Mapping[str, IntentActions] = field(default_factory=lambda: MappingProxyType({}))
    invariants: Mapping[str, IntentInvariants] = field(default_factory=lambda: MappingProxyType({}))
    metrics: Mapping[str, IntentMetrics] = field(default_factory=lambda: MappingProxyType({}))
    causality: tuple[CausalLink, ...] = ()

    def __post_init__(self) -> None:
        for name in ("actions", "invariants", "metrics"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @property
    def intent_ids(self) -> tuple[str, ...]:
        return tuple(intent.id for intent in self.intents)

    def intent(self, intent_id: str) -> IntentSpec | None:
        for intent in self.intents:
            if intent.id == intent_id:
                return intent
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "metadata": {"version": self.version, "description": self.description},
            "intents": [
                {
                    "id": intent.id,
                    "description": intent.description,
                    "category": intent.category.value,
                    "domain": intent.domain,
                    "requires_auth": intent.requires_auth,
                    "mutation_hook": intent.mutation_hook,
                    "executor": intent.executor,
                }
                for intent in self.intents
            ],
            "intent_actions": {
                key: list(value.action_ids) for key, value in sorted(self.actions.items())
            },
            "intent_invariants": {
                key: list(value.invariant_ids) for key, value in sorted(self.invariants.items())
            },
            "causality": [
                {"from": link.source, "to": link.target, "type": link.type.value}
                for link in self.causality
            ],
        }


_EntryT = TypeVar("_EntryT", IntentActions, IntentInvariants, IntentMetrics)


def _index_by_intent(
    kind: str, entries: tuple[_EntryT, ...], declared: set[str]
) -> dict[str, _EntryT]:
    indexed: dict[str, _EntryT] = {}
    for entry in entries:
        if entry.intent_id not in declared:
            raise UnknownReferenceError(
                f'{kind} entry references unknown intent "{entry.intent_id}"',
                kind="intent",
                reference=entry.intent_id,
            )
        if entry.intent_id in indexed:
            raise CanonicalizationError(f'Duplicate {kind} entry for intent "{entry.intent_id}"')
        indexed[entry.intent_id] = entry
    return indexed


def canonicalize_intent_graph(spec: IntentGraphSpec) -> IntentGraphDescriptor:
    """Index the graph by intent id; structural problems raise ``CanonicalizationError``."""

    declared: set[str] = set()
    for intent in spec.intents:
        if intent.id in declared:
            raise CanonicalizationError(f'Duplicate intent id "{intent.id}"')
        declared.add(intent.id)

    actions = _index_by_intent("intentActions", spec.intent_actions, declared)
    invariants = _index_by_intent("intentInvariants", spec.intent_invariants, declared)
    metrics = _index_by_intent("intentMetrics", spec.intent_metrics, declared)

    for link in spec.causality:
        for endpoint in (link.source, link.target):
            if endpoint not in declared:
                raise UnknownReferenceError(
                    f'Causality link {link.source} -> {link.target} references unknown intent "{endpoint}"',
                    kind="intent",
                    reference=endpoint,
                )

    return IntentGraphDescriptor(
        version=spec.version,
        description=spec.description,
        intents=spec.intents,
        actions=actions,
        invariants=invariants,
        metrics=metrics,
        causality=spec.causality,
    )


def intent_reference_errors(
    descriptor: IntentGraphDescriptor,
    intent_id: str,
    *,
    registry: InvariantRegistry | None,
    action_registry: ActionRegistry | None,
) -> tuple[str, ...]:
    """Return unresolved action and invariant references for one intent."""

    problems: list[str] = []
    actions = descriptor.actions.get(intent_id)
    if actions is not None and action_registry is not None:
        for action_id in dict.fromkeys((*actions.action_ids, *actions.required, *actions.optional)):
            if not action_registry.validate_action_id(action_id):
                problems.append(f'Unknown action "{action_id}"')
    invariants = descriptor.invariants.get(intent_id)
    if invariants is not None and registry is not None:
        for invariant_id in invariants.invariant_ids:
            if registry.get(invariant_id) is None:
                problems.append(f"Invariant {invariant_id} not found in registry")
    return tuple(problems)


# Mutation factory ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MutationMetrics:
    on_start: tuple[str, ...] = ()
    on_success: tuple[str, ...] = ()
    on_failure: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MutationMetadata:
    intent_id: str
    hook_path: str
    executor: str | None
    description: str
    category: str
    domain: str
    requires_auth: bool
    actions: tuple[str, ...]
    invariants: tuple[str, ...]
    metrics: MutationMetrics
    payload_schema: tuple[tuple[str, PayloadField], ...]
    required_context: tuple[tuple[str, object], ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "intent_id": self.intent_id,
            "hook_path": self.hook_path,
            "executor": self.executor,
            "description": self.description,
            "category": self.category,
            "domain": self.domain,
            "requires_auth": self.requires_auth,
            "actions": list(self.actions),
            "invariants": list(self.invariants),
            "metrics": {
                "on_start": list(self.metrics.on_start),
                "on_success": list(self.metrics.on_success),
                "on_failure": list(self.metrics.on_failure),
            },
            "payload_schema": {
                name: {"type": spec.type, "required": spec.required}
                for name, spec in self.payload_schema
            },
            "required_context": dict(self.required_context),
        }


def heuristic_executor(intent_id: str) -> str | None:
    """``node.create`` -> ``executeCreateNodeIntent``; ``auth.login`` -> ``executeAuthLoginIntent``."""

    domain, dot, action = intent_id.partition(".")
    if not dot:
        return None
    action = action.split(".", 1)[0]
    capitalized = action[:1].upper() + action[1:]
    if domain == "node" and action in _NODE_ACTIONS:
        return f"execute{capitalized}NodeIntent"
    if domain == "auth" and action in _AUTH_ACTIONS:
        return f"executeAuth{capitalized}Intent"
    return None


class MutationFactory:
    """Builds mutation metadata for intents of one canonical intent graph."""

    __slots__ = ("_descriptor",)

    def __init__(self, descriptor: IntentGraphDescriptor) -> None:
        self._descriptor = descriptor

    def resolve_executor(self, intent: IntentSpec) -> str | None:
        if intent.executor is not None:
            if intent.executor.startswith(EXECUTOR_HOOK_PREFIX):
                raise PolicyViolationError(
                    EXECUTOR_CANNOT_BE_HOOK,
                    f'Intent "{intent.id}" declares executor "{intent.executor}" which is a hook; '
                    f'executors must be plain functions and must not start with "{EXECUTOR_HOOK_PREFIX}"',
                )
            return intent.executor
        return heuristic_executor(intent.id)

    def mutation_metadata(self, intent_id: str) -> MutationMetadata | None:
        intent = self._descriptor.intent(intent_id)
        if intent is None:
            return None
        executor = self.resolve_executor(intent)
        hook_path = intent.mutation_hook or ""
        if hook_path and executor is None:
            raise PolicyViolationError(
                REROUTE_DETECTED,
                f'Intent "{intent.id}" has mutationHook "{hook_path}" but no executor could be '
                "determined; declare an explicit executor",
            )
        actions = self._descriptor.actions.get(intent_id)
        invariants = self._descriptor.invariants.get(intent_id)
        metrics = self._descriptor.metrics.get(intent_id)
        return MutationMetadata(
            intent_id=intent.id,
            hook_path=hook_path,
            executor=executor,
            description=intent.description,
            category=intent.category.value,
            domain=intent.domain,
            requires_auth=intent.requires_auth,
            actions=actions.action_ids if actions is not None else (),
            invariants=invariants.invariant_ids if invariants is not None else (),
            metrics=MutationMetrics(
                on_start=metrics.on_start if metrics is not None else (),
                on_success=metrics.on_success if metrics is not None else (),
                on_failure=metrics.on_failure if metrics is not None else (),
            ),
            payload_schema=intent.payload_schema,
            required_context=intent.required_context,
        )

    def mutating_intents(self) -> tuple[IntentSpec, ...]:
        return tuple(
            intent
            for intent in self._descriptor.intents
            if intent.mutation_hook is not None or intent.executor is not None
        )


__all__ = [
    "EXECUTOR_CANNOT_BE_HOOK",
    "EXECUTOR_HOOK_PREFIX",
    "REROUTE_DETECTED",
    "ActionOrder",
    "CausalLink",
    "CausalityType",
    "IntentActions",
    "IntentCategory",
    "IntentGraphDescriptor",
    "IntentGraphSpec",
    "IntentInvariants",
    "IntentMetrics",
    "IntentSpec",
    "MutationFactory",
    "MutationMetadata",
    "MutationMetrics",
    "PayloadField",
    "ViolationPolicy",
    "canonicalize_intent_graph",
    "heuristic_executor",
    "intent_reference_errors",
    "load_intent_graph",
]
