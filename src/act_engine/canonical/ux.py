"""
act-engine - UX fidelity descriptor

File: src/act_engine/canonical/ux.py
Last updated: 2026-10-19

Purpose
- Parse ``ux:`` documents (motion, scroll, grid, sentinel, latency budgets, regions,
  interaction zones, purity rules) and emit a total canonical descriptor.

Functional requirements
- ``scroll.singleContainer`` with more than one declared container is rejected.
- Region, zone, container and purity rule ids are unique within one document.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.errors import CanonicalizationError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    choice,
    mapping_tuple,
    optional_bool,
    optional_int,
    optional_mapping,
    optional_str,
    require_root,
    require_str,
)


class ContainerType(StrEnum):
    CONTENT = "content"
    SIDEBAR = "sidebar"
    OVERLAY = "overlay"


class SentinelLogLevel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class MotionTiming:
    duration: int = 200
    easing: str = "ease"


@dataclass(frozen=True, slots=True)
class ScrollContainer:
    id: str
    type: ContainerType
    preserve_position: bool = True
    restore_on_mount: bool = True
    max_jump: int = 1


@dataclass(frozen=True, slots=True)
class LatencyBudgets:
    router_transition: int = 20
    view_model_assembly: int = 40
    warm_cache_api_request: int = 80
    total_perceived_latency: int = 150


@dataclass(frozen=True, slots=True)
class Region:
    id: str
    name: str
    priority: str = "high"


@dataclass(frozen=True, slots=True)
class InteractionZone:
    id: str
    name: str
    min_touch_target: int = 44


@dataclass(frozen=True, slots=True)
class PurityRule:
    id: str
    name: str
    type: str
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class UxSpec:
    id: str
    motion_defaults: MotionTiming = field(default_factory=MotionTiming)
    transitions: tuple[tuple[str, MotionTiming], ...] = ()
    single_container: bool = True
    containers: tuple[ScrollContainer, ...] = ()
    grid_base: int = 4
    sentinel_enabled: bool = True
    sentinel_log_level: SentinelLogLevel = SentinelLogLevel.ERROR
    latency_budgets: LatencyBudgets = field(default_factory=LatencyBudgets)
    regions: tuple[Region, ...] = ()
    interaction_zones: tuple[InteractionZone, ...] = ()
    purity_rules: tuple[PurityRule, ...] = ()
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)

    @classmethod
    def from_document(cls, payload: object) -> UxSpec:
        return cls.from_mapping(require_root(payload, "ux"), "ux")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "ux") -> UxSpec:
        motion_raw = optional_mapping(payload, "motion", path)
        motion_path = child_path(path, "motion")
        defaults = _timing(
            optional_mapping(motion_raw, "defaults", motion_path),
            child_path(motion_path, "defaults"),
            MotionTiming(),
        )
        transitions_raw = optional_mapping(motion_raw, "transitions", motion_path)
        transitions_path = child_path(motion_path, "transitions")
        transitions = tuple(
            (
                name,
                _timing(
                    as_mapping(transitions_raw[name] or {}, child_path(transitions_path, name)),
                    child_path(transitions_path, name),
                    defaults,
                ),
            )
            for name in sorted(transitions_raw)
        )

        scroll_raw = optional_mapping(payload, "scroll", path)
        scroll_path = child_path(path, "scroll")
        containers = tuple(
            ScrollContainer(
                id=require_str(item, "id", item_path),
                type=ContainerType(
                    choice(item, "type", item_path, tuple(kind.value for kind in ContainerType))
                ),
                preserve_position=optional_bool(item, "preservePosition", item_path, True),
                restore_on_mount=optional_bool(item, "restoreOnMount", item_path, True),
                max_jump=_int(item, "maxJump", item_path, 1),
            )
            for item_path, item in mapping_tuple(scroll_raw, "containers", scroll_path)
        )

        grid_raw = optional_mapping(payload, "grid", path)
        sentinel_raw = optional_mapping(payload, "sentinel", path)
        sentinel_path = child_path(path, "sentinel")
        budgets_raw = optional_mapping(payload, "latencyBudgets", path)
        budgets_path = child_path(path, "latencyBudgets")
        purity_raw = optional_mapping(payload, "purity", path)
        purity_path = child_path(path, "purity")

        return cls(
            id=require_str(payload, "id", path),
            motion_defaults=defaults,
            transitions=transitions,
            single_container=optional_bool(scroll_raw, "singleContainer", scroll_path, True),
            containers=containers,
            grid_base=_int(grid_raw, "base", child_path(path, "grid"), 4, minimum=1),
            sentinel_enabled=optional_bool(sentinel_raw, "enabled", sentinel_path, True),
            sentinel_log_level=SentinelLogLevel(
                choice(
                    sentinel_raw,
                    "logLevel",
                    sentinel_path,
                    tuple(level.value for level in SentinelLogLevel),
                    SentinelLogLevel.ERROR.value,
                )
            ),
            latency_budgets=LatencyBudgets(
                router_transition=_int(budgets_raw, "routerTransition", budgets_path, 20),
                view_model_assembly=_int(budgets_raw, "viewModelAssembly", budgets_path, 40),
                warm_cache_api_request=_int(budgets_raw, "warmCacheApiRequest", budgets_path, 80),
                total_perceived_latency=_int(budgets_raw, "totalPerceivedLatency", budgets_path, 150),
            ),
            regions=tuple(
                Region(
                    id=require_str(item, "id", item_path),
                    name=require_str(item, "name", item_path),
                    priority=optional_str(item, "priority", item_path, "high") or "high",
                )
                for item_path, item in mapping_tuple(payload, "regions", path)
            ),
            interaction_zones=tuple(
                InteractionZone(
                    id=require_str(item, "id", item_path),
                    name=require_str(item, "name", item_path),
                    min_touch_target=_int(item, "minTouchTarget", item_path, 44, minimum=1),
                )
                for item_path, item in mapping_tuple(payload, "interactionZones", path)
            ),
            purity_rules=tuple(
                PurityRule(
                    id=require_str(item, "id", item_path),
                    name=require_str(item, "name", item_path),
                    type=require_str(item, "type", item_path),
                    enabled=optional_bool(item, "enabled", item_path, True),
                )
                for item_path, item in mapping_tuple(purity_raw, "rules", purity_path)
            ),
            invariants=InvariantsSpec.optional(payload, "invariants", path),
        )


def _int(payload: Mapping[str, object], key: str, path: str, default: int, *, minimum: int = 0) -> int:
    value = optional_int(payload, key, path, default, minimum=minimum)
    return default if value is None else value


def _timing(payload: Mapping[str, object], path: str, fallback: MotionTiming) -> MotionTiming:
    return MotionTiming(
        duration=_int(payload, "duration", path, fallback.duration),
        easing=optional_str(payload, "easing", path, fallback.easing) or fallback.easing,
    )


@dataclass(frozen=True, slots=True)
class UxDescriptor:
    spec: UxSpec
    invariants: InvariantsBlock

    @property
    def id(self) -> str:
        return self.spec.id

    def to_dict(self) -> dict[str, object]:
        spec = self.spec
        budgets = spec.latency_budgets
        return {
            "id": spec.id,
            "motion": {
                "defaults": {
                    "duration": spec.motion_defaults.duration,
                    "easing": spec.motion_defaults.easing,
                },
                "transitions": {
                    name: {"duration": timing.duration, "easing": timing.easing}
                    for name, timing in spec.transitions
                },
            },
            "scroll": {
                "single_container": spec.single_container,
                "containers": [
                    {
                        "id": item.id,
                        "type": item.type.value,
                        "preserve_position": item.preserve_position,
                        "restore_on_mount": item.restore_on_mount,
                        "max_jump": item.max_jump,
                    }
                    for item in spec.containers
                ],
            },
            "grid": {"base": spec.grid_base},
            "sentinel": {
                "enabled": spec.sentinel_enabled,
                "log_level": spec.sentinel_log_level.value,
            },
            "latency_budgets": {
                "router_transition": budgets.router_transition,
                "view_model_assembly": budgets.view_model_assembly,
                "warm_cache_api_request": budgets.warm_cache_api_request,
                "total_perceived_latency": budgets.total_perceived_latency,
            },
            "regions": [
                {"id": item.id, "name": item.name, "priority": item.priority}
                for item in spec.regions
            ],
            "interaction_zones": [
                {"id": item.id, "name": item.name, "min_touch_target": item.min_touch_target}
                for item in spec.interaction_zones
            ],
            "purity": {
                "rules": [
                    {"id": item.id, "name": item.name, "type": item.type, "enabled": item.enabled}
                    for item in spec.purity_rules
                ]
            },
            "invariants": self.invariants.to_dict(),
        }


def canonicalize_ux(spec: UxSpec, registry: InvariantRegistry | None = None) -> UxDescriptor:
    if spec.single_container and len(spec.containers) > 1:
        raise CanonicalizationError(
            f"singleContainer is enabled but {len(spec.containers)} scroll containers are declared"
        )
    for kind, ids in (
        ("scroll container", [item.id for item in spec.containers]),
        ("region", [item.id for item in spec.regions]),
        ("interaction zone", [item.id for item in spec.interaction_zones]),
        ("purity rule", [item.id for item in spec.purity_rules]),
    ):
        duplicates = sorted({value for value in ids if ids.count(value) > 1})
        if duplicates:
            raise CanonicalizationError(f"Duplicate {kind} id: {', '.join(duplicates)}")
    return UxDescriptor(spec=spec, invariants=canonicalize_invariants(spec.invariants, registry))


__all__ = [
    "ContainerType",
    "InteractionZone",
    "LatencyBudgets",
    "MotionTiming",
    "PurityRule",
    "Region",
    "ScrollContainer",
    "SentinelLogLevel",
    "UxDescriptor",
    "UxSpec",
    "canonicalize_ux",
]
