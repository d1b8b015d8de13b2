"""Unit tests for the UX fidelity descriptor."""

from __future__ import annotations

import pytest

from act_engine.canonical.ux import ContainerType, SentinelLogLevel, UxSpec, canonicalize_ux
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from tests.unit.workspace import registry_with


def _document(**overrides: object) -> dict[str, object]:
    body: dict[str, object] = {
        "id": "app.ux",
        "motion": {
            "defaults": {"duration": 180, "easing": "ease-out"},
            "transitions": {"route": {"duration": 120}, "modal": None},
        },
        "scroll": {"containers": [{"id": "main", "type": "content"}]},
        "regions": [{"id": "header", "name": "Header"}],
        "interactionZones": [{"id": "toolbar", "name": "Toolbar"}],
        "purity": {"rules": [{"id": "no-fetch", "name": "No fetch in render", "type": "render"}]},
        "invariants": {"invariants": ["UI_SCROLL.F82"], "enforceAt": "runtime"},
    }
    body.update(overrides)
    return {"ux": body}


def test_transitions_inherit_motion_defaults() -> None:
    spec = UxSpec.from_document(_document())

    assert dict(spec.transitions)["modal"].duration == 180
    assert dict(spec.transitions)["route"].duration == 120
    assert dict(spec.transitions)["route"].easing == "ease-out"
    assert [name for name, _ in spec.transitions] == ["modal", "route"]


def test_defaults_are_applied() -> None:
    spec = UxSpec.from_document(_document())

    assert spec.single_container is True
    assert spec.containers[0].type is ContainerType.CONTENT
    assert spec.containers[0].max_jump == 1
    assert spec.grid_base == 4
    assert spec.sentinel_log_level is SentinelLogLevel.ERROR
    assert spec.latency_budgets.total_perceived_latency == 150
    assert spec.regions[0].priority == "high"
    assert spec.interaction_zones[0].min_touch_target == 44


def test_descriptor_resolves_invariants() -> None:
    descriptor = canonicalize_ux(UxSpec.from_document(_document()), registry_with(["UI_SCROLL.F82"]))

    payload = descriptor.to_dict()

    assert descriptor.id == "app.ux"
    assert payload["scroll"]["containers"][0]["preserve_position"] is True
    assert payload["latency_budgets"]["router_transition"] == 20
    assert payload["invariants"]["enforced"] == [
        {"id": "UI_SCROLL.F82", "enforce_at": "runtime", "layer": "RUNTIME"}
    ]


def test_single_container_rejects_a_second_container() -> None:
    spec = UxSpec.from_document(
        _document(
            scroll={
                "containers": [{"id": "main", "type": "content"}, {"id": "side", "type": "sidebar"}]
            }
        )
    )

    with pytest.raises(CanonicalizationError, match="2 scroll containers are declared"):
        canonicalize_ux(spec)


def test_multiple_containers_allowed_when_single_container_is_off() -> None:
    spec = UxSpec.from_document(
        _document(
            scroll={
                "singleContainer": False,
                "containers": [{"id": "main", "type": "content"}, {"id": "side", "type": "sidebar"}],
            }
        )
    )

    assert len(canonicalize_ux(spec).spec.containers) == 2


def test_duplicate_region_is_rejected() -> None:
    spec = UxSpec.from_document(
        _document(regions=[{"id": "header", "name": "A"}, {"id": "header", "name": "B"}])
    )

    with pytest.raises(CanonicalizationError, match="Duplicate region id: header"):
        canonicalize_ux(spec)


def test_container_type_is_required() -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        UxSpec.from_document(_document(scroll={"containers": [{"id": "main"}]}))

    assert excinfo.value.path == "ux.scroll.containers[0].type"
