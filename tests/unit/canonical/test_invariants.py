"""Unit tests for the shared invariants block."""

from __future__ import annotations

import pytest

from act_engine.canonical.invariants import (
    EnforceAt,
    EnforcementLayer,
    InvariantsSpec,
    canonicalize_invariants,
    layer_for,
)
from act_engine.domain.errors import SchemaValidationError, UnknownReferenceError
from tests.unit.workspace import registry_with


@pytest.mark.parametrize(
    ("enforce_at", "layer"),
    [
        (EnforceAt.BUILD, EnforcementLayer.ACT),
        (EnforceAt.RUNTIME, EnforcementLayer.RUNTIME),
        (EnforceAt.BOTH, EnforcementLayer.BOTH),
    ],
)
def test_layer_mapping(enforce_at: EnforceAt, layer: EnforcementLayer) -> None:
    assert layer_for(enforce_at) is layer


def test_missing_block_is_empty() -> None:
    spec = InvariantsSpec.optional({}, "invariants", "field")

    assert spec == InvariantsSpec()
    assert canonicalize_invariants(spec, registry_with([])).to_dict() == {
        "declared": [],
        "enforced": [],
    }


def test_declared_ids_are_deduplicated_in_order() -> None:
    spec = InvariantsSpec.optional(
        {"invariants": {"invariants": ["UI_SCROLL.F82", "DOMAIN_LOGIC.F2", "UI_SCROLL.F82"]}},
        "invariants",
        "field",
    )

    block = canonicalize_invariants(spec, registry_with(["UI_SCROLL.F82", "DOMAIN_LOGIC.F2"]))

    assert block.declared == ("UI_SCROLL.F82", "DOMAIN_LOGIC.F2")
    assert block.enforced[0].to_dict() == {
        "id": "UI_SCROLL.F82",
        "enforce_at": "both",
        "layer": "BOTH",
    }


def test_unknown_invariant_is_rejected() -> None:
    spec = InvariantsSpec(invariants=("UI_GHOST.F1",), enforce_at=EnforceAt.BUILD)

    with pytest.raises(UnknownReferenceError, match="Invariant UI_GHOST.F1 not found in registry"):
        canonicalize_invariants(spec, registry_with(["UI_SCROLL.F82"]))


def test_without_registry_ids_are_not_resolved() -> None:
    block = canonicalize_invariants(InvariantsSpec(invariants=("UI_GHOST.F1",)), None)

    assert block.declared == ("UI_GHOST.F1",)


def test_bad_enforce_at_reports_path() -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        InvariantsSpec.optional({"invariants": {"enforceAt": "never"}}, "invariants", "field")

    assert excinfo.value.path == "field.invariants.enforceAt"
