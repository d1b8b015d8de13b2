"""
act-engine - unit tests for intent graph canonicalization and the mutation factory

File: tests/unit/canonical/test_intents.py
Last updated: 2026-10-19

Purpose
- Validate intent graph parsing, indexing, reference checks, and executor policies.

What this test file should cover
- Hook-like executor names are a policy violation for that intent only.
- Heuristic executors for node and auth intents.
- Unknown intents referenced by causality links or side tables.
"""

from __future__ import annotations

import pytest

from act_engine.canonical.intents import (
    EXECUTOR_CANNOT_BE_HOOK,
    REROUTE_DETECTED,
    IntentGraphSpec,
    MutationFactory,
    canonicalize_intent_graph,
    heuristic_executor,
    intent_reference_errors,
)
from act_engine.domain.errors import (
    CanonicalizationError,
    PolicyViolationError,
    SchemaValidationError,
    UnknownReferenceError,
)
from tests.unit.workspace import registry_with, sample_services


def _graph(intents: list[dict[str, object]], **extra: object) -> dict[str, object]:
    return {"intentGraph": {"metadata": {"version": "1.0.0"}, "intents": intents, **extra}}


def _intent(intent_id: str, **fields: object) -> dict[str, object]:
    return {
        "id": intent_id,
        "description": f"{intent_id} intent",
        "category": "workspace",
        "domain": intent_id.split(".", 1)[0],
        **fields,
    }


def test_graph_is_indexed_by_intent_id() -> None:
    spec = IntentGraphSpec.from_document(
        _graph(
            [_intent("node.create", mutationHook="hooks/useCreateNode"), _intent("node.view")],
            intentActions=[{"intentId": "node.create", "actionIds": ["NODE_CREATE"]}],
            intentInvariants=[{"intentId": "node.create", "invariantIds": ["DOMAIN_LOGIC.F2"]}],
            intentMetrics=[{"intentId": "node.create", "onSuccess": ["node_created"]}],
            causality=[{"from": "node.create", "to": "node.view", "type": "triggers"}],
        )
    )

    descriptor = canonicalize_intent_graph(spec)

    assert descriptor.intent_ids == ("node.create", "node.view")
    assert descriptor.actions["node.create"].action_ids == ("NODE_CREATE",)
    assert descriptor.intent("node.missing") is None


def test_executor_named_like_a_hook_is_a_policy_violation() -> None:
    descriptor = canonicalize_intent_graph(
        IntentGraphSpec.from_document(
            _graph(
                [
                    _intent("node.create", mutationHook="hooks/useCreateNode", executor="useCreateNode"),
                    _intent("node.update", mutationHook="hooks/useUpdateNode"),
                ]
            )
        )
    )
    factory = MutationFactory(descriptor)

    with pytest.raises(PolicyViolationError) as excinfo:
        factory.mutation_metadata("node.create")

    assert excinfo.value.code == EXECUTOR_CANNOT_BE_HOOK
    assert '"use"' in str(excinfo.value)
    assert "useCreateNode" in str(excinfo.value)

    update = factory.mutation_metadata("node.update")
    assert update is not None
    assert update.executor == "executeUpdateNodeIntent"
    assert update.hook_path == "hooks/useUpdateNode"


def test_hook_without_resolvable_executor_is_a_reroute() -> None:
    descriptor = canonicalize_intent_graph(
        IntentGraphSpec.from_document(_graph([_intent("workspace.open", mutationHook="hooks/useOpen")]))
    )

    with pytest.raises(PolicyViolationError) as excinfo:
        MutationFactory(descriptor).mutation_metadata("workspace.open")

    assert excinfo.value.code == REROUTE_DETECTED


def test_mutation_metadata_collects_side_tables() -> None:
    descriptor = canonicalize_intent_graph(
        IntentGraphSpec.from_document(
            _graph(
                [_intent("node.delete", executor="deleteNode", requiresAuth=False)],
                intentActions=[{"intentId": "node.delete", "actionIds": ["NODE_UPDATE"]}],
                intentMetrics=[{"intentId": "node.delete", "onFailure": ["node_delete_failed"]}],
            )
        )
    )
    factory = MutationFactory(descriptor)

    metadata = factory.mutation_metadata("node.delete")

    assert [intent.id for intent in factory.mutating_intents()] == ["node.delete"]
    assert metadata is not None
    assert metadata.executor == "deleteNode"
    assert metadata.to_dict()["actions"] == ["NODE_UPDATE"]
    assert metadata.to_dict()["metrics"] == {
        "on_start": [],
        "on_success": [],
        "on_failure": ["node_delete_failed"],
    }
    assert metadata.requires_auth is False


@pytest.mark.parametrize(
    ("intent_id", "expected"),
    [
        ("node.create", "executeCreateNodeIntent"),
        ("auth.login", "executeAuthLoginIntent"),
        ("node.archive", None),
        ("standalone", None),
    ],
)
def test_heuristic_executor(intent_id: str, expected: str | None) -> None:
    assert heuristic_executor(intent_id) == expected


def test_duplicate_intent_ids_are_rejected() -> None:
    spec = IntentGraphSpec.from_document(_graph([_intent("node.create"), _intent("node.create")]))

    with pytest.raises(CanonicalizationError, match='Duplicate intent id "node.create"'):
        canonicalize_intent_graph(spec)


def test_causality_to_unknown_intent_is_a_reference_error() -> None:
    spec = IntentGraphSpec.from_document(
        _graph(
            [_intent("node.create")],
            causality=[{"from": "node.create", "to": "node.ghost", "type": "enables"}],
        )
    )

    with pytest.raises(UnknownReferenceError) as excinfo:
        canonicalize_intent_graph(spec)

    assert excinfo.value.reference == "node.ghost"


def test_reference_errors_use_registries() -> None:
    descriptor = canonicalize_intent_graph(
        IntentGraphSpec.from_document(
            _graph(
                [_intent("node.create")],
                intentActions=[{"intentId": "node.create", "actionIds": ["NODE_CREATE", "NODE_PURGE"]}],
                intentInvariants=[{"intentId": "node.create", "invariantIds": ["DOMAIN_LOGIC.F99"]}],
            )
        )
    )
    services = sample_services()

    problems = intent_reference_errors(
        descriptor,
        "node.create",
        registry=registry_with(["DOMAIN_LOGIC.F2"]),
        action_registry=services.action_registry,
    )

    assert problems == (
        'Unknown action "NODE_PURGE"',
        "Invariant DOMAIN_LOGIC.F99 not found in registry",
    )


def test_metadata_version_is_required() -> None:
    with pytest.raises(SchemaValidationError, match="intentGraph.metadata.version"):
        IntentGraphSpec.from_document({"intentGraph": {"intents": []}})
