"""Unit tests for functional binding canonicalization."""

from __future__ import annotations

import pytest
import yaml

from act_engine.canonical.forms import FormSpec
from act_engine.canonical.functional import canonicalize_functional_form
from act_engine.domain.errors import CanonicalizationError, UnknownReferenceError
from act_engine.knowledge_plane.acl_registry import YamlAclRegistry
from tests.unit.workspace import ACL_YAML, NODE_CREATE_FORM_YAML, node_contract, registry_with

_ACTIONS = YamlAclRegistry.from_mapping(yaml.safe_load(ACL_YAML))


def _spec(functional: dict[str, object]) -> FormSpec:
    document = yaml.safe_load(NODE_CREATE_FORM_YAML)
    document["form"]["functional"] = functional
    document["form"]["sections"][1]["functional"] = {
        "dataSource": {"type": "projection", "source": "nodes", "path": "items"},
        "listen": {"type": "invariant", "source": "UI_SCROLL.F82"},
    }
    return FormSpec.from_document(document)


def test_bindings_are_canonicalized_for_form_and_sections() -> None:
    spec = _spec(
        {
            "mutation": {"type": "intent", "intentId": "node.create", "payloadTemplate": {"title": "$title"}},
            "capability": {"requiredAction": "NODE_CREATE", "additional": ["NODE_READ"]},
            "invariants": {"invariants": ["UI_SCROLL.F82"]},
        }
    )

    descriptor = canonicalize_functional_form(
        spec,
        node_contract(),
        registry=registry_with(["UI_SCROLL.F82"]),
        action_registry=_ACTIONS,
    )

    assert spec.has_functional_bindings
    assert descriptor.key == "Node.create"
    assert descriptor.functional is not None
    assert descriptor.functional.mutation == {
        "type": "intent",
        "intent_id": "node.create",
        "payload_template": {"title": "$title"},
    }
    assert descriptor.functional.capability == {
        "required_action": "NODE_CREATE",
        "additional": ["NODE_READ"],
        "fallback": {"hide": False, "disable": True},
    }
    section_id, binding = descriptor.section_bindings[0]
    assert section_id == "details"
    assert binding.data_source == {"type": "projection", "source": "nodes", "path": "items"}
    assert binding.listen == ({"type": "invariant", "source": "UI_SCROLL.F82"},)
    assert descriptor.to_dict()["section_bindings"]["details"]["mutation"] is None


def test_only_intent_mutations_are_supported() -> None:
    spec = _spec({"mutation": {"type": "direct", "intentId": "node.create"}})

    with pytest.raises(CanonicalizationError, match='mutation type "direct" is not supported'):
        canonicalize_functional_form(spec, node_contract(), action_registry=_ACTIONS)


def test_unknown_capability_action_is_rejected() -> None:
    spec = _spec({"capability": {"requiredAction": "NODE_DELETE"}})

    with pytest.raises(UnknownReferenceError, match='Invalid ActionID "NODE_DELETE"'):
        canonicalize_functional_form(spec, node_contract(), action_registry=_ACTIONS)
