"""Unit tests for command palette descriptors."""

from __future__ import annotations

import pytest

from act_engine.canonical.commands import (
    CommandScope,
    CommandsSpec,
    IssueLevel,
    MutationKind,
    canonicalize_commands,
    command_capability_errors,
    command_intent_binding_errors,
    hotkey_format_error,
)
from act_engine.domain.errors import SchemaValidationError
from act_engine.knowledge_plane.acl_registry import YamlAclRegistry


def _command(command_id: str, **fields: object) -> dict[str, object]:
    return {
        "id": command_id,
        "label": command_id.title(),
        "category": "workspace",
        "scope": "domain",
        "capability": "NODE_CREATE",
        **fields,
    }


def _spec(*commands: dict[str, object]) -> CommandsSpec:
    return CommandsSpec.from_document({"commands": list(commands)})


def test_commands_parse_with_defaults() -> None:
    spec = _spec(
        _command(
            "node.create",
            mutation={"type": "intent", "intentId": "node.create"},
            hotkeys=[{"key": "mod+n"}],
        )
    )

    command = spec.commands[0]
    assert command.scope is CommandScope.DOMAIN
    assert command.requires_intent is False
    assert command.mutation is not None
    assert command.mutation.kind is MutationKind.INTENT
    assert command.intent_id == "node.create"


def test_missing_commands_key_is_a_schema_error() -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        CommandsSpec.from_document({"invariants": {}})

    assert excinfo.value.path == "commands"


def test_contract_endpoint_method_is_checked() -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        _spec(
            _command(
                "node.purge",
                mutation={
                    "type": "contractEndpoint",
                    "contract": "Node",
                    "endpoint": "/nodes",
                    "method": "TRACE",
                },
            )
        )

    assert excinfo.value.path == "commands[0].mutation.method"


@pytest.mark.parametrize(
    ("key", "problem"),
    [
        ("mod+k", None),
        ("ctrl+shift+p", None),
        ("escape", None),
        ("hyper+k", "Invalid modifier: hyper"),
        ("ctrl+", "Missing key after modifiers"),
    ],
)
def test_hotkey_format(key: str, problem: str | None) -> None:
    assert hotkey_format_error(key) == problem


def test_structural_issues_are_collected_per_command() -> None:
    spec = _spec(
        _command("palette.open", category="system", scope="system", hotkeys=[{"key": "mod+k"}]),
        _command("node.list", navigation={"route": "/nodes"}, hotkeys=[{"key": "mod+k"}]),
        _command("node.list", navigation={"action": "back"}),
        _command("node.idle", hotkeys=[{"key": "hyper+i"}]),
    )

    descriptor = canonicalize_commands(spec)

    assert [command.id for command in descriptor.commands] == [
        "palette.open",
        "node.list",
        "node.idle",
    ]
    assert [str(issue) for issue in descriptor.errors] == [
        'Command "node.list": id - Duplicate command ID: node.list',
        'Command "node.idle": hotkeys - Invalid hotkey "hyper+i": Invalid modifier: hyper',
    ]
    assert [str(issue) for issue in descriptor.warnings] == [
        'Command "node.list": hotkeys - Hotkey "mod+k" conflicts with command "palette.open"',
        'Command "node.idle": mutation/navigation - Command has no mutation or navigation '
        "binding - ensure it's handled by UI layer",
    ]
    assert all(issue.level is IssueLevel.WARNING for issue in descriptor.warnings)
    assert [binding.command_id for binding in descriptor.hotkeys] == ["palette.open", "node.list"]


def test_descriptor_to_dict() -> None:
    spec = _spec(
        _command(
            "node.create",
            mutation={"type": "intent", "intentId": "node.create"},
            hotkeys=[{"key": "mod+n", "description": "New node"}],
            availability=[{"context": "workspace"}],
        )
    )

    payload = canonicalize_commands(spec).to_dict()

    assert payload["commands"][0]["mutation"] == {"type": "intent", "intent_id": "node.create"}
    assert payload["commands"][0]["availability"] == [{"context": "workspace", "when": None}]
    assert payload["hotkeys"] == [
        {"key": "mod+n", "command_id": "node.create", "description": "New node"}
    ]


def test_capabilities_resolve_against_the_action_registry() -> None:
    registry = YamlAclRegistry.from_mapping({"actions": ["NODE_CREATE"], "roles": {}})
    descriptor = canonicalize_commands(
        _spec(_command("node.create"), _command("node.purge", capability="NODE_PURGE"))
    )

    issues = command_capability_errors(descriptor.commands, registry)

    assert [str(issue) for issue in issues] == [
        'Command "node.purge": capability - Invalid ActionID "NODE_PURGE" '
        "not found in ActionRegistry",
    ]


def test_intent_bindings() -> None:
    descriptor = canonicalize_commands(
        _spec(
            _command("node.create", mutation={"type": "intent", "intentId": "node.create"}),
            _command("node.ghost", mutation={"type": "intent", "intentId": "node.ghost"}),
            _command("node.required", requiresIntent=True, navigation={"route": "/nodes"}),
            _command(
                "nav.create",
                scope="navigation",
                mutation={"type": "intent", "intentId": "node.create"},
            ),
        )
    )

    issues = command_intent_binding_errors(descriptor.commands, {"node.create"})

    assert [str(issue) for issue in issues] == [
        'Command "node.ghost": mutation.intentId - Invalid IntentID "node.ghost" '
        "not found in intent graph",
        'Command "node.required": mutation - Domain command requires an intent binding',
        'Command "nav.create": mutation.intentId - Command with scope "navigation" '
        'must not bind intent "node.create"',
    ]
