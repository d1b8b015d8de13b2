"""
act-engine - unit tests for the manifest builder

File: tests/unit/manifests/test_manifest_builder.py
Last updated: 2026-10-19

Purpose
- Verify that artifact paths, discovered forms, and registry summaries are derived
  deterministically from contracts and configuration.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from act_engine.domain.contracts import ContractDefinition
from act_engine.manifests import build_manifest
from act_engine.manifests.models import Manifest
from tests.unit.workspace import (
    NODE_CREATE_FORM_YAML,
    node_contract,
    sample_services,
    write_text,
    write_workspace,
)

_FIXED = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _build(root: Path, contracts: list[ContractDefinition] | None = None) -> Manifest:
    config = write_workspace(root)
    services = sample_services(["UI_SCROLL.F82", "UI_FORM.F004", "DOMAIN_LOGIC.F2"])
    return build_manifest(
        contracts if contracts is not None else [node_contract()],
        config,
        invariant_registry=services.invariant_registry,
        acl_compiler=services.acl_compiler,
        clock=lambda: _FIXED,
    )


def test_contract_artifact_paths(tmp_path: Path) -> None:
    manifest = _build(tmp_path)

    entry = manifest.contract("Node")
    assert entry is not None
    assert {ref.kind: ref.path.relative_to(tmp_path).as_posix() for ref in entry.artifacts()} == {
        "shared": "generated/contracts/node_contract.py",
        "migration": "generated/migrations/node.sql",
        "service": "generated/services/node_service.py",
        "route": "generated/routes/node_routes.py",
        "test": "generated/tests/test_node_contract.py",
    }
    assert entry.artifacts()[0].label == "shared artifact for Node"


def test_optional_artifacts_are_omitted(tmp_path: Path) -> None:
    bare = replace(node_contract(), db_mapping=None, transformations=(), endpoints=())

    manifest = _build(tmp_path, [bare])

    assert [ref.kind for ref in manifest.contracts[0].artifacts()] == ["shared", "test"]


def test_forms_are_discovered_from_yaml_dir(tmp_path: Path) -> None:
    manifest = _build(tmp_path)

    assert [form.key for form in manifest.forms] == ["Node.create"]
    form = manifest.forms[0]
    assert form.sections == ("details", "main")
    assert form.fields == ("title", "description", "priority")
    assert form.output_path == tmp_path / "generated" / "forms" / "node_create_form.py"


def test_invalid_form_file_is_left_out(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.yaml_dir / "Node.edit.form.yaml", "form:\n  contract: Node\n")
    services = sample_services()

    manifest = build_manifest(
        [node_contract()],
        config,
        invariant_registry=services.invariant_registry,
        acl_compiler=services.acl_compiler,
        clock=lambda: _FIXED,
    )

    assert [form.variant for form in manifest.forms] == ["create"]


def test_forms_are_matched_to_contracts_by_file_name(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.yaml_dir / "Node.form.yaml", NODE_CREATE_FORM_YAML)
    write_text(config.paths.yaml_dir / "NodeGroup.create.form.yaml", NODE_CREATE_FORM_YAML)
    services = sample_services()

    manifest = build_manifest(
        [node_contract()],
        config,
        invariant_registry=services.invariant_registry,
        acl_compiler=services.acl_compiler,
        clock=lambda: _FIXED,
    )

    assert [form.yaml_path.name for form in manifest.forms] == ["Node.create.form.yaml"]


def test_registry_and_acl_summaries(tmp_path: Path) -> None:
    manifest = _build(tmp_path)

    assert manifest.invariants.invariant_count == 3
    assert manifest.invariants.categories == ("DOMAIN_LOGIC", "UI_FORM", "UI_SCROLL")
    assert manifest.acl.roles == ("admin", "editor", "viewer")
    assert manifest.acl.actions == ("NODE_CREATE", "NODE_READ", "NODE_UPDATE")
    assert manifest.acl.role_actions["editor"] == ("NODE_CREATE", "NODE_READ")
    assert manifest.expected_artifacts()[-1].kind == "invariant-mapping"


def test_to_dict_is_deterministic(tmp_path: Path) -> None:
    first = _build(tmp_path).to_dict()
    second = _build(tmp_path).to_dict()

    assert first == second
    assert first["generated_at"] == "2026-10-19T12:00:00Z"


def test_generated_at_is_normalized_to_utc(tmp_path: Path) -> None:
    manifest = _build(tmp_path)
    shifted = replace(manifest, generated_at=_FIXED.astimezone(timezone(timedelta(hours=2))))

    assert shifted.generated_at.tzinfo is UTC
    with pytest.raises(ValueError, match="timezone-aware"):
        replace(manifest, generated_at=datetime(2026, 1, 1))
