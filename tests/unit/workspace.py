"""
act-engine - sample FORM workspace for unit tests

File: tests/unit/workspace.py
Last updated: 2026-10-19

Purpose
- Write a small but complete FORM tree (one contract, one form, invariants, ACL)
  under a temporary directory, and build the matching config and services.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import yaml

from act_engine.config import EngineConfig, PathsConfig
from act_engine.constants import REQUIRED_INVARIANTS
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.interfaces import InvariantMetadata
from act_engine.knowledge_plane.acl_registry import YamlAclRegistry
from act_engine.knowledge_plane.invariant_registry import YamlInvariantRegistry
from act_engine.manifests import build_manifest
from act_engine.pipeline import PhaseContext, PipelineServices

NODE_CONTRACT_YAML = """
contract:
  name: Node
  domain: node
  version: 1.2.0
  baseSchema:
    name: NodeRecord
    fields:
      - name: id
        type: uuid
        readonly: true
      - name: title
        type: string
        constraints:
          minLength: 1
          maxLength: 120
      - name: description
        type: text
        optional: true
      - name: priority
        type: integer
        nullable: true
        constraints:
          min: 0
          max: 5
  formSchemas:
    - id: create
      defaultSections:
        - [title, description]
        - fields: [priority]
  projectionCapabilities:
    string:
      defaultWidget: text
      widgets: [text]
    text:
      defaultWidget: textarea
      widgets: [textarea, text]
    integer:
      defaultWidget: number
      widgets: [number, slider]
  transformations:
    - function: to_summary
      from: NodeRecord
      to: NodeSummary
      description: Project a node into its summary view.
  endpoints:
    - name: create_node
      method: post
      path: /nodes
      action: NODE_CREATE
  dbMapping:
    table: nodes
    columns:
      - {name: id, type: uuid, nullable: false, primaryKey: true}
      - {name: title, type: text, nullable: false}
      - {name: description, type: text}
      - {name: priority, type: integer, default: "0"}
""".lstrip()

NODE_CREATE_FORM_YAML = """
form:
  contract: Node
  variant: create
  sections:
    - id: main
      title: Main
      fields: [title, description]
    - id: details
      title: Details
      fields: [priority]
  invariants:
    invariants: [UI_SCROLL.F82]
    enforceAt: both
""".lstrip()

ACL_YAML = """
actions: [NODE_CREATE, NODE_READ, NODE_UPDATE]
roles:
  viewer:
    actions: [NODE_READ]
  editor:
    inherits: [viewer]
    actions: [NODE_CREATE]
  admin:
    inherits: [editor]
    actions: [NODE_UPDATE]
""".lstrip()

EXTRA_INVARIANTS: tuple[str, ...] = ("UI_FORM.F004",)

FIXED_CLOCK = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def invariants_document(ids: Sequence[str]) -> str:
    entries = [
        {
            "id": invariant_id,
            "name": invariant_id.lower(),
            "description": f"Invariant {invariant_id}",
            "enforce": "enforce_" + invariant_id.replace(".", "_").lower(),
        }
        for invariant_id in ids
    ]
    return yaml.safe_dump({"invariants": entries}, sort_keys=False)


def write_workspace(
    root: Path,
    *,
    form_yaml: str | None = NODE_CREATE_FORM_YAML,
    invariant_ids: Sequence[str] = (*REQUIRED_INVARIANTS, *EXTRA_INVARIANTS),
) -> EngineConfig:
    """Write the sample workspace under ``root`` and return its default-layout config."""

    config = EngineConfig(paths=PathsConfig.under(root))
    paths = config.paths
    write_text(paths.metadata_dir / "node.contract.yaml", NODE_CONTRACT_YAML)
    if form_yaml is not None:
        write_text(paths.yaml_dir / "Node.create.form.yaml", form_yaml)
    write_text(paths.invariants_dir / "core.yaml", invariants_document(invariant_ids))
    write_text(paths.acl_path, ACL_YAML)
    return config


def node_contract() -> ContractDefinition:
    return ContractDefinition.from_document(yaml.safe_load(NODE_CONTRACT_YAML))


def registry_with(ids: Sequence[str]) -> YamlInvariantRegistry:
    metadata = []
    for invariant_id in ids:
        category, _, code = invariant_id.partition(".")
        metadata.append(
            InvariantMetadata(
                id=invariant_id,
                category=category,
                code=code,
                enforce="enforce_" + invariant_id.replace(".", "_").lower(),
            )
        )
    return YamlInvariantRegistry.from_metadata(metadata)


def sample_services(
    invariant_ids: Sequence[str] = (*REQUIRED_INVARIANTS, *EXTRA_INVARIANTS),
) -> PipelineServices:
    acl = YamlAclRegistry.from_mapping(yaml.safe_load(ACL_YAML))
    return PipelineServices(
        invariant_registry=registry_with(invariant_ids),
        acl_compiler=acl,
        action_registry=acl,
    )


def phase_context(
    config: EngineConfig, services: PipelineServices | None = None
) -> PhaseContext:
    """Manifest-backed context over the sample contract, as the driver would build it."""

    resolved = services if services is not None else sample_services()
    contracts = (node_contract(),)
    manifest = build_manifest(
        contracts,
        config,
        invariant_registry=resolved.invariant_registry,
        acl_compiler=resolved.acl_compiler,
        clock=lambda: FIXED_CLOCK,
    )
    return PhaseContext(
        manifest=manifest, config=config, services=resolved, contracts=contracts
    )
