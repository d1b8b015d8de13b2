"""
act-engine - unit tests for the validation phases (1, 1.5, 2, 3, 4 and 10)

File: tests/unit/pipeline/test_validation_phases.py
Last updated: 2026-10-19

Purpose
- Run each validation phase directly against the sample workspace and check the
  errors and warnings it reports.

What this test file should cover
- Orphan YAML and missing banners in completeness checks.
- Architecture guard warnings and violations.
- A registry missing a required invariant fails phases 3 and 10 with the same message.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

import yaml

from act_engine.constants import REQUIRED_INVARIANTS
from act_engine.domain.contracts import ContractDefinition
from act_engine.knowledge_plane.acl_registry import YamlAclRegistry
from act_engine.pipeline.phases.acl import run_acl_validation
from act_engine.pipeline.phases.architecture import run_architecture_guard
from act_engine.pipeline.phases.completeness import run_form_completeness
from act_engine.pipeline.phases.invariants import (
    check_invariant_registry,
    run_invariant_registry_validation,
    run_invariant_validation,
)
from act_engine.pipeline.phases.metadata import run_metadata_validation
from tests.unit.workspace import (
    NODE_CREATE_FORM_YAML,
    phase_context,
    registry_with,
    sample_services,
    write_text,
    write_workspace,
)

_RULES_YAML = """
architectureRules:
  metadata:
    version: "1.0"
  rules:
    - id: ARCHITECTURE.F1_NO_DIRECT_DB
      description: UI code must not import the database driver
      telosViolated: Persistence flows through services
      resolutionHint: [Call the service layer]
      matchers:
        imports:
          - from: sqlite3
    - id: ARCHITECTURE.F2_NO_PRINT
      description: Use structured logging
      telosViolated: Observability is structured
      resolutionHint: [Use the structlog logger]
      severity: warn
      matchers:
        identifiers:
          - pattern: "\\\\bprint\\\\("
""".lstrip()


# Phase 1 ---------------------------------------------------------------------


def test_completeness_passes_on_sample_workspace(tmp_path: Path) -> None:
    outcome = run_form_completeness(phase_context(write_workspace(tmp_path)))

    assert outcome.errors == ()
    assert any("Generated forms directory does not exist" in item for item in outcome.warnings)


def test_orphan_yaml_and_missing_form_file(tmp_path: Path) -> None:
    config = write_workspace(tmp_path, form_yaml=None)
    write_text(
        config.paths.yaml_dir / "Ghost.create.form.yaml",
        NODE_CREATE_FORM_YAML.replace("contract: Node", "contract: Ghost"),
    )

    outcome = run_form_completeness(phase_context(config))

    assert outcome.errors == (
        "Missing YAML file for Node.create: Node.create.form.yaml",
        'Orphan YAML file "Ghost.create.form.yaml": Contract "Ghost" not found in metadata',
    )


def test_generated_form_without_banner_is_an_error(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.forms_output_dir / "node_create_form.py", "FORM_KEY = 'x'\n")

    outcome = run_form_completeness(phase_context(config))

    assert outcome.errors == ('Generated file "node_create_form.py" is missing generation banner',)


def test_unreadable_generated_form_is_a_warning_and_other_checks_still_run(
    tmp_path: Path,
) -> None:
    config = write_workspace(tmp_path)
    write_text(
        config.paths.yaml_dir / "Ghost.create.form.yaml",
        NODE_CREATE_FORM_YAML.replace("contract: Node", "contract: Ghost"),
    )
    broken = config.paths.forms_output_dir / "node_create_form.py"
    broken.parent.mkdir(parents=True, exist_ok=True)
    broken.write_bytes(b"\xff\xfe not utf-8")

    outcome = run_form_completeness(phase_context(config))

    assert outcome.errors == (
        'Orphan YAML file "Ghost.create.form.yaml": Contract "Ghost" not found in metadata',
    )
    assert len(outcome.warnings) == 1
    assert outcome.warnings[0].startswith('Cannot read generated file "node_create_form.py": ')


def test_missing_critical_invariants_are_warnings(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    services = sample_services(["UI_FORM.F004"])

    outcome = run_form_completeness(phase_context(config, services))

    assert outcome.errors == ()
    assert "Critical invariant UI_SCROLL.F82 not found in registry" in outcome.warnings


# Phase 1.5 -------------------------------------------------------------------


def test_architecture_guard_skips_without_rules(tmp_path: Path) -> None:
    outcome = run_architecture_guard(phase_context(write_workspace(tmp_path)))

    assert outcome.errors == ()
    assert outcome.warnings == ("architecture-rules.yaml not found - skipping architecture guard",)


def test_architecture_guard_reports_by_severity(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.architecture_rules_path, _RULES_YAML)
    write_text(tmp_path / "src" / "app" / "panel.py", "import sqlite3\n\nprint('hi')\n")
    write_text(tmp_path / "src" / "generated" / "skip.py", "import sqlite3\n")

    outcome = run_architecture_guard(phase_context(config))

    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith(
        "[ARCHITECTURE VIOLATION ARCHITECTURE.F1_NO_DIRECT_DB]\nFile: src/app/panel.py:1"
    )
    assert len(outcome.warnings) == 1
    assert "Identifier: print(" in outcome.warnings[0]


def test_architecture_guard_warns_on_unreadable_source_and_keeps_scanning(
    tmp_path: Path,
) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.architecture_rules_path, _RULES_YAML)
    broken = tmp_path / "src" / "app" / "a_broken.py"
    broken.parent.mkdir(parents=True, exist_ok=True)
    broken.write_bytes(b"\xff\xfe not utf-8")
    write_text(tmp_path / "src" / "app" / "panel.py", "import sqlite3\n")

    outcome = run_architecture_guard(phase_context(config))

    assert len(outcome.warnings) == 1
    assert outcome.warnings[0].startswith("Cannot read source file src/app/a_broken.py: ")
    assert len(outcome.errors) == 1
    assert "File: src/app/panel.py:1" in outcome.errors[0]


# Phase 2 ---------------------------------------------------------------------


def test_metadata_validation_wraps_validator_failures(tmp_path: Path) -> None:
    def reject(contracts: Sequence[ContractDefinition]) -> None:
        raise RuntimeError(f"{len(contracts)} contract(s) rejected")

    services = replace(sample_services(), contract_validator=reject)

    outcome = run_metadata_validation(phase_context(write_workspace(tmp_path), services))

    assert outcome.errors == ("Metadata validation failed: 1 contract(s) rejected",)


def test_metadata_validation_passes_with_default_validator(tmp_path: Path) -> None:
    assert run_metadata_validation(phase_context(write_workspace(tmp_path))).errors == ()


# Phases 3 and 10 -------------------------------------------------------------


def test_registry_missing_required_invariant_fails_phase_3_and_10(tmp_path: Path) -> None:
    ids = [item for item in REQUIRED_INVARIANTS if item != "UI_SCROLL.F82"]
    context = phase_context(write_workspace(tmp_path), sample_services(ids))

    phase_3 = run_invariant_validation(context)
    phase_10 = run_invariant_registry_validation(context)

    expected = "Required invariant UI_SCROLL.F82 not found in registry"
    assert phase_3.errors == (expected,)
    assert phase_10.errors == (expected,)


def test_non_canonical_ids_are_warnings() -> None:
    report = check_invariant_registry(registry_with([*REQUIRED_INVARIANTS, "ui.scroll"]))

    assert not report.has_errors
    assert report.outcome().warnings == (
        'Invariant ID "ui.scroll" does not match canonical format (CATEGORY.CODE)',
    )


def test_empty_registry() -> None:
    report = check_invariant_registry(registry_with([]), required=())

    assert report.outcome().errors == ("Invariant engine registry is empty",)


# Phase 4 ---------------------------------------------------------------------


def test_acl_validation_on_sample_acl(tmp_path: Path) -> None:
    outcome = run_acl_validation(phase_context(write_workspace(tmp_path)))

    assert outcome.errors == ()
    assert outcome.warnings == ()


def test_acl_validation_reports_problems(tmp_path: Path) -> None:
    acl = YamlAclRegistry.from_mapping(
        yaml.safe_load(
            """
actions: [NODE_READ, node_write]
roles:
  reader:
    actions: [NODE_READ]
  auditor:
    actions: [NODE_READ]
  writer:
    inherits: [reader, ghost]
    actions: [node_write, NODE_PURGE]
    excludes: [reader]
"""
        )
    )
    services = replace(sample_services(), acl_compiler=acl, action_registry=acl)

    outcome = run_acl_validation(phase_context(write_workspace(tmp_path), services))

    assert outcome.errors == (
        'Role "writer" references unknown action: node_write',
        'Role "writer" references unknown action: NODE_PURGE',
        'Action "node_write" in registry failed validation',
    )
    assert outcome.warnings == (
        'Role conflict: reader vs writer: mutually exclusive roles combined in "writer"',
        "Redundant roles detected: auditor, reader",
        'Role "writer" inherits unknown role "ghost"',
    )
