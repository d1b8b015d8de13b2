"""
act-engine - unit tests for code generation (phase 7) and drift checks (phase 8)

File: tests/unit/pipeline/test_generation_phases.py
Last updated: 2026-10-19

Purpose
- Generate the sample workspace, then verify idempotence and check-mode reporting.

What this test file should cover
- A first run writes every manifest artifact; a second run writes nothing.
- In check mode a deleted artifact is a phase 7 warning and a phase 8 warning, never an error.
- Hand edits that drop the banner are flagged by phase 8.
- A target that cannot be read or written is one error; the other artifacts still generate.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from act_engine.pipeline.phases.codegen import run_code_generation
from act_engine.pipeline.phases.drift import run_drift_check
from act_engine.utils.hashing import has_generation_banner
from tests.unit.workspace import phase_context, write_workspace


def test_first_run_writes_every_artifact_and_second_run_none(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))
    expected = [ref.path.as_posix() for ref in context.manifest.expected_artifacts()]

    first = run_code_generation(context)
    second = run_code_generation(context)

    assert first.errors == ()
    assert list(first.artifacts) == expected
    assert len(expected) == 7
    assert second.errors == ()
    assert second.artifacts == ()
    for ref in context.manifest.expected_artifacts():
        assert has_generation_banner(ref.path.read_text(encoding="utf-8")), ref.label


def test_generated_paths_follow_domain_naming(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    context = phase_context(config)

    run_code_generation(context)

    paths = config.paths
    assert (paths.shared_contracts_dir / "node_contract.py").is_file()
    assert (paths.migrations_dir / "node.sql").is_file()
    assert (paths.services_dir / "node_service.py").is_file()
    assert (paths.routes_dir / "node_routes.py").is_file()
    assert (paths.tests_dir / "test_node_contract.py").is_file()
    assert (paths.forms_output_dir / "node_create_form.py").is_file()


def test_drift_check_passes_after_generation(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))
    run_code_generation(context)

    outcome = run_drift_check(context)

    assert outcome.errors == ()
    assert outcome.warnings == ()


def test_check_mode_reports_deleted_migration_as_warnings(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    run_code_generation(phase_context(config))
    migration = config.paths.migrations_dir / "node.sql"
    migration.unlink()

    context = phase_context(replace(config, check_mode=True))
    generation = run_code_generation(context)
    drift = run_drift_check(context)

    assert generation.errors == ()
    assert generation.warnings == (
        "migration artifact for Node would be regenerated: Drift detected (check mode)",
    )
    assert generation.artifacts == ()
    assert not migration.exists()
    assert drift.errors == ()
    assert drift.warnings == (f"Expected artifact missing (check mode): {migration.as_posix()}",)


def test_missing_artifacts_are_errors_outside_check_mode(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))

    outcome = run_drift_check(context)

    assert len(outcome.errors) == 7
    assert all(item.startswith("Expected artifact missing: ") for item in outcome.errors)


def test_hand_edited_artifact_without_banner(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))
    run_code_generation(context)
    shared = context.manifest.contracts[0].shared_path
    shared.write_text("NODE = 'edited'\n", encoding="utf-8")

    outcome = run_drift_check(context)

    assert outcome.warnings == (
        f'Artifact "{shared.as_posix()}" is missing generation banner (may need manual fix)',
    )


def test_check_mode_flags_edited_artifact(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    run_code_generation(phase_context(config))
    route = config.paths.routes_dir / "node_routes.py"
    original = route.read_text(encoding="utf-8")
    route.write_text(original + "# local tweak\n", encoding="utf-8")

    outcome = run_code_generation(phase_context(replace(config, check_mode=True)))

    assert outcome.warnings == (
        "route artifact for Node would be regenerated: Drift detected (check mode)",
    )
    assert route.read_text(encoding="utf-8").endswith("# local tweak\n")


def test_unwritable_target_is_reported_per_artifact(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))
    refs = context.manifest.expected_artifacts()
    refs[0].path.mkdir(parents=True)

    outcome = run_code_generation(context)

    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith("Failed to write shared artifact for Node: ")
    assert list(outcome.artifacts) == [ref.path.as_posix() for ref in refs[1:]]
    assert refs[0].path.is_dir()


def test_undecodable_existing_artifact_is_reported_per_artifact(tmp_path: Path) -> None:
    context = phase_context(write_workspace(tmp_path))
    refs = context.manifest.expected_artifacts()
    route = next(ref for ref in refs if ref.kind == "route")
    route.path.parent.mkdir(parents=True, exist_ok=True)
    route.path.write_bytes(b"\xff\xfe garbage")

    outcome = run_code_generation(context)

    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith("Failed to write route artifact for Node: ")
    assert len(outcome.artifacts) == len(refs) - 1
    assert route.path.read_bytes() == b"\xff\xfe garbage"
