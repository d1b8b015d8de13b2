"""
act-engine - unit tests for instrumentation (phase 8.1) and intent graph (phase 8.2) canonicalization

File: tests/unit/pipeline/test_instrumentation_phases.py
Last updated: 2026-10-19

Purpose
- Exercise the optional instrumentation sources against the sample registry and ACL.

What this test file should cover
- Missing sources are warnings.
- Unknown invariants, duplicate ids, and parse failures are reported per file.
- Executor policy failures are reported per intent while other intents still pass.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from act_engine.canonical.intents import EXECUTOR_CANNOT_BE_HOOK
from act_engine.config import EngineConfig
from act_engine.pipeline.phases.instrumentation import run_instrumentation_canonicalization
from act_engine.pipeline.phases.intents import run_intent_graph_canonicalization
from tests.unit.workspace import phase_context, write_text, write_workspace


def _telemetry(descriptor_id: str, *invariants: str) -> str:
    body: dict[str, object] = {
        "id": descriptor_id,
        "channels": [{"id": "ui", "events": [{"name": "form_opened"}]}],
    }
    if invariants:
        body["invariants"] = {"invariants": list(invariants)}
    return yaml.safe_dump({"telemetry": body}, sort_keys=False)


def _intent_graph(config: EngineConfig, intents: list[dict[str, object]], **extra: object) -> Path:
    document = {"intentGraph": {"metadata": {"version": "1.0.0"}, "intents": intents, **extra}}
    return write_text(config.paths.intent_graph_path, yaml.safe_dump(document, sort_keys=False))


def _intent(intent_id: str, **fields: object) -> dict[str, object]:
    return {
        "id": intent_id,
        "description": f"{intent_id} intent",
        "category": "workspace",
        "domain": intent_id.split(".", 1)[0],
        **fields,
    }


# Phase 8.1 -------------------------------------------------------------------


def test_missing_instrumentation_directories_are_warnings(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    root = config.paths.instrumentation_dir.as_posix()

    outcome = run_instrumentation_canonicalization(phase_context(config))

    assert outcome.errors == ()
    assert outcome.warnings == (
        f"Telemetry directory does not exist: {root}/telemetry (skipping)",
        f"Devtools directory does not exist: {root}/devtools (skipping)",
        f"UX directory does not exist: {root}/ux (skipping)",
    )


def test_telemetry_files_are_checked_per_file(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    telemetry_dir = config.paths.instrumentation_dir / "telemetry"
    write_text(telemetry_dir / "a.yaml", _telemetry("app.telemetry", "UI_SCROLL.F82"))
    write_text(telemetry_dir / "b.yaml", _telemetry("app.telemetry"))
    write_text(telemetry_dir / "c.yaml", _telemetry("other.telemetry", "UI_GHOST.F1"))
    write_text(telemetry_dir / "d.yaml", "telemetry:\n  channels: [\n")

    outcome = run_instrumentation_canonicalization(phase_context(config))

    assert outcome.errors[:2] == (
        'Telemetry file "b.yaml": Duplicate descriptor id "app.telemetry" '
        '(already defined in "a.yaml")',
        'Telemetry file "c.yaml": Invariant UI_GHOST.F1 not found in registry',
    )
    assert len(outcome.errors) == 3
    assert outcome.errors[2].startswith('Failed to parse or validate telemetry file "d.yaml": ')


# Phase 8.2 -------------------------------------------------------------------


def test_missing_intent_graph_is_a_warning(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)

    outcome = run_intent_graph_canonicalization(phase_context(config))

    assert outcome.errors == ()
    assert outcome.warnings == (
        f"Intent graph file does not exist: {config.paths.intent_graph_path.as_posix()} (skipping)",
    )


def test_valid_intent_graph_passes(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    _intent_graph(
        config,
        [_intent("node.create", mutationHook="hooks/useCreateNode"), _intent("node.view")],
        intentActions=[{"intentId": "node.create", "actionIds": ["NODE_CREATE"]}],
        intentInvariants=[{"intentId": "node.create", "invariantIds": ["DOMAIN_LOGIC.F2"]}],
    )

    outcome = run_intent_graph_canonicalization(phase_context(config))

    assert outcome.errors == ()


def test_reference_and_policy_errors_are_per_intent(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    _intent_graph(
        config,
        [
            _intent("node.create", mutationHook="hooks/useCreateNode", executor="useCreateNode"),
            _intent("node.update", mutationHook="hooks/useUpdateNode"),
        ],
        intentActions=[{"intentId": "node.update", "actionIds": ["NODE_PURGE"]}],
    )

    outcome = run_intent_graph_canonicalization(phase_context(config))

    assert len(outcome.errors) == 2
    assert outcome.errors[0] == 'Intent "node.update": Unknown action "NODE_PURGE"'
    assert outcome.errors[1].startswith(f'Intent "node.create": {EXECUTOR_CANNOT_BE_HOOK}: ')


def test_unparseable_intent_graph(tmp_path: Path) -> None:
    config = write_workspace(tmp_path)
    write_text(config.paths.intent_graph_path, "intentGraph:\n  intents: []\n")

    outcome = run_intent_graph_canonicalization(phase_context(config))

    assert len(outcome.errors) == 1
    assert outcome.errors[0].startswith(
        'Failed to parse or validate intent graph "intent-graph.yaml": '
    )
