"""
act-engine - unit tests for the phase sequencer

File: tests/unit/pipeline/test_sequencer.py
Last updated: 2026-10-19

Purpose
- Validate numeric phase ordering, registration rules, skipping, and failure capture.

What this test file should cover
- Fractional phase numbers sort numerically.
- A raising phase becomes one labelled error and the run continues.
- Skipped phases are absent from results.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from act_engine.config import EngineConfig, PathsConfig
from act_engine.manifests.models import AclManifest, InvariantManifestSummary, Manifest
from act_engine.pipeline import PhaseContext, PhaseDefinition, PhaseOutcome, PhaseSequencer
from tests.unit.workspace import sample_services


def _context(skip: frozenset[float] = frozenset()) -> PhaseContext:
    manifest = Manifest(
        contracts=(),
        forms=(),
        invariants=InvariantManifestSummary(registry_path=Path("inv"), mapping_path=Path("map.py")),
        acl=AclManifest(),
        generated_at=datetime(2026, 10, 19, tzinfo=UTC),
    )
    return PhaseContext(
        manifest=manifest,
        config=EngineConfig(paths=PathsConfig.under(Path("/workspace")), skip_phases=skip),
        services=sample_services(),
    )


def _ok(context: PhaseContext) -> PhaseOutcome:
    return PhaseOutcome(artifacts=("out.py",))


def _boom(context: PhaseContext) -> PhaseOutcome:
    raise RuntimeError("disk on fire")


def test_fractional_phases_run_in_numeric_order() -> None:
    calls: list[str] = []

    def recorder(tag: str):
        def run(context: PhaseContext) -> PhaseOutcome:
            calls.append(tag)
            return PhaseOutcome()

        return run

    sequencer = PhaseSequencer(
        [
            PhaseDefinition(10, "Ten", recorder("10")),
            PhaseDefinition(7.6, "Seven six", recorder("7.6")),
            PhaseDefinition(7, "Seven", recorder("7")),
            PhaseDefinition(7.5, "Seven five", recorder("7.5")),
        ]
    )

    results = sequencer.run(_context())

    assert calls == ["7", "7.5", "7.6", "10"]
    assert [result.label for result in results] == [
        "Phase 7: Seven",
        "Phase 7.5: Seven five",
        "Phase 7.6: Seven six",
        "Phase 10: Ten",
    ]


@given(st.lists(st.integers(min_value=1, max_value=1000), min_size=1, max_size=20, unique=True))
def test_definitions_are_sorted_regardless_of_registration_order(tenths: list[int]) -> None:
    sequencer = PhaseSequencer(PhaseDefinition(value / 10, f"p{value}", _ok) for value in tenths)

    numbers = [definition.number for definition in sequencer.definitions]

    assert numbers == sorted(value / 10 for value in tenths)


def test_duplicate_phase_numbers_are_rejected_unless_replaced() -> None:
    sequencer = PhaseSequencer([PhaseDefinition(2, "Original", _ok)])

    with pytest.raises(ValueError, match="phase already registered: 2"):
        sequencer.register(PhaseDefinition(2.0, "Again", _ok))
    sequencer.register(PhaseDefinition(2, "Replacement", _ok), replace=True)

    assert [definition.name for definition in sequencer.definitions] == ["Replacement"]


@pytest.mark.parametrize("number", [0, -1, float("nan"), True])
def test_invalid_phase_numbers(number: float) -> None:
    with pytest.raises(ValueError):
        PhaseDefinition(number, "Bad", _ok)


def test_raising_phase_is_captured_and_run_continues() -> None:
    sequencer = PhaseSequencer(
        [
            PhaseDefinition(1, "Explodes", _boom, "Explosion check failed"),
            PhaseDefinition(2, "Fine", _ok),
        ]
    )

    first, second = sequencer.run(_context())

    assert first.errors == ("Explosion check failed: disk on fire",)
    assert not first.success
    assert second.success
    assert second.artifacts == ("out.py",)


def test_default_failure_label() -> None:
    assert PhaseDefinition(3, "Widget Check", _boom).failure_label == "Widget Check failed"


def test_skipped_phases_are_omitted() -> None:
    sequencer = PhaseSequencer(
        [PhaseDefinition(1, "One", _ok), PhaseDefinition(1.5, "Guard", _ok), PhaseDefinition(2, "Two", _ok)]
    )

    results = sequencer.run(_context(skip=frozenset({1.5})))

    assert [result.phase for result in results] == [1.0, 2.0]
    assert [item.number for item in sequencer.planned(_context().config)] == [1.0, 1.5, 2.0]


def test_unregister() -> None:
    sequencer = PhaseSequencer([PhaseDefinition(1, "One", _ok), PhaseDefinition(2, "Two", _ok)])

    sequencer.unregister(1)

    assert [item.number for item in sequencer.definitions] == [2.0]
