"""Unit tests for phase and pipeline result models."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from act_engine.pipeline.results import PhaseResult, PipelineResult, format_phase_number


def test_phase_success_and_label() -> None:
    ok = PhaseResult(phase=7.5, name="Functional Form Canonicalization", warnings=("w",))
    failed = PhaseResult(phase=3, name="Invariant Validation", errors=("e",))

    assert ok.success
    assert not failed.success
    assert ok.label == "Phase 7.5: Functional Form Canonicalization"
    assert failed.label == "Phase 3: Invariant Validation"


@pytest.mark.parametrize(("number", "text"), [(0.0, "0"), (3.0, "3"), (7.6, "7.6"), (8.25, "8.25")])
def test_format_phase_number(number: float, text: str) -> None:
    assert format_phase_number(number) == text


@pytest.mark.parametrize(
    "kwargs",
    [
        {"phase": -1, "name": "x"},
        {"phase": 1, "name": ""},
        {"phase": 1, "name": "x", "duration_ms": -5},
    ],
)
def test_invalid_phase_results(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        PhaseResult(**kwargs)  # type: ignore[arg-type]


def test_pipeline_aggregates_in_phase_order() -> None:
    result = PipelineResult(
        phases=(
            PhaseResult(phase=0, name="Manifest Generation"),
            PhaseResult(phase=2, name="Metadata", errors=("bad contract",), warnings=("w1",)),
            PhaseResult(phase=8, name="Drift", warnings=("w2",)),
        ),
        duration_ms=12,
    )

    assert not result.success
    assert result.errors == ("bad contract",)
    assert result.warnings == ("w1", "w2")
    assert result.phase(8) is result.phases[2]
    assert result.phase(9) is None
    payload = result.to_dict()
    assert payload["success"] is False
    assert payload["manifest"] is None
    assert [item["phase"] for item in payload["phases"]] == [0.0, 2.0, 8.0]


def test_phases_must_be_strictly_ascending() -> None:
    with pytest.raises(ValueError, match="strictly ascending: 7.5 then 7"):
        PipelineResult(
            phases=(PhaseResult(phase=7.5, name="a"), PhaseResult(phase=7, name="b"))
        )


def test_empty_pipeline_is_successful() -> None:
    assert PipelineResult(phases=()).success


@given(st.lists(st.booleans(), max_size=12))
def test_success_iff_every_phase_succeeded(failures: list[bool]) -> None:
    phases = tuple(
        PhaseResult(phase=index + 1, name=f"p{index}", errors=("e",) if failed else ())
        for index, failed in enumerate(failures)
    )

    result = PipelineResult(phases=phases)

    assert result.success == all(phase.success for phase in phases)
    assert len(result.errors) == sum(failures)
