"""
act-engine - pipeline result model

File: src/act_engine/pipeline/results.py
Last updated: 2026-10-19

Purpose
- Immutable per-phase and per-run results.

Functional requirements
- ``PhaseResult.success`` is true iff the phase reported no errors.
- ``PipelineResult.success`` is true iff every reported phase succeeded.
- Reported phases are strictly ascending by phase number.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from act_engine.manifests.models import Manifest


def format_phase_number(number: float) -> str:
    """``7.5`` stays ``7.5``; ``3.0`` becomes ``3``."""

    return f"{number:g}"


@dataclass(frozen=True, slots=True)
class PhaseOutcome:
    """What a phase runner reports; timing and naming are added by the sequencer."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    artifacts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "artifacts", tuple(self.artifacts))


@dataclass(frozen=True, slots=True)
class PhaseResult:
    phase: float
    name: str
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    duration_ms: int = 0
    artifacts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not math.isfinite(self.phase) or self.phase < 0:
            raise ValueError("PhaseResult.phase must be a finite number >= 0")
        if not self.name:
            raise ValueError("PhaseResult.name must be non-empty")
        if self.duration_ms < 0:
            raise ValueError("PhaseResult.duration_ms must be >= 0")
        object.__setattr__(self, "phase", float(self.phase))
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "artifacts", tuple(self.artifacts))

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def label(self) -> str:
        return f"Phase {format_phase_number(self.phase)}: {self.name}"

    def to_dict(self) -> dict[str, object]:
        return {
            "phase": self.phase,
            "name": self.name,
            "success": self.success,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "duration_ms": self.duration_ms,
            "artifacts": list(self.artifacts),
        }


@dataclass(frozen=True, slots=True)
class PipelineResult:
    phases: tuple[PhaseResult, ...]
    manifest: Manifest | None = None
    duration_ms: int = 0
    errors: tuple[str, ...] = field(init=False)
    warnings: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        phases = tuple(self.phases)
        for previous, current in zip(phases, phases[1:], strict=False):
            if current.phase <= previous.phase:
                raise ValueError(
                    "PipelineResult.phases must be strictly ascending: "
                    f"{format_phase_number(previous.phase)} then "
                    f"{format_phase_number(current.phase)}"
                )
        if self.duration_ms < 0:
            raise ValueError("PipelineResult.duration_ms must be >= 0")
        object.__setattr__(self, "phases", phases)
        object.__setattr__(
            self, "errors", tuple(error for phase in phases for error in phase.errors)
        )
        object.__setattr__(
            self, "warnings", tuple(warning for phase in phases for warning in phase.warnings)
        )

    @property
    def success(self) -> bool:
        return all(phase.success for phase in self.phases)

    def phase(self, number: float) -> PhaseResult | None:
        for item in self.phases:
            if item.phase == float(number):
                return item
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "duration_ms": self.duration_ms,
            "phases": [phase.to_dict() for phase in self.phases],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "manifest": self.manifest.to_dict() if self.manifest is not None else None,
        }


__all__ = [
    "PhaseOutcome",
    "PhaseResult",
    "PipelineResult",
    "format_phase_number",
]
