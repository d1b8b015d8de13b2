"""
act-engine - phase registry and sequencer

File: src/act_engine/pipeline/sequencer.py
Last updated: 2026-10-19

Purpose
- Register numbered phases and run them in ascending order over one shared manifest.

Normative behavior
- Phase numbers may be fractional (``1.5``, ``7.5``); order is numeric, never lexical.
- A duplicate phase number is rejected at registration unless ``replace=True``.
- Phases listed in ``config.skip_phases`` are omitted from results entirely.
- A failing or raising phase never halts the run; a raise becomes exactly one
  ``"<failure label>: <message>"`` error.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from act_engine.config.schema import EngineConfig
from act_engine.domain.contracts import ContractDefinition
from act_engine.manifests.models import Manifest
from act_engine.pipeline.results import PhaseOutcome, PhaseResult, format_phase_number
from act_engine.pipeline.services import PipelineServices


@dataclass(frozen=True, slots=True)
class PhaseContext:
    """Invocation context passed to every phase runner."""

    manifest: Manifest
    config: EngineConfig
    services: PipelineServices
    contracts: tuple[ContractDefinition, ...] = ()

    def contract(self, name: str) -> ContractDefinition | None:
        for item in self.contracts:
            if item.name == name:
                return item
        return None


PhaseRunner = Callable[[PhaseContext], PhaseOutcome]


@dataclass(frozen=True, slots=True)
class PhaseDefinition:
    number: float
    name: str
    runner: PhaseRunner
    failure_label: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not math.isfinite(self.number):
            raise ValueError("PhaseDefinition.number must be a finite number")
        if self.number <= 0:
            raise ValueError("PhaseDefinition.number must be > 0 (phase 0 belongs to the driver)")
        if not self.name.strip():
            raise ValueError("PhaseDefinition.name must be non-empty")
        object.__setattr__(self, "number", float(self.number))
        if not self.failure_label:
            object.__setattr__(self, "failure_label", f"{self.name} failed")

    @property
    def display_number(self) -> str:
        return format_phase_number(self.number)


class PhaseSequencer:
    """Deterministic, strictly sequential phase runner."""

    def __init__(
        self,
        definitions: Iterable[PhaseDefinition] = (),
        *,
        logger: Any | None = None,
    ) -> None:
        self._definitions: dict[float, PhaseDefinition] = {}
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        for definition in definitions:
            self.register(definition)

    @property
    def definitions(self) -> tuple[PhaseDefinition, ...]:
        return tuple(self._definitions[number] for number in sorted(self._definitions))

    def register(self, definition: PhaseDefinition, *, replace: bool = False) -> None:
        if definition.number in self._definitions and not replace:
            raise ValueError(f"phase already registered: {definition.display_number}")
        self._definitions[definition.number] = definition

    def unregister(self, number: float) -> None:
        self._definitions.pop(float(number), None)

    def planned(self, config: EngineConfig) -> tuple[PhaseDefinition, ...]:
        """Definitions that will run under ``config``, in execution order."""

        return tuple(item for item in self.definitions if not config.is_skipped(item.number))

    def run(self, context: PhaseContext) -> tuple[PhaseResult, ...]:
        results: list[PhaseResult] = []
        for definition in self.planned(context.config):
            results.append(self._run_phase(definition, context))
        return tuple(results)

    def _run_phase(self, definition: PhaseDefinition, context: PhaseContext) -> PhaseResult:
        start = time.perf_counter()
        self._logger.info(
            "pipeline_phase_started", phase=definition.display_number, name=definition.name
        )
        try:
            outcome = definition.runner(context)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "pipeline_phase_raised",
                phase=definition.display_number,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            outcome = PhaseOutcome(errors=(f"{definition.failure_label}: {exc}",))

        result = PhaseResult(
            phase=definition.number,
            name=definition.name,
            errors=outcome.errors,
            warnings=outcome.warnings,
            duration_ms=_duration_ms(start),
            artifacts=outcome.artifacts,
        )
        self._logger.info(
            "pipeline_phase_completed",
            phase=definition.display_number,
            name=definition.name,
            success=result.success,
            errors=len(result.errors),
            warnings=len(result.warnings),
            duration_ms=result.duration_ms,
        )
        return result


def _duration_ms(start: float) -> int:
    elapsed_seconds = max(time.perf_counter() - start, 0.0)
    return int(round(elapsed_seconds * 1000))


__all__ = [
    "PhaseContext",
    "PhaseDefinition",
    "PhaseRunner",
    "PhaseSequencer",
]
