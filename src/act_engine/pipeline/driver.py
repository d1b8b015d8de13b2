"""
act-engine - pipeline driver

File: src/act_engine/pipeline/driver.py
Last updated: 2026-10-19

Purpose
- Run phase 0 (manifest generation) and then the registered phases over one manifest.

What should be included in this file
- ``run_pipeline`` for hosts that already hold contracts and collaborators.
- ``ActPipeline`` for hosts that resolve contracts through a ``ContractProvider``.

Functional requirements
- A manifest failure is reported as phase 0 and no further phase runs.
- Every run is wrapped in a ``run_id`` correlation scope.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Sequence
from typing import Any

import structlog

from act_engine.config.schema import EngineConfig
from act_engine.domain.contracts import ContractDefinition
from act_engine.manifests.builder import Clock, build_manifest
from act_engine.observability.logging import correlation_scope
from act_engine.pipeline.phases import default_phase_definitions
from act_engine.pipeline.results import PhaseResult, PipelineResult
from act_engine.pipeline.sequencer import PhaseContext, PhaseSequencer
from act_engine.pipeline.services import PipelineServices

MANIFEST_PHASE_NAME = "Manifest Generation"


def run_pipeline(
    contracts: Sequence[ContractDefinition],
    config: EngineConfig,
    *,
    services: PipelineServices,
    sequencer: PhaseSequencer | None = None,
    clock: Clock | None = None,
    logger: Any | None = None,
) -> PipelineResult:
    """Build the manifest, then run every planned phase in ascending order."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    active = sequencer if sequencer is not None else PhaseSequencer(default_phase_definitions())
    contracts = tuple(contracts)
    start = time.perf_counter()

    with correlation_scope(run_id=uuid.uuid4().hex):
        log.info(
            "pipeline_started",
            contracts=len(contracts),
            check_mode=config.check_mode,
            dry_run=config.dry_run,
        )
        manifest_start = time.perf_counter()
        try:
            manifest = build_manifest(
                contracts,
                config,
                invariant_registry=services.invariant_registry,
                acl_compiler=services.acl_compiler,
                clock=clock,
            )
        except Exception as exc:  # noqa: BLE001
            log.error("pipeline_manifest_failed", error_type=type(exc).__name__, error=str(exc))
            failed = PhaseResult(
                phase=0,
                name=MANIFEST_PHASE_NAME,
                errors=(f"Manifest generation failed: {exc}",),
                duration_ms=_elapsed_ms(manifest_start),
            )
            return PipelineResult(phases=(failed,), duration_ms=_elapsed_ms(start))

        manifest_result = PhaseResult(
            phase=0, name=MANIFEST_PHASE_NAME, duration_ms=_elapsed_ms(manifest_start)
        )
        context = PhaseContext(
            manifest=manifest, config=config, services=services, contracts=contracts
        )
        phases = (manifest_result, *active.run(context))
        result = PipelineResult(phases=phases, manifest=manifest, duration_ms=_elapsed_ms(start))
        log.info(
            "pipeline_completed",
            success=result.success,
            phases=len(result.phases),
            errors=len(result.errors),
            warnings=len(result.warnings),
            duration_ms=result.duration_ms,
        )
        return result


class ActPipeline:
    """Pipeline bound to one set of collaborators."""

    def __init__(
        self,
        services: PipelineServices,
        sequencer: PhaseSequencer | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._services = services
        self._sequencer = (
            sequencer if sequencer is not None else PhaseSequencer(default_phase_definitions())
        )
        self._clock = clock

    @property
    def sequencer(self) -> PhaseSequencer:
        return self._sequencer

    def run(
        self,
        config: EngineConfig,
        contracts: Sequence[ContractDefinition] | None = None,
    ) -> PipelineResult:
        if contracts is None:
            provider = self._services.contract_provider
            if provider is None:
                raise ValueError("contracts were not supplied and no contract provider is set")
            contracts = provider.load_contracts()
        return run_pipeline(
            contracts,
            config,
            services=self._services,
            sequencer=self._sequencer,
            clock=self._clock,
        )


def _elapsed_ms(start: float) -> int:
    return int(round(max(time.perf_counter() - start, 0.0) * 1000))


__all__ = ["MANIFEST_PHASE_NAME", "ActPipeline", "run_pipeline"]
