"""
act-engine - phases 3 and 10: invariant registry checks

File: src/act_engine/pipeline/phases/invariants.py
Last updated: 2026-10-19

Purpose
- Phase 3 verifies the registry holds every required invariant in canonical id form.
- Phase 10 re-checks the registry as the runtime will see it: required entries,
  enforce functions, and categories.
"""

from __future__ import annotations

from collections.abc import Sequence

from act_engine.constants import REQUIRED_INVARIANTS
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.knowledge_plane.invariant_registry import is_canonical_invariant_id
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext


def run_invariant_validation(context: PhaseContext) -> PhaseOutcome:
    return check_invariant_registry(context.services.invariant_registry).outcome()


def check_invariant_registry(
    registry: InvariantRegistry, required: Sequence[str] = REQUIRED_INVARIANTS
) -> PhaseReport:
    report = PhaseReport()
    all_ids = tuple(registry.get_all_invariant_ids())
    if not all_ids:
        report.error("Invariant engine registry is empty")
    for invariant_id in required:
        if registry.get(invariant_id) is None:
            report.error(f"Required invariant {invariant_id} not found in registry")
    for invariant_id in all_ids:
        if not is_canonical_invariant_id(invariant_id):
            report.warning(
                f'Invariant ID "{invariant_id}" does not match canonical format (CATEGORY.CODE)'
            )
    return report


def run_invariant_registry_validation(context: PhaseContext) -> PhaseOutcome:
    registry = context.services.invariant_registry
    report = PhaseReport()
    all_ids = tuple(registry.get_all_invariant_ids())
    if not all_ids:
        report.error("Invariant registry is empty")

    for invariant_id in REQUIRED_INVARIANTS:
        entry = registry.get(invariant_id)
        if entry is None:
            report.error(f"Required invariant {invariant_id} not found in registry")
        elif not entry.metadata.enforce:
            report.warning(f"Invariant {invariant_id} has no enforce function")

    categories: set[str] = set()
    for invariant_id in all_ids:
        entry = registry.get(invariant_id)
        if entry is not None and entry.metadata.category:
            categories.add(entry.metadata.category)
    if not categories:
        report.warning("No invariant categories found")
    return report.outcome()


__all__ = [
    "check_invariant_registry",
    "run_invariant_registry_validation",
    "run_invariant_validation",
]
