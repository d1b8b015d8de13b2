"""Phase 2: contract metadata validation through the injected validator."""

from __future__ import annotations

from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext


def run_metadata_validation(context: PhaseContext) -> PhaseOutcome:
    # Any raise, whatever its type, is one error for the whole phase.
    try:
        context.services.contract_validator(context.contracts)
    except Exception as exc:  # noqa: BLE001
        return PhaseOutcome(errors=(f"Metadata validation failed: {exc}",))
    return PhaseOutcome()


__all__ = ["run_metadata_validation"]
