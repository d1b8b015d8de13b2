"""Phase sequencer, default phase catalog, and the pipeline driver."""

from act_engine.pipeline.driver import ActPipeline, run_pipeline
from act_engine.pipeline.phases import default_phase_definitions
from act_engine.pipeline.results import PhaseOutcome, PhaseResult, PipelineResult
from act_engine.pipeline.sequencer import (
    PhaseContext,
    PhaseDefinition,
    PhaseRunner,
    PhaseSequencer,
)
from act_engine.pipeline.services import PipelineServices

__all__ = [
    "ActPipeline",
    "PhaseContext",
    "PhaseDefinition",
    "PhaseOutcome",
    "PhaseResult",
    "PhaseRunner",
    "PhaseSequencer",
    "PipelineResult",
    "PipelineServices",
    "default_phase_definitions",
    "run_pipeline",
]
