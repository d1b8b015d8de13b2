"""
act-engine - default phase catalog

File: src/act_engine/pipeline/phases/__init__.py
Last updated: 2026-10-19

Purpose
- Name and number the built-in phases so hosts can register them in one call.

Functional requirements
- Numbers are unique and fractional numbers keep numeric order (``7 < 7.5 < 7.6 < 7.8 < 8``).
- A raising phase is reported as ``"<failure label>: <message>"``.
"""

from __future__ import annotations

from act_engine.pipeline.phases.acl import run_acl_validation
from act_engine.pipeline.phases.architecture import run_architecture_guard
from act_engine.pipeline.phases.codegen import run_code_generation
from act_engine.pipeline.phases.commands import run_command_canonicalization
from act_engine.pipeline.phases.completeness import run_form_completeness
from act_engine.pipeline.phases.drift import run_drift_check
from act_engine.pipeline.phases.forms import (
    run_descriptor_invariant_enforcement,
    run_form_canonicalization,
    run_form_yaml_validation,
    run_functional_canonicalization,
)
from act_engine.pipeline.phases.instrumentation import run_instrumentation_canonicalization
from act_engine.pipeline.phases.intents import run_intent_graph_canonicalization
from act_engine.pipeline.phases.invariants import (
    run_invariant_registry_validation,
    run_invariant_validation,
)
from act_engine.pipeline.phases.metadata import run_metadata_validation
from act_engine.pipeline.phases.purity import (
    run_purity_guards_canonicalization,
    run_purity_guards_enforcement,
)
from act_engine.pipeline.sequencer import PhaseDefinition


def default_phase_definitions() -> tuple[PhaseDefinition, ...]:
    return (
        PhaseDefinition(1, "Form Completeness Checks", run_form_completeness,
                        "Form completeness checks failed"),
        PhaseDefinition(1.5, "Architecture Guard", run_architecture_guard,
                        "Architecture guard failed"),
        PhaseDefinition(2, "Contract Metadata Validation", run_metadata_validation,
                        "Metadata validation failed"),
        PhaseDefinition(3, "Invariant Validation", run_invariant_validation,
                        "Invariant validation failed"),
        PhaseDefinition(4, "ACL Validation", run_acl_validation, "ACL validation failed"),
        PhaseDefinition(5, "Form YAML Validation", run_form_yaml_validation,
                        "YAML validation failed"),
        PhaseDefinition(6, "Form Canonicalization", run_form_canonicalization,
                        "Canonicalization failed"),
        PhaseDefinition(7, "Code Generation", run_code_generation, "Code generation failed"),
        PhaseDefinition(7.5, "Functional Form Canonicalization", run_functional_canonicalization,
                        "Functional canonicalization failed"),
        PhaseDefinition(7.6, "Descriptor Invariant Enforcement",
                        run_descriptor_invariant_enforcement, "Invariant enforcement failed"),
        PhaseDefinition(7.8, "Command Canonicalization", run_command_canonicalization,
                        "Command canonicalization failed"),
        PhaseDefinition(8, "Drift Check", run_drift_check, "Drift check failed"),
        PhaseDefinition(8.1, "Instrumentation Canonicalization",
                        run_instrumentation_canonicalization,
                        "Instrumentation canonicalization failed"),
        PhaseDefinition(8.2, "Intent Graph Canonicalization", run_intent_graph_canonicalization,
                        "Intent graph canonicalization failed"),
        PhaseDefinition(9.0, "Purity Guards Canonicalization", run_purity_guards_canonicalization,
                        "Purity guards canonicalization failed"),
        PhaseDefinition(9.1, "Purity Guards Enforcement", run_purity_guards_enforcement,
                        "Purity guards enforcement failed"),
        PhaseDefinition(10, "Invariant Registry Validation", run_invariant_registry_validation,
                        "Invariant registry validation failed"),
    )


__all__ = ["default_phase_definitions"]
