"""Phase 8.2: intent graph canonicalization and mutation-factory policy checks."""

from __future__ import annotations

import structlog
import yaml

from act_engine.canonical.intents import (
    IntentGraphDescriptor,
    MutationFactory,
    canonicalize_intent_graph,
    intent_reference_errors,
    load_intent_graph,
)
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

_logger = structlog.get_logger(__name__)


def run_intent_graph_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    path = context.config.paths.intent_graph_path
    if not path.is_file():
        report.warning(f"Intent graph file does not exist: {path.as_posix()} (skipping)")
        return report.outcome()

    try:
        descriptor = canonicalize_intent_graph(load_intent_graph(path))
    except (OSError, yaml.YAMLError, SchemaValidationError, CanonicalizationError) as exc:
        report.error(f'Failed to parse or validate intent graph "{path.name}": {exc}')
        return report.outcome()

    check_intent_references(descriptor, context, report)
    check_mutation_policies(descriptor, report)
    _logger.info(
        "intent_graph_canonicalized",
        path=path.as_posix(),
        intents=len(descriptor.intents),
        errors=report.has_errors,
    )
    return report.outcome()


def check_intent_references(
    descriptor: IntentGraphDescriptor, context: PhaseContext, report: PhaseReport
) -> None:
    services = context.services
    for intent_id in descriptor.intent_ids:
        problems = intent_reference_errors(
            descriptor,
            intent_id,
            registry=services.invariant_registry,
            action_registry=services.action_registry,
        )
        report.extend_errors(f'Intent "{intent_id}": {problem}' for problem in problems)


def check_mutation_policies(descriptor: IntentGraphDescriptor, report: PhaseReport) -> None:
    """Build mutation metadata for every mutating intent; policy failures are per intent."""

    factory = MutationFactory(descriptor)
    for intent in factory.mutating_intents():
        try:
            factory.mutation_metadata(intent.id)
        except CanonicalizationError as exc:
            report.error(f'Intent "{intent.id}": {exc}')


__all__ = [
    "check_intent_references",
    "check_mutation_policies",
    "run_intent_graph_canonicalization",
]
