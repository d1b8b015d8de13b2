"""Phase 7.8: command canonicalization against the action registry and the intent graph."""

from __future__ import annotations

import structlog
import yaml

from act_engine.canonical.commands import (
    CommandsDescriptor,
    canonicalize_commands,
    command_capability_errors,
    command_intent_binding_errors,
    load_commands,
)
from act_engine.canonical.intents import canonicalize_intent_graph, load_intent_graph
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

_logger = structlog.get_logger(__name__)


def run_command_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    path = context.config.paths.commands_path
    if not path.is_file():
        report.warning(f"{path.name} not found - skipping command canonicalization")
        return report.outcome()

    try:
        descriptor = canonicalize_commands(
            load_commands(path), context.services.invariant_registry
        )
    except (OSError, yaml.YAMLError, SchemaValidationError, CanonicalizationError) as exc:
        report.error(f"Failed to parse {path.name}: {exc}")
        return report.outcome()

    report.extend_errors(str(issue) for issue in descriptor.errors)
    report.extend_warnings(str(issue) for issue in descriptor.warnings)
    report.extend_errors(
        str(issue)
        for issue in command_capability_errors(
            descriptor.commands, context.services.action_registry
        )
    )
    check_intent_bindings(descriptor, context, report)
    _logger.info(
        "commands_canonicalized",
        path=path.as_posix(),
        commands=len(descriptor.commands),
        hotkeys=len(descriptor.hotkeys),
        errors=report.has_errors,
    )
    return report.outcome()


def check_intent_bindings(
    descriptor: CommandsDescriptor, context: PhaseContext, report: PhaseReport
) -> None:
    """Compare intent bindings with the intent graph; a missing graph declares no intents."""

    graph_path = context.config.paths.intent_graph_path
    intent_ids: tuple[str, ...] = ()
    if graph_path.is_file():
        try:
            intent_ids = canonicalize_intent_graph(load_intent_graph(graph_path)).intent_ids
        except (OSError, yaml.YAMLError, SchemaValidationError, CanonicalizationError) as exc:
            report.error(f"Failed to load intent graph for command-intent validation: {exc}")
            return
    report.extend_errors(
        str(issue) for issue in command_intent_binding_errors(descriptor.commands, intent_ids)
    )


__all__ = ["check_intent_bindings", "run_command_canonicalization"]
