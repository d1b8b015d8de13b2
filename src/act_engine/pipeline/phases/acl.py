"""Phase 4: ACL validation over the compiled role hierarchy."""

from __future__ import annotations

from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext


def run_acl_validation(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    actions = context.services.action_registry
    compilation = context.services.acl_compiler.compile_roles()

    for conflict in compilation.conflicts:
        report.warning(f"Role conflict: {conflict.role_a} vs {conflict.role_b}: {conflict.reason}")
    if compilation.redundant:
        report.warning(f"Redundant roles detected: {', '.join(compilation.redundant)}")
    report.extend_warnings(compilation.warnings)

    for role, compiled in compilation.compiled.items():
        for action in compiled.direct_actions:
            if not actions.validate_action_id(action):
                report.error(f'Role "{role}" references unknown action: {action}')

    for action_id in actions.get_all_action_ids():
        if not actions.validate_action_id(action_id):
            report.error(f'Action "{action_id}" in registry failed validation')
    return report.outcome()


__all__ = ["run_acl_validation"]
