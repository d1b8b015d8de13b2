"""Phase 8: every manifest artifact exists on disk and carries a generation banner."""

from __future__ import annotations

from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext
from act_engine.utils.hashing import has_generation_banner


def run_drift_check(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    check_mode = context.config.check_mode
    for ref in context.manifest.expected_artifacts():
        path = ref.path.as_posix()
        if not ref.path.exists():
            if check_mode:
                report.warning(f"Expected artifact missing (check mode): {path}")
            else:
                report.error(f"Expected artifact missing: {path}")
            continue
        try:
            content = ref.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            report.warning(f'Cannot read artifact "{path}": {exc}')
            continue
        if not has_generation_banner(content):
            remedy = "will be regenerated" if check_mode else "may need manual fix"
            report.warning(f'Artifact "{path}" is missing generation banner ({remedy})')
    return report.outcome()


__all__ = ["run_drift_check"]
