"""
act-engine - phases 9.0 and 9.1: purity guards

File: src/act_engine/pipeline/phases/purity.py
Last updated: 2026-10-19

Purpose
- Load and canonicalize the six purity guard documents, then scan application sources
  against every build-time guard invariant.

Functional requirements
- A missing guards directory is a warning; a directory missing one guard file is an error.
- Enforcement reloads the guards itself and skips with a warning when none load.
- ``severity: error`` invariants produce phase errors; ``warn`` invariants produce warnings.
- Test modules (``test_*.py``) and generated or cached paths are never scanned.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog
import yaml

from act_engine.canonical.architecture import glob_to_regex
from act_engine.canonical.purity_guards import (
    GUARD_SOURCES,
    GuardInvariant,
    GuardSeverity,
    GuardType,
    PurityGuardDescriptor,
    ViolationPattern,
    canonicalize_purity_guard,
    load_purity_guard,
)
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.phases.architecture import (
    SKIPPED_PATH_PARTS,
    import_pattern,
    is_comment_or_literal,
    iter_source_files,
)
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PurityViolation:
    guard_type: GuardType
    invariant_id: str
    pattern: str
    file_path: str
    line: int
    snippet: str
    telos_violated: str
    resolution_steps: tuple[str, ...]
    severity: GuardSeverity


def load_purity_guards(
    directory: Path, report: PhaseReport | None = None
) -> tuple[PurityGuardDescriptor, ...]:
    """Load every guard present under ``directory``, recording failures on ``report``."""

    descriptors: list[PurityGuardDescriptor] = []
    for source in GUARD_SOURCES:
        path = directory / source.file_name
        if not path.is_file():
            if report is not None:
                report.error(f"Missing purity guard: {source.guard_type.value} ({path.name})")
            continue
        try:
            descriptors.append(canonicalize_purity_guard(load_purity_guard(path, source)))
        except (OSError, yaml.YAMLError, SchemaValidationError, CanonicalizationError) as exc:
            if report is not None:
                report.error(f'Failed to parse or validate purity guard "{path.name}": {exc}')
    return tuple(descriptors)


def run_purity_guards_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    directory = context.config.paths.purity_guards_dir
    if not directory.is_dir():
        report.warning(
            f"{directory.as_posix()} directory not found - skipping purity guards canonicalization"
        )
        return report.outcome()

    descriptors = load_purity_guards(directory, report)
    owners: dict[str, GuardType] = {}
    for descriptor in descriptors:
        for invariant in descriptor.invariants:
            owner = owners.setdefault(invariant.id, descriptor.guard_type)
            if owner is not descriptor.guard_type:
                report.error(
                    f'Duplicate invariant id "{invariant.id}" in {owner.value} and '
                    f"{descriptor.guard_type.value} purity guards"
                )
    _logger.info(
        "purity_guards_canonicalized",
        directory=directory.as_posix(),
        guards=len(descriptors),
        invariants=len(owners),
    )
    return report.outcome()


def run_purity_guards_enforcement(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    paths = context.config.paths
    descriptors = (
        load_purity_guards(paths.purity_guards_dir) if paths.purity_guards_dir.is_dir() else ()
    )
    checks = tuple(
        (descriptor.guard_type, invariant)
        for descriptor in descriptors
        for invariant in descriptor.invariants
        if invariant.checked_at_build
    )
    if not descriptors:
        report.warning("No purity guards loaded - skipping enforcement")
        return report.outcome()

    scanned = 0
    for source_dir in paths.source_dirs:
        if not source_dir.is_dir():
            continue
        for path in iter_source_files(source_dir):
            relative = _relative_posix(path, paths.workspace_root)
            if path.name.startswith("test_") or any(
                part in relative for part in SKIPPED_PATH_PARTS
            ):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                report.warning(f"Cannot read source file {relative}: {exc}")
                continue
            scanned += 1
            for guard_type, invariant in checks:
                for violation in check_file_against_invariant(
                    content, guard_type, invariant, relative
                ):
                    message = format_purity_violation(violation)
                    if violation.severity is GuardSeverity.ERROR:
                        report.error(message)
                    else:
                        report.warning(message)
    _logger.info(
        "purity_guards_enforced",
        files=scanned,
        invariants=len(checks),
        errors=report.has_errors,
    )
    return report.outcome()


def check_file_against_invariant(
    content: str, guard_type: GuardType, invariant: GuardInvariant, relative_path: str
) -> tuple[PurityViolation, ...]:
    lines = content.split("\n")
    violations: list[PurityViolation] = []
    for pattern in invariant.violations:
        matcher = pattern.matcher
        for scoped_import in matcher.imports:
            if not path_in_scope(relative_path, scoped_import.within, scoped_import.not_within):
                continue
            for match in import_pattern(scoped_import.source).finditer(content):
                line_number = content.count("\n", 0, match.start()) + 1
                violations.append(
                    _violation(guard_type, invariant, pattern, relative_path, line_number, lines)
                )
        for identifier in matcher.identifiers:
            if not path_in_scope(relative_path, identifier.within, identifier.not_within):
                continue
            for match in re.finditer(identifier.pattern, content):
                line_number = content.count("\n", 0, match.start()) + 1
                if is_comment_or_literal(lines[line_number - 1], match.group(0)):
                    continue
                violations.append(
                    _violation(guard_type, invariant, pattern, relative_path, line_number, lines)
                )
    return tuple(violations)


def path_in_scope(relative_path: str, within: str | None, not_within: str | None) -> bool:
    if within is not None and not re.search(glob_to_regex(within), relative_path):
        return False
    return not (not_within is not None and re.search(glob_to_regex(not_within), relative_path))


def format_purity_violation(violation: PurityViolation) -> str:
    parts = [
        f"[PURITY VIOLATION {violation.guard_type.value.upper()}.{violation.invariant_id}]",
        f"Pattern: {violation.pattern}",
        f"File: {violation.file_path}:{violation.line}",
        f"Code: {violation.snippet}",
        "",
        "TELOS VIOLATED:",
        violation.telos_violated,
        "",
        "RESOLUTION STEPS:",
    ]
    parts.extend(
        f"  {index}. {step}" for index, step in enumerate(violation.resolution_steps, start=1)
    )
    return "\n".join(parts)


def _violation(
    guard_type: GuardType,
    invariant: GuardInvariant,
    pattern: ViolationPattern,
    relative_path: str,
    line_number: int,
    lines: Sequence[str],
) -> PurityViolation:
    return PurityViolation(
        guard_type=guard_type,
        invariant_id=invariant.id,
        pattern=pattern.pattern,
        file_path=relative_path,
        line=line_number,
        snippet=lines[line_number - 1].strip(),
        telos_violated=pattern.telos_violated,
        resolution_steps=pattern.resolution_steps,
        severity=invariant.severity,
    )


def _relative_posix(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = [
    "PurityViolation",
    "check_file_against_invariant",
    "format_purity_violation",
    "load_purity_guards",
    "path_in_scope",
    "run_purity_guards_canonicalization",
    "run_purity_guards_enforcement",
]
