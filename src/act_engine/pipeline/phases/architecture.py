"""
act-engine - phase 1.5: architecture guard

File: src/act_engine/pipeline/phases/architecture.py
Last updated: 2026-10-19

Purpose
- Scan application sources against build-time architecture rules.

What should be included in this file
- Source discovery under the configured source directories.
- Import and identifier matchers, path exclusions, and violation formatting.

Functional requirements
- A missing rules file or source directory is a warning, never an error.
- ``severity: error`` violations are phase errors; ``warn`` violations are warnings.
- Files under generated output, test fixtures, or caches are never scanned.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

from act_engine.canonical.architecture import (
    ArchitectureRule,
    RuleSeverity,
    canonicalize_architecture_rules,
    glob_to_regex,
    load_architecture_rules,
)
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

SOURCE_SUFFIXES: Final[frozenset[str]] = frozenset({".py"})
SKIPPED_PATH_PARTS: Final[tuple[str, ...]] = (
    "generated",
    "node_modules",
    "__tests__",
    "__pycache__",
)
_SKIPPED_DIR_NAMES: Final[frozenset[str]] = frozenset({".git", "node_modules", "__pycache__"})

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ArchitectureViolation:
    rule_id: str
    file_path: str
    line: int
    telos_violated: str
    resolution_steps: tuple[str, ...]
    severity: RuleSeverity
    import_path: str | None = None
    identifier: str | None = None
    snippet: str | None = None


def run_architecture_guard(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    paths = context.config.paths
    rules_path = paths.architecture_rules_path
    if not rules_path.is_file():
        report.warning(f"{rules_path.name} not found - skipping architecture guard")
        return report.outcome()

    descriptor = canonicalize_architecture_rules(
        load_architecture_rules(rules_path), context.services.invariant_registry
    )
    rules = tuple(rule for rule in descriptor.rules if rule.checked_at_build)

    for source_dir in paths.source_dirs:
        if not source_dir.is_dir():
            report.warning(
                f"{source_dir.as_posix()} directory not found - skipping architecture guard"
            )
            continue
        for path in iter_source_files(source_dir):
            relative = _relative_posix(path, paths.workspace_root)
            if any(part in relative for part in SKIPPED_PATH_PARTS):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                report.warning(f"Cannot read source file {relative}: {exc}")
                continue
            for rule in rules:
                for violation in check_file_against_rule(content, rule, relative):
                    message = format_violation(violation)
                    if violation.severity is RuleSeverity.ERROR:
                        report.error(message)
                    else:
                        report.warning(message)
                    _logger.info(
                        "architecture_violation",
                        rule=violation.rule_id,
                        file=violation.file_path,
                        line=violation.line,
                    )
    return report.outcome()


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield source files under ``root`` in deterministic order."""

    for entry in sorted(root.iterdir(), key=lambda item: item.name):
        if entry.is_dir():
            if entry.name in _SKIPPED_DIR_NAMES:
                continue
            yield from iter_source_files(entry)
        elif entry.is_file() and entry.suffix in SOURCE_SUFFIXES:
            yield entry


def is_excluded(relative_path: str, exclude_paths: Sequence[str]) -> bool:
    return any(re.search(glob_to_regex(pattern), relative_path) for pattern in exclude_paths)


def check_file_against_rule(
    content: str, rule: ArchitectureRule, relative_path: str
) -> tuple[ArchitectureViolation, ...]:
    if is_excluded(relative_path, rule.exclude_paths):
        return ()

    lines = content.split("\n")
    violations: list[ArchitectureViolation] = []

    for matcher in rule.imports:
        for match in import_pattern(matcher.source).finditer(content):
            line_number = content.count("\n", 0, match.start()) + 1
            violations.append(
                _violation(
                    rule,
                    relative_path,
                    line_number,
                    lines,
                    import_path=match.group(1) or match.group(2),
                )
            )

    for identifier_matcher in rule.identifiers:
        regex = re.compile(identifier_matcher.pattern)
        for match in regex.finditer(content):
            identifier = match.group(0)
            line_number = content.count("\n", 0, match.start()) + 1
            line = lines[line_number - 1] if line_number <= len(lines) else ""
            if is_comment_or_literal(line, identifier):
                continue
            violations.append(
                _violation(rule, relative_path, line_number, lines, identifier=identifier)
            )

    return tuple(violations)


def format_violation(violation: ArchitectureViolation) -> str:
    parts = [
        f"[ARCHITECTURE VIOLATION {violation.rule_id}]",
        f"File: {violation.file_path}:{violation.line}",
    ]
    if violation.import_path:
        parts.append(f"Import: {violation.import_path}")
    if violation.identifier:
        parts.append(f"Identifier: {violation.identifier}")
    if violation.snippet:
        parts.append(f"Code: {violation.snippet}")
    parts.extend(["", "TELOS VIOLATED:", violation.telos_violated, "", "RESOLUTION STEPS:"])
    parts.extend(
        f"  {index}. {step}" for index, step in enumerate(violation.resolution_steps, start=1)
    )
    return "\n".join(parts)


def _violation(
    rule: ArchitectureRule,
    relative_path: str,
    line_number: int,
    lines: Sequence[str],
    *,
    import_path: str | None = None,
    identifier: str | None = None,
) -> ArchitectureViolation:
    snippet = lines[line_number - 1].strip() if line_number <= len(lines) else None
    return ArchitectureViolation(
        rule_id=rule.id,
        file_path=relative_path,
        line=line_number,
        telos_violated=rule.telos_violated,
        resolution_steps=rule.resolution_hint,
        severity=rule.severity,
        import_path=import_path,
        identifier=identifier,
        snippet=snippet or None,
    )


def import_pattern(source_glob: str) -> re.Pattern[str]:
    """Match ``import x`` and ``from x import y`` lines whose module fits ``source_glob``."""

    module = glob_to_regex(source_glob)
    return re.compile(
        rf"^[ \t]*(?:from[ \t]+({module})[ \t]+import\b|import[ \t]+({module})\b)",
        re.MULTILINE,
    )


def is_comment_or_literal(line: str, identifier: str) -> bool:
    stripped = line.strip()
    return (
        stripped.startswith("#")
        or f"'{identifier}'" in line
        or f'"{identifier}"' in line
    )


def _relative_posix(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = [
    "ArchitectureViolation",
    "check_file_against_rule",
    "format_violation",
    "import_pattern",
    "is_comment_or_literal",
    "is_excluded",
    "iter_source_files",
    "run_architecture_guard",
]
