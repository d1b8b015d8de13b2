"""
act-engine - phase 8.1: instrumentation canonicalization

File: src/act_engine/pipeline/phases/instrumentation.py
Last updated: 2026-10-19

Purpose
- Canonicalize telemetry, devtools and UX fidelity YAML under ``instrumentation_dir``.

Functional requirements
- Each domain lives in its own subdirectory; a missing one is a warning.
- Unknown invariants are reported per file and per id.
- Two files of one domain may not declare the same descriptor id.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import yaml

from act_engine.canonical.devtools import DevtoolsSpec, canonicalize_devtools
from act_engine.canonical.telemetry import TelemetrySpec, canonicalize_telemetry
from act_engine.canonical.ux import UxSpec, canonicalize_ux
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext


@dataclass(frozen=True, slots=True)
class InstrumentationDomain:
    """One instrumentation subdirectory and how its files are parsed."""

    directory: str
    title: str
    noun: str
    parse: Callable[[object], Any]
    canonicalize: Callable[[Any], Any]


INSTRUMENTATION_DOMAINS: Final[tuple[InstrumentationDomain, ...]] = (
    InstrumentationDomain(
        "telemetry", "Telemetry", "telemetry", TelemetrySpec.from_document, canonicalize_telemetry
    ),
    InstrumentationDomain(
        "devtools", "Devtools", "devtools", DevtoolsSpec.from_document, canonicalize_devtools
    ),
    InstrumentationDomain("ux", "UX", "UX fidelity", UxSpec.from_document, canonicalize_ux),
)


def run_instrumentation_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    root = context.config.paths.instrumentation_dir
    registry = context.services.invariant_registry
    for domain in INSTRUMENTATION_DOMAINS:
        canonicalize_domain(domain, root / domain.directory, registry, report)
    return report.outcome()


def canonicalize_domain(
    domain: InstrumentationDomain,
    directory: Path,
    registry: InvariantRegistry,
    report: PhaseReport,
) -> dict[str, Any]:
    """Canonicalize every ``*.yaml`` in ``directory``; returns descriptors keyed by file stem."""

    descriptors: dict[str, Any] = {}
    if not directory.is_dir():
        report.warning(f"{domain.title} directory does not exist: {directory.as_posix()} (skipping)")
        return descriptors

    owners: dict[str, str] = {}
    for path in sorted(directory.glob("*.yaml")):
        try:
            with path.open("r", encoding="utf-8") as handle:
                spec = domain.parse(yaml.safe_load(handle))
        except (OSError, yaml.YAMLError, SchemaValidationError) as exc:
            report.error(f'Failed to parse or validate {domain.noun} file "{path.name}": {exc}')
            continue

        missing = [item for item in spec.invariants.invariants if registry.get(item) is None]
        for invariant_id in missing:
            report.error(
                f'{domain.title} file "{path.name}": Invariant {invariant_id} not found in registry'
            )
        if missing:
            continue

        previous = owners.get(spec.id)
        if previous is not None:
            report.error(
                f'{domain.title} file "{path.name}": Duplicate descriptor id "{spec.id}" '
                f'(already defined in "{previous}")'
            )
            continue
        try:
            descriptors[path.stem] = domain.canonicalize(spec)
        except CanonicalizationError as exc:
            report.error(f'Failed to parse or validate {domain.noun} file "{path.name}": {exc}')
            continue
        owners[spec.id] = path.name
    return descriptors


__all__ = [
    "INSTRUMENTATION_DOMAINS",
    "InstrumentationDomain",
    "canonicalize_domain",
    "run_instrumentation_canonicalization",
]
