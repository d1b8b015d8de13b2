"""
act-engine - phases 5, 6, 7.5 and 7.6: form YAML validation and canonicalization

File: src/act_engine/pipeline/phases/forms.py
Last updated: 2026-10-19

Purpose
- Validate every form YAML against its contract, canonicalize the manifest forms,
  bind functional sections, and enforce descriptor-level invariants.

Functional requirements
- A missing YAML directory is a warning for phases 5 and 7.5.
- Per-file and per-form failures become one error each; other forms keep going.
- Phase 7.6 reports ``[<invariant>] form "C.v": <message>`` for every violation found.
- The scroll and padding checks in ``descriptor_violations`` also serve descriptors built
  outside ``canonicalize_form``, which already rejects both cases for YAML sources.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Final

import yaml

from act_engine.canonical.form_layout import check_form_layout
from act_engine.canonical.forms import (
    CANONICAL_PADDING_X,
    CANONICAL_PADDING_Y,
    FORM_FILE_SUFFIX,
    FormDescriptor,
    canonicalize_form,
    load_form_spec,
    validate_form,
)
from act_engine.canonical.functional import canonicalize_functional_form
from act_engine.domain.errors import (
    CanonicalizationError,
    FormValidationError,
    SchemaValidationError,
)
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

SCROLL_INVARIANT: Final[str] = "UI_SCROLL.F82"
PADDING_INVARIANT: Final[str] = "UI_FORM.F004"
REGISTRY_INVARIANT: Final[str] = "INVARIANT-REGISTRY"

_LOAD_ERRORS = (OSError, yaml.YAMLError, SchemaValidationError)


def _form_files(yaml_dir: Path) -> Iterator[Path]:
    yield from sorted(yaml_dir.glob(f"*{FORM_FILE_SUFFIX}"))


# Phase 5 ---------------------------------------------------------------------


def run_form_yaml_validation(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    yaml_dir = context.config.paths.yaml_dir
    if not yaml_dir.is_dir():
        report.warning(
            f"YAML directory does not exist: {yaml_dir.as_posix()} (skipping YAML validation)"
        )
        return report.outcome()

    for path in _form_files(yaml_dir):
        try:
            spec = load_form_spec(path)
        except _LOAD_ERRORS as exc:
            report.error(f'YAML file "{path.name}": {exc}')
            continue
        contract = context.contract(spec.contract)
        if contract is None:
            report.error(f'YAML file "{path.name}": Contract "{spec.contract}" not found')
            continue
        try:
            validate_form(spec, contract)
        except FormValidationError as exc:
            report.error(f'YAML file "{path.name}": {exc}')
    return report.outcome()


# Phase 6 ---------------------------------------------------------------------


def run_form_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    registry = context.services.invariant_registry
    for form in context.manifest.forms:
        contract = context.contract(form.contract)
        if contract is None:
            report.error(f'Form "{form.key}": Contract "{form.contract}" not found')
            continue
        try:
            spec = load_form_spec(form.yaml_path)
            descriptor = canonicalize_form(spec, contract, registry)
            check_form_layout(descriptor, contract)
        except (*_LOAD_ERRORS, CanonicalizationError) as exc:
            report.error(f'Form "{form.key}": {exc}')
    return report.outcome()


# Phase 7.5 -------------------------------------------------------------------


def run_functional_canonicalization(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    yaml_dir = context.config.paths.yaml_dir
    if not yaml_dir.is_dir():
        report.warning(
            f"YAML directory does not exist: {yaml_dir.as_posix()} "
            "(skipping functional canonicalization)"
        )
        return report.outcome()

    services = context.services
    for path in _form_files(yaml_dir):
        try:
            spec = load_form_spec(path)
        except _LOAD_ERRORS as exc:
            report.error(f'Functional canonicalization failed for "{path.name}": {exc}')
            continue
        if not spec.has_functional_bindings:
            continue
        contract = context.contract(spec.contract)
        if contract is None:
            report.warning(
                f'Functional canonicalization skipped for "{path.name}": '
                f'Contract "{spec.contract}" not found'
            )
            continue
        try:
            canonicalize_functional_form(
                spec,
                contract,
                registry=services.invariant_registry,
                action_registry=services.action_registry,
            )
        except CanonicalizationError as exc:
            report.error(f'Functional canonicalization failed for "{path.name}": {exc}')
    return report.outcome()


# Phase 7.6 -------------------------------------------------------------------


def run_descriptor_invariant_enforcement(context: PhaseContext) -> PhaseOutcome:
    """Re-check canonical descriptors; forms phase 6 rejected are not re-reported."""

    report = PhaseReport()
    registry = context.services.invariant_registry
    for form in context.manifest.forms:
        contract = context.contract(form.contract)
        if contract is None:
            continue
        try:
            spec = load_form_spec(form.yaml_path)
            descriptor = canonicalize_form(spec, contract)
        except (*_LOAD_ERRORS, CanonicalizationError):
            continue
        for invariant_id, message in descriptor_violations(descriptor, registry):
            report.error(f'[{invariant_id}] form "{descriptor.key}": {message}')
    return report.outcome()


def descriptor_violations(
    descriptor: FormDescriptor, registry: InvariantRegistry
) -> tuple[tuple[str, str], ...]:
    """Return ``(invariant id, message)`` pairs for one canonical descriptor."""

    violations: list[tuple[str, str]] = []
    scroll_count = len(descriptor.scroll_containers)
    if scroll_count != 1:
        violations.append(
            (
                SCROLL_INVARIANT,
                f"Multiple scroll containers detected ({scroll_count}). "
                "Only one scroll container allowed.",
            )
        )
    if descriptor.padding_x != CANONICAL_PADDING_X:
        violations.append(
            (
                PADDING_INVARIANT,
                f"Non-canonical horizontal padding: {descriptor.padding_x:g}px "
                f"(expected {CANONICAL_PADDING_X}px)",
            )
        )
    if descriptor.padding_y != CANONICAL_PADDING_Y:
        violations.append(
            (
                PADDING_INVARIANT,
                f"Non-canonical vertical padding: {descriptor.padding_y:g}px "
                f"(expected {CANONICAL_PADDING_Y}px)",
            )
        )
    for invariant_id in descriptor.invariants.declared:
        if registry.get(invariant_id) is None:
            violations.append(
                (REGISTRY_INVARIANT, f"Declared invariant {invariant_id} not found in registry")
            )
    return tuple(violations)


__all__ = [
    "PADDING_INVARIANT",
    "REGISTRY_INVARIANT",
    "SCROLL_INVARIANT",
    "descriptor_violations",
    "run_descriptor_invariant_enforcement",
    "run_form_canonicalization",
    "run_form_yaml_validation",
    "run_functional_canonicalization",
]
