"""
act-engine - phase 1: form completeness checks

File: src/act_engine/pipeline/phases/completeness.py
Last updated: 2026-10-19

Purpose
- Verify that FORM sources are complete and coherent before anything is canonicalized.

Functional requirements
- Every field type used by a default form layout has a projection capability.
- Every declared form variant has a YAML file, and every YAML file names a known
  contract and variant.
- Critical invariants are present in the registry (warnings), and the registry is not empty.
- Generated form modules already on disk carry a generation banner.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

import yaml

from act_engine.canonical.forms import FORM_FILE_SUFFIX, load_form_spec
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.errors import SchemaValidationError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext
from act_engine.utils.hashing import has_generation_banner

CRITICAL_INVARIANTS: Final[tuple[str, ...]] = (
    "SYSTEM_STATE.F50",
    "DOMAIN_LOGIC.F2",
    "UI_SCROLL.F82",
)


def run_form_completeness(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    paths = context.config.paths
    check_projection_capabilities(context.contracts, report)
    check_yaml_coverage(context.contracts, paths.yaml_dir, report)
    check_orphan_yaml(context.contracts, paths.yaml_dir, report)
    check_invariant_references(context.services.invariant_registry, report)
    check_descriptor_banners(paths.forms_output_dir, report)
    return report.outcome()


def check_projection_capabilities(
    contracts: Sequence[ContractDefinition], report: PhaseReport
) -> None:
    for contract in contracts:
        if not contract.projection_capabilities:
            if contract.form_schemas:
                report.error(
                    f'Contract "{contract.name}" has formSchemas but missing projectionCapabilities'
                )
            continue
        for schema in contract.form_schemas:
            for field_name in schema.default_field_order:
                definition = contract.base_schema.get_field(field_name)
                if definition is not None and definition.type not in contract.projection_capabilities:
                    report.error(
                        f'Field type "{definition.type}" in "{contract.name}.{schema.id}" '
                        "is missing projectionCapabilities"
                    )


def check_yaml_coverage(
    contracts: Sequence[ContractDefinition], yaml_dir: Path, report: PhaseReport
) -> None:
    if not yaml_dir.is_dir():
        report.warning(f"YAML directory does not exist: {yaml_dir.as_posix()}")
        return
    for contract in contracts:
        for schema in contract.form_schemas:
            file_name = f"{contract.name}.{schema.id}{FORM_FILE_SUFFIX}"
            if not (yaml_dir / file_name).is_file():
                report.error(f"Missing YAML file for {contract.name}.{schema.id}: {file_name}")


def check_orphan_yaml(
    contracts: Sequence[ContractDefinition], yaml_dir: Path, report: PhaseReport
) -> None:
    if not yaml_dir.is_dir():
        return
    by_name = {contract.name: contract for contract in contracts}
    for path in sorted(yaml_dir.glob(f"*{FORM_FILE_SUFFIX}")):
        try:
            spec = load_form_spec(path)
        except (OSError, yaml.YAMLError, SchemaValidationError) as exc:
            report.error(f'Failed to parse or validate YAML file "{path.name}": {exc}')
            continue
        contract = by_name.get(spec.contract)
        if contract is None:
            report.error(
                f'Orphan YAML file "{path.name}": Contract "{spec.contract}" not found in metadata'
            )
            continue
        if contract.form_schema(spec.variant) is None:
            report.error(
                f'Orphan YAML file "{path.name}": Variant "{spec.variant}" not defined '
                f'in formSchemas for contract "{spec.contract}"'
            )


def check_invariant_references(registry: InvariantRegistry, report: PhaseReport) -> None:
    if not registry.get_all_invariant_ids():
        report.error("Invariant engine registry is empty. No invariants registered.")
        return
    for invariant_id in CRITICAL_INVARIANTS:
        if registry.get(invariant_id) is None:
            report.warning(f"Critical invariant {invariant_id} not found in registry")


def check_descriptor_banners(forms_output_dir: Path, report: PhaseReport) -> None:
    if not forms_output_dir.is_dir():
        report.warning(f"Generated forms directory does not exist: {forms_output_dir.as_posix()}")
        return
    for path in sorted(forms_output_dir.glob("*.py")):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            report.warning(f'Cannot read generated file "{path.name}": {exc}')
            continue
        if not has_generation_banner(content):
            report.error(f'Generated file "{path.name}" is missing generation banner')


__all__ = [
    "CRITICAL_INVARIANTS",
    "check_descriptor_banners",
    "check_invariant_references",
    "check_orphan_yaml",
    "check_projection_capabilities",
    "check_yaml_coverage",
    "run_form_completeness",
]
