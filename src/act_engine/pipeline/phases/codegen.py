"""
act-engine - phase 7: code generation

File: src/act_engine/pipeline/phases/codegen.py
Last updated: 2026-10-19

Purpose
- Render every manifest artifact from its document and hand it to the deterministic writer.

Functional requirements
- Artifacts are produced in manifest order: per contract, then forms, then the
  invariant mapping.
- In check mode drift is a warning ``<artifact> would be regenerated: <reason>``.
- A failure to build or write one artifact is one error; the rest still generate.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Final

import yaml

from act_engine.canonical.forms import canonicalize_form, load_form_spec
from act_engine.codegen.documents import Document
from act_engine.codegen.generators import (
    contract_test_document,
    form_document,
    invariant_mapping_document,
    migration_document,
    route_document,
    service_document,
    shared_contract_document,
)
from act_engine.codegen.writer import DeterministicWriter
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.errors import CanonicalizationError
from act_engine.manifests.models import ArtifactRef, FormManifest
from act_engine.pipeline.phases._report import PhaseReport
from act_engine.pipeline.results import PhaseOutcome
from act_engine.pipeline.sequencer import PhaseContext

_CONTRACT_DOCUMENTS: Final[dict[str, Callable[[ContractDefinition], Document]]] = {
    "shared": shared_contract_document,
    "migration": migration_document,
    "service": service_document,
    "route": route_document,
    "test": contract_test_document,
}


def writer_for(context: PhaseContext) -> DeterministicWriter:
    config = context.config
    return DeterministicWriter(
        check_mode=config.check_mode,
        dry_run=config.dry_run,
        validate_code=config.validate_code,
        backup_existing=config.backup_existing,
    )


def run_code_generation(context: PhaseContext) -> PhaseOutcome:
    report = PhaseReport()
    writer = writer_for(context)

    for contract_manifest in context.manifest.contracts:
        contract = context.contract(contract_manifest.name)
        if contract is None:
            report.error(f'Contract "{contract_manifest.name}" not found in metadata')
            continue
        for ref in contract_manifest.artifacts():
            build = _CONTRACT_DOCUMENTS[ref.kind]
            _emit(context, writer, report, ref, partial(build, contract))

    for form in context.manifest.forms:
        _emit(context, writer, report, form.artifact(), partial(_form_document, context, form))

    registry = context.services.invariant_registry
    _emit(
        context,
        writer,
        report,
        context.manifest.invariants.artifact(),
        partial(invariant_mapping_document, registry),
    )
    return report.outcome()


def _form_document(context: PhaseContext, form: FormManifest) -> Document:
    contract = context.contract(form.contract)
    if contract is None:
        raise CanonicalizationError(f'Contract "{form.contract}" not found')
    spec = load_form_spec(form.yaml_path)
    return form_document(canonicalize_form(spec, contract, context.services.invariant_registry))


def _emit(
    context: PhaseContext,
    writer: DeterministicWriter,
    report: PhaseReport,
    ref: ArtifactRef,
    build: Callable[[], Document],
) -> None:
    try:
        document = build()
        content = context.services.serializer.render(document)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        report.error(f"Failed to generate {ref.label}: {exc}")
        return

    try:
        result = writer.write(ref.path, content, banner=document.source)
    except (OSError, ValueError) as exc:
        report.error(f"Failed to write {ref.label}: {exc}")
        return
    if result.success:
        if result.written:
            report.artifact(ref.path.as_posix())
        return
    if result.has_drift and context.config.check_mode:
        report.warning(f"{ref.label} would be regenerated: {result.error}")
    else:
        report.error(f"Failed to write {ref.label}: {result.error}")


__all__ = ["run_code_generation", "writer_for"]
