"""
act-engine - manifest builder

File: src/act_engine/manifests/builder.py
Last updated: 2026-10-19

Purpose
- Derive the run manifest from loaded contracts, configuration, and live collaborators.

Functional requirements
- Artifact paths are a pure function of ``(domain, name, config.paths)``.
- Forms are discovered as ``<Contract>.*.form.yaml`` under ``yaml_dir``, sorted by file name,
  only for contracts declaring form schemas.
- An unreadable or schema-invalid form file is left out and logged; phase 5 reports it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
import yaml

from act_engine.canonical.forms import (
    FORM_FILE_SUFFIX,
    FormSpec,
    load_form_spec,
    parse_form_file_name,
)
from act_engine.config.schema import EngineConfig
from act_engine.constants import INVARIANT_MAPPING_FILE
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.errors import SchemaValidationError
from act_engine.domain.interfaces import AclCompiler, ActionRegistry, InvariantRegistry
from act_engine.knowledge_plane.contract_provider import CONTRACT_FILE_SUFFIX
from act_engine.manifests.models import (
    AclManifest,
    ContractManifest,
    FormManifest,
    InvariantManifestSummary,
    Manifest,
)

Clock = Callable[[], datetime]

_logger = structlog.get_logger(__name__)


def build_manifest(
    contracts: Sequence[ContractDefinition],
    config: EngineConfig,
    *,
    invariant_registry: InvariantRegistry,
    acl_compiler: AclCompiler,
    clock: Clock | None = None,
) -> Manifest:
    """Build the immutable manifest consumed by every phase."""

    now = (clock or _utc_now)()
    contract_manifests = tuple(contract_manifest(contract, config) for contract in contracts)
    forms = discover_forms(contracts, config)
    manifest = Manifest(
        contracts=contract_manifests,
        forms=forms,
        invariants=_invariant_summary(invariant_registry, config),
        acl=_acl_summary(acl_compiler),
        generated_at=now,
    )
    _logger.info(
        "manifest_built",
        contracts=len(manifest.contracts),
        forms=len(manifest.forms),
        invariants=manifest.invariants.invariant_count,
        roles=len(manifest.acl.roles),
    )
    return manifest


def contract_manifest(contract: ContractDefinition, config: EngineConfig) -> ContractManifest:
    paths = config.paths
    domain = contract.domain
    return ContractManifest(
        name=contract.name,
        domain=domain,
        metadata_path=paths.metadata_dir / f"{domain}{CONTRACT_FILE_SUFFIX}",
        shared_path=paths.shared_contracts_dir / f"{domain}_contract.py",
        test_path=paths.tests_dir / f"test_{domain}_contract.py",
        migration_path=(
            paths.migrations_dir / f"{domain}.sql" if contract.db_mapping is not None else None
        ),
        service_path=(
            paths.services_dir / f"{domain}_service.py" if contract.transformations else None
        ),
        route_path=paths.routes_dir / f"{domain}_routes.py" if contract.endpoints else None,
    )


def form_output_path(contract: ContractDefinition, variant: str, config: EngineConfig) -> Path:
    return config.paths.forms_output_dir / f"{contract.domain}_{variant}_form.py"


def discover_forms(
    contracts: Sequence[ContractDefinition], config: EngineConfig
) -> tuple[FormManifest, ...]:
    yaml_dir = config.paths.yaml_dir
    if not yaml_dir.is_dir():
        return ()

    by_contract: dict[str, list[Path]] = {}
    for yaml_path in sorted(yaml_dir.glob(f"*{FORM_FILE_SUFFIX}")):
        parsed = parse_form_file_name(yaml_path.name)
        if parsed is not None:
            by_contract.setdefault(parsed[0], []).append(yaml_path)

    forms: list[FormManifest] = []
    for contract in contracts:
        if not contract.form_schemas:
            continue
        for yaml_path in by_contract.get(contract.name, []):
            spec = _try_load_form(yaml_path)
            if spec is None:
                continue
            forms.append(_form_manifest(spec, contract, yaml_path, config))
    return tuple(forms)


def _form_manifest(
    spec: FormSpec, contract: ContractDefinition, yaml_path: Path, config: EngineConfig
) -> FormManifest:
    seen: set[str] = set()
    fields: list[str] = []
    for name in spec.field_names:
        if name not in seen:
            seen.add(name)
            fields.append(name)
    return FormManifest(
        contract=contract.name,
        variant=spec.variant,
        yaml_path=yaml_path,
        output_path=form_output_path(contract, spec.variant, config),
        sections=tuple(sorted({section.id for section in spec.sections})),
        fields=tuple(fields),
    )


def _try_load_form(path: Path) -> FormSpec | None:
    try:
        return load_form_spec(path)
    except (OSError, yaml.YAMLError, SchemaValidationError) as exc:
        _logger.warning("manifest_form_skipped", path=path.as_posix(), error=str(exc))
        return None


def _invariant_summary(
    registry: InvariantRegistry, config: EngineConfig
) -> InvariantManifestSummary:
    ids = tuple(registry.get_all_invariant_ids())
    categories: set[str] = set()
    for invariant_id in ids:
        entry = registry.get(invariant_id)
        if entry is not None and entry.metadata.category:
            categories.add(entry.metadata.category)
    return InvariantManifestSummary(
        registry_path=config.paths.invariants_dir,
        mapping_path=config.paths.invariant_mapping_output_dir / INVARIANT_MAPPING_FILE,
        invariant_count=len(ids),
        categories=tuple(categories),
    )


def _acl_summary(compiler: AclCompiler) -> AclManifest:
    compilation = compiler.compile_roles()
    actions: set[str] = set()
    for role in compilation.compiled.values():
        actions.update(role.transitive_actions)
    if isinstance(compiler, ActionRegistry):
        actions.update(compiler.get_all_action_ids())
    return AclManifest(
        roles=tuple(compilation.compiled),
        actions=tuple(actions),
        role_actions={
            name: role.transitive_actions for name, role in compilation.compiled.items()
        },
    )


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


__all__ = [
    "Clock",
    "build_manifest",
    "contract_manifest",
    "discover_forms",
    "form_output_path",
]
