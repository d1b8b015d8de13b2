"""Collaborator handles injected into a pipeline run."""

from __future__ import annotations

from dataclasses import dataclass, field

from act_engine.codegen.serializer import DocumentSerializer
from act_engine.config.schema import EngineConfig
from act_engine.domain.interfaces import (
    AclCompiler,
    ActionRegistry,
    ContractProvider,
    ContractValidator,
    InvariantRegistry,
)
from act_engine.knowledge_plane.acl_registry import YamlAclRegistry
from act_engine.knowledge_plane.contract_provider import (
    YamlContractProvider,
    validate_contract_definitions,
)
from act_engine.knowledge_plane.invariant_registry import YamlInvariantRegistry


@dataclass(frozen=True, slots=True)
class PipelineServices:
    """Resolved once by the host and passed explicitly to every phase."""

    invariant_registry: InvariantRegistry
    acl_compiler: AclCompiler
    action_registry: ActionRegistry
    contract_validator: ContractValidator = validate_contract_definitions
    contract_provider: ContractProvider | None = None
    serializer: DocumentSerializer = field(default_factory=DocumentSerializer)

    @classmethod
    def from_config(cls, config: EngineConfig) -> PipelineServices:
        """Load the YAML-backed collaborators named by ``config.paths``."""

        paths = config.paths
        acl = YamlAclRegistry.load(paths.acl_path)
        return cls(
            invariant_registry=YamlInvariantRegistry.load(paths.invariants_dir),
            acl_compiler=acl,
            action_registry=acl,
            contract_provider=YamlContractProvider(paths.metadata_dir),
        )


__all__ = ["PipelineServices"]
