"""
act-engine knowledge plane.

File: src/act_engine/knowledge_plane/__init__.py
Last updated: 2026-10-19

Purpose
- File-backed collaborator implementations: contract metadata, invariant registry, ACL roles.
"""

from act_engine.knowledge_plane.acl_registry import (
    ACTION_ID_PATTERN,
    RoleDefinition,
    YamlAclRegistry,
)
from act_engine.knowledge_plane.contract_provider import (
    CONTRACT_FILE_SUFFIX,
    YamlContractProvider,
    validate_contract_definitions,
)
from act_engine.knowledge_plane.invariant_registry import (
    INVARIANT_ID_PATTERN,
    YamlInvariantRegistry,
    is_canonical_invariant_id,
)

__all__ = [
    "ACTION_ID_PATTERN",
    "CONTRACT_FILE_SUFFIX",
    "INVARIANT_ID_PATTERN",
    "RoleDefinition",
    "YamlAclRegistry",
    "YamlContractProvider",
    "is_canonical_invariant_id",
    "validate_contract_definitions",
]
