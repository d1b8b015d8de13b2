"""
act-engine domain package public API.

File: src/act_engine/domain/__init__.py
Last updated: 2026-10-19

Purpose
- Export contract metadata models, collaborator interfaces and the error taxonomy.

Non-functional requirements
- No I/O at import time.
"""

from act_engine.domain.contracts import (
    HTTP_METHODS,
    ContractDefinition,
    DbColumnDefinition,
    DbMappingDefinition,
    EndpointDefinition,
    FieldConstraints,
    FieldDefinition,
    FormSchemaDefinition,
    ProjectionCapability,
    SchemaDefinition,
    TransformationDefinition,
)
from act_engine.domain.errors import (
    CanonicalizationError,
    FormValidationError,
    PolicyViolationError,
    SchemaValidationError,
    UnknownReferenceError,
)
from act_engine.domain.interfaces import (
    AclCompilation,
    AclCompiler,
    ActionRegistry,
    CompiledRole,
    ContractProvider,
    ContractValidator,
    InvariantEntry,
    InvariantMetadata,
    InvariantRegistry,
    RoleConflict,
)

__all__ = [
    "HTTP_METHODS",
    "AclCompilation",
    "AclCompiler",
    "ActionRegistry",
    "CanonicalizationError",
    "CompiledRole",
    "ContractDefinition",
    "ContractProvider",
    "ContractValidator",
    "DbColumnDefinition",
    "DbMappingDefinition",
    "EndpointDefinition",
    "FieldConstraints",
    "FieldDefinition",
    "FormSchemaDefinition",
    "FormValidationError",
    "InvariantEntry",
    "InvariantMetadata",
    "InvariantRegistry",
    "PolicyViolationError",
    "ProjectionCapability",
    "RoleConflict",
    "SchemaDefinition",
    "SchemaValidationError",
    "TransformationDefinition",
    "UnknownReferenceError",
]
