"""
act-engine - artifact document generators

File: src/act_engine/codegen/generators.py
Last updated: 2026-10-19

Purpose
- Build structured documents for every STATE artifact from contracts, canonical form
  descriptors, and the invariant registry.

Functional requirements
- Generators never produce text; the serializer owns rendering.
- Output order follows declaration order in metadata; registry output is sorted by id.
- Names that cannot become Python identifiers raise ``ValueError``.
"""

from __future__ import annotations

import keyword
from typing import Final

from act_engine.canonical.forms import FormDescriptor
from act_engine.codegen.documents import (
    ClassBlock,
    ColumnLine,
    Constant,
    ContractTestDocument,
    DataclassField,
    FunctionBlock,
    MigrationDocument,
    ModuleDocument,
)
from act_engine.domain.contracts import ContractDefinition, FieldDefinition
from act_engine.domain.interfaces import InvariantRegistry

_PYTHON_TYPE_BY_FIELD_TYPE: Final[dict[str, str]] = {
    "uuid": "str",
    "string": "str",
    "text": "str",
    "number": "float",
    "integer": "int",
    "boolean": "bool",
    "datetime": "str",
    "date": "str",
    "json": "dict[str, object]",
    "record": "dict[str, object]",
    "object": "dict[str, object]",
    "array": "list[object]",
}
_FALLBACK_PYTHON_TYPE: Final[str] = "object"


def contract_source(contract: ContractDefinition) -> str:
    return f"{contract.name} contract metadata"


def shared_module_name(contract: ContractDefinition) -> str:
    return f"{contract.domain}_contract"


def python_type(field: FieldDefinition) -> str:
    base = _PYTHON_TYPE_BY_FIELD_TYPE.get(field.type, _FALLBACK_PYTHON_TYPE)
    if field.required:
        return base
    return f"{base} | None"


def shared_contract_document(contract: ContractDefinition) -> ModuleDocument:
    """Typed record for one contract plus the field tables other artifacts rely on."""

    fields = contract.base_schema.fields
    for item in fields:
        _require_identifier(item.name, f"field of contract {contract.name}")
    _require_identifier(contract.name, "contract name")

    # Required fields first so the dataclass has no non-default after a default.
    ordered = [item for item in fields if item.required] + [
        item for item in fields if not item.required
    ]
    return ModuleDocument(
        source=contract_source(contract),
        docstring=f"Shared {contract.name} contract (version {contract.version}).",
        imports=("from dataclasses import dataclass",),
        constants=(
            Constant("CONTRACT_NAME", contract.name),
            Constant("CONTRACT_VERSION", contract.version),
            Constant("FIELD_NAMES", tuple(item.name for item in fields)),
            Constant(
                "REQUIRED_FIELDS", tuple(item.name for item in fields if item.required)
            ),
            Constant(
                "READONLY_FIELDS", tuple(item.name for item in fields if item.readonly)
            ),
            Constant(
                "FIELD_CONSTRAINTS",
                {
                    item.name: item.constraints.to_dict()
                    for item in fields
                    if item.constraints.to_dict()
                },
            ),
        ),
        classes=(
            ClassBlock(
                name=contract.name,
                docstring=contract.base_schema.name,
                fields=tuple(
                    DataclassField(
                        name=item.name,
                        annotation=python_type(item),
                        default=None if item.required else "None",
                    )
                    for item in ordered
                ),
            ),
        ),
    )


def service_document(contract: ContractDefinition) -> ModuleDocument:
    """One projection function per declared transformation."""

    functions: list[FunctionBlock] = []
    for transformation in contract.transformations:
        _require_identifier(transformation.function, f"transformation of {contract.name}")
        description = (
            transformation.description
            or f"Transform {transformation.source} into {transformation.target}."
        )
        functions.append(
            FunctionBlock(
                name=transformation.function,
                params="payload: dict[str, object]",
                returns="dict[str, object]",
                docstring=description.replace('"""', "'''"),
                body=("return {name: payload.get(name) for name in FIELD_NAMES}",),
            )
        )
    return ModuleDocument(
        source=contract_source(contract),
        docstring=f"{contract.name} service transformations.",
        constants=(Constant("FIELD_NAMES", contract.base_schema.field_names),),
        functions=tuple(functions),
    )


def route_document(contract: ContractDefinition) -> ModuleDocument:
    routes = tuple(
        {
            "name": endpoint.name,
            "method": endpoint.method,
            "path": endpoint.path,
            "action": endpoint.action,
        }
        for endpoint in contract.endpoints
    )
    return ModuleDocument(
        source=contract_source(contract),
        docstring=f"{contract.name} route table.",
        constants=(
            Constant("CONTRACT_NAME", contract.name),
            Constant("ROUTES", routes),
        ),
        functions=(
            FunctionBlock(
                name="find_route",
                params="name: str",
                returns="dict[str, str | None] | None",
                docstring="Return the route declared under ``name``, if any.",
                body=(
                    "for route in ROUTES:",
                    '    if route["name"] == name:',
                    "        return route",
                    "return None",
                ),
            ),
        ),
    )


def migration_document(contract: ContractDefinition) -> MigrationDocument:
    if contract.db_mapping is None:
        raise ValueError(f"contract {contract.name} has no dbMapping")
    return MigrationDocument(
        source=contract_source(contract),
        table=contract.db_mapping.table,
        columns=tuple(
            ColumnLine(
                name=column.name,
                type=column.type,
                nullable=column.nullable,
                primary_key=column.primary_key,
                default=column.default,
            )
            for column in contract.db_mapping.columns
        ),
    )


def contract_test_document(contract: ContractDefinition) -> ContractTestDocument:
    fields = contract.base_schema.fields
    return ContractTestDocument(
        source=contract_source(contract),
        docstring=f"Contract tests for {contract.name}.",
        module=shared_module_name(contract),
        class_name=contract.name,
        field_names=tuple(item.name for item in fields),
        required_fields=tuple(item.name for item in fields if item.required),
    )


def form_document(descriptor: FormDescriptor) -> ModuleDocument:
    return ModuleDocument(
        source=f"{descriptor.key} form YAML",
        docstring=f"Canonical form descriptor for {descriptor.key}.",
        constants=(
            Constant("FORM_KEY", descriptor.key),
            Constant("FORM_DESCRIPTOR", descriptor.to_dict(), "dict[str, object]"),
        ),
    )


def invariant_mapping_document(registry: InvariantRegistry) -> ModuleDocument:
    mapping: dict[str, dict[str, object]] = {}
    for invariant_id in sorted(registry.get_all_invariant_ids()):
        entry = registry.get(invariant_id)
        if entry is None:
            continue
        metadata = entry.metadata
        mapping[invariant_id] = {
            "category": metadata.category,
            "code": metadata.code,
            "name": metadata.name,
            "enforce": metadata.enforce,
        }
    return ModuleDocument(
        source="invariant registry",
        docstring="Invariant id to registry metadata.",
        constants=(Constant("INVARIANTS", mapping, "dict[str, dict[str, object]]"),),
        functions=(
            FunctionBlock(
                name="enforce_function",
                params="invariant_id: str",
                returns="object",
                docstring="Return the registered enforce function name, or None.",
                body=('return INVARIANTS.get(invariant_id, {}).get("enforce")',),
            ),
        ),
    )


def _require_identifier(name: str, what: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{what} {name!r} is not a valid Python identifier")


__all__ = [
    "contract_source",
    "contract_test_document",
    "form_document",
    "invariant_mapping_document",
    "migration_document",
    "python_type",
    "route_document",
    "service_document",
    "shared_contract_document",
    "shared_module_name",
]
