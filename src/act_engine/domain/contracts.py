"""
act-engine - contract metadata models

File: src/act_engine/domain/contracts.py
Last updated: 2026-10-19

Purpose
- Typed, immutable view of contract metadata (the typed half of FORM).

Functional requirements
- ``ContractDefinition.from_mapping`` parses the ``contract:`` YAML document
  and raises ``SchemaValidationError`` with a dotted path on malformed input.
- Field order, form schema order and endpoint order are preserved exactly as declared.

Non-functional requirements
- Models are frozen and hashable-by-identity; no I/O happens here.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from act_engine.domain.errors import SchemaValidationError
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    coerce_str,
    mapping_tuple,
    optional_bool,
    optional_mapping,
    optional_number,
    optional_str,
    require_root,
    require_str,
    string_tuple,
)

HTTP_METHODS: Final[frozenset[str]] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

_IDENTIFIER_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class FieldConstraints:
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str) -> FieldConstraints:
        min_length = optional_number(payload, "minLength", path, None, minimum=0)
        max_length = optional_number(payload, "maxLength", path, None, minimum=0)
        return cls(
            minimum=optional_number(payload, "min", path, None),
            maximum=optional_number(payload, "max", path, None),
            min_length=int(min_length) if min_length is not None else None,
            max_length=int(max_length) if max_length is not None else None,
            pattern=optional_str(payload, "pattern", path),
        )

    def to_dict(self) -> dict[str, object]:
        """Return only the constraints that are set, in a fixed key order."""

        payload: dict[str, object] = {}
        if self.minimum is not None:
            payload["min"] = self.minimum
        if self.maximum is not None:
            payload["max"] = self.maximum
        if self.min_length is not None:
            payload["minLength"] = self.min_length
        if self.max_length is not None:
            payload["maxLength"] = self.max_length
        if self.pattern is not None:
            payload["pattern"] = self.pattern
        return payload


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    name: str
    type: str
    optional: bool = False
    nullable: bool = False
    readonly: bool = False
    description: str = ""
    constraints: FieldConstraints = field(default_factory=FieldConstraints)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("FieldDefinition.name must be non-empty")
        if not self.type:
            raise ValueError("FieldDefinition.type must be non-empty")

    @property
    def required(self) -> bool:
        return not self.optional and not self.nullable

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str) -> FieldDefinition:
        return cls(
            name=require_str(payload, "name", path),
            type=require_str(payload, "type", path),
            optional=optional_bool(payload, "optional", path, False),
            nullable=optional_bool(payload, "nullable", path, False),
            readonly=optional_bool(payload, "readonly", path, False),
            description=optional_str(payload, "description", path, "") or "",
            constraints=FieldConstraints.from_mapping(
                optional_mapping(payload, "constraints", path), child_path(path, "constraints")
            ),
        )


@dataclass(frozen=True, slots=True)
class SchemaDefinition:
    name: str
    fields: tuple[FieldDefinition, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.fields)

    def get_field(self, name: str) -> FieldDefinition | None:
        for item in self.fields:
            if item.name == name:
                return item
        return None


@dataclass(frozen=True, slots=True)
class FormSchemaDefinition:
    """One form variant a contract allows, with its default section layout."""

    id: str
    default_sections: tuple[tuple[str, ...], ...] = ()

    @property
    def default_field_order(self) -> tuple[str, ...]:
        return tuple(name for section in self.default_sections for name in section)


@dataclass(frozen=True, slots=True)
class ProjectionCapability:
    default_widget: str
    widgets: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TransformationDefinition:
    function: str
    source: str
    target: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class EndpointDefinition:
    name: str
    method: str
    path: str
    action: str | None = None


@dataclass(frozen=True, slots=True)
class DbColumnDefinition:
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    default: str | None = None


@dataclass(frozen=True, slots=True)
class DbMappingDefinition:
    table: str
    columns: tuple[DbColumnDefinition, ...]


@dataclass(frozen=True, slots=True)
class ContractDefinition:
    """Authoritative metadata for one contract."""

    name: str
    domain: str
    base_schema: SchemaDefinition
    version: str = "1.0.0"
    form_schemas: tuple[FormSchemaDefinition, ...] = ()
    projection_capabilities: Mapping[str, ProjectionCapability] = field(
        default_factory=lambda: MappingProxyType({})
    )
    transformations: tuple[TransformationDefinition, ...] = ()
    endpoints: tuple[EndpointDefinition, ...] = ()
    db_mapping: DbMappingDefinition | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ContractDefinition.name must be non-empty")
        if not self.domain:
            raise ValueError("ContractDefinition.domain must be non-empty")
        object.__setattr__(
            self,
            "projection_capabilities",
            MappingProxyType(dict(self.projection_capabilities)),
        )

    def form_schema(self, variant: str) -> FormSchemaDefinition | None:
        for schema in self.form_schemas:
            if schema.id == variant:
                return schema
        return None

    @classmethod
    def from_document(cls, payload: object) -> ContractDefinition:
        """Parse a whole YAML document whose root key is ``contract``."""

        return cls.from_mapping(require_root(payload, "contract"), "contract")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "contract") -> ContractDefinition:
        base_path = child_path(path, "baseSchema")
        base_raw = as_mapping(payload.get("baseSchema"), base_path)
        base_schema = SchemaDefinition(
            name=optional_str(base_raw, "name", base_path, None)
            or f"{require_str(payload, 'name', path)}Schema",
            fields=tuple(
                FieldDefinition.from_mapping(item, item_path)
                for item_path, item in mapping_tuple(base_raw, "fields", base_path, min_items=1)
            ),
        )

        return cls(
            name=require_str(payload, "name", path),
            domain=require_str(payload, "domain", path),
            version=optional_str(payload, "version", path, "1.0.0") or "1.0.0",
            base_schema=base_schema,
            form_schemas=_parse_form_schemas(payload, path),
            projection_capabilities=_parse_projection_capabilities(payload, path),
            transformations=tuple(
                TransformationDefinition(
                    function=require_str(item, "function", item_path),
                    source=require_str(item, "from", item_path),
                    target=require_str(item, "to", item_path),
                    description=optional_str(item, "description", item_path, "") or "",
                )
                for item_path, item in mapping_tuple(payload, "transformations", path)
            ),
            endpoints=tuple(
                EndpointDefinition(
                    name=require_str(item, "name", item_path),
                    method=require_str(item, "method", item_path).upper(),
                    path=require_str(item, "path", item_path),
                    action=optional_str(item, "action", item_path),
                )
                for item_path, item in mapping_tuple(payload, "endpoints", path)
            ),
            db_mapping=_parse_db_mapping(payload, path),
        )


def _parse_form_schemas(
    payload: Mapping[str, object], path: str
) -> tuple[FormSchemaDefinition, ...]:
    schemas: list[FormSchemaDefinition] = []
    for item_path, item in mapping_tuple(payload, "formSchemas", path):
        raw_sections = item.get("defaultSections")
        sections_path = child_path(item_path, "defaultSections")
        if raw_sections is None:
            raw_sections = []
        if not isinstance(raw_sections, list):
            raise SchemaValidationError(sections_path, "expected list of field lists")
        sections: list[tuple[str, ...]] = []
        for index, section in enumerate(raw_sections):
            section_path = child_path(sections_path, index)
            if isinstance(section, Mapping):
                sections.append(string_tuple(as_mapping(section, section_path), "fields", section_path))
                continue
            if not isinstance(section, list):
                raise SchemaValidationError(section_path, "expected list of field names")
            sections.append(
                tuple(coerce_str(name, child_path(section_path, i)) for i, name in enumerate(section))
            )
        schemas.append(
            FormSchemaDefinition(id=require_str(item, "id", item_path), default_sections=tuple(sections))
        )
    return tuple(schemas)


def _parse_projection_capabilities(
    payload: Mapping[str, object], path: str
) -> dict[str, ProjectionCapability]:
    capabilities: dict[str, ProjectionCapability] = {}
    raw = optional_mapping(payload, "projectionCapabilities", path)
    for field_type in sorted(raw):
        entry_path = child_path(child_path(path, "projectionCapabilities"), field_type)
        entry = as_mapping(raw[field_type], entry_path)
        capabilities[field_type] = ProjectionCapability(
            default_widget=require_str(entry, "defaultWidget", entry_path),
            widgets=string_tuple(entry, "widgets", entry_path),
        )
    return capabilities


def _parse_db_mapping(payload: Mapping[str, object], path: str) -> DbMappingDefinition | None:
    if payload.get("dbMapping") is None:
        return None
    mapping_path = child_path(path, "dbMapping")
    raw = as_mapping(payload["dbMapping"], mapping_path)
    table = require_str(raw, "table", mapping_path)
    if _IDENTIFIER_RE.fullmatch(table) is None:
        raise SchemaValidationError(child_path(mapping_path, "table"), "must be a SQL identifier")
    columns: list[DbColumnDefinition] = []
    for item_path, item in mapping_tuple(raw, "columns", mapping_path, min_items=1):
        name = require_str(item, "name", item_path)
        if _IDENTIFIER_RE.fullmatch(name) is None:
            raise SchemaValidationError(child_path(item_path, "name"), "must be a SQL identifier")
        columns.append(
            DbColumnDefinition(
                name=name,
                type=require_str(item, "type", item_path),
                nullable=optional_bool(item, "nullable", item_path, True),
                primary_key=optional_bool(item, "primaryKey", item_path, False),
                default=optional_str(item, "default", item_path),
            )
        )
    return DbMappingDefinition(table=table, columns=tuple(columns))


__all__ = [
    "HTTP_METHODS",
    "ContractDefinition",
    "DbColumnDefinition",
    "DbMappingDefinition",
    "EndpointDefinition",
    "FieldConstraints",
    "FieldDefinition",
    "FormSchemaDefinition",
    "ProjectionCapability",
    "SchemaDefinition",
    "TransformationDefinition",
]
