"""
act-engine - form YAML schema, validator and canonicalizer

File: src/act_engine/canonical/forms.py
Last updated: 2026-10-19

Purpose
- Parse ``<Contract>.<variant>.form.yaml`` documents into ``FormSpec``.
- Validate a form against its contract metadata and aggregate findings.
- Produce a total, deterministic ``FormDescriptor`` consumed by code generation.

Functional requirements
- Schema errors raise ``SchemaValidationError``; reference errors raise
  ``UnknownReferenceError``; both are kept apart from validator findings.
- Every optional value is filled with its documented default.
- Padding other than 24/16 is rejected.

Non-functional requirements
- Canonicalization is pure: no I/O, no clock, no randomness.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Final

import yaml

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.contracts import ContractDefinition, FieldDefinition
from act_engine.domain.errors import (
    CanonicalizationError,
    FormValidationError,
    UnknownReferenceError,
)
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.domain.parsing import (
    as_mapping,
    child_path,
    choice,
    mapping_tuple,
    optional_bool,
    optional_mapping,
    optional_number,
    optional_str,
    require_root,
    require_str,
    string_tuple,
)

FORM_FILE_SUFFIX: Final[str] = ".form.yaml"

CANONICAL_PADDING_X: Final[int] = 24
CANONICAL_PADDING_Y: Final[int] = 16
CANONICAL_SPACING: Final[int] = 24
CANONICAL_GRID: Final[int] = 4

_WIDGET_BY_TYPE: Final[Mapping[str, str]] = {
    "uuid": "text",
    "string": "text",
    "number": "number",
    "boolean": "checkbox",
    "datetime": "datetime-local",
    "date": "date",
    "json": "textarea",
    "record": "textarea",
    "array": "textarea",
    "object": "textarea",
}
_FALLBACK_WIDGET: Final[str] = "text"

_CAMEL_BOUNDARY_RE: Final[re.Pattern[str]] = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ScrollContainerType(StrEnum):
    FORM = "form"
    CONTENT = "content"


class Overscroll(StrEnum):
    AUTO = "auto"
    CONTAIN = "contain"
    NONE = "none"


class DataSourceType(StrEnum):
    PROJECTION = "projection"
    CONTRACT = "contract"
    STATEVIEW = "stateview"
    COMPUTED = "computed"


class ListenType(StrEnum):
    EVENT = "event"
    PROJECTION = "projection"
    INVARIANT = "invariant"
    POLL = "poll"


# Functional bindings ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MutationSpec:
    type: str
    intent_id: str | None = None
    payload_template: Mapping[str, object] | None = None


@dataclass(frozen=True, slots=True)
class CapabilityFallbackSpec:
    hide: bool = False
    disable: bool = True


@dataclass(frozen=True, slots=True)
class CapabilitySpec:
    required_action: str
    additional: tuple[str, ...] = ()
    fallback: CapabilityFallbackSpec = field(default_factory=CapabilityFallbackSpec)


@dataclass(frozen=True, slots=True)
class DataSourceSpec:
    type: DataSourceType
    source: str
    path: str | None = None


@dataclass(frozen=True, slots=True)
class ListenSpec:
    type: ListenType
    source: str


@dataclass(frozen=True, slots=True)
class FunctionalBindingSpec:
    mutation: MutationSpec | None = None
    capability: CapabilitySpec | None = None
    data_source: DataSourceSpec | None = None
    listen: tuple[ListenSpec, ...] = ()
    invariants: InvariantsSpec | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str) -> FunctionalBindingSpec:
        mutation: MutationSpec | None = None
        if payload.get("mutation") is not None:
            mutation_path = child_path(path, "mutation")
            raw = as_mapping(payload["mutation"], mutation_path)
            template = raw.get("payloadTemplate")
            mutation = MutationSpec(
                type=require_str(raw, "type", mutation_path),
                intent_id=optional_str(raw, "intentId", mutation_path),
                payload_template=(
                    as_mapping(template, child_path(mutation_path, "payloadTemplate"))
                    if template is not None
                    else None
                ),
            )

        capability: CapabilitySpec | None = None
        if payload.get("capability") is not None:
            capability_path = child_path(path, "capability")
            raw = as_mapping(payload["capability"], capability_path)
            fallback_raw = optional_mapping(raw, "fallback", capability_path)
            fallback_path = child_path(capability_path, "fallback")
            capability = CapabilitySpec(
                required_action=require_str(raw, "requiredAction", capability_path),
                additional=string_tuple(raw, "additional", capability_path),
                fallback=CapabilityFallbackSpec(
                    hide=optional_bool(fallback_raw, "hide", fallback_path, False),
                    disable=optional_bool(fallback_raw, "disable", fallback_path, True),
                ),
            )

        data_source: DataSourceSpec | None = None
        if payload.get("dataSource") is not None:
            source_path = child_path(path, "dataSource")
            raw = as_mapping(payload["dataSource"], source_path)
            data_source = DataSourceSpec(
                type=DataSourceType(
                    choice(raw, "type", source_path, tuple(item.value for item in DataSourceType))
                ),
                source=require_str(raw, "source", source_path),
                path=optional_str(raw, "path", source_path),
            )

        listen_raw = payload.get("listen")
        if isinstance(listen_raw, Mapping):
            payload = {**payload, "listen": [listen_raw]}
        listen = tuple(
            ListenSpec(
                type=ListenType(
                    choice(item, "type", item_path, tuple(entry.value for entry in ListenType))
                ),
                source=require_str(item, "source", item_path),
            )
            for item_path, item in mapping_tuple(payload, "listen", path)
        )

        invariants = (
            InvariantsSpec.optional(payload, "invariants", path)
            if payload.get("invariants") is not None
            else None
        )
        return cls(
            mutation=mutation,
            capability=capability,
            data_source=data_source,
            listen=listen,
            invariants=invariants,
        )


# Form schema -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SectionSpec:
    id: str
    title: str
    fields: tuple[str, ...]
    functional: FunctionalBindingSpec | None = None


@dataclass(frozen=True, slots=True)
class PaddingSpec:
    x: float = CANONICAL_PADDING_X
    y: float = CANONICAL_PADDING_Y


@dataclass(frozen=True, slots=True)
class ScrollContainerSpec:
    id: str | None = None
    type: ScrollContainerType = ScrollContainerType.FORM


@dataclass(frozen=True, slots=True)
class ScrollBehaviorSpec:
    overscroll: Overscroll = Overscroll.CONTAIN
    restore_position: bool = True


@dataclass(frozen=True, slots=True)
class FormSpec:
    """Schema-validated view of one ``form:`` document."""

    contract: str
    variant: str
    sections: tuple[SectionSpec, ...]
    functional: FunctionalBindingSpec | None = None
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)
    padding: PaddingSpec = field(default_factory=PaddingSpec)
    scroll_container: ScrollContainerSpec = field(default_factory=ScrollContainerSpec)
    scroll_behavior: ScrollBehaviorSpec = field(default_factory=ScrollBehaviorSpec)

    @property
    def key(self) -> str:
        return f"{self.contract}.{self.variant}"

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(name for section in self.sections for name in section.fields)

    @property
    def has_functional_bindings(self) -> bool:
        return self.functional is not None or any(
            section.functional is not None for section in self.sections
        )

    @classmethod
    def from_document(cls, payload: object) -> FormSpec:
        return cls.from_mapping(require_root(payload, "form"), "form")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "form") -> FormSpec:
        sections = tuple(
            SectionSpec(
                id=require_str(item, "id", item_path),
                title=require_str(item, "title", item_path),
                fields=string_tuple(item, "fields", item_path),
                functional=_optional_binding(item, item_path),
            )
            for item_path, item in mapping_tuple(payload, "sections", path, min_items=1)
        )

        padding_raw = optional_mapping(payload, "padding", path)
        padding_path = child_path(path, "padding")
        padding = PaddingSpec(
            x=optional_number(padding_raw, "x", padding_path, CANONICAL_PADDING_X) or 0,
            y=optional_number(padding_raw, "y", padding_path, CANONICAL_PADDING_Y) or 0,
        )

        scroll_raw = optional_mapping(payload, "scrollContainer", path)
        scroll_path = child_path(path, "scrollContainer")
        scroll_container = ScrollContainerSpec(
            id=optional_str(scroll_raw, "id", scroll_path),
            type=ScrollContainerType(
                choice(
                    scroll_raw,
                    "type",
                    scroll_path,
                    tuple(item.value for item in ScrollContainerType),
                    ScrollContainerType.FORM.value,
                )
            ),
        )

        behavior_raw = optional_mapping(payload, "scrollBehavior", path)
        behavior_path = child_path(path, "scrollBehavior")
        scroll_behavior = ScrollBehaviorSpec(
            overscroll=Overscroll(
                choice(
                    behavior_raw,
                    "overscroll",
                    behavior_path,
                    tuple(item.value for item in Overscroll),
                    Overscroll.CONTAIN.value,
                )
            ),
            restore_position=optional_bool(behavior_raw, "restorePosition", behavior_path, True),
        )

        return cls(
            contract=require_str(payload, "contract", path),
            variant=require_str(payload, "variant", path),
            sections=sections,
            functional=_optional_binding(payload, path),
            invariants=InvariantsSpec.optional(payload, "invariants", path),
            padding=padding,
            scroll_container=scroll_container,
            scroll_behavior=scroll_behavior,
        )


def _optional_binding(payload: Mapping[str, object], path: str) -> FunctionalBindingSpec | None:
    value = payload.get("functional")
    if value is None:
        return None
    location = child_path(path, "functional")
    return FunctionalBindingSpec.from_mapping(as_mapping(value, location), location)


def load_form_spec(path: Path) -> FormSpec:
    """Read and schema-validate one form YAML file."""

    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle)
    return FormSpec.from_document(payload)


def parse_form_file_name(file_name: str) -> tuple[str, str] | None:
    """Split ``Contract.variant.form.yaml`` into ``(contract, variant)``."""

    if not file_name.endswith(FORM_FILE_SUFFIX):
        return None
    stem = file_name[: -len(FORM_FILE_SUFFIX)]
    contract, dot, variant = stem.partition(".")
    if not dot or not contract or not variant:
        return None
    return contract, variant


# Validator -------------------------------------------------------------------


def validate_form(spec: FormSpec, contract: ContractDefinition) -> None:
    """Check a form against contract metadata, raising one aggregated ``FormValidationError``."""

    errors: list[str] = []
    if spec.contract != contract.name:
        errors.append(
            f'Contract mismatch: YAML specifies "{spec.contract}" but metadata has "{contract.name}"'
        )

    if not contract.form_schemas:
        errors.append(f'No formSchemas defined in metadata for contract "{contract.name}"')
    elif contract.form_schema(spec.variant) is None:
        available = ", ".join(schema.id for schema in contract.form_schemas)
        errors.append(
            f'Variant "{spec.variant}" not found in formSchemas. Available variants: {available}'
        )

    base_fields = contract.base_schema.field_names
    for name in dict.fromkeys(spec.field_names):
        if name not in base_fields:
            errors.append(_unknown_field_message(name, base_fields))

    for name, count in Counter(spec.field_names).items():
        if count > 1:
            errors.append(
                f'Field "{name}" appears {count} times across sections (must appear exactly once)'
            )

    section_ids = [section.id for section in spec.sections]
    if len(section_ids) != len(set(section_ids)):
        errors.append("Section IDs must be unique")

    if errors:
        raise FormValidationError(spec.contract, spec.variant, errors)


def _unknown_field_message(name: str, available: tuple[str, ...]) -> str:
    return (
        f'Field "{name}" does not exist in metadata.baseSchema. '
        f"Available fields: {', '.join(available)}"
    )


# Canonical descriptor --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    type: str
    widget: str
    label: str
    required: bool
    readonly: bool
    description: str
    constraints: Mapping[str, object]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": self.type,
            "widget": self.widget,
            "label": self.label,
            "required": self.required,
            "readonly": self.readonly,
            "description": self.description,
            "constraints": dict(self.constraints),
        }


@dataclass(frozen=True, slots=True)
class SectionDescriptor:
    id: str
    title: str
    fields: tuple[FieldDescriptor, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "fields": [item.to_dict() for item in self.fields],
        }


@dataclass(frozen=True, slots=True)
class ScrollContainerDescriptor:
    id: str
    type: ScrollContainerType

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "type": self.type.value}


@dataclass(frozen=True, slots=True)
class FormDescriptor:
    contract: str
    variant: str
    sections: tuple[SectionDescriptor, ...]
    invariants: InvariantsBlock
    padding_x: float
    padding_y: float
    scroll_containers: tuple[ScrollContainerDescriptor, ...]
    scroll_behavior: ScrollBehaviorSpec
    canonical_spacing: int = CANONICAL_SPACING
    canonical_grid: int = CANONICAL_GRID

    @property
    def key(self) -> str:
        return f"{self.contract}.{self.variant}"

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(item for section in self.sections for item in section.fields)

    def to_dict(self) -> dict[str, object]:
        return {
            "contract": self.contract,
            "variant": self.variant,
            "sections": [section.to_dict() for section in self.sections],
            "invariants": self.invariants.to_dict(),
            "padding": {"x": self.padding_x, "y": self.padding_y},
            "scroll_containers": [item.to_dict() for item in self.scroll_containers],
            "scroll_behavior": {
                "overscroll": self.scroll_behavior.overscroll.value,
                "restore_position": self.scroll_behavior.restore_position,
            },
            "canonical_spacing": self.canonical_spacing,
            "canonical_grid": self.canonical_grid,
        }


def field_label(name: str) -> str:
    """``createdAt`` and ``created_at`` both become ``Created At``."""

    words: list[str] = []
    for chunk in name.replace("-", "_").split("_"):
        words.extend(part for part in _CAMEL_BOUNDARY_RE.split(chunk) if part)
    return " ".join(word[:1].upper() + word[1:] for word in words)


def default_widget(field_type: str, contract: ContractDefinition) -> str:
    capability = contract.projection_capabilities.get(field_type)
    if capability is not None and capability.default_widget:
        return capability.default_widget
    return _WIDGET_BY_TYPE.get(field_type, _FALLBACK_WIDGET)


def _field_descriptor(definition: FieldDefinition, contract: ContractDefinition) -> FieldDescriptor:
    return FieldDescriptor(
        name=definition.name,
        type=definition.type,
        widget=default_widget(definition.type, contract),
        label=field_label(definition.name),
        required=definition.required,
        readonly=definition.readonly,
        description=definition.description,
        constraints=definition.constraints.to_dict(),
    )


def canonicalize_form(
    spec: FormSpec,
    contract: ContractDefinition,
    registry: InvariantRegistry | None = None,
) -> FormDescriptor:
    """Cross-reference ``spec`` with ``contract`` and return the total descriptor."""

    if spec.contract != contract.name:
        raise CanonicalizationError(
            f'Form declares contract "{spec.contract}" but metadata is for "{contract.name}"'
        )
    if spec.padding.x != CANONICAL_PADDING_X:
        raise CanonicalizationError(
            f"Non-canonical horizontal padding: {spec.padding.x:g} (expected {CANONICAL_PADDING_X})"
        )
    if spec.padding.y != CANONICAL_PADDING_Y:
        raise CanonicalizationError(
            f"Non-canonical vertical padding: {spec.padding.y:g} (expected {CANONICAL_PADDING_Y})"
        )

    base_fields = contract.base_schema.field_names
    seen: set[str] = set()
    sections: list[SectionDescriptor] = []
    for section in spec.sections:
        fields: list[FieldDescriptor] = []
        for name in section.fields:
            definition = contract.base_schema.get_field(name)
            if definition is None:
                raise UnknownReferenceError(
                    _unknown_field_message(name, base_fields), kind="field", reference=name
                )
            if name in seen:
                raise CanonicalizationError(f'Field "{name}" appears in more than one section')
            seen.add(name)
            fields.append(_field_descriptor(definition, contract))
        sections.append(SectionDescriptor(id=section.id, title=section.title, fields=tuple(fields)))

    section_ids = [section.id for section in sections]
    if len(section_ids) != len(set(section_ids)):
        raise CanonicalizationError("Section IDs must be unique")

    scroll = ScrollContainerDescriptor(
        id=spec.scroll_container.id or f"{spec.contract}.{spec.variant}.scroll",
        type=spec.scroll_container.type,
    )
    return FormDescriptor(
        contract=spec.contract,
        variant=spec.variant,
        sections=tuple(sections),
        invariants=canonicalize_invariants(spec.invariants, registry),
        padding_x=spec.padding.x,
        padding_y=spec.padding.y,
        scroll_containers=(scroll,),
        scroll_behavior=spec.scroll_behavior,
    )


__all__ = [
    "CANONICAL_GRID",
    "CANONICAL_PADDING_X",
    "CANONICAL_PADDING_Y",
    "CANONICAL_SPACING",
    "FORM_FILE_SUFFIX",
    "CapabilityFallbackSpec",
    "CapabilitySpec",
    "DataSourceSpec",
    "DataSourceType",
    "FieldDescriptor",
    "FormDescriptor",
    "FormSpec",
    "FunctionalBindingSpec",
    "ListenSpec",
    "ListenType",
    "MutationSpec",
    "Overscroll",
    "PaddingSpec",
    "ScrollBehaviorSpec",
    "ScrollContainerDescriptor",
    "ScrollContainerSpec",
    "ScrollContainerType",
    "SectionDescriptor",
    "SectionSpec",
    "canonicalize_form",
    "default_widget",
    "field_label",
    "load_form_spec",
    "parse_form_file_name",
    "validate_form",
]
