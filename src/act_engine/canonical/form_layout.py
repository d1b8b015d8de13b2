"""Build-time layout invariants FORM-LAY-001..005 over canonical form descriptors."""

from __future__ import annotations

from act_engine.canonical.forms import (
    CANONICAL_PADDING_X,
    CANONICAL_PADDING_Y,
    FormDescriptor,
)
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.errors import CanonicalizationError


class FormLayoutViolationError(CanonicalizationError):
    def __init__(self, invariant_id: str, descriptor_key: str, message: str) -> None:
        self.invariant_id = invariant_id
        self.descriptor_key = descriptor_key
        super().__init__(f"[{invariant_id}] {descriptor_key}: {message}")


def check_form_layout(descriptor: FormDescriptor, contract: ContractDefinition) -> None:
    """Raise ``FormLayoutViolationError`` for the first violated layout invariant."""

    _check_field_ordering(descriptor, contract)
    _check_sections_have_fields(descriptor)
    _check_widget_appropriateness(descriptor, contract)
    _check_canonical_padding(descriptor)
    _check_single_scroll_container(descriptor)


def _check_field_ordering(descriptor: FormDescriptor, contract: ContractDefinition) -> None:
    # FORM-LAY-001: shared fields keep the relative order of formSchemas.defaultSections.
    schema = contract.form_schema(descriptor.variant)
    if schema is None or not schema.default_sections:
        return
    actual_names = [item.name for item in descriptor.fields]
    expected = [name for name in schema.default_field_order if name in actual_names]
    actual = [name for name in actual_names if name in expected]
    if expected != actual:
        raise FormLayoutViolationError(
            "FORM-LAY-001",
            descriptor.key,
            f"Field order mismatch. Expected: {', '.join(expected)}, Got: {', '.join(actual)}",
        )


def _check_sections_have_fields(descriptor: FormDescriptor) -> None:
    for section in descriptor.sections:
        if not section.fields:
            raise FormLayoutViolationError(
                "FORM-LAY-002", descriptor.key, f'Section "{section.id}" has no fields'
            )


def _check_widget_appropriateness(descriptor: FormDescriptor, contract: ContractDefinition) -> None:
    for item in descriptor.fields:
        capability = contract.projection_capabilities.get(item.type)
        if capability is None or not capability.widgets:
            continue
        if item.widget not in capability.widgets:
            raise FormLayoutViolationError(
                "FORM-LAY-003",
                descriptor.key,
                f'Field "{item.name}" uses widget "{item.widget}" which is not allowed for type '
                f'"{item.type}". Allowed widgets: {", ".join(capability.widgets)}',
            )


def _check_canonical_padding(descriptor: FormDescriptor) -> None:
    if (descriptor.padding_x, descriptor.padding_y) != (CANONICAL_PADDING_X, CANONICAL_PADDING_Y):
        raise FormLayoutViolationError(
            "FORM-LAY-004",
            descriptor.key,
            f"Padding must be {CANONICAL_PADDING_X}x{CANONICAL_PADDING_Y}, "
            f"got {descriptor.padding_x:g}x{descriptor.padding_y:g}",
        )


def _check_single_scroll_container(descriptor: FormDescriptor) -> None:
    if not descriptor.sections:
        raise FormLayoutViolationError("FORM-LAY-005", descriptor.key, "Form has no sections")
    if len(descriptor.scroll_containers) != 1:
        raise FormLayoutViolationError(
            "FORM-LAY-005",
            descriptor.key,
            f"Form must declare exactly one scroll container, got {len(descriptor.scroll_containers)}",
        )


__all__ = ["FormLayoutViolationError", "check_form_layout"]
