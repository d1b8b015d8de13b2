"""
act-engine - functional form canonicalizer

File: src/act_engine/canonical/functional.py
Last updated: 2026-10-19

Purpose
- Attach validated, default-filled functional bindings to a canonical form descriptor.

Functional requirements
- A mutation must be ``type: intent`` and carry an ``intentId``.
- Capability actions (required and additional) must pass ``ActionRegistry.validate_action_id``.
- Binding invariants resolve in the invariant registry.
"""

from __future__ import annotations

from dataclasses import dataclass

from act_engine.canonical.forms import (
    FormDescriptor,
    FormSpec,
    FunctionalBindingSpec,
    canonicalize_form,
)
from act_engine.canonical.invariants import InvariantsBlock, canonicalize_invariants
from act_engine.domain.contracts import ContractDefinition
from act_engine.domain.errors import CanonicalizationError, UnknownReferenceError
from act_engine.domain.interfaces import ActionRegistry, InvariantRegistry

INTENT_MUTATION_TYPE = "intent"


@dataclass(frozen=True, slots=True)
class FunctionalBinding:
    mutation: dict[str, object] | None
    capability: dict[str, object] | None
    data_source: dict[str, object] | None
    listen: tuple[dict[str, object], ...]
    invariants: InvariantsBlock

    def to_dict(self) -> dict[str, object]:
        return {
            "mutation": self.mutation,
            "capability": self.capability,
            "data_source": self.data_source,
            "listen": [dict(item) for item in self.listen],
            "invariants": self.invariants.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class FunctionalFormDescriptor:
    form: FormDescriptor
    functional: FunctionalBinding | None
    section_bindings: tuple[tuple[str, FunctionalBinding], ...]

    @property
    def key(self) -> str:
        return self.form.key

    def to_dict(self) -> dict[str, object]:
        payload = self.form.to_dict()
        payload["functional"] = self.functional.to_dict() if self.functional is not None else None
        payload["section_bindings"] = {
            section_id: binding.to_dict() for section_id, binding in self.section_bindings
        }
        return payload


def canonicalize_binding(
    spec: FunctionalBindingSpec,
    *,
    registry: InvariantRegistry | None,
    action_registry: ActionRegistry | None,
) -> FunctionalBinding:
    mutation: dict[str, object] | None = None
    if spec.mutation is not None:
        if spec.mutation.type != INTENT_MUTATION_TYPE:
            raise CanonicalizationError(
                f'Functional binding: mutation type "{spec.mutation.type}" is not supported '
                '(only "intent" is allowed)'
            )
        if not spec.mutation.intent_id:
            raise CanonicalizationError("Functional binding: intentId is required")
        mutation = {
            "type": INTENT_MUTATION_TYPE,
            "intent_id": spec.mutation.intent_id,
            "payload_template": dict(spec.mutation.payload_template or {}),
        }

    capability: dict[str, object] | None = None
    if spec.capability is not None:
        for action_id in (spec.capability.required_action, *spec.capability.additional):
            if action_registry is not None and not action_registry.validate_action_id(action_id):
                raise UnknownReferenceError(
                    f'Functional binding: Invalid ActionID "{action_id}"',
                    kind="action",
                    reference=action_id,
                )
        capability = {
            "required_action": spec.capability.required_action,
            "additional": list(spec.capability.additional),
            "fallback": {
                "hide": spec.capability.fallback.hide,
                "disable": spec.capability.fallback.disable,
            },
        }

    data_source: dict[str, object] | None = None
    if spec.data_source is not None:
        data_source = {
            "type": spec.data_source.type.value,
            "source": spec.data_source.source,
            "path": spec.data_source.path,
        }

    invariants = (
        canonicalize_invariants(spec.invariants, registry)
        if spec.invariants is not None
        else InvariantsBlock()
    )
    return FunctionalBinding(
        mutation=mutation,
        capability=capability,
        data_source=data_source,
        listen=tuple({"type": item.type.value, "source": item.source} for item in spec.listen),
        invariants=invariants,
    )


def canonicalize_functional_form(
    spec: FormSpec,
    contract: ContractDefinition,
    *,
    registry: InvariantRegistry | None = None,
    action_registry: ActionRegistry | None = None,
) -> FunctionalFormDescriptor:
    form = canonicalize_form(spec, contract, registry)
    functional = (
        canonicalize_binding(spec.functional, registry=registry, action_registry=action_registry)
        if spec.functional is not None
        else None
    )
    section_bindings = tuple(
        (
            section.id,
            canonicalize_binding(
                section.functional, registry=registry, action_registry=action_registry
            ),
        )
        for section in spec.sections
        if section.functional is not None
    )
    return FunctionalFormDescriptor(
        form=form, functional=functional, section_bindings=section_bindings
    )


__all__ = [
    "FunctionalBinding",
    "FunctionalFormDescriptor",
    "canonicalize_binding",
    "canonicalize_functional_form",
]
