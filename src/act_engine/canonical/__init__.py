"""
act-engine canonicalizer set.

File: src/act_engine/canonical/__init__.py
Last updated: 2026-10-19

Purpose
- Pure per-domain functions turning schema-validated FORM inputs into total canonical descriptors.

Functional requirements
- ``canonicalize_*(spec, registry)`` yields identical ``to_dict()`` output for identical inputs.
- Unresolvable references raise ``UnknownReferenceError``.
"""

from act_engine.canonical.architecture import (
    ArchitectureRule,
    ArchitectureRulesDescriptor,
    ArchitectureRulesSpec,
    canonicalize_architecture_rules,
    load_architecture_rules,
)
from act_engine.canonical.commands import (
    CommandsDescriptor,
    CommandsSpec,
    canonicalize_commands,
    load_commands,
)
from act_engine.canonical.devtools import DevtoolsDescriptor, DevtoolsSpec, canonicalize_devtools
from act_engine.canonical.form_layout import FormLayoutViolationError, check_form_layout
from act_engine.canonical.forms import (
    FormDescriptor,
    FormSpec,
    canonicalize_form,
    load_form_spec,
    validate_form,
)
from act_engine.canonical.functional import FunctionalFormDescriptor, canonicalize_functional_form
from act_engine.canonical.intents import (
    IntentGraphDescriptor,
    IntentGraphSpec,
    MutationFactory,
    MutationMetadata,
    canonicalize_intent_graph,
    load_intent_graph,
)
from act_engine.canonical.invariants import (
    EnforceAt,
    EnforcementLayer,
    InvariantsBlock,
    InvariantsSpec,
    canonicalize_invariants,
)
from act_engine.canonical.purity_guards import (
    GUARD_SOURCES,
    PurityGuardDescriptor,
    PurityGuardSpec,
    canonicalize_purity_guard,
    load_purity_guard,
)
from act_engine.canonical.telemetry import TelemetryDescriptor, TelemetrySpec, canonicalize_telemetry
from act_engine.canonical.ux import UxDescriptor, UxSpec, canonicalize_ux

__all__ = [
    "GUARD_SOURCES",
    "ArchitectureRule",
    "ArchitectureRulesDescriptor",
    "ArchitectureRulesSpec",
    "CommandsDescriptor",
    "CommandsSpec",
    "DevtoolsDescriptor",
    "DevtoolsSpec",
    "EnforceAt",
    "EnforcementLayer",
    "FormDescriptor",
    "FormLayoutViolationError",
    "FormSpec",
    "FunctionalFormDescriptor",
    "IntentGraphDescriptor",
    "IntentGraphSpec",
    "InvariantsBlock",
    "InvariantsSpec",
    "MutationFactory",
    "MutationMetadata",
    "PurityGuardDescriptor",
    "PurityGuardSpec",
    "TelemetryDescriptor",
    "TelemetrySpec",
    "UxDescriptor",
    "UxSpec",
    "canonicalize_architecture_rules",
    "canonicalize_commands",
    "canonicalize_devtools",
    "canonicalize_form",
    "canonicalize_functional_form",
    "canonicalize_intent_graph",
    "canonicalize_invariants",
    "canonicalize_purity_guard",
    "canonicalize_telemetry",
    "canonicalize_ux",
    "check_form_layout",
    "load_architecture_rules",
    "load_commands",
    "load_form_spec",
    "load_intent_graph",
    "load_purity_guard",
    "validate_form",
]
