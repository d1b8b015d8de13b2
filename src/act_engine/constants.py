"""Stable constants shared across act-engine planes."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted inputs.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default FORM input locations (relative to workspace root unless overridden by config).
METADATA_DIR: Final[PurePosixPath] = PurePosixPath("form/contracts")
YAML_DIR: Final[PurePosixPath] = PurePosixPath("form/forms")
INSTRUMENTATION_DIR: Final[PurePosixPath] = PurePosixPath("form/instrumentation")
INVARIANTS_DIR: Final[PurePosixPath] = PurePosixPath("form/invariants")
ACL_PATH: Final[PurePosixPath] = PurePosixPath("form/acl/acl.yaml")
ARCHITECTURE_RULES_PATH: Final[PurePosixPath] = PurePosixPath(
    "form/architecture/architecture-rules.yaml"
)
INTENT_GRAPH_PATH: Final[PurePosixPath] = PurePosixPath("form/intents/intent-graph.yaml")
COMMANDS_PATH: Final[PurePosixPath] = PurePosixPath("form/commands/commands.yaml")
PURITY_GUARDS_DIR: Final[PurePosixPath] = PurePosixPath("form/purity-guards")

# Default STATE output locations.
SHARED_CONTRACTS_DIR: Final[PurePosixPath] = PurePosixPath("generated/contracts")
MIGRATIONS_DIR: Final[PurePosixPath] = PurePosixPath("generated/migrations")
SERVICES_DIR: Final[PurePosixPath] = PurePosixPath("generated/services")
ROUTES_DIR: Final[PurePosixPath] = PurePosixPath("generated/routes")
TESTS_DIR: Final[PurePosixPath] = PurePosixPath("generated/tests")
FORMS_OUTPUT_DIR: Final[PurePosixPath] = PurePosixPath("generated/forms")
INVARIANT_MAPPING_OUTPUT_DIR: Final[PurePosixPath] = PurePosixPath("generated/invariants")
INVARIANT_MAPPING_FILE: Final[str] = "invariant_mapping.py"

# Invariants every registry must define.
REQUIRED_INVARIANTS: Final[tuple[str, ...]] = (
    "SYSTEM_STATE.F50",
    "DOMAIN_LOGIC.F2",
    "UI_SCROLL.F82",
    "UI_LAYOUT.F57",
    "DOMAIN_LOGIC.F76",
)

__all__ = [
    "ACL_PATH",
    "ARCHITECTURE_RULES_PATH",
    "COMMANDS_PATH",
    "CONFIG_SCHEMA_VERSION",
    "FORMS_OUTPUT_DIR",
    "INSTRUMENTATION_DIR",
    "INTENT_GRAPH_PATH",
    "INVARIANTS_DIR",
    "INVARIANT_MAPPING_FILE",
    "INVARIANT_MAPPING_OUTPUT_DIR",
    "METADATA_DIR",
    "MIGRATIONS_DIR",
    "PURITY_GUARDS_DIR",
    "REQUIRED_INVARIANTS",
    "ROUTES_DIR",
    "SERVICES_DIR",
    "SHARED_CONTRACTS_DIR",
    "TESTS_DIR",
    "YAML_DIR",
]
