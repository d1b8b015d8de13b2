"""Data-first code generation: documents, the serializer, and the deterministic writer."""

from act_engine.codegen.banners import BANNER_TEMPLATE, render_banner
from act_engine.codegen.documents import (
    ContractTestDocument,
    MigrationDocument,
    ModuleDocument,
)
from act_engine.codegen.serializer import DocumentSerializer
from act_engine.codegen.writer import (
    DeterministicWriter,
    DriftReport,
    WriteResult,
    check_drift,
    compose_artifact,
)

__all__ = [
    "BANNER_TEMPLATE",
    "ContractTestDocument",
    "DeterministicWriter",
    "DocumentSerializer",
    "DriftReport",
    "MigrationDocument",
    "ModuleDocument",
    "WriteResult",
    "check_drift",
    "compose_artifact",
    "render_banner",
]
