"""Run manifest models and builder."""

from act_engine.manifests.builder import build_manifest, contract_manifest, discover_forms
from act_engine.manifests.models import (
    AclManifest,
    ArtifactRef,
    ContractManifest,
    FormManifest,
    InvariantManifestSummary,
    Manifest,
)

__all__ = [
    "AclManifest",
    "ArtifactRef",
    "ContractManifest",
    "FormManifest",
    "InvariantManifestSummary",
    "Manifest",
    "build_manifest",
    "contract_manifest",
    "discover_forms",
]
