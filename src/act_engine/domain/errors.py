"""
act-engine - domain error taxonomy

File: src/act_engine/domain/errors.py
Last updated: 2026-10-19

Purpose
- Define the typed failures raised while turning FORM inputs into canonical STATE.

Functional requirements
- Schema errors (shape/type/enum/regex) are distinct from reference errors
  (well-formed input naming something that does not exist).
- Policy violations are hard failures raised at canonicalization time.
- Every error renders to a single human-readable message line.
"""

from __future__ import annotations

from collections.abc import Sequence


class SchemaValidationError(ValueError):
    """Raised when a declarative input fails structural validation."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.detail = message
        super().__init__(f"{path}: {message}" if path else message)


class CanonicalizationError(ValueError):
    """Raised when a schema-valid input cannot be canonicalized."""


class UnknownReferenceError(CanonicalizationError):
    """Raised when an input references a name absent from authoritative metadata."""

    def __init__(self, message: str, *, kind: str, reference: str) -> None:
        self.kind = kind
        self.reference = reference
        super().__init__(message)


class PolicyViolationError(CanonicalizationError):
    """Raised for structurally valid but forbidden configurations."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(f"{code}: {message}")


class FormValidationError(ValueError):
    """Aggregated validation failure of one form YAML against its contract."""

    def __init__(self, contract: str, variant: str, errors: Sequence[str]) -> None:
        self.contract = contract
        self.variant = variant
        self.errors = tuple(errors)
        super().__init__(f"Form validation failed for {contract}.{variant}: {', '.join(self.errors)}")


__all__ = [
    "CanonicalizationError",
    "FormValidationError",
    "PolicyViolationError",
    "SchemaValidationError",
    "UnknownReferenceError",
]
