"""
act-engine - document serializer

File: src/act_engine/codegen/serializer.py
Last updated: 2026-10-19

Purpose
- Single renderer turning structured generation documents into artifact text.

What should be included in this file
- Template lookup per document type.
- Strict placeholder handling so a missing attribute fails loudly.

Functional requirements
- Must render deterministically for the same document.
- Output uses ``\\n`` line endings and ends with exactly one newline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from act_engine.codegen.documents import (
    ContractTestDocument,
    Document,
    MigrationDocument,
    ModuleDocument,
    python_literal,
)

_TEMPLATE_BY_DOCUMENT: Final[dict[type, str]] = {
    ModuleDocument: "module.py.j2",
    MigrationDocument: "migration.sql.j2",
    ContractTestDocument: "contract_test.py.j2",
}


class DocumentSerializer:
    """Deterministic jinja2 renderer for generation documents."""

    def __init__(self, *, template_root: Path | str | None = None) -> None:
        root = Path(template_root) if template_root is not None else _default_template_root()
        resolved_root = root.resolve()
        if not resolved_root.is_dir():
            raise NotADirectoryError(f"template root is not a directory: {resolved_root}")

        self._template_root = resolved_root
        self._environment = Environment(
            loader=FileSystemLoader(str(resolved_root)),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            newline_sequence="\n",
            keep_trailing_newline=True,
        )
        self._environment.filters["pyliteral"] = python_literal

    @property
    def template_root(self) -> Path:
        return self._template_root

    def render(self, document: Document) -> str:
        template_name = _TEMPLATE_BY_DOCUMENT.get(type(document))
        if template_name is None:
            raise TypeError(f"no template registered for {type(document).__name__}")
        rendered = self._environment.get_template(template_name).render(document=document)
        lines = [line.rstrip() for line in rendered.replace("\r\n", "\n").split("\n")]
        return "\n".join(lines).rstrip("\n") + "\n"


def _default_template_root() -> Path:
    return Path(__file__).resolve().parent / "templates"


__all__ = ["DocumentSerializer"]
