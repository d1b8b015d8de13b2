"""Structured documents describing generated artifacts before they become text."""

from __future__ import annotations

import pprint
from dataclasses import dataclass


def python_literal(value: object) -> str:
    """Deterministic Python source for a literal built from dicts, lists, tuples, and scalars."""

    return pprint.pformat(value, indent=1, width=88, sort_dicts=False)


@dataclass(frozen=True, slots=True)
class Constant:
    name: str
    value: object
    annotation: str | None = None

    @property
    def source(self) -> str:
        annotation = f": {self.annotation}" if self.annotation else ""
        return f"{self.name}{annotation} = {python_literal(self.value)}"


@dataclass(frozen=True, slots=True)
class DataclassField:
    name: str
    annotation: str
    default: str | None = None

    @property
    def source(self) -> str:
        if self.default is None:
            return f"{self.name}: {self.annotation}"
        return f"{self.name}: {self.annotation} = {self.default}"


@dataclass(frozen=True, slots=True)
class ClassBlock:
    name: str
    docstring: str
    fields: tuple[DataclassField, ...] = ()


@dataclass(frozen=True, slots=True)
class FunctionBlock:
    name: str
    params: str
    returns: str
    docstring: str
    body: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"def {self.name}({self.params}) -> {self.returns}:"


@dataclass(frozen=True, slots=True)
class ModuleDocument:
    """A generated Python module: imports, constants, dataclasses, then functions."""

    source: str
    docstring: str
    imports: tuple[str, ...] = ()
    constants: tuple[Constant, ...] = ()
    classes: tuple[ClassBlock, ...] = ()
    functions: tuple[FunctionBlock, ...] = ()


@dataclass(frozen=True, slots=True)
class ColumnLine:
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    default: str | None = None

    @property
    def source(self) -> str:
        parts = [self.name, self.type.upper()]
        if self.primary_key:
            parts.append("PRIMARY KEY")
        elif not self.nullable:
            parts.append("NOT NULL")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


@dataclass(frozen=True, slots=True)
class MigrationDocument:
    source: str
    table: str
    columns: tuple[ColumnLine, ...]


@dataclass(frozen=True, slots=True)
class ContractTestDocument:
    source: str
    docstring: str
    module: str
    class_name: str
    field_names: tuple[str, ...]
    required_fields: tuple[str, ...]


Document = ModuleDocument | MigrationDocument | ContractTestDocument


__all__ = [
    "ClassBlock",
    "ColumnLine",
    "Constant",
    "ContractTestDocument",
    "DataclassField",
    "Document",
    "FunctionBlock",
    "MigrationDocument",
    "ModuleDocument",
    "python_literal",
]
