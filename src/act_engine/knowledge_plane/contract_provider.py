"""Contract metadata provider backed by ``<domain>.contract.yaml`` files."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path
from typing import Final, TypeAlias

import structlog
import yaml

from act_engine.domain.contracts import HTTP_METHODS, ContractDefinition

PathLike: TypeAlias = str | os.PathLike[str]

CONTRACT_FILE_SUFFIX: Final[str] = ".contract.yaml"

logger = structlog.get_logger(__name__)


class YamlContractProvider:
    """Load every contract document under one metadata directory in file-name order."""

    __slots__ = ("_metadata_dir",)

    def __init__(self, metadata_dir: PathLike) -> None:
        self._metadata_dir = Path(metadata_dir).expanduser()

    @property
    def metadata_dir(self) -> Path:
        return self._metadata_dir

    def contract_files(self) -> tuple[Path, ...]:
        if not self._metadata_dir.is_dir():
            return ()
        return tuple(
            sorted(
                (path for path in self._metadata_dir.glob(f"*{CONTRACT_FILE_SUFFIX}") if path.is_file()),
                key=lambda path: path.name,
            )
        )

    def load_contracts(self) -> tuple[ContractDefinition, ...]:
        if not self._metadata_dir.exists():
            raise FileNotFoundError(f"contract metadata directory does not exist: {self._metadata_dir}")
        if not self._metadata_dir.is_dir():
            raise NotADirectoryError(f"contract metadata path is not a directory: {self._metadata_dir}")

        contracts: list[ContractDefinition] = []
        seen: dict[str, Path] = {}
        for path in self.contract_files():
            with path.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
            try:
                contract = ContractDefinition.from_document(payload)
            except ValueError as exc:
                raise ValueError(f"{path.name}: {exc}") from exc
            first_seen = seen.get(contract.name)
            if first_seen is not None:
                raise ValueError(
                    f"duplicate contract name {contract.name!r} across files: "
                    f"{first_seen.name} and {path.name}"
                )
            seen[contract.name] = path
            contracts.append(contract)

        logger.debug(
            "contracts_loaded",
            metadata_dir=str(self._metadata_dir),
            count=len(contracts),
        )
        return tuple(contracts)


def validate_contract_definitions(contracts: Sequence[ContractDefinition]) -> None:
    """Default metadata validator; raises ``ValueError`` listing every problem found."""

    problems: list[str] = []
    names: set[str] = set()
    domains: set[str] = set()
    for contract in contracts:
        label = contract.name or "<unnamed>"
        if not contract.name.strip():
            problems.append("contract name must be non-empty")
        elif contract.name in names:
            problems.append(f'duplicate contract name "{contract.name}"')
        names.add(contract.name)
        if contract.domain in domains:
            problems.append(f'duplicate contract domain "{contract.domain}"')
        domains.add(contract.domain)

        field_names = contract.base_schema.field_names
        seen_fields: set[str] = set()
        for name in field_names:
            if name in seen_fields:
                problems.append(f'{label}: duplicate field "{name}" in baseSchema')
            seen_fields.add(name)

        variants: set[str] = set()
        for schema in contract.form_schemas:
            if schema.id in variants:
                problems.append(f'{label}: duplicate form schema "{schema.id}"')
            variants.add(schema.id)
            for name in schema.default_field_order:
                if name not in seen_fields:
                    problems.append(
                        f'{label}: form schema "{schema.id}" references unknown field "{name}"'
                    )

        for endpoint in contract.endpoints:
            if endpoint.method not in HTTP_METHODS:
                problems.append(
                    f'{label}: endpoint "{endpoint.name}" has unsupported method "{endpoint.method}"'
                )
            if not endpoint.path.startswith("/"):
                problems.append(f'{label}: endpoint "{endpoint.name}" path must start with "/"')

        if contract.db_mapping is not None:
            columns: set[str] = set()
            for column in contract.db_mapping.columns:
                if column.name in columns:
                    problems.append(
                        f'{label}: duplicate column "{column.name}" in dbMapping "{contract.db_mapping.table}"'
                    )
                columns.add(column.name)

    if problems:
        raise ValueError("; ".join(problems))


__all__ = ["CONTRACT_FILE_SUFFIX", "YamlContractProvider", "validate_contract_definitions"]
