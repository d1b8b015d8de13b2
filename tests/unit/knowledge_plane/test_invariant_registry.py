"""Unit tests for the YAML-backed invariant registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from act_engine.domain.errors import SchemaValidationError
from act_engine.knowledge_plane.invariant_registry import (
    YamlInvariantRegistry,
    is_canonical_invariant_id,
)
from tests.unit.workspace import invariants_document, write_text


def test_load_merges_files_in_name_order(tmp_path: Path) -> None:
    write_text(tmp_path / "b.yaml", invariants_document(["UI_SCROLL.F82"]))
    write_text(tmp_path / "a.yaml", invariants_document(["SYSTEM_STATE.F50", "DOMAIN_LOGIC.F2"]))

    registry = YamlInvariantRegistry.load(tmp_path)

    assert registry.get_all_invariant_ids() == ("DOMAIN_LOGIC.F2", "SYSTEM_STATE.F50", "UI_SCROLL.F82")
    assert [path.name for path in registry.source_files] == ["a.yaml", "b.yaml"]
    assert len(registry) == 3


def test_category_and_code_default_from_id(tmp_path: Path) -> None:
    write_text(
        tmp_path / "core.yaml",
        "invariants:\n  - id: UI_SCROLL.F82\n    name: Single scroll\n",
    )
    entry = YamlInvariantRegistry.load(tmp_path).get("UI_SCROLL.F82")

    assert entry is not None
    assert entry.metadata.category == "UI_SCROLL"
    assert entry.metadata.code == "F82"
    assert entry.metadata.enforce is None


def test_by_category_and_categories(tmp_path: Path) -> None:
    write_text(
        tmp_path / "core.yaml",
        invariants_document(["DOMAIN_LOGIC.F76", "DOMAIN_LOGIC.F2", "UI_SCROLL.F82"]),
    )
    registry = YamlInvariantRegistry.load(tmp_path)

    assert registry.categories() == ("DOMAIN_LOGIC", "UI_SCROLL")
    assert [entry.id for entry in registry.by_category("DOMAIN_LOGIC")] == [
        "DOMAIN_LOGIC.F2",
        "DOMAIN_LOGIC.F76",
    ]


def test_duplicate_ids_across_files_are_rejected(tmp_path: Path) -> None:
    write_text(tmp_path / "a.yaml", invariants_document(["UI_SCROLL.F82"]))
    write_text(tmp_path / "b.yaml", invariants_document(["UI_SCROLL.F82"]))

    with pytest.raises(ValueError, match="duplicate invariant id 'UI_SCROLL.F82'"):
        YamlInvariantRegistry.load(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        YamlInvariantRegistry.load(tmp_path / "absent")


def test_blank_enforce_is_a_schema_error(tmp_path: Path) -> None:
    write_text(tmp_path / "core.yaml", "invariants:\n  - id: UI_SCROLL.F82\n    enforce: '  '\n")

    with pytest.raises(SchemaValidationError, match="enforce"):
        YamlInvariantRegistry.load(tmp_path)


@pytest.mark.parametrize(
    ("invariant_id", "expected"),
    [
        ("UI_SCROLL.F82", True),
        ("DOMAIN_LOGIC.I3", True),
        ("ui_scroll.F82", False),
        ("UI_SCROLL.X1", False),
        ("UI_SCROLL", False),
    ],
)
def test_canonical_id_format(invariant_id: str, expected: bool) -> None:
    assert is_canonical_invariant_id(invariant_id) is expected
