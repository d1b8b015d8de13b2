"""
act-engine - unit tests for content hashing

File: tests/unit/utils/test_hashing.py
Last updated: 2026-10-19

Purpose
- Verify that the drift hash ignores line endings and trailing whitespace, and
  nothing else.

What this test file should cover
- Normalization steps and their order.
- ``content_unchanged`` against files on disk, including missing files.
- Generation banner detection.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from hypothesis import given
from hypothesis import strategies as st

from act_engine.utils.hashing import (
    content_unchanged,
    has_generation_banner,
    hash_content,
    normalize_content,
    sha256_text,
)

_LINES = st.lists(
    st.text(alphabet=st.characters(blacklist_characters="\r\n", blacklist_categories=("Cs",))),
    max_size=8,
)


def test_normalize_content_converts_line_endings_and_strips_trailing_space() -> None:
    assert normalize_content("a\r\nb\rc\n\n\n") == "a\nb\nc"
    assert normalize_content("value = 1   \n\n") == "value = 1"
    assert normalize_content("  leading kept") == "  leading kept"


def test_hash_content_is_sha256_of_normalized_text() -> None:
    expected = hashlib.sha256(b"x = 1\ny = 2").hexdigest()
    assert hash_content("x = 1\r\ny = 2\n") == expected
    assert sha256_text("x = 1\ny = 2") == expected


@given(lines=_LINES, trailing=st.sampled_from(["", "\n", "\n\n", "  \n", "\t"]))
def test_hash_ignores_crlf_and_trailing_whitespace(lines: list[str], trailing: str) -> None:
    unix = "\n".join(lines)
    windows = "\r\n".join(lines)
    assert hash_content(unix) == hash_content(windows + trailing)


def test_hash_detects_interior_changes() -> None:
    assert hash_content("a\nb") != hash_content("a\n\nb")
    assert hash_content("x = 1") != hash_content("x = 2")


def test_content_unchanged_compares_normalized_file_content(tmp_path: Path) -> None:
    target = tmp_path / "artifact.py"
    assert content_unchanged(target, "x = 1\n") is False

    target.write_bytes(b"x = 1\r\n\r\n")
    assert content_unchanged(target, "x = 1") is True
    assert content_unchanged(target, "x = 2") is False


def test_generation_banner_detection() -> None:
    assert has_generation_banner("# Generated from Node contract metadata - DO NOT EDIT MANUALLY\n")
    assert has_generation_banner("-- DO NOT EDIT MANUALLY\n")
    assert not has_generation_banner("print('hand written')\n")
