"""Generation banners stamped at the top of every written artifact."""

from __future__ import annotations

from pathlib import PurePath
from typing import Final

BANNER_TEMPLATE: Final[str] = "Generated from {source} - DO NOT EDIT MANUALLY"

_COMMENT_PREFIX_BY_SUFFIX: Final[dict[str, str]] = {
    ".py": "# ",
    ".sql": "-- ",
}


def comment_prefix(path: PurePath) -> str:
    return _COMMENT_PREFIX_BY_SUFFIX.get(path.suffix, "# ")


def render_banner(source: str, path: PurePath) -> str:
    # No timestamp: identical inputs must produce byte-identical files.
    return comment_prefix(path) + BANNER_TEMPLATE.format(source=source)


__all__ = ["BANNER_TEMPLATE", "comment_prefix", "render_banner"]
