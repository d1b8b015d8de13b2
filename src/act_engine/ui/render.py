"""Output rendering for the act CLI.

File: src/act_engine/ui/render.py
Last updated: 2026-10-19

Purpose
- Render phase reports and key/value output through a ``rich`` console.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Output is deterministic: no timestamps, no terminal-width-dependent wrapping of messages.
- Errors and warnings keep their exact text so they can be grepped in CI logs.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import IO, Final

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from act_engine.pipeline.results import PhaseResult, PipelineResult, format_phase_number

_S_HEADING = Style(bold=True)
_S_OK = Style(color="green", bold=True)
_S_FAIL = Style(color="red", bold=True)
_S_WARNING = Style(color="yellow")
_S_DIM = Style(dim=True)

_WIDE_CONSOLE: Final[int] = 200


def _color_allowed(no_color_flag: bool, stream: IO[str]) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin wrapper over a ``rich`` console."""

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: IO[str] | None = None,
    ) -> None:
        target = stream if stream is not None else sys.stdout
        self.verbose = verbose
        color = _color_allowed(no_color, target)
        self._console = Console(
            file=target,
            no_color=not color,
            color_system="auto" if color else None,
            highlight=False,
            soft_wrap=True,
            width=None if color else _WIDE_CONSOLE,
        )

    @property
    def console(self) -> Console:
        return self._console

    def heading(self, text: str) -> None:
        self._console.print(Text(text, style=_S_HEADING))

    def kv(self, key: str, value: object) -> None:
        self._console.print(Text(f"{key}: {value}"))

    def text(self, line: str) -> None:
        self._console.print(Text(line))

    def section(self, title: str) -> None:
        self._console.print()
        self._console.print(Text(title, style=_S_HEADING))

    def warning(self, text: str) -> None:
        self._console.print(Text(f"  Warning: {text}", style=_S_WARNING))

    def error(self, text: str) -> None:
        self._console.print(Text(f"  Error: {text}", style=_S_FAIL))

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self._console.print(Text(f"  {prefix}{entry}"))

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        if not rows:
            return
        table = Table(title=title, show_edge=False, header_style=_S_HEADING)
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self._console.print(table)

    def ok(self, label: str) -> None:
        line = Text("  OK    ", style=_S_OK)
        line.append(label)
        self._console.print(line)

    def fail(self, label: str) -> None:
        line = Text("  FAIL  ", style=_S_FAIL)
        line.append(label)
        self._console.print(line)

    def phase(self, result: PhaseResult) -> None:
        """One status line per phase, then its errors and (verbose or failing) warnings."""

        label = f"{result.label} ({result.duration_ms} ms)"
        if result.success:
            self.ok(label)
        else:
            self.fail(label)
        for message in result.errors:
            self.error(message)
        for message in result.warnings:
            self.warning(message)
        if self.verbose:
            for artifact in result.artifacts:
                self._console.print(Text(f"  wrote {artifact}", style=_S_DIM))

    def pipeline(self, result: PipelineResult) -> None:
        self.heading("act pipeline")
        for phase in result.phases:
            self.phase(phase)
        self.section("Summary:")
        self.kv("Phases", len(result.phases))
        self.kv("Errors", len(result.errors))
        self.kv("Warnings", len(result.warnings))
        self.kv("Duration", f"{result.duration_ms} ms")
        if result.success:
            self.ok("pipeline succeeded")
        else:
            failed = [format_phase_number(phase.phase) for phase in result.phases if not phase.success]
            self.fail(f"pipeline failed (phases {', '.join(failed)})")


def create_renderer(
    *, no_color: bool = False, verbose: bool = False, stream: IO[str] | None = None
) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
