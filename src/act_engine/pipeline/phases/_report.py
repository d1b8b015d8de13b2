"""Mutable collector phases use while they run; frozen into a ``PhaseOutcome`` at the end."""

from __future__ import annotations

from collections.abc import Iterable

from act_engine.pipeline.results import PhaseOutcome


class PhaseReport:
    __slots__ = ("_artifacts", "_errors", "_warnings")

    def __init__(self) -> None:
        self._errors: list[str] = []
        self._warnings: list[str] = []
        self._artifacts: list[str] = []

    def error(self, message: str) -> None:
        self._errors.append(message)

    def warning(self, message: str) -> None:
        self._warnings.append(message)

    def artifact(self, path: str) -> None:
        self._artifacts.append(path)

    def extend_errors(self, messages: Iterable[str]) -> None:
        self._errors.extend(messages)

    def extend_warnings(self, messages: Iterable[str]) -> None:
        self._warnings.extend(messages)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def outcome(self) -> PhaseOutcome:
        return PhaseOutcome(
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            artifacts=tuple(self._artifacts),
        )


__all__ = ["PhaseReport"]
