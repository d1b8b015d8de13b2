"""Devtools descriptor schema and canonicalizer (``devtools:`` documents)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.errors import CanonicalizationError, UnknownReferenceError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.domain.parsing import (
    child_path,
    choice,
    coerce_str,
    mapping_tuple,
    optional_bool,
    optional_int,
    optional_mapping,
    optional_str,
    require_root,
    require_str,
)


class PanelFormat(StrEnum):
    TREE = "tree"
    TABLE = "table"
    JSON = "json"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class GroupingSpec:
    by: str | None = None
    order: SortOrder = SortOrder.ASC


@dataclass(frozen=True, slots=True)
class PanelSpec:
    id: str
    title: str
    format: PanelFormat = PanelFormat.TREE
    refresh_interval: int = 5000
    grouping: GroupingSpec = field(default_factory=GroupingSpec)


@dataclass(frozen=True, slots=True)
class CommandSpec:
    id: str
    title: str
    enabled: bool = True
    hotkey: str | None = None


@dataclass(frozen=True, slots=True)
class DevtoolsSpec:
    id: str
    sidebar_width: int = 320
    panels: tuple[PanelSpec, ...] = ()
    commands: tuple[CommandSpec, ...] = ()
    hotkeys: tuple[tuple[str, str], ...] = ()
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)

    @classmethod
    def from_document(cls, payload: object) -> DevtoolsSpec:
        return cls.from_mapping(require_root(payload, "devtools"), "devtools")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "devtools") -> DevtoolsSpec:
        panels: list[PanelSpec] = []
        for item_path, item in mapping_tuple(payload, "panels", path):
            grouping_raw = optional_mapping(item, "grouping", item_path)
            grouping_path = child_path(item_path, "grouping")
            panels.append(
                PanelSpec(
                    id=require_str(item, "id", item_path),
                    title=require_str(item, "title", item_path),
                    format=PanelFormat(
                        choice(
                            item,
                            "format",
                            item_path,
                            tuple(value.value for value in PanelFormat),
                            PanelFormat.TREE.value,
                        )
                    ),
                    refresh_interval=optional_int(
                        item, "refreshInterval", item_path, 5000, minimum=0
                    )
                    or 0,
                    grouping=GroupingSpec(
                        by=optional_str(grouping_raw, "by", grouping_path),
                        order=SortOrder(
                            choice(
                                grouping_raw,
                                "order",
                                grouping_path,
                                tuple(value.value for value in SortOrder),
                                SortOrder.ASC.value,
                            )
                        ),
                    ),
                )
            )

        commands = tuple(
            CommandSpec(
                id=require_str(item, "id", item_path),
                title=require_str(item, "title", item_path),
                enabled=optional_bool(item, "enabled", item_path, True),
                hotkey=optional_str(item, "hotkey", item_path),
            )
            for item_path, item in mapping_tuple(payload, "commands", path)
        )

        hotkeys_raw = optional_mapping(payload, "hotkeys", path)
        hotkeys_path = child_path(path, "hotkeys")
        hotkeys = tuple(
            (key, coerce_str(hotkeys_raw[key], child_path(hotkeys_path, key)))
            for key in sorted(hotkeys_raw)
        )

        return cls(
            id=require_str(payload, "id", path),
            sidebar_width=optional_int(payload, "sidebarWidth", path, 320, minimum=1) or 320,
            panels=tuple(panels),
            commands=commands,
            hotkeys=hotkeys,
            invariants=InvariantsSpec.optional(payload, "invariants", path),
        )


@dataclass(frozen=True, slots=True)
class DevtoolsDescriptor:
    id: str
    sidebar_width: int
    panels: tuple[PanelSpec, ...]
    commands: tuple[CommandSpec, ...]
    hotkeys: tuple[tuple[str, str], ...]
    invariants: InvariantsBlock

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "sidebar_width": self.sidebar_width,
            "panels": [
                {
                    "id": panel.id,
                    "title": panel.title,
                    "format": panel.format.value,
                    "refresh_interval": panel.refresh_interval,
                    "grouping": {"by": panel.grouping.by, "order": panel.grouping.order.value},
                }
                for panel in self.panels
            ],
            "commands": [
                {
                    "id": command.id,
                    "title": command.title,
                    "enabled": command.enabled,
                    "hotkey": command.hotkey,
                }
                for command in self.commands
            ],
            "hotkeys": dict(self.hotkeys),
            "invariants": self.invariants.to_dict(),
        }


def canonicalize_devtools(
    spec: DevtoolsSpec, registry: InvariantRegistry | None = None
) -> DevtoolsDescriptor:
    panel_ids: set[str] = set()
    for panel in spec.panels:
        if panel.id in panel_ids:
            raise CanonicalizationError(f'Duplicate panel id "{panel.id}"')
        panel_ids.add(panel.id)

    command_ids: set[str] = set()
    for command in spec.commands:
        if command.id in command_ids:
            raise CanonicalizationError(f'Duplicate command id "{command.id}"')
        command_ids.add(command.id)

    for hotkey, command_id in spec.hotkeys:
        if command_id not in command_ids:
            raise UnknownReferenceError(
                f'Hotkey "{hotkey}" references unknown command "{command_id}"',
                kind="command",
                reference=command_id,
            )

    return DevtoolsDescriptor(
        id=spec.id,
        sidebar_width=spec.sidebar_width,
        panels=spec.panels,
        commands=spec.commands,
        hotkeys=spec.hotkeys,
        invariants=canonicalize_invariants(spec.invariants, registry),
    )


__all__ = [
    "CommandSpec",
    "DevtoolsDescriptor",
    "DevtoolsSpec",
    "GroupingSpec",
    "PanelFormat",
    "PanelSpec",
    "SortOrder",
    "canonicalize_devtools",
]
