"""Telemetry descriptor schema and canonicalizer (``telemetry:`` documents)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from act_engine.canonical.invariants import InvariantsBlock, InvariantsSpec, canonicalize_invariants
from act_engine.domain.errors import CanonicalizationError
from act_engine.domain.interfaces import InvariantRegistry
from act_engine.domain.parsing import (
    child_path,
    choice,
    mapping_tuple,
    optional_bool,
    optional_int,
    optional_mapping,
    optional_str,
    require_root,
    require_str,
)


class Severity(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class MetricType(StrEnum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass(frozen=True, slots=True)
class EventSpec:
    name: str
    severity: Severity = Severity.INFO


@dataclass(frozen=True, slots=True)
class ChannelSpec:
    id: str
    enabled: bool = True
    events: tuple[EventSpec, ...] = ()


@dataclass(frozen=True, slots=True)
class MetricSpec:
    id: str
    type: MetricType
    unit: str = ""


@dataclass(frozen=True, slots=True)
class BufferSpec:
    max_buffer_size: int = 1000
    save_interval: int = 5000


@dataclass(frozen=True, slots=True)
class TelemetrySpec:
    id: str
    description: str = ""
    channels: tuple[ChannelSpec, ...] = ()
    metrics: tuple[MetricSpec, ...] = ()
    buffer: BufferSpec = field(default_factory=BufferSpec)
    deduplication_enabled: bool = True
    invariants: InvariantsSpec = field(default_factory=InvariantsSpec)

    @classmethod
    def from_document(cls, payload: object) -> TelemetrySpec:
        return cls.from_mapping(require_root(payload, "telemetry"), "telemetry")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object], path: str = "telemetry") -> TelemetrySpec:
        channels = tuple(
            ChannelSpec(
                id=require_str(item, "id", item_path),
                enabled=optional_bool(item, "enabled", item_path, True),
                events=tuple(
                    EventSpec(
                        name=require_str(event, "name", event_path),
                        severity=Severity(
                            choice(
                                event,
                                "severity",
                                event_path,
                                tuple(level.value for level in Severity),
                                Severity.INFO.value,
                            )
                        ),
                    )
                    for event_path, event in mapping_tuple(item, "events", item_path)
                ),
            )
            for item_path, item in mapping_tuple(payload, "channels", path)
        )
        metrics = tuple(
            MetricSpec(
                id=require_str(item, "id", item_path),
                type=MetricType(
                    choice(item, "type", item_path, tuple(kind.value for kind in MetricType))
                ),
                unit=optional_str(item, "unit", item_path, "") or "",
            )
            for item_path, item in mapping_tuple(payload, "metrics", path)
        )
        buffer_raw = optional_mapping(payload, "buffer", path)
        buffer_path = child_path(path, "buffer")
        buffer = BufferSpec(
            max_buffer_size=optional_int(buffer_raw, "maxBufferSize", buffer_path, 1000, minimum=1)
            or 1000,
            save_interval=optional_int(buffer_raw, "saveInterval", buffer_path, 5000, minimum=0)
            or 0,
        )
        return cls(
            id=require_str(payload, "id", path),
            description=optional_str(payload, "description", path, "") or "",
            channels=channels,
            metrics=metrics,
            buffer=buffer,
            deduplication_enabled=optional_bool(payload, "deduplicationEnabled", path, True),
            invariants=InvariantsSpec.optional(payload, "invariants", path),
        )


@dataclass(frozen=True, slots=True)
class TelemetryDescriptor:
    id: str
    description: str
    channels: tuple[ChannelSpec, ...]
    metrics: tuple[MetricSpec, ...]
    buffer: BufferSpec
    deduplication_enabled: bool
    invariants: InvariantsBlock

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "description": self.description,
            "channels": [
                {
                    "id": channel.id,
                    "enabled": channel.enabled,
                    "events": [
                        {"name": event.name, "severity": event.severity.value}
                        for event in channel.events
                    ],
                }
                for channel in self.channels
            ],
            "metrics": [
                {"id": metric.id, "type": metric.type.value, "unit": metric.unit}
                for metric in self.metrics
            ],
            "buffer": {
                "max_buffer_size": self.buffer.max_buffer_size,
                "save_interval": self.buffer.save_interval,
            },
            "deduplication_enabled": self.deduplication_enabled,
            "invariants": self.invariants.to_dict(),
        }


def canonicalize_telemetry(
    spec: TelemetrySpec, registry: InvariantRegistry | None = None
) -> TelemetryDescriptor:
    _require_unique("channel", [channel.id for channel in spec.channels])
    _require_unique("metric", [metric.id for metric in spec.metrics])
    for channel in spec.channels:
        _require_unique(f'event in channel "{channel.id}"', [event.name for event in channel.events])
    return TelemetryDescriptor(
        id=spec.id,
        description=spec.description,
        channels=spec.channels,
        metrics=spec.metrics,
        buffer=spec.buffer,
        deduplication_enabled=spec.deduplication_enabled,
        invariants=canonicalize_invariants(spec.invariants, registry),
    )


def _require_unique(kind: str, values: list[str]) -> None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            raise CanonicalizationError(f'Duplicate {kind} id "{value}"')
        seen.add(value)


__all__ = [
    "BufferSpec",
    "ChannelSpec",
    "EventSpec",
    "MetricSpec",
    "MetricType",
    "Severity",
    "TelemetryDescriptor",
    "TelemetrySpec",
    "canonicalize_telemetry",
]
