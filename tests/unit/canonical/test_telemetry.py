"""Unit tests for the telemetry descriptor."""

from __future__ import annotations

import pytest

from act_engine.canonical.telemetry import MetricType, Severity, TelemetrySpec, canonicalize_telemetry
from act_engine.domain.errors import CanonicalizationError, SchemaValidationError


def _document(**overrides: object) -> dict[str, object]:
    body: dict[str, object] = {
        "id": "app.telemetry",
        "channels": [
            {
                "id": "ui",
                "events": [{"name": "form_opened"}, {"name": "form_failed", "severity": "error"}],
            },
            {"id": "debug", "enabled": False},
        ],
        "metrics": [{"id": "forms_submitted", "type": "counter", "unit": "count"}],
    }
    body.update(overrides)
    return {"telemetry": body}


def test_defaults_are_applied() -> None:
    spec = TelemetrySpec.from_document(_document())

    assert spec.channels[0].enabled is True
    assert spec.channels[0].events[0].severity is Severity.INFO
    assert spec.channels[0].events[1].severity is Severity.ERROR
    assert spec.metrics[0].type is MetricType.COUNTER
    assert (spec.buffer.max_buffer_size, spec.buffer.save_interval) == (1000, 5000)
    assert spec.deduplication_enabled is True


def test_descriptor_to_dict() -> None:
    descriptor = canonicalize_telemetry(
        TelemetrySpec.from_document(_document(buffer={"maxBufferSize": 50, "saveInterval": 0}))
    )

    payload = descriptor.to_dict()

    assert payload["channels"][1] == {"id": "debug", "enabled": False, "events": []}
    assert payload["metrics"] == [{"id": "forms_submitted", "type": "counter", "unit": "count"}]
    assert payload["buffer"] == {"max_buffer_size": 50, "save_interval": 0}


def test_duplicate_channel_is_rejected() -> None:
    spec = TelemetrySpec.from_document(_document(channels=[{"id": "ui"}, {"id": "ui"}]))

    with pytest.raises(CanonicalizationError, match='Duplicate channel id "ui"'):
        canonicalize_telemetry(spec)


@pytest.mark.parametrize(
    ("overrides", "path"),
    [
        ({"metrics": [{"id": "m", "type": "summary"}]}, "telemetry.metrics[0].type"),
        (
            {"channels": [{"id": "ui", "events": [{"name": "e", "severity": "fatal"}]}]},
            "telemetry.channels[0].events[0].severity",
        ),
    ],
)
def test_enum_values_are_validated(overrides: dict[str, object], path: str) -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        TelemetrySpec.from_document(_document(**overrides))

    assert excinfo.value.path == path
