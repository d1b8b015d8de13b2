"""
act-engine - configuration schema and validation.

File: src/act_engine/config/schema.py
Last updated: 2026-10-19

Purpose
- Define authoritative configuration defaults and strict validation rules.
- Materialize validated payloads into the typed ``EngineConfig`` the pipeline consumes.

What should be included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, enums, and numeric constraints.
- Deterministic deep-merge helpers.
- Redaction rules for sensitive fields.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Phase 0 (manifest generation) can never be skipped.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, TypedDict

from act_engine import constants
from act_engine.constants import CONFIG_SCHEMA_VERSION

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MANIFEST_PHASE: Final[float] = 0.0

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {"secret", "token", "password", "passwd", "apikey", "private", "credential", "credentials"}
)
_SENSITIVE_KEY_PHRASES: Final[tuple[str, ...]] = (
    "api_key",
    "access_token",
    "client_secret",
    "private_key",
    "password",
    "secret",
)

# Single path values under ``[paths]``; ``workspace_root`` is resolved against the
# config file, every other entry against the workspace root.
PATH_KEYS: Final[tuple[str, ...]] = (
    "metadata_dir",
    "yaml_dir",
    "instrumentation_dir",
    "invariants_dir",
    "acl_path",
    "architecture_rules_path",
    "intent_graph_path",
    "commands_path",
    "purity_guards_dir",
    "shared_contracts_dir",
    "migrations_dir",
    "services_dir",
    "routes_dir",
    "tests_dir",
    "forms_output_dir",
    "invariant_mapping_output_dir",
)
PATH_LIST_KEYS: Final[tuple[str, ...]] = ("source_dirs",)


class MetaConfig(TypedDict):
    schema_version: int


class PathsSection(TypedDict):
    workspace_root: str
    metadata_dir: str
    yaml_dir: str
    instrumentation_dir: str
    invariants_dir: str
    acl_path: str
    architecture_rules_path: str
    intent_graph_path: str
    commands_path: str
    purity_guards_dir: str
    source_dirs: list[str]
    shared_contracts_dir: str
    migrations_dir: str
    services_dir: str
    routes_dir: str
    tests_dir: str
    forms_output_dir: str
    invariant_mapping_output_dir: str


class PipelineSection(TypedDict):
    check_mode: bool
    dry_run: bool
    validate_code: bool
    backup_existing: bool
    skip_phases: list[float]


class LoggingSection(TypedDict):
    level: str
    json: bool
    redact_secrets: bool


class ActConfig(TypedDict):
    meta: MetaConfig
    paths: PathsSection
    pipeline: PipelineSection
    logging: LoggingSection


DEFAULT_CONFIG: Final[ActConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "paths": {
        "workspace_root": ".",
        "metadata_dir": constants.METADATA_DIR.as_posix(),
        "yaml_dir": constants.YAML_DIR.as_posix(),
        "instrumentation_dir": constants.INSTRUMENTATION_DIR.as_posix(),
        "invariants_dir": constants.INVARIANTS_DIR.as_posix(),
        "acl_path": constants.ACL_PATH.as_posix(),
        "architecture_rules_path": constants.ARCHITECTURE_RULES_PATH.as_posix(),
        "intent_graph_path": constants.INTENT_GRAPH_PATH.as_posix(),
        "commands_path": constants.COMMANDS_PATH.as_posix(),
        "purity_guards_dir": constants.PURITY_GUARDS_DIR.as_posix(),
        "source_dirs": ["src"],
        "shared_contracts_dir": constants.SHARED_CONTRACTS_DIR.as_posix(),
        "migrations_dir": constants.MIGRATIONS_DIR.as_posix(),
        "services_dir": constants.SERVICES_DIR.as_posix(),
        "routes_dir": constants.ROUTES_DIR.as_posix(),
        "tests_dir": constants.TESTS_DIR.as_posix(),
        "forms_output_dir": constants.FORMS_OUTPUT_DIR.as_posix(),
        "invariant_mapping_output_dir": constants.INVARIANT_MAPPING_OUTPUT_DIR.as_posix(),
    },
    "pipeline": {
        "check_mode": False,
        "dry_run": False,
        "validate_code": True,
        "backup_existing": True,
        "skip_phases": [],
    },
    "logging": {"level": "INFO", "json": False, "redact_secrets": True},
}

# Keys the schema itself declares are never treated as secrets when redacting.
_SCHEMA_KEYS: Final[frozenset[str]] = frozenset(
    {*DEFAULT_CONFIG, *(key for section in DEFAULT_CONFIG.values() for key in section)}
)


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


# Typed view -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PathsConfig:
    workspace_root: Path
    metadata_dir: Path
    yaml_dir: Path
    instrumentation_dir: Path
    invariants_dir: Path
    acl_path: Path
    architecture_rules_path: Path
    intent_graph_path: Path
    commands_path: Path
    purity_guards_dir: Path
    shared_contracts_dir: Path
    migrations_dir: Path
    services_dir: Path
    routes_dir: Path
    tests_dir: Path
    forms_output_dir: Path
    invariant_mapping_output_dir: Path
    source_dirs: tuple[Path, ...] = ()

    @classmethod
    def under(cls, workspace_root: Path) -> PathsConfig:
        """Default layout rooted at ``workspace_root``."""

        defaults = DEFAULT_CONFIG["paths"]
        return cls(
            workspace_root=workspace_root,
            source_dirs=tuple(workspace_root / item for item in defaults["source_dirs"]),
            **{key: workspace_root / str(defaults[key]) for key in PATH_KEYS},  # type: ignore[literal-required]
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    json: bool = False
    redact_secrets: bool = True


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Fully resolved, immutable engine configuration."""

    paths: PathsConfig
    check_mode: bool = False
    dry_run: bool = False
    validate_code: bool = True
    backup_existing: bool = True
    skip_phases: frozenset[float] = field(default_factory=frozenset)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        normalized = frozenset(float(item) for item in self.skip_phases)
        if MANIFEST_PHASE in normalized:
            raise ConfigValidationError(
                (ConfigValidationIssue("pipeline.skip_phases", "phase 0 cannot be skipped"),)
            )
        object.__setattr__(self, "skip_phases", normalized)

    def is_skipped(self, phase: float) -> bool:
        return float(phase) in self.skip_phases

    @classmethod
    def from_mapping(cls, config: Mapping[str, object]) -> EngineConfig:
        """Build from a validated, path-normalized config payload."""

        validated = assert_valid_config(config)
        paths = validated["paths"]
        pipeline = validated["pipeline"]
        logging_section = validated["logging"]
        return cls(
            paths=PathsConfig(
                workspace_root=Path(paths["workspace_root"]),
                source_dirs=tuple(Path(item) for item in paths["source_dirs"]),
                **{key: Path(paths[key]) for key in PATH_KEYS},
            ),
            check_mode=pipeline["check_mode"],
            dry_run=pipeline["dry_run"],
            validate_code=pipeline["validate_code"],
            backup_existing=pipeline["backup_existing"],
            skip_phases=frozenset(pipeline["skip_phases"]),
            logging=LoggingConfig(
                level=logging_section["level"],
                json=logging_section["json"],
                redact_secrets=logging_section["redact_secrets"],
            ),
        )


# Public helpers ----------------------------------------------------------------


def default_config() -> ActConfig:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade act.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the act-engine runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def dump_redacted(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Return deterministic redacted representation for logs."""

    if not isinstance(config, Mapping):
        return {}
    redacted = _redact_value(config, parent_key=None)
    if isinstance(redacted, dict):
        return redacted
    return {}


# Section validators --------------------------------------------------------------


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "paths", "pipeline", "logging"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="meta", issues=issues, validator=_validate_meta, out=out)
    _section(payload, key="paths", issues=issues, validator=_validate_paths, out=out)
    _section(payload, key="pipeline", issues=issues, validator=_validate_pipeline, out=out)
    _section(payload, key="logging", issues=issues, validator=_validate_logging, out=out)
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)
    out: dict[str, Any] = {}
    if "schema_version" in payload:
        version = _as_int(payload["schema_version"], _join(path, "schema_version"), issues, minimum=1)
        if version is not None:
            if version != ConfigSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(version))
            else:
                out["schema_version"] = version
    return out


def _validate_paths(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"workspace_root", *PATH_KEYS, *PATH_LIST_KEYS}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in ("workspace_root", *PATH_KEYS):
        if key in payload:
            parsed = _as_path_text(payload[key], _join(path, key), issues)
            if parsed is not None:
                out[key] = parsed
    for key in PATH_LIST_KEYS:
        if key not in payload:
            continue
        key_path = _join(path, key)
        raw = payload[key]
        if not isinstance(raw, list | tuple):
            issues.add(key_path, f"expected array, got {type(raw).__name__}")
            continue
        items: list[str] = []
        for index, item in enumerate(raw):
            parsed = _as_path_text(item, f"{key_path}[{index}]", issues)
            if parsed is not None:
                items.append(parsed)
        out[key] = items
    return out


def _validate_pipeline(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    flags = ("check_mode", "dry_run", "validate_code", "backup_existing")
    allowed = {*flags, "skip_phases"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in flags:
        if key in payload:
            parsed = _as_bool(payload[key], _join(path, key), issues)
            if parsed is not None:
                out[key] = parsed

    if "skip_phases" in payload:
        key_path = _join(path, "skip_phases")
        raw = payload["skip_phases"]
        if not isinstance(raw, list | tuple):
            issues.add(key_path, f"expected array, got {type(raw).__name__}")
        else:
            phases: list[float] = []
            for index, item in enumerate(raw):
                parsed_phase = _as_float(item, f"{key_path}[{index}]", issues, minimum=0.0)
                if parsed_phase is None:
                    continue
                if parsed_phase == MANIFEST_PHASE:
                    issues.add(f"{key_path}[{index}]", "phase 0 (manifest generation) cannot be skipped")
                    continue
                phases.append(parsed_phase)
            out["skip_phases"] = sorted(set(phases))
    return out


def _validate_logging(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"level", "json", "redact_secrets"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "level" in payload:
        raw_level = payload["level"]
        level = _as_enum(
            raw_level.upper() if isinstance(raw_level, str) else raw_level,
            _join(path, "level"),
            issues,
            allowed_values=LOG_LEVELS,
        )
        if level is not None:
            out["level"] = level
    for key in ("json", "redact_secrets"):
        if key in payload:
            parsed = _as_bool(payload[key], _join(path, key), issues)
            if parsed is not None:
                out[key] = parsed
    return out


# Scalar coercion ----------------------------------------------------------------


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    if isinstance(value, Path):
        value = value.as_posix()
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_float(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: float | None = None,
) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {type(value).__name__}")
        return None
    parsed = float(value)
    if not math.isfinite(parsed):
        issues.add(path, "must be finite")
        return None
    if minimum is not None and parsed < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return parsed


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key in allowed:
            continue
        key_path = _join(path, key)
        if _looks_sensitive_key(key):
            issues.add(key_path, "embedded secret values are forbidden in act.toml")
        else:
            issues.add(key_path, "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _looks_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    if any(phrase in normalized for phrase in _SENSITIVE_KEY_PHRASES):
        return True
    tokens = tuple(token for token in normalized.split("_") if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens)


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: copy.deepcopy(value[key]) for key in sorted(value)}


def _redact_value(value: object, parent_key: str | None) -> object:
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        for key in sorted(value):
            item = value[key]
            if _key_is_sensitive_for_redaction(key):
                out[key] = "<redacted>"
            else:
                out[key] = _redact_value(item, key)
        return out
    if isinstance(value, list | tuple):
        return [_redact_value(item, parent_key) for item in value]
    return value


def _key_is_sensitive_for_redaction(key: str) -> bool:
    return key not in _SCHEMA_KEYS and _looks_sensitive_key(key)


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "MANIFEST_PHASE",
    "PATH_KEYS",
    "PATH_LIST_KEYS",
    "ActConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "EngineConfig",
    "LoggingConfig",
    "PathsConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "dump_redacted",
    "validate_config",
]
