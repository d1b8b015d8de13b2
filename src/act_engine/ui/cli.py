"""Command-line interface router for act-engine."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from act_engine.config import (
    ConfigLoadError,
    ConfigValidationError,
    EngineConfig,
    effective_config,
    load_config,
)
from act_engine.config.schema import LOG_LEVELS
from act_engine.observability import configure_logging
from act_engine.pipeline import ActPipeline, PipelineServices, default_phase_definitions
from act_engine.pipeline.results import format_phase_number
from act_engine.ui.render import CLIRenderer, create_renderer
from act_engine.utils.hashing import hash_content


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="act",
        description=(
            "act-engine - deterministic FORM to code compiler.\n\n"
            "Common workflows:\n"
            "  act run                     Generate artifacts and report every phase\n"
            "  act run --check             Report drift without writing (CI)\n"
            "  act phases                  List the phase catalog\n"
            "  act config                  Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo-root",
        default=".",
        help="Repository root directory (default: current working directory).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to act TOML config (default: <repo-root>/act.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Structured log level written to stderr (default: from config).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # run -----------------------------------------------------------------
    run_parser = subparsers.add_parser(
        "run",
        parents=[common],
        help="Run the generation pipeline",
        description=(
            "Build the manifest and run every registered phase in order.\n\n"
            "Examples:\n"
            "  act run\n"
            "  act run --check\n"
            "  act run --dry-run --skip-phase 1.5 --skip-phase 8.2\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    run_parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Never write; report drift instead.",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Never write; report what would change.",
    )
    run_parser.add_argument(
        "--skip-phase",
        dest="skip_phases",
        action="append",
        type=float,
        default=None,
        metavar="N",
        help="Skip phase N (repeatable; phase 0 cannot be skipped).",
    )
    run_parser.add_argument("--json", action="store_true", default=False, help="Emit JSON.")
    run_parser.set_defaults(handler=_cmd_run)

    # phases --------------------------------------------------------------
    phases_parser = subparsers.add_parser(
        "phases",
        parents=[common],
        help="List the phase catalog",
    )
    phases_parser.add_argument("--json", action="store_true", default=False, help="Emit JSON.")
    phases_parser.set_defaults(handler=_cmd_phases)

    # hash ----------------------------------------------------------------
    hash_parser = subparsers.add_parser(
        "hash",
        parents=[common],
        help="Print the normalized content hash of a file",
        description=(
            "Hash a file the way the drift detector does: line endings and trailing\n"
            "whitespace are normalized first.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    hash_parser.add_argument("path", help="File to hash.")
    hash_parser.add_argument("--json", action="store_true", default=False, help="Emit JSON.")
    hash_parser.set_defaults(handler=_cmd_hash)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show the effective (redacted) configuration",
    )
    config_parser.add_argument("--json", action="store_true", default=False, help="Emit JSON.")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {
        "pipeline.check_mode": True if _flag(args, "check") else None,
        "pipeline.dry_run": True if _flag(args, "dry_run") else None,
        "pipeline.skip_phases": getattr(args, "skip_phases", None),
    }
    config = _load_engine_config(args, overrides)
    configure_logging(config.logging)

    try:
        services = PipelineServices.from_config(config)
        result = ActPipeline(services).run(config)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    exit_code = 0 if result.success else 1
    if _flag(args, "json"):
        _emit_json({"command": "run", **result.to_dict()})
        return exit_code

    _get_renderer(args).pipeline(result)
    return exit_code


def _cmd_phases(args: argparse.Namespace) -> int:
    config = _load_engine_config(args)
    rows = [
        {
            "phase": format_phase_number(definition.number),
            "name": definition.name,
            "skipped": config.is_skipped(definition.number),
        }
        for definition in default_phase_definitions()
    ]

    if _flag(args, "json"):
        _emit_json({"command": "phases", "phases": rows})
        return 0

    renderer = _get_renderer(args)
    renderer.table(
        ["PHASE", "NAME", "STATUS"],
        [
            [str(row["phase"]), str(row["name"]), "skipped" if row["skipped"] else "enabled"]
            for row in rows
        ],
        title="Phase catalog",
    )
    return 0


def _cmd_hash(args: argparse.Namespace) -> int:
    target = _resolve_path(str(args.path), _repo_root(args))
    if not target.is_file():
        raise CLIError(f"file not found: {target}", exit_code=2)
    try:
        digest = hash_content(target.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise CLIError(f"cannot read {target}: {exc}", exit_code=2) from exc

    if _flag(args, "json"):
        _emit_json({"command": "hash", "path": target.as_posix(), "sha256": digest})
        return 0
    _get_renderer(args).text(f"{digest}  {target.as_posix()}")
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    redacted = effective_config(_load_config_mapping(args))

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": redacted})
        return 0

    _get_renderer(args).text(json.dumps(redacted, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _repo_root(args: argparse.Namespace) -> Path:
    raw = getattr(args, "repo_root", None)
    if not isinstance(raw, str) or not raw.strip():
        raise CLIError("missing required argument: repo_root", exit_code=2)
    candidate = Path(raw).expanduser().resolve()
    if not candidate.is_dir():
        raise CLIError(f"repo root is not a directory: {candidate}", exit_code=2)
    return candidate


def _resolve_path(raw: str, repo_root: Path) -> Path:
    candidate = Path(raw).expanduser()
    return candidate.resolve() if candidate.is_absolute() else (repo_root / candidate).resolve()


def _load_config_mapping(
    args: argparse.Namespace, overrides: Mapping[str, object] | None = None
) -> dict[str, object]:
    cli_overrides = dict(overrides or {})
    cli_overrides["logging.level"] = getattr(args, "log_level", None)
    try:
        return load_config(
            _optional_str(getattr(args, "config_path", None)),
            cli_overrides=cli_overrides,
            cwd=_repo_root(args),
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _load_engine_config(
    args: argparse.Namespace, overrides: Mapping[str, object] | None = None
) -> EngineConfig:
    try:
        return EngineConfig.from_mapping(_load_config_mapping(args, overrides))
    except ConfigValidationError as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
