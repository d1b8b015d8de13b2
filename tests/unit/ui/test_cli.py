"""
act-engine - unit tests for the CLI router

File: tests/unit/ui/test_cli.py
Last updated: 2026-10-19

Purpose
- Drive ``run_cli`` end to end over a temporary workspace and check exit codes and output.

What this test file should cover
- ``run --json`` over a fresh workspace exits 0 and reports every phase.
- Configuration errors exit 2 with a message on stderr.
- ``phases``, ``hash`` and ``config`` emit deterministic JSON.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from act_engine.main import ExitCode, cli_entrypoint
from act_engine.ui.cli import run_cli
from act_engine.utils.hashing import hash_content
from tests.unit.workspace import write_text, write_workspace


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _json_output(capsys: pytest.CaptureFixture[str]) -> dict[str, object]:
    return json.loads(capsys.readouterr().out)


def test_run_json_on_fresh_workspace(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_workspace(tmp_path)

    code = run_cli(["run", "--repo-root", str(tmp_path), "--json", "--log-level", "error"])

    payload = _json_output(capsys)
    assert code == 0
    assert payload["command"] == "run"
    assert payload["success"] is True
    phases = payload["phases"]
    assert isinstance(phases, list)
    assert phases[0]["name"] == "Manifest Generation"
    assert [item["phase"] for item in phases][-1] == 10.0


def test_dry_run_on_fresh_workspace_fails_phase_8(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_workspace(tmp_path)

    code = run_cli(["run", "--repo-root", str(tmp_path), "--dry-run", "--no-color"])

    output = capsys.readouterr().out
    assert code == 1
    assert "act pipeline" in output
    assert "FAIL  Phase 8: Drift Check" in output
    assert "Expected artifact missing: " in output
    assert "pipeline failed (phases 8)" in output
    assert not (tmp_path / "generated").exists()


def test_skipping_phase_zero_is_a_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_workspace(tmp_path)

    code = run_cli(["run", "--repo-root", str(tmp_path), "--skip-phase", "0"])

    assert code == 2
    assert "pipeline.skip_phases[0]" in capsys.readouterr().err


def test_missing_acl_is_a_config_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = write_workspace(tmp_path)
    config.paths.acl_path.unlink()

    code = run_cli(["run", "--repo-root", str(tmp_path), "--log-level", "error"])

    assert code == 2
    assert "ACL definition file does not exist" in capsys.readouterr().err


def test_phases_json_marks_skipped_phases(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_text(tmp_path / "act.toml", "[pipeline]\nskip_phases = [1.5]\n")

    code = run_cli(["phases", "--repo-root", str(tmp_path), "--json"])

    payload = _json_output(capsys)
    assert code == 0
    rows = payload["phases"]
    assert isinstance(rows, list)
    assert [row["phase"] for row in rows] == [
        "1", "1.5", "2", "3", "4", "5", "6", "7", "7.5", "7.6", "7.8", "8", "8.1", "8.2", "9",
        "9.1", "10",
    ]
    assert [row["phase"] for row in rows if row["skipped"]] == ["1.5"]


def test_hash_matches_normalized_content(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    target = tmp_path / "module.py"
    target.write_bytes(b"x = 1  \r\ny = 2\r\n")

    code = run_cli(["hash", "module.py", "--repo-root", str(tmp_path), "--json"])

    payload = _json_output(capsys)
    assert code == 0
    assert payload["sha256"] == hash_content("x = 1  \ny = 2")


def test_hash_of_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(["hash", "nope.py", "--repo-root", str(tmp_path)])

    assert code == 2
    assert "file not found" in capsys.readouterr().err


def test_config_json_reports_resolved_paths(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["config", "--repo-root", str(tmp_path), "--json"])

    payload = _json_output(capsys)
    assert code == 0
    config = payload["config"]
    assert isinstance(config, dict)
    assert config["paths"]["workspace_root"] == tmp_path.resolve().as_posix()
    assert config["pipeline"]["check_mode"] is False


def test_entrypoint_normalizes_argparse_exit(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["frobnicate"]) == int(ExitCode.CONFIG_ERROR)
    assert "invalid choice" in capsys.readouterr().err
