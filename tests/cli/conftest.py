# topmark:header:start
#
#   project      : ReportServer
#   file         : conftest.py
#   file_relpath : tests/cli/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI test helpers for running ReportServer in a controlled working directory.

`run_cli_in()` changes the process working directory to the given `tmp_path`
before invoking the Click CLI, so that config discovery starts from the test
directory and relative paths resolve against it.
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

from click.testing import CliRunner, Result

from reportserver.cli.exit_codes import ExitCode
from reportserver.cli.main import cli

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path


def run_cli_in(tmp_path: Path, argv: str | Sequence[str] | None) -> Result:
    """Invoke the CLI with `tmp_path` as the working directory.

    Args:
        tmp_path (Path): Pytest-provided temporary directory used as the CWD for the
            command invocation.
        argv (str | Sequence[str] | None): CLI argument vector, e.g. ``["replay", "run.jsonl"]``.

    Returns:
        Result: The `click.testing.Result` produced by `click.testing.CliRunner.invoke`.
    """
    runner = CliRunner()
    cwd: str = os.getcwd()
    try:
        os.chdir(tmp_path)
        return runner.invoke(cli, argv)
    finally:
        os.chdir(cwd)


def run_cli(argv: str | Sequence[str] | None) -> Result:
    """Invoke the CLI without changing the working directory.

    Use this helper when the test does not depend on files created in
    ``tmp_path`` (e.g. ``--help`` / ``version``).
    """
    runner = CliRunner()
    return runner.invoke(cli, argv)


def write_records(path: Path, records: Iterable[dict[str, Any]]) -> Path:
    """Write ``records`` as a JSON-lines replay file and return its path."""
    path.write_text("".join(json.dumps(r) + "\n" for r in records), encoding="utf-8")
    return path


def record(severity: str, identifier: str, message: str, **extra: Any) -> dict[str, Any]:
    """Return a replay record produced by ``top.env.agent``."""
    base: dict[str, Any] = {
        "severity": severity,
        "id": identifier,
        "message": message,
        "producer": "agent",
        "handler": "reporter",
        "full_name": "top.env.agent",
    }
    base.update(extra)
    return base


def assert_SUCCESS(result: Result) -> None:
    """Assert that the command exited successfully (code 0)."""
    assert result.exit_code == ExitCode.SUCCESS, result.output


def assert_RUN_TERMINATED(result: Result) -> None:
    """Assert that a report ended the run (code 3)."""
    assert result.exit_code == ExitCode.RUN_TERMINATED, result.output


def assert_ENGINE_HALTED(result: Result) -> None:
    """Assert that a report halted the engine (code 4)."""
    assert result.exit_code == ExitCode.ENGINE_HALTED, result.output


def assert_USAGE_ERROR(result: Result) -> None:
    """Assert that the command exited with USAGE_ERROR (code 64)."""
    assert result.exit_code == ExitCode.USAGE_ERROR, result.output
