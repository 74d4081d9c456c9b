# topmark:header:start
#
#   project      : ReportServer
#   file         : options.py
#   file_relpath : src/reportserver/cli/options.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Common CLI options.

This module centralizes reusable options (verbosity, color, configuration) and
their resolution logic, so the group and its commands can stay thin.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, ParamSpec, TypeVar

import click

from reportserver.cli.errors import ReportServerUsageError

P = ParamSpec("P")
R = TypeVar("R")

#: Click context settings shared by the group and its commands.
CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
}


def resolve_verbosity(verbose_count: int, quiet_count: int) -> int:
    """Resolve the program-output verbosity from ``-v`` and ``-q`` counts.

    Args:
        verbose_count (int): Number of times ``-v`` was passed.
        quiet_count (int): Number of times ``-q`` was passed.

    Returns:
        int: ``-1`` when quiet, ``0`` by default, otherwise the ``-v`` count.

    Raises:
        ReportServerUsageError: If both flags are used.
    """
    if verbose_count > 0 and quiet_count > 0:
        raise ReportServerUsageError(
            "The '--verbose' and '--quiet' options are mutually exclusive."
        )
    if quiet_count > 0:
        return -1
    return verbose_count


def common_verbose_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add ``-v/--verbose`` and ``-q/--quiet`` counting options."""
    f = click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase program output. Specify twice for more detail.",
    )(f)
    f = click.option(
        "-q",
        "--quiet",
        count=True,
        help="Suppress informational output.",
    )(f)
    return f


def common_color_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add the ``--no-color`` flag."""
    f = click.option(
        "--no-color",
        "no_color",
        is_flag=True,
        help="Disable color output.",
    )(f)
    return f


def common_config_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add ``--config`` (repeatable) and ``--no-config``.

    Behavior:
        ``--config`` files are merged after discovered configs, in the given order.
        ``--no-config`` skips discovery; explicit ``--config`` files still apply.
    """
    f = click.option(
        "--no-config",
        "no_config",
        is_flag=True,
        help="Do not discover reportserver.toml / pyproject.toml configs.",
    )(f)
    f = click.option(
        "--config",
        "config_paths",
        multiple=True,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Extra config file to merge (repeatable).",
    )(f)
    return f


def server_override_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add options that override the ``[report_server]`` and ``[recording]`` tables."""
    f = click.option(
        "--max-quit-count",
        "max_quit_count",
        type=click.IntRange(min=0),
        default=None,
        help="Number of COUNT reports tolerated before the run exits (0 = no limit).",
    )(f)
    f = click.option(
        "--lock-max-quit-count",
        "lock_max_quit_count",
        is_flag=True,
        help="Make the max quit count non-overridable.",
    )(f)
    f = click.option(
        "--record-all",
        "record_all",
        is_flag=True,
        help="Record every processed report.",
    )(f)
    f = click.option(
        "--show-verbosity",
        "show_verbosity",
        is_flag=True,
        help="Show the verbosity of each report.",
    )(f)
    f = click.option(
        "--show-terminator",
        "show_terminator",
        is_flag=True,
        help="Append ' -SEVERITY' to each report.",
    )(f)
    f = click.option(
        "--record-to",
        "record_to",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Record reports as JSON lines into this file.",
    )(f)
    return f


def overrides_from_flags(
    *,
    max_quit_count: int | None,
    lock_max_quit_count: bool,
    record_all: bool,
    show_verbosity: bool,
    show_terminator: bool,
    record_to: Path | None,
) -> dict[str, object]:
    """Translate override flags into a config override mapping.

    Flags that were not passed map to ``None`` so they leave the config unchanged.
    """
    return {
        "max_quit_count": max_quit_count,
        "max_quit_overridable": False if lock_max_quit_count else None,
        "record_all_messages": True if record_all else None,
        "show_verbosity": True if show_verbosity else None,
        "show_terminator": True if show_terminator else None,
        "record_to": record_to,
    }
