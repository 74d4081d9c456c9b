# topmark:header:start
#
#   project      : ReportServer
#   file         : config.py
#   file_relpath : src/reportserver/cli/commands/config.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer `config` command.

Emits the effective configuration as TOML after applying the bundled
defaults, discovered project config files, ``--config`` files and any
override flags. The output is wrapped between ``# === BEGIN ===`` and
``# === END ===`` markers for easy parsing in tests or tooling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from reportserver.cli.cmd_common import build_config_common, get_console
from reportserver.cli.diagnostics import render_config_diagnostics
from reportserver.cli.options import (
    CONTEXT_SETTINGS,
    common_config_options,
    overrides_from_flags,
    server_override_options,
)
from reportserver.config.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from reportserver.config.model import ServerConfig
    from reportserver.output.console import ConsoleLike

logger = get_logger(__name__)


@click.command(
    name="config",
    help="Dump the effective ReportServer configuration as TOML.",
    context_settings=CONTEXT_SETTINGS,
)
@common_config_options
@server_override_options
def config_command(
    *,
    config_paths: tuple[Path, ...],
    no_config: bool,
    max_quit_count: int | None,
    lock_max_quit_count: bool,
    record_all: bool,
    show_verbosity: bool,
    show_terminator: bool,
    record_to: Path | None,
) -> None:
    """Dump the effective configuration."""
    ctx = click.get_current_context()
    console: ConsoleLike = get_console(ctx)

    config: ServerConfig = build_config_common(
        ctx,
        config_paths=config_paths,
        no_config=no_config,
        overrides=overrides_from_flags(
            max_quit_count=max_quit_count,
            lock_max_quit_count=lock_max_quit_count,
            record_all=record_all,
            show_verbosity=show_verbosity,
            show_terminator=show_terminator,
            record_to=record_to,
        ),
    )

    render_config_diagnostics(ctx, config)
    console.print("# === BEGIN ===")
    console.print(config.to_toml().rstrip("\n"))
    console.print("# === END ===")
