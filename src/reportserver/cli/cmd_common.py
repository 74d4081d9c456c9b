# topmark:header:start
#
#   project      : ReportServer
#   file         : cmd_common.py
#   file_relpath : src/reportserver/cli/cmd_common.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Common command utilities for Click-based commands.

Small helpers shared by several commands: effective verbosity, console
lookup, and configuration loading with CLI error mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from reportserver.cli.errors import ReportServerConfigError
from reportserver.config.logging import get_logger
from reportserver.config.model import MutableServerConfig
from reportserver.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reportserver.config.model import ServerConfig
    from reportserver.output.console import ConsoleLike

logger = get_logger(__name__)


def get_effective_verbosity(ctx: click.Context) -> int:
    """Return the program-output verbosity stored on the group context (0 by default)."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return int(obj.get("verbosity_level", 0))


def get_console(ctx: click.Context) -> ConsoleLike:
    """Return the console created by the group."""
    ctx.ensure_object(dict)
    return ctx.obj["console"]


def build_config_common(
    ctx: click.Context,
    *,
    config_paths: Iterable[Path],
    no_config: bool,
    overrides: Mapping[str, object] | None = None,
) -> ServerConfig:
    """Load, merge and freeze the effective configuration for a command.

    With ``-v`` the merged config files are listed. Diagnostics are left to
    `reportserver.cli.diagnostics.render_config_diagnostics`.

    Raises:
        ReportServerConfigError: If an explicit config file cannot be read or parsed.
    """
    try:
        draft: MutableServerConfig = MutableServerConfig.load_merged(
            anchor=Path.cwd(),
            extra_config_files=config_paths,
            no_config=no_config,
        )
    except ConfigError as exc:
        raise ReportServerConfigError(str(exc)) from exc

    if overrides:
        draft.apply_cli_args(overrides)
    config: ServerConfig = draft.freeze()

    console: ConsoleLike = get_console(ctx)
    if get_effective_verbosity(ctx) > 0:
        for path in config.config_files:
            console.print(console.styled(f"Config file: {path}", dim=True))
    logger.debug("Effective config: %s", config)
    return config
