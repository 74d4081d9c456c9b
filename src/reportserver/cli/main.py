# topmark:header:start
#
#   project      : ReportServer
#   file         : main.py
#   file_relpath : src/reportserver/cli/main.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Click entry point of the ``reportserver`` command.

Group-level options are initialized once and placed into ``ctx.obj``:

- ``verbosity_level``: program-output verbosity from ``-v``/``-q``,
- ``log_level``: internal logging level from ``REPORTSERVER_LOG_LEVEL``,
- ``console``: the `ClickConsole` used by every subcommand.
"""

from __future__ import annotations

import click

from reportserver.cli.commands.config import config_command
from reportserver.cli.commands.replay import replay_command
from reportserver.cli.commands.version import version_command
from reportserver.cli.options import (
    CONTEXT_SETTINGS,
    common_color_options,
    common_verbose_options,
    resolve_verbosity,
)
from reportserver.config.logging import get_logger, resolve_env_log_level, setup_logging
from reportserver.output.console import ClickConsole, ConsoleLike

logger = get_logger(__name__)


def init_common_state(
    ctx: click.Context,
    *,
    verbose: int,
    quiet: int,
    no_color: bool,
) -> None:
    """Initialize shared state (verbosity, logging and console) on the Click context.

    Args:
        ctx (click.Context): Current Click context; will have ``obj`` and ``color`` set.
        verbose (int): Count of ``-v`` flags.
        quiet (int): Count of ``-q`` flags.
        no_color (bool): Whether ``--no-color`` was passed.
    """
    ctx.obj = ctx.obj or {}

    ctx.obj["verbosity_level"] = resolve_verbosity(verbose, quiet)

    level_env: int | None = resolve_env_log_level()
    ctx.obj["log_level"] = level_env
    setup_logging(level=level_env)

    enable_color: bool = not no_color
    ctx.obj["color_enabled"] = enable_color
    ctx.color = enable_color
    ctx.obj["console"] = ClickConsole(enable_color=enable_color)


@click.group(
    cls=click.Group,
    context_settings=CONTEXT_SETTINGS,
    invoke_without_command=True,
    help="ReportServer CLI",
)
@common_verbose_options
@common_color_options
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: int,
    quiet: int,
    no_color: bool,
) -> None:
    """Entry point for the ReportServer CLI."""
    init_common_state(ctx, verbose=verbose, quiet=quiet, no_color=no_color)
    console: ConsoleLike = ctx.obj["console"]

    if ctx.invoked_subcommand is None:
        console.print("Hint: use 'reportserver replay FILE' to process recorded reports.")
        console.print()
        console.print(ctx.get_help())


cli.add_command(version_command)

cli.add_command(config_command)

cli.add_command(replay_command)

if __name__ == "__main__":
    cli()
