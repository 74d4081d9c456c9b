# topmark:header:start
#
#   project      : ReportServer
#   file         : version.py
#   file_relpath : src/reportserver/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer `version` command.

Prints the ReportServer version as installed in the active Python environment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from reportserver.cli.cmd_common import get_console, get_effective_verbosity
from reportserver.constants import REPORTSERVER_VERSION

if TYPE_CHECKING:
    from reportserver.output.console import ConsoleLike


@click.command(
    name="version",
    help="Show the current version of ReportServer.",
)
def version_command() -> None:
    """Show the current version of ReportServer."""
    ctx = click.get_current_context()
    console: ConsoleLike = get_console(ctx)

    if get_effective_verbosity(ctx) > 0:
        console.print(console.styled("ReportServer version:\n", bold=True, underline=True))
        console.print(f"    {console.styled(REPORTSERVER_VERSION, bold=True)}")
    else:
        console.print(console.styled(REPORTSERVER_VERSION, bold=True))
