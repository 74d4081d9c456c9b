# topmark:header:start
#
#   project      : ReportServer
#   file         : diagnostics.py
#   file_relpath : src/reportserver/cli/diagnostics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Human-facing rendering of configuration diagnostics.

Notes:
    - This module is Click-bound: it reads the console, the verbosity and the
      color setting from `click.Context.obj`.
    - Diagnostics are notes about the configuration inputs, not report messages;
      they never go through a report server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reportserver.cli.cmd_common import get_console, get_effective_verbosity
from reportserver.core.diagnostics import DiagnosticStats, compute_diagnostic_stats

if TYPE_CHECKING:
    from collections.abc import Callable

    import click

    from reportserver.config.model import ServerConfig
    from reportserver.output.console import ConsoleLike


def maybe_colorize(styler: Callable[[str], str], text: str, *, enabled: bool) -> str:
    """Apply ``styler`` to ``text`` only when color output is enabled."""
    return styler(text) if enabled else text


def triage_text(stats: DiagnosticStats) -> str:
    """Return a compact summary such as ``"1 error, 2 warnings"``."""
    parts: list[str] = []
    if stats.n_error:
        parts.append(f"{stats.n_error} error" + ("s" if stats.n_error != 1 else ""))
    if stats.n_warning:
        parts.append(f"{stats.n_warning} warning" + ("s" if stats.n_warning != 1 else ""))
    # Only mention info when there are no higher-level diagnostics.
    if stats.n_info and not (stats.n_error or stats.n_warning):
        parts.append(f"{stats.n_info} info" + ("s" if stats.n_info != 1 else ""))
    return ", ".join(parts) if parts else "info"


def render_config_diagnostics(ctx: click.Context, config: ServerConfig) -> None:
    """Print the diagnostics collected while loading ``config``.

    Behavior:
        - Nothing is printed when there are no diagnostics or with ``-q``.
        - At verbosity 0, a single triage line with a hint to use ``-v``.
        - At verbosity >= 1, the triage line followed by one line per diagnostic.

    Args:
        ctx (click.Context): Click context providing the console and verbosity.
        config (ServerConfig): Effective frozen configuration.
    """
    if not config.diagnostics:
        return
    verbosity: int = get_effective_verbosity(ctx)
    if verbosity < 0:
        return

    console: ConsoleLike = get_console(ctx)
    color: bool = bool(ctx.obj.get("color_enabled", False))
    triage: str = triage_text(compute_diagnostic_stats(config.diagnostics))

    if verbosity == 0:
        console.print(
            console.styled(f"Config diagnostics: {triage} (use '-v' to view details)", fg="blue")
        )
        return

    console.print(console.styled(f"Config diagnostics: {triage}", fg="blue", bold=True))
    for diag in config.diagnostics:
        label: str = maybe_colorize(diag.level.color, f"[{diag.level.value}]", enabled=color)
        console.print(f"  {label} {diag.message}")
