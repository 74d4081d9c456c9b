# topmark:header:start
#
#   project      : ReportServer
#   file         : replay.py
#   file_relpath : src/reportserver/cli/commands/replay.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer `replay` command.

Feeds the report records of a JSON-lines file through a report server, as if
they were produced live, then prints the end-of-run summary.

Each line is one record (see `reportserver.message.io`); blank lines and lines
starting with ``//`` are skipped. A record's optional ``time`` value sets the
engine clock before the record is processed.

Exit codes:
    * ``SUCCESS`` when every record was processed.
    * ``RUN_TERMINATED`` when a report ended the run (``EXIT``, or ``COUNT``
      reaching the max quit count). Teardown and the summary have run.
    * ``ENGINE_HALTED`` when a report halted the engine (``STOP``). No summary.
    * ``DATA_ERROR`` for a malformed record, ``CONFIG_ERROR`` for a bad config.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from reportserver.cli.cmd_common import build_config_common, get_console, get_effective_verbosity
from reportserver.cli.diagnostics import render_config_diagnostics
from reportserver.cli.errors import ReportServerDataError, ReportServerIOError
from reportserver.cli.exit_codes import ExitCode
from reportserver.cli.options import (
    CONTEXT_SETTINGS,
    common_config_options,
    overrides_from_flags,
    server_override_options,
)
from reportserver.config.logging import get_logger
from reportserver.constants import NO_SINK
from reportserver.errors import EngineHalted, MessageFormatError, RunTerminated
from reportserver.message.io import iter_jsonl_records, message_from_mapping
from reportserver.message.model import Action
from reportserver.server.report_server import ReportServer
from reportserver.server.services import CoreServices, DefaultRunControl, ManualClock

if TYPE_CHECKING:
    from reportserver.config.model import ServerConfig
    from reportserver.message.model import ReportMessage
    from reportserver.output.console import ConsoleLike

logger = get_logger(__name__)


@click.command(
    name="replay",
    help="Process the report records of a JSON-lines FILE and print the summary.",
    context_settings=CONTEXT_SETTINGS,
)
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@common_config_options
@server_override_options
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also LOG every report without a sink handle into this file.",
)
@click.option(
    "--no-summary",
    "no_summary",
    is_flag=True,
    help="Do not print the report summary.",
)
def replay_command(
    *,
    file: Path,
    config_paths: tuple[Path, ...],
    no_config: bool,
    max_quit_count: int | None,
    lock_max_quit_count: bool,
    record_all: bool,
    show_verbosity: bool,
    show_terminator: bool,
    record_to: Path | None,
    log_path: Path | None,
    no_summary: bool,
) -> None:
    """Replay report records through a fresh report server."""
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

    clock = ManualClock()
    services = CoreServices(
        run_control=DefaultRunControl(summarize=not no_summary),
        clock=clock,
        console=console,
    )
    server: ReportServer = ReportServer.from_config(config, services=services, name="replay")
    services.install_server(server)

    exit_code: ExitCode = ExitCode.SUCCESS
    with services.sinks:
        log_handle: int = NO_SINK
        if log_path is not None:
            try:
                log_handle = services.sinks.open(log_path)
            except OSError as exc:
                raise ReportServerIOError(f"Cannot open log file {log_path}: {exc}") from exc

        try:
            count: int = _replay(server, clock, file, log_handle)
            logger.info("Replayed %d record(s) from %s", count, file)
            if not no_summary:
                server.summarize()
        except RunTerminated as exc:
            console.warn(str(exc))
            exit_code = ExitCode.RUN_TERMINATED
        except EngineHalted as exc:
            console.error(str(exc))
            exit_code = ExitCode.ENGINE_HALTED

    if get_effective_verbosity(ctx) > 1:
        console.print(server.describe())

    if exit_code != ExitCode.SUCCESS:
        ctx.exit(exit_code)


def _replay(server: ReportServer, clock: ManualClock, file: Path, log_handle: int) -> int:
    """Process every record of ``file``; return the number of records processed.

    Raises:
        ReportServerDataError: If a record is malformed.
        ReportServerIOError: If the file cannot be read.
    """
    count = 0
    try:
        for lineno, record in iter_jsonl_records(file):
            try:
                message: ReportMessage = message_from_mapping(record)
            except MessageFormatError as exc:
                raise ReportServerDataError(f"{file}:{lineno}: {exc}") from exc

            timestamp: Any = record.get("time")
            if timestamp is not None:
                clock.set(timestamp)

            if log_handle != NO_SINK and message.file == NO_SINK:
                message = replace(message.add_action(Action.LOG), file=log_handle)

            server.process(message)
            count += 1
    except MessageFormatError as exc:
        raise ReportServerDataError(str(exc)) from exc
    except OSError as exc:
        raise ReportServerIOError(f"Cannot read {file}: {exc}") from exc
    return count
