# topmark:header:start
#
#   project      : ReportServer
#   file         : report_server.py
#   file_relpath : src/reportserver/server/report_server.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""The report server: the diagnostic sink of a run.

`ReportServer.process` is the main entry point. A message goes through:

1. producer validation (an incomplete identity is reported and dropped),
2. the catcher chain (which may drop or modify it),
3. the ``NO_ACTION`` check,
4. text composition, only if ``DISPLAY`` or ``LOG`` will consume the text,
5. `ReportServer.execute`, which applies the action mask in a fixed order:
   counts, recording, display, log, quit count (possibly escalating to
   ``EXIT``), exit, stop.

Every public method runs under the server's re-entrant lock. The lock is
re-entrant because the server reports on itself through its own pipeline
(rejected configuration, malformed producers, the summary) and because the
run control's graceful shutdown summarizes the server it was called from.
"""

from __future__ import annotations

from dataclasses import replace
from threading import RLock
from typing import TYPE_CHECKING

from reportserver.catcher import CatcherChain
from reportserver.config.logging import get_logger
from reportserver.constants import (
    HIERARCHY_DELIMITER,
    ID_BAD_NAME,
    ID_CATCHER_SUMMARY,
    ID_MAX_QUIT_LOCKED,
    ID_NO_PRODUCER,
    ID_SUMMARY,
    NO_SINK,
    SERVER_REPORTER_NAME,
)
from reportserver.message.model import (
    Action,
    ProducerIdentity,
    ReportMessage,
    Severity,
    Verbosity,
)
from reportserver.recording.database import JsonLinesTransactionDatabase, MemoryTransactionDatabase
from reportserver.recording.index import RecordingIndex
from reportserver.server.composer import DisplayOptions, MessageComposer
from reportserver.server.services import CoreServices
from reportserver.server.statistics import StatisticsStore

if TYPE_CHECKING:
    from reportserver.config.logging import ReportServerLogger
    from reportserver.config.model import ServerConfig
    from reportserver.recording.database import (
        Transaction,
        TransactionDatabase,
        TransactionStream,
    )
    from reportserver.server.statistics import QuitCeiling

logger: ReportServerLogger = get_logger(__name__)

SERVER_PRODUCER = ProducerIdentity(SERVER_REPORTER_NAME, SERVER_REPORTER_NAME, SERVER_REPORTER_NAME)


class ReportServer:
    """Process report messages and keep report statistics.

    Args:
        name (str): Instance name, used in logs and in `describe`.
        services (CoreServices | None): Shared services; a private instance is
            created when omitted.
        catchers (CatcherChain | None): Catcher chain; an empty one when omitted.
        database (TransactionDatabase | None): Database for recorded messages;
            falls back to ``services.default_database`` when None.
        display (DisplayOptions | None): Composition flags.
        enable_id_summary (bool): Include the per-id table in the summary.
        record_all_messages (bool): Record every processed message, whatever its actions.
    """

    def __init__(
        self,
        name: str = "report_server",
        *,
        services: CoreServices | None = None,
        catchers: CatcherChain | None = None,
        database: TransactionDatabase | None = None,
        display: DisplayOptions | None = None,
        enable_id_summary: bool = True,
        record_all_messages: bool = False,
    ) -> None:
        self.name = name
        self.lock = RLock()
        self.services: CoreServices = services or CoreServices()
        self.catchers: CatcherChain = catchers if catchers is not None else CatcherChain()
        self.enable_id_summary = enable_id_summary
        self.record_all_messages = record_all_messages
        self._database: TransactionDatabase | None = database
        self._stats = StatisticsStore()
        self._index = RecordingIndex()
        self._composer = MessageComposer(self._now, display)
        self._shutdown_requested = False

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        *,
        services: CoreServices | None = None,
        name: str = "report_server",
    ) -> ReportServer:
        """Create a server configured from a frozen `ServerConfig`."""
        database: TransactionDatabase | None = None
        if config.database == "memory":
            database = MemoryTransactionDatabase()
        elif config.database == "jsonl" and config.database_path is not None:
            database = JsonLinesTransactionDatabase(config.database_path)

        server = cls(
            name,
            services=services,
            database=database,
            display=DisplayOptions(
                show_verbosity=config.show_verbosity,
                show_terminator=config.show_terminator,
            ),
            enable_id_summary=config.enable_id_summary,
            record_all_messages=config.record_all_messages,
        )
        server.set_max_quit_count(config.max_quit_count, config.max_quit_overridable)
        return server

    def _now(self) -> object:
        return self.services.clock()

    # ------------------ Display options ------------------

    @property
    def display(self) -> DisplayOptions:
        """Current composition flags."""
        return self._composer.options

    @property
    def show_verbosity(self) -> bool:
        """Whether composed text includes the verbosity."""
        return self._composer.options.show_verbosity

    @show_verbosity.setter
    def show_verbosity(self, value: bool) -> None:
        with self.lock:
            self._composer.options = replace(self._composer.options, show_verbosity=value)

    @property
    def show_terminator(self) -> bool:
        """Whether composed text ends with `` -SEVERITY``."""
        return self._composer.options.show_terminator

    @show_terminator.setter
    def show_terminator(self, value: bool) -> None:
        with self.lock:
            self._composer.options = replace(self._composer.options, show_terminator=value)

    # ------------------ Quit count ------------------

    def get_max_quit_count(self) -> int:
        """Return the quit-count ceiling (0 = no ceiling)."""
        with self.lock:
            return self._stats.max_quit_count

    def is_max_quit_overridable(self) -> bool:
        """Return False once the ceiling has been locked."""
        with self.lock:
            return self._stats.max_quit_overridable

    def set_max_quit_count(self, count: int, overridable: bool = True) -> bool:
        """Set the number of ``COUNT`` actions tolerated before the run exits.

        Once a call passes ``overridable=False`` the ceiling is locked: later
        calls are rejected with an ``INFO`` report and leave it unchanged.

        Args:
            count (int): New ceiling; negative values clamp to 0 (no ceiling).
            overridable (bool): If False, lock the ceiling.

        Returns:
            bool: True if the ceiling was changed.
        """
        with self.lock:
            if self._stats.set_max_quit_count(count, overridable):
                return True
            self._report_self(
                Severity.INFO,
                ID_MAX_QUIT_LOCKED,
                f"The max quit count setting of {self._stats.max_quit_count} is not "
                f"overridable to {count} due to a previous setting.",
                verbosity=Verbosity.NONE,
            )
            return False

    def get_quit_count(self) -> int:
        """Return the number of ``COUNT`` actions seen while a ceiling was set."""
        with self.lock:
            return self._stats.quit_count

    def set_quit_count(self, count: int) -> None:
        """Set the quit count (negative values clamp to 0)."""
        with self.lock:
            self._stats.set_quit_count(count)

    def incr_quit_count(self) -> None:
        """Increment the quit count."""
        with self.lock:
            self._stats.incr_quit_count()

    def reset_quit_count(self) -> None:
        """Reset the quit count to 0."""
        with self.lock:
            self._stats.reset_quit_count()

    def is_quit_count_reached(self) -> bool:
        """Return True when the quit count has reached the ceiling."""
        with self.lock:
            return self._stats.is_quit_count_reached()

    @property
    def ceiling(self) -> QuitCeiling:
        """Current ceiling state (`Unlocked` or `Locked`)."""
        with self.lock:
            return self._stats.ceiling

    # ------------------ Severity / id counts ------------------

    def get_severity_count(self, severity: Severity) -> int:
        """Return the number of processed messages with ``severity``."""
        with self.lock:
            return self._stats.severity_count(severity)

    def set_severity_count(self, severity: Severity, count: int) -> None:
        """Set the counter of ``severity`` (negative values clamp to 0)."""
        with self.lock:
            self._stats.set_severity_count(severity, count)

    def incr_severity_count(self, severity: Severity) -> None:
        """Increment the counter of ``severity``."""
        with self.lock:
            self._stats.incr_severity_count(severity)

    def reset_severity_counts(self) -> None:
        """Reset every severity counter to 0."""
        with self.lock:
            self._stats.reset_severity_counts()

    def get_id_count(self, identifier: str) -> int:
        """Return the number of processed messages with ``identifier``."""
        with self.lock:
            return self._stats.id_count(identifier)

    def set_id_count(self, identifier: str, count: int) -> None:
        """Set the counter of ``identifier`` (negative values clamp to 0)."""
        with self.lock:
            self._stats.set_id_count(identifier, count)

    def incr_id_count(self, identifier: str) -> None:
        """Increment the counter of ``identifier``."""
        with self.lock:
            self._stats.incr_id_count(identifier)

    def severity_set(self) -> tuple[Severity, ...]:
        """Return the severities that have a counter."""
        with self.lock:
            return self._stats.severity_set()

    def id_set(self) -> tuple[str, ...]:
        """Return the ids counted so far."""
        with self.lock:
            return self._stats.id_set()

    def severity_counts(self) -> dict[Severity, int]:
        """Return a snapshot of the severity counters."""
        with self.lock:
            return self._stats.severity_counts()

    def id_counts(self) -> dict[str, int]:
        """Return a snapshot of the id counters."""
        with self.lock:
            return self._stats.id_counts()

    # ------------------ Recording ------------------

    def set_message_database(self, database: TransactionDatabase | None) -> None:
        """Set the database recorded messages go to (None = use the services default)."""
        with self.lock:
            self._database = database

    def get_message_database(self) -> TransactionDatabase | None:
        """Return the explicitly configured message database, if any."""
        with self.lock:
            return self._database

    @property
    def recording_index(self) -> RecordingIndex:
        """The per-producer stream index."""
        return self._index

    # ------------------ Processing ------------------

    def process(self, message: ReportMessage) -> ReportMessage | None:
        """Run ``message`` through the pipeline.

        Args:
            message (ReportMessage): The message as produced.

        Returns:
            ReportMessage | None: The message as executed (with any catcher edits,
            forced ``RECORD`` or escalated ``EXIT``), or None if it was dropped.
        """
        with self.lock:
            if not message.producer.is_complete():
                self._report_self(
                    Severity.ERROR,
                    ID_NO_PRODUCER,
                    f"Report [{message.identifier}] has no producer object or handler "
                    f"(object={message.producer.object_name!r}, "
                    f"handler={message.producer.handler_name!r}); report dropped.",
                    verbosity=Verbosity.NONE,
                )
                return None
            if HIERARCHY_DELIMITER in message.producer.object_name:
                self._report_self(
                    Severity.ERROR,
                    ID_BAD_NAME,
                    f"Producer name {message.producer.object_name!r} contains the hierarchy "
                    f"delimiter {HIERARCHY_DELIMITER!r}.",
                    verbosity=Verbosity.NONE,
                )

            accepted: ReportMessage | None = self.catchers.process_all(message)
            if accepted is None:
                return None
            if accepted.action == Action.NO_ACTION:
                logger.trace("Report [%s] has no action; dropped", accepted.identifier)
                return None

            composed: str = ""
            if accepted.action & (Action.DISPLAY | Action.LOG):
                composed = self._composer.compose(accepted)
            return self.execute(accepted, composed)

    def execute(self, message: ReportMessage, composed: str) -> ReportMessage:
        """Apply the actions of an accepted message.

        The order is fixed: counts, recording, display, log, quit count, exit, stop.

        Args:
            message (ReportMessage): The accepted message.
            composed (str): Its composed text (used by ``DISPLAY`` and ``LOG``).

        Returns:
            ReportMessage: The message with any forced ``RECORD`` or escalated ``EXIT``.
        """
        with self.lock:
            self._stats.incr_severity_count(message.severity)
            self._stats.incr_id_count(message.identifier)

            if self.record_all_messages:
                message = message.add_action(Action.RECORD)

            if message.action & Action.RECORD:
                self._record(message)

            if message.action & Action.DISPLAY:
                self.services.console.print(composed)

            if message.action & Action.LOG:
                self.services.sinks.write(
                    message.file,
                    composed,
                    mask_stdout=bool(message.action & Action.DISPLAY),
                )

            if message.action & Action.COUNT and self._stats.max_quit_count != 0:
                self._stats.incr_quit_count()
                if self._stats.is_quit_count_reached():
                    message = message.add_action(Action.EXIT)

            if message.action & Action.EXIT:
                if self._shutdown_requested:
                    logger.debug("Shutdown already requested; [%s] ignored", message.identifier)
                else:
                    self._shutdown_requested = True
                    self.services.run_control.graceful_shutdown(self, message)

            if message.action & Action.STOP:
                self.services.run_control.engine_halt(self, message)

            return message

    def _record(self, message: ReportMessage) -> None:
        database: TransactionDatabase | None = (
            self._database if self._database is not None else self.services.default_database
        )
        stream: TransactionStream | None = self._index.get_or_open(message.producer.key, database)
        if stream is None:
            return
        transaction: Transaction = stream.open_transaction(
            message.name, self._now(), message.type_name
        )
        message.record(transaction)
        transaction.close()

    def compose(self, message: ReportMessage, producer_name: str | None = None) -> str:
        """Return the composed text of ``message`` without processing it."""
        return self._composer.compose(message, producer_name)

    def _report_self(
        self,
        severity: Severity,
        identifier: str,
        body: str,
        *,
        verbosity: int = Verbosity.MEDIUM,
        action: Action | None = None,
        file: int = NO_SINK,
    ) -> ReportMessage | None:
        return self.process(
            ReportMessage.build(
                severity,
                identifier,
                body,
                producer=SERVER_PRODUCER,
                verbosity=verbosity,
                action=action,
                file=file,
            )
        )

    # ------------------ Summary ------------------

    def summary_text(self) -> str:
        """Return the report summary text (quit count, severity and id tables)."""
        with self.lock:
            parts: list[str] = ["\n--- Report Summary ---\n\n"]
            max_quit: int = self._stats.max_quit_count
            if max_quit != 0:
                if self._stats.is_quit_count_reached():
                    parts.append("Quit count reached!\n")
                parts.append(f"Quit count : {self._stats.quit_count:5d} of {max_quit:5d}\n")

            parts.append("** Report counts by severity\n")
            for severity, count in self._stats.severity_counts().items():
                parts.append(f"{severity.name} :{count:5d}\n")

            if self.enable_id_summary:
                parts.append("** Report counts by id\n")
                for identifier, count in sorted(self._stats.id_counts().items()):
                    parts.append(f"[{identifier}] {count:5d}\n")
            return "".join(parts)

    def summarize(self, file: int = NO_SINK) -> None:
        """Report the catcher and server summaries through the pipeline.

        The summary is itself a report (``INFO``, verbosity ``LOW``), so it is
        subject to the catcher chain and counted like any other message.

        Args:
            file (int): Log handle to write the summary to; ``0`` displays it instead.
        """
        action: Action = Action.LOG if file != NO_SINK else Action.DISPLAY
        with self.lock:
            catcher_text: str | None = self.catchers.summary_text()
            if catcher_text is not None:
                self._report_self(
                    Severity.INFO,
                    ID_CATCHER_SUMMARY,
                    catcher_text,
                    verbosity=Verbosity.LOW,
                    action=action,
                    file=file,
                )
            self._report_self(
                Severity.INFO,
                ID_SUMMARY,
                self.summary_text(),
                verbosity=Verbosity.LOW,
                action=action,
                file=file,
            )

    def describe(self) -> str:
        """Return a table of the server state (counts, ceiling and flags)."""
        with self.lock:
            rows: list[tuple[str, str, str]] = [
                (self.name, type(self).__name__, "-"),
                ("  quit_count", "int", str(self._stats.quit_count)),
                ("  max_quit_count", "int", str(self._stats.max_quit_count)),
                ("  max_quit_overridable", "bit", str(int(self._stats.max_quit_overridable))),
            ]
            severity_counts: dict[Severity, int] = self._stats.severity_counts()
            rows.append(("  severity_count", "severity counts", str(len(severity_counts))))
            rows.extend((f"    [{s.name}]", "integral", str(c)) for s, c in severity_counts.items())
            id_counts: dict[str, int] = self._stats.id_counts()
            if id_counts:
                rows.append(("  id_count", "id counts", str(len(id_counts))))
                rows.extend((f"    [{i}]", "integral", str(c)) for i, c in id_counts.items())
            rows.extend(
                [
                    ("  enable_id_summary", "bit", str(int(self.enable_id_summary))),
                    ("  record_all_messages", "bit", str(int(self.record_all_messages))),
                    ("  show_verbosity", "bit", str(int(self.show_verbosity))),
                    ("  show_terminator", "bit", str(int(self.show_terminator))),
                ]
            )
            name_w: int = max(len(r[0]) for r in rows)
            type_w: int = max(len(r[1]) for r in rows)
            return "\n".join(f"{n:<{name_w}}  {t:<{type_w}}  {v}".rstrip() for n, t, v in rows)

    # ------------------ Merge ------------------

    def merge_from(self, other: ReportServer) -> None:
        """Merge ``other``'s statistics and quit-count configuration into this server.

        Counts are summed (never overwritten or removed). The ceiling is taken
        over from ``other`` unless this server's ceiling is locked. The message
        database is taken over if this server has none. Streams are not shared.
        """
        with other.lock, self.lock:
            self._stats.merge_counts(other._stats)
            if not self._stats.adopt_ceiling(other._stats.ceiling):
                logger.debug(
                    "%s keeps its locked max quit count %d",
                    self.name,
                    self._stats.max_quit_count,
                )
            if self._database is None:
                self._database = other._database

    def __repr__(self) -> str:
        return f"ReportServer(name={self.name!r}, stats={self._stats!r})"
