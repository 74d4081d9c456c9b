# topmark:header:start
#
#   project      : ReportServer
#   file         : services.py
#   file_relpath : src/reportserver/server/services.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core services shared by report servers.

`CoreServices` is the explicit context object that report servers and their
callers share instead of reaching for process-wide globals. It owns:

    * the *current server* slot (`report_server` / `install_server`),
    * the default transaction database used when a server has none of its own,
    * the run control (graceful shutdown and engine halt hooks),
    * the engine clock used to time-stamp messages,
    * the console and the log file sinks.

Server replacement:
    `install_server` merges the previous server's statistics and quit-count
    configuration into the new server while holding both servers' locks, and
    only then publishes the new server. No message can be processed by either
    server in between.
"""

from __future__ import annotations

from threading import RLock
from typing import TYPE_CHECKING, Protocol

from reportserver.config.logging import get_logger
from reportserver.errors import EngineHalted, RunTerminated
from reportserver.output.console import ClickConsole
from reportserver.output.sinks import FileSinkRegistry
from reportserver.recording.database import MemoryTransactionDatabase

if TYPE_CHECKING:
    from collections.abc import Callable

    from reportserver.config.logging import ReportServerLogger
    from reportserver.message.model import ReportMessage
    from reportserver.output.console import ConsoleLike
    from reportserver.recording.database import TransactionDatabase
    from reportserver.server.report_server import ReportServer

logger: ReportServerLogger = get_logger(__name__)


class RunControl(Protocol):
    """Termination hooks of the surrounding run.

    The two paths are distinct: a graceful shutdown runs teardown (including the
    report summary) before the run ends; an engine halt stops immediately.
    """

    def graceful_shutdown(self, server: ReportServer, message: ReportMessage) -> None:
        """End the run after teardown."""
        ...

    def engine_halt(self, server: ReportServer, message: ReportMessage) -> None:
        """Halt the execution engine immediately, without teardown."""
        ...


class DefaultRunControl:
    """Run control that ends the run by raising `RunTermination` exceptions.

    Teardown callbacks registered with `add_teardown` run (in registration
    order) before the report summary on a graceful shutdown.
    """

    def __init__(self, *, summarize: bool = True) -> None:
        self.summarize = summarize
        self._teardown: list[Callable[[], None]] = []

    def add_teardown(self, callback: Callable[[], None]) -> None:
        """Register a callback to run on graceful shutdown."""
        self._teardown.append(callback)

    def graceful_shutdown(self, server: ReportServer, message: ReportMessage) -> None:
        """Run teardown and the report summary, then raise `RunTerminated`.

        Raises:
            RunTerminated: Always.
        """
        logger.info("Graceful shutdown requested by [%s]", message.identifier)
        for callback in self._teardown:
            callback()
        if self.summarize:
            server.summarize()
        raise RunTerminated(f"Run ended by report [{message.identifier}]", message)

    def engine_halt(self, server: ReportServer, message: ReportMessage) -> None:
        """Raise `EngineHalted` without running teardown.

        Raises:
            EngineHalted: Always.
        """
        logger.info("Engine halt requested by [%s]", message.identifier)
        raise EngineHalted(f"Engine halted by report [{message.identifier}]", message)


class ManualClock:
    """Engine clock whose time is set by the caller.

    Calling the clock returns the current time. Simulated time representation
    is left to the caller; any value with a useful ``str()`` works.
    """

    def __init__(self, now: object = 0) -> None:
        self.now: object = now

    def __call__(self) -> object:
        return self.now

    def set(self, now: object) -> None:
        """Set the current time."""
        self.now = now

    def advance(self, delta: int) -> None:
        """Advance a numeric clock by ``delta``.

        Raises:
            TypeError: If the current time is not an int.
        """
        if not isinstance(self.now, int):
            raise TypeError(f"Cannot advance a non-numeric time {self.now!r}")
        self.now += delta


class CoreServices:
    """Explicit service context shared by report servers.

    Args:
        default_database (TransactionDatabase | None): Database used by servers that
            have none configured. ``None`` disables recording for such servers.
        run_control (RunControl | None): Termination hooks; defaults to `DefaultRunControl`.
        clock (Callable[[], object] | None): Engine clock; defaults to a `ManualClock` at 0.
        console (ConsoleLike | None): Console for displayed reports; defaults to `ClickConsole`.
    """

    def __init__(
        self,
        *,
        default_database: TransactionDatabase | None = None,
        run_control: RunControl | None = None,
        clock: Callable[[], object] | None = None,
        console: ConsoleLike | None = None,
    ) -> None:
        self._lock = RLock()
        self._server: ReportServer | None = None
        self.default_database: TransactionDatabase | None = default_database
        self.run_control: RunControl = run_control or DefaultRunControl()
        self.clock: Callable[[], object] = clock or ManualClock()
        self.console: ConsoleLike = console or ClickConsole(enable_color=False)
        self.sinks: FileSinkRegistry = FileSinkRegistry(self.console)

    @classmethod
    def with_memory_database(cls, **kwargs: object) -> CoreServices:
        """Create services whose default database is a fresh `MemoryTransactionDatabase`."""
        return cls(default_database=MemoryTransactionDatabase(), **kwargs)  # type: ignore[arg-type]

    @property
    def report_server(self) -> ReportServer:
        """Return the current report server, creating a default one on first use.

        Once a server is published this does not take the services lock, so a
        producer holding a server lock can read it while `install_server` waits.
        """
        server: ReportServer | None = self._server
        if server is not None:
            return server
        with self._lock:
            if self._server is None:
                from reportserver.server.report_server import ReportServer

                self._server = ReportServer(services=self)
                logger.debug("Created default report server %s", self._server.name)
            return self._server

    def install_server(self, server: ReportServer) -> ReportServer:
        """Make ``server`` the current report server.

        The current server's counts and quit-count configuration are merged into
        ``server`` before it is published. Returns the previously installed server
        (which is created first if none existed).

        Args:
            server (ReportServer): The replacement server.

        Returns:
            ReportServer: The server that was replaced.
        """
        with self._lock:
            previous: ReportServer = self.report_server
            if previous is server:
                return previous
            with previous.lock, server.lock:
                server.merge_from(previous)
                self._server = server
            logger.info("Installed report server %s (replaces %s)", server.name, previous.name)
            return previous
