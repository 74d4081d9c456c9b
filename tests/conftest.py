# topmark:header:start
#
#   project      : ReportServer
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the ReportServer test suite.

Shared fixtures build a report server wired to in-memory collaborators:

    - `RecordingConsole` keeps every printed line instead of writing to stdout.
    - `RecordingRunControl` records shutdown and halt requests instead of
      ending the run, so tests can keep processing after an ``EXIT``.
    - The services' default database is a `MemoryTransactionDatabase`.

Tests that need the real termination behavior build a `DefaultRunControl`
themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest

from reportserver.config import logging
from reportserver.message.model import (
    Action,
    ProducerIdentity,
    ReportMessage,
    Severity,
    Verbosity,
)
from reportserver.recording.database import MemoryTransactionDatabase
from reportserver.server.report_server import ReportServer
from reportserver.server.services import CoreServices, ManualClock

if TYPE_CHECKING:
    from reportserver.recording.database import TransactionDatabase

F = TypeVar("F", bound=Callable[..., object])


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""

    def _decorator(func: F) -> F:
        return cast("F", pytest.hookimpl(*args, **kwargs)(func))

    return _decorator


class RecordingConsole:
    """Console double that records output lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.errors: list[str] = []

    def print(self, text: str = "", *, nl: bool = True) -> None:
        self.lines.append(text)

    def warn(self, text: str, *, nl: bool = True) -> None:
        self.errors.append(text)

    def error(self, text: str, *, nl: bool = True) -> None:
        self.errors.append(text)

    def styled(self, text: str, **style_kwargs: Any) -> str:
        return text

    @property
    def text(self) -> str:
        """All printed lines joined with newlines."""
        return "\n".join(self.lines)


class RecordingRunControl:
    """Run control double that records requests without ending the run."""

    def __init__(self) -> None:
        self.shutdowns: list[str] = []
        self.halts: list[str] = []

    def graceful_shutdown(self, server: ReportServer, message: ReportMessage) -> None:
        self.shutdowns.append(message.identifier)

    def engine_halt(self, server: ReportServer, message: ReportMessage) -> None:
        self.halts.append(message.identifier)


AGENT = ProducerIdentity("agent", "reporter", "top.env.agent")


def make_message(
    severity: Severity = Severity.INFO,
    identifier: str = "ID0",
    body: str = "Message 0",
    *,
    producer: ProducerIdentity = AGENT,
    action: Action | None = None,
    verbosity: int = Verbosity.MEDIUM,
    **kwargs: Any,
) -> ReportMessage:
    """Build a message from ``AGENT`` with the severity's default action unless given."""
    return ReportMessage.build(
        severity,
        identifier,
        body,
        producer=producer,
        action=action,
        verbosity=verbosity,
        **kwargs,
    )


def make_server(
    *,
    database: TransactionDatabase | None = None,
    **kwargs: Any,
) -> tuple[ReportServer, RecordingConsole, RecordingRunControl]:
    """Build a standalone server with recording doubles (usable outside fixtures)."""
    console = RecordingConsole()
    run_control = RecordingRunControl()
    services = CoreServices(
        default_database=database,
        run_control=run_control,
        clock=ManualClock(0),
        console=console,
    )
    return ReportServer(services=services, **kwargs), console, run_control


@pytest.fixture(autouse=True)
def silence_reportserver_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the runtime log level is not forced via env during tests."""
    monkeypatch.delenv(logging.LOG_LEVEL_ENV, raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    """Log at TRACE level so every logging call path is exercised."""
    logging.setup_logging(level=logging.TRACE_LEVEL)


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def run_control() -> RecordingRunControl:
    return RecordingRunControl()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(0)


@pytest.fixture
def database() -> MemoryTransactionDatabase:
    return MemoryTransactionDatabase()


@pytest.fixture
def services(
    console: RecordingConsole,
    run_control: RecordingRunControl,
    clock: ManualClock,
    database: MemoryTransactionDatabase,
) -> CoreServices:
    return CoreServices(
        default_database=database,
        run_control=run_control,
        clock=clock,
        console=console,
    )


@pytest.fixture
def server(services: CoreServices) -> ReportServer:
    return ReportServer(services=services)
