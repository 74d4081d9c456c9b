# topmark:header:start
#
#   project      : ReportServer
#   file         : errors.py
#   file_relpath : src/reportserver/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions raised by the ReportServer library.

Usage:
    Library code raises these exceptions; the CLI maps them onto exit codes
    (see `reportserver.cli.errors`). Run termination is modelled as an
    exception hierarchy of its own so callers can tell an intentional end of
    the run from a failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reportserver.message.model import ReportMessage


class ReportServerError(Exception):
    """Base class for all ReportServer errors."""


class ConfigError(ReportServerError):
    """Raised when a configuration source cannot be read or parsed."""


class MessageFormatError(ReportServerError):
    """Raised when a serialized report message record is malformed."""


class RunTermination(Exception):  # noqa: N818 - termination signal, not an error
    """Base class for the intentional end of a run requested by a report.

    Attributes:
        message (ReportMessage | None): The report whose actions ended the run.
    """

    def __init__(self, reason: str, message: ReportMessage | None = None) -> None:
        super().__init__(reason)
        self.message = message


class RunTerminated(RunTermination):
    """Raised after a graceful shutdown (teardown and summary have run)."""


class EngineHalted(RunTermination):
    """Raised when the execution engine is halted immediately, without teardown."""
