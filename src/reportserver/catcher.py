# topmark:header:start
#
#   project      : ReportServer
#   file         : catcher.py
#   file_relpath : src/reportserver/catcher.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Report catcher chain.

A catcher is any callable that receives a `ReportMessage` and returns either a
(possibly modified) message to keep it flowing, or ``None`` to catch it. The
decision logic belongs to the catchers themselves; the chain only runs them in
order and keeps tallies for the end-of-run summary.

Typical usage:

    chain = CatcherChain()
    chain.add(lambda m: None if m.identifier == "NOISY" else m)
    kept = chain.process_all(message)
"""

from __future__ import annotations

from threading import RLock
from typing import TYPE_CHECKING, Protocol

from reportserver.config.logging import get_logger
from reportserver.message.model import Severity

if TYPE_CHECKING:
    from reportserver.config.logging import ReportServerLogger
    from reportserver.message.model import ReportMessage

logger: ReportServerLogger = get_logger(__name__)


class ReportCatcher(Protocol):
    """Structural interface of a report catcher."""

    def __call__(self, message: ReportMessage) -> ReportMessage | None:
        """Return the message to keep processing it, or None to catch it."""
        ...


class CatcherChain:
    """Ordered chain of report catchers.

    Catchers run in registration order; the first catcher that returns ``None``
    stops the chain. Each catcher sees the message returned by the previous one.

    Attributes:
        caught_count (int): Number of messages suppressed by a catcher.
        demoted_counts (dict[Severity, int]): Per original severity, the number of
            messages a catcher returned with a lower severity.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._catchers: list[ReportCatcher] = []
        self.caught_count: int = 0
        self.demoted_counts: dict[Severity, int] = {}

    def add(self, catcher: ReportCatcher) -> None:
        """Append ``catcher`` to the chain."""
        with self._lock:
            self._catchers.append(catcher)

    def remove(self, catcher: ReportCatcher) -> None:
        """Remove ``catcher`` from the chain (no-op when absent)."""
        with self._lock:
            if catcher in self._catchers:
                self._catchers.remove(catcher)

    def __len__(self) -> int:
        with self._lock:
            return len(self._catchers)

    def process_all(self, message: ReportMessage) -> ReportMessage | None:
        """Run ``message`` through every catcher.

        Args:
            message (ReportMessage): The message as produced.

        Returns:
            ReportMessage | None: The message to process (possibly modified), or
            ``None`` if a catcher caught it.
        """
        with self._lock:
            catchers: tuple[ReportCatcher, ...] = tuple(self._catchers)

        current: ReportMessage = message
        for catcher in catchers:
            result: ReportMessage | None = catcher(current)
            if result is None:
                logger.debug("Report [%s] caught by %r", current.identifier, catcher)
                with self._lock:
                    self.caught_count += 1
                return None
            current = result

        if current.severity < message.severity:
            logger.trace(
                "Report [%s] demoted from %s to %s",
                message.identifier,
                message.severity.name,
                current.severity.name,
            )
            with self._lock:
                self.demoted_counts[message.severity] = (
                    self.demoted_counts.get(message.severity, 0) + 1
                )
        return current

    def summary_text(self) -> str | None:
        """Return the catcher summary, or None when no catcher intervened."""
        with self._lock:
            if not self.caught_count and not self.demoted_counts:
                return None
            lines: list[str] = ["\n--- Report catcher Summary ---\n\n"]
            for severity in (Severity.FATAL, Severity.ERROR, Severity.WARNING):
                count: int = self.demoted_counts.get(severity, 0)
                if count:
                    lines.append(f"Number of demoted {severity.name} reports  :{count:5d}\n")
            if self.caught_count:
                lines.append(f"Number of caught reports  :{self.caught_count:5d}\n")
            return "".join(lines)
