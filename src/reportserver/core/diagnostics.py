# topmark:header:start
#
#   project      : ReportServer
#   file         : diagnostics.py
#   file_relpath : src/reportserver/core/diagnostics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostics collected while loading configuration.

These are notes about the tool's own inputs (an unknown key, a value of the
wrong type). They are distinct from the report messages the server processes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import cast

from yachalk import chalk


class DiagnosticLevel(Enum):
    """Severity levels for configuration diagnostics.

    Ordered by importance: ERROR > WARNING > INFO.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> Callable[[str], str]:
        """Return the `yachalk` color function associated with this level.

        Returns:
            Callable[[str], str]: The `yachalk` color function associated with this level.
        """
        return cast(
            "Callable[[str], str]",
            {
                DiagnosticLevel.INFO: chalk.blue,
                DiagnosticLevel.WARNING: chalk.yellow,
                DiagnosticLevel.ERROR: chalk.red_bright,
            }[self],
        )


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic with a level and a message."""

    level: DiagnosticLevel
    message: str


@dataclass
class DiagnosticLog:
    """Append-only list of diagnostics."""

    items: list[Diagnostic] = field(default_factory=list)

    def add(self, level: DiagnosticLevel, message: str) -> None:
        """Append a diagnostic."""
        self.items.append(Diagnostic(level, message))

    def add_info(self, message: str) -> None:
        """Append an INFO diagnostic."""
        self.add(DiagnosticLevel.INFO, message)

    def add_warning(self, message: str) -> None:
        """Append a WARNING diagnostic."""
        self.add(DiagnosticLevel.WARNING, message)

    def add_error(self, message: str) -> None:
        """Append an ERROR diagnostic."""
        self.add(DiagnosticLevel.ERROR, message)

    def extend(self, other: Sequence[Diagnostic]) -> None:
        """Append every diagnostic of ``other``."""
        self.items.extend(other)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class DiagnosticStats:
    """Aggregated counts for diagnostics by level."""

    n_info: int
    n_warning: int
    n_error: int

    @property
    def total(self) -> int:
        """Return the total count of diagnostics."""
        return self.n_info + self.n_warning + self.n_error


def compute_diagnostic_stats(diags: Sequence[Diagnostic]) -> DiagnosticStats:
    """Return per-level counts for a sequence of diagnostics."""
    n_info: int = sum(1 for d in diags if d.level == DiagnosticLevel.INFO)
    n_warn: int = sum(1 for d in diags if d.level == DiagnosticLevel.WARNING)
    n_err: int = sum(1 for d in diags if d.level == DiagnosticLevel.ERROR)
    return DiagnosticStats(n_info=n_info, n_warning=n_warn, n_error=n_err)
