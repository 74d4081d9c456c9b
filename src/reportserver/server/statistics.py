# topmark:header:start
#
#   project      : ReportServer
#   file         : statistics.py
#   file_relpath : src/reportserver/server/statistics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Report statistics and the quit-count protocol.

Sections:
    * Unlocked / Locked: the two states of the quit-count ceiling.
    * StatisticsStore: per-severity and per-id counters plus quit-count state.

The quit-count ceiling is a one-way lockable setting. While `Unlocked`, any
call may change the ceiling and may lock it; once `Locked`, every change is
rejected. A ceiling of 0 means "no ceiling".

Counters never go negative: setters clamp negative values to 0.

Thread safety:
    `StatisticsStore` does not lock. Its owner (the report server) serializes
    every access, so read-modify-write sequences spanning several calls (e.g.
    increment then test the ceiling) stay atomic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from reportserver.config.logging import get_logger
from reportserver.message.model import Severity

if TYPE_CHECKING:
    from reportserver.config.logging import ReportServerLogger

logger: ReportServerLogger = get_logger(__name__)


@dataclass(frozen=True)
class Unlocked:
    """Ceiling that later calls may still change."""

    ceiling: int = 0

    overridable: ClassVar[bool] = True


@dataclass(frozen=True)
class Locked:
    """Ceiling frozen by a call with ``overridable=False``."""

    ceiling: int

    overridable: ClassVar[bool] = False


QuitCeiling = Unlocked | Locked


def next_ceiling(state: QuitCeiling, count: int, overridable: bool) -> QuitCeiling | None:
    """Return the state after a ``set_max_quit_count(count, overridable)`` request.

    Args:
        state (QuitCeiling): Current state.
        count (int): Requested ceiling; negative values clamp to 0.
        overridable (bool): Whether later requests may still change the ceiling.

    Returns:
        QuitCeiling | None: The new state, or None if ``state`` is locked.
    """
    if isinstance(state, Locked):
        return None
    ceiling: int = max(count, 0)
    return Unlocked(ceiling) if overridable else Locked(ceiling)


def _clamp(count: int) -> int:
    return count if count > 0 else 0


class StatisticsStore:
    """Occurrence counters of processed report messages.

    Every severity has a counter from construction on; id counters appear on
    first use. Neither is ever removed.
    """

    def __init__(self) -> None:
        self._severity_count: dict[Severity, int] = {s: 0 for s in Severity}
        self._id_count: dict[str, int] = {}
        self._quit_count: int = 0
        self._ceiling: QuitCeiling = Unlocked(0)

    # --- Severity counts ---

    def severity_count(self, severity: Severity) -> int:
        """Return the number of messages counted for ``severity``."""
        return self._severity_count[severity]

    def set_severity_count(self, severity: Severity, count: int) -> None:
        """Set the counter of ``severity`` (negative values clamp to 0)."""
        self._severity_count[severity] = _clamp(count)

    def incr_severity_count(self, severity: Severity) -> None:
        """Count one more message of ``severity``."""
        self._severity_count[severity] += 1

    def reset_severity_counts(self) -> None:
        """Set every severity counter back to 0."""
        for severity in Severity:
            self._severity_count[severity] = 0

    def severity_set(self) -> tuple[Severity, ...]:
        """Return the severities that have a counter (all of them, in order)."""
        return tuple(self._severity_count)

    def severity_counts(self) -> dict[Severity, int]:
        """Return a copy of the severity counters."""
        return dict(self._severity_count)

    # --- Id counts ---

    def id_count(self, identifier: str) -> int:
        """Return the number of messages counted for ``identifier`` (0 if never seen)."""
        return self._id_count.get(identifier, 0)

    def set_id_count(self, identifier: str, count: int) -> None:
        """Set the counter of ``identifier`` (negative values clamp to 0)."""
        self._id_count[identifier] = _clamp(count)

    def incr_id_count(self, identifier: str) -> None:
        """Count one more message with ``identifier``."""
        self._id_count[identifier] = self._id_count.get(identifier, 0) + 1

    def id_set(self) -> tuple[str, ...]:
        """Return the ids seen so far, in first-seen order."""
        return tuple(self._id_count)

    def id_counts(self) -> dict[str, int]:
        """Return a copy of the id counters."""
        return dict(self._id_count)

    # --- Quit count ---

    @property
    def quit_count(self) -> int:
        """Number of ``COUNT`` actions observed while a ceiling was set."""
        return self._quit_count

    def set_quit_count(self, count: int) -> None:
        """Set the quit count (negative values clamp to 0)."""
        self._quit_count = _clamp(count)

    def incr_quit_count(self) -> None:
        """Count one more ``COUNT`` action."""
        self._quit_count += 1

    def reset_quit_count(self) -> None:
        """Set the quit count back to 0."""
        self._quit_count = 0

    @property
    def ceiling(self) -> QuitCeiling:
        """Current quit-count ceiling state."""
        return self._ceiling

    @property
    def max_quit_count(self) -> int:
        """Current ceiling (0 = unlimited)."""
        return self._ceiling.ceiling

    @property
    def max_quit_overridable(self) -> bool:
        """Whether the ceiling may still be changed."""
        return self._ceiling.overridable

    def set_max_quit_count(self, count: int, overridable: bool = True) -> bool:
        """Request a new ceiling.

        Args:
            count (int): New ceiling; negative values clamp to 0.
            overridable (bool): If False, lock the ceiling against later changes.

        Returns:
            bool: True if the ceiling was changed, False if it is locked.
        """
        state: QuitCeiling | None = next_ceiling(self._ceiling, count, overridable)
        if state is None:
            logger.debug(
                "Max quit count %d is locked; request for %d rejected",
                self._ceiling.ceiling,
                count,
            )
            return False
        self._ceiling = state
        return True

    def adopt_ceiling(self, state: QuitCeiling) -> bool:
        """Take over another store's ceiling state unless this one is locked."""
        if isinstance(self._ceiling, Locked):
            return False
        self._ceiling = state
        return True

    def is_quit_count_reached(self) -> bool:
        """Return True when the quit count has reached the ceiling."""
        return self._quit_count >= self._ceiling.ceiling

    # --- Merge ---

    def merge_counts(self, other: StatisticsStore) -> None:
        """Add ``other``'s severity, id and quit counts to this store's counts."""
        for severity, count in other._severity_count.items():
            self._severity_count[severity] += count
        for identifier, count in other._id_count.items():
            self._id_count[identifier] = self._id_count.get(identifier, 0) + count
        self._quit_count += other._quit_count

    def __repr__(self) -> str:
        severities: str = ", ".join(f"{s.name}={c}" for s, c in self._severity_count.items())
        return (
            f"StatisticsStore(quit_count={self._quit_count}, ceiling={self._ceiling!r}, "
            f"severity_count=[{severities}], ids={len(self._id_count)})"
        )
