# topmark:header:start
#
#   project      : ReportServer
#   file         : test_statistics.py
#   file_relpath : tests/server/test_statistics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Unit tests for `StatisticsStore` and the quit-count ceiling states."""

from __future__ import annotations

import pytest

from reportserver.message.model import Severity
from reportserver.server.statistics import Locked, StatisticsStore, Unlocked, next_ceiling


def test_every_severity_has_a_counter_from_the_start() -> None:
    store = StatisticsStore()
    assert store.severity_set() == (
        Severity.INFO,
        Severity.WARNING,
        Severity.ERROR,
        Severity.FATAL,
    )
    assert all(count == 0 for count in store.severity_counts().values())


def test_id_counter_appears_on_first_increment() -> None:
    store = StatisticsStore()
    assert store.id_count("MEM/ECC") == 0
    assert store.id_set() == ()

    store.incr_id_count("MEM/ECC")
    store.incr_id_count("MEM/ECC")
    store.incr_id_count("BUS/TIMEOUT")

    assert store.id_count("MEM/ECC") == 2
    assert store.id_set() == ("MEM/ECC", "BUS/TIMEOUT")


@pytest.mark.parametrize("value", [-1, -100])
def test_setters_clamp_negative_counts(value: int) -> None:
    store = StatisticsStore()
    store.set_severity_count(Severity.ERROR, value)
    store.set_id_count("X", value)
    store.set_quit_count(value)
    assert store.severity_count(Severity.ERROR) == 0
    assert store.id_count("X") == 0
    assert store.quit_count == 0


def test_reset_severity_counts_keeps_ids() -> None:
    store = StatisticsStore()
    store.incr_severity_count(Severity.WARNING)
    store.incr_id_count("W")
    store.reset_severity_counts()
    assert store.severity_count(Severity.WARNING) == 0
    assert store.id_count("W") == 1


def test_ceiling_starts_unlocked_at_zero() -> None:
    store = StatisticsStore()
    assert store.ceiling == Unlocked(0)
    assert store.max_quit_count == 0
    assert store.max_quit_overridable is True


def test_locked_ceiling_rejects_later_requests() -> None:
    store = StatisticsStore()
    assert store.set_max_quit_count(5, overridable=False) is True
    assert store.set_max_quit_count(10, overridable=True) is False
    assert store.ceiling == Locked(5)
    assert store.max_quit_overridable is False


def test_unlocked_ceiling_accepts_changes_and_clamps() -> None:
    store = StatisticsStore()
    assert store.set_max_quit_count(3) is True
    assert store.set_max_quit_count(-4) is True
    assert store.max_quit_count == 0


def test_next_ceiling_transitions() -> None:
    assert next_ceiling(Unlocked(0), 2, True) == Unlocked(2)
    assert next_ceiling(Unlocked(2), 7, False) == Locked(7)
    assert next_ceiling(Locked(7), 1, True) is None


def test_quit_count_reached_uses_greater_or_equal() -> None:
    store = StatisticsStore()
    store.set_max_quit_count(2)
    store.incr_quit_count()
    assert store.is_quit_count_reached() is False
    store.incr_quit_count()
    assert store.is_quit_count_reached() is True
    store.incr_quit_count()
    assert store.is_quit_count_reached() is True


def test_merge_counts_sums_everything() -> None:
    old = StatisticsStore()
    old.incr_severity_count(Severity.ERROR)
    old.incr_severity_count(Severity.ERROR)
    old.incr_id_count("A")
    old.incr_quit_count()

    new = StatisticsStore()
    new.incr_severity_count(Severity.ERROR)
    new.incr_id_count("A")
    new.incr_id_count("B")

    new.merge_counts(old)

    assert new.severity_count(Severity.ERROR) == 3
    assert new.id_counts() == {"A": 2, "B": 1}
    assert new.quit_count == 1


def test_adopt_ceiling_respects_local_lock() -> None:
    store = StatisticsStore()
    assert store.adopt_ceiling(Locked(4)) is True
    assert store.ceiling == Locked(4)
    assert store.adopt_ceiling(Unlocked(9)) is False
    assert store.max_quit_count == 4
