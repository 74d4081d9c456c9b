# topmark:header:start
#
#   project      : ReportServer
#   file         : test_diagnostics.py
#   file_relpath : tests/config/test_diagnostics.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for configuration diagnostics and their triage summary."""

from __future__ import annotations

import pytest

from reportserver.cli.diagnostics import maybe_colorize, triage_text
from reportserver.core.diagnostics import (
    DiagnosticLevel,
    DiagnosticLog,
    DiagnosticStats,
    compute_diagnostic_stats,
)


def test_log_collects_in_order() -> None:
    log = DiagnosticLog()
    log.add_info("i")
    log.add_warning("w")
    log.add_error("e")
    assert [(d.level, d.message) for d in log] == [
        (DiagnosticLevel.INFO, "i"),
        (DiagnosticLevel.WARNING, "w"),
        (DiagnosticLevel.ERROR, "e"),
    ]
    assert len(log) == 3


def test_stats() -> None:
    log = DiagnosticLog()
    log.add_warning("a")
    log.add_warning("b")
    log.add_error("c")
    stats: DiagnosticStats = compute_diagnostic_stats(log.items)
    assert (stats.n_info, stats.n_warning, stats.n_error, stats.total) == (0, 2, 1, 3)


@pytest.mark.parametrize(
    ("stats", "expected"),
    [
        (DiagnosticStats(0, 2, 1), "1 error, 2 warnings"),
        (DiagnosticStats(3, 1, 0), "1 warning"),
        (DiagnosticStats(2, 0, 0), "2 infos"),
        (DiagnosticStats(0, 0, 0), "info"),
    ],
)
def test_triage_text(stats: DiagnosticStats, expected: str) -> None:
    assert triage_text(stats) == expected


def test_maybe_colorize() -> None:
    styler = DiagnosticLevel.WARNING.color
    assert maybe_colorize(styler, "[warning]", enabled=False) == "[warning]"
    assert "[warning]" in maybe_colorize(styler, "[warning]", enabled=True)
