# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/server/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Report server, its statistics, composer and shared services."""

from __future__ import annotations

from reportserver.server.composer import DisplayOptions, MessageComposer
from reportserver.server.report_server import ReportServer
from reportserver.server.services import (
    CoreServices,
    DefaultRunControl,
    ManualClock,
    RunControl,
)
from reportserver.server.statistics import Locked, StatisticsStore, Unlocked

__all__ = [
    "CoreServices",
    "DefaultRunControl",
    "DisplayOptions",
    "Locked",
    "ManualClock",
    "MessageComposer",
    "ReportServer",
    "RunControl",
    "StatisticsStore",
    "Unlocked",
]
