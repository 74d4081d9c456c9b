# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer package.

ReportServer is the diagnostic report-processing pipeline of a verification run.
It takes structured report messages, runs them through a catcher chain, composes
them into text and dispatches their actions (display, log, record, count, exit,
stop) while keeping per-severity and per-id statistics.

The stable entry points are re-exported here; see the subpackages for details.
"""

from __future__ import annotations

from reportserver.catcher import CatcherChain, ReportCatcher
from reportserver.errors import (
    ConfigError,
    EngineHalted,
    MessageFormatError,
    ReportServerError,
    RunTerminated,
    RunTermination,
)
from reportserver.message import (
    Action,
    ElementContainer,
    ProducerIdentity,
    ReportMessage,
    Severity,
    Verbosity,
)
from reportserver.recording import (
    JsonLinesTransactionDatabase,
    MemoryTransactionDatabase,
    RecordingIndex,
)
from reportserver.server import (
    CoreServices,
    DefaultRunControl,
    MessageComposer,
    ReportServer,
    StatisticsStore,
)

__all__ = [
    "Action",
    "CatcherChain",
    "ConfigError",
    "CoreServices",
    "DefaultRunControl",
    "ElementContainer",
    "EngineHalted",
    "JsonLinesTransactionDatabase",
    "MemoryTransactionDatabase",
    "MessageComposer",
    "MessageFormatError",
    "ProducerIdentity",
    "RecordingIndex",
    "ReportCatcher",
    "ReportMessage",
    "ReportServer",
    "ReportServerError",
    "RunTerminated",
    "RunTermination",
    "Severity",
    "StatisticsStore",
    "Verbosity",
]
