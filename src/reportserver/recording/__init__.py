# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/recording/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Message recording: transaction databases and the per-producer stream index."""

from __future__ import annotations

from reportserver.recording.database import (
    JsonLinesTransactionDatabase,
    MemoryTransactionDatabase,
    Transaction,
    TransactionDatabase,
    TransactionStream,
)
from reportserver.recording.index import RecordingIndex

__all__ = [
    "JsonLinesTransactionDatabase",
    "MemoryTransactionDatabase",
    "RecordingIndex",
    "Transaction",
    "TransactionDatabase",
    "TransactionStream",
]
