# topmark:header:start
#
#   project      : ReportServer
#   file         : database.py
#   file_relpath : src/reportserver/recording/database.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Transaction databases used to record report messages.

A database hands out named *streams*; a stream hands out *transactions*; a
transaction collects named fields until it is closed. The report server only
relies on the three protocols below, so any recording backend can be plugged in.

Provided backends:
    * `MemoryTransactionDatabase`: keeps everything in process (tests, default).
    * `JsonLinesTransactionDatabase`: appends one JSON object per closed
      transaction to a file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from itertools import count
from threading import RLock
from typing import TYPE_CHECKING, Any, Protocol

from reportserver.config.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from reportserver.config.logging import ReportServerLogger

logger: ReportServerLogger = get_logger(__name__)


class Transaction(Protocol):
    """One recorded item inside a stream."""

    def record_field(self, name: str, value: object) -> None:
        """Store one named field."""
        ...

    def close(self) -> None:
        """Finish the transaction; no fields may be recorded afterwards."""
        ...


class TransactionStream(Protocol):
    """Named group of transactions."""

    def open_transaction(self, name: str, timestamp: object, type_name: str) -> Transaction:
        """Open a new transaction in this stream."""
        ...


class TransactionDatabase(Protocol):
    """Factory of transaction streams."""

    def open_stream(self, name: str, scope: str, category: str) -> TransactionStream:
        """Open a new stream named ``name`` within ``scope``, tagged with ``category``."""
        ...


# ------------------ In-memory backend ------------------


@dataclass
class MemoryTransaction:
    """Transaction kept in memory."""

    handle: int
    name: str
    timestamp: object
    type_name: str
    fields: dict[str, object] = field(default_factory=lambda: {})
    closed: bool = False

    def record_field(self, name: str, value: object) -> None:
        """Store one named field.

        Raises:
            RuntimeError: If the transaction is already closed.
        """
        if self.closed:
            raise RuntimeError(f"Transaction {self.handle} ({self.name}) is closed")
        self.fields[name] = value

    def close(self) -> None:
        """Mark the transaction closed."""
        self.closed = True


@dataclass
class MemoryTransactionStream:
    """Stream kept in memory; transactions are listed in opening order."""

    name: str
    scope: str
    category: str
    _handles: count[int]
    transactions: list[MemoryTransaction] = field(default_factory=lambda: [])

    def open_transaction(self, name: str, timestamp: object, type_name: str) -> MemoryTransaction:
        """Open a new transaction in this stream."""
        tr = MemoryTransaction(next(self._handles), name, timestamp, type_name)
        self.transactions.append(tr)
        return tr


class MemoryTransactionDatabase:
    """In-process transaction database.

    Streams are listed in opening order; opening a stream twice with the same
    name creates two streams, exactly like a file-backed database would.
    """

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._lock = RLock()
        self._handles: count[int] = count(1)
        self.streams: list[MemoryTransactionStream] = []

    def open_stream(self, name: str, scope: str, category: str) -> MemoryTransactionStream:
        """Open a new stream."""
        with self._lock:
            stream = MemoryTransactionStream(name, scope, category, self._handles)
            self.streams.append(stream)
            logger.debug("Opened stream %s/%s (%s) in %s", scope, name, category, self.name)
            return stream

    def find_streams(self, name: str, scope: str) -> list[MemoryTransactionStream]:
        """Return all streams opened with ``name`` and ``scope``."""
        with self._lock:
            return [s for s in self.streams if s.name == name and s.scope == scope]

    def __repr__(self) -> str:
        return f"MemoryTransactionDatabase(name={self.name!r}, streams={len(self.streams)})"


# ------------------ JSON-lines backend ------------------


class JsonLinesTransaction:
    """Transaction written as one JSON line when closed."""

    def __init__(
        self,
        stream: JsonLinesTransactionStream,
        handle: int,
        name: str,
        timestamp: object,
        type_name: str,
    ) -> None:
        self._stream = stream
        self.handle = handle
        self.name = name
        self.timestamp = timestamp
        self.type_name = type_name
        self.fields: dict[str, object] = {}
        self.closed = False

    def record_field(self, name: str, value: object) -> None:
        """Store one named field.

        Raises:
            RuntimeError: If the transaction is already closed.
        """
        if self.closed:
            raise RuntimeError(f"Transaction {self.handle} ({self.name}) is closed")
        self.fields[name] = value

    def close(self) -> None:
        """Write the transaction to the database file."""
        if self.closed:
            return
        self.closed = True
        self._stream.database.write_record(
            {
                "stream": self._stream.name,
                "scope": self._stream.scope,
                "category": self._stream.category,
                "handle": self.handle,
                "name": self.name,
                "time": self.timestamp,
                "type": self.type_name,
                "fields": self.fields,
            }
        )


class JsonLinesTransactionStream:
    """Stream of a `JsonLinesTransactionDatabase`."""

    def __init__(
        self, database: JsonLinesTransactionDatabase, name: str, scope: str, category: str
    ) -> None:
        self.database = database
        self.name = name
        self.scope = scope
        self.category = category

    def open_transaction(
        self, name: str, timestamp: object, type_name: str
    ) -> JsonLinesTransaction:
        """Open a new transaction in this stream."""
        return JsonLinesTransaction(self, self.database.next_handle(), name, timestamp, type_name)


class JsonLinesTransactionDatabase:
    """Transaction database appending one JSON object per closed transaction.

    The file is truncated when the database is created; each closed transaction
    becomes one line. Values that are not JSON-native are written with ``str()``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = RLock()
        self._handles: count[int] = count(1)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
        logger.info("Recording report messages to %s", path)

    def next_handle(self) -> int:
        """Return the next transaction handle."""
        with self._lock:
            return next(self._handles)

    def open_stream(self, name: str, scope: str, category: str) -> JsonLinesTransactionStream:
        """Open a new stream."""
        logger.debug("Opened stream %s/%s (%s) in %s", scope, name, category, self.path)
        return JsonLinesTransactionStream(self, name, scope, category)

    def write_record(self, record: dict[str, Any]) -> None:
        """Append ``record`` as one JSON line."""
        line: str = json.dumps(record, default=str, ensure_ascii=False)
        with self._lock, self.path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    def __repr__(self) -> str:
        return f"JsonLinesTransactionDatabase(path={str(self.path)!r})"
