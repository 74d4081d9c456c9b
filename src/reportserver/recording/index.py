# topmark:header:start
#
#   project      : ReportServer
#   file         : index.py
#   file_relpath : src/reportserver/recording/index.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Per-producer stream index.

The index maps a producer key ``(object_name, handler_name)`` to the stream the
producer's messages are recorded into. A stream is opened at most once per key,
the first time it is needed, and is kept for the lifetime of the index.

The index does not lock: its owner (the report server) calls `get_or_open`
inside its own critical section, so lookup and creation happen in one step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reportserver.config.logging import get_logger
from reportserver.constants import MESSAGES_CATEGORY

if TYPE_CHECKING:
    from collections.abc import Iterator

    from reportserver.config.logging import ReportServerLogger
    from reportserver.recording.database import TransactionDatabase, TransactionStream

logger: ReportServerLogger = get_logger(__name__)

StreamKey = tuple[str, str]


class RecordingIndex:
    """Lazily populated mapping of producer key to open stream."""

    def __init__(self) -> None:
        self._streams: dict[StreamKey, TransactionStream] = {}

    def get(self, key: StreamKey) -> TransactionStream | None:
        """Return the stream for ``key``, or None if none was opened yet."""
        return self._streams.get(key)

    def get_or_open(
        self,
        key: StreamKey,
        database: TransactionDatabase | None,
    ) -> TransactionStream | None:
        """Return the stream for ``key``, opening it in ``database`` on first use.

        Args:
            key (StreamKey): ``(object_name, handler_name)`` of the producer.
            database (TransactionDatabase | None): Database to open the stream in
                when the key has none yet.

        Returns:
            TransactionStream | None: The stream, or None when the key has no
            stream and no database is available.
        """
        stream: TransactionStream | None = self._streams.get(key)
        if stream is not None:
            return stream
        if database is None:
            logger.trace("No transaction database for %s/%s; recording skipped", *key)
            return None

        object_name, handler_name = key
        stream = database.open_stream(object_name, handler_name, MESSAGES_CATEGORY)
        self._streams[key] = stream
        logger.debug("Opened recording stream for %s/%s", object_name, handler_name)
        return stream

    def keys(self) -> tuple[StreamKey, ...]:
        """Return the keys that have an open stream, in opening order."""
        return tuple(self._streams)

    def __contains__(self, key: object) -> bool:
        return key in self._streams

    def __iter__(self) -> Iterator[StreamKey]:
        return iter(tuple(self._streams))

    def __len__(self) -> int:
        return len(self._streams)
