# topmark:header:start
#
#   project      : ReportServer
#   file         : sinks.py
#   file_relpath : src/reportserver/output/sinks.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""File sink handles for the ``LOG`` action.

A report message names its log destination with an integer handle. Two handle
shapes exist:

* **Descriptor handles** have bit 31 set and select exactly one destination:
  ``0x8000_0001`` is standard output, ``0x8000_0002`` standard error, higher
  numbers are files opened with ``multichannel=False``.
* **Multi-channel handles** have bit 31 clear; every set bit selects one
  channel. Bit 0 is standard output, bits 1..30 are files opened with
  ``multichannel=True``. Handles can be OR-ed to log to several files at once.

Handle ``0`` selects nothing.

When the same message is also displayed, the standard output destination is
dropped from its log handle (``mask_stdout=True``) so the text is not printed
twice; the remaining channels still receive it.
"""

from __future__ import annotations

import sys
from threading import RLock
from typing import TYPE_CHECKING, TextIO

from reportserver.config.logging import get_logger
from reportserver.constants import (
    FD_FLAG,
    MAX_CHANNELS,
    NO_SINK,
    STDERR_HANDLE,
    STDOUT_CHANNEL,
    STDOUT_HANDLE,
)

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from reportserver.config.logging import ReportServerLogger
    from reportserver.output.console import ConsoleLike

logger: ReportServerLogger = get_logger(__name__)


class FileSinkRegistry:
    """Registry of open log files addressed by integer handles.

    Args:
        console (ConsoleLike): Console receiving the standard output destination.
    """

    def __init__(self, console: ConsoleLike) -> None:
        self.console = console
        self._lock = RLock()
        self._files: dict[int, TextIO] = {}
        self._paths: dict[int, Path] = {}
        self._next_fd: int = 3

    def open(self, path: Path, *, multichannel: bool = True, append: bool = False) -> int:
        """Open ``path`` for writing and return its handle.

        Args:
            path (Path): File to open (parent directories are created).
            multichannel (bool): Return a multi-channel handle (a single bit) if True,
                a descriptor handle otherwise.
            append (bool): Append to an existing file instead of truncating it.

        Returns:
            int: The new handle.

        Raises:
            OSError: If all channels are in use or the file cannot be opened.
        """
        with self._lock:
            handle: int = self._allocate(multichannel)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._files[handle] = path.open("a" if append else "w", encoding="utf-8")
            self._paths[handle] = path
            logger.debug("Opened log sink %#x -> %s", handle, path)
            return handle

    def _allocate(self, multichannel: bool) -> int:
        if not multichannel:
            handle = FD_FLAG | self._next_fd
            self._next_fd += 1
            return handle
        for bit in range(1, MAX_CHANNELS):
            handle = 1 << bit
            if handle not in self._files:
                return handle
        raise OSError("No free multi-channel log handle")

    def path_of(self, handle: int) -> Path | None:
        """Return the file path behind ``handle`` (single-destination handles only)."""
        with self._lock:
            return self._paths.get(handle)

    def write(self, handle: int, text: str, *, mask_stdout: bool = False) -> int:
        """Write ``text`` (plus a newline) to every destination selected by ``handle``.

        Args:
            handle (int): Descriptor or multi-channel handle.
            text (str): Text to write.
            mask_stdout (bool): Skip the standard output destination.

        Returns:
            int: Number of destinations written.
        """
        if handle == NO_SINK:
            return 0
        with self._lock:
            if handle & FD_FLAG:
                return self._write_descriptor(handle, text, mask_stdout=mask_stdout)

            channels: int = handle & ~STDOUT_CHANNEL if mask_stdout else handle
            written = 0
            if channels & STDOUT_CHANNEL:
                self.console.print(text)
                written += 1
            for bit in range(1, MAX_CHANNELS):
                channel: int = 1 << bit
                if not channels & channel:
                    continue
                fh: TextIO | None = self._files.get(channel)
                if fh is None:
                    logger.warning("Log channel %#x is not open; output dropped", channel)
                    continue
                fh.write(text + "\n")
                written += 1
            return written

    def _write_descriptor(self, handle: int, text: str, *, mask_stdout: bool) -> int:
        if handle == STDOUT_HANDLE:
            if mask_stdout:
                return 0
            self.console.print(text)
            return 1
        if handle == STDERR_HANDLE:
            sys.stderr.write(text + "\n")
            return 1
        fh: TextIO | None = self._files.get(handle)
        if fh is None:
            logger.warning("Log handle %#x is not open; output dropped", handle)
            return 0
        fh.write(text + "\n")
        return 1

    def flush(self) -> None:
        """Flush every open file."""
        with self._lock:
            for fh in self._files.values():
                fh.flush()

    def close(self, handle: int) -> None:
        """Close the file behind ``handle`` (no-op for unknown handles)."""
        with self._lock:
            fh: TextIO | None = self._files.pop(handle, None)
            self._paths.pop(handle, None)
            if fh is not None:
                fh.close()
                logger.debug("Closed log sink %#x", handle)

    def close_all(self) -> None:
        """Close every open file."""
        with self._lock:
            for handle in list(self._files):
                self.close(handle)

    def __enter__(self) -> FileSinkRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close_all()
