# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/output/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Output sinks for composed report text (console and file handles)."""

from __future__ import annotations

from reportserver.output.console import ClickConsole, ConsoleLike
from reportserver.output.sinks import FileSinkRegistry

__all__ = [
    "ClickConsole",
    "ConsoleLike",
    "FileSinkRegistry",
]
