# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/message/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Report message primitives.

Design:
    - A report is represented by an immutable `ReportMessage`.
    - Actions are an `Action` flag mask; severities an ordered `Severity`.
    - Structured sub-fields live in an `ElementContainer`.

Serialization to and from plain mappings (JSON lines) lives in
[`reportserver.message.io`][reportserver.message.io].
"""

from __future__ import annotations

from reportserver.message.model import (
    Action,
    ElementContainer,
    ProducerIdentity,
    ReportElement,
    ReportMessage,
    Severity,
    Verbosity,
)

__all__ = [
    "Action",
    "ElementContainer",
    "ProducerIdentity",
    "ReportElement",
    "ReportMessage",
    "Severity",
    "Verbosity",
]
