# topmark:header:start
#
#   project      : ReportServer
#   file         : io.py
#   file_relpath : src/reportserver/message/io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Serialize report messages to and from plain mappings.

The mapping shape is the one used by JSON-lines replay files:

    {"severity": "ERROR", "id": "MEM/ECC", "message": "bad parity",
     "producer": "env.agent", "handler": "reporter", "full_name": "top.env.agent",
     "verbosity": 200, "filename": "agent.sv", "line": 42, "context": "",
     "action": "DISPLAY|COUNT", "file": 0, "time": 120,
     "elements": {"addr": "0x40"}}

Only ``severity``, ``id`` and ``message`` are required. A missing ``action``
falls back to the severity's default action.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from reportserver.config.logging import get_logger
from reportserver.constants import NO_SINK
from reportserver.errors import MessageFormatError
from reportserver.message.model import (
    Action,
    ElementContainer,
    ProducerIdentity,
    ReportMessage,
    Severity,
    Verbosity,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import Path

    from reportserver.config.logging import ReportServerLogger

logger: ReportServerLogger = get_logger(__name__)

REQUIRED_KEYS: tuple[str, ...] = ("severity", "id", "message")


def _get_int(record: Mapping[str, Any], key: str, default: int) -> int:
    value: Any = record.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MessageFormatError(f"{key!r} must be an integer, got {value!r}")
    return value


def _get_str(record: Mapping[str, Any], key: str, default: str = "") -> str:
    value: Any = record.get(key, default)
    if not isinstance(value, str):
        raise MessageFormatError(f"{key!r} must be a string, got {value!r}")
    return value


def message_from_mapping(record: Mapping[str, Any]) -> ReportMessage:
    """Build a `ReportMessage` from a plain mapping.

    Args:
        record (Mapping[str, Any]): Decoded record (e.g. one JSON line).

    Returns:
        ReportMessage: The decoded message.

    Raises:
        MessageFormatError: If a required key is missing or a value has the wrong shape.
    """
    missing: list[str] = [k for k in REQUIRED_KEYS if k not in record]
    if missing:
        raise MessageFormatError(f"Missing required key(s): {', '.join(missing)}")

    try:
        severity: Severity = Severity.parse(record["severity"])
        raw_action: Any = record.get("action")
        action: Action = (
            severity.default_action if raw_action is None else Action.parse(raw_action)
        )
    except (ValueError, TypeError, AttributeError) as exc:
        raise MessageFormatError(str(exc)) from exc

    raw_elements: Any = record.get("elements", {})
    if not isinstance(raw_elements, dict):
        raise MessageFormatError(f"'elements' must be a table, got {raw_elements!r}")

    producer = ProducerIdentity(
        object_name=_get_str(record, "producer"),
        handler_name=_get_str(record, "handler"),
        full_name=_get_str(record, "full_name"),
    )
    return ReportMessage(
        severity=severity,
        identifier=_get_str(record, "id"),
        body=_get_str(record, "message"),
        producer=producer,
        verbosity=_get_int(record, "verbosity", Verbosity.MEDIUM),
        filename=_get_str(record, "filename"),
        line=_get_int(record, "line", 0),
        context=_get_str(record, "context"),
        action=action,
        file=_get_int(record, "file", NO_SINK),
        elements=ElementContainer.from_mapping(raw_elements),
    )


def message_to_mapping(message: ReportMessage) -> dict[str, Any]:
    """Return the JSON-friendly mapping of ``message`` (inverse of `message_from_mapping`)."""
    return {
        "severity": message.severity.name,
        "id": message.identifier,
        "message": message.body,
        "producer": message.producer.object_name,
        "handler": message.producer.handler_name,
        "full_name": message.producer.full_name,
        "verbosity": message.verbosity,
        "filename": message.filename,
        "line": message.line,
        "context": message.context,
        "action": "|".join(message.action.names()),
        "file": message.file,
        "elements": {e.name: e.value for e in message.elements},
    }


def iter_jsonl_records(path: Path) -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield ``(line_number, record)`` for each non-blank line of a JSON-lines file.

    Raises:
        MessageFormatError: If a line is not valid UTF-8 or not a JSON object.
    """
    with path.open("rb") as fh:
        for lineno, raw in enumerate(fh, start=1):
            try:
                text: str = raw.decode("utf-8").strip()
            except UnicodeDecodeError as exc:
                raise MessageFormatError(
                    f"{path}:{lineno}: invalid UTF-8 at byte {exc.start}: {exc.reason}"
                ) from exc
            if not text or text.startswith("//"):
                continue
            try:
                record: Any = json.loads(text)
            except json.JSONDecodeError as exc:
                raise MessageFormatError(f"{path}:{lineno}: invalid JSON: {exc.msg}") from exc
            if not isinstance(record, dict):
                raise MessageFormatError(f"{path}:{lineno}: expected a JSON object")
            logger.trace("Read record %d from %s", lineno, path)
            yield lineno, record
