# topmark:header:start
#
#   project      : ReportServer
#   file         : model.py
#   file_relpath : src/reportserver/message/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Report message data model.

This module defines the record that flows through the report pipeline and the
small value types it is built from.

Sections:
    * Severity: ordered classification tier with its default actions.
    * Verbosity: named detail tiers for the opaque verbosity integer.
    * Action: independent flags controlling what the server does with a message.
    * ReportElement / ElementContainer: ordered key/value sub-fields of a message.
    * ProducerIdentity: the (object name, handler name) pair that produced a message.
    * ReportMessage: immutable event record.

Immutability:
    `ReportMessage` is frozen. Pipeline stages that change a message (a catcher
    demoting its severity, the server forcing ``RECORD`` or escalating ``COUNT``
    to ``EXIT``) return a new instance built with `dataclasses.replace`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import IntEnum, IntFlag
from typing import TYPE_CHECKING, cast

from reportserver.constants import NO_SINK
from reportserver.core.enum_mixins import enum_from_name

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reportserver.recording.database import Transaction


class Action(IntFlag):
    """Action bitmask of a report message.

    Flags are independent; any combination is legal. ``NO_ACTION`` means the
    message is dropped once accepted.
    """

    NO_ACTION = 0
    DISPLAY = 0x01
    LOG = 0x02
    COUNT = 0x04
    EXIT = 0x08
    CALL_HOOK = 0x10
    STOP = 0x20
    RECORD = 0x40

    @classmethod
    def parse(cls, raw: str | int | Iterable[str]) -> Action:
        """Parse an action mask from an int, a ``"DISPLAY|LOG"`` string or a list of names.

        Args:
            raw (str | int | Iterable[str]): The serialized action mask.

        Returns:
            Action: The parsed mask.

        Raises:
            ValueError: If a flag name is unknown.
        """
        if isinstance(raw, int):
            return cls(raw)
        names: Iterable[str] = raw.split("|") if isinstance(raw, str) else raw
        mask = cls.NO_ACTION
        for name in names:
            token = name.strip()
            if not token:
                continue
            member: Action | None = enum_from_name(cls, token, case_insensitive=True)
            if member is None:
                raise ValueError(f"Unknown action: {token!r}")
            mask |= member
        return mask

    def names(self) -> tuple[str, ...]:
        """Return the names of the flags set in this mask (``NO_ACTION`` when empty)."""
        if self == Action.NO_ACTION:
            return ("NO_ACTION",)
        return tuple(cast("str", flag.name) for flag in Action if flag and (self & flag) == flag)


class Severity(IntEnum):
    """Classification tier of a report message.

    Ordered ``INFO < WARNING < ERROR < FATAL``. The server only uses the order
    for presentation; catchers may use it for filtering.
    """

    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3

    @property
    def default_action(self) -> Action:
        """Return the action mask a reporter assigns to this severity by default."""
        if self is Severity.ERROR:
            return Action.DISPLAY | Action.COUNT
        if self is Severity.FATAL:
            return Action.DISPLAY | Action.EXIT
        return Action.DISPLAY

    @classmethod
    def parse(cls, raw: str | int) -> Severity:
        """Parse a severity from its name (case-insensitive) or its integer value.

        Raises:
            ValueError: If ``raw`` names no severity.
        """
        if isinstance(raw, int):
            return cls(raw)
        member: Severity | None = enum_from_name(cls, raw, case_insensitive=True)
        if member is None:
            raise ValueError(f"Unknown severity: {raw!r}")
        return member


class Verbosity(IntEnum):
    """Named verbosity tiers.

    A message carries an opaque integer; these names are used when the value
    matches a tier (e.g. when composing with ``show_verbosity``).
    """

    NONE = 0
    LOW = 100
    MEDIUM = 200
    HIGH = 300
    FULL = 400
    DEBUG = 500

    @classmethod
    def label(cls, value: int) -> str:
        """Return the tier name for ``value``, or the number itself when it names no tier."""
        try:
            return cls(value).name
        except ValueError:
            return str(value)


ELEMENT_DEFAULT_ACTION: Action = Action.DISPLAY | Action.LOG | Action.RECORD


@dataclass(frozen=True)
class ReportElement:
    """One named sub-field of a report message.

    Attributes:
        name (str): Field name.
        value (object): Field value; rendered with ``str()``.
        action (Action): Where the field appears: ``DISPLAY``/``LOG`` put it into
            composed text, ``RECORD`` writes it into recorded transactions.
    """

    name: str
    value: object
    action: Action = ELEMENT_DEFAULT_ACTION


@dataclass(frozen=True)
class ElementContainer:
    """Ordered, immutable collection of `ReportElement` sub-fields."""

    elements: tuple[ReportElement, ...] = ()

    @classmethod
    def from_mapping(cls, values: dict[str, object]) -> ElementContainer:
        """Build a container from a plain mapping, keeping its order."""
        return cls(tuple(ReportElement(name, value) for name, value in values.items()))

    def add(
        self,
        name: str,
        value: object,
        action: Action = ELEMENT_DEFAULT_ACTION,
    ) -> ElementContainer:
        """Return a new container with one more element appended."""
        return ElementContainer((*self.elements, ReportElement(name, value, action)))

    def displayable(self) -> tuple[ReportElement, ...]:
        """Elements that belong in composed text."""
        return tuple(e for e in self.elements if e.action & (Action.DISPLAY | Action.LOG))

    def recordable(self) -> tuple[ReportElement, ...]:
        """Elements that belong in recorded transactions."""
        return tuple(e for e in self.elements if e.action & Action.RECORD)

    def render(self, prefix: str = " +") -> str:
        """Render the displayable elements, one ``<prefix><name>: <value>`` line each."""
        return "\n".join(f"{prefix}{e.name}: {e.value}" for e in self.displayable())

    def __iter__(self) -> Iterator[ReportElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(frozen=True)
class ProducerIdentity:
    """Identity of the producer of a report message.

    Attributes:
        object_name (str): Leaf name of the reporting object.
        handler_name (str): Name of the report handler attached to the object.
        full_name (str): Hierarchical name shown in composed text; defaults to
            ``object_name`` when empty.
    """

    object_name: str = ""
    handler_name: str = ""
    full_name: str = ""

    @property
    def key(self) -> tuple[str, str]:
        """The recording key ``(object_name, handler_name)``."""
        return (self.object_name, self.handler_name)

    @property
    def display_name(self) -> str:
        """Name used when composing message text."""
        return self.full_name or self.object_name

    def is_complete(self) -> bool:
        """Return True if both the object name and the handler name are set."""
        return bool(self.object_name) and bool(self.handler_name)


@dataclass(frozen=True)
class ReportMessage:
    """Immutable report event passed through the pipeline.

    Identity of a message is its content; there is no uniqueness constraint.

    Attributes:
        severity (Severity): Classification tier.
        identifier (str): Report id, used for per-id counting.
        body (str): Free text of the message.
        producer (ProducerIdentity): Who produced the message.
        verbosity (int): Producer-chosen detail tier (opaque).
        filename (str): Origin file; empty when unknown.
        line (int): Origin line; only meaningful with ``filename``.
        context (str): Optional context tag appended to the producer name.
        action (Action): Action bitmask.
        file (int): Output sink handle used by the ``LOG`` action.
        elements (ElementContainer): Structured sub-fields.
        name (str): Transaction name used when the message is recorded.
        type_name (str): Transaction type name used when the message is recorded.
    """

    severity: Severity
    identifier: str
    body: str
    producer: ProducerIdentity = field(default_factory=ProducerIdentity)
    verbosity: int = Verbosity.MEDIUM
    filename: str = ""
    line: int = 0
    context: str = ""
    action: Action = Action.DISPLAY
    file: int = NO_SINK
    elements: ElementContainer = field(default_factory=ElementContainer)
    name: str = "report_message"
    type_name: str = "ReportMessage"

    @classmethod
    def build(
        cls,
        severity: Severity,
        identifier: str,
        body: str,
        *,
        producer: ProducerIdentity,
        action: Action | None = None,
        **kwargs: object,
    ) -> ReportMessage:
        """Create a message whose action defaults to the severity's default action."""
        return cls(
            severity,
            identifier,
            body,
            producer=producer,
            action=severity.default_action if action is None else action,
            **kwargs,  # type: ignore[arg-type]
        )

    def with_action(self, action: Action) -> ReportMessage:
        """Return a copy carrying ``action`` as its action mask."""
        return replace(self, action=action)

    def add_action(self, flags: Action) -> ReportMessage:
        """Return a copy with ``flags`` OR-ed into the action mask."""
        if self.action & flags == flags:
            return self
        return replace(self, action=self.action | flags)

    def with_severity(self, severity: Severity) -> ReportMessage:
        """Return a copy with another severity."""
        return replace(self, severity=severity)

    def add_element(
        self,
        name: str,
        value: object,
        action: Action = ELEMENT_DEFAULT_ACTION,
    ) -> ReportMessage:
        """Return a copy with one more element sub-field."""
        return replace(self, elements=self.elements.add(name, value, action))

    def record(self, transaction: Transaction) -> None:
        """Write this message's fields and its recordable elements into ``transaction``."""
        transaction.record_field("severity", self.severity.name)
        transaction.record_field("id", self.identifier)
        transaction.record_field("message", self.body)
        transaction.record_field("verbosity", self.verbosity)
        transaction.record_field("filename", self.filename)
        transaction.record_field("line", self.line)
        transaction.record_field("context_name", self.context)
        for element in self.elements.recordable():
            transaction.record_field(element.name, element.value)
