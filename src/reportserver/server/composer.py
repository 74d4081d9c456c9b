# topmark:header:start
#
#   project      : ReportServer
#   file         : composer.py
#   file_relpath : src/reportserver/server/composer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Render report messages as human-readable text.

The composed line has the shape

    SEVERITY[(VERBOSITY)] [file(line) ]@ TIME: PRODUCER[@@CONTEXT] [ID] BODY[ -SEVERITY]

with the displayable message elements appended on their own lines after the
body. For example, with ``show_verbosity`` and ``show_terminator`` enabled:

    INFO(MEDIUM) agent.sv(3) @ 60: top.env.agent [ID0] Message 0 -INFO

Composition is pure: it reads the message, the display options and the clock,
and never touches statistics or recording state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reportserver.message.model import Verbosity

if TYPE_CHECKING:
    from collections.abc import Callable

    from reportserver.message.model import ReportMessage


@dataclass(frozen=True)
class DisplayOptions:
    """Flags controlling optional parts of composed text.

    Attributes:
        show_verbosity (bool): Insert ``(VERBOSITY)`` after the severity.
        show_terminator (bool): Append `` -SEVERITY`` after the body.
    """

    show_verbosity: bool = False
    show_terminator: bool = False


class MessageComposer:
    """Compose report messages into text.

    Args:
        clock (Callable[[], object]): Returns the current engine time; rendered with ``str()``.
        options (DisplayOptions | None): Display flags; defaults to none enabled.
    """

    def __init__(
        self,
        clock: Callable[[], object],
        options: DisplayOptions | None = None,
    ) -> None:
        self.clock = clock
        self.options = options or DisplayOptions()

    def compose(self, message: ReportMessage, producer_name: str | None = None) -> str:
        """Return the composed text of ``message``.

        Args:
            message (ReportMessage): The message to render.
            producer_name (str | None): Replaces the producer's display name when given.

        Returns:
            str: The composed text.
        """
        severity: str = message.severity.name

        verbosity: str = ""
        if self.options.show_verbosity:
            verbosity = f"({Verbosity.label(message.verbosity)})"

        origin: str = ""
        if message.filename:
            origin = f"{message.filename}({message.line}) "

        context: str = f"@@{message.context}" if message.context else ""

        body: str = message.body
        rendered: str = message.elements.render()
        if rendered:
            body = f"{body}\n{rendered}"

        terminator: str = f" -{severity}" if self.options.show_terminator else ""

        name: str = producer_name if producer_name else message.producer.display_name

        return (
            f"{severity}{verbosity} {origin}@ {self.clock()}: {name}{context} "
            f"[{message.identifier}] {body}{terminator}"
        )
