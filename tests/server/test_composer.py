# topmark:header:start
#
#   project      : ReportServer
#   file         : test_composer.py
#   file_relpath : tests/server/test_composer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `MessageComposer` text layout."""

from __future__ import annotations

from reportserver.message.model import Action, Severity, Verbosity
from reportserver.server.composer import DisplayOptions, MessageComposer
from reportserver.server.services import ManualClock
from tests.conftest import make_message


def test_minimal_layout() -> None:
    composer = MessageComposer(ManualClock(0))
    text = composer.compose(make_message())
    assert text == "INFO @ 0: top.env.agent [ID0] Message 0"


def test_full_layout_with_verbosity_origin_and_terminator() -> None:
    composer = MessageComposer(
        ManualClock(60),
        DisplayOptions(show_verbosity=True, show_terminator=True),
    )
    message = make_message(filename="agent.sv", line=3)
    assert composer.compose(message) == (
        "INFO(MEDIUM) agent.sv(3) @ 60: top.env.agent [ID0] Message 0 -INFO"
    )


def test_unnamed_verbosity_is_shown_as_number() -> None:
    composer = MessageComposer(ManualClock(0), DisplayOptions(show_verbosity=True))
    text = composer.compose(make_message(Severity.WARNING, verbosity=250))
    assert text.startswith("WARNING(250) @ 0:")


def test_context_and_producer_override() -> None:
    composer = MessageComposer(ManualClock("1.5ns"))
    message = make_message(Severity.ERROR, "E1", "bad", context="seq_item")
    assert composer.compose(message, producer_name="top.other") == (
        "ERROR @ 1.5ns: top.other@@seq_item [E1] bad"
    )


def test_producer_without_full_name_uses_object_name() -> None:
    from reportserver.message.model import ProducerIdentity

    composer = MessageComposer(ManualClock(0))
    message = make_message(producer=ProducerIdentity("agent", "reporter"))
    assert composer.compose(message) == "INFO @ 0: agent [ID0] Message 0"


def test_displayable_elements_follow_the_body() -> None:
    composer = MessageComposer(ManualClock(0), DisplayOptions(show_terminator=True))
    message = (
        make_message(Severity.ERROR, "MEM/ECC", "parity error")
        .add_element("addr", "0x40")
        .add_element("secret", 1, Action.RECORD)
    )
    assert composer.compose(message) == (
        "ERROR @ 0: top.env.agent [MEM/ECC] parity error\n +addr: 0x40 -ERROR"
    )


def test_clock_is_read_at_compose_time() -> None:
    clock = ManualClock(5)
    composer = MessageComposer(clock)
    message = make_message(verbosity=Verbosity.LOW)
    first = composer.compose(message)
    clock.advance(10)
    assert "@ 5:" in first
    assert "@ 15:" in composer.compose(message)
