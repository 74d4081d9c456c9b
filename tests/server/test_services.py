# topmark:header:start
#
#   project      : ReportServer
#   file         : test_services.py
#   file_relpath : tests/server/test_services.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `CoreServices`: the current-server slot and server replacement."""

from __future__ import annotations

import threading
import time

import pytest

from reportserver.message.model import Action, ReportMessage, Severity
from reportserver.recording.database import MemoryTransactionDatabase
from reportserver.server.report_server import ReportServer
from reportserver.server.services import CoreServices, ManualClock
from reportserver.server.statistics import Locked, Unlocked
from tests.conftest import make_message


def test_default_server_is_created_lazily_once(services: CoreServices) -> None:
    first: ReportServer = services.report_server
    assert services.report_server is first
    assert first.services is services


def test_install_server_returns_previous_and_publishes_new(services: CoreServices) -> None:
    old: ReportServer = services.report_server
    new = ReportServer("new", services=services)

    assert services.install_server(new) is old
    assert services.report_server is new


def test_installing_the_current_server_is_a_no_op(services: CoreServices) -> None:
    current: ReportServer = services.report_server
    current.process(make_message(Severity.WARNING, "W"))
    assert services.install_server(current) is current
    assert current.get_severity_count(Severity.WARNING) == 1


def test_install_server_sums_counts(services: CoreServices) -> None:
    old: ReportServer = services.report_server
    old.set_max_quit_count(10)
    old.process(make_message(Severity.ERROR, "A"))
    old.process(make_message(Severity.WARNING, "B"))

    new = ReportServer("new", services=services)
    new.process(make_message(Severity.ERROR, "A"))

    services.install_server(new)

    assert new.get_severity_count(Severity.ERROR) == 2
    assert new.get_severity_count(Severity.WARNING) == 1
    assert new.id_counts() == {"A": 2, "B": 1}
    assert new.get_quit_count() == 1
    # The replaced server keeps its own counts.
    assert old.get_severity_count(Severity.ERROR) == 1


def test_install_server_adopts_previous_ceiling(services: CoreServices) -> None:
    services.report_server.set_max_quit_count(4, overridable=False)
    new = ReportServer("new", services=services)

    services.install_server(new)

    assert new.ceiling == Locked(4)


def test_install_server_keeps_locally_locked_ceiling(services: CoreServices) -> None:
    services.report_server.set_max_quit_count(9)
    new = ReportServer("new", services=services)
    new.set_max_quit_count(1, overridable=False)

    services.install_server(new)

    assert new.ceiling == Locked(1)


def test_install_server_adopts_database_only_when_missing(services: CoreServices) -> None:
    old_db = MemoryTransactionDatabase("old")
    services.report_server.set_message_database(old_db)

    bare = ReportServer("bare", services=services)
    services.install_server(bare)
    assert bare.get_message_database() is old_db

    own_db = MemoryTransactionDatabase("own")
    owned = ReportServer("owned", services=services, database=own_db)
    services.install_server(owned)
    assert owned.get_message_database() is own_db


def test_merge_from_does_not_share_recording_streams(services: CoreServices) -> None:
    old: ReportServer = services.report_server
    old.process(make_message(action=Action.RECORD))
    new = ReportServer("new", services=services)
    services.install_server(new)

    assert len(old.recording_index) == 1
    assert len(new.recording_index) == 0


def test_with_memory_database() -> None:
    services: CoreServices = CoreServices.with_memory_database(clock=ManualClock(7))
    assert isinstance(services.default_database, MemoryTransactionDatabase)
    assert services.clock() == 7
    assert services.report_server.ceiling == Unlocked(0)


def test_manual_clock() -> None:
    clock = ManualClock(10)
    clock.advance(5)
    assert clock() == 15

    clock.set("2.5ns")
    assert clock() == "2.5ns"
    with pytest.raises(TypeError):
        clock.advance(1)


def test_install_server_while_a_catcher_reads_the_current_server(
    services: CoreServices,
) -> None:
    old: ReportServer = services.report_server
    new = ReportServer("new", services=services)
    entered = threading.Event()
    seen: list[ReportServer] = []

    def read_current(message: ReportMessage) -> ReportMessage:
        entered.set()
        # Give install_server time to block on the old server's lock.
        time.sleep(0.2)
        seen.append(services.report_server)
        return message

    old.catchers.add(read_current)
    producer = threading.Thread(target=old.process, args=(make_message(),), daemon=True)
    installer = threading.Thread(target=services.install_server, args=(new,), daemon=True)

    producer.start()
    assert entered.wait(5)
    installer.start()
    producer.join(5)
    installer.join(5)

    assert not producer.is_alive()
    assert not installer.is_alive()
    assert seen == [old]
    assert services.report_server is new
    assert new.get_severity_count(Severity.INFO) == 1
