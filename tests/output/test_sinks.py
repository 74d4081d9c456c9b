# topmark:header:start
#
#   project      : ReportServer
#   file         : test_sinks.py
#   file_relpath : tests/output/test_sinks.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for `FileSinkRegistry` handle allocation and routing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reportserver.constants import (
    FD_FLAG,
    NO_SINK,
    STDERR_HANDLE,
    STDOUT_CHANNEL,
    STDOUT_HANDLE,
)
from reportserver.output.sinks import FileSinkRegistry
from tests.conftest import RecordingConsole

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def sinks(console: RecordingConsole) -> FileSinkRegistry:
    return FileSinkRegistry(console)


def test_multichannel_handles_are_single_bits(sinks: FileSinkRegistry, tmp_path: Path) -> None:
    first: int = sinks.open(tmp_path / "a.log")
    second: int = sinks.open(tmp_path / "b.log")
    assert (first, second) == (0x2, 0x4)
    assert sinks.path_of(first) == tmp_path / "a.log"
    sinks.close_all()


def test_descriptor_handles_have_the_fd_flag(sinks: FileSinkRegistry, tmp_path: Path) -> None:
    handle: int = sinks.open(tmp_path / "fd.log", multichannel=False)
    assert handle == FD_FLAG | 3
    assert sinks.write(handle, "line") == 1
    sinks.close(handle)
    assert (tmp_path / "fd.log").read_text(encoding="utf-8") == "line\n"


def test_or_ed_handles_write_every_channel(
    sinks: FileSinkRegistry, console: RecordingConsole, tmp_path: Path
) -> None:
    a: int = sinks.open(tmp_path / "a.log")
    b: int = sinks.open(tmp_path / "b.log")

    assert sinks.write(a | b | STDOUT_CHANNEL, "hello") == 3
    sinks.close_all()

    assert console.lines == ["hello"]
    assert (tmp_path / "a.log").read_text(encoding="utf-8") == "hello\n"
    assert (tmp_path / "b.log").read_text(encoding="utf-8") == "hello\n"


def test_mask_stdout(sinks: FileSinkRegistry, console: RecordingConsole, tmp_path: Path) -> None:
    a: int = sinks.open(tmp_path / "a.log")

    assert sinks.write(STDOUT_HANDLE, "x", mask_stdout=True) == 0
    assert sinks.write(a | STDOUT_CHANNEL, "y", mask_stdout=True) == 1
    sinks.close_all()

    assert console.lines == []
    assert (tmp_path / "a.log").read_text(encoding="utf-8") == "y\n"


def test_no_sink_and_closed_handles_write_nothing(
    sinks: FileSinkRegistry, console: RecordingConsole, tmp_path: Path
) -> None:
    a: int = sinks.open(tmp_path / "a.log")
    sinks.close(a)

    assert sinks.write(NO_SINK, "x") == 0
    assert sinks.write(a, "x") == 0
    assert sinks.write(FD_FLAG | 99, "x") == 0
    assert console.lines == []


def test_stderr_handle(sinks: FileSinkRegistry, capsys: pytest.CaptureFixture[str]) -> None:
    assert sinks.write(STDERR_HANDLE, "oops") == 1
    assert capsys.readouterr().err == "oops\n"


def test_append_mode_keeps_existing_content(sinks: FileSinkRegistry, tmp_path: Path) -> None:
    path: Path = tmp_path / "run.log"
    path.write_text("before\n", encoding="utf-8")
    with sinks:
        sinks.write(sinks.open(path, append=True), "after")
    assert path.read_text(encoding="utf-8") == "before\nafter\n"


def test_channels_are_reused_after_close(sinks: FileSinkRegistry, tmp_path: Path) -> None:
    a: int = sinks.open(tmp_path / "a.log")
    sinks.close(a)
    assert sinks.open(tmp_path / "b.log") == a
    sinks.close_all()
