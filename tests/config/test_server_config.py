# topmark:header:start
#
#   project      : ReportServer
#   file         : test_server_config.py
#   file_relpath : tests/config/test_server_config.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for configuration loading, layering and freezing."""

from __future__ import annotations

from pathlib import Path

import pytest

from reportserver.config import MutableServerConfig, ServerConfig, load_config
from reportserver.config.io import parse_toml
from reportserver.core.diagnostics import DiagnosticLevel
from reportserver.errors import ConfigError
from reportserver.recording.database import JsonLinesTransactionDatabase, MemoryTransactionDatabase
from reportserver.server.report_server import ReportServer
from reportserver.server.statistics import Locked, Unlocked


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _messages(config: ServerConfig) -> list[str]:
    return [d.message for d in config.diagnostics]


# ------------------ Defaults ------------------


def test_bundled_defaults_match_the_dataclass_defaults() -> None:
    config: ServerConfig = MutableServerConfig.from_defaults().freeze()
    assert config == ServerConfig()
    assert config.diagnostics == ()


def test_defaults_render_as_toml() -> None:
    data = parse_toml(ServerConfig().to_toml())
    assert data["report_server"]["max_quit_count"] == 0
    assert data["report_server"]["max_quit_overridable"] is True
    assert data["recording"] == {"database": "memory"}


# ------------------ Single files ------------------


def test_reportserver_toml_values(tmp_path: Path) -> None:
    path: Path = _write(
        tmp_path / "reportserver.toml",
        "[report_server]\n"
        "max_quit_count = 5\n"
        "max_quit_overridable = false\n"
        "show_terminator = true\n"
        "\n"
        "[recording]\n"
        'database = "jsonl"\n'
        'path = "out/messages.jsonl"\n',
    )
    draft = MutableServerConfig.from_toml_file(path)
    assert draft is not None
    config: ServerConfig = draft.freeze()

    assert config.max_quit_count == 5
    assert config.max_quit_overridable is False
    assert config.show_terminator is True
    assert config.show_verbosity is False
    assert config.database == "jsonl"
    assert config.database_path == tmp_path.resolve() / "out" / "messages.jsonl"
    assert config.config_files == (path,)


def test_pyproject_without_tool_table_is_skipped(tmp_path: Path) -> None:
    path: Path = _write(tmp_path / "pyproject.toml", '[project]\nname = "x"\n')
    assert MutableServerConfig.from_toml_file(path) is None


def test_pyproject_tool_table(tmp_path: Path) -> None:
    path: Path = _write(
        tmp_path / "pyproject.toml",
        "[tool.reportserver.report_server]\nenable_id_summary = false\n",
    )
    draft = MutableServerConfig.from_toml_file(path)
    assert draft is not None
    assert draft.enable_id_summary is False
    assert draft.max_quit_count is None


def test_invalid_values_become_warnings(tmp_path: Path) -> None:
    path: Path = _write(
        tmp_path / "reportserver.toml",
        "colour = true\n"
        "[report_server]\n"
        "max_quit_count = -1\n"
        'show_verbosity = "yes"\n'
        "bogus = 1\n"
        "[recording]\n"
        'database = "sqlite"\n',
    )
    draft = MutableServerConfig.from_toml_file(path)
    assert draft is not None
    config: ServerConfig = draft.freeze()

    assert config.max_quit_count == 0
    assert config.show_verbosity is False
    assert config.database == "memory"
    assert all(d.level is DiagnosticLevel.WARNING for d in config.diagnostics)
    messages: list[str] = _messages(config)
    assert len(messages) == 5
    assert any("unknown key 'colour'" in m for m in messages)
    assert any("unknown key 'bogus' in [report_server]" in m for m in messages)
    assert any("'max_quit_count' must be a non-negative integer" in m for m in messages)
    assert any("'show_verbosity' must be a boolean" in m for m in messages)
    assert any("'database' must be one of memory, jsonl, none" in m for m in messages)


def test_integer_flags_are_coerced(tmp_path: Path) -> None:
    path: Path = _write(tmp_path / "reportserver.toml", "[report_server]\nshow_verbosity = 1\n")
    draft = MutableServerConfig.from_toml_file(path)
    assert draft is not None
    assert draft.show_verbosity is True


def test_unparsable_file_raises(tmp_path: Path) -> None:
    path: Path = _write(tmp_path / "reportserver.toml", "[report_server\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        MutableServerConfig.from_toml_file(path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read config file"):
        MutableServerConfig.from_toml_file(tmp_path / "absent.toml")


def test_jsonl_without_path_disables_recording() -> None:
    config: ServerConfig = MutableServerConfig(database="jsonl").freeze()
    assert config.database == "none"
    assert "requires 'path'" in _messages(config)[0]


# ------------------ Discovery and layering ------------------


def test_discovery_is_root_most_first_and_stops_at_root(tmp_path: Path) -> None:
    _write(tmp_path / "reportserver.toml", "[report_server]\nmax_quit_count = 1\n")
    top: Path = _write(
        tmp_path / "proj" / "reportserver.toml",
        "root = true\n[report_server]\nmax_quit_count = 2\n",
    )
    pyproject: Path = _write(
        tmp_path / "proj" / "sub" / "pyproject.toml",
        "[tool.reportserver.report_server]\nmax_quit_count = 3\n",
    )
    nearest: Path = _write(
        tmp_path / "proj" / "sub" / "reportserver.toml", "[report_server]\nshow_verbosity = true\n"
    )
    start: Path = tmp_path / "proj" / "sub"

    found: list[Path] = MutableServerConfig.discover_local_config_files(start)

    assert found == [top.resolve(), pyproject.resolve(), nearest.resolve()]

    config: ServerConfig = load_config(anchor=start)
    assert config.max_quit_count == 3
    assert config.show_verbosity is True


def test_no_config_skips_discovery(tmp_path: Path) -> None:
    _write(tmp_path / "reportserver.toml", "root = true\n[report_server]\nmax_quit_count = 9\n")
    assert load_config(anchor=tmp_path, no_config=True).max_quit_count == 0


def test_explicit_files_merge_last_in_order(tmp_path: Path) -> None:
    _write(tmp_path / "reportserver.toml", "root = true\n[report_server]\nmax_quit_count = 1\n")
    first: Path = _write(tmp_path / "a.toml", "[report_server]\nmax_quit_count = 2\n")
    second: Path = _write(tmp_path / "b.toml", "[report_server]\nshow_terminator = true\n")

    config: ServerConfig = load_config(anchor=tmp_path, extra_config_files=[first, second])

    assert config.max_quit_count == 2
    assert config.show_terminator is True
    assert config.config_files[-2:] == (first, second)


def test_explicit_pyproject_without_table_is_a_warning(tmp_path: Path) -> None:
    path: Path = _write(tmp_path / "pyproject.toml", "[project]\nname = 'x'\n")
    config: ServerConfig = load_config(no_config=True, extra_config_files=[path])
    assert "no [tool.reportserver] table" in _messages(config)[0]


def test_cli_overrides_win(tmp_path: Path) -> None:
    _write(tmp_path / "reportserver.toml", "root = true\n[report_server]\nmax_quit_count = 4\n")
    config: ServerConfig = load_config(
        anchor=tmp_path,
        overrides={
            "max_quit_count": 2,
            "max_quit_overridable": False,
            "record_all_messages": True,
            "show_verbosity": None,
            "record_to": tmp_path / "rec.jsonl",
        },
    )
    assert config.max_quit_count == 2
    assert config.max_quit_overridable is False
    assert config.record_all_messages is True
    assert config.show_verbosity is False
    assert config.database == "jsonl"
    assert config.database_path == tmp_path / "rec.jsonl"


def test_thaw_freeze_round_trip() -> None:
    config = ServerConfig(max_quit_count=3, show_verbosity=True)
    draft: MutableServerConfig = config.thaw()
    draft.max_quit_count = 7
    assert draft.freeze() == ServerConfig(max_quit_count=7, show_verbosity=True)
    assert config.max_quit_count == 3


# ------------------ Server construction ------------------


def test_server_from_config(tmp_path: Path) -> None:
    config = ServerConfig(
        max_quit_count=2,
        max_quit_overridable=False,
        enable_id_summary=False,
        show_terminator=True,
        database="jsonl",
        database_path=tmp_path / "rec.jsonl",
    )
    server: ReportServer = ReportServer.from_config(config, name="configured")

    assert server.name == "configured"
    assert server.ceiling == Locked(2)
    assert server.enable_id_summary is False
    assert server.show_terminator is True
    assert isinstance(server.get_message_database(), JsonLinesTransactionDatabase)


@pytest.mark.parametrize(
    ("database", "expected"),
    [("memory", MemoryTransactionDatabase), ("none", type(None))],
)
def test_server_database_kinds(database: str, expected: type) -> None:
    server: ReportServer = ReportServer.from_config(ServerConfig(database=database))
    assert isinstance(server.get_message_database(), expected)
    assert server.ceiling == Unlocked(0)
