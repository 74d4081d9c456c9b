# topmark:header:start
#
#   project      : ReportServer
#   file         : keys.py
#   file_relpath : src/reportserver/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Canonical TOML section and key names for ReportServer configuration.

These strings are the external configuration API as it appears in
``reportserver.toml`` and in ``[tool.reportserver]`` inside ``pyproject.toml``.
Renaming or removing a key is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML section names and keys.

    The ordering mirrors ``reportserver-default.toml``.
    """

    # Root / discovery
    KEY_ROOT: Final[str] = "root"

    # [report_server]
    SECTION_REPORT_SERVER: Final[str] = "report_server"

    KEY_MAX_QUIT_COUNT: Final[str] = "max_quit_count"
    KEY_MAX_QUIT_OVERRIDABLE: Final[str] = "max_quit_overridable"
    KEY_ENABLE_ID_SUMMARY: Final[str] = "enable_id_summary"
    KEY_RECORD_ALL_MESSAGES: Final[str] = "record_all_messages"
    KEY_SHOW_VERBOSITY: Final[str] = "show_verbosity"
    KEY_SHOW_TERMINATOR: Final[str] = "show_terminator"

    # [recording]
    SECTION_RECORDING: Final[str] = "recording"

    KEY_DATABASE: Final[str] = "database"
    KEY_PATH: Final[str] = "path"

    # Accepted values of [recording].database
    DATABASE_MEMORY: Final[str] = "memory"
    DATABASE_JSONL: Final[str] = "jsonl"
    DATABASE_NONE: Final[str] = "none"

    DATABASE_KINDS: Final[tuple[str, ...]] = (DATABASE_MEMORY, DATABASE_JSONL, DATABASE_NONE)

    SERVER_KEYS: Final[frozenset[str]] = frozenset(
        {
            KEY_MAX_QUIT_COUNT,
            KEY_MAX_QUIT_OVERRIDABLE,
            KEY_ENABLE_ID_SUMMARY,
            KEY_RECORD_ALL_MESSAGES,
            KEY_SHOW_VERBOSITY,
            KEY_SHOW_TERMINATOR,
        }
    )
    RECORDING_KEYS: Final[frozenset[str]] = frozenset({KEY_DATABASE, KEY_PATH})
    TOP_LEVEL_KEYS: Final[frozenset[str]] = frozenset(
        {KEY_ROOT, SECTION_REPORT_SERVER, SECTION_RECORDING}
    )
