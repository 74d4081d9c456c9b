# topmark:header:start
#
#   project      : ReportServer
#   file         : io.py
#   file_relpath : src/reportserver/config/io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Lightweight TOML I/O helpers for ReportServer configuration.

This module centralizes **pure** helpers for reading and writing the TOML used
by the configuration layer, keeping the model classes small and free of I/O.

Typical flow:
    1. Load defaults from the packaged resource (``load_defaults_dict``).
    2. Load project TOML files (``load_toml_dict``).
    3. Inspect values using the typed helpers (``get_table_value``,
       ``get_int_value_or_none``, ...).
    4. Serialize back to TOML when needed (``to_toml``).

All parsing and rendering goes through `tomlkit`; parsed documents are
unwrapped into plain Python containers before they leave this module.
"""

from __future__ import annotations

from importlib.resources import files
from typing import TYPE_CHECKING, Any, TypeGuard, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from reportserver.config.logging import get_logger
from reportserver.constants import DEFAULT_TOML_CONFIG_NAME, DEFAULT_TOML_CONFIG_PACKAGE
from reportserver.errors import ConfigError

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable
    from pathlib import Path

    from reportserver.config.logging import ReportServerLogger

logger: ReportServerLogger = get_logger(__name__)

TomlTable = dict[str, Any]

__all__: list[str] = [
    "TomlTable",
    "is_toml_table",
    "get_table_value",
    "get_string_value_or_none",
    "get_bool_value_or_none",
    "get_int_value_or_none",
    "load_defaults_dict",
    "load_toml_dict",
    "parse_toml",
    "to_toml",
]


def is_toml_table(val: Any) -> TypeGuard[TomlTable]:
    """Type guard for a TOML table-like mapping.

    Args:
        val (Any): Value to test.

    Returns:
        TypeGuard[TomlTable]: ``True`` if ``val`` is a ``dict[str, Any]``.
    """
    return isinstance(val, dict)


def get_table_value(table: TomlTable, key: str) -> TomlTable:
    """Extract a sub-table from a TOML table.

    Returns a new empty dict if the sub-table is missing or not a mapping.

    Args:
        table (TomlTable): Parent table mapping.
        key (str): Sub-table key.

    Returns:
        TomlTable: The sub-table if present and a mapping, otherwise an empty dict.
    """
    value: Any | None = table.get(key)
    return value if is_toml_table(value) else {}


def get_string_value_or_none(table: TomlTable, key: str) -> str | None:
    """Extract an optional string value from a TOML table.

    Returns ``None`` when the key is missing or the value is not a string.
    """
    value: Any | None = table.get(key)
    return value if isinstance(value, str) else None


def get_bool_value_or_none(table: TomlTable, key: str) -> bool | None:
    """Extract an optional boolean value from a TOML table.

    If the value is a ``bool``, it is returned as is. If the value is an integer,
    it is coerced via ``bool(value)``. Missing or non-coercible values yield ``None``.

    Args:
        table (TomlTable): Table to query.
        key (str): Key to extract.

    Returns:
        bool | None: The extracted or coerced boolean value, or ``None``.
    """
    value: Any | None = table.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    return None


def get_int_value_or_none(table: TomlTable, key: str) -> int | None:
    """Extract an optional integer value from a TOML table.

    Booleans are rejected even though they are ints in Python.
    """
    value: Any | None = table.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def parse_toml(text: str, *, source: str = "<string>") -> TomlTable:
    """Parse a TOML document into plain Python containers.

    Args:
        text (str): TOML source.
        source (str): Name used in error messages.

    Returns:
        TomlTable: The parsed document.

    Raises:
        ConfigError: If ``text`` is not valid TOML.
    """
    try:
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
    except TomlkitParseError as exc:
        raise ConfigError(f"Invalid TOML in {source}: {exc}") from exc
    return cast("TomlTable", doc.unwrap())


def load_defaults_dict() -> TomlTable:
    """Return the packaged default configuration as a Python dict.

    Raises:
        ConfigError: If the bundled resource cannot be read or parsed.
    """
    resource: Traversable = files(DEFAULT_TOML_CONFIG_PACKAGE).joinpath(DEFAULT_TOML_CONFIG_NAME)
    logger.debug("Loading defaults from package resource: %s", resource)
    try:
        text: str = resource.read_text(encoding="utf8")
    except OSError as exc:
        raise ConfigError(
            f"Cannot read bundled default config {DEFAULT_TOML_CONFIG_PACKAGE!r}/"
            f"{DEFAULT_TOML_CONFIG_NAME!r}: {exc}"
        ) from exc
    return parse_toml(text, source=DEFAULT_TOML_CONFIG_NAME)


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path (Path): Path to a TOML document (``reportserver.toml`` or ``pyproject.toml``).

    Returns:
        TomlTable: The parsed TOML content.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    return parse_toml(text, source=str(path))


def to_toml(toml_dict: TomlTable) -> str:
    """Serialize a TOML mapping to a string.

    Args:
        toml_dict (TomlTable): TOML mapping to render.

    Returns:
        str: The rendered TOML document.
    """
    return tomlkit.dumps(toml_dict)
