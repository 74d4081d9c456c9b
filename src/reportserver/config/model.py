# topmark:header:start
#
#   project      : ReportServer
#   file         : model.py
#   file_relpath : src/reportserver/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model and merge policy.

This module defines:
    - `ServerConfig`: an immutable snapshot used to configure a report server.
    - `MutableServerConfig`: a mutable builder used during discovery and merge;
      it can be frozen into `ServerConfig` and thawed back for edits.

Layers (lowest to highest precedence):
    1) Built-in defaults (``reportserver-default.toml``)
    2) Project configs discovered upward from the anchor, root-most first;
       within a directory ``pyproject.toml`` is merged before ``reportserver.toml``
    3) Explicit config files (``--config``), in the given order
    4) CLI overrides (`MutableServerConfig.apply_cli_args`)

Every field of the builder is tri-state: ``None`` means "not set by this
layer", so a later layer only overrides what it actually sets.

Invalid values never abort loading. They are skipped and recorded as warnings
in the builder's `DiagnosticLog`, which the frozen config keeps.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from reportserver.config.io import (
    get_bool_value_or_none,
    get_int_value_or_none,
    get_string_value_or_none,
    get_table_value,
    load_defaults_dict,
    load_toml_dict,
    to_toml,
)
from reportserver.config.keys import Toml
from reportserver.config.logging import get_logger
from reportserver.constants import CONFIG_FILE_NAME
from reportserver.core.diagnostics import Diagnostic, DiagnosticLog
from reportserver.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reportserver.config.io import TomlTable
    from reportserver.config.logging import ReportServerLogger

# Generic mapping accepted by `MutableServerConfig.apply_cli_args` (CLI kwargs or API dicts).
ArgsLike = Mapping[str, Any]

logger: ReportServerLogger = get_logger(__name__)


@dataclass(frozen=True)
class ServerConfig:
    """Immutable report server configuration.

    Attributes:
        max_quit_count (int): Quit-count ceiling (0 = no ceiling).
        max_quit_overridable (bool): If False, the ceiling is locked once applied.
        enable_id_summary (bool): Include the per-id table in the summary.
        record_all_messages (bool): Record every processed message.
        show_verbosity (bool): Show the verbosity in composed text.
        show_terminator (bool): Append `` -SEVERITY`` to composed text.
        database (str): ``"memory"``, ``"jsonl"`` or ``"none"``.
        database_path (Path | None): Output file of the ``"jsonl"`` database.
        config_files (tuple[Path, ...]): Files merged into this config, in merge order.
        diagnostics (tuple[Diagnostic, ...]): Problems found while loading.
    """

    max_quit_count: int = 0
    max_quit_overridable: bool = True
    enable_id_summary: bool = True
    record_all_messages: bool = False
    show_verbosity: bool = False
    show_terminator: bool = False
    database: str = Toml.DATABASE_MEMORY
    database_path: Path | None = None
    config_files: tuple[Path, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def to_toml_dict(self) -> TomlTable:
        """Return the effective configuration as a TOML mapping."""
        recording: TomlTable = {Toml.KEY_DATABASE: self.database}
        if self.database_path is not None:
            recording[Toml.KEY_PATH] = str(self.database_path)
        return {
            Toml.SECTION_REPORT_SERVER: {
                Toml.KEY_MAX_QUIT_COUNT: self.max_quit_count,
                Toml.KEY_MAX_QUIT_OVERRIDABLE: self.max_quit_overridable,
                Toml.KEY_ENABLE_ID_SUMMARY: self.enable_id_summary,
                Toml.KEY_RECORD_ALL_MESSAGES: self.record_all_messages,
                Toml.KEY_SHOW_VERBOSITY: self.show_verbosity,
                Toml.KEY_SHOW_TERMINATOR: self.show_terminator,
            },
            Toml.SECTION_RECORDING: recording,
        }

    def to_toml(self) -> str:
        """Return the effective configuration as a TOML document."""
        return to_toml(self.to_toml_dict())

    def thaw(self) -> MutableServerConfig:
        """Return a mutable copy of this configuration.

        Mirrors `MutableServerConfig.freeze`; prefer thaw, edit, freeze over
        mutating a frozen config.
        """
        return MutableServerConfig(
            max_quit_count=self.max_quit_count,
            max_quit_overridable=self.max_quit_overridable,
            enable_id_summary=self.enable_id_summary,
            record_all_messages=self.record_all_messages,
            show_verbosity=self.show_verbosity,
            show_terminator=self.show_terminator,
            database=self.database,
            database_path=self.database_path,
            config_files=list(self.config_files),
            diagnostics=DiagnosticLog(items=list(self.diagnostics)),
        )


@dataclass
class MutableServerConfig:
    """Mutable configuration builder.

    Fields left at ``None`` take the `ServerConfig` defaults on `freeze`.
    """

    max_quit_count: int | None = None
    max_quit_overridable: bool | None = None
    enable_id_summary: bool | None = None
    record_all_messages: bool | None = None
    show_verbosity: bool | None = None
    show_terminator: bool | None = None
    database: str | None = None
    database_path: Path | None = None
    config_files: list[Path] = field(default_factory=list)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    # ---------------------------- Build/freeze ----------------------------
    def freeze(self) -> ServerConfig:
        """Freeze this builder into an immutable `ServerConfig`.

        A ``"jsonl"`` database without a path cannot record anything; it is
        replaced by ``"none"`` and a warning is recorded.
        """
        defaults = ServerConfig()
        database: str = self.database if self.database is not None else defaults.database
        if database == Toml.DATABASE_JSONL and self.database_path is None:
            self.diagnostics.add_warning(
                f"[{Toml.SECTION_RECORDING}] {Toml.KEY_DATABASE} = "
                f"{Toml.DATABASE_JSONL!r} requires '{Toml.KEY_PATH}'; recording disabled"
            )
            database = Toml.DATABASE_NONE

        def pick(value: Any, default: Any) -> Any:
            return default if value is None else value

        return ServerConfig(
            max_quit_count=pick(self.max_quit_count, defaults.max_quit_count),
            max_quit_overridable=pick(self.max_quit_overridable, defaults.max_quit_overridable),
            enable_id_summary=pick(self.enable_id_summary, defaults.enable_id_summary),
            record_all_messages=pick(self.record_all_messages, defaults.record_all_messages),
            show_verbosity=pick(self.show_verbosity, defaults.show_verbosity),
            show_terminator=pick(self.show_terminator, defaults.show_terminator),
            database=database,
            database_path=self.database_path,
            config_files=tuple(self.config_files),
            diagnostics=tuple(self.diagnostics),
        )

    # --------------------------- Loaders/parsers --------------------------
    @classmethod
    def from_defaults(cls) -> MutableServerConfig:
        """Load the bundled default configuration."""
        return cls.from_toml_dict(load_defaults_dict())

    @classmethod
    def from_toml_file(cls, path: Path) -> MutableServerConfig | None:
        """Load configuration from a single TOML file.

        ``pyproject.toml`` files contribute their ``[tool.reportserver]`` table;
        other files are read whole.

        Args:
            path (Path): Path to the TOML file.

        Returns:
            MutableServerConfig | None: The draft, or None when a ``pyproject.toml``
            has no ``[tool.reportserver]`` table.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        logger.debug("Creating MutableServerConfig from TOML config: %s", path)
        data: TomlTable = load_toml_dict(path)

        if path.name == "pyproject.toml":
            tool_section: TomlTable = get_table_value(get_table_value(data, "tool"), "reportserver")
            if not tool_section:
                logger.debug("[tool.reportserver] section missing in %s", path)
                return None
            data = tool_section

        draft: MutableServerConfig = cls.from_toml_dict(data, config_file=path)
        draft.config_files = [path]
        logger.debug("Generated MutableServerConfig: %s", draft)
        return draft

    @classmethod
    def from_toml_dict(
        cls,
        data: TomlTable,
        config_file: Path | None = None,
    ) -> MutableServerConfig:
        """Create a draft from a parsed TOML mapping.

        Args:
            data (TomlTable): The parsed TOML data.
            config_file (Path | None): Source file; relative recording paths are
                resolved against its directory.

        Returns:
            MutableServerConfig: The resulting draft.
        """
        draft = cls()
        source: str = str(config_file) if config_file else "<defaults>"

        for key in data:
            if key not in Toml.TOP_LEVEL_KEYS:
                draft.diagnostics.add_warning(f"{source}: unknown key '{key}' ignored")

        server_tbl: TomlTable = get_table_value(data, Toml.SECTION_REPORT_SERVER)
        logger.trace("TOML [report_server]: %s", server_tbl)
        recording_tbl: TomlTable = get_table_value(data, Toml.SECTION_RECORDING)
        logger.trace("TOML [recording]: %s", recording_tbl)

        for key in server_tbl:
            if key not in Toml.SERVER_KEYS:
                draft.diagnostics.add_warning(
                    f"{source}: unknown key '{key}' in [{Toml.SECTION_REPORT_SERVER}] ignored"
                )
        for key in recording_tbl:
            if key not in Toml.RECORDING_KEYS:
                draft.diagnostics.add_warning(
                    f"{source}: unknown key '{key}' in [{Toml.SECTION_RECORDING}] ignored"
                )

        if Toml.KEY_MAX_QUIT_COUNT in server_tbl:
            count: int | None = get_int_value_or_none(server_tbl, Toml.KEY_MAX_QUIT_COUNT)
            if count is None or count < 0:
                draft.diagnostics.add_warning(
                    f"{source}: '{Toml.KEY_MAX_QUIT_COUNT}' must be a non-negative integer, "
                    f"got {server_tbl[Toml.KEY_MAX_QUIT_COUNT]!r}"
                )
            else:
                draft.max_quit_count = count

        for key in (
            Toml.KEY_MAX_QUIT_OVERRIDABLE,
            Toml.KEY_ENABLE_ID_SUMMARY,
            Toml.KEY_RECORD_ALL_MESSAGES,
            Toml.KEY_SHOW_VERBOSITY,
            Toml.KEY_SHOW_TERMINATOR,
        ):
            if key not in server_tbl:
                continue
            flag: bool | None = get_bool_value_or_none(server_tbl, key)
            if flag is None:
                draft.diagnostics.add_warning(
                    f"{source}: '{key}' must be a boolean, got {server_tbl[key]!r}"
                )
            else:
                setattr(draft, key, flag)

        if Toml.KEY_DATABASE in recording_tbl:
            kind: str | None = get_string_value_or_none(recording_tbl, Toml.KEY_DATABASE)
            if kind not in Toml.DATABASE_KINDS:
                draft.diagnostics.add_warning(
                    f"{source}: '{Toml.KEY_DATABASE}' must be one of "
                    f"{', '.join(Toml.DATABASE_KINDS)}, got {recording_tbl[Toml.KEY_DATABASE]!r}"
                )
            else:
                draft.database = kind

        raw_path: str | None = get_string_value_or_none(recording_tbl, Toml.KEY_PATH)
        if raw_path:
            path = Path(raw_path)
            if not path.is_absolute() and config_file is not None:
                path = config_file.parent.resolve() / path
            draft.database_path = path

        return draft

    @classmethod
    def discover_local_config_files(cls, start: Path) -> list[Path]:
        """Return config files discovered by walking upward from ``start``.

        Files are returned root-most first, nearest last. Within a directory
        ``pyproject.toml`` comes before ``reportserver.toml`` so that the tool
        file wins a nearest-last merge. A config that sets ``root = true`` stops
        the walk after its directory.

        Args:
            start (Path): Directory (or file) where discovery starts.

        Returns:
            list[Path]: Discovered config file paths in merge order.
        """
        per_dir: list[list[Path]] = []
        cur: Path = start.resolve()
        if cur.is_file():
            cur = cur.parent

        while True:
            root_stop_here = False
            dir_entries: list[Path] = []
            for name in ("pyproject.toml", CONFIG_FILE_NAME):
                p: Path = cur / name
                if not p.is_file():
                    continue
                try:
                    data: TomlTable = load_toml_dict(p)
                except ConfigError as exc:
                    logger.debug("Ignoring unreadable config %s: %s", p, exc)
                    continue
                if name == "pyproject.toml":
                    data = get_table_value(get_table_value(data, "tool"), "reportserver")
                    if not data:
                        continue
                dir_entries.append(p)
                logger.debug("Discovered config file: %s", p)
                if data.get(Toml.KEY_ROOT) is True:
                    root_stop_here = True

            if dir_entries:
                per_dir.append(dir_entries)

            parent: Path = cur.parent
            if parent == cur:
                break
            if root_stop_here:
                logger.debug("Stopping upward config discovery at %s due to root=true", cur)
                break
            cur = parent

        ordered: list[Path] = []
        for dir_list in reversed(per_dir):
            ordered.extend(dir_list)
        return ordered

    @classmethod
    def load_merged(
        cls,
        *,
        anchor: Path | None = None,
        extra_config_files: Iterable[Path] | None = None,
        no_config: bool = False,
    ) -> MutableServerConfig:
        """Discover and merge configuration layers into a draft.

        Args:
            anchor (Path | None): Starting point of upward discovery (CWD if None).
            extra_config_files (Iterable[Path] | None): Explicit files merged last,
                in the given order.
            no_config (bool): Skip discovery (defaults and explicit files only).

        Returns:
            MutableServerConfig: A draft ready to be frozen or further edited.

        Raises:
            ConfigError: If an explicit config file cannot be read or parsed.
        """
        draft: MutableServerConfig = cls.from_defaults()

        if not no_config:
            for cfg_path in cls.discover_local_config_files(anchor or Path.cwd()):
                discovered: MutableServerConfig | None = cls.from_toml_file(cfg_path)
                if discovered is not None:
                    draft = draft.merge_with(discovered)

        for extra in extra_config_files or ():
            explicit: MutableServerConfig | None = cls.from_toml_file(Path(extra))
            if explicit is None:
                draft.diagnostics.add_warning(f"{extra}: no [tool.reportserver] table")
                continue
            draft = draft.merge_with(explicit)

        return draft

    # ------------------------------- Merging -------------------------------
    def merge_with(self, other: MutableServerConfig) -> MutableServerConfig:
        """Return a new draft where the fields set in ``other`` override this draft.

        Diagnostics and config file lists are concatenated.
        """

        def over(name: str) -> Any:
            value: Any = getattr(other, name)
            return value if value is not None else getattr(self, name)

        merged = MutableServerConfig(
            max_quit_count=over("max_quit_count"),
            max_quit_overridable=over("max_quit_overridable"),
            enable_id_summary=over("enable_id_summary"),
            record_all_messages=over("record_all_messages"),
            show_verbosity=over("show_verbosity"),
            show_terminator=over("show_terminator"),
            database=over("database"),
            database_path=over("database_path"),
            config_files=self.config_files + other.config_files,
        )
        merged.diagnostics.extend(self.diagnostics.items)
        merged.diagnostics.extend(other.diagnostics.items)
        return merged

    def apply_cli_args(self, args: ArgsLike) -> MutableServerConfig:
        """Apply CLI overrides in place and return ``self``.

        Keys that are absent or ``None`` leave the current value unchanged.
        ``record_to`` selects the JSON-lines database at that path.

        Args:
            args (ArgsLike): Override mapping (e.g. click keyword arguments).

        Returns:
            MutableServerConfig: This draft.
        """
        count: Any = args.get("max_quit_count")
        if count is not None:
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
                self.max_quit_count = count
            else:
                self.diagnostics.add_warning(f"--max-quit-count must be >= 0, got {count!r}")

        for key in (
            Toml.KEY_MAX_QUIT_OVERRIDABLE,
            Toml.KEY_ENABLE_ID_SUMMARY,
            Toml.KEY_RECORD_ALL_MESSAGES,
            Toml.KEY_SHOW_VERBOSITY,
            Toml.KEY_SHOW_TERMINATOR,
        ):
            value: Any = args.get(key)
            if value is not None:
                setattr(self, key, bool(value))

        record_to: Any = args.get("record_to")
        if record_to is not None:
            self.database = Toml.DATABASE_JSONL
            self.database_path = Path(record_to)

        return self


def load_config(
    *,
    anchor: Path | None = None,
    extra_config_files: Iterable[Path] | None = None,
    no_config: bool = False,
    overrides: ArgsLike | None = None,
) -> ServerConfig:
    """Discover, merge, override and freeze a `ServerConfig` in one call."""
    draft: MutableServerConfig = MutableServerConfig.load_merged(
        anchor=anchor,
        extra_config_files=extra_config_files,
        no_config=no_config,
    )
    if overrides:
        draft.apply_cli_args(overrides)
    return draft.freeze()
