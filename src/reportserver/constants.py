# topmark:header:start
#
#   project      : ReportServer
#   file         : constants.py
#   file_relpath : src/reportserver/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from typing import Final

try:
    REPORTSERVER_VERSION: str = get_version("reportserver")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    REPORTSERVER_VERSION = "0.0.0"

# Configuration discovery
CONFIG_FILE_NAME: Final[str] = "reportserver.toml"
PYPROJECT_TOOL_SECTION: Final[str] = "tool.reportserver"
DEFAULT_TOML_CONFIG_PACKAGE: Final[str] = "reportserver.config"
DEFAULT_TOML_CONFIG_NAME: Final[str] = "reportserver-default.toml"

# Stream category used for every recorded report message.
MESSAGES_CATEGORY: Final[str] = "MESSAGES"

# Delimiter between levels of a hierarchical producer name.
HIERARCHY_DELIMITER: Final[str] = "."

# Producer identity used by the server when it reports on itself.
SERVER_REPORTER_NAME: Final[str] = "reporter"

# Output sink handles.
#
# Bit 31 set: file-descriptor style handle; lower bits select one descriptor.
# Bit 31 clear: multi-channel descriptor; each set bit selects one channel,
# bit 0 being the standard output channel.
NO_SINK: Final[int] = 0
FD_FLAG: Final[int] = 0x8000_0000
STDOUT_CHANNEL: Final[int] = 0x0000_0001
STDOUT_HANDLE: Final[int] = FD_FLAG | 0x1
STDERR_HANDLE: Final[int] = FD_FLAG | 0x2
MAX_CHANNELS: Final[int] = 31

# Ids of the diagnostics the server emits about itself.
ID_SUMMARY: Final[str] = "REPORT/SERVER"
ID_NO_PRODUCER: Final[str] = "REPORT/SERVER/NOPRODUCER"
ID_BAD_NAME: Final[str] = "REPORT/SERVER/BADNAME"
ID_MAX_QUIT_LOCKED: Final[str] = "NOMAXQUITOVR"
ID_CATCHER_SUMMARY: Final[str] = "REPORT/CATCHER"

VALUE_NOT_SET: Final[str] = "<not set>"
