# topmark:header:start
#
#   project      : ReportServer
#   file         : exit_codes.py
#   file_relpath : src/reportserver/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Standardized exit codes of the ReportServer CLI.

Codes above 2 that are not run outcomes follow the BSD ``sysexits.h`` values.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes returned by the ``reportserver`` command.

    Attributes:
        SUCCESS (int): The command completed.
        FAILURE (int): Generic failure.
        RUN_TERMINATED (int): A replayed report ended the run gracefully (``EXIT``).
        ENGINE_HALTED (int): A replayed report halted the engine (``STOP``).
        USAGE_ERROR (int): Invalid command-line usage.
        DATA_ERROR (int): A replay record is malformed.
        FILE_NOT_FOUND (int): An input file does not exist.
        IO_ERROR (int): Reading or writing a file failed.
        CONFIG_ERROR (int): A configuration file is missing or invalid.
    """

    SUCCESS = 0
    FAILURE = 1
    RUN_TERMINATED = 3
    ENGINE_HALTED = 4
    USAGE_ERROR = 64
    DATA_ERROR = 65
    FILE_NOT_FOUND = 66
    IO_ERROR = 74
    CONFIG_ERROR = 78
