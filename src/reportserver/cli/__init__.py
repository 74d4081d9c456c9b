# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/cli/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""ReportServer CLI package.

This package groups the Click command definitions and supporting utilities
for the ``reportserver`` command-line interface.

Typical usage:
    The console script entry point is defined in ``pyproject.toml`` as::

        [project.scripts]
        reportserver = "reportserver.cli.main:cli"
"""

from __future__ import annotations

__all__: list[str] = []
# Do NOT import .main or commands at module import time
