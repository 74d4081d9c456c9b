# topmark:header:start
#
#   project      : ReportServer
#   file         : __main__.py
#   file_relpath : src/reportserver/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Entry point for `python -m reportserver`."""

from __future__ import annotations

from reportserver.cli.main import cli

if __name__ == "__main__":
    cli()
