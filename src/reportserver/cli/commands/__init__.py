# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Subcommands of the ``reportserver`` CLI."""
