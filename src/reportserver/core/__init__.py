# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core helpers shared across ReportServer (diagnostics, enum utilities, exit codes)."""
