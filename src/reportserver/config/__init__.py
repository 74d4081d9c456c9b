# topmark:header:start
#
#   project      : ReportServer
#   file         : __init__.py
#   file_relpath : src/reportserver/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration handling for ReportServer.

Configuration is read from ``reportserver.toml`` or from ``[tool.reportserver]``
in ``pyproject.toml``, merged over the bundled defaults and frozen into a
`ServerConfig`.
"""

from __future__ import annotations

from reportserver.config.model import MutableServerConfig, ServerConfig, load_config

__all__ = [
    "MutableServerConfig",
    "ServerConfig",
    "load_config",
]
