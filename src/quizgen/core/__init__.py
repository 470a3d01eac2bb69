"""Core shared helpers for the quizgen commands."""

from __future__ import annotations

from .config import (
    ClientConfig,
    ConfigError,
    config_template,
    load_config,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger, get_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "ClientConfig",
    "ConfigError",
    "config_template",
    "load_config",
    "write_template",
    "JsonLogFormatter",
    "configure_logger",
    "get_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
