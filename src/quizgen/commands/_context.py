"""Shared plumbing for quizgen subcommands."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx
from dotenv import find_dotenv, load_dotenv

from quizgen.api import ApiClient
from quizgen.auth import TokenStore
from quizgen.core.config import ClientConfig, load_config
from quizgen.core.logging import configure_logger, get_logger
from quizgen.core.workspace import WorkspaceLayout, ensure_workspace


@dataclass(frozen=True)
class CommandContext:
    layout: WorkspaceLayout
    config: ClientConfig
    logger: logging.Logger
    log_path: Path
    tokens: TokenStore


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a quizgen TOML config (defaults to the workspace one).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to QUIZGEN_DATA_HOME).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr.",
    )


def load_context(args: argparse.Namespace) -> CommandContext:
    """Resolve workspace, config, logging and token store for a command.

    Raises :class:`~quizgen.core.config.ConfigError` or
    :class:`~quizgen.core.workspace.WorkspaceError` for the caller to report.
    """

    load_dotenv(find_dotenv(usecwd=True))
    layout = ensure_workspace(path=getattr(args, "workspace", None))
    config = load_config(
        explicit_path=getattr(args, "config", None), workspace=layout
    )
    logger, log_path = configure_logger(
        "quizgen",
        log_dir=layout.path_for("logs"),
        level=config.logging.level,
        verbose=bool(getattr(args, "verbose", False)) or config.logging.verbose,
    )
    tokens = TokenStore(layout.path_for("auth"), logger=get_logger("auth"))
    return CommandContext(
        layout=layout,
        config=config,
        logger=logger,
        log_path=log_path,
        tokens=tokens,
    )


def build_client(
    ctx: CommandContext, *, transport: httpx.AsyncBaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        ctx.config.api.base_url,
        auth=ctx.tokens,
        timeout=ctx.config.api.timeout_seconds,
        transport=transport,
    )


def prompt() -> str:
    return input("> ")
