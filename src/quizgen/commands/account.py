"""Token management commands."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from quizgen.core.config import ConfigError
from quizgen.core.workspace import WorkspaceError

from . import _context


def login_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen login",
        description="Store the bearer token issued by the quiz service.",
    )
    parser.add_argument("token", help="Access token returned at sign-in.")
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
        path = ctx.tokens.login(args.token)
    except (ConfigError, WorkspaceError, ValueError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    sys.stdout.write(f"Token stored at {path}\n")
    return 0


def logout_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen logout",
        description="Forget the stored bearer token.",
    )
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    if ctx.tokens.logout():
        sys.stdout.write("Logged out.\n")
    else:
        sys.stdout.write("No stored token.\n")
    return 0
