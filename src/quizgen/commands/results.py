"""Past-result listing and report commands."""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from rich.console import Console

from quizgen.core.config import ConfigError
from quizgen.core.workspace import WorkspaceError
from quizgen.errors import FetchError
from quizgen.submission import summarize_history
from quizgen.view import render_history, render_report

from . import _context


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def history_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen history",
        description="List past results with dashboard statistics.",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Only show the most recent N results.",
    )
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))
    console = Console()

    async def _run() -> int:
        async with _context.build_client(ctx) as client:
            try:
                results = await client.list_results()
            except FetchError as exc:
                console.print(f"[red]Could not fetch past results:[/] {exc}")
                return 1
        stats = summarize_history(results)
        shown = results[: args.limit] if args.limit is not None else results
        render_history(console, shown, stats)
        return 0

    return asyncio.run(_run())


def report_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen report",
        description="Show the detailed performance report for a result.",
    )
    parser.add_argument("result_id", help="Identifier of the scored attempt.")
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))
    console = Console()

    async def _run() -> int:
        async with _context.build_client(ctx) as client:
            try:
                result = await client.fetch_result(args.result_id)
            except FetchError as exc:
                console.print(f"[red]Failed to fetch test result:[/] {exc}")
                return 1
        render_report(console, result)
        return 0

    return asyncio.run(_run())
