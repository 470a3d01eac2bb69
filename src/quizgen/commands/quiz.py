"""Quiz generation and quiz-taking commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console

from quizgen.api import ApiClient
from quizgen.core.config import ConfigError
from quizgen.core.workspace import WorkspaceError
from quizgen.errors import FetchError, ValidationError
from quizgen.generation import PdfGenerationRequest
from quizgen.hierarchy import ResourceHierarchyResolver
from quizgen.runner import run_picker, run_quiz_session
from quizgen.session import QuizSessionMachine
from quizgen.submission import SubmissionCoordinator

from . import _context


def _add_quiz_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--num-questions",
        "-n",
        type=int,
        help="Number of questions to generate (1-10).",
    )
    parser.add_argument("--pace", help="One of slow, average, fast.")
    parser.add_argument("--difficulty", help="One of easy, medium, hard.")
    parser.add_argument(
        "--take",
        action="store_true",
        help="Start the quiz right after it has been generated.",
    )


async def _take(
    ctx: _context.CommandContext,
    client: ApiClient,
    quiz_id: str,
    console: Console,
) -> int:
    coordinator = SubmissionCoordinator(client)
    machine = QuizSessionMachine(
        client, coordinator, strict=ctx.config.session.strict
    )
    outcome = await run_quiz_session(
        machine,
        quiz_id,
        console,
        _context.prompt,
        show_timer=ctx.config.session.show_timer,
    )
    if outcome == "failed":
        return 1
    if outcome == "submitted" and machine.result is not None:
        console.print(
            f"Result id: [bold]{machine.result.id}[/] "
            f"(run `quizgen report {machine.result.id}` to see it again)"
        )
    return 0


def _announce(console: Console, quiz_id: str) -> None:
    console.print(f"[green]Quiz generated successfully![/] id: [bold]{quiz_id}[/]")
    console.print(f"Run `quizgen take {quiz_id}` to start it.")


def take_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen take",
        description="Take a generated quiz interactively.",
    )
    parser.add_argument("quiz_id", help="Identifier of the generated quiz.")
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))

    async def _run() -> int:
        async with _context.build_client(ctx) as client:
            return await _take(ctx, client, args.quiz_id, Console())

    return asyncio.run(_run())


def generate_pdf_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen generate-pdf",
        description="Generate a quiz from an uploaded PDF document.",
    )
    parser.add_argument("pdf", type=Path, help="PDF document to upload.")
    parser.add_argument("--subject", required=True, help="Quiz subject.")
    parser.add_argument("--student-class", help="Student class label.")
    _add_quiz_options(parser)
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))
    defaults = ctx.config.quiz
    try:
        request = PdfGenerationRequest(
            pdf_path=args.pdf,
            subject=args.subject,
            num_questions=(
                args.num_questions
                if args.num_questions is not None
                else defaults.num_questions
            ),
            pace=args.pace or defaults.pace,
            difficulty=args.difficulty or defaults.difficulty,
            student_class=args.student_class or defaults.student_class,
        )
    except ValidationError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2

    console = Console()

    async def _run() -> int:
        async with _context.build_client(ctx) as client:
            console.print("Generating your quiz… this may take a moment.")
            try:
                quiz_id = await client.generate_from_pdf(request)
            except FetchError as exc:
                console.print(f"[red]Quiz generation failed:[/] {exc}")
                return 1
            ctx.logger.info("Generated quiz", extra={"quiz_id": quiz_id})
            _announce(console, quiz_id)
            if args.take:
                return await _take(ctx, client, quiz_id, console)
            return 0

    return asyncio.run(_run())


def browse_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen browse",
        description=(
            "Pick a class, subject and chapter from the catalog and generate "
            "a quiz for it."
        ),
    )
    _add_quiz_options(parser)
    _context.add_common_arguments(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        ctx = _context.load_context(args)
    except (ConfigError, WorkspaceError) as exc:
        parser.error(str(exc))
    defaults = ctx.config.quiz
    console = Console()

    async def _run() -> int:
        async with _context.build_client(ctx) as client:
            resolver = ResourceHierarchyResolver(
                client,
                document_mime_type=defaults.document_mime_type,
                strict=ctx.config.session.strict,
            )
            if not await run_picker(resolver, console, _context.prompt):
                return 1
            try:
                request = resolver.catalog_request(
                    num_questions=(
                        args.num_questions
                        if args.num_questions is not None
                        else defaults.num_questions
                    ),
                    pace=args.pace or defaults.pace,
                    difficulty=args.difficulty or defaults.difficulty,
                )
            except ValidationError as exc:
                console.print(f"[red]{exc}[/]")
                return 2
            console.print("Generating your quiz… this may take a moment.")
            try:
                quiz_id = await client.generate_from_catalog(request)
            except FetchError as exc:
                console.print(f"[red]Quiz generation failed:[/] {exc}")
                return 1
            ctx.logger.info(
                "Generated quiz",
                extra={"quiz_id": quiz_id, "chapter_ref": request.chapter_ref},
            )
            _announce(console, quiz_id)
            if args.take:
                return await _take(ctx, client, quiz_id, console)
            return 0

    return asyncio.run(_run())
