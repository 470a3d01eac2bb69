"""Interactive terminal loops for the picker and the quiz session.

Both loops read user commands through an ``InputProvider`` so tests can feed
scripted input. Input is read on a worker thread, which keeps the event loop
free to run listing fetches and the elapsed-time clock while the user thinks.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich.console import Console
from rich.panel import Panel

from .errors import ValidationError
from .hierarchy import DEPTH, LevelStatus, ResourceHierarchyResolver
from .session import QuizSessionMachine, run_clock
from .view import render_level, render_question, render_report

__all__ = [
    "InputProvider",
    "SessionCommand",
    "parse_session_command",
    "run_picker",
    "run_quiz_session",
]

InputProvider = Callable[[], str]
ExitAction = Literal["submitted", "quit", "failed"]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["next", "prev", "goto", "submit", "quit", "select"]
    number: Optional[int] = None


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return None
    if text in {"n", "next"}:
        return SessionCommand("next")
    if text in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if text in {"s", "submit"}:
        return SessionCommand("submit")
    if text in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    head, _, tail = text.partition(" ")
    if head in {"g", "goto"} and tail.strip().isdigit():
        return SessionCommand("goto", int(tail.strip()))
    if text.isdigit():
        return SessionCommand("select", int(text))
    return None


async def _read(provider: InputProvider) -> str:
    def _call() -> str:
        try:
            return provider()
        except StopIteration as exc:
            raise EOFError from exc

    return await asyncio.to_thread(_call)


async def run_quiz_session(
    machine: QuizSessionMachine,
    quiz_id: str,
    console: Console,
    input_provider: InputProvider,
    *,
    show_timer: bool = True,
    clock_interval: float = 1.0,
) -> ExitAction:
    """Load ``quiz_id`` and drive the session until submission or quit."""

    console.print(f"Loading quiz [bold]{quiz_id}[/]…")
    if await machine.load_quiz(quiz_id) is None:
        console.print(
            Panel(
                machine.last_error or "Could not load the quiz.",
                title="Quiz unavailable",
                border_style="red",
            )
        )
        return "failed"

    clock = asyncio.create_task(run_clock(machine, interval=clock_interval))
    exit_action: ExitAction = "quit"
    try:
        while True:
            render_question(console, machine, show_timer=show_timer)
            try:
                raw = await _read(input_provider)
            except (EOFError, KeyboardInterrupt):
                console.print("\n[bold yellow]Session interrupted.[/]")
                break
            command = parse_session_command(raw)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            outcome = await _apply_command(command, machine, console)
            if outcome:
                exit_action = outcome
                break
    finally:
        clock.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await clock

    if exit_action == "submitted" and machine.result is not None:
        render_report(console, machine.result)
    return exit_action


async def _apply_command(
    command: SessionCommand,
    machine: QuizSessionMachine,
    console: Console,
) -> Optional[ExitAction]:
    question = machine.current_question
    try:
        if command.type == "select" and question is not None:
            number = command.number or 0
            if not 1 <= number <= len(question.options):
                console.print(
                    f"[red]'{number}' is not a valid option for this question.[/]"
                )
                return None
            machine.select_answer(
                question.question_id, question.options[number - 1]
            )
            return None
        if command.type == "next":
            machine.next()
            return None
        if command.type == "prev":
            machine.previous()
            return None
        if command.type == "goto":
            machine.go_to((command.number or 0) - 1)
            return None
        if command.type == "quit":
            console.print("\n[bold yellow]Ending session without submission.[/]")
            return "quit"
        if command.type == "submit":
            console.print("Submitting your answers…")
            if await machine.submit() is None:
                console.print(
                    Panel(
                        machine.last_error or "Submission failed.",
                        title="Submission failed",
                        border_style="red",
                    )
                )
                return None
            return "submitted"
    except ValidationError as exc:
        console.print(f"[red]{exc}[/]")
    return None


async def run_picker(
    resolver: ResourceHierarchyResolver,
    console: Console,
    input_provider: InputProvider,
) -> bool:
    """Walk the class → subject → chapter picker; ``True`` once complete."""

    level = 0
    while True:
        await resolver.wait_idle()
        cache = resolver.cache(level)
        trail = [
            node.name
            for node in (resolver.selected_node(i) for i in range(level))
            if node is not None
        ]
        render_level(console, level, cache, trail)
        try:
            raw = (await _read(input_provider)).strip().lower()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold yellow]Selection cancelled.[/]")
            return False

        if raw in {"q", "quit", "exit"}:
            return False
        if raw in {"b", "back"}:
            level = max(0, level - 1)
            continue
        if raw in {"r", "retry"} and cache.status is LevelStatus.ERROR:
            if level == 0:
                resolver.refresh_root()
            else:
                parent = resolver.selection[level - 1]
                assert parent is not None
                resolver.select_level(level - 1, parent)
            continue
        if not raw.isdigit() or not 1 <= int(raw) <= len(cache.items):
            console.print("[red]Unrecognized choice. Try again.[/]")
            continue

        resolver.select_level(level, cache.items[int(raw) - 1].id)
        if level == DEPTH - 1:
            return resolver.is_complete()
        level += 1
