"""Rich renderers for the picker, the quiz session and the result report."""

from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .hierarchy import LEVEL_NAMES, LevelCache, LevelStatus
from .models import ResultSummary, SubmissionResult
from .session import QuizSessionMachine
from .submission import HistoryStats, band, percentage

__all__ = [
    "BAND_STYLES",
    "format_elapsed",
    "render_history",
    "render_level",
    "render_question",
    "render_report",
]


BAND_STYLES = {"high": "bold green", "mid": "bold yellow", "low": "bold red"}


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def _score_text(value: int) -> Text:
    return Text(f"{value}%", style=BAND_STYLES[band(value)])


def render_level(
    console: Console,
    level_index: int,
    cache: LevelCache,
    trail: Sequence[str],
) -> None:
    name = LEVEL_NAMES[level_index]
    console.print()
    title = " › ".join([*trail, f"choose {name}"])
    console.rule(Text(title, style="bold cyan"))

    if cache.status is LevelStatus.ERROR:
        console.print(
            Panel(
                cache.error or "Listing failed.",
                title=f"Could not load {name} list",
                border_style="red",
            )
        )
        console.print(Text("Commands: r (retry), b (back), q (quit)", style="dim"))
        return
    if cache.status is not LevelStatus.READY:
        console.print(Text(f"Loading {name} list…", style="dim"))
        return
    if not cache.items:
        console.print(Text(f"No {name} entries available.", style="yellow"))
    else:
        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("#", justify="right", style="cyan")
        table.add_column(name.capitalize())
        for idx, node in enumerate(cache.items, start=1):
            table.add_row(str(idx), node.name)
        console.print(table)
    console.print(Text("Commands: number, b (back), q (quit)", style="dim"))


def render_question(
    console: Console,
    machine: QuizSessionMachine,
    *,
    show_timer: bool = True,
) -> None:
    state = machine.state
    question = machine.current_question
    if state is None or question is None or machine.quiz is None:
        return
    total = len(machine.quiz.questions)
    header = Text.assemble(
        (machine.quiz.title or "Quiz", "bold magenta"),
        ("  ", ""),
        (f"Question {state.current_index + 1}", "bold cyan"),
        (f" / {total}", "dim"),
    )
    if show_timer:
        header.append(f"  ⏱ {format_elapsed(state.elapsed_seconds)}", "dim")
    console.print()
    console.rule(header)
    console.print(Text(question.question_text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    selected = state.answers.get(question.question_id)
    for idx, option in enumerate(question.options, start=1):
        indicator = "•" if option == selected else " "
        option_text = Text(f"{indicator} {option}")
        if option == selected:
            option_text.stylize("bold green")
        table.add_row(str(idx), option_text)
    console.print(table)

    console.print(
        Text(
            f"Answered {len(state.answers)}/{total} | Commands: option number, "
            "n (next), p (prev), g <n> (go to), submit, quit",
            style="dim",
        )
    )


def render_report(console: Console, result: SubmissionResult) -> None:
    value = percentage(result)
    console.print()
    console.rule(Text("Performance Report", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    if result.quiz is not None:
        overview.add_row("Quiz", result.quiz.title)
    overview.add_row("Score", f"{result.score} / {result.total_questions}")
    overview.add_row("Percentage", _score_text(value))
    overview.add_row("Tier", Text(band(value), style=BAND_STYLES[band(value)]))
    console.print(overview)

    analysis = result.analysis
    for title, items, style in (
        ("Strengths", analysis.strengths, "green"),
        ("Weaknesses", analysis.weaknesses, "red"),
        ("Recommendations", analysis.recommendations, "blue"),
    ):
        if items:
            body = "\n".join(f"• {item}" for item in items)
            console.print(Panel(body, title=title, border_style=style))

    if result.quiz is None:
        return
    console.rule(Text("Review Your Answers", style="bold"))
    for question in result.quiz.questions:
        record = result.answer_for(question.question_id)
        correct = bool(record and record.is_correct)
        lines = [
            f"Your answer: {record.selected_answer if record else '-'}",
        ]
        if not correct:
            lines.append(f"Correct answer: {question.correct_answer or '-'}")
        if question.explanation:
            lines.append(f"Explanation: {question.explanation}")
        outcome = "✅" if correct else "❌"
        console.print(
            Panel(
                "\n".join(lines),
                title=f"{outcome} {question.question_id}. {question.question_text}",
                title_align="left",
                border_style="green" if correct else "red",
            )
        )


def render_history(
    console: Console,
    results: Sequence[ResultSummary],
    stats: HistoryStats,
    *,
    title: Optional[str] = None,
) -> None:
    console.print()
    console.rule(Text(title or "Recent Results", style="bold magenta"))
    if not results:
        console.print(Text("No results yet. Start your first quiz!", style="dim"))
        return

    summary = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    summary.add_column("Metric", style="bold")
    summary.add_column("Value", justify="right")
    summary.add_row("Total quizzes", str(stats.total_quizzes))
    summary.add_row("Average score", _score_text(stats.average_score))
    summary.add_row("Best score", _score_text(stats.best_score))
    summary.add_row("This week", str(stats.recent_activity))
    console.print(summary)

    table = Table(box=box.SIMPLE, expand=True)
    table.add_column("Result", style="dim")
    table.add_column("Quiz", overflow="fold")
    table.add_column("Date")
    table.add_column("Score", justify="right")
    for result in results:
        created = (
            result.created_at.strftime("%b %d, %Y") if result.created_at else "-"
        )
        table.add_row(
            result.id,
            result.quiz_title or "(untitled)",
            created,
            _score_text(percentage(result)),
        )
    console.print(table)
