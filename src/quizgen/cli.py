"""Unified CLI entry point for the quizgen client."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence


CommandHandler = Callable[[Sequence[str]], int]


@dataclass(frozen=True)
class CommandSpec:
    """Represents a quizgen subcommand."""

    name: str
    summary: str
    target: str
    is_interactive: bool = False

    def run(self, argv: Sequence[str]) -> int:
        module_name, func_name = self.target.split(":")
        handler: CommandHandler = getattr(import_module(module_name), func_name)
        try:
            result = handler(list(argv))
        except SystemExit as exc:
            return _normalize_system_exit(exc)
        return result if isinstance(result, int) else 0


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec(
        name="init",
        summary="Bootstrap the quizgen workspace.",
        target="quizgen.commands.workspace:init_main",
    ),
    CommandSpec(
        name="config",
        summary="Write or locate the TOML configuration.",
        target="quizgen.commands.workspace:config_main",
    ),
    CommandSpec(
        name="login",
        summary="Store the bearer token for the quiz service.",
        target="quizgen.commands.account:login_main",
    ),
    CommandSpec(
        name="logout",
        summary="Forget the stored bearer token.",
        target="quizgen.commands.account:logout_main",
    ),
    CommandSpec(
        name="browse",
        summary="Pick class, subject and chapter, then generate a quiz.",
        target="quizgen.commands.quiz:browse_main",
        is_interactive=True,
    ),
    CommandSpec(
        name="generate-pdf",
        summary="Generate a quiz from an uploaded PDF.",
        target="quizgen.commands.quiz:generate_pdf_main",
    ),
    CommandSpec(
        name="take",
        summary="Take a generated quiz.",
        target="quizgen.commands.quiz:take_main",
        is_interactive=True,
    ),
    CommandSpec(
        name="history",
        summary="List past results and dashboard statistics.",
        target="quizgen.commands.results:history_main",
    ),
    CommandSpec(
        name="report",
        summary="Show the detailed report for a result.",
        target="quizgen.commands.results:report_main",
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}


def format_command_table() -> str:
    """Return a formatted command table for help output."""

    width = max(len(spec.name) for spec in _COMMAND_SPECS)
    lines = ["Available commands:"]
    for spec in _COMMAND_SPECS:
        suffix = " (interactive)" if spec.is_interactive else ""
        lines.append(f"  {spec.name.ljust(width)}  {spec.summary}{suffix}")
    return "\n".join(lines)


def format_usage() -> str:
    parts = [
        "Usage: quizgen <command> [args...]",
        "Run `quizgen list` for commands or `quizgen help <name>` for details.",
        "",
        format_command_table(),
    ]
    return "\n".join(parts)


def _print(
    text: str, *, stream: Optional[Callable[[str], object]] = None
) -> None:
    target = stream if stream is not None else sys.stdout.write
    if text:
        target(text + "\n")


def _handle_version() -> int:
    try:
        version = metadata.version("quizgen-client")
    except metadata.PackageNotFoundError:
        version = "unknown"
    _print(version)
    return 0


def _handle_help(argv: Sequence[str]) -> int:
    if not argv:
        _print(format_usage())
        return 0
    spec = COMMANDS.get(argv[0])
    if not spec:
        _print(f"Unknown command '{argv[0]}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2
    _print(f"{spec.name}: {spec.summary}")
    _print(f"Run `quizgen {spec.name} --help` for command options.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])

    if not args:
        _print(format_usage())
        return 2

    head, *tail = args
    if head in ("-h", "--help"):
        _print(format_usage())
        return 0
    if head in ("-V", "--version", "version"):
        return _handle_version()
    if head == "list":
        _print(format_command_table())
        return 0
    if head == "help":
        return _handle_help(tail)

    spec = COMMANDS.get(head)
    if spec is None:
        _print(f"Unknown command '{head}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2
    return spec.run(tail)


def _normalize_system_exit(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    _print(str(code), stream=sys.stderr.write)
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
