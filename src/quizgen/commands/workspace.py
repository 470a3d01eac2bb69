"""Workspace and configuration bootstrap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from quizgen.core import config as config_mod
from quizgen.core import workspace as workspace_mod


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def init_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen init",
        description="Bootstrap the quizgen workspace directories.",
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Override the workspace root (defaults to QUIZGEN_DATA_HOME "
        "or ~/.quizgen-data).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if args.quiet:
        return 0

    lines = [
        f"Workspace ready at {layout.home} "
        f"({_format_created(layout.created, 'home')})",
        "Subdirectories:",
    ]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        status = _format_created(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="quizgen config",
        description="Manage the quizgen TOML configuration.",
    )
    sub = parser.add_subparsers(dest="action", required=True)
    init = sub.add_parser("init", help="Write the default config template.")
    init.add_argument("--path", type=Path, help="Destination file.")
    init.add_argument(
        "--workspace", type=Path, help="Override the workspace root."
    )
    init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file."
    )
    show = sub.add_parser("path", help="Print the resolved config path.")
    show.add_argument(
        "--workspace", type=Path, help="Override the workspace root."
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
        if args.action == "path":
            path, _ = config_mod.resolve_config_path(workspace=layout)
            sys.stdout.write(f"{path}\n")
            return 0
        target = args.path or (
            layout.path_for("config") / config_mod.CONFIG_FILENAME
        )
        written = config_mod.write_template(target, overwrite=args.force)
    except (config_mod.ConfigError, workspace_mod.WorkspaceError) as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    sys.stdout.write(f"Wrote config template to {written}\n")
    return 0
