#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.
from __future__ import annotations

import typer

from ..log import configure_logging
from . import command_registry
from .core.common import _get_version
from .ui import configure_ui, console, console_err

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Brudi backup orchestration CLI.",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"brudi {_get_version()}")
        raise typer.Exit()


@app.callback()
def cli(
    ctx: typer.Context,
    config: list[str] | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Use this TOML config file (repeatable, later files win).",
        rich_help_panel="Config",
    ),
    restic: bool = typer.Option(
        False,
        "--restic",
        help="Back up the result with restic.",
        rich_help_panel="Restic",
    ),
    restic_forget: bool = typer.Option(
        False,
        "--restic-forget",
        help="Run 'restic forget' after the backup.",
        rich_help_panel="Restic",
    ),
    restic_prune: bool = typer.Option(
        False,
        "--restic-prune",
        help="Run 'restic prune' after the backup.",
        rich_help_panel="Restic",
    ),
    cleanup: bool = typer.Option(
        False,
        "--cleanup",
        help="Remove local backup files once they are done with.",
        rich_help_panel="Behavior",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Show debug logs and tracebacks.",
        rich_help_panel="Debug",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Hide non-error output.",
        rich_help_panel="Global",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output.",
        rich_help_panel="Accessibility",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
        rich_help_panel="Info",
    ),
) -> None:
    _ = version
    configure_ui(no_color=no_color)
    configure_logging(console_err, debug=debug, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config": list(config or []),
            "restic": restic,
            "restic_forget": restic_forget,
            "restic_prune": restic_prune,
            "cleanup": cleanup,
            "debug": debug,
            "quiet": quiet,
            "no_color": no_color,
        }
    )


command_registry.register(app)


def main() -> None:
    app()
