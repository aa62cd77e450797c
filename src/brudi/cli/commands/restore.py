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

from collections.abc import Callable

import typer

from ...source import RESTORE_KINDS, do_restore_for_kind
from ..core.common import _cancel_on_signals, _ctx_flag, _load_tree, _run_cli
from ..ui import console

_RESTORE_HELP = {
    "directoryrestore": "Restore a directory from restic.",
    "fsrestore": "Restore a directory from restic.",
    "mongorestore": "Restore a MongoDB dump with mongorestore.",
    "mysqlrestore": "Restore a MySQL or MariaDB dump with the mysql client.",
    "pgrestore": "Restore a PostgreSQL archive with pg_restore.",
    "psql": "Restore a plain PostgreSQL dump with psql.",
    "redisrestore": "Replace the Redis RDB file with a saved snapshot.",
    "tarrestore": "Extract a tar archive.",
    "xfsrestore": "Restore an XFS filesystem with xfsrestore.",
}

_RESTORE_EPILOG = (
    "Settings are read from the {kind} table of the config files.\n\n"
    "Examples:\n"
    "  brudi -c ./brudi.toml {kind}\n"
    "  brudi -c ./brudi.toml --restic {kind}\n"
)


def register(app: typer.Typer) -> None:
    for kind in RESTORE_KINDS:
        app.command(
            name=kind,
            help=f"{_RESTORE_HELP.get(kind, f'Run the {kind} restore.')}\n\n"
            + _RESTORE_EPILOG.format(kind=kind),
            rich_help_panel="Restore",
        )(_restore_command(kind))


def _restore_command(kind: str) -> Callable[[typer.Context], None]:
    def command(ctx: typer.Context) -> None:
        debug = _ctx_flag(ctx, "debug")
        quiet = _ctx_flag(ctx, "quiet")

        def _run() -> None:
            tree = _load_tree(ctx)
            with _cancel_on_signals() as run_ctx:
                do_restore_for_kind(
                    run_ctx,
                    kind,
                    tree,
                    cleanup=_ctx_flag(ctx, "cleanup"),
                    use_restic=_ctx_flag(ctx, "restic"),
                )
            if not quiet:
                console.print(f"[success]Restored[/success] {kind}")

        _run_cli(_run, debug=debug)

    command.__name__ = kind
    return command
