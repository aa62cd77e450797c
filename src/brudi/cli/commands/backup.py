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

from ...source import BACKUP_KINDS, do_backup_for_kind
from ..core.common import _cancel_on_signals, _ctx_flag, _load_tree, _run_cli
from ..ui import console

_BACKUP_HELP = {
    "directory": "Back up a directory with restic as-is.",
    "fsbackup": "Back up a directory with restic after checking that it exists.",
    "mongodump": "Dump a MongoDB database with mongodump.",
    "mysqldump": "Dump a MySQL or MariaDB database with mysqldump.",
    "pgdump": "Dump a PostgreSQL database with pg_dump.",
    "redisdump": "Save a Redis RDB snapshot with redis-cli --rdb.",
    "tar": "Create a tar archive of the configured paths.",
    "xfsdump": "Dump an XFS filesystem with xfsdump.",
}

_BACKUP_EPILOG = (
    "Settings are read from the {kind} table of the config files.\n\n"
    "Examples:\n"
    "  brudi -c ./brudi.toml {kind}\n"
    "  brudi -c ./brudi.toml --restic --cleanup {kind}\n"
)


def register(app: typer.Typer) -> None:
    for kind in BACKUP_KINDS:
        app.command(
            name=kind,
            help=f"{_BACKUP_HELP.get(kind, f'Run the {kind} backup.')}\n\n"
            + _BACKUP_EPILOG.format(kind=kind),
            rich_help_panel="Backup",
        )(_backup_command(kind))


def _backup_command(kind: str) -> Callable[[typer.Context], None]:
    def command(ctx: typer.Context) -> None:
        debug = _ctx_flag(ctx, "debug")
        quiet = _ctx_flag(ctx, "quiet")

        def _run() -> None:
            tree = _load_tree(ctx)
            with _cancel_on_signals() as run_ctx:
                result = do_backup_for_kind(
                    run_ctx,
                    kind,
                    tree,
                    cleanup=_ctx_flag(ctx, "cleanup"),
                    use_restic=_ctx_flag(ctx, "restic"),
                    use_restic_forget=_ctx_flag(ctx, "restic_forget"),
                    use_restic_prune=_ctx_flag(ctx, "restic_prune"),
                )
            if result is not None and not quiet:
                console.print(f"[success]Saved snapshot[/success] {result.snapshot_id}")

        _run_cli(_run, debug=debug)

    command.__name__ = kind
    return command
