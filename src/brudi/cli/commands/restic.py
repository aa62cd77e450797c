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
from typing import Any

import typer

from ...restic import ResticClient
from ...source.common import system_hostname
from ..core.common import _cancel_on_signals, _ctx_flag, _load_tree, _run_cli
from ..ui import build_kv_table, build_table, console

_RESTIC_HELP = (
    "Maintain the restic repository configured in the restic table.\n\n"
    "Examples:\n"
    "  brudi -c ./brudi.toml restic snapshots\n"
    "  brudi -c ./brudi.toml restic forget\n"
    "  brudi -c ./brudi.toml restic ls latest --long\n"
)

restic_app = typer.Typer(add_completion=False, help=_RESTIC_HELP, no_args_is_help=True)


def register(app: typer.Typer) -> None:
    app.add_typer(restic_app, name="restic", rich_help_panel="Repository")


def _with_client(ctx: typer.Context, func: Callable[[ResticClient, Any], None]) -> None:
    def _run() -> None:
        tree = _load_tree(ctx)
        client = ResticClient.from_tree(tree, hostname=system_hostname())
        with _cancel_on_signals() as run_ctx:
            func(client, run_ctx)

    _run_cli(_run, debug=_ctx_flag(ctx, "debug"))


def _print_output(ctx: typer.Context, output: bytes) -> None:
    text = output.decode("utf-8", errors="replace").strip()
    if text and not _ctx_flag(ctx, "quiet"):
        console.print(text, markup=False, highlight=False)


@restic_app.command(help="List the snapshots in the repository.")
def snapshots(
    ctx: typer.Context,
    ids: list[str] | None = typer.Argument(None, help="Only show these snapshot IDs."),
    host: str | None = typer.Option(None, "--host", "-H", help="Only show snapshots of this host."),
    tag: list[str] | None = typer.Option(None, "--tag", help="Only show snapshots with this tag."),
    path: list[str] | None = typer.Option(None, "--path", help="Only show snapshots of this path."),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        opts = client.config.snapshots
        if ids:
            opts.ids = list(ids)
        if host:
            opts.flags.host = host
        if tag:
            opts.flags.tags = list(tag)
        if path:
            opts.flags.paths = list(path)
        rows = [
            (
                snapshot.short_id,
                snapshot.time,
                snapshot.hostname,
                ", ".join(snapshot.tags),
                ", ".join(snapshot.paths),
            )
            for snapshot in client.list_snapshots(run_ctx)
        ]
        console.print(build_table(("ID", "Time", "Host", "Tags", "Paths"), rows, title="Snapshots"))

    _with_client(ctx, _run)


@restic_app.command(help="Check the repository for errors.")
def check(
    ctx: typer.Context,
    read_data: bool = typer.Option(False, "--read-data", help="Read all data blobs."),
    read_data_subset: str | None = typer.Option(
        None, "--read-data-subset", help="Read a subset of data packs (e.g. 1/5 or 10%)."
    ),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        if read_data:
            client.config.check.read_data = True
        if read_data_subset:
            client.config.check.read_data_subset = read_data_subset
        _print_output(ctx, client.check(run_ctx))

    _with_client(ctx, _run)


@restic_app.command(help="Forget snapshots according to the configured retention policy.")
def forget(
    ctx: typer.Context,
    prune: bool = typer.Option(False, "--prune", help="Run prune after forgetting."),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        flags = client.config.forget.flags
        run_prune = prune or flags.prune
        flags.prune = False
        removed = client.do_forget(run_ctx)
        if not _ctx_flag(ctx, "quiet"):
            console.print(f"[success]Removed {len(removed)} snapshot(s)[/success]")
            for snapshot_id in removed:
                console.print(f"  {snapshot_id}", markup=False)
        if run_prune:
            _print_output(ctx, client.do_prune(run_ctx))

    _with_client(ctx, _run)


@restic_app.command(help="Remove unreferenced data from the repository.")
def prune(ctx: typer.Context) -> None:
    _with_client(ctx, lambda client, run_ctx: _print_output(ctx, client.do_prune(run_ctx)))


@restic_app.command(name="rebuild-index", help="Rebuild the repository index.")
def rebuild_index(ctx: typer.Context) -> None:
    _with_client(ctx, lambda client, run_ctx: _print_output(ctx, client.rebuild_index(run_ctx)))


@restic_app.command(help="Remove stale locks from the repository.")
def unlock(
    ctx: typer.Context,
    remove_all: bool = typer.Option(False, "--remove-all", help="Remove all locks, even active ones."),
) -> None:
    _with_client(
        ctx,
        lambda client, run_ctx: _print_output(ctx, client.unlock(run_ctx, remove_all=remove_all)),
    )


@restic_app.command(help="Modify the tags of snapshots.")
def tag(
    ctx: typer.Context,
    ids: list[str] | None = typer.Argument(None, help="Snapshot IDs to modify."),
    add: list[str] | None = typer.Option(None, "--add", help="Tag to add."),
    remove: list[str] | None = typer.Option(None, "--remove", help="Tag to remove."),
    set_: list[str] | None = typer.Option(None, "--set", help="Replace all tags with this tag."),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        opts = client.config.tags
        if ids:
            opts.ids = list(ids)
        if add:
            opts.flags.add = list(add)
        if remove:
            opts.flags.remove = list(remove)
        if set_:
            opts.flags.set = list(set_)
        _print_output(ctx, client.tag(run_ctx))

    _with_client(ctx, _run)


@restic_app.command(help="List files in snapshots.")
def ls(
    ctx: typer.Context,
    snapshot_ids: list[str] | None = typer.Argument(None, help="Snapshot IDs (default: latest)."),
    long: bool = typer.Option(False, "--long", "-l", help="Show size and modification time."),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        opts = client.config.ls
        opts.snapshot_ids = list(snapshot_ids or opts.snapshot_ids or ["latest"])
        if long:
            opts.flags.long = True
        for result in client.ls(run_ctx):
            rows = [(item.path, item.size, item.time) for item in result.files]
            console.print(
                build_table(("Path", "Size", "Modified"), rows, title=f"Snapshot {result.snapshot_id}")
            )

    _with_client(ctx, _run)


@restic_app.command(help="Find files matching a pattern in snapshots.")
def find(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Pattern to search for."),
    snapshot: str | None = typer.Option(None, "--snapshot", "-s", help="Only search this snapshot."),
    ignore_case: bool = typer.Option(False, "--ignore-case", "-i", help="Ignore case in the pattern."),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        opts = client.config.find
        opts.pattern = pattern
        if snapshot:
            opts.flags.snapshot_id = snapshot
        if ignore_case:
            opts.flags.ignore_case = True
        rows = [
            (result.snapshot or "", match.path, match.size, match.mtime)
            for result in client.find(run_ctx)
            for match in result.matches
        ]
        console.print(build_table(("Snapshot", "Path", "Size", "Modified"), rows, title="Matches"))

    _with_client(ctx, _run)


@restic_app.command(help="Show repository statistics.")
def stats(
    ctx: typer.Context,
    ids: list[str] | None = typer.Argument(None, help="Only count these snapshot IDs."),
    mode: str | None = typer.Option(
        None, "--mode", help="Counting mode (restore-size, files-by-contents, raw-data, blobs-per-file)."
    ),
) -> None:
    def _run(client: ResticClient, run_ctx: Any) -> None:
        opts = client.config.stats
        if ids:
            opts.ids = list(ids)
        if mode:
            opts.flags.mode = mode
        result = client.stats(run_ctx)
        rows = [
            ("Total size", result.total_size),
            ("Total files", result.total_file_count),
            ("Total blobs", result.total_blob_count),
        ]
        console.print(build_kv_table([(key, str(value)) for key, value in rows], title="Stats"))

    _with_client(ctx, _run)
