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

"""Thin wrappers around the ``restic`` subcommands.

Each wrapper marshals its option dataclasses, runs ``restic <cmd> --json``
and decodes whatever restic prints for that subcommand.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

from ..errors import CommandError, RepoAlreadyInitializedError, ResticParseError
from ..log import get_logger
from ..process.args import struct_to_cli
from ..process.command import CommandSpec
from ..process.runner import CMD_TIMEOUT, RunContext, run, run_piped_with_timeout, run_with_timeout
from ..process.tar import STREAM_FILE, TAR_BINARY, TarFlags, TarOptions
from .types import (
    BackupOptions,
    BackupResult,
    CheckFlags,
    DumpOptions,
    FindOptions,
    FindResult,
    ForgetGroup,
    ForgetOptions,
    GlobalOptions,
    LsFile,
    LsOptions,
    LsResult,
    RestoreOptions,
    Snapshot,
    SnapshotOptions,
    Stats,
    StatsOptions,
    TagOptions,
    UnlockFlags,
    UnlockOptions,
)

BINARY = "restic"
FILE_TYPE = "file"
SUMMARY_MESSAGE = "summary"
STREAM_NICE = 19
STREAM_IONICE = 2

_ALREADY_INITIALIZED_MARKERS = ("config already initialized", "file already exists")

logger = get_logger(__name__)


def new_command(command: str, *args: str, nice: int | None = None, ionice: int | None = None) -> CommandSpec:
    return CommandSpec(
        binary=BINARY,
        command=command,
        args=("--json", *args),
        nice=nice,
        ionice=ionice,
    )


def init_backup(ctx: RunContext | None, global_opts: GlobalOptions) -> bytes:
    cmd = new_command("init", *struct_to_cli(global_opts))
    try:
        return run_with_timeout(ctx, cmd, CMD_TIMEOUT)
    except CommandError as exc:
        text = exc.output_text
        if any(marker in text for marker in _ALREADY_INITIALIZED_MARKERS):
            raise RepoAlreadyInitializedError(exc.output) from exc
        raise


def wrap_json_lines(output: bytes) -> bytes:
    text = output.decode("utf-8", errors="replace").rstrip("\n")
    return ("[" + text.replace("\n", ",") + "]").encode("utf-8")


def json_message_lines(output: bytes) -> bytes:
    """Keep only the lines that hold a JSON object, dropping a piped source's stderr."""
    lines = output.decode("utf-8", errors="replace").splitlines()
    return "\n".join(line for line in lines if line.lstrip().startswith("{")).encode("utf-8")


def parse_backup_output(output: bytes, *, json_lines_only: bool = False) -> BackupResult:
    payload = json_message_lines(output) if json_lines_only else output
    try:
        messages = json.loads(wrap_json_lines(payload))
    except json.JSONDecodeError as exc:
        raise ResticParseError(f"failed to decode restic backup output: {exc}", output) from exc
    snapshot_id = ""
    parent = ""
    for message in messages:
        if not isinstance(message, dict) or message.get("message_type") != SUMMARY_MESSAGE:
            continue
        if message.get("snapshot_id"):
            snapshot_id = str(message["snapshot_id"])
        if message.get("parent"):
            parent = str(message["parent"])
    if not snapshot_id:
        raise ResticParseError("failed to parse snapshotID", output)
    return BackupResult(snapshot_id=snapshot_id, parent_snapshot_id=parent)


def create_backup(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    backup_opts: BackupOptions,
    unlock_first: bool = True,
) -> BackupResult:
    if unlock_first:
        unlock(ctx, global_opts, UnlockOptions(flags=UnlockFlags(remove_all=False)))
    cmd = new_command("backup", *struct_to_cli(global_opts), *struct_to_cli(backup_opts))
    output = run_with_timeout(ctx, cmd, CMD_TIMEOUT)
    return parse_backup_output(output)


def create_stdin_backup(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    backup_opts: BackupOptions,
    source_cmd: CommandSpec,
    filename: str,
    *,
    nice: int | None = None,
    ionice: int | None = None,
) -> BackupResult:
    """Pipe ``source_cmd`` straight into ``restic backup --stdin``."""
    flags = replace(backup_opts.flags, stdin=True, stdin_filename=filename, exclude=[])
    stdin_opts = replace(backup_opts, flags=flags, paths=[])
    cmd = new_command(
        "backup",
        *struct_to_cli(global_opts),
        *struct_to_cli(stdin_opts),
        nice=nice,
        ionice=ionice,
    )
    output = run_piped_with_timeout(ctx, source_cmd, cmd, CMD_TIMEOUT)
    return parse_backup_output(output, json_lines_only=True)


def create_tar_backup(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    backup_opts: BackupOptions,
    tar_name: str,
) -> BackupResult:
    tar_opts = TarOptions(
        flags=TarFlags(create=True, file=STREAM_FILE, exclude=list(backup_opts.flags.exclude)),
        paths=list(backup_opts.paths),
    )
    tar_cmd = CommandSpec(
        binary=TAR_BINARY,
        args=tuple(struct_to_cli(tar_opts)),
        nice=STREAM_NICE,
        ionice=STREAM_IONICE,
    )
    return create_stdin_backup(
        ctx,
        global_opts,
        backup_opts,
        tar_cmd,
        tar_name,
        nice=STREAM_NICE,
        ionice=STREAM_IONICE,
    )


def parse_ls_output(output: bytes, *, long: bool) -> list[LsResult]:
    results: list[LsResult] = []
    current: LsResult | None = None
    for raw_line in output.decode("utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ResticParseError(f"failed to decode restic ls output: {exc}", output) from exc
        if not isinstance(message, dict):
            continue
        if message.get("short_id"):
            if current is not None:
                results.append(current)
            current = LsResult(
                snapshot_id=message["short_id"],
                paths=list(message.get("paths") or []),
                time=message.get("time") or "",
            )
            continue
        if message.get("type") != FILE_TYPE:
            continue
        if current is None:
            current = LsResult(snapshot_id="")
        if not long:
            current.files.append(LsFile(path=message.get("path") or ""))
            continue
        size = int(message.get("size") or 0)
        current.size += size
        current.files.append(
            LsFile(
                path=message.get("path") or "",
                permissions=message.get("mode"),
                user=message.get("uid"),
                group=message.get("gid"),
                size=size,
                time=message.get("mtime") or "",
            )
        )
    if current is not None:
        results.append(current)
    return results


def ls(ctx: RunContext | None, global_opts: GlobalOptions, opts: LsOptions) -> list[LsResult]:
    cmd = new_command("ls", *struct_to_cli(global_opts), *struct_to_cli(opts))
    output = run(ctx, cmd)
    return parse_ls_output(output, long=opts.flags.long)


def stats(ctx: RunContext | None, global_opts: GlobalOptions, opts: StatsOptions) -> Stats:
    cmd = new_command("stats", *struct_to_cli(global_opts), *struct_to_cli(opts))
    output = run(ctx, cmd)
    data = _decode(output, "stats")
    if not isinstance(data, dict):
        raise ResticParseError("unexpected restic stats output", output)
    return Stats.from_json(data)


def get_snapshot_size(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    snapshot_ids: list[str],
) -> int:
    try:
        return stats(ctx, global_opts, StatsOptions(ids=list(snapshot_ids))).total_size
    except (CommandError, ResticParseError) as exc:
        logger.with_fields(error=exc).debug("failed to determine snapshot size")
        return 0


def get_snapshot_size_by_path(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    snapshot_id: str,
    path: str,
) -> int:
    opts = LsOptions(snapshot_ids=[snapshot_id])
    opts.flags.long = True
    try:
        results = ls(ctx, global_opts, opts)
    except (CommandError, ResticParseError) as exc:
        logger.with_fields(error=exc).debug("failed to determine snapshot size")
        return 0
    return sum(item.size for result in results for item in result.files if item.path.startswith(path))


def list_snapshots(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    opts: SnapshotOptions,
) -> list[Snapshot]:
    cmd = new_command("snapshots", *struct_to_cli(global_opts), *struct_to_cli(opts))
    output = run(ctx, cmd)
    return [Snapshot.from_json(item) for item in _decode_objects(output, "snapshots")]


def find(ctx: RunContext | None, global_opts: GlobalOptions, opts: FindOptions) -> list[FindResult]:
    cmd = new_command("find", *struct_to_cli(global_opts), *struct_to_cli(opts))
    output = run(ctx, cmd)
    return [FindResult.from_json(item) for item in _decode_objects(output, "find")]


def check(ctx: RunContext | None, global_opts: GlobalOptions, flags: CheckFlags) -> bytes:
    cmd = new_command("check", *struct_to_cli(global_opts), *struct_to_cli(flags))
    return run(ctx, cmd)


def parse_forget_output(output: bytes) -> list[str]:
    removed: list[str] = []
    for group in _decode_objects(output, "forget"):
        for snapshot in ForgetGroup.from_json(group).remove:
            if snapshot.id is not None:
                removed.append(snapshot.id)
    return removed


def forget(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    opts: ForgetOptions,
) -> tuple[list[str], bytes]:
    compact_opts = replace(opts, flags=replace(opts.flags, compact=True))
    cmd = new_command("forget", *struct_to_cli(global_opts), *struct_to_cli(compact_opts))
    output = run(ctx, cmd)
    return parse_forget_output(output), output


def prune(ctx: RunContext | None, global_opts: GlobalOptions) -> bytes:
    cmd = new_command("prune", *struct_to_cli(global_opts))
    return run(ctx, cmd)


def rebuild_index(ctx: RunContext | None, global_opts: GlobalOptions) -> bytes:
    cmd = new_command(
        "rebuild-index",
        *struct_to_cli(global_opts),
        nice=STREAM_NICE,
        ionice=STREAM_IONICE,
    )
    return run(ctx, cmd)


def restore_backup(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    opts: RestoreOptions,
    unlock_first: bool = False,
) -> bytes:
    if unlock_first:
        unlock(ctx, global_opts, UnlockOptions(flags=UnlockFlags(remove_all=False)))
    cmd = new_command("restore", *struct_to_cli(global_opts), *struct_to_cli(opts))
    return run_with_timeout(ctx, cmd, CMD_TIMEOUT)


def dump_to(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    dump_opts: DumpOptions,
    sink_cmd: CommandSpec,
    *,
    nice: int | None = None,
    ionice: int | None = None,
) -> bytes:
    """Stream ``restic dump <id> <file>`` into ``sink_cmd``."""
    cmd = CommandSpec(
        binary=BINARY,
        command="dump",
        args=(*struct_to_cli(global_opts), *struct_to_cli(dump_opts)),
        nice=nice,
        ionice=ionice,
    )
    return run_piped_with_timeout(ctx, cmd, sink_cmd, CMD_TIMEOUT)


def restore_tar_backup(
    ctx: RunContext | None,
    global_opts: GlobalOptions,
    opts: RestoreOptions,
    tar_name: str,
) -> bytes:
    includes = [item[1:] for item in opts.flags.include if item.startswith("/")]
    tar_opts = TarOptions(
        flags=TarFlags(
            extract=True,
            file=STREAM_FILE,
            exclude=list(opts.flags.exclude),
            target=opts.flags.target,
        ),
        paths=includes,
    )
    tar_cmd = CommandSpec(
        binary=TAR_BINARY,
        args=tuple(struct_to_cli(tar_opts)),
        nice=STREAM_NICE,
        ionice=STREAM_IONICE,
    )
    return dump_to(
        ctx,
        global_opts,
        DumpOptions(id=opts.id, file=tar_name),
        tar_cmd,
        nice=STREAM_NICE,
        ionice=STREAM_IONICE,
    )


def unlock(ctx: RunContext | None, global_opts: GlobalOptions, opts: UnlockOptions) -> bytes:
    cmd = new_command("unlock", *struct_to_cli(global_opts), *struct_to_cli(opts))
    return run(ctx, cmd)


def tag(ctx: RunContext | None, global_opts: GlobalOptions, opts: TagOptions) -> bytes:
    cmd = new_command("tag", *struct_to_cli(global_opts), *struct_to_cli(opts))
    return run(ctx, cmd)


def _decode(output: bytes, command: str) -> Any:
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise ResticParseError(f"failed to decode restic {command} output: {exc}", output) from exc


def _decode_objects(output: bytes, command: str) -> list[dict[str, Any]]:
    data = _decode(output, command)
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ResticParseError(f"unexpected restic {command} output", output)
    return data
