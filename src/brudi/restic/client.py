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

from collections.abc import MutableMapping, Sequence

from ..config import ConfigTree
from ..errors import CommandError, RepoAlreadyInitializedError
from ..log import FieldLogger, get_logger
from ..process.command import CommandSpec
from ..process.runner import RunContext
from . import commands
from .config import ResticConfig, load_restic_config
from .types import (
    BackupResult,
    DumpOptions,
    FindResult,
    GlobalOptions,
    LsResult,
    Snapshot,
    Stats,
    UnlockFlags,
    UnlockOptions,
)


class ResticClient:
    """High-level restic operations bound to one configuration and backup path set."""

    def __init__(
        self,
        config: ResticConfig,
        *,
        hostname: str = "",
        backup_paths: Sequence[str] = (),
        log: FieldLogger | None = None,
    ) -> None:
        self.config = config
        self.log = (log or get_logger(__name__)).with_fields(cmd="restic")
        if not config.backup.flags.host:
            config.backup.flags.host = hostname or config.host
        config.backup.paths.extend(backup_paths)
        if backup_paths and not config.restore.flags.path:
            config.restore.flags.path = backup_paths[0]

    @classmethod
    def from_tree(
        cls,
        tree: ConfigTree,
        *,
        hostname: str = "",
        backup_paths: Sequence[str] = (),
        log: FieldLogger | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> ResticClient:
        config = load_restic_config(tree, hostname=hostname, environ=environ)
        return cls(config, hostname=hostname, backup_paths=backup_paths, log=log)

    @property
    def global_opts(self) -> GlobalOptions:
        return self.config.global_

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def init_repository(self, ctx: RunContext | None) -> None:
        try:
            commands.init_backup(ctx, self.global_opts)
        except RepoAlreadyInitializedError:
            self.log.info("restic repo is already initialized")
            return
        except CommandError:
            self.log.error("error while initializing restic repository")
            raise
        self.log.info("restic repo initialized successfully")

    def do_backup(self, ctx: RunContext | None) -> BackupResult:
        self.log.info("running 'restic backup'")
        self.init_repository(ctx)
        result = commands.create_backup(ctx, self.global_opts, self.config.backup, unlock_first=True)
        self.log.with_fields(
            snapshot=result.snapshot_id,
            parent=result.parent_snapshot_id or "-",
        ).info("successfully saved restic snapshot")
        return result

    def do_stdin_backup(self, ctx: RunContext | None, source_cmd: CommandSpec, filename: str) -> BackupResult:
        self.log.with_fields(filename=filename).info("running 'restic backup --stdin'")
        self.init_repository(ctx)
        self.unlock(ctx)
        result = commands.create_stdin_backup(
            ctx,
            self.global_opts,
            self.config.backup,
            source_cmd,
            filename,
            nice=commands.STREAM_NICE,
            ionice=commands.STREAM_IONICE,
        )
        self.log.with_fields(snapshot=result.snapshot_id).info("successfully saved restic snapshot")
        return result

    def do_tar_backup(self, ctx: RunContext | None, tar_name: str) -> BackupResult:
        self.log.with_fields(filename=tar_name).info("running 'tar | restic backup --stdin'")
        self.init_repository(ctx)
        self.unlock(ctx)
        result = commands.create_tar_backup(ctx, self.global_opts, self.config.backup, tar_name)
        self.log.with_fields(snapshot=result.snapshot_id).info("successfully saved restic snapshot")
        return result

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def do_restore(self, ctx: RunContext | None) -> bytes:
        self.log.info("running 'restic restore'")
        return commands.restore_backup(ctx, self.global_opts, self.config.restore, unlock_first=True)

    def do_stdin_restore(self, ctx: RunContext | None, sink_cmd: CommandSpec, filename: str) -> bytes:
        self.log.with_fields(filename=filename).info("running 'restic dump'")
        self.unlock(ctx)
        return commands.dump_to(
            ctx,
            self.global_opts,
            DumpOptions(id=self.config.restore.id, file=filename),
            sink_cmd,
            nice=commands.STREAM_NICE,
            ionice=commands.STREAM_IONICE,
        )

    def do_tar_restore(self, ctx: RunContext | None, tar_name: str) -> bytes:
        self.log.with_fields(filename=tar_name).info("running 'restic dump | tar -x'")
        self.unlock(ctx)
        return commands.restore_tar_backup(ctx, self.global_opts, self.config.restore, tar_name)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def do_forget(self, ctx: RunContext | None) -> list[str]:
        self.log.info("running 'restic forget'")
        removed, _ = commands.forget(ctx, self.global_opts, self.config.forget)
        self.log.with_fields(snapshots_removed=removed).info("successfully forgot restic snapshots")
        return removed

    def do_prune(self, ctx: RunContext | None) -> bytes:
        self.log.info("running 'restic prune'")
        return commands.prune(ctx, self.global_opts)

    def check(self, ctx: RunContext | None) -> bytes:
        self.log.info("running 'restic check'")
        return commands.check(ctx, self.global_opts, self.config.check)

    def rebuild_index(self, ctx: RunContext | None) -> bytes:
        self.log.info("running 'restic rebuild-index'")
        return commands.rebuild_index(ctx, self.global_opts)

    def tag(self, ctx: RunContext | None) -> bytes:
        self.log.info("running 'restic tag'")
        return commands.tag(ctx, self.global_opts, self.config.tags)

    def unlock(self, ctx: RunContext | None, *, remove_all: bool = False) -> bytes:
        return commands.unlock(ctx, self.global_opts, UnlockOptions(flags=UnlockFlags(remove_all=remove_all)))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_snapshots(self, ctx: RunContext | None) -> list[Snapshot]:
        self.log.debug("running 'restic snapshots'")
        return commands.list_snapshots(ctx, self.global_opts, self.config.snapshots)

    def ls(self, ctx: RunContext | None) -> list[LsResult]:
        self.log.debug("running 'restic ls'")
        return commands.ls(ctx, self.global_opts, self.config.ls)

    def find(self, ctx: RunContext | None) -> list[FindResult]:
        self.log.debug("running 'restic find'")
        return commands.find(ctx, self.global_opts, self.config.find)

    def stats(self, ctx: RunContext | None) -> Stats:
        self.log.debug("running 'restic stats'")
        return commands.stats(ctx, self.global_opts, self.config.stats)
