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

from ..config import ConfigTree
from ..errors import ConfigError, UnsupportedKindError
from ..log import FieldLogger, get_logger
from ..process.runner import RunContext
from ..restic import BackupResult, ResticClient
from .directory import DIRECTORY_KIND, FS_BACKUP_KIND, DirectoryBackend, FsBackupBackend
from .mongo import MongoDumpBackend
from .mysql import MysqlDumpBackend
from .postgres import PgDumpBackend
from .redis import RedisDumpBackend
from .tar import TarBackend
from .types import BackupBackend, RestoreBackend, StreamBackupBackend
from .xfs import XfsDumpBackend

BACKUP_BACKENDS = {
    DIRECTORY_KIND: DirectoryBackend,
    FS_BACKUP_KIND: FsBackupBackend,
    MongoDumpBackend.kind: MongoDumpBackend,
    MysqlDumpBackend.kind: MysqlDumpBackend,
    PgDumpBackend.kind: PgDumpBackend,
    RedisDumpBackend.kind: RedisDumpBackend,
    TarBackend.kind: TarBackend,
    XfsDumpBackend.kind: XfsDumpBackend,
}
BACKUP_KINDS = tuple(sorted(BACKUP_BACKENDS))

# kinds whose data restic reads from a directory; streamed through tar
TAR_STREAM_KINDS = frozenset({DIRECTORY_KIND, FS_BACKUP_KIND})

logger = get_logger(__name__)


def backup_backend_for_kind(kind: str, tree: ConfigTree, *, stdin: bool = False) -> BackupBackend:
    backend = BACKUP_BACKENDS.get(kind)
    if backend is None:
        raise UnsupportedKindError(kind)
    return backend.from_tree(tree, stdin=stdin)


def stream_filename(client: ResticClient, kind: str) -> str:
    return client.config.backup.flags.stdin_filename or kind


def clean_up_backend(backend: BackupBackend | RestoreBackend, log: FieldLogger) -> None:
    cleanup_log = log.with_fields(path=backend.backup_path, cmd="cleanup")
    try:
        backend.clean_up()
    except OSError as exc:
        cleanup_log.warning("failed to cleanup backup: %s", exc)
        return
    cleanup_log.info("successfully cleaned up backup")


def do_backup_for_kind(
    ctx: RunContext | None,
    kind: str,
    tree: ConfigTree,
    *,
    cleanup: bool = False,
    use_restic: bool = False,
    use_restic_forget: bool = False,
    use_restic_prune: bool = False,
) -> BackupResult | None:
    """Run the ``kind`` backup and, when asked, hand its result to restic.

    Returns the restic snapshot when restic ran. Cleanup failures are logged
    and never change the outcome.
    """
    stdin = tree.do_stdin_backup
    if stdin and not use_restic:
        raise ConfigError("doStdinBackup is enabled but restic is disabled")
    log = logger.with_fields(kind=kind)
    backend = backup_backend_for_kind(kind, tree, stdin=stdin)

    if stdin:
        return _stream_backup(ctx, kind, tree, backend, log, use_restic_forget, use_restic_prune)

    backend.create_backup(ctx)
    try:
        log.info("finished backing up")
        if not use_restic:
            return None
        client = ResticClient.from_tree(
            tree,
            hostname=backend.hostname,
            backup_paths=[backend.backup_path],
            log=log,
        )
        use_restic_prune = _split_prune(client, use_restic_prune)
        result = client.do_backup(ctx)
        _apply_retention(ctx, client, use_restic_forget, use_restic_prune)
        return result
    finally:
        if cleanup:
            clean_up_backend(backend, log)


def _stream_backup(
    ctx: RunContext | None,
    kind: str,
    tree: ConfigTree,
    backend: BackupBackend,
    log: FieldLogger,
    use_restic_forget: bool,
    use_restic_prune: bool,
) -> BackupResult:
    if kind in TAR_STREAM_KINDS:
        backend.create_backup(ctx)
        client = ResticClient.from_tree(
            tree,
            hostname=backend.hostname,
            backup_paths=[backend.backup_path],
            log=log,
        )
        use_restic_prune = _split_prune(client, use_restic_prune)
        result = client.do_tar_backup(ctx, stream_filename(client, kind))
    elif isinstance(backend, StreamBackupBackend):
        client = ResticClient.from_tree(tree, hostname=backend.hostname, log=log)
        use_restic_prune = _split_prune(client, use_restic_prune)
        result = client.do_stdin_backup(ctx, backend.backup_command(), stream_filename(client, kind))
    else:
        raise ConfigError(f"{kind} can't stream its backup but doStdinBackup is set")
    log.info("finished backing up")
    _apply_retention(ctx, client, use_restic_forget, use_restic_prune)
    return result


def _split_prune(client: ResticClient, use_restic_prune: bool) -> bool:
    # restic prints no JSON for `forget --prune`, so prune runs as its own command
    flags = client.config.forget.flags
    if flags.prune:
        flags.prune = False
        return True
    return use_restic_prune


def _apply_retention(
    ctx: RunContext | None,
    client: ResticClient,
    use_restic_forget: bool,
    use_restic_prune: bool,
) -> None:
    if use_restic_forget:
        client.do_forget(ctx)
    if use_restic_prune:
        client.do_prune(ctx)
