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
from ..log import get_logger
from ..process.runner import RunContext
from ..restic import ResticClient
from .backup import clean_up_backend, stream_filename
from .directory import (
    DIRECTORY_RESTORE_KIND,
    FS_RESTORE_KIND,
    DirectoryRestoreBackend,
    FsRestoreBackend,
)
from .mongo import MongoRestoreBackend
from .mysql import MysqlRestoreBackend
from .postgres import PgRestoreBackend, PsqlBackend
from .redis import RedisRestoreBackend
from .tar import TarRestoreBackend
from .types import RestoreBackend
from .xfs import XfsRestoreBackend

RESTORE_BACKENDS = {
    DIRECTORY_RESTORE_KIND: DirectoryRestoreBackend,
    FS_RESTORE_KIND: FsRestoreBackend,
    MongoRestoreBackend.kind: MongoRestoreBackend,
    MysqlRestoreBackend.kind: MysqlRestoreBackend,
    PgRestoreBackend.kind: PgRestoreBackend,
    PsqlBackend.kind: PsqlBackend,
    RedisRestoreBackend.kind: RedisRestoreBackend,
    TarRestoreBackend.kind: TarRestoreBackend,
    XfsRestoreBackend.kind: XfsRestoreBackend,
}
RESTORE_KINDS = tuple(sorted(RESTORE_BACKENDS))

TAR_STREAM_KINDS = frozenset({DIRECTORY_RESTORE_KIND, FS_RESTORE_KIND})
STREAM_KINDS = TAR_STREAM_KINDS | {
    MysqlRestoreBackend.kind,
    PgRestoreBackend.kind,
    PsqlBackend.kind,
    TarRestoreBackend.kind,
}

logger = get_logger(__name__)


def restore_backend_for_kind(kind: str, tree: ConfigTree, *, stdin: bool = False) -> RestoreBackend:
    backend = RESTORE_BACKENDS.get(kind)
    if backend is None:
        raise UnsupportedKindError(kind)
    if not stdin:
        return backend.from_tree(tree)
    if kind not in STREAM_KINDS:
        raise ConfigError(f"can't restore {kind} from STDIN but doStdinBackup is set")
    return backend.from_tree(tree, stdin=True)


def do_restore_for_kind(
    ctx: RunContext | None,
    kind: str,
    tree: ConfigTree,
    *,
    cleanup: bool = False,
    use_restic: bool = False,
) -> None:
    stdin = tree.do_stdin_backup
    if stdin and not use_restic:
        raise ConfigError("doStdinBackup is enabled but restic is disabled")
    log = logger.with_fields(kind=kind)
    backend = restore_backend_for_kind(kind, tree, stdin=stdin)

    if stdin:
        paths = [backend.backup_path] if kind in TAR_STREAM_KINDS else []
        client = ResticClient.from_tree(tree, hostname=backend.hostname, backup_paths=paths, log=log)
        filename = stream_filename(client, kind)
        if kind in TAR_STREAM_KINDS:
            client.do_tar_restore(ctx, filename)
        else:
            client.do_stdin_restore(ctx, backend.restore_command(), filename)
        log.info("finished restoring")
        return

    if use_restic:
        client = ResticClient.from_tree(
            tree,
            hostname=backend.hostname,
            backup_paths=[backend.backup_path],
            log=log,
        )
        client.do_restore(ctx)

    backend.restore_backup(ctx)
    log.info("finished restoring")
    if cleanup:
        clean_up_backend(backend, log)
