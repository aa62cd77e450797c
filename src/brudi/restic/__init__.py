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


from .client import ResticClient
from .commands import (
    create_backup,
    create_stdin_backup,
    create_tar_backup,
    forget,
    get_snapshot_size,
    get_snapshot_size_by_path,
    init_backup,
    parse_backup_output,
    parse_forget_output,
    parse_ls_output,
    restore_backup,
    restore_tar_backup,
)
from .config import ResticConfig, load_restic_config
from .types import BackupResult, LsFile, LsResult, Snapshot

__all__ = [
    "BackupResult",
    "LsFile",
    "LsResult",
    "ResticClient",
    "ResticConfig",
    "Snapshot",
    "create_backup",
    "create_stdin_backup",
    "create_tar_backup",
    "forget",
    "get_snapshot_size",
    "get_snapshot_size_by_path",
    "init_backup",
    "load_restic_config",
    "parse_backup_output",
    "parse_forget_output",
    "parse_ls_output",
    "restore_backup",
    "restore_tar_backup",
]
