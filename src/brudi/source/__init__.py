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


from .backup import BACKUP_KINDS, backup_backend_for_kind, do_backup_for_kind
from .restore import RESTORE_KINDS, do_restore_for_kind, restore_backend_for_kind
from .types import BackupBackend, RestoreBackend, StreamBackupBackend, StreamRestoreBackend

__all__ = [
    "BACKUP_KINDS",
    "RESTORE_KINDS",
    "BackupBackend",
    "RestoreBackend",
    "StreamBackupBackend",
    "StreamRestoreBackend",
    "backup_backend_for_kind",
    "do_backup_for_kind",
    "do_restore_for_kind",
    "restore_backend_for_kind",
]
