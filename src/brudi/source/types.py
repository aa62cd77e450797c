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

from typing import Protocol, runtime_checkable

from ..process.command import CommandSpec
from ..process.runner import RunContext


@runtime_checkable
class BackupBackend(Protocol):
    kind: str

    def create_backup(self, ctx: RunContext | None) -> None: ...

    @property
    def backup_path(self) -> str: ...

    @property
    def hostname(self) -> str: ...

    def clean_up(self) -> None: ...


@runtime_checkable
class StreamBackupBackend(BackupBackend, Protocol):
    """A backup backend whose dump command can write the backup to standard output."""

    def backup_command(self) -> CommandSpec: ...


@runtime_checkable
class RestoreBackend(Protocol):
    kind: str

    def restore_backup(self, ctx: RunContext | None) -> None: ...

    @property
    def backup_path(self) -> str: ...

    @property
    def hostname(self) -> str: ...

    def clean_up(self) -> None: ...


@runtime_checkable
class StreamRestoreBackend(RestoreBackend, Protocol):
    """A restore backend whose tool can read the backup from standard input."""

    def restore_command(self) -> CommandSpec: ...
