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

import os
from dataclasses import dataclass

from ..config import ConfigTree
from ..errors import ConfigError
from ..process.args import nested, setting
from ..process.runner import RunContext
from .common import load_kind_config, system_hostname

DIRECTORY_KIND = "directory"
DIRECTORY_RESTORE_KIND = "directoryrestore"
FS_BACKUP_KIND = "fsbackup"
FS_RESTORE_KIND = "fsrestore"


@dataclass
class PathOptions:
    path: str = setting(required=True)


@dataclass
class DirectoryConfig:
    options: PathOptions = nested(PathOptions)
    host_name: str = setting()


class _DirectoryBackend:
    """A backend whose data already sits in a directory restic can read directly."""

    kind = ""

    def __init__(self, config: DirectoryConfig) -> None:
        self.config = config

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> _DirectoryBackend:
        return cls(load_kind_config(tree, cls.kind, DirectoryConfig()))

    @property
    def backup_path(self) -> str:
        return self.config.options.path

    @property
    def hostname(self) -> str:
        return self.config.host_name or system_hostname()

    def clean_up(self) -> None:
        pass


class DirectoryBackend(_DirectoryBackend):
    kind = DIRECTORY_KIND

    def create_backup(self, ctx: RunContext | None) -> None:
        pass


class FsBackupBackend(_DirectoryBackend):
    kind = FS_BACKUP_KIND

    def create_backup(self, ctx: RunContext | None) -> None:
        path = self.backup_path
        if not os.path.exists(path):
            raise ConfigError(f"configured path {path} does not exist")
        if not os.path.isdir(path):
            raise ConfigError(f"configured path {path} is not a directory")


class DirectoryRestoreBackend(_DirectoryBackend):
    kind = DIRECTORY_RESTORE_KIND

    def restore_backup(self, ctx: RunContext | None) -> None:
        pass


class FsRestoreBackend(_DirectoryBackend):
    kind = FS_RESTORE_KIND

    def restore_backup(self, ctx: RunContext | None) -> None:
        pass
