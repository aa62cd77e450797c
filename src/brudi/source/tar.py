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

from dataclasses import dataclass

from ..config import ConfigTree
from ..process.args import nested, setting, struct_to_cli
from ..process.command import CommandSpec
from ..process.runner import RunContext
from ..process.tar import STREAM_FILE, TAR_BINARY, TarOptions
from .cleanup import remove_file
from .common import load_kind_config, run_dump, system_hostname

KIND = "tar"
RESTORE_KIND = "tarrestore"


@dataclass
class TarConfig:
    options: TarOptions = nested(TarOptions)
    host_name: str = setting()


def _streaming(config: TarConfig) -> None:
    config.options.flags.file = STREAM_FILE


class TarBackend:
    kind = KIND

    def __init__(self, config: TarConfig) -> None:
        self.config = config
        config.options.flags.create = True
        config.options.flags.extract = False

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> TarBackend:
        return cls(load_kind_config(tree, KIND, TarConfig(), prepare=_streaming if stdin else None))

    def backup_command(self) -> CommandSpec:
        return CommandSpec(binary=TAR_BINARY, args=struct_to_cli(self.config.options))

    def create_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, self.backup_command())

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.file

    @property
    def hostname(self) -> str:
        return self.config.host_name or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)


class TarRestoreBackend:
    kind = RESTORE_KIND

    def __init__(self, config: TarConfig) -> None:
        self.config = config
        config.options.flags.extract = True
        config.options.flags.create = False

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> TarRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, TarConfig(), prepare=_streaming if stdin else None))

    def restore_command(self) -> CommandSpec:
        return CommandSpec(binary=TAR_BINARY, args=struct_to_cli(self.config.options))

    def restore_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, self.restore_command())

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.file

    @property
    def hostname(self) -> str:
        return self.config.host_name or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)
