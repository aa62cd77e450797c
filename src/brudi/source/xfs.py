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
from ..errors import ConfigError
from ..process.args import flag, nested, positional, setting, struct_to_cli
from ..process.command import CommandSpec
from ..process.runner import RunContext
from .cleanup import remove_file
from .common import load_kind_config, run_dump, system_hostname

DUMP_KIND = "xfsdump"
RESTORE_KIND = "xfsrestore"
DUMP_BINARY = "xfsdump"
RESTORE_BINARY = "xfsrestore"
STREAM_FILE = "-"


@dataclass
class XfsDumpFlags:
    ignore_offline_files: bool = flag("-a", False)
    exclude: bool = flag("-e", False)
    minimal_tape_protocol: bool = flag("-m", False)
    overwrite: bool = flag("-o", False)
    destination_is_qic: bool = flag("-q", False)
    no_extended_attributes: bool = flag("-A", False)
    pre_erase_media: bool = flag("-E", False)
    dont_prompt: bool = flag("-F", False)
    show_inventory: bool = flag("-I", False)
    inhibit_inventory_update: bool = flag("-J", False)
    resume: bool = flag("-R", False)
    inhibit_dialogue_timeouts: bool = flag("-T", False)
    block_size: int = flag("-b", 0)
    file_size: int = flag("-d", 0)
    level: int = flag("-l", 0)
    progress_interval: int = flag("-p", 0)
    max_file_size: int = flag("-z", 0)
    buffer_ring_length: int = flag("-Y", 0)
    alert_program: str = flag("-c")
    destination: str = flag("-f")
    subtree: list[str] = flag("-s", [])
    dump_time_file: str = flag("-t")
    base_session_id: str = flag("-B")
    session_label: str = flag("-L")
    media_label: str = flag("-M")
    options_file: str = flag("-O")
    verbosity: list[str] = flag("-v", [])


@dataclass
class XfsDumpOptions:
    flags: XfsDumpFlags = nested(XfsDumpFlags)
    additional_args: list[str] = positional([])
    target_fs: str = positional(required=True)


@dataclass
class XfsDumpConfig:
    options: XfsDumpOptions = nested(XfsDumpOptions)
    host_name: str = setting()


class XfsDumpBackend:
    kind = DUMP_KIND

    def __init__(self, config: XfsDumpConfig, *, stdin: bool = False) -> None:
        self.config = config
        flags = config.options.flags
        if stdin:
            flags.destination = STREAM_FILE
        elif not flags.destination:
            raise ConfigError(f"{DUMP_KIND}.options.flags.destination is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> XfsDumpBackend:
        return cls(load_kind_config(tree, DUMP_KIND, XfsDumpConfig()), stdin=stdin)

    def backup_command(self) -> CommandSpec:
        return CommandSpec(binary=DUMP_BINARY, args=struct_to_cli(self.config.options))

    def create_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, self.backup_command())

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.destination

    @property
    def hostname(self) -> str:
        return self.config.host_name or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)


@dataclass
class XfsRestoreFlags:
    housekeeping: bool = flag("-a", False)
    prevent_overwrite: bool = flag("-e", False)
    interactive: bool = flag("-i", False)
    minimal_tape_protocol: bool = flag("-m", False)
    source_is_qic: bool = flag("-q", False)
    cumulative: bool = flag("-r", False)
    display_contents: bool = flag("-t", False)
    no_extended_attributes: bool = flag("-A", False)
    match_ownership_to_dump_root: bool = flag("-B", False)
    restore_dmapi: bool = flag("-D", False)
    dont_overwrite_newer: bool = flag("-E", False)
    dont_prompt: bool = flag("-F", False)
    show_inventory: bool = flag("-I", False)
    inhibit_inventory_update: bool = flag("-J", False)
    force_completion: bool = flag("-Q", False)
    resume: bool = flag("-R", False)
    inhibit_dialogue_timeouts: bool = flag("-T", False)
    block_size: int = flag("-b", 0)
    progress_interval: int = flag("-p", 0)
    buffer_ring_length: int = flag("-Y", 0)
    alert_program: str = flag("-c")
    source: str = flag("-f", required=True)
    newer_than: str = flag("-n")
    subtree: list[str] = flag("-s", [])
    verbosity: list[str] = flag("-v", [])
    session_label: str = flag("-L")
    options_file: str = flag("-O")
    session_uuid: str = flag("-S")
    exclude: str = flag("-X")


@dataclass
class XfsRestoreOptions:
    flags: XfsRestoreFlags = nested(XfsRestoreFlags)
    additional_args: list[str] = positional([])
    dest_fs: str = positional(required=True)


@dataclass
class XfsRestoreConfig:
    options: XfsRestoreOptions = nested(XfsRestoreOptions)
    host_name: str = setting()


class XfsRestoreBackend:
    kind = RESTORE_KIND

    def __init__(self, config: XfsRestoreConfig) -> None:
        self.config = config

    @classmethod
    def from_tree(cls, tree: ConfigTree) -> XfsRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, XfsRestoreConfig()))

    def restore_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, CommandSpec(binary=RESTORE_BINARY, args=struct_to_cli(self.config.options)))

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.source

    @property
    def hostname(self) -> str:
        return self.config.host_name or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)
