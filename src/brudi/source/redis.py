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

import shutil
from dataclasses import dataclass
from pathlib import Path

from ..config import ConfigTree
from ..errors import ConfigError
from ..log import get_logger
from ..process.args import flag, nested, positional, setting, struct_to_cli
from ..process.command import CommandSpec
from ..process.gzip import check_and_gunzip_file
from ..process.runner import RunContext
from .cleanup import remove_file
from .common import compress_dump, load_kind_config, run_dump, split_gzip_target, system_hostname

DUMP_KIND = "redisdump"
RESTORE_KIND = "redisrestore"
BINARY = "redis-cli"
DEFAULT_DB_FILENAME = "dump.rdb"

logger = get_logger(__name__)


@dataclass
class RedisConnectionFlags:
    host: str = flag("-h")
    port: int = flag("-p", 0)
    socket: str = flag("-s")
    password: str = flag("-a")
    user: str = flag("--user")
    uri: str = flag("-u")
    database_number: int = flag("-n", 0)
    tls: bool = flag("--tls", False)
    cacert: str = flag("--cacert")
    cert: str = flag("--cert")
    key: str = flag("--key")
    no_auth_warning: bool = flag("--no-auth-warning", False)
    verbose: bool = flag("--verbose", False)


@dataclass
class RedisDumpFlags(RedisConnectionFlags):
    rdb: str = flag("--rdb")


@dataclass
class RedisDumpOptions:
    flags: RedisDumpFlags = nested(RedisDumpFlags)
    additional_args: list[str] = positional([])


@dataclass
class RedisDumpConfig:
    options: RedisDumpOptions = nested(RedisDumpOptions)


class RedisDumpBackend:
    kind = DUMP_KIND

    def __init__(self, config: RedisDumpConfig, *, stdin: bool = False) -> None:
        if stdin:
            raise ConfigError(f"can't do a backup to STDOUT with {DUMP_KIND} but doStdinBackup is set")
        if not config.options.flags.rdb:
            raise ConfigError(f"{DUMP_KIND}.options.flags.rdb is required")
        self.config = config

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> RedisDumpBackend:
        return cls(load_kind_config(tree, DUMP_KIND, RedisDumpConfig()), stdin=stdin)

    def backup_command(self) -> CommandSpec:
        return CommandSpec(binary=BINARY, args=struct_to_cli(self.config.options))

    def create_backup(self, ctx: RunContext | None) -> None:
        flags = self.config.options.flags
        flags.rdb, compress = split_gzip_target(flags.rdb)
        run_dump(ctx, self.backup_command())
        if compress:
            flags.rdb = compress_dump(flags.rdb)

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.rdb

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)


@dataclass
class RedisRestoreOptions:
    flags: RedisConnectionFlags = nested(RedisConnectionFlags)
    rdb: str = setting(required=True)
    data_dir: str = setting(required=True)
    db_filename: str = setting(DEFAULT_DB_FILENAME)


@dataclass
class RedisRestoreConfig:
    options: RedisRestoreOptions = nested(RedisRestoreOptions)


class RedisRestoreBackend:
    """Replace a stopped redis server's RDB file with the backed-up one.

    AOF is switched off first so the server does not replay its append-only
    log over the restored data on the next start. The server is shut down
    without saving and has to be restarted by its supervisor.
    """

    kind = RESTORE_KIND

    def __init__(self, config: RedisRestoreConfig) -> None:
        self.config = config

    @classmethod
    def from_tree(cls, tree: ConfigTree) -> RedisRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, RedisRestoreConfig()))

    def _cli(self, *command: str) -> CommandSpec:
        return CommandSpec(binary=BINARY, args=(*struct_to_cli(self.config.options), *command))

    def restore_backup(self, ctx: RunContext | None) -> None:
        options = self.config.options
        log = logger.with_fields(kind=RESTORE_KIND, rdb=options.rdb)
        run_dump(ctx, self._cli("CONFIG", "SET", "appendonly", "no"))
        log.debug("disabled append-only file")
        run_dump(ctx, self._cli("SHUTDOWN", "NOSAVE"))
        log.info("redis server shut down")
        source = check_and_gunzip_file(options.rdb)
        target = Path(options.data_dir) / options.db_filename
        shutil.copyfile(source, target)
        log.with_fields(target=target).info("copied rdb file into data directory")

    @property
    def backup_path(self) -> str:
        return self.config.options.rdb

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)
