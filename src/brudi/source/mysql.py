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
from ..process.gzip import check_and_gunzip_file
from ..process.runner import RunContext
from .cleanup import remove_file
from .common import compress_dump, load_kind_config, run_dump, split_gzip_target

KIND = "mysqldump"
RESTORE_KIND = "mysqlrestore"
BINARY = "mysqldump"
RESTORE_BINARY = "mysql"


@dataclass
class MysqlDumpFlags:
    bind_address: str = flag("--bind-address=")
    character_sets_dir: str = flag("--character-sets-dir=")
    compression_algorithms: str = flag("--compression-algorithms=")
    default_auth: str = flag("--default-auth=")
    default_character_set: str = flag("--default-character-set=")
    defaults_extra_file: str = flag("--defaults-extra-file=")
    defaults_file: str = flag("--defaults-file=")
    defaults_group_suffix: str = flag("--defaults-group-suffix=")
    fields_enclosed_by: str = flag("--fields-enclosed-by=")
    fields_escaped_by: str = flag("--fields-escaped-by=")
    fields_terminated_by: str = flag("--fields-terminated-by=")
    host: str = flag("--host=", required=True)
    ignore_error: str = flag("--ignore-error=")
    ignore_table: list[str] = flag("--ignore-table=", [])
    lines_terminated_by: str = flag("--lines-terminated-by=")
    log_error: str = flag("--log-error=")
    login_path: str = flag("--login-path=")
    master_data: str = flag("--master-data=")
    max_allowed_packet: str = flag("--max-allowed-packet=")
    net_buffer_length: str = flag("--net-buffer-length=")
    password: str = flag("--password=")
    plugin_dir: str = flag("--plugin-dir=")
    protocol: str = flag("--protocol=")
    result_file: str = flag("--result-file=")
    server_public_key_path: str = flag("--server-public-key-path=")
    socket: str = flag("--socket=")
    ssl_ca: str = flag("--ssl-ca=")
    ssl_capath: str = flag("--ssl-capath=")
    ssl_cert: str = flag("--ssl-cert=")
    ssl_cipher: str = flag("--ssl-cipher=")
    ssl_key: str = flag("--ssl-key=")
    skip_ssl: bool = flag("--skip-ssl", False)
    tab: str = flag("--tab=")
    tls_version: str = flag("--tls-version=")
    user: str = flag("--user=")
    where: str = flag("--where=")
    databases: list[str] = flag("--databases", [])
    tables: list[str] = flag("--tables", [])
    port: int = flag("--port=", 0)
    add_drop_database: bool = flag("--add-drop-database", False)
    add_drop_table: bool = flag("--add-drop-table", False)
    add_drop_trigger: bool = flag("--add-drop-trigger", False)
    add_locks: bool = flag("--add-locks", False)
    all_databases: bool = flag("--all-databases", False)
    column_statistics: bool = flag("--column-statistics", False)
    comments: bool = flag("--comments", False)
    compact: bool = flag("--compact", False)
    complete_insert: bool = flag("--complete-insert", False)
    compress: bool = flag("--compress", False)
    create_options: bool = flag("--create-options", False)
    disable_keys: bool = flag("--disable-keys", False)
    dump_date: bool = flag("--dump-date", False)
    events: bool = flag("--events", False)
    extended_insert: bool = flag("--extended-insert", False)
    flush_logs: bool = flag("--flush-logs", False)
    flush_privileges: bool = flag("--flush-privileges", False)
    force: bool = flag("--force", False)
    hex_blob: bool = flag("--hex-blob", False)
    insert_ignore: bool = flag("--insert-ignore", False)
    lock_all_tables: bool = flag("--lock-all-tables", False)
    lock_tables: bool = flag("--lock-tables", False)
    no_autocommit: bool = flag("--no-autocommit", False)
    no_create_db: bool = flag("--no-create-db", False)
    no_create_info: bool = flag("--no-create-info", False)
    no_data: bool = flag("--no-data", False)
    no_defaults: bool = flag("--no-defaults", False)
    no_tablespaces: bool = flag("--no-tablespaces", False)
    opt: bool = flag("--opt", False)
    order_by_primary: bool = flag("--order-by-primary", False)
    quick: bool = flag("--quick", False)
    quote_names: bool = flag("--quote-names", False)
    replace: bool = flag("--replace", False)
    routines: bool = flag("--routines", False)
    set_gtid_purged: str = flag("--set-gtid-purged=")
    single_transaction: bool = flag("--single-transaction", False)
    skip_add_drop_table: bool = flag("--skip-add-drop-table", False)
    skip_add_locks: bool = flag("--skip-add-locks", False)
    skip_comments: bool = flag("--skip-comments", False)
    skip_extended_insert: bool = flag("--skip-extended-insert", False)
    skip_lock_tables: bool = flag("--skip-lock-tables", False)
    skip_opt: bool = flag("--skip-opt", False)
    skip_triggers: bool = flag("--skip-triggers", False)
    skip_tz_utc: bool = flag("--skip-tz-utc", False)
    triggers: bool = flag("--triggers", False)
    tz_utc: bool = flag("--tz-utc", False)
    xml: bool = flag("--xml", False)


@dataclass
class MysqlDumpOptions:
    flags: MysqlDumpFlags = nested(MysqlDumpFlags)
    additional_args: list[str] = positional([])


@dataclass
class MysqlDumpConfig:
    options: MysqlDumpOptions = nested(MysqlDumpOptions)


class MysqlDumpBackend:
    kind = KIND

    def __init__(self, config: MysqlDumpConfig, *, stdin: bool = False) -> None:
        self.config = config
        flags = config.options.flags
        if stdin:
            flags.result_file = ""
        elif not flags.result_file:
            raise ConfigError(f"{KIND}.options.flags.resultFile is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> MysqlDumpBackend:
        return cls(load_kind_config(tree, KIND, MysqlDumpConfig()), stdin=stdin)

    def backup_command(self) -> CommandSpec:
        return CommandSpec(binary=BINARY, args=struct_to_cli(self.config.options))

    def create_backup(self, ctx: RunContext | None) -> None:
        flags = self.config.options.flags
        flags.result_file, compress = split_gzip_target(flags.result_file)
        run_dump(ctx, self.backup_command())
        if compress:
            flags.result_file = compress_dump(flags.result_file)

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.result_file

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host

    def clean_up(self) -> None:
        remove_file(self.backup_path)


@dataclass
class MysqlRestoreFlags:
    auto_rehash: bool = flag("--auto-rehash", False)
    batch: bool = flag("--batch", False)
    binary_mode: bool = flag("--binary-mode", False)
    bind_address: str = flag("--bind-address=")
    character_sets_dir: str = flag("--character-sets-dir=")
    comments: bool = flag("--comments", False)
    compress: bool = flag("--compress", False)
    connect_timeout: int = flag("--connect-timeout=", 0)
    database: str = flag("--database=", required=True)
    default_auth: str = flag("--default-auth=")
    default_character_set: str = flag("--default-character-set=")
    defaults_extra_file: str = flag("--defaults-extra-file=")
    defaults_file: str = flag("--defaults-file=")
    delimiter: str = flag("--delimiter=")
    force: bool = flag("--force", False)
    host: str = flag("--host=", required=True)
    init_command: str = flag("--init-command=")
    login_path: str = flag("--login-path=")
    max_allowed_packet: str = flag("--max-allowed-packet=")
    net_buffer_length: int = flag("--net-buffer-length=", 0)
    no_defaults: bool = flag("--no-defaults", False)
    one_database: bool = flag("--one-database", False)
    password: str = flag("--password=")
    plugin_dir: str = flag("--plugin-dir=")
    port: int = flag("--port=", 0)
    protocol: str = flag("--protocol=")
    quick: bool = flag("--quick", False)
    reconnect: bool = flag("--reconnect", False)
    show_warnings: bool = flag("--show-warnings", False)
    silent: bool = flag("--silent", False)
    skip_ssl: bool = flag("--skip-ssl", False)
    socket: str = flag("--socket=")
    ssl_ca: str = flag("--ssl-ca=")
    ssl_capath: str = flag("--ssl-capath=")
    ssl_cert: str = flag("--ssl-cert=")
    ssl_cipher: str = flag("--ssl-cipher=")
    ssl_key: str = flag("--ssl-key=")
    tls_version: str = flag("--tls-version=")
    unbuffered: bool = flag("--unbuffered", False)
    user: str = flag("--user=")
    verbose: bool = flag("--verbose", False)


@dataclass
class MysqlRestoreOptions:
    flags: MysqlRestoreFlags = nested(MysqlRestoreFlags)
    additional_args: list[str] = positional([])
    command: str = setting()
    source_file: str = setting()


@dataclass
class MysqlRestoreConfig:
    options: MysqlRestoreOptions = nested(MysqlRestoreOptions)


class MysqlRestoreBackend:
    kind = RESTORE_KIND

    def __init__(self, config: MysqlRestoreConfig, *, stdin: bool = False) -> None:
        self.config = config
        if not stdin and not config.options.source_file and not config.options.command:
            raise ConfigError(f"{RESTORE_KIND}.options.sourceFile is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> MysqlRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, MysqlRestoreConfig()), stdin=stdin)

    def restore_command(self) -> CommandSpec:
        return CommandSpec(binary=RESTORE_BINARY, args=struct_to_cli(self.config.options))

    def restore_backup(self, ctx: RunContext | None) -> None:
        options = self.config.options
        statement = options.command
        if not statement:
            statement = f"source {check_and_gunzip_file(options.source_file)}"
        cmd = CommandSpec(
            binary=RESTORE_BINARY,
            args=(*struct_to_cli(options), f"--execute={statement}"),
        )
        run_dump(ctx, cmd)

    @property
    def backup_path(self) -> str:
        return self.config.options.source_file

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host

    def clean_up(self) -> None:
        remove_file(self.backup_path)
