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

from ..config import ConfigTree
from ..errors import ConfigError
from ..process.args import flag, nested, positional, setting, struct_to_cli
from ..process.command import CommandSpec
from ..process.gzip import check_and_gunzip_file
from ..process.runner import RunContext
from .cleanup import remove_file
from .common import compress_dump, load_kind_config, run_dump, split_gzip_target, system_hostname

DUMP_KIND = "pgdump"
RESTORE_KIND = "pgrestore"
PSQL_KIND = "psql"
DUMP_BINARY = "pg_dump"
RESTORE_BINARY = "pg_restore"
PSQL_BINARY = "psql"
PASSWORD_ENV = "PGPASSWORD"

_DIRECTORY_FORMATS = {"d", "directory"}


@dataclass
class PgDumpFlags:
    file: str = flag("--file=")
    format: str = flag("--format=")
    jobs: int = flag("--jobs=", 0)
    verbose: bool = flag("--verbose", False)
    compress: int = flag("--compress=", 0)
    lock_wait_timeout: str = flag("--lock-wait-timeout=")
    no_sync: bool = flag("--no-sync", False)
    data_only: bool = flag("--data-only", False)
    blobs: bool = flag("--blobs", False)
    clean: bool = flag("--clean", False)
    create: bool = flag("--create", False)
    encoding: str = flag("--encoding=")
    schema: list[str] = flag("--schema=", [])
    exclude_schema: list[str] = flag("--exclude-schema=", [])
    no_owner: bool = flag("--no-owner", False)
    schema_only: bool = flag("--schema-only", False)
    superuser: str = flag("--superuser=")
    table: list[str] = flag("--table=", [])
    exclude_table: list[str] = flag("--exclude-table=", [])
    no_privileges: bool = flag("--no-privileges", False)
    binary_upgrade: bool = flag("--binary-upgrade", False)
    column_inserts: bool = flag("--column-inserts", False)
    disable_dollar_quoting: bool = flag("--disable-dollar-quoting", False)
    disable_triggers: bool = flag("--disable-triggers", False)
    enable_row_security: bool = flag("--enable-row-security", False)
    exclude_table_data: list[str] = flag("--exclude-table-data=", [])
    extra_float_digits: int = flag("--extra-float-digits=", 0)
    if_exists: bool = flag("--if-exists", False)
    inserts: bool = flag("--inserts", False)
    load_via_partition_root: bool = flag("--load-via-partition-root", False)
    no_comments: bool = flag("--no-comments", False)
    no_publications: bool = flag("--no-publications", False)
    no_security_labels: bool = flag("--no-security-labels", False)
    no_subscriptions: bool = flag("--no-subscriptions", False)
    no_synchronized_snapshots: bool = flag("--no-synchronized-snapshots", False)
    no_tablespaces: bool = flag("--no-tablespaces", False)
    no_unlogged_table_data: bool = flag("--no-unlogged-table-data", False)
    on_conflict_do_nothing: bool = flag("--on-conflict-do-nothing", False)
    quote_all_identifiers: bool = flag("--quote-all-identifiers", False)
    rows_per_insert: int = flag("--rows-per-insert=", 0)
    section: list[str] = flag("--section=", [])
    serializable_deferrable: bool = flag("--serializable-deferrable", False)
    snapshot: str = flag("--snapshot=")
    strict_names: bool = flag("--strict-names", False)
    use_set_session_authorization: bool = flag("--use-set-session-authorization", False)
    dbname: str = flag("--dbname=")
    host: str = flag("--host=")
    port: int = flag("--port=", 0)
    username: str = flag("--username=")
    no_password: bool = flag("--no-password", False)
    # pg_dump takes the password from the environment only
    password: str = setting(env=PASSWORD_ENV)
    role: str = flag("--role=")


@dataclass
class PgDumpOptions:
    flags: PgDumpFlags = nested(PgDumpFlags)
    additional_args: list[str] = positional([])


@dataclass
class PgDumpConfig:
    options: PgDumpOptions = nested(PgDumpOptions)


class PgDumpBackend:
    kind = DUMP_KIND

    def __init__(self, config: PgDumpConfig, *, stdin: bool = False) -> None:
        self.config = config
        flags = config.options.flags
        if stdin:
            if flags.format.strip().lower() in _DIRECTORY_FORMATS:
                raise ConfigError(
                    f"{DUMP_KIND}.options.flags.format is 'directory' but doStdinBackup is enabled; "
                    "use 'plain', 'custom' or 'tar' instead"
                )
            flags.file = ""
        elif not flags.file:
            raise ConfigError(f"{DUMP_KIND}.options.flags.file is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> PgDumpBackend:
        return cls(load_kind_config(tree, DUMP_KIND, PgDumpConfig()), stdin=stdin)

    def backup_command(self) -> CommandSpec:
        return CommandSpec(binary=DUMP_BINARY, args=struct_to_cli(self.config.options))

    def create_backup(self, ctx: RunContext | None) -> None:
        flags = self.config.options.flags
        flags.file, compress = split_gzip_target(flags.file)
        run_dump(ctx, self.backup_command())
        if compress:
            flags.file = compress_dump(flags.file)

    @property
    def backup_path(self) -> str:
        return self.config.options.flags.file

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host or system_hostname()

    def clean_up(self) -> None:
        if self.config.options.flags.format.strip().lower() in _DIRECTORY_FORMATS:
            shutil.rmtree(self.backup_path)
            return
        remove_file(self.backup_path)


@dataclass
class PgRestoreFlags:
    clean: bool = flag("--clean", False)
    create: bool = flag("--create", False)
    data_only: bool = flag("--data-only", False)
    dbname: str = flag("--dbname=")
    disable_triggers: bool = flag("--disable-triggers", False)
    exit_on_error: bool = flag("--exit-on-error", False)
    format: str = flag("--format=")
    function: list[str] = flag("--function=", [])
    host: str = flag("--host=")
    if_exists: bool = flag("--if-exists", False)
    index: list[str] = flag("--index=", [])
    jobs: int = flag("--jobs=", 0)
    list_file: str = flag("--use-list=")
    lock_wait_timeout: str = flag("--lock-wait-timeout=")
    no_acl: bool = flag("--no-acl", False)
    no_comments: bool = flag("--no-comments", False)
    no_data_for_failed_tables: bool = flag("--no-data-for-failed-tables", False)
    no_owner: bool = flag("--no-owner", False)
    no_password: bool = flag("--no-password", False)
    no_privileges: bool = flag("--no-privileges", False)
    no_security_labels: bool = flag("--no-security-labels", False)
    no_tablespaces: bool = flag("--no-tablespaces", False)
    password: str = setting(env=PASSWORD_ENV)
    port: int = flag("--port=", 0)
    role: str = flag("--role=")
    schema: list[str] = flag("--schema=", [])
    schema_only: bool = flag("--schema-only", False)
    section: list[str] = flag("--section=", [])
    single_transaction: bool = flag("--single-transaction", False)
    superuser: str = flag("--superuser=")
    table: list[str] = flag("--table=", [])
    trigger: list[str] = flag("--trigger=", [])
    username: str = flag("--username=")
    use_set_session_authorization: bool = flag("--use-set-session-authorization", False)
    verbose: bool = flag("--verbose", False)


@dataclass
class PgRestoreOptions:
    flags: PgRestoreFlags = nested(PgRestoreFlags)
    additional_args: list[str] = positional([])
    source_file: str = setting()


@dataclass
class PgRestoreConfig:
    options: PgRestoreOptions = nested(PgRestoreOptions)


class PgRestoreBackend:
    kind = RESTORE_KIND

    def __init__(self, config: PgRestoreConfig, *, stdin: bool = False) -> None:
        self.config = config
        if not stdin and not config.options.source_file:
            raise ConfigError(f"{RESTORE_KIND}.options.sourceFile is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> PgRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, PgRestoreConfig()), stdin=stdin)

    def restore_command(self) -> CommandSpec:
        return CommandSpec(binary=RESTORE_BINARY, args=struct_to_cli(self.config.options))

    def restore_backup(self, ctx: RunContext | None) -> None:
        source = check_and_gunzip_file(self.config.options.source_file)
        cmd = CommandSpec(
            binary=RESTORE_BINARY,
            args=(*struct_to_cli(self.config.options), source),
        )
        run_dump(ctx, cmd)

    @property
    def backup_path(self) -> str:
        return self.config.options.source_file

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host or system_hostname()

    def clean_up(self) -> None:
        remove_file(self.backup_path)


@dataclass
class PsqlFlags:
    command: str = flag("--command=")
    dbname: str = flag("--dbname=")
    field_separator: str = flag("--field-separator=")
    file: str = flag("--file=")
    host: str = flag("--host=", required=True)
    log_file: str = flag("--log-file=")
    output: str = flag("--output=")
    password: str = setting(env=PASSWORD_ENV)
    pset: list[str] = flag("--pset=", [])
    record_separator: str = flag("--record-separator=")
    set: list[str] = flag("--set=", [])
    table_attr: str = flag("--table-attr=")
    username: str = flag("--username=")
    variable: list[str] = flag("--variable=", [])
    port: int = flag("--port=", 0)
    echo_all: bool = flag("--echo-all", False)
    echo_errors: bool = flag("--echo-errors", False)
    echo_hidden: bool = flag("--echo-hidden", False)
    echo_queries: bool = flag("--echo-queries", False)
    expanded: bool = flag("--expanded", False)
    html: bool = flag("--html", False)
    no_align: bool = flag("--no-align", False)
    no_password: bool = flag("--no-password", False)
    no_psqlrc: bool = flag("--no-psqlrc", False)
    no_readline: bool = flag("--no-readline", False)
    quiet: bool = flag("--quiet", False)
    single_line: bool = flag("--single-line", False)
    single_transaction: bool = flag("--single-transaction", False)
    tuples_only: bool = flag("--tuples-only", False)


@dataclass
class PsqlOptions:
    flags: PsqlFlags = nested(PsqlFlags)
    additional_args: list[str] = positional([])
    source_file: str = setting()


@dataclass
class PsqlConfig:
    options: PsqlOptions = nested(PsqlOptions)


class PsqlBackend:
    kind = PSQL_KIND

    def __init__(self, config: PsqlConfig, *, stdin: bool = False) -> None:
        self.config = config
        flags = config.options.flags
        if stdin:
            flags.output = ""
        elif not config.options.source_file and not flags.command:
            raise ConfigError(f"{PSQL_KIND}.options.sourceFile is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> PsqlBackend:
        return cls(load_kind_config(tree, PSQL_KIND, PsqlConfig()), stdin=stdin)

    def restore_command(self) -> CommandSpec:
        return CommandSpec(binary=PSQL_BINARY, args=struct_to_cli(self.config.options))

    def restore_backup(self, ctx: RunContext | None) -> None:
        flags = self.config.options.flags
        if not flags.command:
            flags.command = f"\\i {check_and_gunzip_file(self.config.options.source_file)}"
        run_dump(ctx, self.restore_command())

    @property
    def backup_path(self) -> str:
        return self.config.options.source_file

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host

    def clean_up(self) -> None:
        remove_file(self.backup_path)
