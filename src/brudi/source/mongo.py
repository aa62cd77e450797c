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
from ..process.args import flag, nested, positional, struct_to_cli
from ..process.command import CommandSpec
from ..process.runner import RunContext
from .cleanup import clear_directory, remove_file
from .common import load_kind_config, run_dump

DUMP_KIND = "mongodump"
RESTORE_KIND = "mongorestore"
DUMP_BINARY = "mongodump"
RESTORE_BINARY = "mongorestore"

ARCHIVE_FLAG = "--archive"
_PLAIN_SUFFIXES = (".bson", ".json")
_GZIP_SUFFIXES = (".bson.gz", ".json.gz")


@dataclass
class MongoConnectionFlags:
    uri: str = flag("--uri=")
    host: str = flag("--host=", required=True)
    port: int = flag("--port=", 0)
    ssl: bool = flag("--ssl", False)
    ssl_ca_file: str = flag("--sslCAFile=")
    ssl_pem_key_file: str = flag("--sslPEMKeyFile=")
    ssl_pem_key_password: str = flag("--sslPEMKeyPassword=")
    ssl_crl_file: str = flag("--sslCRLFile=")
    ssl_allow_invalid_certificates: bool = flag("--sslAllowInvalidCertificates", False)
    ssl_allow_invalid_hostnames: bool = flag("--sslAllowInvalidHostnames", False)
    username: str = flag("--username=")
    password: str = flag("--password=")
    authentication_database: str = flag("--authenticationDatabase=")
    authentication_mechanism: str = flag("--authenticationMechanism=")
    gssapi_service_name: str = flag("--gssapiServiceName=")
    gssapi_host_name: str = flag("--gssapiHostName=")
    database: str = flag("--db=")
    collection: str = flag("--collection=")
    read_preference: str = flag("--readPreference=")
    gzip: bool = flag("--gzip", False)
    archive: str = flag("--archive=")
    exclude_collection: list[str] = flag("--excludeCollection=", [])
    exclude_collections_with_prefix: list[str] = flag("--excludeCollectionsWithPrefix=", [])
    num_parallel_collections: int = flag("--numParallelCollections=", 0)


@dataclass
class MongoDumpFlags(MongoConnectionFlags):
    ipv6: bool = flag("--ipv6", False)
    query: str = flag("--query=")
    query_file: str = flag("--queryFile=")
    force_table_scan: bool = flag("--forceTableScan", False)
    out: str = flag("--out=")
    oplog: bool = flag("--oplog", False)
    dump_db_users_and_roles: bool = flag("--dumpDbUsersAndRoles", False)
    views_as_collections: bool = flag("--viewsAsCollections", False)


@dataclass
class MongoDumpOptions:
    flags: MongoDumpFlags = nested(MongoDumpFlags)
    additional_args: list[str] = positional([])


@dataclass
class MongoDumpConfig:
    options: MongoDumpOptions = nested(MongoDumpOptions)


def _clean_dump(flags: MongoConnectionFlags, directory: str) -> None:
    if flags.archive:
        remove_file(flags.archive)
        return
    clear_directory(directory, *(_GZIP_SUFFIXES if flags.gzip else _PLAIN_SUFFIXES))


class MongoDumpBackend:
    kind = DUMP_KIND

    def __init__(self, config: MongoDumpConfig, *, stdin: bool = False) -> None:
        self.config = config
        self.stdin = stdin
        flags = config.options.flags
        if stdin:
            flags.archive = ""
            flags.out = ""
        elif not (flags.archive or flags.out):
            raise ConfigError(f"{DUMP_KIND}.options.flags: either out or archive is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree, *, stdin: bool = False) -> MongoDumpBackend:
        return cls(load_kind_config(tree, DUMP_KIND, MongoDumpConfig()), stdin=stdin)

    def backup_command(self) -> CommandSpec:
        args = struct_to_cli(self.config.options)
        if self.stdin:
            # bare --archive streams the dump to stdout
            args.append(ARCHIVE_FLAG)
        return CommandSpec(binary=DUMP_BINARY, args=args)

    def create_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, self.backup_command())

    @property
    def backup_path(self) -> str:
        flags = self.config.options.flags
        return flags.archive or flags.out

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host

    def clean_up(self) -> None:
        _clean_dump(self.config.options.flags, self.backup_path)


@dataclass
class MongoRestoreFlags(MongoConnectionFlags):
    tls_insecure: bool = flag("--tlsInsecure", False)
    ns_exclude: list[str] = flag("--nsExclude=", [])
    ns_include: list[str] = flag("--nsInclude=", [])
    ns_from: list[str] = flag("--nsFrom=", [])
    ns_to: list[str] = flag("--nsTo=", [])
    objcheck: bool = flag("--objcheck", False)
    oplog_replay: bool = flag("--oplogReplay", False)
    oplog_limit: str = flag("--oplogLimit=")
    oplog_file: str = flag("--oplogFile=")
    restore_db_users_and_roles: bool = flag("--restoreDbUsersAndRoles", False)
    dir: str = flag("--dir=")
    drop: bool = flag("--drop", False)
    dry_run: bool = flag("--dryRun", False)
    write_concern: str = flag("--writeConcern=")
    no_index_restore: bool = flag("--noIndexRestore", False)
    convert_legacy_indexes: bool = flag("--convertLegacyIndexes", False)
    no_options_restore: bool = flag("--noOptionsRestore", False)
    keep_index_version: bool = flag("--keepIndexVersion", False)
    maintain_insertion_order: bool = flag("--maintainInsertionOrder", False)
    num_insertion_workers_per_collection: int = flag("--numInsertionWorkersPerCollection=", 0)
    stop_on_error: bool = flag("--stopOnError", False)
    bypass_document_validation: bool = flag("--bypassDocumentValidation", False)
    preserve_uuid: bool = flag("--preserveUUID", False)
    fix_dotted_hash_index: bool = flag("--fixDottedHashIndex", False)


@dataclass
class MongoRestoreOptions:
    flags: MongoRestoreFlags = nested(MongoRestoreFlags)
    additional_args: list[str] = positional([])


@dataclass
class MongoRestoreConfig:
    options: MongoRestoreOptions = nested(MongoRestoreOptions)


class MongoRestoreBackend:
    kind = RESTORE_KIND

    def __init__(self, config: MongoRestoreConfig) -> None:
        self.config = config
        flags = config.options.flags
        if not (flags.dir or flags.archive):
            raise ConfigError(f"{RESTORE_KIND}.options.flags: either dir or archive is required")

    @classmethod
    def from_tree(cls, tree: ConfigTree) -> MongoRestoreBackend:
        return cls(load_kind_config(tree, RESTORE_KIND, MongoRestoreConfig()))

    def restore_backup(self, ctx: RunContext | None) -> None:
        run_dump(ctx, CommandSpec(binary=RESTORE_BINARY, args=struct_to_cli(self.config.options)))

    @property
    def backup_path(self) -> str:
        flags = self.config.options.flags
        return flags.archive or flags.dir

    @property
    def hostname(self) -> str:
        return self.config.options.flags.host

    def clean_up(self) -> None:
        _clean_dump(self.config.options.flags, self.backup_path)
