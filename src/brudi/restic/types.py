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

from dataclasses import dataclass, field
from typing import Any

from ..process.args import flag, nested, positional

# ---------------------------------------------------------------------------
# Command options
# ---------------------------------------------------------------------------


@dataclass
class GlobalFlags:
    cacert: str = flag("--cacert")
    cache_dir: str = flag("--cache-dir")
    key_hint: str = flag("--key-hint")
    password_file: str = flag("--password-file")
    repo: str = flag("--repo")
    repository_file: str = flag("--repository-file")
    tls_client_cert: str = flag("--tls-client-cert")
    limit_download: int = flag("--limit-download", 0)
    limit_upload: int = flag("--limit-upload", 0)
    cleanup_cache: bool = flag("--cleanup-cache", False)
    no_cache: bool = flag("--no-cache", False)
    no_lock: bool = flag("--no-lock", False)


@dataclass
class GlobalOptions:
    flags: GlobalFlags = nested(GlobalFlags)


@dataclass
class BackupFlags:
    files_from_verbatim: list[str] = flag("--files-from-verbatim", [])
    exclude_file: str = flag("--exclude-file")
    host: str = flag("--host")
    iexclude_file: str = flag("--iexclude-file")
    iexclude: list[str] = flag("--iexclude", [])
    parent: str = flag("--parent")
    stdin_filename: str = flag("--stdin-filename")
    time: str = flag("--time")
    exclude: list[str] = flag("-e", [])
    files_from: list[str] = flag("--files-from", [])
    files_from_raw: list[str] = flag("--files-from-raw", [])
    tags: list[str] = flag("--tag", [])
    exclude_larger_than: str = flag("--exclude-larger-than")
    exclude_caches: bool = flag("--exclude-caches", False)
    force: bool = flag("-f", False)
    ignore_inode: bool = flag("--ignore-inode", False)
    one_file_system: bool = flag("-x", False)
    stdin: bool = flag("--stdin", False)
    with_atime: bool = flag("--with-atime", False)


@dataclass
class BackupOptions:
    flags: BackupFlags = nested(BackupFlags)
    paths: list[str] = positional([])


@dataclass
class StatsFlags:
    host: str = flag("--host")
    mode: str = flag("--mode")


@dataclass
class StatsOptions:
    flags: StatsFlags = nested(StatsFlags)
    ids: list[str] = positional([])


@dataclass
class SnapshotFlags:
    host: str = flag("-H")
    paths: list[str] = flag("--path", [])
    tags: list[str] = flag("--tag", [])


@dataclass
class SnapshotOptions:
    flags: SnapshotFlags = nested(SnapshotFlags)
    ids: list[str] = positional([])


@dataclass
class CheckFlags:
    check_unused: bool = flag("--check-unused", False)
    read_data: bool = flag("--read-data", False)
    read_data_subset: str = flag("--read-data-subset=")


@dataclass
class ForgetFlags:
    keep_last: int = flag("-l", 0)
    keep_hourly: int = flag("-H", 0)
    keep_daily: int = flag("-d", 0)
    keep_weekly: int = flag("-w", 0)
    keep_monthly: int = flag("-m", 0)
    keep_yearly: int = flag("-y", 0)
    keep_tags: list[str] = flag("--keep-tag", [])
    keep_within: str = flag("--keep-within")
    host: str = flag("--host")
    tags: list[str] = flag("--tag", [])
    paths: list[str] = flag("--path", [])
    group_by: str = flag("-g")
    dry_run: bool = flag("-n", False)
    prune: bool = flag("--prune", False)
    compact: bool = flag("--compact", False)


@dataclass
class ForgetOptions:
    flags: ForgetFlags = nested(ForgetFlags)
    ids: list[str] = positional([])


@dataclass
class RestoreFlags:
    exclude: list[str] = flag("-e", [])
    host: str = flag("-H")
    include: list[str] = flag("-i", [])
    verify: bool = flag("--verify", False)
    path: str = flag("--path")
    tags: str = flag("--tag")
    target: str = flag("-t")


@dataclass
class RestoreOptions:
    flags: RestoreFlags = nested(RestoreFlags)
    id: str = positional("latest")


@dataclass
class DumpOptions:
    id: str = positional()
    file: str = positional()


@dataclass
class TagFlags:
    add: list[str] = flag("--add", [])
    host: str = flag("-H")
    path: str = flag("--path")
    remove: list[str] = flag("--remove", [])
    set: list[str] = flag("--set", [])
    tag: str = flag("--tag")


@dataclass
class TagOptions:
    flags: TagFlags = nested(TagFlags)
    ids: list[str] = positional([])


@dataclass
class FindFlags:
    snapshot_id: str = flag("-s")
    host: str = flag("-H")
    ignore_case: bool = flag("-i", False)
    long: bool = flag("-l", False)
    newest: str = flag("-N")
    oldest: str = flag("-O")
    path: str = flag("--path")
    tag: str = flag("--tag")


@dataclass
class FindOptions:
    flags: FindFlags = nested(FindFlags)
    pattern: str = positional()


@dataclass
class LsFlags:
    host: str = flag("-H")
    long: bool = flag("-l", False)
    path: str = flag("--path")
    tag: str = flag("--tag")


@dataclass
class LsOptions:
    flags: LsFlags = nested(LsFlags)
    snapshot_ids: list[str] = positional([])


@dataclass
class UnlockFlags:
    remove_all: bool = flag("--remove-all", False)


@dataclass
class UnlockOptions:
    flags: UnlockFlags = nested(UnlockFlags)


# ---------------------------------------------------------------------------
# Decoded results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BackupResult:
    snapshot_id: str
    parent_snapshot_id: str = ""


@dataclass(frozen=True)
class Stats:
    total_size: int = 0
    total_file_count: int = 0
    total_blob_count: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Stats:
        return cls(
            total_size=int(data.get("total_size") or 0),
            total_file_count=int(data.get("total_file_count") or 0),
            total_blob_count=int(data.get("total_blob_count") or 0),
        )


@dataclass(frozen=True)
class Snapshot:
    id: str | None = None
    short_id: str = ""
    time: str = ""
    tree: str = ""
    tags: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    hostname: str = ""
    username: str = ""
    uid: int | None = None
    gid: int | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Snapshot:
        return cls(
            id=data.get("id"),
            short_id=data.get("short_id") or "",
            time=data.get("time") or "",
            tree=data.get("tree") or "",
            tags=tuple(data.get("tags") or ()),
            paths=tuple(data.get("paths") or ()),
            hostname=data.get("hostname") or "",
            username=data.get("username") or "",
            uid=data.get("uid"),
            gid=data.get("gid"),
        )


@dataclass(frozen=True)
class ForgetGroup:
    tags: tuple[str, ...] = ()
    host: str = ""
    paths: tuple[str, ...] = ()
    keep: tuple[Snapshot, ...] = ()
    remove: tuple[Snapshot, ...] = ()
    reasons: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ForgetGroup:
        return cls(
            tags=tuple(data.get("tags") or ()),
            host=data.get("host") or "",
            paths=tuple(data.get("paths") or ()),
            keep=tuple(Snapshot.from_json(item) for item in data.get("keep") or ()),
            remove=tuple(Snapshot.from_json(item) for item in data.get("remove") or ()),
            reasons=tuple(data.get("reasons") or ()),
        )


@dataclass(frozen=True)
class FindMatch:
    path: str = ""
    permissions: str = ""
    type: str = ""
    mode: int | None = None
    mtime: str = ""
    atime: str = ""
    ctime: str = ""
    uid: int | None = None
    gid: int | None = None
    user: str = ""
    device_id: int = 0
    size: int = 0
    links: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> FindMatch:
        return cls(
            path=data.get("path") or "",
            permissions=data.get("permissions") or "",
            type=data.get("type") or "",
            mode=data.get("mode"),
            mtime=data.get("mtime") or "",
            atime=data.get("atime") or "",
            ctime=data.get("ctime") or "",
            uid=data.get("uid"),
            gid=data.get("gid"),
            user=data.get("user") or "",
            device_id=int(data.get("device_id") or 0),
            size=int(data.get("size") or 0),
            links=int(data.get("links") or 0),
        )


@dataclass(frozen=True)
class FindResult:
    matches: tuple[FindMatch, ...] = ()
    hits: int = 0
    snapshot: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> FindResult:
        return cls(
            matches=tuple(FindMatch.from_json(item) for item in data.get("matches") or ()),
            hits=int(data.get("hits") or 0),
            snapshot=data.get("snapshot"),
        )


@dataclass
class LsFile:
    path: str
    permissions: int | None = None
    user: int | None = None
    group: int | None = None
    size: int = 0
    time: str = ""


@dataclass
class LsResult:
    snapshot_id: str
    paths: list[str] = field(default_factory=list)
    time: str = ""
    files: list[LsFile] = field(default_factory=list)
    size: int = 0
