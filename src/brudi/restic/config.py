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
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass

from ..config import ConfigTree, ensure_env, populate, validate
from ..errors import ConfigError
from ..process.args import nested, setting
from .types import (
    BackupOptions,
    CheckFlags,
    FindOptions,
    ForgetOptions,
    GlobalOptions,
    LsOptions,
    RestoreOptions,
    SnapshotOptions,
    StatsOptions,
    TagOptions,
)

KIND = "restic"

REPOSITORY_ENV = "RESTIC_REPOSITORY"
REPOSITORY_FILE_ENV = "RESTIC_REPOSITORY_FILE"
PASSWORD_ENV = "RESTIC_PASSWORD"
PASSWORD_FILE_ENV = "RESTIC_PASSWORD_FILE"
PASSWORD_COMMAND_ENV = "RESTIC_PASSWORD_COMMAND"
HOST_ENV = "RESTIC_HOST"


@dataclass
class ResticConfig:
    repository: str = setting(env=REPOSITORY_ENV)
    password: str = setting(env=PASSWORD_ENV)
    bucket_name: str = setting()
    region: str = setting()
    host: str = setting(env=HOST_ENV)
    access_key_id: str = setting(env="AWS_ACCESS_KEY_ID")
    secret_access_key: str = setting(env="AWS_SECRET_ACCESS_KEY")
    global_: GlobalOptions = nested(GlobalOptions)
    backup: BackupOptions = nested(BackupOptions)
    forget: ForgetOptions = nested(ForgetOptions)
    snapshots: SnapshotOptions = nested(SnapshotOptions)
    tags: TagOptions = nested(TagOptions)
    check: CheckFlags = nested(CheckFlags)
    restore: RestoreOptions = nested(RestoreOptions)
    ls: LsOptions = nested(LsOptions)
    find: FindOptions = nested(FindOptions)
    stats: StatsOptions = nested(StatsOptions)

    def default_repository(self) -> str:
        if self.repository or not (self.bucket_name and self.region):
            return self.repository
        return f"s3:{self.region}/{self.bucket_name}/{self.host}"


def load_restic_config(
    tree: ConfigTree,
    *,
    hostname: str = "",
    environ: MutableMapping[str, str] | None = None,
) -> ResticConfig:
    """Build the restic settings from the ``restic`` table and export its credentials."""
    env = os.environ if environ is None else environ
    section = tree.section(KIND)
    config = populate(ResticConfig(), section, prefix=section.prefix)
    if not config.host:
        config.host = hostname
    config.repository = config.default_repository()
    ensure_env(config, environ=env)
    validate(config, prefix=KIND)
    _check_credentials(config, env)
    return config


def _check_credentials(config: ResticConfig, env: Mapping[str, str]) -> None:
    flags = config.global_.flags
    if not (
        config.repository
        or flags.repo
        or flags.repository_file
        or env.get(REPOSITORY_ENV)
        or env.get(REPOSITORY_FILE_ENV)
    ):
        raise ConfigError(
            f"{KIND}.repository is required (or {KIND}.bucketName and {KIND}.region, "
            f"or {REPOSITORY_ENV})"
        )
    if not (
        config.password
        or flags.password_file
        or env.get(PASSWORD_ENV)
        or env.get(PASSWORD_FILE_ENV)
        or env.get(PASSWORD_COMMAND_ENV)
    ):
        raise ConfigError(f"{KIND}.password is required (or {PASSWORD_ENV}, {PASSWORD_FILE_ENV})")
