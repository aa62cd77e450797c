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

import socket
from collections.abc import Callable
from typing import TypeVar

from ..config import ConfigTree, ensure_env, populate, validate
from ..process.command import CommandSpec
from ..process.gzip import gzip_file, strip_gzip_suffix
from ..process.runner import CMD_TIMEOUT, RunContext, run_with_timeout
from .cleanup import remove_file

_C = TypeVar("_C")


def system_hostname() -> str:
    return socket.gethostname()


def load_kind_config(
    tree: ConfigTree,
    kind: str,
    config: _C,
    *,
    prepare: Callable[[_C], None] | None = None,
) -> _C:
    """Fill ``config`` from the ``<kind>`` table, export its env fields and check required keys."""
    section = tree.section(kind)
    populate(config, section, prefix=section.prefix)
    if prepare is not None:
        prepare(config)
    validate(config, prefix=kind)
    ensure_env(config)
    return config


def run_dump(ctx: RunContext | None, cmd: CommandSpec) -> bytes:
    return run_with_timeout(ctx, cmd, CMD_TIMEOUT)


def split_gzip_target(path: str) -> tuple[str, bool]:
    """Return the uncompressed dump target for ``path`` and whether it must be gzipped after."""
    stripped = strip_gzip_suffix(path)
    return stripped, stripped != path


def compress_dump(path: str) -> str:
    compressed = gzip_file(path)
    remove_file(path)
    return compressed
