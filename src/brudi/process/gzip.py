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

import gzip
import shutil
from pathlib import Path

from .command import GZIP_SUFFIX

GZIP_MAGIC = b"\x1f\x8b"
_RAW_SUFFIX = ".raw"


def gzip_file(path: str | Path) -> str:
    source = Path(path)
    target = source.with_name(source.name + GZIP_SUFFIX)
    with source.open("rb") as src, gzip.open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    return str(target)


def is_gzipped(path: str | Path) -> bool:
    with Path(path).open("rb") as handle:
        return handle.read(len(GZIP_MAGIC)) == GZIP_MAGIC


def check_and_gunzip_file(path: str | Path) -> str:
    """Return ``path`` itself, or the extracted copy when it holds gzip data."""
    source = Path(path)
    if not is_gzipped(source):
        return str(source)
    if source.name.endswith(GZIP_SUFFIX) and len(source.name) > len(GZIP_SUFFIX):
        target = source.with_name(source.name[: -len(GZIP_SUFFIX)])
    else:
        target = source.with_name(source.name + _RAW_SUFFIX)
    with gzip.open(source, "rb") as src, target.open("wb") as dst:
        shutil.copyfileobj(src, dst)
    return str(target)


def strip_gzip_suffix(path: str) -> str:
    if path.endswith(GZIP_SUFFIX):
        return path[: -len(GZIP_SUFFIX)]
    return path
