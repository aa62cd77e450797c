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

from .args import flag, nested, positional

TAR_BINARY = "tar"
STREAM_FILE = "-"


@dataclass
class TarFlags:
    create: bool = flag("-c", False)
    gzip: bool = flag("-z", False)
    extract: bool = flag("-x", False)
    strip_components: int = flag("--strip-components=", 0)
    overwrite: bool = flag("--overwrite", False)
    no_overwrite_dir: bool = flag("--no-overwrite-dir", False)
    warning: list[str] = flag("--warning", [])
    exclude: list[str] = flag("--exclude", [])
    target: str = flag("-C")
    file: str = flag("-f", required=True)


@dataclass
class TarOptions:
    flags: TarFlags = nested(TarFlags)
    additional_args: list[str] = positional([])
    paths: list[str] = positional([])
