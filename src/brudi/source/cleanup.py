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
from pathlib import Path

from ..log import get_logger

logger = get_logger(__name__)


def remove_file(path: str | Path) -> None:
    os.remove(path)


def clear_directory(path: str | Path, *suffixes: str) -> None:
    """Delete files ending in one of ``suffixes`` below ``path``, then ``path`` itself.

    Parent directories emptied along the way are removed too. Without suffixes
    every file is deleted.
    """
    root = Path(path)
    for current, _dirs, files in os.walk(root, topdown=False):
        parent = Path(current)
        for name in files:
            if suffixes and not name.endswith(suffixes):
                logger.with_fields(path=parent / name).debug("skipping file due to suffix")
                continue
            (parent / name).unlink()
            logger.with_fields(path=parent / name).debug("file deleted")
        if parent == root:
            continue
        try:
            parent.rmdir()
        except OSError:
            logger.with_fields(path=parent).debug("directory is not empty")
    root.rmdir()
