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

from .args import SKIP, flag, is_zero, nested, positional, struct_to_cli
from .command import GZIP_SUFFIX, CommandSpec, PipedPids, parse_command_line
from .gzip import check_and_gunzip_file, gzip_file
from .runner import (
    CMD_TIMEOUT,
    RunContext,
    run,
    run_piped,
    run_piped_with_timeout,
    run_with_timeout,
)

__all__ = [
    "CMD_TIMEOUT",
    "GZIP_SUFFIX",
    "SKIP",
    "CommandSpec",
    "PipedPids",
    "RunContext",
    "check_and_gunzip_file",
    "flag",
    "gzip_file",
    "is_zero",
    "nested",
    "parse_command_line",
    "positional",
    "run",
    "run_piped",
    "run_piped_with_timeout",
    "run_with_timeout",
    "struct_to_cli",
]
