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

GZIP_SUFFIX = ".gz"


@dataclass(frozen=True)
class CommandSpec:
    binary: str
    command: str = ""
    args: tuple[str, ...] = field(default_factory=tuple)
    nice: int | None = None
    ionice: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def command_line(self) -> list[str]:
        return parse_command_line(self)

    def __str__(self) -> str:
        return " ".join(self.command_line())


@dataclass
class PipedPids:
    upstream: int = 0
    downstream: int = 0


def parse_command_line(cmd: CommandSpec) -> list[str]:
    line = list(cmd.args)
    if cmd.command:
        line.insert(0, cmd.command)
    if cmd.binary:
        line.insert(0, cmd.binary)
    if cmd.nice is not None:
        line[:0] = ["nice", f"-n{cmd.nice}"]
    if cmd.ionice is not None:
        line[:0] = ["ionice", f"-c{cmd.ionice}"]
    return line
