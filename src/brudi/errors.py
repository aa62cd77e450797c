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

from collections.abc import Sequence
from dataclasses import dataclass, field

TIMEOUT_MESSAGE = "failed to execute command: timed out or canceled"


class BrudiError(RuntimeError):
    """Base class for errors raised by brudi itself."""


class ConfigError(BrudiError, ValueError):
    """Missing or invalid configuration; raised before any process is spawned."""


class UnsupportedKindError(BrudiError, LookupError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"unsupported kind '{kind}'")
        self.kind = kind


@dataclass(eq=False)
class CommandError(BrudiError):
    cmd: Sequence[str]
    returncode: int | None = None
    output: bytes = b""
    detail: str = ""

    def __post_init__(self) -> None:
        super().__init__(str(self))

    @property
    def output_text(self) -> str:
        return self.output.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        message = f"failed to execute command: {self.detail or _exit_detail(self.returncode)}"
        output = self.output_text.strip()
        if output:
            return f"{message} - {output}"
        return message


@dataclass(eq=False)
class CommandTimeoutError(CommandError):
    def __str__(self) -> str:
        return TIMEOUT_MESSAGE


@dataclass(eq=False)
class PipedCommandError(CommandError):
    errors: tuple[str, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        message = "\n".join(self.errors) or "piped command failed"
        output = self.output_text.strip()
        if output:
            return f"{message} - {output}"
        return message


class ResticParseError(BrudiError, ValueError):
    def __init__(self, message: str, output: bytes = b"") -> None:
        super().__init__(message)
        self.output = output


class RepoAlreadyInitializedError(BrudiError):
    def __init__(self, output: bytes = b"") -> None:
        super().__init__("repo already initialized")
        self.output = output


def _exit_detail(returncode: int | None) -> str:
    if returncode is None:
        return "unknown error"
    if returncode < 0:
        return f"terminated by signal {-returncode}"
    return f"exit status {returncode}"
