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

from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ConfigError

DO_STDIN_BACKUP_KEY = "doStdinBackup"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def find_key(data: Mapping[str, Any], key: str) -> str | None:
    if key in data:
        return key
    wanted = normalize_key(key)
    for candidate in data:
        if normalize_key(candidate) == wanted:
            return candidate
    return None


class ConfigTree(Mapping[str, Any]):
    """Read-only view over merged configuration with dotted, case-insensitive keys."""

    def __init__(self, data: Mapping[str, Any] | None = None, *, prefix: str = "") -> None:
        self._data: dict[str, Any] = dict(data or {})
        self.prefix = prefix

    def __getitem__(self, key: str) -> Any:
        found = find_key(self._data, key)
        if found is None:
            raise KeyError(key)
        return self._data[found]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ConfigTree(prefix={self.prefix!r}, keys={list(self._data)!r})"

    def lookup(self, dotted: str, default: Any = None) -> Any:
        current: Any = self._data
        for part in dotted.split("."):
            if not isinstance(current, Mapping):
                return default
            found = find_key(current, part)
            if found is None:
                return default
            current = current[found]
        return current

    def section(self, dotted: str) -> ConfigTree:
        value = self.lookup(dotted)
        full_key = self.qualify(dotted)
        if value is None:
            return ConfigTree(prefix=full_key)
        if not isinstance(value, Mapping):
            raise ConfigError(f"{full_key} must be a table")
        return ConfigTree(value, prefix=full_key)

    def get_bool(self, dotted: str, default: bool = False) -> bool:
        value = self.lookup(dotted)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _TRUE_VALUES:
                return True
            if normalized in _FALSE_VALUES:
                return False
        raise ConfigError(f"{self.qualify(dotted)} must be a boolean")

    def qualify(self, dotted: str) -> str:
        return f"{self.prefix}.{dotted}" if self.prefix else dotted

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    @property
    def do_stdin_backup(self) -> bool:
        return self.get_bool(DO_STDIN_BACKUP_KEY)
