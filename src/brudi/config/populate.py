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

import dataclasses
import os
from collections.abc import Mapping, MutableMapping
from typing import Any, TypeVar

from ..errors import ConfigError
from ..log import get_logger
from ..process.args import ENV_KEY, REQUIRED_KEY, is_zero
from .tree import normalize_key

_T = TypeVar("_T")

logger = get_logger(__name__)


def config_key(name: str) -> str:
    """Return the camelCase configuration key for a field name."""
    head, *rest = name.rstrip("_").split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def populate(target: _T, values: Mapping[str, Any], *, prefix: str = "") -> _T:
    if not dataclasses.is_dataclass(target):
        raise TypeError("populate requires a dataclass instance")
    by_key = {normalize_key(item.name): item for item in dataclasses.fields(target)}
    for key, value in values.items():
        dotted = f"{prefix}.{key}" if prefix else key
        item = by_key.get(normalize_key(key))
        if item is None:
            logger.with_fields(key=dotted).warning("ignoring unknown configuration key")
            continue
        current = getattr(target, item.name)
        if dataclasses.is_dataclass(current):
            if not isinstance(value, Mapping):
                raise ConfigError(f"{dotted} must be a table")
            populate(current, value, prefix=dotted)
            continue
        setattr(target, item.name, _coerce(value, current, field=dotted))
    return target


def validate(target: Any, *, prefix: str = "") -> None:
    missing = missing_required(target, prefix=prefix)
    if missing:
        raise ConfigError(f"missing required configuration: {', '.join(missing)}")


def missing_required(target: Any, *, prefix: str = "") -> list[str]:
    missing: list[str] = []
    for item in dataclasses.fields(target):
        value = getattr(target, item.name)
        dotted = f"{prefix}.{config_key(item.name)}" if prefix else config_key(item.name)
        if dataclasses.is_dataclass(value):
            missing.extend(missing_required(value, prefix=dotted))
            continue
        if item.metadata.get(REQUIRED_KEY) and is_zero(value):
            missing.append(dotted)
    return missing


def ensure_env(target: Any, *, environ: MutableMapping[str, str] | None = None) -> list[str]:
    """Export ``env``-tagged fields to the environment without overriding set values."""
    env = os.environ if environ is None else environ
    exported: list[str] = []
    for item in dataclasses.fields(target):
        value = getattr(target, item.name)
        if dataclasses.is_dataclass(value):
            exported.extend(ensure_env(value, environ=env))
            continue
        variable = item.metadata.get(ENV_KEY)
        if not variable or is_zero(value):
            continue
        if env.get(variable):
            continue
        env[variable] = str(value)
        exported.append(variable)
        logger.with_fields(variable=variable).debug("setting environment variable")
    return exported


def _coerce(value: Any, current: Any, *, field: str) -> Any:
    if isinstance(current, bool):
        return _parse_bool(value, field=field)
    if isinstance(current, int):
        return _parse_int(value, field=field)
    if isinstance(current, list):
        return _parse_str_list(value, field=field)
    if isinstance(current, str):
        return _parse_str(value, field=field)
    return value


def _parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off", ""}:
            return False
    raise ConfigError(f"{field} must be a boolean")


def _parse_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError as exc:
            raise ConfigError(f"{field} must be an integer") from exc
    raise ConfigError(f"{field} must be an integer")


def _parse_str(value: Any, *, field: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ConfigError(f"{field} must be a string")


def _parse_str_list(value: Any, *, field: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{field} must be a list of strings")
    return [_parse_str(item, field=f"{field}[{index}]") for index, item in enumerate(value)]
