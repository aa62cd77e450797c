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

"""Turn option dataclasses into command-line argument vectors.

Every option field is declared with :func:`flag` (or :func:`positional`) so the
marshaler knows which token it maps to:

* ``flag("--host=")`` joins the value inline: ``--host=db``
* ``flag("--host")`` emits flag and value as two tokens: ``--host db``
* ``positional()`` emits the bare value
* ``flag(SKIP, env="PGPASSWORD")`` is never emitted; the value travels via
  the environment instead

Zero values (``""``, ``0``, ``False``, ``[]``, ``None``) are never emitted.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from ..log import get_logger

SKIP = "-"

FLAG_KEY = "brudi.flag"
ENV_KEY = "brudi.env"
REQUIRED_KEY = "brudi.required"

logger = get_logger(__name__)


def flag(
    name: str,
    default: Any = "",
    *,
    env: str | None = None,
    required: bool = False,
) -> Any:
    metadata = {FLAG_KEY: name, ENV_KEY: env, REQUIRED_KEY: required}
    if isinstance(default, list):
        initial = list(default)
        return dataclasses.field(default_factory=lambda: list(initial), metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


def positional(default: Any = "", *, required: bool = False) -> Any:
    return flag("", default, required=required)


def setting(default: Any = "", *, env: str | None = None, required: bool = False) -> Any:
    return flag(SKIP, default, env=env, required=required)


def nested(factory: Any) -> Any:
    return dataclasses.field(default_factory=factory, metadata={FLAG_KEY: ""})


def field_flag(item: dataclasses.Field) -> str:
    return item.metadata.get(FLAG_KEY, "")


def struct_to_cli(options: Any) -> list[str]:
    if options is None or not dataclasses.is_dataclass(options):
        return []
    if is_zero(options):
        return []
    args: list[str] = []
    for item in dataclasses.fields(options):
        name = field_flag(item)
        if name == SKIP:
            continue
        value = getattr(options, item.name)
        if value is None:
            continue
        if dataclasses.is_dataclass(value):
            args.extend(struct_to_cli(value))
        elif isinstance(value, bool):
            if value:
                args.append(name)
        elif isinstance(value, int):
            if value != 0:
                args.extend(_emit(name, str(value)))
        elif isinstance(value, str):
            if value:
                args.extend(_emit(name, value))
        elif isinstance(value, (list, tuple)):
            for element in value:
                args.extend(_emit(name, str(element)))
        else:
            logger.with_fields(field=item.name, type=type(value).__name__).debug(
                "skipping unsupported option type"
            )
    return args


def is_zero(value: Any) -> bool:
    if value is None:
        return True
    if dataclasses.is_dataclass(value):
        return all(is_zero(getattr(value, item.name)) for item in dataclasses.fields(value))
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (bool, int, float)):
        return not value
    return False


def _emit(name: str, value: str) -> list[str]:
    if not name:
        return [value]
    if name.endswith("="):
        return [f"{name}{value}"]
    return [name, value]
