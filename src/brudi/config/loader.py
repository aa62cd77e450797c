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
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from ..errors import ConfigError
from ..log import get_logger
from .locations import default_config_path
from .tree import ConfigTree, find_key

logger = get_logger(__name__)


def resolve_config_paths(
    paths: Iterable[str | Path] = (),
    *,
    include_default: bool = True,
) -> list[Path]:
    candidates: list[Path] = []
    if include_default:
        default_path = default_config_path()
        if default_path.is_file():
            candidates.append(default_path)
    candidates.extend(Path(path).expanduser() for path in paths)

    seen: set[Path] = set()
    unique: list[Path] = []
    for path in candidates:
        key = path.resolve()
        if key in seen:
            logger.with_fields(config=path).warning(
                "config has been specified more than once, ignoring additional instances"
            )
            continue
        seen.add(key)
        unique.append(path)

    for path in unique:
        if not path.exists():
            raise ConfigError(f"config '{path}' does not exist")
        if path.is_dir():
            raise ConfigError(f"config '{path}' is a directory")
    return unique


def render_config(text: str, *, source: str = "<config>", environ: Mapping[str, str] | None = None) -> str:
    env = Environment(undefined=StrictUndefined, autoescape=False, keep_trailing_newline=True)
    values = dict(os.environ if environ is None else environ)
    try:
        return env.from_string(text).render(env=values)
    except TemplateError as exc:
        raise ConfigError(f"failed while rendering config '{source}': {exc}") from exc


def parse_config(text: str, *, source: str = "<config>") -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed while reading config '{source}': {exc}") from exc


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        existing_key = find_key(merged, key)
        if existing_key is None:
            merged[key] = value
            continue
        existing = merged[existing_key]
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[existing_key] = merge_configs(existing, value)
        else:
            merged[existing_key] = value
    return merged


def load_config(
    paths: Iterable[str | Path] = (),
    *,
    include_default: bool = True,
    environ: Mapping[str, str] | None = None,
) -> ConfigTree:
    data: dict[str, Any] = {}
    for path in resolve_config_paths(paths, include_default=include_default):
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"failed while reading config file '{path}': {exc}") from exc
        rendered = render_config(text, source=str(path), environ=environ)
        data = merge_configs(data, parse_config(rendered, source=str(path)))
        logger.with_fields(config=path).debug("config loaded")
    return ConfigTree(data)
