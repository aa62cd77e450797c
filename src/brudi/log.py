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

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "brudi"
_HANDLER_NAME = "brudi-rich"


class FieldLogger(logging.LoggerAdapter):
    """Logger adapter that appends bound ``key=value`` fields to every message."""

    def __init__(self, logger: logging.Logger, fields: Mapping[str, Any] | None = None) -> None:
        super().__init__(logger, dict(fields or {}))

    def with_fields(self, **fields: Any) -> FieldLogger:
        merged = dict(self.extra or {})
        merged.update(fields)
        return FieldLogger(self.logger, merged)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        if not self.extra:
            return msg, kwargs
        rendered = " ".join(f"{key}={_format_value(value)}" for key, value in self.extra.items())
        return f"{msg} {rendered}", kwargs


def get_logger(name: str, **fields: Any) -> FieldLogger:
    return FieldLogger(logging.getLogger(name), fields)


def configure_logging(
    console: Console,
    *,
    debug: bool = False,
    quiet: bool = False,
) -> logging.Logger:
    if debug:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)
    handler = RichHandler(
        console=console,
        level=level,
        show_path=debug,
        rich_tracebacks=debug,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return root


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        text = " ".join(str(item) for item in value)
    else:
        text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return f'"{text}"'
    return text
