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

import importlib.metadata
import signal
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.markup import escape
from rich.traceback import install as install_rich_traceback

from ...config import ConfigTree, load_config
from ...log import get_logger
from ...process.runner import RunContext
from ..ui import console_err

_CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)

logger = get_logger(__name__)


def _run_cli(func: Callable[[], Any], *, debug: bool) -> None:
    if debug:
        install_rich_traceback(show_locals=True)
    try:
        result = func()
    except (OSError, RuntimeError, ValueError, TypeError, LookupError) as exc:
        if debug:
            raise
        console_err.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2)
    if isinstance(result, int) and result != 0:
        raise typer.Exit(code=result)


def _ctx_value(ctx: typer.Context, key: str) -> Any:
    if ctx.obj is None:
        return None
    return ctx.obj.get(key)


def _ctx_flag(ctx: typer.Context, key: str) -> bool:
    return bool(_ctx_value(ctx, key))


def _load_tree(ctx: typer.Context) -> ConfigTree:
    paths = _ctx_value(ctx, "config") or []
    return load_config(paths)


@contextmanager
def _cancel_on_signals() -> Iterator[RunContext]:
    """Yield a run context that SIGINT/SIGTERM cancel instead of killing brudi outright."""
    run_ctx = RunContext()

    def _handler(signum: int, _frame: Any) -> None:
        logger.with_fields(signal=signal.Signals(signum).name).warning("canceling running commands")
        run_ctx.cancel()

    previous = {signum: signal.signal(signum, _handler) for signum in _CANCEL_SIGNALS}
    try:
        yield run_ctx
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _get_version() -> str:
    try:
        return importlib.metadata.version("brudi")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"
