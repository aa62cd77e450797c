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
import subprocess
import tempfile
import threading
import time

from ..errors import CommandError, CommandTimeoutError, PipedCommandError
from ..log import get_logger
from .command import CommandSpec, PipedPids, parse_command_line

CMD_TIMEOUT = 6 * 60 * 60.0
_POLL_INTERVAL = 0.2

logger = get_logger(__name__)


class RunContext:
    """Cancellation and deadline carrier shared by a chain of process runs.

    Cancelling a context cancels every child derived from it; a child's
    deadline never extends past its parent's.
    """

    def __init__(self, *, deadline: float | None = None, parent: RunContext | None = None) -> None:
        self._parent = parent
        self._cancelled = threading.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, timeout: float) -> RunContext:
        return cls(deadline=time.monotonic() + timeout)

    def child(self, timeout: float | None = None) -> RunContext:
        deadline = None if timeout is None else time.monotonic() + timeout
        if self.deadline is not None and (deadline is None or self.deadline < deadline):
            deadline = self.deadline
        return RunContext(deadline=deadline, parent=self)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def done(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()


def run(ctx: RunContext | None, cmd: CommandSpec) -> bytes:
    line = parse_command_line(cmd)
    log = logger.with_fields(command=line)
    log.debug("executing command")
    try:
        proc = subprocess.Popen(line, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
    except OSError as exc:
        if ctx is not None and ctx.done():
            raise CommandTimeoutError(line) from exc
        raise CommandError(line, detail=str(exc)) from exc
    output = _communicate(ctx, proc)
    if ctx is not None and ctx.done():
        raise CommandTimeoutError(line, proc.returncode, output)
    if proc.returncode != 0:
        raise CommandError(line, proc.returncode, output)
    log.debug("successfully executed command")
    return output


def run_with_timeout(
    ctx: RunContext | None,
    cmd: CommandSpec,
    timeout: float = CMD_TIMEOUT,
) -> bytes:
    parent = ctx if ctx is not None else RunContext()
    return run(parent.child(timeout), cmd)


def run_piped(
    ctx: RunContext | None,
    upstream_cmd: CommandSpec,
    downstream_cmd: CommandSpec,
    pids: PipedPids | None = None,
) -> bytes:
    """Run ``upstream_cmd | downstream_cmd`` and return their combined output.

    Upstream stderr plus downstream stdout and stderr share one sink. A tar
    upstream exiting with status 1 (files changed while being read) is not
    counted as an error.
    """
    upstream_line = parse_command_line(upstream_cmd)
    downstream_line = parse_command_line(downstream_cmd)
    log = logger.with_fields(command=f"{' '.join(upstream_line)} | {' '.join(downstream_line)}")
    log.debug("executing command")

    errors: list[str] = []
    upstream: subprocess.Popen | None = None
    downstream: subprocess.Popen | None = None
    with tempfile.TemporaryFile() as sink:
        read_fd, write_fd = os.pipe()
        try:
            downstream = subprocess.Popen(downstream_line, stdin=read_fd, stdout=sink, stderr=sink)
        except OSError as exc:
            errors.append(str(exc))
        finally:
            os.close(read_fd)
        try:
            upstream = subprocess.Popen(upstream_line, stdout=write_fd, stderr=sink)
        except OSError as exc:
            errors.append(str(exc))
        finally:
            os.close(write_fd)

        if pids is not None:
            if upstream is not None:
                pids.upstream = upstream.pid
            if downstream is not None:
                pids.downstream = downstream.pid

        if upstream is not None:
            code = _wait(ctx, upstream, downstream)
            if code != 0 and not (upstream_cmd.binary == "tar" and code == 1):
                errors.append(f"{upstream_line[0]}: {_exit_message(code)}")
        if downstream is not None:
            code = _wait(ctx, downstream, upstream)
            if code != 0:
                errors.append(f"{downstream_line[0]}: {_exit_message(code)}")

        sink.seek(0)
        output = sink.read()

    if ctx is not None and ctx.done():
        raise CommandTimeoutError(upstream_line + ["|"] + downstream_line, output=output)
    if errors:
        raise PipedCommandError(
            upstream_line + ["|"] + downstream_line,
            output=output,
            errors=tuple(errors),
        )
    log.debug("successfully executed command")
    return output


def run_piped_with_timeout(
    ctx: RunContext | None,
    upstream_cmd: CommandSpec,
    downstream_cmd: CommandSpec,
    timeout: float = CMD_TIMEOUT,
    pids: PipedPids | None = None,
) -> bytes:
    parent = ctx if ctx is not None else RunContext()
    return run_piped(parent.child(timeout), upstream_cmd, downstream_cmd, pids)


def _communicate(ctx: RunContext | None, proc: subprocess.Popen) -> bytes:
    if ctx is None:
        output, _ = proc.communicate()
        return output or b""
    while True:
        try:
            output, _ = proc.communicate(timeout=_slice(ctx))
            return output or b""
        except subprocess.TimeoutExpired:
            if ctx.done():
                proc.kill()
                output, _ = proc.communicate()
                return output or b""


def _wait(
    ctx: RunContext | None,
    proc: subprocess.Popen,
    peer: subprocess.Popen | None,
) -> int:
    if ctx is None:
        return proc.wait()
    while True:
        try:
            return proc.wait(timeout=_slice(ctx))
        except subprocess.TimeoutExpired:
            if ctx.done():
                for target in (proc, peer):
                    if target is not None and target.poll() is None:
                        target.kill()
                return proc.wait()


def _slice(ctx: RunContext) -> float:
    remaining = ctx.remaining()
    if remaining is None:
        return _POLL_INTERVAL
    return max(0.0, min(_POLL_INTERVAL, remaining))


def _exit_message(code: int) -> str:
    if code < 0:
        return f"terminated by signal {-code}"
    return f"exit status {code}"
