# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Subprocess runner shared by the ``cargo`` and ``git`` backends.

:func:`run_command` runs one command to completion and captures its
output into a :class:`CommandResult`. A failing exit code is data, not
an exception; callers decide with :func:`ensure_ok` whether it is fatal.

Extra environment variables (``CARGO_REGISTRY_TOKEN``) are merged over
the current environment. Only their names are logged.
"""

from __future__ import annotations

import os
import subprocess  # noqa: S404 - subprocess is the core purpose of this module
import time
from dataclasses import dataclass
from pathlib import Path

from cratekit.errors import CommandError, E, ErrorCode
from cratekit.logging import get_logger

log = get_logger('cratekit.backends.run')

# cargo publish compiles the crate before uploading; 3 minutes.
DEFAULT_TIMEOUT_SECONDS = 180

# Re-exported so consumers don't import subprocess directly.
TimeoutExpired = subprocess.TimeoutExpired


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one process.

    Attributes:
        command: Argument vector that was run.
        return_code: Exit status. 127 when the executable was not found.
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock milliseconds.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the process exited with status 0."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """The argument vector joined with spaces, for messages."""
        return ' '.join(self.command)

    @property
    def diagnostics(self) -> str:
        """What the tool said about a failure.

        Trimmed stderr, else trimmed stdout, else ``"Returned <code>"``.
        cargo and git both write errors to stderr, but some wrappers
        print to stdout only.
        """
        return self.stderr.strip() or self.stdout.strip() or f'Returned {self.return_code}'


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CommandResult:
    """Run ``cmd`` and capture its output.

    Args:
        cmd: Program and arguments.
        cwd: Working directory.
        env: Variables merged over ``os.environ`` for the child.
        timeout: Seconds before the process is killed.

    Returns:
        The :class:`CommandResult`, successful or not.

    Raises:
        TimeoutExpired: If the process outlives ``timeout``.
    """
    cmd_str = ' '.join(cmd)
    log.debug('run_command', cmd=cmd_str, cwd=str(cwd or '.'), env=sorted(env or {}))

    start = time.monotonic()
    try:
        completed = subprocess.run(  # noqa: S603 -- argument vectors built by the backends
            cmd,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        log.warning('command_not_found', cmd=cmd_str)
        return CommandResult(command=cmd, return_code=127, stderr=str(exc))
    except subprocess.TimeoutExpired:
        log.error('command_timeout', cmd=cmd_str, timeout=timeout)
        raise
    duration = (time.monotonic() - start) * 1000

    result = CommandResult(
        command=cmd,
        return_code=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
        duration=duration,
    )
    if result.ok:
        log.debug('command_ok', cmd=cmd_str, duration=duration)
    else:
        log.warning('command_failed', cmd=cmd_str, return_code=result.return_code, stderr=result.stderr[:500])
    return result


def ensure_ok(result: CommandResult, message: str, *, code: ErrorCode = E.COMMAND_FAILED) -> CommandResult:
    """Return ``result`` if it succeeded.

    Raises:
        CommandError: ``"<message>: <diagnostics>"`` for a failed result.
    """
    if result.ok:
        return result
    raise CommandError(
        f'{message}: {result.diagnostics}',
        code=code,
        return_code=result.return_code,
        output=result.stderr or result.stdout,
    )


__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'CommandResult',
    'TimeoutExpired',
    'ensure_ok',
    'run_command',
]
