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

"""Rust/Cargo backend for cratekit.

The :class:`CargoBackend` implements the
:class:`~cratekit.backends.pm.Cargo` protocol via the ``cargo`` CLI
(``cargo metadata``, ``cargo package --list``, ``cargo publish``).

Authentication for ``cargo publish`` is passed per invocation through
the ``CARGO_REGISTRY_TOKEN`` environment variable.

All methods are async. Blocking subprocess calls are dispatched to
``asyncio.to_thread()`` to avoid blocking the event loop.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from cratekit.backends._run import CommandResult, ensure_ok, run_command
from cratekit.logging import get_logger

log = get_logger('cratekit.backends.pm.cargo')


def publish_args(
    crate_name: str,
    manifest_path: str | Path,
    *,
    dry_run: bool = False,
    allow_dirty: bool = False,
    arguments: str = '',
) -> list[str]:
    """Build the ``cargo publish`` command line for one crate.

    ``arguments`` is split on single spaces and appended verbatim.
    """
    cmd = ['cargo', 'publish', '--package', crate_name, '--manifest-path', str(manifest_path)]
    if dry_run:
        cmd.append('--dry-run')
    if allow_dirty:
        cmd.append('--allow-dirty')
    if arguments:
        cmd.extend(arguments.split(' '))
    return cmd


class CargoBackend:
    """Default :class:`~cratekit.backends.pm.Cargo` implementation.

    Args:
        executable: Name or path of the ``cargo`` binary.
    """

    def __init__(self, executable: str = 'cargo') -> None:
        """Initialize with the cargo executable."""
        self._cargo = executable

    async def version(self) -> CommandResult:
        """Run ``cargo --version``. Failure is reported, not raised."""
        return await asyncio.to_thread(run_command, [self._cargo, '--version'])

    async def metadata(self, manifest_path: Path) -> str:
        """Return ``cargo metadata --format-version 1 --no-deps`` output.

        Raises:
            CommandError: If cargo exits non-zero.
        """
        result = await asyncio.to_thread(
            run_command,
            [self._cargo, 'metadata', '--format-version', '1', '--no-deps', '--manifest-path', str(manifest_path)],
        )
        return ensure_ok(result, f'Failed to get cargo metadata for {manifest_path}').stdout

    async def package_list(self, manifest_path: Path) -> str:
        """Return ``cargo package --list`` output for one crate.

        Raises:
            CommandError: If cargo exits non-zero.
        """
        result = await asyncio.to_thread(
            run_command,
            [self._cargo, 'package', '--list', '--allow-dirty', '--manifest-path', str(manifest_path)],
        )
        return ensure_ok(result, f'Failed to get cargo package list for {manifest_path}').stdout

    async def publish(
        self,
        crate_name: str,
        manifest_path: str | Path,
        *,
        root: str | Path,
        dry_run: bool = False,
        allow_dirty: bool = False,
        arguments: str = '',
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run ``cargo publish`` for one crate from the workspace root.

        Args:
            crate_name: Crate to publish (``--package``).
            manifest_path: The crate's ``Cargo.toml``.
            root: Workspace root, used as the working directory.
            dry_run: Pass ``--dry-run`` to cargo. The command itself
                still runs.
            allow_dirty: Pass ``--allow-dirty``.
            arguments: Extra space-separated arguments.
            env: Extra environment, e.g. ``CARGO_REGISTRY_TOKEN``.
        """
        cmd = publish_args(
            crate_name,
            manifest_path,
            dry_run=dry_run,
            allow_dirty=allow_dirty,
            arguments=arguments,
        )
        cmd[0] = self._cargo
        log.info('publish', crate=crate_name, cmd=' '.join(cmd), cwd=str(root), dry_run=dry_run)
        return await asyncio.to_thread(run_command, cmd, cwd=root, env=env)


__all__ = [
    'CargoBackend',
    'publish_args',
]
