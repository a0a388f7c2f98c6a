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

"""Cargo protocol for cratekit.

The :class:`Cargo` protocol is the async interface for reading
workspace metadata and publishing crates. Implementation:

- :class:`~cratekit.backends.pm.cargo.CargoBackend`: ``cargo`` CLI
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from cratekit.backends._run import CommandResult
from cratekit.backends.pm.cargo import CargoBackend as CargoBackend

__all__ = [
    'Cargo',
    'CargoBackend',
]


@runtime_checkable
class Cargo(Protocol):
    """Protocol for the cargo operations a release needs."""

    async def version(self) -> CommandResult:
        """Run ``cargo --version``."""
        ...

    async def metadata(self, manifest_path: Path) -> str:
        """Return raw ``cargo metadata`` JSON."""
        ...

    async def package_list(self, manifest_path: Path) -> str:
        """Return raw ``cargo package --list`` output."""
        ...

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
        """Publish one crate.

        Args:
            crate_name: Crate to publish.
            manifest_path: The crate's ``Cargo.toml``.
            root: Working directory for the publish command.
            dry_run: Ask cargo for a dry run.
            allow_dirty: Allow uncommitted changes.
            arguments: Extra space-separated arguments.
            env: Extra environment variables.
        """
        ...
