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

"""Git VCS backend for cratekit.

The :class:`GitCLIBackend` implements the :class:`~cratekit.backends.vcs.VCS`
protocol by delegating to ``git`` via :func:`run_command`.

Tags are force-created and force-pushed so that re-running a release
for the same version moves the tag instead of failing.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from cratekit.backends._run import CommandResult, run_command
from cratekit.logging import get_logger

log = get_logger('cratekit.backends.git')


class GitCLIBackend:
    """Default :class:`~cratekit.backends.vcs.VCS` implementation using ``git``.

    Args:
        repo_root: Directory the git commands run in.
    """

    def __init__(self, repo_root: Path) -> None:
        """Initialize with the git repository root path."""
        self._root = repo_root

    def _git(self, *args: str) -> CommandResult:
        """Run a git command synchronously (called via to_thread)."""
        return run_command(['git', *args], cwd=self._root)

    async def tag(self, tag_name: str) -> CommandResult:
        """Create or move a lightweight tag at HEAD (``git tag -f``)."""
        log.info('tag', tag=tag_name, cwd=str(self._root))
        return await asyncio.to_thread(self._git, 'tag', '-f', tag_name)

    async def push_tag(self, tag_name: str, *, remote: str = 'origin') -> CommandResult:
        """Force-push one tag to ``remote``."""
        ref = f'refs/tags/{tag_name}'
        log.info('push_tag', tag=tag_name, remote=remote)
        return await asyncio.to_thread(self._git, 'push', '-u', remote, '--force', f'{ref}:{ref}')


__all__ = [
    'GitCLIBackend',
]
