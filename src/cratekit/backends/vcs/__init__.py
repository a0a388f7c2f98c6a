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

"""Version control protocol for cratekit."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cratekit.backends._run import CommandResult
from cratekit.backends.vcs.git import GitCLIBackend as GitCLIBackend

__all__ = [
    'VCS',
    'GitCLIBackend',
]


@runtime_checkable
class VCS(Protocol):
    """Protocol for the tagging a release needs."""

    async def tag(self, tag_name: str) -> CommandResult:
        """Create or move ``tag_name`` to HEAD."""
        ...

    async def push_tag(self, tag_name: str, *, remote: str = 'origin') -> CommandResult:
        """Force-push ``tag_name`` to ``remote``."""
        ...
