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

"""Fake VCS backend for tests.

Records created and pushed tags. Failures are injected per operation.
"""

from __future__ import annotations

from cratekit.backends._run import CommandResult

OK = CommandResult(command=[], return_code=0, stdout='', stderr='')
"""A successful no-op ``CommandResult`` for use as a default return value."""


def failed(stderr: str = '', *, stdout: str = '', return_code: int = 1) -> CommandResult:
    """Return a failed ``CommandResult`` with the given output."""
    return CommandResult(command=[], return_code=return_code, stdout=stdout, stderr=stderr)


class FakeVCS:
    """Configurable VCS test double that records every call."""

    def __init__(
        self,
        *,
        tag_result: CommandResult = OK,
        push_result: CommandResult = OK,
    ) -> None:
        """Initialize with the results ``tag()`` and ``push_tag()`` return."""
        self._tag_result = tag_result
        self._push_result = push_result
        self.tags: list[str] = []
        self.pushed: list[tuple[str, str]] = []

    async def tag(self, tag_name: str) -> CommandResult:
        """Record the tag."""
        self.tags.append(tag_name)
        return self._tag_result

    async def push_tag(self, tag_name: str, *, remote: str = 'origin') -> CommandResult:
        """Record the push."""
        self.pushed.append((tag_name, remote))
        return self._push_result
