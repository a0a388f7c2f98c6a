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

"""Tests for cratekit.backends.vcs.git module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from cratekit.backends.vcs import VCS, GitCLIBackend
from cratekit.logging import configure_logging
from tests._fakes import OK, FakeVCS

configure_logging(quiet=True)

_RUN = 'cratekit.backends.vcs.git.run_command'


class TestGitCLIBackend:
    """Tests for GitCLIBackend tagging."""

    def test_protocol(self) -> None:
        """The backend and the fake satisfy the VCS protocol."""
        assert isinstance(GitCLIBackend(Path('.')), VCS)
        assert isinstance(FakeVCS(), VCS)

    @pytest.mark.asyncio
    async def test_tag_is_forced(self) -> None:
        """Tags are created with -f in the repository root."""
        with patch(_RUN, MagicMock(return_value=OK)) as run:
            await GitCLIBackend(Path('/repo')).tag('v1.2.3')
        run.assert_called_once_with(['git', 'tag', '-f', 'v1.2.3'], cwd=Path('/repo'))

    @pytest.mark.asyncio
    async def test_push_tag_uses_full_refspec(self) -> None:
        """The tag is force-pushed by full refspec."""
        with patch(_RUN, MagicMock(return_value=OK)) as run:
            await GitCLIBackend(Path('/repo')).push_tag('v1.2.3')
        run.assert_called_once_with(
            ['git', 'push', '-u', 'origin', '--force', 'refs/tags/v1.2.3:refs/tags/v1.2.3'],
            cwd=Path('/repo'),
        )

    @pytest.mark.asyncio
    async def test_push_tag_custom_remote(self) -> None:
        """A different remote can be targeted."""
        with patch(_RUN, MagicMock(return_value=OK)) as run:
            await GitCLIBackend(Path('/repo')).push_tag('v1', remote='upstream')
        assert run.call_args.args[0][3] == 'upstream'
