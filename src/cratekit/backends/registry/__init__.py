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

"""Registry protocol for cratekit.

The :class:`Registry` protocol is the async interface the publish
orchestrator uses to query a crate registry. The production
implementation is
:class:`~cratekit.backends.registry.crates_io.CratesIoRegistry`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cratekit.backends.registry._types import (
    CrateInfo as CrateInfo,
    CrateSummary as CrateSummary,
    CrateVersionInfo as CrateVersionInfo,
)
from cratekit.backends.registry.crates_io import CratesIoRegistry as CratesIoRegistry

__all__ = [
    'CrateInfo',
    'CrateSummary',
    'CrateVersionInfo',
    'CratesIoRegistry',
    'Registry',
]


@runtime_checkable
class Registry(Protocol):
    """Protocol for crate registry queries."""

    async def fetch_published(self, name: str) -> CrateInfo | None:
        """Return the crate's registry info, or ``None`` if never published.

        Args:
            name: Crate name.
        """
        ...

    async def await_published(self, name: str, version: str, *, timeout: float = 60.0) -> CrateInfo:
        """Wait until ``version`` of ``name`` is visible on the registry.

        Args:
            name: Crate name.
            version: Exact version string to wait for.
            timeout: Maximum seconds to wait.
        """
        ...
