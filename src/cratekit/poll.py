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

"""Poll the registry until a freshly published version is visible.

After ``cargo publish`` returns, crates.io can take a few seconds before
the new version shows up in the API. Dependents must not be published
until it does, so the orchestrator waits here between crates.

State machine::

                 sleep(interval), fetch()
                 ┌──────────────┐
                 ▼              │ not found / other versions / registry error
    ┌─────────────────┐         │
    │    POLLING      │─────────┘
    └────────┬────────┘
             │
     exact version seen         elapsed >= timeout
             │                         │
             ▼                         ▼
    ┌─────────────────┐       ┌─────────────────┐
    │     FOUND       │       │   TIMED_OUT     │
    └─────────────────┘       └─────────────────┘
      returns CrateInfo         raises PublishTimeoutError

The clock and the sleep function are injectable so the machine can be
driven deterministically in tests.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from cratekit.errors import PublishTimeoutError, RegistryError
from cratekit.logging import get_logger

if TYPE_CHECKING:
    from cratekit.backends.registry._types import CrateInfo

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_TIMEOUT = 60.0


class PollState(str, Enum):
    """States of a :class:`PublishPoller`."""

    POLLING = 'polling'
    FOUND = 'found'
    TIMED_OUT = 'timed_out'


@dataclass
class PublishPoller:
    """Wait for an exact version string to appear on the registry.

    Attributes:
        interval: Seconds to sleep before each query.
        timeout: Seconds after which polling gives up.
        clock: Monotonic clock returning seconds.
        sleep: Async sleep function.
        state: Current :class:`PollState`.
        attempts: Number of registry queries made so far.
    """

    interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_POLL_TIMEOUT
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    state: PollState = field(default=PollState.POLLING, init=False)
    attempts: int = field(default=0, init=False)

    async def wait_for(
        self,
        name: str,
        version: str,
        fetch: Callable[[], Awaitable[CrateInfo | None]],
    ) -> CrateInfo:
        """Poll ``fetch`` until it reports ``version`` for ``name``.

        Args:
            name: Crate name, for messages.
            version: Exact version string to wait for.
            fetch: Returns the registry's view of the crate, or ``None``
                if it is not on the registry yet.

        Returns:
            The first :class:`CrateInfo` listing ``version``.

        Raises:
            PublishTimeoutError: If ``timeout`` elapses first.
        """
        self.state = PollState.POLLING
        self.attempts = 0
        last_error: RegistryError | None = None
        start = self.clock()

        while self.clock() - start < self.timeout:
            logger.info('waiting_for_version', crate=name, version=version, attempt=self.attempts + 1)
            await self.sleep(self.interval)
            self.attempts += 1
            try:
                info = await fetch()
            except RegistryError as exc:
                last_error = exc
                logger.warning('poll_registry_error', crate=name, version=version, error=exc.message)
                continue

            if info is None:
                logger.info('crate_not_found', crate=name, version=version)
                continue
            if info.has_version(version):
                self.state = PollState.FOUND
                logger.info('version_available', crate=name, version=version, attempts=self.attempts)
                return info
            logger.info(
                'version_not_yet_available',
                crate=name,
                version=version,
                newest=info.crate.newest_version,
            )

        self.state = PollState.TIMED_OUT
        logger.warning('poll_timeout', crate=name, version=version, timeout=self.timeout, attempts=self.attempts)
        raise PublishTimeoutError(
            f'Failed to get published version for crate "{name}" version "{version}" within {self.timeout:g}s'
        ) from last_error


__all__ = [
    'DEFAULT_POLL_INTERVAL',
    'DEFAULT_POLL_TIMEOUT',
    'PollState',
    'PublishPoller',
]
