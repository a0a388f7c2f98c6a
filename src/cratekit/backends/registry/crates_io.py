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

"""crates.io registry backend for cratekit.

The :class:`CratesIoRegistry` implements the
:class:`~cratekit.backends.registry.Registry` protocol using the
`crates.io API <https://crates.io/api/v1>`_.

API endpoint used::

    GET /api/v1/crates/{name}   → crate metadata + all versions
                                  404 when the crate was never published
"""

from __future__ import annotations

import httpx

from cratekit.backends.registry._types import CrateInfo
from cratekit.errors import E, RegistryError
from cratekit.logging import get_logger
from cratekit.net import DEFAULT_POOL_SIZE, DEFAULT_RETRY, DEFAULT_TIMEOUT, RetryPolicy, http_client, request_with_retry
from cratekit.poll import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_TIMEOUT, PublishPoller

log = get_logger('cratekit.backends.registry.crates_io')

# The poller already retries every failed query on its own schedule.
_POLL_RETRY = RetryPolicy(max_retries=0)


class CratesIoRegistry:
    """crates.io :class:`~cratekit.backends.registry.Registry` implementation.

    Args:
        base_url: Base URL of the registry web API.
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
        poll_interval: Seconds between queries in :meth:`await_published`.
        retry: Retry policy for rate limits and transient failures.
    """

    #: Base URL for the production crates.io registry.
    DEFAULT_BASE_URL: str = 'https://crates.io'

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        retry: RetryPolicy = DEFAULT_RETRY,
    ) -> None:
        """Initialize with the registry URL, pool size, and timeouts."""
        self._base_url = base_url.rstrip('/')
        self._pool_size = pool_size
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._retry = retry

    async def fetch_published(self, name: str) -> CrateInfo | None:
        """Return the registry's view of a crate, or ``None`` if never published.

        Raises:
            RegistryError: On any non-404 error status, a transport
                failure after retries, or a malformed body.
        """
        return await self._fetch(name, retry=self._retry, timeout=self._timeout)

    async def _fetch(self, name: str, *, retry: RetryPolicy, timeout: float) -> CrateInfo | None:
        url = f'{self._base_url}/api/v1/crates/{name}'
        try:
            async with http_client(pool_size=self._pool_size, timeout=timeout) as client:
                response = await request_with_retry(client, 'GET', url, policy=retry)
        except httpx.HTTPError as exc:
            raise RegistryError(f'Failed to get published version for crate "{name}": {exc}') from exc

        if response.status_code == 404:
            log.debug('crate_not_published', crate=name)
            return None
        if not response.is_success:
            raise RegistryError(
                f'Failed to get published version for crate "{name}": '
                f'{response.status_code} {response.reason_phrase}'.rstrip()
            )
        try:
            data = response.json()
        except ValueError as exc:
            log.debug('crates_io_parse_error', crate=name, error=str(exc))
            raise RegistryError(
                f'Failed to get published version for crate "{name}", invalid response',
                code=E.REGISTRY_INVALID_RESPONSE,
            ) from exc

        info = CrateInfo.from_json(name, data)
        log.debug(
            'crate_info',
            crate=name,
            max_version=info.crate.max_version,
            newest_version=info.crate.newest_version,
            versions=len(info.versions),
        )
        return info

    async def await_published(
        self,
        name: str,
        version: str,
        *,
        timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> CrateInfo:
        """Poll until ``version`` of ``name`` is visible on crates.io.

        Raises:
            PublishTimeoutError: If the version does not appear within
                ``timeout`` seconds.
        """
        poller = PublishPoller(interval=self._poll_interval, timeout=timeout)
        request_timeout = min(self._timeout, timeout)
        return await poller.wait_for(
            name,
            version,
            lambda: self._fetch(name, retry=_POLL_RETRY, timeout=request_timeout),
        )


__all__ = [
    'CratesIoRegistry',
]
