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

"""HTTP plumbing for talking to crates.io.

crates.io asks API clients to identify themselves with a descriptive
``User-Agent`` and answers bursts with ``429 Too Many Requests`` plus a
``Retry-After`` header. :func:`http_client` sets the headers and
:func:`request_with_retry` waits out rate limits and transient failures
according to a :class:`RetryPolicy`.

Retry schedule with the default policy::

    attempt   delay before next try
    ───────   ──────────────────────────────────────────
    1         1 s   (or Retry-After, capped at 30 s)
    2         2 s
    3         4 s
    4         give up: raise the transport error, or
              return the last 429/5xx response as is

Usage::

    from cratekit.net import http_client, request_with_retry

    async with http_client() as client:
        response = await request_with_retry(client, 'GET', 'https://crates.io/api/v1/crates/serde')
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Final

import httpx

from cratekit import __version__
from cratekit.logging import get_logger

log = get_logger('cratekit.net')

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0
USER_AGENT: Final[str] = f'cratekit/{__version__} (release-crates)'

RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """How transient HTTP failures are retried.

    Attributes:
        max_retries: Retries after the first attempt.
        backoff_base: Delay before the first retry; doubles each time.
        max_delay: Upper bound for any single delay, including one
            requested through ``Retry-After``.
    """

    max_retries: int = 3
    backoff_base: float = 1.0
    max_delay: float = 30.0

    def delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed."""
        seconds = self.backoff_base * (2**attempt)
        if response is not None:
            retry_after = retry_after_seconds(response)
            if retry_after is not None:
                seconds = retry_after
        return min(seconds, self.max_delay)


DEFAULT_RETRY: Final[RetryPolicy] = RetryPolicy()


def retry_after_seconds(response: httpx.Response) -> float | None:
    """Parse a numeric ``Retry-After`` header.

    HTTP-date values are not used by crates.io and yield ``None``.
    """
    value = response.headers.get('Retry-After', '').strip()
    try:
        seconds = float(value)
    except ValueError:
        return None
    return max(seconds, 0.0)


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[httpx.AsyncClient]:
    """Open a pooled client that speaks JSON and identifies cratekit.

    Args:
        pool_size: Maximum number of pooled connections.
        timeout: Per-request timeout in seconds.
        headers: Extra default headers. They win over the ``Accept``
            and ``User-Agent`` defaults.

    Yields:
        An :class:`httpx.AsyncClient`.
    """
    async with httpx.AsyncClient(
        limits=httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size),
        timeout=httpx.Timeout(timeout),
        headers={'Accept': 'application/json', 'User-Agent': USER_AGENT, **(headers or {})},
        follow_redirects=True,
    ) as client:
        yield client


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    policy: RetryPolicy = DEFAULT_RETRY,
    **kwargs: object,
) -> httpx.Response:
    """Send a request, retrying rate limits, 5xx, and transport errors.

    Non-retryable responses, including 404, come back immediately. When
    retries run out on a retryable status, that last response is
    returned so the caller can report it.

    Raises:
        httpx.TransportError: If the final attempt could not connect or
            read a response.
    """
    attempt = 0
    while True:
        try:
            response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
        except httpx.TransportError as exc:
            if attempt >= policy.max_retries:
                log.error('http_gave_up', url=url, error=str(exc), attempts=attempt + 1)
                raise
            delay = policy.delay(attempt)
            log.warning('http_retry_error', url=url, error=str(exc), attempt=attempt + 1, delay=delay)
        else:
            if response.status_code not in RETRYABLE_STATUS_CODES:
                return response
            if attempt >= policy.max_retries:
                log.error('http_gave_up', url=url, status=response.status_code, attempts=attempt + 1)
                return response
            delay = policy.delay(attempt, response)
            log.warning('http_retry', url=url, status=response.status_code, attempt=attempt + 1, delay=delay)
        await asyncio.sleep(delay)
        attempt += 1


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_RETRY',
    'DEFAULT_TIMEOUT',
    'RETRYABLE_STATUS_CODES',
    'USER_AGENT',
    'RetryPolicy',
    'http_client',
    'request_with_retry',
    'retry_after_seconds',
]
