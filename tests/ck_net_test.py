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

"""Tests for cratekit.net module."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from cratekit.logging import configure_logging
from cratekit.net import (
    DEFAULT_RETRY,
    RETRYABLE_STATUS_CODES,
    USER_AGENT,
    RetryPolicy,
    http_client,
    request_with_retry,
    retry_after_seconds,
)

configure_logging(quiet=True)

_NO_WAIT = RetryPolicy(max_retries=2, backoff_base=0.0)


def _client(responses: list[httpx.Response | Exception]) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


# ── Tests: RetryPolicy ──


class TestRetryPolicy:
    """Tests for RetryPolicy.delay() and Retry-After parsing."""

    def test_default_schedule_doubles(self) -> None:
        """1 s, 2 s, 4 s with the default policy."""
        delays = [DEFAULT_RETRY.delay(attempt) for attempt in range(3)]
        if delays != [1.0, 2.0, 4.0]:
            raise AssertionError(f'Unexpected schedule: {delays}')

    def test_capped(self) -> None:
        """No single delay exceeds max_delay."""
        if RetryPolicy(max_delay=5.0).delay(10) != 5.0:
            raise AssertionError('Delay was not capped')

    def test_retry_after_wins(self) -> None:
        """A Retry-After header replaces the backoff delay."""
        response = httpx.Response(429, headers={'Retry-After': '7'})
        if DEFAULT_RETRY.delay(0, response) != 7.0:
            raise AssertionError('Retry-After was ignored')

    def test_retry_after_capped(self) -> None:
        """A huge Retry-After is still capped."""
        response = httpx.Response(429, headers={'Retry-After': '3600'})
        if DEFAULT_RETRY.delay(0, response) != DEFAULT_RETRY.max_delay:
            raise AssertionError('Retry-After was not capped')

    @pytest.mark.parametrize(
        ('header', 'expected'),
        [
            ('3', 3.0),
            ('0.5', 0.5),
            ('-2', 0.0),
            ('Wed, 21 Oct 2026 07:28:00 GMT', None),
            ('', None),
        ],
    )
    def test_retry_after_seconds(self, header: str, expected: float | None) -> None:
        """Only numeric values are honored."""
        response = httpx.Response(429, headers={'Retry-After': header})
        assert retry_after_seconds(response) == expected

    def test_retryable_status_codes(self) -> None:
        """Rate limits and gateway errors are retried, 404 is not."""
        assert 429 in RETRYABLE_STATUS_CODES
        assert 503 in RETRYABLE_STATUS_CODES
        assert 404 not in RETRYABLE_STATUS_CODES


# ── Tests: http_client ──


class TestHttpClient:
    """Tests for http_client async context manager."""

    def test_default_headers(self) -> None:
        """JSON Accept and the User-Agent are sent by default."""

        async def _test() -> None:
            async with http_client() as client:
                if client.headers['User-Agent'] != USER_AGENT:
                    raise AssertionError(f'Unexpected User-Agent: {client.headers["User-Agent"]}')
                if client.headers['Accept'] != 'application/json':
                    raise AssertionError(f'Unexpected Accept: {client.headers["Accept"]}')

        asyncio.run(_test())

    def test_extra_headers_override(self) -> None:
        """Caller headers win over the defaults."""

        async def _test() -> None:
            async with http_client(headers={'User-Agent': 'custom'}) as client:
                if client.headers['User-Agent'] != 'custom':
                    raise AssertionError('Custom User-Agent was not applied')

        asyncio.run(_test())

    def test_user_agent_names_the_tool(self) -> None:
        """crates.io rejects anonymous clients."""
        assert USER_AGENT.startswith('cratekit/')


# ── Tests: request_with_retry ──


class TestRequestWithRetry:
    """Tests for request_with_retry()."""

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        """A 200 is returned without retrying."""
        client, seen = _client([httpx.Response(200)])
        async with client:
            response = await request_with_retry(client, 'GET', 'https://crates.io/api/v1/crates/a', policy=_NO_WAIT)
        assert response.status_code == 200
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_404_not_retried(self) -> None:
        """Client errors come back immediately."""
        client, seen = _client([httpx.Response(404)])
        async with client:
            response = await request_with_retry(client, 'GET', 'https://crates.io/x', policy=_NO_WAIT)
        assert response.status_code == 404
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_then_success(self) -> None:
        """A 429 is waited out for as long as Retry-After asks."""
        client, seen = _client([httpx.Response(429, headers={'Retry-After': '2'}), httpx.Response(200)])
        with patch('cratekit.net.asyncio.sleep', new_callable=AsyncMock) as sleep:
            async with client:
                response = await request_with_retry(client, 'GET', 'https://crates.io/x')
        assert response.status_code == 200
        assert len(seen) == 2
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_exhausted_status_returns_last_response(self) -> None:
        """Persistent 5xx hands the final response to the caller."""
        client, seen = _client([httpx.Response(500) for _ in range(3)])
        async with client:
            response = await request_with_retry(client, 'GET', 'https://crates.io/x', policy=_NO_WAIT)
        assert response.status_code == 500
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_transport_error_recovers(self) -> None:
        """A dropped connection is retried."""
        request = httpx.Request('GET', 'https://crates.io/x')
        client, seen = _client([httpx.ReadTimeout('slow', request=request), httpx.Response(200)])
        async with client:
            response = await request_with_retry(client, 'GET', 'https://crates.io/x', policy=_NO_WAIT)
        assert response.status_code == 200
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_exhausted_transport_errors_raise(self) -> None:
        """Persistent connection failures re-raise the last error."""
        request = httpx.Request('GET', 'https://crates.io/x')
        client, seen = _client([httpx.ConnectError('refused', request=request) for _ in range(3)])
        async with client:
            with pytest.raises(httpx.ConnectError):
                await request_with_retry(client, 'GET', 'https://crates.io/x', policy=_NO_WAIT)
        assert len(seen) == 3
