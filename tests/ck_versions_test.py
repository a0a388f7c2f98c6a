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

"""Tests for cratekit.versions module."""

from __future__ import annotations

import pytest
from cratekit.errors import E, ValidationError
from cratekit.versions import SemVer, parse_version, try_parse_version


class TestParse:
    """Tests for parse_version() and try_parse_version()."""

    def test_release(self) -> None:
        """Plain releases parse into their three components."""
        assert parse_version('1.2.3') == SemVer(1, 2, 3)

    def test_prerelease_and_build(self) -> None:
        """Pre-release and build identifiers are split on dots."""
        v = parse_version('1.0.0-alpha.1+build.42')
        assert v.prerelease == ('alpha', '1')
        assert v.build == ('build', '42')

    def test_surrounding_whitespace(self) -> None:
        """Surrounding whitespace is ignored."""
        assert try_parse_version(' 0.1.0\n') == SemVer(0, 1, 0)

    @pytest.mark.parametrize('text', ['', '1', '1.2', '01.2.3', '1.2.3-', 'v1.2.3', '1.2.3.4', 'abc'])
    def test_invalid(self, text: str) -> None:
        """Malformed strings are rejected."""
        assert try_parse_version(text) is None
        with pytest.raises(ValidationError) as exc_info:
            parse_version(text)
        assert exc_info.value.code == E.VERSION_INVALID

    def test_str_round_trips(self) -> None:
        """str() gives back the canonical text."""
        assert str(parse_version('2.0.0-rc.1+sha.5114f85')) == '2.0.0-rc.1+sha.5114f85'

    def test_is_zero(self) -> None:
        """Only 0.0.0 is the placeholder version."""
        assert parse_version('0.0.0').is_zero
        assert not parse_version('0.0.1').is_zero
        assert parse_version('0.0.0-dev').is_zero


class TestPrecedence:
    """Tests for SemVer ordering."""

    def test_semver_spec_chain(self) -> None:
        """The precedence chain from semver.org holds."""
        chain = [
            '1.0.0-alpha',
            '1.0.0-alpha.1',
            '1.0.0-alpha.beta',
            '1.0.0-beta',
            '1.0.0-beta.2',
            '1.0.0-beta.11',
            '1.0.0-rc.1',
            '1.0.0',
        ]
        parsed = [parse_version(v) for v in chain]
        for lower, higher in zip(parsed, parsed[1:]):
            assert lower < higher, f'{lower} should sort before {higher}'

    def test_numeric_components(self) -> None:
        """Core components compare numerically, not lexically."""
        assert parse_version('1.9.0') < parse_version('1.10.0')
        assert parse_version('0.2.10') > parse_version('0.2.9')

    def test_build_metadata_ignored(self) -> None:
        """Build metadata does not affect equality or hashing."""
        a = parse_version('1.0.0+a')
        b = parse_version('1.0.0+b')
        assert a == b
        assert hash(a) == hash(b)

    def test_sorted(self) -> None:
        """Versions sort by precedence."""
        versions = [parse_version(v) for v in ['1.0.0', '0.9.9', '1.0.0-rc.1', '0.10.0']]
        assert [str(v) for v in sorted(versions)] == ['0.9.9', '0.10.0', '1.0.0-rc.1', '1.0.0']
