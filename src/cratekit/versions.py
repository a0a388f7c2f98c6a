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

"""Semantic version parsing and precedence for Cargo crates.

Cargo requires every crate version to be valid `SemVer 2.0
<https://semver.org/>`_::

    1.2.3
    1.2.3-rc.1
    1.2.3-alpha.beta+build.42

Precedence rules used by :meth:`SemVer.__lt__`::

    1.0.0-alpha < 1.0.0-alpha.1 < 1.0.0-beta < 1.0.0-rc.1 < 1.0.0

    - major, minor, patch compare numerically.
    - A pre-release sorts before the release it precedes.
    - Numeric identifiers compare numerically and sort before
      alphanumeric identifiers.
    - Build metadata never affects precedence.

Usage::

    from cratekit.versions import parse_version

    v = parse_version('1.2.3-rc.1')
    assert v < parse_version('1.2.3')
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from cratekit.errors import E, ValidationError

_SEMVER_RE = re.compile(
    r'^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)'
    r'(?:-(?P<pre>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$'
)


def _compare_identifiers(left: tuple[str, ...], right: tuple[str, ...]) -> int:
    """Compare two dot-separated pre-release identifier lists."""
    for a, b in zip(left, right):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return -1 if int(a) < int(b) else 1
        if a_num:
            return -1
        if b_num:
            return 1
        return -1 if a < b else 1
    return (len(left) > len(right)) - (len(left) < len(right))


@functools.total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Dot-separated pre-release identifiers, empty for a
            release.
        build: Dot-separated build metadata identifiers.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def is_zero(self) -> bool:
        """Whether this is the ``0.0.0`` placeholder version."""
        return self.major == 0 and self.minor == 0 and self.patch == 0

    def _compare(self, other: SemVer) -> int:
        core = (self.major, self.minor, self.patch)
        other_core = (other.major, other.minor, other.patch)
        if core != other_core:
            return -1 if core < other_core else 1
        if self.prerelease == other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1
        return _compare_identifiers(self.prerelease, other.prerelease)

    def __eq__(self, other: object) -> bool:
        """Equal when precedence is equal (build metadata ignored)."""
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: SemVer) -> bool:
        """Return True if ``self`` has lower precedence than ``other``."""
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        """Hash on the precedence-relevant fields."""
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        """Format back to the canonical version string."""
        text = f'{self.major}.{self.minor}.{self.patch}'
        if self.prerelease:
            text += '-' + '.'.join(self.prerelease)
        if self.build:
            text += '+' + '.'.join(self.build)
        return text


def try_parse_version(version: str) -> SemVer | None:
    """Parse a semver string, returning ``None`` if it is invalid."""
    m = _SEMVER_RE.match(version.strip())
    if not m:
        return None
    pre = m.group('pre')
    build = m.group('build')
    return SemVer(
        major=int(m.group('major')),
        minor=int(m.group('minor')),
        patch=int(m.group('patch')),
        prerelease=tuple(pre.split('.')) if pre else (),
        build=tuple(build.split('.')) if build else (),
    )


def parse_version(version: str) -> SemVer:
    """Parse a semver string.

    Raises:
        ValidationError: If ``version`` is not valid semver.
    """
    parsed = try_parse_version(version)
    if parsed is None:
        raise ValidationError(f'Invalid version: "{version}"', code=E.VERSION_INVALID)
    return parsed


__all__ = [
    'SemVer',
    'parse_version',
    'try_parse_version',
]
