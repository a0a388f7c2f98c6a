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

"""Shared types for the registry subpackage."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cratekit.errors import E, RegistryError

__all__ = [
    'CrateInfo',
    'CrateSummary',
    'CrateVersionInfo',
]


@dataclass(frozen=True)
class CrateVersionInfo:
    """One published version of a crate.

    Attributes:
        num: Version string, e.g. ``"1.0.200"``.
        updated_at: ISO 8601 timestamp of the last update.
    """

    num: str
    updated_at: str = ''


@dataclass(frozen=True)
class CrateSummary:
    """The ``crate`` object of a crates.io crate response."""

    id: str
    name: str
    created_at: str = ''
    updated_at: str = ''
    max_version: str = ''
    newest_version: str = ''


@dataclass(frozen=True)
class CrateInfo:
    """A crates.io ``GET /api/v1/crates/{name}`` response.

    Attributes:
        crate: Crate-level metadata.
        versions: Published versions, in registry order.
    """

    crate: CrateSummary
    versions: tuple[CrateVersionInfo, ...] = field(default_factory=tuple)

    def has_version(self, num: str) -> bool:
        """Return ``True`` if the exact version string has been published."""
        return any(v.num == num for v in self.versions)

    @classmethod
    def from_json(cls, name: str, data: Any) -> CrateInfo:  # noqa: ANN401 - raw JSON
        """Build from a decoded response body.

        Raises:
            RegistryError: If ``crate.id`` is missing or the versions list
                is malformed.
        """
        raw_crate = data.get('crate') if isinstance(data, Mapping) else None
        if not isinstance(raw_crate, Mapping) or not raw_crate.get('id'):
            raise RegistryError(
                f'Failed to get published version for crate "{name}", invalid response',
                code=E.REGISTRY_INVALID_RESPONSE,
            )
        raw_versions = data.get('versions') or []
        if not isinstance(raw_versions, list):
            raise RegistryError(
                f'Failed to get published version for crate "{name}", invalid versions list',
                code=E.REGISTRY_INVALID_RESPONSE,
            )
        versions = tuple(
            CrateVersionInfo(num=str(v['num']), updated_at=str(v.get('updated_at') or ''))
            for v in raw_versions
            if isinstance(v, Mapping) and 'num' in v
        )
        return cls(
            crate=CrateSummary(
                id=str(raw_crate['id']),
                name=str(raw_crate.get('name') or name),
                created_at=str(raw_crate.get('created_at') or ''),
                updated_at=str(raw_crate.get('updated_at') or ''),
                max_version=str(raw_crate.get('max_version') or ''),
                newest_version=str(raw_crate.get('newest_version') or ''),
            ),
            versions=versions,
        )
