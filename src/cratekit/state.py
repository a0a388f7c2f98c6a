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

"""Per-crate status tracking for a publish run.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ PackageStatus       │ Where a crate is in the run: waiting, being    │
    │                     │ published, done, skipped, or broken.          │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ PackageOutcome      │ The final word on one crate, with an error    │
    │                     │ code you can branch on instead of a message.  │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ PublishResult       │ The scoreboard for the whole run.             │
    └─────────────────────┴────────────────────────────────────────────────┘

Status transitions::

    pending → publishing → published
                         → failed
    pending → skipped
    pending → failed      (registry or version errors before publishing)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cratekit.errors import ErrorCode
from cratekit.logging import get_logger

logger = get_logger(__name__)


class PackageStatus(str, Enum):
    """Status of a crate in the publish run."""

    PENDING = 'pending'
    SKIPPED = 'skipped'
    PUBLISHING = 'publishing'
    PUBLISHED = 'published'
    FAILED = 'failed'


TERMINAL_STATUSES: frozenset[PackageStatus] = frozenset({
    PackageStatus.SKIPPED,
    PackageStatus.PUBLISHED,
    PackageStatus.FAILED,
})


@dataclass(frozen=True)
class PackageOutcome:
    """Terminal result for one crate.

    Attributes:
        name: Crate name.
        status: A terminal :class:`PackageStatus`.
        version: Local version string.
        code: Error code when ``status`` is ``FAILED``.
        message: Skip reason or failure message.
    """

    name: str
    status: PackageStatus
    version: str = ''
    code: ErrorCode | None = None
    message: str = ''


@dataclass
class PublishResult:
    """Aggregate result of a publish run.

    Attributes:
        published: Crates published in this run, in publish order.
        skipped: Crates skipped, in order.
        failed: Failure message per crate.
        warnings: Human-readable warnings for failures that did not
            abort the run.
        statuses: Current status of every crate in the order.
        outcomes: Terminal outcome per crate.
    """

    published: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    statuses: dict[str, PackageStatus] = field(default_factory=dict)
    outcomes: dict[str, PackageOutcome] = field(default_factory=dict)

    def init_package(self, name: str) -> None:
        """Register ``name`` as pending."""
        self.statuses[name] = PackageStatus.PENDING

    def set_status(self, name: str, status: PackageStatus) -> None:
        """Move ``name`` to a non-terminal status."""
        self.statuses[name] = status
        logger.debug('status_changed', crate=name, status=status.value)

    def record(self, outcome: PackageOutcome) -> None:
        """Store a terminal outcome and update the buckets."""
        if outcome.status not in TERMINAL_STATUSES:
            raise ValueError(f'Not a terminal status for "{outcome.name}": {outcome.status.value}')
        self.statuses[outcome.name] = outcome.status
        self.outcomes[outcome.name] = outcome
        if outcome.status == PackageStatus.PUBLISHED:
            if outcome.name not in self.published:
                self.published.append(outcome.name)
        elif outcome.status == PackageStatus.SKIPPED:
            if outcome.name not in self.skipped:
                self.skipped.append(outcome.name)
        elif outcome.status == PackageStatus.FAILED:
            self.failed[outcome.name] = outcome.message
        logger.debug('status_changed', crate=outcome.name, status=outcome.status.value)

    @property
    def ok(self) -> bool:
        """Whether no crate failed."""
        return not self.failed

    def summary(self) -> str:
        """One-line summary, e.g. ``"published 2, skipped 1, failed 0"``."""
        return f'published {len(self.published)}, skipped {len(self.skipped)}, failed {len(self.failed)}'


__all__ = [
    'TERMINAL_STATUSES',
    'PackageOutcome',
    'PackageStatus',
    'PublishResult',
]
