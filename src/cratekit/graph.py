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

"""Publish ordering for workspace crates.

Computes an order in which every crate comes after the workspace
members it needs at publish time, and rejects workspaces that can
never be published.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ ELI5 Explanation                            │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Layer peeling           │ Each round, walk the leftover crates and    │
    │                         │ take every one whose deps are already in    │
    │                         │ the list. Repeat until nothing is left, or  │
    │                         │ a round takes nothing.                      │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Stable order            │ Crates taken in the same round keep the     │
    │                         │ order they had in cargo metadata.           │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Ignored edges           │ dev-dependencies and crates outside the     │
    │                         │ workspace never hold a crate back.          │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Invalid member          │ A published crate can't depend on a member  │
    │                         │ that is never published or is at 0.0.0.     │
    └─────────────────────────┴─────────────────────────────────────────────┘

Peeling example::

    a → c, d(external)     round 0: a waits for c; b is taken;
    b                               c is taken (b is now in the list)
    c → b                  round 1: a is taken (d is outside the workspace)

    order: [b, c, a]

Usage::

    from cratekit.graph import sort_crates

    order = sort_crates(workspace)
"""

from __future__ import annotations

from cratekit.errors import E, CyclicDependencyError, InvalidMemberError
from cratekit.logging import get_logger
from cratekit.workspace import Crate, Workspace

logger = get_logger(__name__)


def _is_ready(crate: Crate, placed: set[str], workspace: Workspace) -> bool:
    return all(
        dep.is_dev or name in placed or name not in workspace.crates for name, dep in crate.dependencies.items()
    )


def peel_layers(workspace: Workspace) -> list[list[str]]:
    """Group crates into publish rounds by iterative layer peeling.

    Each round scans the unplaced crates in metadata order and places
    every crate whose in-workspace non-dev dependencies are already
    placed, including crates placed earlier in the same scan.

    Raises:
        CyclicDependencyError: If some crates can never become ready
            within ``len(workspace)`` rounds.
    """
    remaining = workspace.names
    placed: set[str] = set()
    layers: list[list[str]] = []

    for _round in range(len(workspace)):
        if not remaining:
            break
        ready: list[str] = []
        for name in remaining:
            if _is_ready(workspace.crates[name], placed, workspace):
                ready.append(name)
                placed.add(name)
        if not ready:
            break
        layers.append(ready)
        remaining = [name for name in remaining if name not in placed]

    if remaining:
        raise CyclicDependencyError(
            'Failed to build workspace dependency graph due to cyclic dependencies: '
            f'could not resolve {remaining}',
            remaining,
        )
    return layers


def check_back_edges(workspace: Workspace, order: list[str]) -> None:
    """Fail if an earlier crate has a non-dev dependency on a later one.

    Raises:
        CyclicDependencyError: On the first such pair.
    """
    for i, name in enumerate(order[:-1]):
        crate = workspace.crates[name]
        for later in order[i + 1 :]:
            dep = crate.dependencies.get(later)
            if dep is not None and not dep.is_dev:
                raise CyclicDependencyError(
                    f'Cyclic dependency between "{crate.name}" and "{dep.name}"',
                    [crate.name, dep.name],
                )


def check_members(workspace: Workspace) -> None:
    """Fail if a publishable crate needs a member that can't be published.

    Raises:
        InvalidMemberError: If a publishable crate has a non-dev
            dependency on a member with ``publish = false`` or at
            version ``0.0.0``.
    """
    for crate in workspace.crates.values():
        if not crate.publish:
            continue
        for dep in crate.non_dev_dependencies():
            member = workspace.crates.get(dep.name)
            if member is None:
                continue
            if not member.publish:
                raise InvalidMemberError(
                    f'"{crate.name}" depends on workspace member "{dep.name}" which is not published',
                    code=E.GRAPH_UNPUBLISHED_MEMBER,
                )
            if member.is_placeholder:
                raise InvalidMemberError(
                    f'"{crate.name}" depends on workspace member "{dep.name}" which has version "0.0.0"',
                    code=E.GRAPH_PLACEHOLDER_MEMBER,
                )


def sort_crates(workspace: Workspace) -> list[str]:
    """Return crate names in a valid publish order.

    The result is deterministic for a given metadata order: crates that
    become ready in the same round keep their relative input order.

    Raises:
        CyclicDependencyError: If the non-dev internal dependencies form
            a cycle.
        InvalidMemberError: If a publishable crate depends on an
            unpublishable or ``0.0.0`` member.
    """
    layers = peel_layers(workspace)
    order = [name for layer in layers for name in layer]
    check_back_edges(workspace, order)
    check_members(workspace)
    logger.debug('sort_complete', rounds=len(layers), crates=len(order))
    return order


__all__ = [
    'check_back_edges',
    'check_members',
    'peel_layers',
    'sort_crates',
]
