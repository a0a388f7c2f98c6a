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

"""Sequential publish orchestrator for Cargo workspaces.

Walks the crates in publish order, one at a time. Each crate goes
through::

    ┌──────────┐   ┌──────────┐   ┌──────────┐   ┌──────────┐
    │  gate    │──▶│  query   │──▶│ publish  │──▶│  poll    │
    │ publish? │   │ registry │   │ (cargo)  │   │ (API)    │
    │ 0.0.0?   │   │ skip?    │   │          │   │          │
    └──────────┘   └──────────┘   └──────────┘   └──────────┘

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Strictly sequential │ A crate's dependencies must be visible on the │
    │                     │ registry before it is uploaded, so there is   │
    │                     │ no parallelism at all.                        │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Push mode           │ Real uploads. The first failure stops the     │
    │                     │ run, because later crates may depend on it.   │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Dry-run mode        │ ``cargo publish --dry-run``. Failures become  │
    │                     │ warnings so one run reports every problem.    │
    └─────────────────────┴────────────────────────────────────────────────┘

Propagation waits::

    options.dry_run   push    wait
    ───────────────   ─────   ──────────
    true              false   none
    false             true    60 s
    false             false   10 s

Usage::

    from cratekit.publisher import publish_workspace

    result = await publish_workspace(
        workspace,
        sort_crates(workspace),
        cargo=CargoBackend(),
        registry=CratesIoRegistry(),
        options=options,
        push=True,
    )
    print(result.summary())
"""

from __future__ import annotations

from cratekit.backends._run import TimeoutExpired, ensure_ok
from cratekit.backends.pm import Cargo
from cratekit.backends.registry import Registry
from cratekit.config import ReleaseOptions
from cratekit.errors import CommandError, CrateKitError, E, ValidationError
from cratekit.logging import get_logger
from cratekit.outputs import ActionOutputs
from cratekit.state import PackageOutcome, PackageStatus, PublishResult
from cratekit.versions import try_parse_version
from cratekit.workspace import Crate, Workspace

logger = get_logger(__name__)

PUSH_POLL_TIMEOUT = 60.0
DRY_RUN_POLL_TIMEOUT = 10.0
REGISTRY_TOKEN_ENV = 'CARGO_REGISTRY_TOKEN'


def _skipped(crate: Crate, reason: str) -> PackageOutcome:
    logger.info('skip_crate', crate=crate.name, version=crate.version_string, reason=reason)
    return PackageOutcome(
        name=crate.name,
        status=PackageStatus.SKIPPED,
        version=crate.version_string,
        message=reason,
    )


async def _publish_one(
    crate: Crate,
    *,
    root: str,
    cargo: Cargo,
    registry: Registry,
    options: ReleaseOptions,
    push: bool,
    env: dict[str, str],
    result: PublishResult,
    outputs: ActionOutputs,
) -> PackageOutcome:
    """Publish one crate unless the registry says it should be skipped.

    Raises:
        CrateKitError: On registry, version, command, or propagation
            failures.
    """
    published = await registry.fetch_published(crate.name)
    if published is not None:
        if push and published.has_version(crate.version_string):
            return _skipped(crate, f'version "{crate.version_string}" is already published')
        max_version = try_parse_version(published.crate.max_version)
        if max_version is None:
            raise ValidationError(
                f'Invalid published version for crate "{crate.name}": "{published.crate.max_version}"',
                code=E.VERSION_INVALID,
            )
        if options.only_newest and crate.version < max_version:
            return _skipped(crate, f'not the newest version (registry has {published.crate.max_version})')

    suffix = '' if push else ' (dry-run)'
    result.set_status(crate.name, PackageStatus.PUBLISHING)
    with outputs.group(f'Publishing crate "{crate.name}" version "{crate.version_string}"{suffix}'):
        if push:
            outputs.notice(f'Publishing crate "{crate.name}" version "{crate.version_string}"')
        try:
            command = await cargo.publish(
                crate.name,
                crate.path,
                root=root,
                dry_run=not push,
                allow_dirty=options.allow_dirty,
                arguments=options.arguments,
                env=env,
            )
        except TimeoutExpired as exc:
            raise CommandError(
                f'Failed to publish crate "{crate.name}"{suffix}: timed out after {exc.timeout:g}s',
                code=E.PUBLISH_FAILED,
            ) from exc
        ensure_ok(command, f'Failed to publish crate "{crate.name}"{suffix}', code=E.PUBLISH_FAILED)
        if not options.dry_run:
            await registry.await_published(
                crate.name,
                crate.version_string,
                timeout=PUSH_POLL_TIMEOUT if push else DRY_RUN_POLL_TIMEOUT,
            )

    logger.info('crate_published', crate=crate.name, version=crate.version_string, push=push)
    return PackageOutcome(name=crate.name, status=PackageStatus.PUBLISHED, version=crate.version_string)


async def publish_workspace(
    workspace: Workspace,
    order: list[str],
    *,
    cargo: Cargo,
    registry: Registry,
    options: ReleaseOptions,
    push: bool,
    outputs: ActionOutputs | None = None,
) -> PublishResult:
    """Publish every eligible crate in ``order``, one at a time.

    Crates with ``publish = false`` or version ``0.0.0`` are skipped
    without touching the registry. A crate lands in
    :attr:`PublishResult.published` only if ``cargo publish`` ran and
    succeeded (and, unless ``options.dry_run``, the version became
    visible).

    Args:
        workspace: The loaded workspace.
        order: Crate names from :func:`~cratekit.graph.sort_crates`.
        cargo: Cargo backend.
        registry: Registry backend.
        options: Run options.
        push: Whether this is a real upload.
        outputs: Workflow command sink for groups and notices.

    Returns:
        The :class:`PublishResult` for the run.

    Raises:
        CrateKitError: In push mode, the first per-crate failure.
    """
    outputs = outputs or ActionOutputs()
    env = {REGISTRY_TOKEN_ENV: options.registry_token.strip()}
    result = PublishResult()
    for name in order:
        result.init_package(name)

    logger.info('publish_plan', count=len(order), crates=order, push=push, dry_run=options.dry_run)

    for name in order:
        crate = workspace.crates[name]
        if not crate.publish:
            result.record(_skipped(crate, 'not published'))
            continue
        if crate.is_placeholder:
            result.record(_skipped(crate, 'version "0.0.0"'))
            continue

        try:
            outcome = await _publish_one(
                crate,
                root=workspace.path,
                cargo=cargo,
                registry=registry,
                options=options,
                push=push,
                env=env,
                result=result,
                outputs=outputs,
            )
        except CrateKitError as exc:
            result.record(
                PackageOutcome(
                    name=name,
                    status=PackageStatus.FAILED,
                    version=crate.version_string,
                    code=exc.code,
                    message=exc.message,
                )
            )
            if push:
                logger.error('publish_failed', crate=name, code=exc.code.value, error=exc.message)
                raise
            logger.warning('publish_failed', crate=name, code=exc.code.value, error=exc.message)
            result.warnings.append(exc.message)
            outputs.warning(exc.message)
            continue
        result.record(outcome)

    logger.info('publish_complete', summary=result.summary(), published=result.published)
    return result


__all__ = [
    'DRY_RUN_POLL_TIMEOUT',
    'PUSH_POLL_TIMEOUT',
    'REGISTRY_TOKEN_ENV',
    'publish_workspace',
]
