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

"""End-to-end release of a Cargo workspace.

Pipeline::

    cargo --version ─▶ discover ─▶ sort ─▶ publish ─▶ tag ─▶ outputs

Everything that can abort the run without side effects (missing cargo,
missing token, bad metadata, cycles, invalid members) happens before the
first ``cargo publish``.
"""

from __future__ import annotations

from cratekit.backends._run import ensure_ok
from cratekit.backends.pm import Cargo, CargoBackend
from cratekit.backends.registry import CratesIoRegistry, Registry
from cratekit.backends.vcs import VCS, GitCLIBackend
from cratekit.config import ReleaseOptions
from cratekit.errors import E, ValidationError
from cratekit.graph import sort_crates
from cratekit.logging import get_logger
from cratekit.outputs import ActionOutputs
from cratekit.publisher import publish_workspace
from cratekit.state import PublishResult
from cratekit.workspace import Workspace, discover_workspace

logger = get_logger(__name__)


async def check_cargo(cargo: Cargo) -> None:
    """Fail unless ``cargo --version`` runs.

    Raises:
        ValidationError: If cargo is missing or broken.
    """
    result = await cargo.version()
    if not result.ok:
        raise ValidationError(
            'Cargo could not be found. Please make sure it is installed and available in the PATH.',
            code=E.CARGO_NOT_FOUND,
        )
    logger.debug('cargo_version', version=result.stdout.strip())


async def tag_release(
    workspace: Workspace,
    crate_name: str,
    *,
    vcs: VCS,
    push: bool,
) -> str:
    """Tag ``v<version>`` for ``crate_name`` and push it when pushing.

    Returns:
        The tag name.

    Raises:
        CommandError: If tagging or pushing fails.
    """
    crate = workspace.crates[crate_name]
    tag = f'v{crate.version_string}'
    logger.info('create_tag', tag=tag, crate=crate.name, version=crate.version_string, push=push)
    ensure_ok(
        await vcs.tag(tag),
        f'Failed to create tag "{tag}" for crate "{crate.name}"',
        code=E.TAG_CREATION_FAILED,
    )
    if push:
        ensure_ok(
            await vcs.push_tag(tag),
            f'Failed to push tag "{tag}" for crate "{crate.name}"',
            code=E.TAG_PUSH_FAILED,
        )
    return tag


async def release_crates(
    options: ReleaseOptions,
    *,
    push: bool = True,
    cargo: Cargo | None = None,
    registry: Registry | None = None,
    vcs: VCS | None = None,
    outputs: ActionOutputs | None = None,
) -> PublishResult:
    """Publish a Cargo workspace to crates.io.

    ``push`` is forced off by ``options.dry_run``. When pushing, the
    first per-crate failure is raised; otherwise failures are reported
    as warnings in the returned result.

    Outputs set: ``tag`` and ``version`` (empty unless the tag crate was
    published) and ``published`` (JSON list of crate names).

    Args:
        options: Run options.
        push: Whether to upload for real.
        cargo: Cargo backend. Defaults to :class:`CargoBackend`.
        registry: Registry backend. Defaults to :class:`CratesIoRegistry`.
        vcs: VCS backend. Defaults to :class:`GitCLIBackend` rooted at
            ``options.directory``.
        outputs: Step output sink. Defaults to an inert one.

    Raises:
        CrateKitError: On validation failures, or any failure in push
            mode.
    """
    cargo = cargo or CargoBackend()
    registry = registry or CratesIoRegistry()
    vcs = vcs or GitCLIBackend(options.directory)
    outputs = outputs or ActionOutputs()

    await check_cargo(cargo)

    push = push and not options.dry_run
    if push and not options.registry_token.strip():
        raise ValidationError(
            'Crates token is required for publishing crates',
            code=E.CONFIG_MISSING_REQUIRED,
            hint='Set the crates-token input or CARGO_REGISTRY_TOKEN, or use --dry-run.',
        )

    workspace = await discover_workspace(options.directory, cargo=cargo)
    order = sort_crates(workspace)
    logger.info('processing_crates', count=len(order), crates=order)

    result = await publish_workspace(
        workspace,
        order,
        cargo=cargo,
        registry=registry,
        options=options,
        push=push,
        outputs=outputs,
    )

    if options.tag_crate and options.tag_crate in result.published:
        tag = await tag_release(workspace, options.tag_crate, vcs=vcs, push=push)
        outputs.set_output('tag', tag)
        outputs.set_output('version', workspace.crates[options.tag_crate].version_string)
    else:
        outputs.set_output('tag', '')
        outputs.set_output('version', '')

    outputs.set_output('published', result.published)

    if push and result.published:
        count = len(result.published)
        outputs.notice(f'Published {count} crate{"" if count == 1 else "s"}: {", ".join(result.published)}')

    logger.info('release_complete', summary=result.summary(), push=push)
    return result


__all__ = [
    'check_cargo',
    'release_crates',
    'tag_release',
]
