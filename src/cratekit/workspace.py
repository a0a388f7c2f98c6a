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

"""Cargo workspace model and metadata loader.

Turns the JSON emitted by ``cargo metadata --no-deps`` plus the file
manifests emitted by ``cargo package --list`` into an immutable
:class:`Workspace`.

Data Flow::

    cargo metadata          cargo package --list (per crate)
    ┌──────────────────┐    ┌──────────────────────────┐
    │ workspace_root   │    │ Cargo.toml               │
    │ packages[]       │    │ src/lib.rs               │
    │   name, version  │    │ ...                      │
    │   publish        │    └────────────┬─────────────┘
    │   dependencies[] │                 │
    └────────┬─────────┘                 │
             ▼                           ▼
    ┌───────────────────────────────────────────────┐
    │ load_workspace() → Workspace{path, crates}    │
    └───────────────────────────────────────────────┘

Dependency kinds::

    None / "normal"   must be published before the dependent
    "build"           must be published before the dependent
    "dev"             never gates ordering or publishability

Usage::

    from cratekit.workspace import discover_workspace

    workspace = await discover_workspace(Path('.'), cargo=CargoBackend())
    for name, crate in workspace.crates.items():
        print(name, crate.version_string)
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from cratekit.errors import E, ValidationError
from cratekit.logging import get_logger
from cratekit.versions import SemVer, try_parse_version

logger = get_logger(__name__)

DEV_KIND = 'dev'
WILDCARD_REQUIREMENT = '*'

# Registry names that mark a crate as publishable to crates.io when a
# manifest restricts ``publish`` to a list of registries.
CRATES_IO_REGISTRIES: frozenset[str] = frozenset({'crates-io', 'crates'})


@dataclass(frozen=True)
class Dependency:
    """A declared dependency of a crate.

    Attributes:
        name: Dependency crate name.
        kind: ``None``/``"normal"``, ``"build"`` or ``"dev"``.
        requirement: Version requirement, e.g. ``"^1.0"`` or ``"*"``.
        path: Path dependency location relative to the owning manifest
            directory, if any.
    """

    name: str
    kind: str | None = None
    requirement: str = ''
    path: str | None = None

    @property
    def is_dev(self) -> bool:
        """Whether this is a dev-dependency."""
        return self.kind == DEV_KIND


@dataclass(frozen=True)
class Crate:
    """A single workspace member.

    Attributes:
        path: Path to the crate's ``Cargo.toml``.
        name: Crate name, unique within the workspace.
        version_string: Version exactly as written in the manifest.
        version: Parsed :attr:`version_string`.
        publish: Whether the crate may be published to crates.io.
        files: Relative paths that ``cargo package`` would include.
        dependencies: Declared dependencies keyed by name.
    """

    path: str
    name: str
    version_string: str
    version: SemVer
    publish: bool = True
    files: frozenset[str] = frozenset()
    dependencies: dict[str, Dependency] = field(default_factory=dict)

    @property
    def is_placeholder(self) -> bool:
        """Whether the crate sits at the unpublishable ``0.0.0`` version."""
        return self.version.is_zero

    def non_dev_dependencies(self) -> list[Dependency]:
        """Return the dependencies that gate publishing, in declaration order."""
        return [d for d in self.dependencies.values() if not d.is_dev]


@dataclass(frozen=True)
class Workspace:
    """A Cargo workspace.

    Attributes:
        path: Workspace root directory.
        crates: Members keyed by crate name, in metadata order.
    """

    path: str
    crates: dict[str, Crate] = field(default_factory=dict)

    @property
    def names(self) -> list[str]:
        """Crate names in metadata order."""
        return list(self.crates)

    def __len__(self) -> int:
        """Return the number of crates."""
        return len(self.crates)


class MetadataSource(Protocol):
    """What :func:`discover_workspace` needs from the cargo backend."""

    async def metadata(self, manifest_path: Path) -> str:
        """Return raw ``cargo metadata`` JSON for ``manifest_path``."""
        ...

    async def package_list(self, manifest_path: Path) -> str:
        """Return raw ``cargo package --list`` output for ``manifest_path``."""
        ...


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or value.strip() == ''


def parse_metadata(raw: str) -> dict[str, Any]:
    """Parse ``cargo metadata`` output.

    Raises:
        ValidationError: If the text is not JSON or lacks ``packages`` or
            ``workspace_root``.
    """
    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f'Failed to parse cargo metadata: {exc}') from exc
    if not isinstance(metadata, dict):
        raise ValidationError(f'Failed to parse cargo metadata, not an object: {raw[:200]}')
    if not isinstance(metadata.get('packages'), list):
        raise ValidationError(f'Failed to parse cargo metadata, no packages: {raw[:200]}')
    if not metadata.get('workspace_root'):
        raise ValidationError(f'Failed to parse cargo metadata, no workspace root: {raw[:200]}')
    return metadata


def parse_file_list(raw: str) -> frozenset[str]:
    """Turn newline-separated ``cargo package --list`` output into a set."""
    return frozenset(line for line in raw.split('\n') if line.strip())


def _is_publishable(publish: object) -> bool:
    if publish is None:
        return True
    if isinstance(publish, list):
        return any(registry in CRATES_IO_REGISTRIES for registry in publish)
    return bool(publish)


def _load_dependencies(
    package_name: str,
    raw_deps: list[Any],
    *,
    publish: bool,
    manifest_dir: str,
) -> dict[str, Dependency]:
    dependencies: dict[str, Dependency] = {}
    for raw in raw_deps:
        if not isinstance(raw, Mapping) or _is_blank(raw.get('name')):
            name = raw.get('name') if isinstance(raw, Mapping) else raw
            raise ValidationError(
                f'Invalid dependency name in "{package_name}": "{name}"',
                code=E.METADATA_INVALID_DEPENDENCY,
            )
        name = raw['name']
        kind = raw.get('kind')
        requirement = raw.get('req') or ''
        if publish and kind != DEV_KIND and requirement == WILDCARD_REQUIREMENT:
            raise ValidationError(
                f'Invalid dependency version for {name}: "{requirement}"',
                code=E.METADATA_WILDCARD_DEPENDENCY,
                hint=f'"{package_name}" is published, so "{name}" needs a concrete version requirement.',
            )
        dep_path = raw.get('path')
        dependency = Dependency(
            name=name,
            kind=kind,
            requirement=requirement,
            path=os.path.relpath(dep_path, manifest_dir) if dep_path else None,
        )
        # A normal/build record replaces an earlier dev record of the
        # same name; otherwise the first record wins.
        existing = dependencies.get(name)
        if existing is None or existing.is_dev:
            dependencies[name] = dependency
    return dependencies


def load_crate(raw: Mapping[str, Any], files: frozenset[str] = frozenset()) -> Crate:
    """Build a :class:`Crate` from one ``cargo metadata`` package record.

    Raises:
        ValidationError: If the name or version is missing or invalid,
            the dependency list is malformed, or a published crate has a
            wildcard non-dev requirement.
    """
    name = raw.get('name')
    if _is_blank(name):
        raise ValidationError(f'Invalid package name: "{name}"', code=E.METADATA_INVALID_PACKAGE)
    version_string = raw.get('version')
    if _is_blank(version_string):
        raise ValidationError(f'Invalid package version: "{version_string}"', code=E.METADATA_INVALID_PACKAGE)
    raw_deps = raw.get('dependencies')
    if not isinstance(raw_deps, list):
        raise ValidationError(
            f'Invalid package dependencies: "{raw_deps}"',
            code=E.METADATA_INVALID_PACKAGE,
        )

    manifest_path = str(raw.get('manifest_path') or '')
    publish = _is_publishable(raw.get('publish'))
    dependencies = _load_dependencies(
        name,
        raw_deps,
        publish=publish,
        manifest_dir=os.path.dirname(manifest_path),
    )

    version = try_parse_version(version_string)
    if version is None:
        raise ValidationError(f'Invalid package version: "{version_string}"', code=E.VERSION_INVALID)

    return Crate(
        path=manifest_path,
        name=name,
        version_string=version_string,
        version=version,
        publish=publish,
        files=files,
        dependencies=dependencies,
    )


def load_workspace(
    metadata: Mapping[str, Any],
    files: Mapping[str, frozenset[str]] | None = None,
) -> Workspace:
    """Build a :class:`Workspace` from parsed ``cargo metadata``.

    Args:
        metadata: Parsed metadata with ``workspace_root`` and ``packages``.
        files: Optional per-crate file manifests keyed by crate name.

    Raises:
        ValidationError: On any malformed record.
    """
    root = metadata.get('workspace_root')
    if _is_blank(root):
        raise ValidationError(f'Invalid workspace root: "{root}"')
    packages = metadata.get('packages')
    if not isinstance(packages, list):
        raise ValidationError(f'Invalid workspace packages: "{packages}"')

    file_map = files or {}
    crates: dict[str, Crate] = {}
    for raw in packages:
        if not isinstance(raw, Mapping):
            raise ValidationError(f'Invalid package record: "{raw}"', code=E.METADATA_INVALID_PACKAGE)
        logger.debug('package_metadata', package=raw.get('name'), version=raw.get('version'))
        crate = load_crate(raw, file_map.get(str(raw.get('name')), frozenset()))
        crates[crate.name] = crate

    logger.debug('workspace_loaded', root=root, crates=list(crates))
    return Workspace(path=root, crates=crates)


def manifest_for(directory: Path) -> Path:
    """Return the ``Cargo.toml`` path for a directory or manifest path."""
    return directory if directory.name == 'Cargo.toml' else directory / 'Cargo.toml'


async def discover_workspace(directory: Path, *, cargo: MetadataSource) -> Workspace:
    """Discover the Cargo workspace containing ``directory``.

    Runs ``cargo metadata`` once and ``cargo package --list`` per crate.

    Raises:
        ValidationError: If the metadata is malformed.
        CommandError: If cargo fails.
    """
    manifest = manifest_for(directory)
    metadata = parse_metadata(await cargo.metadata(manifest))

    files: dict[str, frozenset[str]] = {}
    for raw in metadata['packages']:
        if isinstance(raw, Mapping) and not _is_blank(raw.get('name')) and raw.get('manifest_path'):
            files[raw['name']] = parse_file_list(await cargo.package_list(Path(raw['manifest_path'])))

    workspace = load_workspace(metadata, files)
    logger.info('crates_discovered', count=len(workspace), crates=workspace.names)
    return workspace


__all__ = [
    'CRATES_IO_REGISTRIES',
    'DEV_KIND',
    'WILDCARD_REQUIREMENT',
    'Crate',
    'Dependency',
    'MetadataSource',
    'Workspace',
    'discover_workspace',
    'load_crate',
    'load_workspace',
    'manifest_for',
    'parse_file_list',
    'parse_metadata',
]
