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

"""Run configuration for cratekit.

Builds a single immutable :class:`ReleaseOptions` record at the process
boundary. Nothing below this module reads the environment.

Layering (later wins)::

    defaults
       │
       ▼
    cratekit.toml          flat keys in the workspace directory
       │
       ▼
    INPUT_<NAME> env vars  GitHub Actions step inputs
       │
       ▼
    CLI flags
       │
       ▼
    ReleaseOptions()       frozen dataclass, ready to use

Supported keys in ``cratekit.toml``::

    dry_run      = false      # run cargo publish --dry-run, never push
    allow_dirty  = false      # pass --allow-dirty to cargo publish
    only_newest  = false      # skip crates older than the registry's max
    tag_crate    = "mycrate"  # tag v<version> when this crate publishes
    arguments    = "--no-verify"

Tokens are never read from the file.

Action inputs::

    ┌──────────────┬───────────────────────┬──────────────────┐
    │ Input        │ Environment variable  │ Option           │
    ├──────────────┼───────────────────────┼──────────────────┤
    │ github-token │ INPUT_GITHUB-TOKEN    │ github_token     │
    │ crates-token │ INPUT_CRATES-TOKEN    │ registry_token   │
    │ directory    │ INPUT_DIRECTORY       │ directory        │
    │ dry-run      │ INPUT_DRY-RUN         │ dry_run          │
    │ allow-dirty  │ INPUT_ALLOW-DIRTY     │ allow_dirty      │
    │ only-newest  │ INPUT_ONLY-NEWEST     │ only_newest      │
    │ tag-crate    │ INPUT_TAG-CRATE       │ tag_crate        │
    │ arguments    │ INPUT_ARGUMENTS       │ arguments        │
    └──────────────┴───────────────────────┴──────────────────┘
"""

from __future__ import annotations

import difflib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from cratekit.errors import E, ValidationError
from cratekit.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = 'cratekit.toml'

# Fallback for the registry token outside of Actions.
REGISTRY_TOKEN_ENV = 'CARGO_REGISTRY_TOKEN'

_TRUE_VALUES = frozenset({'true', 'yes', 'on', '1'})
_FALSE_VALUES = frozenset({'false', 'no', 'off', '0'})

_FILE_TYPE_MAP: dict[str, type] = {
    'dry_run': bool,
    'allow_dirty': bool,
    'only_newest': bool,
    'tag_crate': str,
    'arguments': str,
}

VALID_KEYS: frozenset[str] = frozenset(_FILE_TYPE_MAP)

# Action input name -> (option field, is boolean).
_INPUTS: dict[str, tuple[str, bool]] = {
    'github-token': ('github_token', False),
    'crates-token': ('registry_token', False),
    'directory': ('directory', False),
    'dry-run': ('dry_run', True),
    'allow-dirty': ('allow_dirty', True),
    'only-newest': ('only_newest', True),
    'tag-crate': ('tag_crate', False),
    'arguments': ('arguments', False),
}


@dataclass(frozen=True)
class ReleaseOptions:
    """Everything a release run needs to know.

    Attributes:
        github_token: Token for the hosting service. Not needed for
            publishing itself.
        registry_token: crates.io API token. Required when pushing.
        directory: Workspace directory or ``Cargo.toml`` path.
        dry_run: Run ``cargo publish --dry-run``, skip propagation
            waits, never push.
        allow_dirty: Pass ``--allow-dirty`` to ``cargo publish``.
        only_newest: Skip crates whose local version is older than the
            registry's ``max_version``.
        tag_crate: Crate whose successful publish triggers a
            ``v<version>`` tag. Empty disables tagging.
        arguments: Extra ``cargo publish`` arguments, space separated.
    """

    github_token: str = field(default='', repr=False)
    registry_token: str = field(default='', repr=False)
    directory: Path = field(default_factory=lambda: Path('.'))
    dry_run: bool = False
    allow_dirty: bool = False
    only_newest: bool = False
    tag_crate: str = ''
    arguments: str = ''


def parse_bool(name: str, value: str) -> bool:
    """Parse an action-style boolean input.

    Raises:
        ValidationError: If ``value`` is not one of
            ``true/yes/on/1/false/no/off/0`` (case-insensitive).
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValidationError(
        f'Input "{name}" is not a boolean: "{value}"',
        code=E.CONFIG_INVALID_VALUE,
        hint='Use one of true, yes, on, 1, false, no, off, 0.',
    )


def _suggest_key(unknown: str) -> str | None:
    """Return the closest valid key for a typo, or None."""
    matches = difflib.get_close_matches(unknown, VALID_KEYS, n=1, cutoff=0.6)
    return matches[0] if matches else None


def load_config_file(directory: Path) -> dict[str, Any]:  # noqa: ANN401 - dynamic config
    """Read and validate ``cratekit.toml`` from ``directory``.

    A missing file yields an empty mapping. ``directory`` may also be a
    ``Cargo.toml`` path, in which case its parent is searched.

    Raises:
        ValidationError: On unreadable or malformed TOML, unknown keys,
            or values of the wrong type.
    """
    base = directory.parent if directory.name == 'Cargo.toml' else directory
    config_path = base / CONFIG_FILENAME
    if not config_path.is_file():
        logger.debug('no_cratekit_config', path=str(config_path))
        return {}

    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ValidationError(
            f'Failed to read {config_path}: {exc}',
            code=E.CONFIG_PARSE_ERROR,
        ) from exc

    try:
        raw: dict[str, Any] = tomlkit.parse(text).unwrap()
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ValidationError(
            f'Failed to parse {config_path}: {exc}',
            code=E.CONFIG_PARSE_ERROR,
        ) from exc

    for key, value in raw.items():
        if key not in VALID_KEYS:
            suggestion = _suggest_key(key)
            raise ValidationError(
                f"Unknown key '{key}' in {CONFIG_FILENAME}",
                code=E.CONFIG_INVALID_KEY,
                hint=f"Did you mean '{suggestion}'?" if suggestion else f'Valid keys: {", ".join(sorted(VALID_KEYS))}.',
            )
        expected = _FILE_TYPE_MAP[key]
        if not isinstance(value, expected):
            raise ValidationError(
                f"'{key}' must be {expected.__name__}, got {type(value).__name__}",
                code=E.CONFIG_INVALID_VALUE,
                hint=f'Check the value of {key} in {CONFIG_FILENAME}.',
            )

    logger.debug('cratekit_config_loaded', path=str(config_path), keys=sorted(raw))
    return raw


def options_from_env(environ: Mapping[str, str]) -> dict[str, Any]:  # noqa: ANN401 - mixed value types
    """Collect the action inputs present in ``environ``.

    Empty inputs are treated as not supplied. ``CARGO_REGISTRY_TOKEN``
    stands in for a missing ``crates-token`` input.

    Raises:
        ValidationError: If a boolean input is malformed.
    """
    values: dict[str, Any] = {}
    for name, (option, is_bool) in _INPUTS.items():
        raw = environ.get(f'INPUT_{name.replace(" ", "_").upper()}', '')
        if raw == '':
            continue
        values[option] = parse_bool(name, raw) if is_bool else raw
    if 'registry_token' not in values and environ.get(REGISTRY_TOKEN_ENV):
        values['registry_token'] = environ[REGISTRY_TOKEN_ENV]
    return values


def build_options(
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,  # noqa: ANN401 - mixed value types
    cwd: Path | None = None,
) -> ReleaseOptions:
    """Merge file, environment, and CLI values into :class:`ReleaseOptions`.

    ``directory`` comes from the overrides or the environment (default
    ``.``), is resolved against ``cwd``, and is where ``cratekit.toml``
    is looked up.

    Args:
        environ: Environment to read ``INPUT_*`` values from.
        overrides: Values that win over everything else, typically from
            the command line. ``None`` values are ignored.
        cwd: Base for a relative ``directory``.

    Raises:
        ValidationError: On malformed input or configuration.
    """
    env_values = options_from_env(environ or {})
    cli_values = {k: v for k, v in (overrides or {}).items() if v is not None}

    directory = Path(cli_values.get('directory') or env_values.get('directory') or '.')
    if not directory.is_absolute():
        directory = (cwd or Path.cwd()) / directory

    merged: dict[str, Any] = {}
    merged.update(load_config_file(directory))
    merged.update(env_values)
    merged.update(cli_values)
    merged['directory'] = directory

    for key in ('github_token', 'registry_token'):
        if key in merged:
            merged[key] = str(merged[key]).strip()

    options = ReleaseOptions(**merged)
    logger.debug(
        'options',
        directory=str(options.directory),
        dry_run=options.dry_run,
        allow_dirty=options.allow_dirty,
        only_newest=options.only_newest,
        tag_crate=options.tag_crate,
        arguments=options.arguments,
        has_registry_token=bool(options.registry_token),
    )
    return options


__all__ = [
    'CONFIG_FILENAME',
    'VALID_KEYS',
    'ReleaseOptions',
    'build_options',
    'load_config_file',
    'options_from_env',
    'parse_bool',
]
