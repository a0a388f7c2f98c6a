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

"""Structured error system for cratekit.

Every error carries a unique ``CK-NAMED-KEY`` code, a human-readable
message and an optional hint. The exception classes mirror the failure
families of a release run:

    ┌────────────────────────┬────────────────────────────────────────────┐
    │ Exception              │ Raised when                                │
    ├────────────────────────┼────────────────────────────────────────────┤
    │ ValidationError        │ Metadata, options or inputs are malformed. │
    │ CyclicDependencyError  │ Crates depend on each other in a loop.     │
    │ InvalidMemberError     │ A publishable crate needs a member that    │
    │                        │ can never be published.                    │
    │ RegistryError          │ crates.io answered with an error or junk.  │
    │ PublishTimeoutError    │ A version never showed up on the registry. │
    │ CommandError           │ cargo or git exited non-zero.              │
    └────────────────────────┴────────────────────────────────────────────┘

Code categories::

    CK-CONFIG-*       Options and configuration file errors
    CK-METADATA-*     Workspace metadata errors
    CK-GRAPH-*        Dependency graph errors
    CK-REGISTRY-*     crates.io API errors
    CK-PUBLISH-*      Publish errors
    CK-TAG-*          Tag creation errors

Usage::

    from cratekit.errors import E, ValidationError

    raise ValidationError(
        'Invalid package name: ""',
        code=E.METADATA_INVALID_PACKAGE,
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """All cratekit diagnostic codes."""

    # Configuration
    CONFIG_INVALID_KEY = 'CK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'CK-CONFIG-INVALID-VALUE'
    CONFIG_MISSING_REQUIRED = 'CK-CONFIG-MISSING-REQUIRED'
    CONFIG_PARSE_ERROR = 'CK-CONFIG-PARSE-ERROR'
    CARGO_NOT_FOUND = 'CK-CARGO-NOT-FOUND'

    # Workspace metadata
    METADATA_INVALID = 'CK-METADATA-INVALID'
    METADATA_INVALID_PACKAGE = 'CK-METADATA-INVALID-PACKAGE'
    METADATA_INVALID_DEPENDENCY = 'CK-METADATA-INVALID-DEPENDENCY'
    METADATA_WILDCARD_DEPENDENCY = 'CK-METADATA-WILDCARD-DEPENDENCY'
    VERSION_INVALID = 'CK-VERSION-INVALID'

    # Dependency graph
    GRAPH_CYCLE_DETECTED = 'CK-GRAPH-CYCLE-DETECTED'
    GRAPH_UNPUBLISHED_MEMBER = 'CK-GRAPH-UNPUBLISHED-MEMBER'
    GRAPH_PLACEHOLDER_MEMBER = 'CK-GRAPH-PLACEHOLDER-MEMBER'

    # Registry
    REGISTRY_REQUEST_FAILED = 'CK-REGISTRY-REQUEST-FAILED'
    REGISTRY_INVALID_RESPONSE = 'CK-REGISTRY-INVALID-RESPONSE'

    # Publish
    PUBLISH_FAILED = 'CK-PUBLISH-FAILED'
    PUBLISH_TIMEOUT = 'CK-PUBLISH-TIMEOUT'
    COMMAND_FAILED = 'CK-COMMAND-FAILED'

    # Tagging
    TAG_CREATION_FAILED = 'CK-TAG-CREATION-FAILED'
    TAG_PUSH_FAILED = 'CK-TAG-PUSH-FAILED'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``CK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class CrateKitError(Exception):
    """Base exception for all cratekit errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def message(self) -> str:
        """The message without the code prefix."""
        return self.info.message

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


class ValidationError(CrateKitError):
    """Malformed or missing metadata, options or inputs."""

    def __init__(self, message: str, *, code: ErrorCode = E.METADATA_INVALID, hint: str = '') -> None:
        """Initialize with a message and an optional specific code."""
        super().__init__(code, message, hint)


class CyclicDependencyError(CrateKitError):
    """The workspace dependency graph contains a cycle.

    Attributes:
        crates: Names of the crates involved.
    """

    def __init__(self, message: str, crates: list[str] | None = None, *, hint: str = '') -> None:
        """Initialize with a message and the crates that could not be ordered."""
        self.crates = list(crates or [])
        super().__init__(
            E.GRAPH_CYCLE_DETECTED,
            message,
            hint or 'Break the cycle or turn one of the edges into a dev-dependency.',
        )


class InvalidMemberError(CrateKitError):
    """A publishable crate depends on a member that cannot be published."""

    def __init__(self, message: str, *, code: ErrorCode = E.GRAPH_UNPUBLISHED_MEMBER, hint: str = '') -> None:
        """Initialize with a message and the specific member violation code."""
        super().__init__(code, message, hint)


class RegistryError(CrateKitError):
    """The registry returned an error status or an unusable body."""

    def __init__(self, message: str, *, code: ErrorCode = E.REGISTRY_REQUEST_FAILED, hint: str = '') -> None:
        """Initialize with a message and the specific registry code."""
        super().__init__(code, message, hint)


class PublishTimeoutError(CrateKitError):
    """A published version did not become visible before the deadline."""

    def __init__(self, message: str, *, hint: str = '') -> None:
        """Initialize with a message."""
        super().__init__(
            E.PUBLISH_TIMEOUT,
            message,
            hint or 'The crate may still be indexing. Check crates.io manually.',
        )


class CommandError(CrateKitError):
    """An external command exited non-zero.

    Attributes:
        return_code: The process exit code.
        output: Captured stderr, or stdout when stderr was empty.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = E.COMMAND_FAILED,
        return_code: int = 1,
        output: str = '',
        hint: str = '',
    ) -> None:
        """Initialize with a message, exit code and captured output."""
        self.return_code = return_code
        self.output = output
        super().__init__(code, message, hint)


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CARGO_NOT_FOUND: ErrorInfo(
        code=E.CARGO_NOT_FOUND,
        message='Cargo could not be found.',
        hint='Make sure cargo is installed and available in the PATH.',
    ),
    E.CONFIG_MISSING_REQUIRED: ErrorInfo(
        code=E.CONFIG_MISSING_REQUIRED,
        message='A required option was not supplied.',
        hint='Publishing needs a crates.io token: set the crates-token input or CARGO_REGISTRY_TOKEN, or use --dry-run.',
    ),
    E.GRAPH_CYCLE_DETECTED: ErrorInfo(
        code=E.GRAPH_CYCLE_DETECTED,
        message='Circular dependency detected in the workspace dependency graph.',
        hint="Run 'cratekit order' to see which crates cannot be ordered.",
    ),
    E.GRAPH_UNPUBLISHED_MEMBER: ErrorInfo(
        code=E.GRAPH_UNPUBLISHED_MEMBER,
        message='A publishable crate depends on a workspace member with publish = false.',
        hint='Publish the dependency too, or make it a dev-dependency.',
    ),
    E.GRAPH_PLACEHOLDER_MEMBER: ErrorInfo(
        code=E.GRAPH_PLACEHOLDER_MEMBER,
        message='A publishable crate depends on a workspace member at version 0.0.0.',
        hint='Give the dependency a real version before publishing.',
    ),
    E.METADATA_WILDCARD_DEPENDENCY: ErrorInfo(
        code=E.METADATA_WILDCARD_DEPENDENCY,
        message='A publishable crate has a "*" requirement on a non-dev dependency.',
        hint='crates.io rejects wildcard requirements; pin a version range.',
    ),
    E.PUBLISH_TIMEOUT: ErrorInfo(
        code=E.PUBLISH_TIMEOUT,
        message='A published version did not appear on crates.io in time.',
        hint='The index may be lagging. Re-run once the version is visible.',
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Matching ignores case and the ``CK-`` prefix, so
    ``graph-cycle-detected`` finds ``CK-GRAPH-CYCLE-DETECTED``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    normalized = code.strip().upper()
    if not normalized.startswith('CK-'):
        normalized = f'CK-{normalized}'
    try:
        error_code = ErrorCode(normalized)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{error_code.value}: No detailed explanation available.'

    lines = [f'{error_code.value}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: CrateKitError, *, file: TextIO | None = None) -> None:
    """Render an error in compiler style.

    Output format::

        error[CK-GRAPH-CYCLE-DETECTED]: Cyclic dependency between "a" and "b"
          |
          = hint: Break the cycle or turn one of the edges into a dev-dependency.

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(exc.info.message)
        console.print(f'[bold red]error\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]')
        if exc.hint:
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}')
        console.print()
    else:
        print(f'error[{exc.code.value}]: {exc.info.message}', file=out)  # noqa: T201 - CLI output
        if exc.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'CommandError',
    'CrateKitError',
    'CyclicDependencyError',
    'ErrorCode',
    'ErrorInfo',
    'InvalidMemberError',
    'PublishTimeoutError',
    'RegistryError',
    'ValidationError',
    'explain',
    'render_error',
]
