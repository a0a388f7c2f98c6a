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

"""Command-line interface for cratekit.

Subcommands::

    cratekit publish   Publish the workspace to crates.io
    cratekit order     Print the dependency-safe publish order
    cratekit explain   Describe an error code

Inside GitHub Actions every ``publish`` option can also come from the
step's ``with:`` inputs (``INPUT_*`` variables); flags win.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from rich_argparse import RichHelpFormatter

from cratekit import __version__
from cratekit.backends.pm import CargoBackend
from cratekit.config import build_options
from cratekit.errors import CrateKitError, explain, render_error
from cratekit.graph import sort_crates
from cratekit.logging import configure_logging, get_logger, mask_secret
from cratekit.outputs import ActionOutputs
from cratekit.release import check_cargo, release_crates
from cratekit.workspace import discover_workspace

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='cratekit',
        description='Publish Cargo workspaces to crates.io in dependency order.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging.')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log JSON lines instead of console output.')

    subparsers = parser.add_subparsers(dest='command')

    publish_parser = subparsers.add_parser(
        'publish',
        help='Publish all crates in the workspace to crates.io.',
        formatter_class=RichHelpFormatter,
    )
    publish_parser.add_argument(
        '--directory',
        '-C',
        default=None,
        help='Workspace directory or Cargo.toml path (default: .).',
    )
    publish_parser.add_argument(
        '--dry-run',
        action='store_true',
        default=None,
        help='Run cargo publish --dry-run and never push.',
    )
    publish_parser.add_argument(
        '--allow-dirty',
        action='store_true',
        default=None,
        help='Allow publishing with uncommitted changes.',
    )
    publish_parser.add_argument(
        '--only-newest',
        action='store_true',
        default=None,
        help='Skip crates older than the newest version on crates.io.',
    )
    publish_parser.add_argument(
        '--tag-crate',
        metavar='NAME',
        default=None,
        help='Create a v<version> tag when this crate is published.',
    )
    publish_parser.add_argument(
        '--arguments',
        metavar='STR',
        default=None,
        help='Extra arguments for cargo publish, separated by spaces.',
    )
    publish_parser.add_argument(
        '--no-push',
        action='store_true',
        help='Pass --dry-run to cargo but still wait briefly for each crate.',
    )

    order_parser = subparsers.add_parser(
        'order',
        help='Print the publish order of the workspace.',
        formatter_class=RichHelpFormatter,
    )
    order_parser.add_argument(
        '--directory',
        '-C',
        default='.',
        help='Workspace directory or Cargo.toml path (default: .).',
    )
    order_parser.add_argument(
        '--format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text).',
    )

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code (e.g. CK-GRAPH-CYCLE-DETECTED).',
    )
    explain_parser.add_argument('code', help='Error code to explain.')

    return parser


async def _cmd_publish(args: argparse.Namespace) -> int:
    """Handle the ``publish`` subcommand."""
    options = build_options(
        environ=os.environ,
        overrides={
            'directory': args.directory,
            'dry_run': args.dry_run,
            'allow_dirty': args.allow_dirty,
            'only_newest': args.only_newest,
            'tag_crate': args.tag_crate,
            'arguments': args.arguments,
        },
    )
    mask_secret(options.registry_token)
    mask_secret(options.github_token)
    result = await release_crates(
        options,
        push=not args.no_push,
        outputs=ActionOutputs.from_env(os.environ),
    )
    print(result.summary())  # noqa: T201 - CLI output
    for warning in result.warnings:
        print(f'warning: {warning}', file=sys.stderr)  # noqa: T201 - CLI output
    return 0


async def _cmd_order(args: argparse.Namespace) -> int:
    """Handle the ``order`` subcommand."""
    cargo = CargoBackend()
    await check_cargo(cargo)
    directory = Path(args.directory)
    if not directory.is_absolute():
        directory = Path.cwd() / directory
    workspace = await discover_workspace(directory, cargo=cargo)
    order = sort_crates(workspace)

    if args.format == 'json':
        rows = [
            {
                'name': name,
                'version': workspace.crates[name].version_string,
                'publish': workspace.crates[name].publish,
            }
            for name in order
        ]
        print(json.dumps(rows, indent=2))  # noqa: T201 - CLI output
        return 0

    for index, name in enumerate(order, start=1):
        crate = workspace.crates[name]
        note = '' if crate.publish else '  (publish = false)'
        print(f'{index:>3}. {name} {crate.version_string}{note}')  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments without the program name. Defaults to
            ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        command = args.command
        if command == 'publish':
            return asyncio.run(_cmd_publish(args))
        if command == 'order':
            return asyncio.run(_cmd_order(args))
        if command == 'explain':
            return _cmd_explain(args)

        parser.print_help()  # noqa: T201 - CLI output
        print(  # noqa: T201 - CLI output
            f'\n{parser.prog}: error: please provide a command',
            file=sys.stderr,
        )
        return 2

    except CrateKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
