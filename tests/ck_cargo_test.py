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

"""Tests for cratekit.backends.pm.cargo module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from cratekit.backends._run import CommandResult
from cratekit.backends.pm import Cargo, CargoBackend
from cratekit.backends.pm.cargo import publish_args
from cratekit.errors import CommandError
from cratekit.logging import configure_logging
from tests._fakes import OK, FakeCargo, failed

configure_logging(quiet=True)

_RUN = 'cratekit.backends.pm.cargo.run_command'


class TestProtocol:
    """Both the real backend and the fake satisfy the Cargo protocol."""

    def test_backend(self) -> None:
        """CargoBackend is a Cargo."""
        assert isinstance(CargoBackend(), Cargo)

    def test_fake(self) -> None:
        """FakeCargo is a Cargo."""
        assert isinstance(FakeCargo(), Cargo)


class TestPublishArgs:
    """Tests for publish_args()."""

    def test_minimal(self) -> None:
        """Only package and manifest by default."""
        assert publish_args('a', '/w/a/Cargo.toml') == [
            'cargo',
            'publish',
            '--package',
            'a',
            '--manifest-path',
            '/w/a/Cargo.toml',
        ]

    def test_all_flags(self) -> None:
        """Dry run, allow dirty and extra arguments are appended in order."""
        assert publish_args('a', '/m', dry_run=True, allow_dirty=True, arguments='--no-verify --locked')[-4:] == [
            '--dry-run',
            '--allow-dirty',
            '--no-verify',
            '--locked',
        ]

    def test_arguments_split_on_single_spaces(self) -> None:
        """Extra arguments are split on every single space."""
        assert publish_args('a', '/m', arguments='--features  x')[-3:] == ['--features', '', 'x']


class TestCargoBackend:
    """Tests for CargoBackend commands."""

    @pytest.mark.asyncio
    async def test_version(self) -> None:
        """version() runs cargo --version and reports the result."""
        with patch(_RUN, MagicMock(return_value=failed(return_code=127))) as run:
            result = await CargoBackend().version()
        assert run.call_args.args[0] == ['cargo', '--version']
        assert not result.ok

    @pytest.mark.asyncio
    async def test_metadata(self) -> None:
        """metadata() asks for format 1 without dependencies."""
        ok = CommandResult(command=[], return_code=0, stdout='{"packages": []}')
        with patch(_RUN, MagicMock(return_value=ok)) as run:
            raw = await CargoBackend().metadata(Path('/w/Cargo.toml'))
        assert raw == '{"packages": []}'
        assert run.call_args.args[0] == [
            'cargo',
            'metadata',
            '--format-version',
            '1',
            '--no-deps',
            '--manifest-path',
            '/w/Cargo.toml',
        ]

    @pytest.mark.asyncio
    async def test_metadata_failure(self) -> None:
        """A cargo failure is raised with its stderr."""
        with patch(_RUN, MagicMock(return_value=failed('error: manifest not found'))):
            with pytest.raises(CommandError, match='Failed to get cargo metadata for /w/Cargo.toml: error: manifest'):
                await CargoBackend().metadata(Path('/w/Cargo.toml'))

    @pytest.mark.asyncio
    async def test_package_list(self) -> None:
        """package_list() allows a dirty tree."""
        ok = CommandResult(command=[], return_code=0, stdout='Cargo.toml\n')
        with patch(_RUN, MagicMock(return_value=ok)) as run:
            raw = await CargoBackend().package_list(Path('/w/a/Cargo.toml'))
        assert raw == 'Cargo.toml\n'
        assert run.call_args.args[0][:4] == ['cargo', 'package', '--list', '--allow-dirty']

    @pytest.mark.asyncio
    async def test_publish(self) -> None:
        """publish() runs from the workspace root with the token env."""
        with patch(_RUN, MagicMock(return_value=OK)) as run:
            result = await CargoBackend().publish(
                'a',
                '/w/a/Cargo.toml',
                root='/w',
                dry_run=True,
                env={'CARGO_REGISTRY_TOKEN': 't'},
            )
        assert result.ok
        assert run.call_args.args[0] == publish_args('a', '/w/a/Cargo.toml', dry_run=True)
        assert run.call_args.kwargs == {'cwd': '/w', 'env': {'CARGO_REGISTRY_TOKEN': 't'}}

    @pytest.mark.asyncio
    async def test_custom_executable(self) -> None:
        """A custom cargo binary is used for every command."""
        with patch(_RUN, MagicMock(return_value=OK)) as run:
            await CargoBackend('/opt/cargo').publish('a', '/m', root='/w')
        assert run.call_args.args[0][0] == '/opt/cargo'
