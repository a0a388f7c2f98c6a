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

"""Tests for cratekit.cli module."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from cratekit import __version__
from cratekit.cli import build_parser, main
from cratekit.errors import ValidationError
from cratekit.logging import configure_logging
from cratekit.state import PublishResult
from tests._fakes import FakeCargo, dep, failed, package

configure_logging(quiet=True)


def _fake_cargo(**kwargs: object) -> FakeCargo:
    packages = [
        package('app', '1.2.0', [dep('core')]),
        package('core', '1.0.0'),
        package('xtask', '0.1.0', publish=[]),
    ]
    return FakeCargo(packages=packages, **kwargs)  # type: ignore[arg-type]


class TestBuildParser:
    """Tests for build_parser()."""

    def test_publish_flags(self) -> None:
        """Boolean flags stay None unless given, so lower layers can win."""
        args = build_parser().parse_args(['publish'])
        assert args.dry_run is None
        assert args.allow_dirty is None
        assert args.only_newest is None
        assert args.no_push is False

    def test_publish_values(self) -> None:
        """Value flags are parsed."""
        args = build_parser().parse_args([
            'publish',
            '-C',
            'crates',
            '--dry-run',
            '--tag-crate',
            'app',
            '--arguments=--no-verify',
        ])
        assert args.directory == 'crates'
        assert args.dry_run is True
        assert args.tag_crate == 'app'
        assert args.arguments == '--no-verify'

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--version prints the package version."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(['--version'])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestExplain:
    """Tests for the explain subcommand."""

    def test_known_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        """A known code prints its explanation."""
        assert main(['explain', 'CK-GRAPH-CYCLE-DETECTED']) == 0
        assert 'CK-GRAPH-CYCLE-DETECTED' in capsys.readouterr().out

    def test_unknown_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        """An unknown code fails."""
        assert main(['explain', 'CK-NOPE']) == 1
        assert 'Unknown error code: CK-NOPE' in capsys.readouterr().out


class TestMain:
    """Tests for main()."""

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No subcommand prints help and returns 2."""
        assert main([]) == 2
        assert 'please provide a command' in capsys.readouterr().err

    def test_publish(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """publish builds options from flags and prints the summary."""
        release = AsyncMock(return_value=PublishResult(published=['core'], warnings=['app failed']))
        with patch('cratekit.cli.release_crates', release):
            code = main(['publish', '-C', str(tmp_path), '--dry-run', '--allow-dirty', '--no-push'])

        assert code == 0
        options = release.call_args.args[0]
        assert options.directory == tmp_path
        assert options.dry_run is True
        assert options.allow_dirty is True
        assert options.only_newest is False
        assert release.call_args.kwargs['push'] is False
        captured = capsys.readouterr()
        assert 'published 1, skipped 0, failed 0' in captured.out
        assert 'warning: app failed' in captured.err

    def test_publish_error(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A CrateKitError is rendered and returns 1."""
        release = AsyncMock(side_effect=ValidationError('Crates token is required for publishing crates'))
        with patch('cratekit.cli.release_crates', release):
            code = main(['publish', '-C', str(tmp_path)])
        assert code == 1
        assert 'Crates token is required for publishing crates' in capsys.readouterr().err

    def test_publish_bad_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A broken cratekit.toml fails before publishing."""
        (tmp_path / 'cratekit.toml').write_text('dry_runn = true\n', encoding='utf-8')
        release = AsyncMock()
        with patch('cratekit.cli.release_crates', release):
            code = main(['publish', '-C', str(tmp_path)])
        assert code == 1
        release.assert_not_called()
        assert 'CK-CONFIG-INVALID-KEY' in capsys.readouterr().err


class TestOrder:
    """Tests for the order subcommand."""

    def test_text(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Text output numbers crates and marks unpublished ones."""
        with patch('cratekit.cli.CargoBackend', return_value=_fake_cargo()):
            assert main(['order', '-C', str(tmp_path)]) == 0
        assert capsys.readouterr().out.splitlines() == [
            '  1. core 1.0.0',
            '  2. xtask 0.1.0  (publish = false)',
            '  3. app 1.2.0',
        ]

    def test_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON output lists name, version and publish."""
        with patch('cratekit.cli.CargoBackend', return_value=_fake_cargo()):
            assert main(['order', '-C', str(tmp_path), '--format', 'json']) == 0
        rows = json.loads(capsys.readouterr().out)
        assert [row['name'] for row in rows] == ['core', 'xtask', 'app']
        assert rows[1] == {'name': 'xtask', 'version': '0.1.0', 'publish': False}

    def test_missing_cargo(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A missing cargo is reported with its code."""
        with patch('cratekit.cli.CargoBackend', return_value=_fake_cargo(version_result=failed(return_code=127))):
            assert main(['order', '-C', str(tmp_path)]) == 1
        assert 'CK-CARGO-NOT-FOUND' in capsys.readouterr().err
