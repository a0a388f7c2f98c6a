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

"""GitHub Actions step outputs and workflow commands.

Outputs are appended to the file named by ``GITHUB_OUTPUT`` as
``name=value`` lines (multi-line values use the ``name<<DELIM`` form).
Workflow commands (``::group::``, ``::notice::``, ``::warning::``) are
printed to stdout only when running under Actions.

The default :class:`ActionOutputs` is inert, so library callers and
tests get no side effects unless they opt in.
"""

from __future__ import annotations

import json
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from cratekit.logging import get_logger

logger = get_logger(__name__)


def format_value(value: object) -> str:
    """Render an output value the way Actions expressions read it.

    Strings pass through; everything else is JSON-encoded.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(',', ':'))


def _escape_data(message: str) -> str:
    return message.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')


class ActionOutputs:
    """Sink for step outputs and workflow commands.

    Args:
        output_file: File to append ``name=value`` lines to, usually
            ``$GITHUB_OUTPUT``. ``None`` only logs the outputs.
        commands: Whether to print workflow commands.
        stream: Where workflow commands go. Defaults to stdout.
    """

    def __init__(
        self,
        *,
        output_file: Path | None = None,
        commands: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize the sink."""
        self._output_file = output_file
        self._commands = commands
        self._stream = stream
        self.values: dict[str, str] = {}

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> ActionOutputs:
        """Configure from the Actions runner environment."""
        output_file = environ.get('GITHUB_OUTPUT') or None
        return cls(
            output_file=Path(output_file) if output_file else None,
            commands=environ.get('GITHUB_ACTIONS', '').lower() == 'true',
        )

    def set_output(self, name: str, value: object) -> None:
        """Record a step output and append it to the output file."""
        text = format_value(value)
        self.values[name] = text
        logger.info('set_output', name=name, value=text)
        if self._output_file is None:
            return
        if '\n' in text:
            delimiter = f'ghadelimiter_{uuid.uuid4()}'
            line = f'{name}<<{delimiter}\n{text}\n{delimiter}\n'
        else:
            line = f'{name}={text}\n'
        self._output_file.parent.mkdir(parents=True, exist_ok=True)
        with self._output_file.open('a', encoding='utf-8') as handle:
            handle.write(line)

    def _command(self, name: str, message: str = '') -> None:
        if not self._commands:
            return
        print(f'::{name}::{_escape_data(message)}', file=self._stream or sys.stdout, flush=True)

    def notice(self, message: str) -> None:
        """Emit a ``::notice::`` annotation."""
        logger.info('notice', message=message)
        self._command('notice', message)

    def warning(self, message: str) -> None:
        """Emit a ``::warning::`` annotation."""
        self._command('warning', message)

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """Fold the enclosed log lines under ``title`` in the Actions UI."""
        self._command('group', title)
        try:
            yield
        finally:
            self._command('endgroup')


__all__ = [
    'ActionOutputs',
    'format_value',
]
