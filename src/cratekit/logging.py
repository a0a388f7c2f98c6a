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

"""Structured logging for cratekit.

`structlog <https://www.structlog.org/>`_ over the stdlib root logger,
rendered either for people (colored when stderr is a TTY) or as JSON
lines (``--json-log``). Everything goes to stderr: stdout carries
``cratekit order`` output and GitHub Actions workflow commands.

Registry tokens never reach the output. Fields whose name ends in
``token`` are replaced, and any value passed to :func:`mask_secret` is
scrubbed from every string in the event.

Usage::

    from cratekit.logging import configure_logging, get_logger, mask_secret

    configure_logging(verbose=True)
    mask_secret(options.registry_token)
    log = get_logger(__name__)
    log.info('crates_discovered', count=12)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

REDACTED = '***'

_secrets: set[str] = set()


def mask_secret(value: str) -> None:
    """Scrub ``value`` from all later log events. Blank values are ignored."""
    if value.strip():
        _secrets.add(value.strip())


def _scrub(text: str) -> str:
    for secret in _secrets:
        text = text.replace(secret, REDACTED)
    return text


def redact_secrets(
    logger: Any,  # noqa: ANN401 - structlog processor signature
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor hiding tokens."""
    for key, value in event_dict.items():
        if key.endswith('token') and isinstance(value, str) and value:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and _secrets:
            event_dict[key] = _scrub(value)
    return event_dict


def _level(*, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Route structlog through a single stderr handler.

    Call once at startup. ``quiet`` wins over ``verbose``.
    """
    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=_level(verbose=verbose, quiet=quiet), force=True)

    renderer: structlog.types.Processor
    if json_log:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            redact_secrets,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'cratekit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger named ``name``."""
    return structlog.get_logger(name)


__all__ = [
    'REDACTED',
    'configure_logging',
    'get_logger',
    'mask_secret',
    'redact_secrets',
]
