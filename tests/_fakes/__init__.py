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

"""Shared test fakes for cratekit.

Provides reusable fake implementations of the Cargo, Registry and VCS
protocols so that individual test modules don't need to duplicate
boilerplate classes.

Usage::

    from tests._fakes import OK, FakeCargo, FakeRegistry, FakeVCS

    cargo = FakeCargo(packages=[package('a', '1.0.0')])
    registry = FakeRegistry(published={'a': crate_info('a', ['0.9.0'])})
"""

from tests._fakes._cargo import FakeCargo as FakeCargo, dep as dep, package as package
from tests._fakes._registry import FakeRegistry as FakeRegistry, crate_info as crate_info
from tests._fakes._vcs import OK as OK, FakeVCS as FakeVCS, failed as failed

__all__ = [
    'OK',
    'FakeCargo',
    'FakeRegistry',
    'FakeVCS',
    'crate_info',
    'dep',
    'failed',
    'package',
]
