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

"""Exception types raised by prodprep."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    'BackupWriteError',
    'ConfigError',
    'ProdPrepError',
]


class ProdPrepError(Exception):
    """Base class for all prodprep errors."""


class ConfigError(ProdPrepError):
    """Raised when ``prodprep.toml`` (or ``[tool.prodprep]``) is invalid."""


class BackupWriteError(ProdPrepError):
    """Raised when the pristine copy of a file could not be written.

    The original file is never overwritten once this has been raised.

    Attributes:
        path: The source file whose backup failed.
        backup_path: The sibling path the backup was meant to land at.
    """

    def __init__(self, path: Path, backup_path: Path, cause: OSError) -> None:
        self.path = path
        self.backup_path = backup_path
        super().__init__(f'Could not write backup {backup_path}: {cause}')
