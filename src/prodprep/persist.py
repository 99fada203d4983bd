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

"""Decide whether a cleaned file needs writing, and write it safely.

Writes are two-step: the pristine bytes go to a sibling backup first
(``lib.rs`` → ``lib.rs.bak``), then the original path is overwritten.
If the backup cannot be written the original is left alone, so a bad
transformation can always be reverted from the backup.
"""

from __future__ import annotations

from pathlib import Path

from prodprep.errors import BackupWriteError
from prodprep.logging import get_logger

__all__ = [
    'backup_path_for',
    'needs_write',
    'write_with_backup',
]

logger = get_logger(__name__)


def needs_write(original: str, cleaned: str) -> bool:
    """Return ``True`` if *cleaned* differs from *original*.

    Surrounding whitespace is ignored on both sides, so a file without
    directives is never rewritten just because its trailing newlines
    were normalized.
    """
    return original.strip() != cleaned.strip()


def backup_path_for(path: Path, suffix: str = '.bak') -> Path:
    """Return the backup location for *path* (the path plus *suffix*)."""
    return path.with_name(path.name + suffix)


def write_with_backup(
    path: Path,
    original: bytes,
    cleaned: str,
    *,
    suffix: str = '.bak',
) -> Path:
    """Back up *original* next to *path*, then overwrite *path*.

    Args:
        path: The file being rewritten.
        original: Its untouched bytes, exactly as read.
        cleaned: The new text, written as UTF-8.
        suffix: Backup suffix.

    Returns:
        The path the backup was written to.

    Raises:
        BackupWriteError: If the backup could not be written. *path*
            has not been modified in that case.
        OSError: If overwriting *path* itself fails. The backup is
            already in place by then.
    """
    backup = backup_path_for(path, suffix)
    try:
        backup.write_bytes(original)
    except OSError as exc:
        raise BackupWriteError(path, backup, exc) from exc
    logger.debug('backup_written', path=path, backup=backup)

    path.write_bytes(cleaned.encode('utf-8'))
    return backup
