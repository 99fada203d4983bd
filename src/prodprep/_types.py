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

"""Shared leaf-level types used across prodprep.

This module must have **zero** imports from other ``prodprep``
modules to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    'BatchReport',
    'BatchStats',
    'Directive',
    'DirectiveKind',
    'FileOutcome',
    'FileStatus',
]


class DirectiveKind(enum.Enum):
    """The kind of magic comment found on a source line."""

    ADD_LINE = 'add_line'
    REMOVE_LINE = 'remove_line'
    REMOVE_BLOCK = 'remove_block'
    TEST_SECTION_START = 'test_section_start'


@dataclass(frozen=True)
class Directive:
    """A directive recognized on a single line.

    Attributes:
        kind: What the transformer should do with the line.
        payload: Code to inject for :attr:`DirectiveKind.ADD_LINE`.
            Empty for every other kind, and for an add directive
            that carries no code.
    """

    kind: DirectiveKind
    payload: str = ''


class FileStatus(enum.Enum):
    """Per-file result of a batch run."""

    PROCESSED = 'processed'
    SKIPPED = 'skipped'
    FAILED = 'failed'


@dataclass(frozen=True)
class FileOutcome:
    """What happened to one input file.

    Attributes:
        path: Absolute path of the file.
        status: Processed (rewritten), skipped (no change) or failed.
        error: Human-readable failure reason. Empty unless failed.
        backup_path: Where the pristine copy was written, if anywhere.
        written: ``False`` for dry runs, where changes are only reported.
    """

    path: Path
    status: FileStatus
    error: str = ''
    backup_path: Path | None = None
    written: bool = False


@dataclass
class BatchStats:
    """Aggregate counters for one batch invocation."""

    processed: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        """Number of files the batch looked at."""
        return self.processed + self.skipped + self.failed

    def record(self, outcome: FileOutcome) -> None:
        """Count a single file outcome."""
        if outcome.status is FileStatus.PROCESSED:
            self.processed += 1
        elif outcome.status is FileStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[FileOutcome]) -> BatchStats:
        """Build counters from a sequence of per-file outcomes."""
        stats = cls()
        for outcome in outcomes:
            stats.record(outcome)
        return stats


@dataclass
class BatchReport:
    """Everything a batch produced, in input order.

    Attributes:
        stats: Aggregate counters.
        outcomes: One entry per unique matched file.
        pattern_errors: ``(pattern, message)`` for patterns that could
            not be expanded. These do not count towards :attr:`stats`.
    """

    stats: BatchStats = field(default_factory=BatchStats)
    outcomes: list[FileOutcome] = field(default_factory=list)
    pattern_errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def failures(self) -> list[FileOutcome]:
        """Outcomes with :attr:`FileStatus.FAILED`."""
        return [o for o in self.outcomes if o.status is FileStatus.FAILED]
