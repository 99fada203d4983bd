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

"""Full production-branch preparation.

Runs three steps, in order:

1. **Sanitize** every file matched by ``prepare.sources``
   (see :mod:`prodprep.batch`).
2. **Stub** test suites: each ``[[prepare.stub]]`` rule overwrites the
   files it matches with fixed content, so development-only tests are
   not shipped with the production branch.
3. **Clean up** the backups written in step 1, when
   ``prepare.cleanup_backups`` is on.

No step aborts the pipeline.  Per-file failures are logged and counted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from prodprep._types import BatchReport
from prodprep.batch import collect_files, run_batch
from prodprep.config import SanitizerConfig, StubRule
from prodprep.logging import get_logger

__all__ = [
    'PrepareReport',
    'StepCounts',
    'cleanup_backups',
    'replace_with_stub',
    'run_prepare',
]

logger = get_logger(__name__)


@dataclass
class StepCounts:
    """Success and failure counts for a file-level step."""

    done: int = 0
    failed: int = 0


@dataclass
class PrepareReport:
    """Result of :func:`run_prepare`.

    Attributes:
        batch: The sanitizer batch report.
        stubs: Files replaced by stub rules.
        cleanup: Backup files removed.
    """

    batch: BatchReport = field(default_factory=BatchReport)
    stubs: StepCounts = field(default_factory=StepCounts)
    cleanup: StepCounts = field(default_factory=StepCounts)


def replace_with_stub(rule: StubRule, root: Path | None = None) -> StepCounts:
    """Overwrite every file matched by *rule* with the rule's content.

    Files whose name does not end with ``rule.suffix`` are left alone.
    """
    counts = StepCounts()
    files, _ = collect_files([rule.pattern], root)
    for path in files:
        if not path.name.endswith(rule.suffix):
            continue
        try:
            path.write_text(rule.content, encoding='utf-8')
        except OSError as exc:
            logger.error('stub_failed', path=path, error=str(exc))
            counts.failed += 1
            continue
        logger.info('stub_written', path=path)
        counts.done += 1
    return counts


def cleanup_backups(backups: Iterable[Path]) -> StepCounts:
    """Delete the given backup files."""
    counts = StepCounts()
    for backup in backups:
        try:
            backup.unlink()
        except OSError as exc:
            logger.error('backup_remove_failed', path=backup, error=str(exc))
            counts.failed += 1
            continue
        logger.info('backup_removed', path=backup)
        counts.done += 1
    return counts


def run_prepare(config: SanitizerConfig, root: Path | None = None) -> PrepareReport:
    """Sanitize sources, stub test suites and drop backups.

    Args:
        config: Resolved settings; ``config.prepare`` drives the steps.
        root: Project root that patterns are relative to.

    Returns:
        Counts for each step.
    """
    prepare = config.prepare
    report = PrepareReport()
    report.batch = run_batch(prepare.sources, config, root=root)

    for rule in prepare.stubs:
        counts = replace_with_stub(rule, root)
        report.stubs.done += counts.done
        report.stubs.failed += counts.failed

    if prepare.cleanup_backups:
        backups = [o.backup_path for o in report.batch.outcomes if o.backup_path is not None]
        report.cleanup = cleanup_backups(backups)

    logger.info(
        'prepare_complete',
        processed=report.batch.stats.processed,
        stubs=report.stubs.done,
        stub_failures=report.stubs.failed,
        backups_removed=report.cleanup.done,
    )
    return report
