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

"""Run the sanitizer over every file matched by a set of glob patterns.

Key Concepts::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ Explanation                                    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Pattern expansion   │ Each pattern is globbed (``**`` recursive)     │
    │                     │ relative to the project root. A file matched   │
    │                     │ by several patterns is processed once.         │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Per-file pipeline   │ read → transform → change gate → (format) →    │
    │                     │ backup → overwrite. Any failure is recorded    │
    │                     │ against that file only.                        │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Concurrency         │ Pipelines run in worker threads, at most       │
    │                     │ ``jobs`` at a time. Counters are built from    │
    │                     │ the outcomes after all files finish.           │
    └─────────────────────┴────────────────────────────────────────────────┘

Usage::

    from prodprep.batch import print_summary, run_batch

    report = run_batch(['programs/*/src/**/*.rs'])
    print_summary(report)
"""

from __future__ import annotations

import asyncio
import glob
from collections.abc import Sequence
from io import StringIO
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from prodprep._types import BatchReport, BatchStats, FileOutcome, FileStatus
from prodprep.config import SanitizerConfig
from prodprep.formatter import format_source
from prodprep.logging import get_logger
from prodprep.persist import needs_write, write_with_backup
from prodprep.transform import LineTransformer

__all__ = [
    'collect_files',
    'expand_pattern',
    'format_summary',
    'print_summary',
    'process_file',
    'process_patterns',
    'run_batch',
]

logger = get_logger(__name__)


def expand_pattern(pattern: str, root: Path | None = None) -> list[Path]:
    """Return the sorted absolute paths of regular files matching *pattern*.

    Relative patterns are resolved against *root* (default: the current
    directory). ``**`` matches any number of directories.
    """
    base = (root if root is not None else Path.cwd()).absolute()
    matches = glob.glob(pattern, root_dir=base, recursive=True)
    files = {base / match for match in matches}
    return sorted(path for path in files if path.is_file())


def collect_files(
    patterns: Sequence[str],
    root: Path | None = None,
) -> tuple[list[Path], list[tuple[str, str]]]:
    """Expand every pattern into one de-duplicated file list.

    A pattern that fails to expand is reported and skipped; the other
    patterns still contribute their files.

    Returns:
        ``(files, pattern_errors)`` where files keep the order of first
        appearance and each error is ``(pattern, message)``.
    """
    files: list[Path] = []
    seen: set[Path] = set()
    errors: list[tuple[str, str]] = []
    for pattern in patterns:
        try:
            matched = expand_pattern(pattern, root)
        except (OSError, ValueError) as exc:
            logger.error('pattern_failed', pattern=pattern, error=str(exc))
            errors.append((pattern, str(exc)))
            continue
        if not matched:
            logger.info('pattern_no_matches', pattern=pattern)
        for path in matched:
            if path not in seen:
                seen.add(path)
                files.append(path)
    return files, errors


def process_file(
    path: Path,
    transformer: LineTransformer,
    config: SanitizerConfig,
    *,
    dry_run: bool = False,
) -> FileOutcome:
    """Clean one file in place and report what happened.

    Never raises: read, decode, backup and write errors all become a
    :attr:`FileStatus.FAILED` outcome.
    """
    logger.debug('file_started', path=path)
    try:
        original_bytes = path.read_bytes()
        original = original_bytes.decode('utf-8')
        cleaned = transformer.transform(original)

        if not needs_write(original, cleaned):
            logger.info('file_unchanged', path=path)
            return FileOutcome(path=path, status=FileStatus.SKIPPED)

        if config.formatter:
            cleaned = format_source(cleaned, config.formatter, timeout=config.formatter_timeout)

        if dry_run:
            logger.info('file_would_change', path=path)
            return FileOutcome(path=path, status=FileStatus.PROCESSED)

        backup = write_with_backup(path, original_bytes, cleaned, suffix=config.backup_suffix)
        logger.info('file_processed', path=path)
        return FileOutcome(path=path, status=FileStatus.PROCESSED, backup_path=backup, written=True)
    except Exception as exc:  # noqa: BLE001
        logger.error('file_failed', path=path, error=str(exc))
        return FileOutcome(path=path, status=FileStatus.FAILED, error=str(exc))


async def process_patterns(
    patterns: Sequence[str],
    config: SanitizerConfig | None = None,
    *,
    root: Path | None = None,
    dry_run: bool = False,
) -> BatchReport:
    """Clean every file matched by *patterns*.

    Args:
        patterns: Glob patterns, relative to *root* unless absolute.
        config: Settings. Defaults to :class:`SanitizerConfig` defaults.
        root: Directory relative patterns are resolved against.
        dry_run: Report what would change without writing anything.

    Returns:
        A :class:`BatchReport` with one outcome per matched file, in
        the order the files were matched.
    """
    config = config or SanitizerConfig()
    files, pattern_errors = collect_files(patterns, root)
    transformer = LineTransformer.from_config(config)
    sem = asyncio.Semaphore(config.jobs)

    async def _do_one(path: Path) -> FileOutcome:
        async with sem:
            return await asyncio.to_thread(process_file, path, transformer, config, dry_run=dry_run)

    outcomes = list(await asyncio.gather(*(_do_one(p) for p in files)))
    stats = BatchStats.from_outcomes(outcomes)
    logger.info(
        'batch_complete',
        processed=stats.processed,
        skipped=stats.skipped,
        failed=stats.failed,
        pattern_errors=len(pattern_errors),
        dry_run=dry_run,
    )
    return BatchReport(stats=stats, outcomes=outcomes, pattern_errors=pattern_errors)


def run_batch(
    patterns: Sequence[str],
    config: SanitizerConfig | None = None,
    *,
    root: Path | None = None,
    dry_run: bool = False,
) -> BatchReport:
    """Synchronous wrapper around :func:`process_patterns`."""
    return asyncio.run(process_patterns(patterns, config, root=root, dry_run=dry_run))


def print_summary(
    report: BatchReport,
    console: Console | None = None,
    *,
    title: str = 'Production Preparation Summary',
    dry_run: bool = False,
) -> None:
    """Print batch counts, failed files and failed patterns with Rich.

    Args:
        report: The batch result.
        console: Rich :class:`Console` to print to.  When ``None``,
            a default ``Console()`` is created (auto-detects TTY).
        title: Table title.
        dry_run: Label processed files as "would change".
    """
    if console is None:
        console = Console()

    stats = report.stats
    table = Table(title=title, show_header=True, header_style='bold', show_edge=False)
    table.add_column('Result', min_width=28)
    table.add_column('Files', justify='right')
    processed_label = 'Files that would change' if dry_run else 'Files processed'
    table.add_row(processed_label, Text(str(stats.processed), style='green' if stats.processed else ''))
    table.add_row('Files skipped (no changes)', str(stats.skipped))
    table.add_row('Files failed', Text(str(stats.failed), style='bold red' if stats.failed else ''))
    console.print(table)

    if report.failures:
        console.print()
        for outcome in report.failures:
            console.print(f'[bold red]error[/][bold]: {escape(str(outcome.path))}[/]')
            console.print(f'   [cyan]=[/] [bold]note[/]: {escape(outcome.error)}', highlight=False)

    if report.pattern_errors:
        console.print()
        for pattern, message in report.pattern_errors:
            console.print(f'[bold yellow]warning[/][bold]: pattern {escape(repr(pattern))} could not be expanded[/]')
            console.print(f'   [cyan]=[/] [bold]note[/]: {escape(message)}', highlight=False)


def format_summary(report: BatchReport, *, color: bool = False, dry_run: bool = False) -> str:
    """Return :func:`print_summary` output as a string."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, width=120)
    print_summary(report, console=console, dry_run=dry_run)
    return buf.getvalue().rstrip('\n')
