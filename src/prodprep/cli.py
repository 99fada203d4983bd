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

"""Command-line entry points.

``prodprep`` cleans the files matched by the given glob patterns::

    prodprep 'programs/*/src/**/*.rs'
    prodprep --dry-run 'src/**/*.rs' 'work/*/*.rs'

``prodprep-prepare`` runs the configured production-branch pipeline
(sanitize, stub test suites, remove backups)::

    prodprep-prepare --config prodprep.toml

Both exit 0 once the batch has run, even if individual files failed;
failures are listed in the summary.  Exit status 1 is reserved for usage
and configuration errors.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from rich.console import Console

from prodprep.batch import print_summary, run_batch
from prodprep.config import SanitizerConfig, load_config
from prodprep.errors import ConfigError
from prodprep.logging import configure_logging, get_logger
from prodprep.prepare import run_prepare

__all__ = [
    'main',
    'prepare_main',
]

logger = get_logger(__name__)

_USAGE_EXAMPLE = """\
Usage: prodprep PATTERN [PATTERN ...]
Example: prodprep "**/src/*.rs" "work/*/*.rs"
"""


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{value!r} is not an integer') from None
    if number < 1:
        raise argparse.ArgumentTypeError('must be a positive integer')
    return number


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines on stderr.')
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Config file (default: prodprep.toml or [tool.prodprep] in pyproject.toml).',
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help='Directory that relative patterns are resolved against (default: cwd).',
    )
    parser.add_argument('--no-color', action='store_true', help='Disable colored summary output.')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prodprep',
        description='Strip development-only code and inject production code, guided by directive comments.',
    )
    _add_common_options(parser)
    parser.add_argument('--dry-run', action='store_true', help='Report files that would change without writing.')
    parser.add_argument('--jobs', type=_positive_int, default=None, help='Files processed concurrently.')
    parser.add_argument('patterns', nargs='*', metavar='PATTERN', help='Glob pattern of files to clean.')
    return parser


def _build_prepare_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prodprep-prepare',
        description='Prepare a production branch: sanitize sources, stub test suites, remove backups.',
    )
    _add_common_options(parser)
    return parser


def _load(args: argparse.Namespace) -> SanitizerConfig:
    return load_config(args.config, args.root)


def main(argv: list[str] | None = None) -> int:
    """Clean the files matched by the patterns given on the command line."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    if not args.patterns:
        sys.stderr.write('Error: No file patterns provided\n')
        sys.stderr.write(_USAGE_EXAMPLE)
        return 1

    try:
        config = _load(args)
    except ConfigError as exc:
        sys.stderr.write(f'Error: {exc}\n')
        return 1
    if args.jobs is not None:
        config = dataclasses.replace(config, jobs=args.jobs)

    logger.info('batch_started', patterns=args.patterns, dry_run=args.dry_run)
    report = run_batch(args.patterns, config, root=args.root, dry_run=args.dry_run)
    print_summary(report, Console(no_color=args.no_color), dry_run=args.dry_run)
    return 0


def prepare_main(argv: list[str] | None = None) -> int:
    """Run the configured production-branch preparation pipeline."""
    parser = _build_prepare_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        config = _load(args)
    except ConfigError as exc:
        sys.stderr.write(f'Error: {exc}\n')
        return 1
    if not config.prepare.sources:
        sys.stderr.write('Error: no [prepare] sources configured\n')
        return 1

    report = run_prepare(config, args.root)
    console = Console(no_color=args.no_color)
    print_summary(report.batch, console)
    console.print()
    console.print(f'Stub files written: {report.stubs.done} (failed: {report.stubs.failed})')
    console.print(f'Backup files removed: {report.cleanup.done} (failed: {report.cleanup.failed})')
    return 0


if __name__ == '__main__':
    sys.exit(main())
