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

"""Configuration for prodprep.

Settings are read from the first of these that exists:

1. The file passed with ``--config``.
2. ``prodprep.toml`` in the project root.
3. The ``[tool.prodprep]`` table of ``pyproject.toml`` in the project root.

When none is found, the built-in defaults reproduce the stock directive
grammar (``// CRITICAL: ... in production!`` markers and ``#[cfg(test)]``
test sections).

Example ``prodprep.toml``::

    backup_suffix = ".bak"
    inject_indent = "\\t"
    jobs = 8
    formatter = ["rustfmt", "--emit", "stdout"]

    [markers]
    remove_block = "// CRITICAL: Remove block in production!"

    [prepare]
    sources = ["programs/*/src/**/*.rs"]

    [[prepare.stub]]
    pattern = "programs/*/tests/*.rs"
    suffix = ".rs"
    content = "// No tests on the production branch."
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from prodprep.errors import ConfigError
from prodprep.logging import get_logger

__all__ = [
    'CONFIG_FILENAME',
    'DEFAULT_ADD_LINE_MARKER',
    'DEFAULT_REMOVE_BLOCK_MARKER',
    'DEFAULT_REMOVE_LINE_MARKER',
    'DEFAULT_TEST_SECTION_MARKERS',
    'LEGACY_ADD_MARKER',
    'LEGACY_REMOVE_MARKER',
    'MarkerConfig',
    'PrepareConfig',
    'SanitizerConfig',
    'StubRule',
    'load_config',
]

logger = get_logger(__name__)

CONFIG_FILENAME = 'prodprep.toml'

DEFAULT_ADD_LINE_MARKER = '// CRITICAL: Add line in production!'
DEFAULT_REMOVE_LINE_MARKER = '// CRITICAL: Remove line in production!'
DEFAULT_REMOVE_BLOCK_MARKER = '// CRITICAL: Remove block in production!'
DEFAULT_TEST_SECTION_MARKERS: tuple[str, ...] = ('#[cfg(test)]',)

# Earlier dialect, still present in older annotated sources.
LEGACY_ADD_MARKER = '// CRITICAL: Add in production!'
LEGACY_REMOVE_MARKER = '// CRITICAL: Remove in production!'

_DEFAULT_JOBS = 8
_DEFAULT_FORMATTER_TIMEOUT = 30.0


@dataclass(frozen=True)
class MarkerConfig:
    """Exact marker texts recognized by the directive lexer."""

    add_line: str = DEFAULT_ADD_LINE_MARKER
    remove_line: str = DEFAULT_REMOVE_LINE_MARKER
    remove_block: str = DEFAULT_REMOVE_BLOCK_MARKER


@dataclass(frozen=True)
class StubRule:
    """Replace matched files wholesale with fixed content.

    Attributes:
        pattern: Glob pattern, relative to the project root.
        content: The text every matched file is overwritten with.
        suffix: Only files whose name ends with this are touched.
            Empty matches everything.
    """

    pattern: str
    content: str
    suffix: str = ''


@dataclass(frozen=True)
class PrepareConfig:
    """Settings for the ``prodprep-prepare`` pipeline."""

    sources: tuple[str, ...] = ()
    stubs: tuple[StubRule, ...] = ()
    cleanup_backups: bool = True


@dataclass(frozen=True)
class SanitizerConfig:
    """Resolved prodprep settings.

    Attributes:
        markers: Marker texts for the line directives.
        test_section_markers: Tokens that open a test-only section when
            they start a (left-trimmed) line.
        legacy_markers: Also honour the older ``Add in production!`` /
            ``Remove in production!`` markers.
        inject_indent: Prefix for injected lines.
        backtrack: When ``False``, a block removal never deletes lines
            that were already emitted before the directive line.
        backup_suffix: Appended to a file path to name its backup.
        jobs: Maximum number of files processed concurrently.
        formatter: Optional formatter command; receives the cleaned
            text on stdin and must print the formatted text.
        formatter_timeout: Seconds before the formatter is abandoned.
        prepare: Settings for the prepare pipeline.
    """

    markers: MarkerConfig = field(default_factory=MarkerConfig)
    test_section_markers: tuple[str, ...] = DEFAULT_TEST_SECTION_MARKERS
    legacy_markers: bool = False
    inject_indent: str = '\t'
    backtrack: bool = True
    backup_suffix: str = '.bak'
    jobs: int = _DEFAULT_JOBS
    formatter: tuple[str, ...] = ()
    formatter_timeout: float = _DEFAULT_FORMATTER_TIMEOUT
    prepare: PrepareConfig = field(default_factory=PrepareConfig)


_TOP_LEVEL_KEYS = frozenset({
    'backtrack',
    'backup_suffix',
    'formatter',
    'formatter_timeout',
    'inject_indent',
    'jobs',
    'legacy_markers',
    'markers',
    'prepare',
    'test_section_markers',
})
_MARKER_KEYS = frozenset({'add_line', 'remove_line', 'remove_block'})
_PREPARE_KEYS = frozenset({'sources', 'stub', 'cleanup_backups'})
_STUB_KEYS = frozenset({'pattern', 'content', 'suffix'})


def _reject_unknown(data: dict[str, Any], allowed: frozenset[str], where: str) -> None:
    for key in data:
        if key not in allowed:
            raise ConfigError(f"Unknown key '{key}' in {where}")


def _str(value: object, name: str, *, allow_empty: bool = True) -> str:
    if not isinstance(value, str):
        raise ConfigError(f'{name} must be a string')
    if not allow_empty and not value:
        raise ConfigError(f'{name} must be a non-empty string')
    return value


def _bool(value: object, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f'{name} must be a boolean')
    return value


def _str_list(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigError(f'{name} must be a list')
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item:
            raise ConfigError(f'{name}[{i}] must be a non-empty string')
    return tuple(value)


def _table(value: object, name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f'{name} must be a table')
    return value


def _parse_markers(data: dict[str, Any]) -> MarkerConfig:
    _reject_unknown(data, _MARKER_KEYS, '[markers]')
    defaults = MarkerConfig()
    return MarkerConfig(
        add_line=_str(data.get('add_line', defaults.add_line), 'markers.add_line', allow_empty=False),
        remove_line=_str(data.get('remove_line', defaults.remove_line), 'markers.remove_line', allow_empty=False),
        remove_block=_str(data.get('remove_block', defaults.remove_block), 'markers.remove_block', allow_empty=False),
    )


def _parse_stub(data: object, index: int) -> StubRule:
    name = f'prepare.stub[{index}]'
    table = _table(data, name)
    _reject_unknown(table, _STUB_KEYS, f'[[{name}]]')
    if 'pattern' not in table:
        raise ConfigError(f'{name}.pattern is required')
    if 'content' not in table:
        raise ConfigError(f'{name}.content is required')
    return StubRule(
        pattern=_str(table['pattern'], f'{name}.pattern', allow_empty=False),
        content=_str(table['content'], f'{name}.content'),
        suffix=_str(table.get('suffix', ''), f'{name}.suffix'),
    )


def _parse_prepare(data: dict[str, Any]) -> PrepareConfig:
    _reject_unknown(data, _PREPARE_KEYS, '[prepare]')
    stubs_raw = data.get('stub', [])
    if not isinstance(stubs_raw, list):
        raise ConfigError('prepare.stub must be an array of tables')
    return PrepareConfig(
        sources=_str_list(data.get('sources', []), 'prepare.sources'),
        stubs=tuple(_parse_stub(s, i) for i, s in enumerate(stubs_raw)),
        cleanup_backups=_bool(data.get('cleanup_backups', True), 'prepare.cleanup_backups'),
    )


def _parse_config(data: dict[str, Any]) -> SanitizerConfig:
    """Validate a raw TOML mapping and build a :class:`SanitizerConfig`.

    Raises:
        ConfigError: On unknown keys or values of the wrong type.
    """
    _reject_unknown(data, _TOP_LEVEL_KEYS, 'prodprep config')
    defaults = SanitizerConfig()

    jobs = data.get('jobs', defaults.jobs)
    if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
        raise ConfigError('jobs must be a positive integer')

    timeout = data.get('formatter_timeout', defaults.formatter_timeout)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError('formatter_timeout must be a positive number')

    test_markers = _str_list(
        data.get('test_section_markers', list(defaults.test_section_markers)),
        'test_section_markers',
    )

    return SanitizerConfig(
        markers=_parse_markers(_table(data.get('markers', {}), 'markers')),
        test_section_markers=test_markers,
        legacy_markers=_bool(data.get('legacy_markers', defaults.legacy_markers), 'legacy_markers'),
        inject_indent=_str(data.get('inject_indent', defaults.inject_indent), 'inject_indent'),
        backtrack=_bool(data.get('backtrack', defaults.backtrack), 'backtrack'),
        backup_suffix=_str(data.get('backup_suffix', defaults.backup_suffix), 'backup_suffix', allow_empty=False),
        jobs=jobs,
        formatter=_str_list(data.get('formatter', []), 'formatter'),
        formatter_timeout=float(timeout),
        prepare=_parse_prepare(_table(data.get('prepare', {}), 'prepare')),
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding='utf-8'))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'Failed to parse {path}: {exc}') from exc
    except OSError as exc:
        raise ConfigError(f'Failed to read {path}: {exc}') from exc


def load_config(config_path: Path | None = None, root: Path | None = None) -> SanitizerConfig:
    """Load prodprep settings.

    Args:
        config_path: Explicit config file. Must exist when given.
        root: Project root searched for ``prodprep.toml`` and
            ``pyproject.toml``. Defaults to the current directory.

    Returns:
        The resolved configuration, or defaults when nothing is found.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid.
    """
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f'Config file not found: {config_path}')
        logger.debug('config_loaded', path=config_path)
        return _parse_config(_read_toml(config_path))

    base = root if root is not None else Path.cwd()
    candidate = base / CONFIG_FILENAME
    if candidate.is_file():
        logger.debug('config_loaded', path=candidate)
        return _parse_config(_read_toml(candidate))

    pyproject = base / 'pyproject.toml'
    if pyproject.is_file():
        table = _table(_read_toml(pyproject).get('tool', {}), 'tool').get('prodprep')
        if table is not None:
            logger.debug('config_loaded', path=pyproject, table='tool.prodprep')
            return _parse_config(_table(table, 'tool.prodprep'))

    logger.debug('config_defaults')
    return SanitizerConfig()
