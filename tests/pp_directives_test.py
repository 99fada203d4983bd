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

"""Tests for prodprep.directives."""

from __future__ import annotations

from prodprep._types import Directive, DirectiveKind
from prodprep.config import MarkerConfig, SanitizerConfig
from prodprep.directives import DirectiveLexer

_ADD = '// CRITICAL: Add line in production!'
_REMOVE_LINE = '// CRITICAL: Remove line in production!'
_REMOVE_BLOCK = '// CRITICAL: Remove block in production!'


class TestLexPlainLines:
    """Lines without markers."""

    def test_plain_code(self) -> None:
        """Test plain code."""
        assert DirectiveLexer().lex('let x = 1;') is None

    def test_empty_line(self) -> None:
        """Test empty line."""
        assert DirectiveLexer().lex('') is None

    def test_partial_marker_is_ignored(self) -> None:
        """A marker prefix without the full text is not a directive."""
        assert DirectiveLexer().lex('x(); // CRITICAL: Remove line') is None

    def test_markers_are_case_sensitive(self) -> None:
        """Test markers are case sensitive."""
        assert DirectiveLexer().lex('x(); // critical: remove line in production!') is None


class TestLexAddLine:
    """Add-line directives and their payloads."""

    def test_payload_extracted_and_trimmed(self) -> None:
        """Test payload extracted and trimmed."""
        lexer = DirectiveLexer()
        result = lexer.lex(f'    {_ADD}  let now = Clock::get()?.unix_timestamp;  ')
        assert result == Directive(DirectiveKind.ADD_LINE, 'let now = Clock::get()?.unix_timestamp;')

    def test_empty_payload(self) -> None:
        """Test empty payload."""
        result = DirectiveLexer().lex(f'{_ADD}   ')
        assert result is not None
        assert result.kind is DirectiveKind.ADD_LINE
        assert result.payload == ''

    def test_payload_keeps_bangs(self) -> None:
        """Macros with ``!`` in the injected code survive."""
        result = DirectiveLexer().lex(f'{_ADD}require!(a > b, Err::Bad);')
        assert result is not None
        assert result.payload == 'require!(a > b, Err::Bad);'

    def test_add_wins_over_other_markers(self) -> None:
        """Add is checked before every other marker."""
        result = DirectiveLexer().lex(f'{_ADD}x(); {_REMOVE_LINE}')
        assert result is not None
        assert result.kind is DirectiveKind.ADD_LINE


class TestLexRemovals:
    """Remove-line and remove-block directives."""

    def test_remove_line(self) -> None:
        """Test remove line."""
        assert DirectiveLexer().lex(f'let now: i64 = 1736899200; {_REMOVE_LINE}') == Directive(
            DirectiveKind.REMOVE_LINE
        )

    def test_remove_block(self) -> None:
        """Test remove block."""
        assert DirectiveLexer().lex(f'}}; {_REMOVE_BLOCK}') == Directive(DirectiveKind.REMOVE_BLOCK)

    def test_remove_line_wins_over_block(self) -> None:
        """A line with both removal markers is a single-line removal."""
        result = DirectiveLexer().lex(f'x(); {_REMOVE_BLOCK} {_REMOVE_LINE}')
        assert result is not None
        assert result.kind is DirectiveKind.REMOVE_LINE


class TestTestSection:
    """Test-section start detection."""

    def test_at_line_start(self) -> None:
        """Test at line start."""
        result = DirectiveLexer().lex('#[cfg(test)]')
        assert result == Directive(DirectiveKind.TEST_SECTION_START)

    def test_leading_whitespace_trimmed(self) -> None:
        """Test leading whitespace trimmed."""
        assert DirectiveLexer().is_test_section_start('    #[cfg(test)]')

    def test_not_at_line_start(self) -> None:
        """The token must begin the trimmed line."""
        assert not DirectiveLexer().is_test_section_start('fn x() {} #[cfg(test)]')
        assert DirectiveLexer().lex('fn x() {} #[cfg(test)]') is None

    def test_custom_tokens(self) -> None:
        """Test custom tokens."""
        lexer = DirectiveLexer(test_section_markers=('// TESTS BELOW', 'describe('))
        assert lexer.is_test_section_start('describe("suite", () => {')
        assert lexer.is_test_section_start('  // TESTS BELOW')
        assert not lexer.is_test_section_start('#[cfg(test)]')


class TestCustomAndLegacyMarkers:
    """Configurable marker texts."""

    def test_custom_markers(self) -> None:
        """Test custom markers."""
        lexer = DirectiveLexer(MarkerConfig(add_line='# ADD:', remove_line='# DEV', remove_block='# DEVBLOCK'))
        assert lexer.lex('# ADD: debug = False') == Directive(DirectiveKind.ADD_LINE, 'debug = False')
        assert lexer.lex('debug = True  # DEV') == Directive(DirectiveKind.REMOVE_LINE)

    def test_legacy_markers_off_by_default(self) -> None:
        """Test legacy markers off by default."""
        lexer = DirectiveLexer()
        assert lexer.lex('x(); // CRITICAL: Remove in production!') is None
        assert lexer.lex('// CRITICAL: Add in production!let a = 1;') is None

    def test_legacy_markers_enabled(self) -> None:
        """Test legacy markers enabled."""
        lexer = DirectiveLexer(legacy_markers=True)
        assert lexer.lex('x(); // CRITICAL: Remove in production!') == Directive(DirectiveKind.REMOVE_LINE)
        assert lexer.lex('// CRITICAL: Add in production!let a = 1;') == Directive(
            DirectiveKind.ADD_LINE, 'let a = 1;'
        )

    def test_from_config(self) -> None:
        """Test from config."""
        lexer = DirectiveLexer.from_config(SanitizerConfig(legacy_markers=True, test_section_markers=('@test',)))
        assert lexer.is_test_section_start('@test')
        assert lexer.lex('a; // CRITICAL: Remove in production!') == Directive(DirectiveKind.REMOVE_LINE)
