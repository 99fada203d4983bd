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

"""Tests for prodprep.transform."""

from __future__ import annotations

import textwrap

from prodprep.config import SanitizerConfig
from prodprep.transform import LineTransformer, clean_source

_ADD = '// CRITICAL: Add line in production!'
_REMOVE_LINE = '// CRITICAL: Remove line in production!'
_REMOVE_BLOCK = '// CRITICAL: Remove block in production!'


def _src(text: str) -> str:
    """Dedent a triple-quoted source fixture."""
    return textwrap.dedent(text).lstrip('\n')


class TestPassThrough:
    """Documents without directives."""

    def test_unchanged(self) -> None:
        """Test unchanged."""
        source = 'fn main() {\n    run();\n}\n'
        assert clean_source(source) == source

    def test_trailing_blank_lines_stripped(self) -> None:
        """Test trailing blank lines stripped."""
        assert clean_source('a;\nb;\n\n\n   \n') == 'a;\nb;\n'

    def test_adds_single_trailing_newline(self) -> None:
        """Test adds single trailing newline."""
        assert clean_source('a;') == 'a;\n'

    def test_empty_document(self) -> None:
        """Test empty document."""
        assert clean_source('') == '\n'

    def test_no_op_is_equal_after_trim(self) -> None:
        """A directive-free document is unchanged up to surrounding whitespace."""
        source = '\n\nuse std::fmt;\n\nfn f() {}\n\n'
        assert clean_source(source).strip() == source.strip()


class TestSingleLineDirectives:
    """Remove-line and add-line directives."""

    def test_single_line_removal(self) -> None:
        """Test single line removal."""
        source = f'x = 1;\ny = 2; {_REMOVE_LINE}\nz = 3;'
        assert clean_source(source) == 'x = 1;\nz = 3;\n'

    def test_injection(self) -> None:
        """Test injection."""
        assert clean_source(f'{_ADD}w = 9;') == '\tw = 9;\n'

    def test_injection_without_indent(self) -> None:
        """Test injection without indent."""
        config = SanitizerConfig(inject_indent='')
        assert clean_source(f'{_ADD}w = 9;', config) == 'w = 9;\n'

    def test_injection_keeps_crlf(self) -> None:
        """Injected lines in a CRLF file end in CRLF too."""
        source = f'a;\r\n{_ADD}b;\r\nc;\r\n'
        assert clean_source(source) == 'a;\r\n\tb;\r\nc;\r\n'

    def test_empty_injection_emits_nothing(self) -> None:
        """Test empty injection emits nothing."""
        assert clean_source(f'a;\n    {_ADD}   \nb;') == 'a;\nb;\n'

    def test_swap_dev_for_prod_line(self) -> None:
        """The common pairing: drop a dev constant, inject the real call."""
        source = _src(f"""
            fn admin() {{
                let now: i64 = 1736899200; {_REMOVE_LINE}

                {_ADD}let now: i64 = Clock::get()?.unix_timestamp;
                use_it(now);
            }}
        """)
        assert clean_source(source) == _src("""
            fn admin() {

            \tlet now: i64 = Clock::get()?.unix_timestamp;
                use_it(now);
            }
        """)

    def test_idempotent(self) -> None:
        """Single-line directives leave nothing behind for a second pass."""
        source = f'a;\nb; {_REMOVE_LINE}\n{_ADD}c;\n{_ADD}\nd;\n'
        once = clean_source(source)
        assert clean_source(once) == once
        assert 'CRITICAL' not in once


class TestBlockRemoval:
    """Remove-block directives."""

    def test_balanced_block_opening_line(self) -> None:
        """The marker on a signature line removes the whole body."""
        source = _src(f"""
            // keep
            fn helper() {{ {_REMOVE_BLOCK}
                body();
            }}
            tail();
        """)
        assert clean_source(source) == '// keep\ntail();\n'

    def test_block_closing_line(self) -> None:
        """The marker on the closing line removes back to the statement start."""
        source = _src(f"""
            let end = parse(&end_time)?;
            let now = match unix_timestamp {{
                Some(ts) => ts,
                None => Clock::get()?.unix_timestamp,
            }}; {_REMOVE_BLOCK}

            {_ADD}let now = Clock::get()?.unix_timestamp;

            require!(end > now, Err::Past);
        """)
        assert clean_source(source) == _src("""
            let end = parse(&end_time)?;

            \tlet now = Clock::get()?.unix_timestamp;

            require!(end > now, Err::Past);
        """)

    def test_single_line_block(self) -> None:
        """A block that opens and closes on the marker line consumes nothing after it."""
        source = f'a;\nb;\nif x {{ y(); }} {_REMOVE_BLOCK}\nc;\n'
        assert clean_source(source) == 'a;\nc;\n'

    def test_nested_brackets(self) -> None:
        """Test nested brackets."""
        source = _src(f"""
            // start
            fn debug_dump() {{ {_REMOVE_BLOCK}
                for x in items {{
                    print(x[0]);
                }}
            }}
            fn kept() {{}}
        """)
        assert clean_source(source) == '// start\nfn kept() {}\n'

    def test_backward_scan_over_deletes(self) -> None:
        """The nearest ``;`` line goes too, even if unrelated."""
        source = f'first();\nsecond();\nthird {{ {_REMOVE_BLOCK}\n}}\nlast();\n'
        assert clean_source(source) == 'first();\nlast();\n'

    def test_backtrack_disabled(self) -> None:
        """Test backtrack disabled."""
        source = f'first();\nsecond();\nthird {{ {_REMOVE_BLOCK}\n}}\nlast();\n'
        config = SanitizerConfig(backtrack=False)
        assert clean_source(source, config) == 'first();\nsecond();\nlast();\n'

    def test_directives_inside_skipped_block_ignored(self) -> None:
        """Test directives inside skipped block ignored."""
        source = f'// c\nfn f() {{ {_REMOVE_BLOCK}\n    {_ADD}x();\n}}\nz;\n'
        assert clean_source(source) == '// c\nz;\n'

    def test_unterminated_block_runs_to_eof(self) -> None:
        """Test unterminated block runs to eof."""
        source = f'// c\nfn f() {{ {_REMOVE_BLOCK}\n    a();\n    b();\n'
        assert clean_source(source) == '// c\n'


class TestTestSection:
    """Test-section suppression."""

    def test_suppresses_rest_of_file(self) -> None:
        """Everything after the marker is dropped, closing braces included."""
        source = 'line1;\nline2;\n#[cfg(test)]\nmod tests {\n}\n'
        assert clean_source(source) == 'line1;\nline2;\n'

    def test_no_end_marker(self) -> None:
        """There is no way to resume emitting after a test section."""
        source = _src("""
            fn a() {}
            #[cfg(test)]
            mod tests {
                fn t() {}
            }
            fn b() {}
        """)
        assert clean_source(source) == 'fn a() {}\n'

    def test_blank_lines_before_section_stripped(self) -> None:
        """Test blank lines before section stripped."""
        assert clean_source('a;\n\n\n  #[cfg(test)]\nmod t;\n') == 'a;\n'


class TestLineTransformer:
    """Transformer construction."""

    def test_reusable(self) -> None:
        """A transformer carries no state between documents."""
        transformer = LineTransformer()
        first = transformer.transform(f'// c\nfn f() {{ {_REMOVE_BLOCK}\n')
        second = transformer.transform('a;\nb;\n')
        assert first == '// c\n'
        assert second == 'a;\nb;\n'

    def test_from_config_legacy(self) -> None:
        """Test from config legacy."""
        transformer = LineTransformer.from_config(SanitizerConfig(legacy_markers=True, inject_indent='    '))
        source = 'a: Option<i64>, // CRITICAL: Remove in production!\n// CRITICAL: Add in production!let n = 1;\n'
        assert transformer.transform(source) == '    let n = 1;\n'
