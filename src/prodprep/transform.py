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

"""Single-pass line transformer for production builds.

Key Concepts::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ State               │ What happens to the next raw line              │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ NORMAL              │ Lexed for a directive. Plain lines are copied  │
    │                     │ to the output buffer unchanged.                │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ SKIP_BLOCK          │ Dropped. Its bracket balance is added to the   │
    │                     │ running balance; at zero or below the block    │
    │                     │ ends and the transformer returns to NORMAL.    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ SKIP_TEST_SECTION   │ Dropped, along with every line after it.       │
    └─────────────────────┴────────────────────────────────────────────────┘

The output buffer is a plain list that block removals may truncate, since
a block directive can sit on the *last* line of the code it removes.

Lines are split on line feeds only. In a CRLF file every copied line keeps
its carriage return, and an injected line takes the ending of its
directive line.

Usage::

    from prodprep.transform import clean_source

    cleaned = clean_source(path.read_text(encoding='utf-8'))
"""

from __future__ import annotations

import enum

from prodprep._types import DirectiveKind
from prodprep.config import SanitizerConfig
from prodprep.directives import DirectiveLexer
from prodprep.extent import bracket_balance, resolve_block_extent

__all__ = [
    'LineTransformer',
    'TransformState',
    'clean_source',
]


class TransformState(enum.Enum):
    """States of the line transformer."""

    NORMAL = 'normal'
    SKIP_BLOCK = 'skip_block'
    SKIP_TEST_SECTION = 'skip_test_section'


class LineTransformer:
    """Apply production directives to the text of one file.

    Instances hold only settings and can be shared between threads;
    every call to :meth:`transform` keeps its own state.

    Args:
        lexer: Directive lexer. Defaults to the stock markers.
        inject_indent: Prefix for lines injected by add directives.
        backtrack: Let block removals delete already-emitted lines.
    """

    def __init__(
        self,
        lexer: DirectiveLexer | None = None,
        *,
        inject_indent: str = '\t',
        backtrack: bool = True,
    ) -> None:
        self._lexer = lexer or DirectiveLexer()
        self._inject_indent = inject_indent
        self._backtrack = backtrack

    @classmethod
    def from_config(cls, config: SanitizerConfig) -> LineTransformer:
        """Build a transformer from resolved settings."""
        return cls(
            DirectiveLexer.from_config(config),
            inject_indent=config.inject_indent,
            backtrack=config.backtrack,
        )

    def transform(self, text: str) -> str:
        """Return the production version of *text*.

        The result has trailing blank lines removed and ends with exactly
        one newline.
        """
        buffer: list[str] = []
        state = TransformState.NORMAL
        balance = 0

        for line in text.split('\n'):
            if state is TransformState.SKIP_TEST_SECTION:
                break

            if state is TransformState.SKIP_BLOCK:
                balance += bracket_balance(line)
                if balance <= 0:
                    state = TransformState.NORMAL
                continue

            directive = self._lexer.lex(line)
            if directive is None:
                buffer.append(line)
                continue

            if directive.kind is DirectiveKind.ADD_LINE:
                if directive.payload:
                    eol = '\r' if line.endswith('\r') else ''
                    buffer.append(self._inject_indent + directive.payload + eol)
            elif directive.kind is DirectiveKind.REMOVE_BLOCK:
                extent = resolve_block_extent(line, buffer, backtrack=self._backtrack)
                del buffer[extent.keep :]
                if extent.continues:
                    state = TransformState.SKIP_BLOCK
                    balance = extent.balance
            elif directive.kind is DirectiveKind.TEST_SECTION_START:
                state = TransformState.SKIP_TEST_SECTION
            # REMOVE_LINE: the line is simply not emitted.

        while buffer and not buffer[-1].strip():
            buffer.pop()
        return '\n'.join(buffer) + '\n'


def clean_source(text: str, config: SanitizerConfig | None = None) -> str:
    """Transform *text* with the given (or default) settings."""
    return LineTransformer.from_config(config or SanitizerConfig()).transform(text)
