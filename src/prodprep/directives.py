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

"""Recognize production directives on a single source line.

A directive is a magic comment that tells the transformer to change the
code around it before a production build::

    let now = 1736899200; // CRITICAL: Remove line in production!
    // CRITICAL: Add line in production!let now = Clock::get()?.unix_timestamp;
    }; // CRITICAL: Remove block in production!
    #[cfg(test)]

Markers are plain, case-sensitive substrings.  A line is checked against
them in a fixed precedence order (add, remove line, remove block, test
section) so a line that happens to contain more than one marker resolves
the same way every time.  Test-section tokens only count when they start
the line after leading whitespace is trimmed.
"""

from __future__ import annotations

from prodprep._types import Directive, DirectiveKind
from prodprep.config import (
    LEGACY_ADD_MARKER,
    LEGACY_REMOVE_MARKER,
    MarkerConfig,
    SanitizerConfig,
)

__all__ = [
    'DirectiveLexer',
]


class DirectiveLexer:
    """Classify source lines by the directive they carry.

    Args:
        markers: Marker texts for the line directives.
        test_section_markers: Tokens that open a test-only section.
        legacy_markers: Also accept the older ``Add in production!`` and
            ``Remove in production!`` spellings. They are tried after
            the current markers.
    """

    def __init__(
        self,
        markers: MarkerConfig | None = None,
        test_section_markers: tuple[str, ...] = ('#[cfg(test)]',),
        *,
        legacy_markers: bool = False,
    ) -> None:
        markers = markers or MarkerConfig()
        self._add_markers: tuple[str, ...] = (markers.add_line,)
        self._remove_line_markers: tuple[str, ...] = (markers.remove_line,)
        if legacy_markers:
            self._add_markers += (LEGACY_ADD_MARKER,)
            self._remove_line_markers += (LEGACY_REMOVE_MARKER,)
        self._remove_block_marker = markers.remove_block
        self._test_section_markers = test_section_markers

    @classmethod
    def from_config(cls, config: SanitizerConfig) -> DirectiveLexer:
        """Build a lexer from resolved settings."""
        return cls(
            config.markers,
            config.test_section_markers,
            legacy_markers=config.legacy_markers,
        )

    def lex(self, line: str) -> Directive | None:
        """Return the directive carried by *line*, or ``None``.

        For an add directive the payload is everything after the marker,
        stripped.  ``!`` characters in the payload are kept, so macros
        like ``require!(...)`` survive injection.
        """
        for marker in self._add_markers:
            index = line.find(marker)
            if index != -1:
                payload = line[index + len(marker) :].strip()
                return Directive(DirectiveKind.ADD_LINE, payload)
        if any(marker in line for marker in self._remove_line_markers):
            return Directive(DirectiveKind.REMOVE_LINE)
        if self._remove_block_marker in line:
            return Directive(DirectiveKind.REMOVE_BLOCK)
        if self.is_test_section_start(line):
            return Directive(DirectiveKind.TEST_SECTION_START)
        return None

    def is_test_section_start(self, line: str) -> bool:
        """Return ``True`` if *line* opens a test-only section.

        Everything from such a line to the end of the file is dropped.
        There is no closing marker.
        """
        stripped = line.lstrip()
        return any(stripped.startswith(token) for token in self._test_section_markers)
