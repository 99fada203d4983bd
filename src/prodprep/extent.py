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

"""Work out which lines a block-removal directive deletes.

A ``Remove block`` directive removes code on both sides of the line that
carries it::

    let now = match unix_timestamp {          ← backward boundary (removed)
        Some(ts) => ts,                       ← removed
        None => Clock::get()?.unix_timestamp, ← removed
    }; // CRITICAL: Remove block in production!

- **Backward**: scan the already-emitted lines from the end for the first
  one whose stripped text ends in ``;``, ``{`` or ``)``.  That line and
  everything after it are dropped.
- **Forward**: start from the directive line's own bracket balance and
  keep consuming raw lines until the running balance drops to zero or
  below.  The terminating line is consumed too.

Both directions are lexical.  Brackets inside string literals or comments
are counted like any other, and the backward scan can take an unrelated
statement that happens to end in one of the boundary characters.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

__all__ = [
    'BlockExtent',
    'backward_boundary',
    'bracket_balance',
    'resolve_block_extent',
]

_OPENERS: Final[frozenset[str]] = frozenset('{([')
_CLOSERS: Final[frozenset[str]] = frozenset('})]')
_BOUNDARY_ENDINGS: Final[tuple[str, ...]] = (';', '{', ')')


@dataclass(frozen=True)
class BlockExtent:
    """Where a block removal starts and how long it runs.

    Attributes:
        keep: Number of already-emitted lines to keep. The buffer is
            truncated to this length.
        balance: Bracket balance after the directive line. A positive
            value means the block continues on the following lines.
    """

    keep: int
    balance: int

    @property
    def continues(self) -> bool:
        """``True`` if following raw lines must be consumed."""
        return self.balance > 0


def bracket_balance(line: str) -> int:
    """Return opening minus closing brackets on *line*.

    Braces, parentheses and square brackets are counted together.
    """
    balance = 0
    for char in line:
        if char in _OPENERS:
            balance += 1
        elif char in _CLOSERS:
            balance -= 1
    return balance


def backward_boundary(buffer: Sequence[str]) -> int | None:
    """Return the index of the nearest statement boundary in *buffer*.

    Scans from the last line backwards for a line whose stripped text ends
    in ``;``, ``{`` or ``)``.

    Returns:
        The index of that line, or ``None`` if there is none.
    """
    for index in range(len(buffer) - 1, -1, -1):
        if buffer[index].strip().endswith(_BOUNDARY_ENDINGS):
            return index
    return None


def resolve_block_extent(
    directive_line: str,
    buffer: Sequence[str],
    *,
    backtrack: bool = True,
) -> BlockExtent:
    """Compute the extent of a block removal.

    Args:
        directive_line: The raw line carrying the block directive.
        buffer: Lines emitted so far.
        backtrack: When ``False`` nothing already emitted is removed.

    Returns:
        The number of buffered lines to keep and the balance to carry
        into the following lines.
    """
    keep = len(buffer)
    if backtrack:
        boundary = backward_boundary(buffer)
        if boundary is not None:
            keep = boundary
    return BlockExtent(keep=keep, balance=bracket_balance(directive_line))
