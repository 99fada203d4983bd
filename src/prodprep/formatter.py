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

"""Optional formatting of cleaned source through an external tool.

Removing and injecting lines leaves indentation that no longer matches
the surrounding code.  A formatter such as ``rustfmt`` can tidy that up,
but it is strictly best effort: if the tool is missing, exits non-zero,
times out or prints nothing, the cleaned text is used as-is and a
warning is logged.
"""

from __future__ import annotations

import subprocess  # noqa: S404 - intentional: runs the configured formatter.
from collections.abc import Sequence

from prodprep.logging import get_logger

__all__ = [
    'format_source',
]

logger = get_logger(__name__)


def format_source(
    text: str,
    command: Sequence[str],
    *,
    timeout: float = 30.0,
) -> str:
    """Pipe *text* through *command* and return its stdout.

    Args:
        text: Cleaned source text.
        command: Formatter argv; reads source on stdin, writes the
            formatted source to stdout. Empty means no formatting.
        timeout: Seconds to wait for the formatter.

    Returns:
        The formatted text, or *text* unchanged on any failure.
    """
    if not command:
        return text

    try:
        proc = subprocess.run(  # noqa: S603
            list(command),
            input=text,
            capture_output=True,
            text=True,
            encoding='utf-8',
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning('formatter_failed', command=command[0], error=str(exc))
        return text

    if proc.returncode != 0:
        logger.warning(
            'formatter_failed',
            command=command[0],
            returncode=proc.returncode,
            stderr=proc.stderr.strip()[:500],
        )
        return text

    if not proc.stdout.strip():
        logger.warning('formatter_empty_output', command=command[0])
        return text

    return proc.stdout
