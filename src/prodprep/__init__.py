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

"""prodprep: directive-driven source sanitizer for production builds."""

from prodprep._types import (
    BatchReport,
    BatchStats,
    Directive,
    DirectiveKind,
    FileOutcome,
    FileStatus,
)
from prodprep.batch import process_patterns, run_batch
from prodprep.config import SanitizerConfig, load_config
from prodprep.transform import LineTransformer, clean_source

__all__ = [
    'BatchReport',
    'BatchStats',
    'Directive',
    'DirectiveKind',
    'FileOutcome',
    'FileStatus',
    'LineTransformer',
    'SanitizerConfig',
    'clean_source',
    'load_config',
    'process_patterns',
    'run_batch',
]
