# Copyright 2025-present CodeScribe Authors. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Core of the documentation synchronization engine.

Command parsing, change-set filtering, report rendering and the
orchestrating DocumentationGenerator.
"""

from .command_parser import CommandParser, CommandSpec, OptionSpec
from .file_filter import FileFilter
from .generator import DocumentationGenerator, RunReport

__all__ = [
    # Parsing
    'CommandParser',
    'CommandSpec',
    'OptionSpec',
    # Filtering
    'FileFilter',
    # Orchestration
    'DocumentationGenerator',
    'RunReport',
]
