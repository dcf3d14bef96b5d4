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

"""Source language classification by file extension"""

import posixpath
from enum import Enum
from types import MappingProxyType


class LanguageGroup(str, Enum):
    OOP_CLASS = 'oop_class'
    FUNCTIONAL = 'functional'
    WEB_FRONTEND = 'web_frontend'
    DATA = 'data'
    NATIVE = 'native'


DEFAULT_GROUP = LanguageGroup.FUNCTIONAL

EXTENSION_GROUPS = MappingProxyType({
    # Class-centered languages
    'java': LanguageGroup.OOP_CLASS,
    'cs': LanguageGroup.OOP_CLASS,
    'kt': LanguageGroup.OOP_CLASS,
    'scala': LanguageGroup.OOP_CLASS,
    'swift': LanguageGroup.OOP_CLASS,
    'vb': LanguageGroup.OOP_CLASS,
    'php': LanguageGroup.OOP_CLASS,
    'rb': LanguageGroup.OOP_CLASS,
    # Function/module-centered languages
    'js': LanguageGroup.FUNCTIONAL,
    'jsx': LanguageGroup.FUNCTIONAL,
    'ts': LanguageGroup.FUNCTIONAL,
    'tsx': LanguageGroup.FUNCTIONAL,
    'py': LanguageGroup.FUNCTIONAL,
    'pyw': LanguageGroup.FUNCTIONAL,
    'go': LanguageGroup.FUNCTIONAL,
    'rs': LanguageGroup.FUNCTIONAL,
    'dart': LanguageGroup.FUNCTIONAL,
    'r': LanguageGroup.FUNCTIONAL,
    # Markup and styles
    'html': LanguageGroup.WEB_FRONTEND,
    'htm': LanguageGroup.WEB_FRONTEND,
    'css': LanguageGroup.WEB_FRONTEND,
    'scss': LanguageGroup.WEB_FRONTEND,
    'sass': LanguageGroup.WEB_FRONTEND,
    'less': LanguageGroup.WEB_FRONTEND,
    'vue': LanguageGroup.WEB_FRONTEND,
    'svelte': LanguageGroup.WEB_FRONTEND,
    # Data and schema files
    'sql': LanguageGroup.DATA,
    'csv': LanguageGroup.DATA,
    'json': LanguageGroup.DATA,
    'yaml': LanguageGroup.DATA,
    'yml': LanguageGroup.DATA,
    'xml': LanguageGroup.DATA,
    # Compiled native code
    'c': LanguageGroup.NATIVE,
    'cc': LanguageGroup.NATIVE,
    'cpp': LanguageGroup.NATIVE,
    'h': LanguageGroup.NATIVE,
    'hpp': LanguageGroup.NATIVE,
})

CODE_LANGUAGES = MappingProxyType({
    'java': 'Java',
    'js': 'JavaScript',
    'jsx': 'JavaScript',
    'ts': 'TypeScript',
    'tsx': 'TypeScript',
    'py': 'Python',
    'rb': 'Ruby',
    'php': 'PHP',
    'cs': 'C#',
    'go': 'Go',
    'sh': 'Shell',
    'html': 'HTML',
    'css': 'CSS',
    'sql': 'SQL',
    'yml': 'YAML',
    'yaml': 'YAML',
    'json': 'JSON',
    'md': 'Markdown',
    'xml': 'XML',
    'cpp': 'C++',
    'c': 'C',
    'rs': 'Rust',
    'kt': 'Kotlin',
    'swift': 'Swift',
    'dart': 'Dart',
    'r': 'R',
})


def file_extension(filename: str) -> str:
    """Lower-cased final extension; a name without a dot is its own extension"""
    basename = posixpath.basename(filename)
    return basename.rsplit('.', 1)[-1].lower()


def language_group_for(filename: str) -> LanguageGroup:
    return EXTENSION_GROUPS.get(file_extension(filename), DEFAULT_GROUP)


def code_language_for(filename: str) -> str:
    """Display name of the source language, e.g. 'JavaScript' for a .js file"""
    extension = file_extension(filename)
    return CODE_LANGUAGES.get(extension, extension.upper())
