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
Changed-file filtering.

Two stages: drop files that are not worth documenting (extension whitelist,
special filenames, exclude substrings), then apply the user's scope
expression. The first stage runs regardless of scope.

Include patterns match by substring against the basename or the full path,
so `include:api` also picks up `src/rapid.js`. This is the documented
behavior users rely on and is kept as is.
"""

import fnmatch
import posixpath
from typing import Dict, Iterable, List, Union
from loguru import logger

from codescribe.models import ChangedFile, ScopeExpr, ScopeKind


DOCUMENTABLE_EXTENSIONS = frozenset([
    # Programming languages
    'js', 'jsx', 'ts', 'tsx', 'py', 'pyw', 'java', 'kt', 'scala',
    'cs', 'vb', 'cpp', 'c', 'h', 'hpp', 'rs', 'go', 'rb', 'php',
    'swift', 'dart', 'r', 'sql',
    # Scripts
    'sh', 'bash', 'zsh', 'fish', 'ps1', 'psm1', 'bat', 'cmd',
    # Web
    'html', 'htm', 'css', 'scss', 'sass', 'less', 'vue', 'svelte',
    # Config
    'json', 'yaml', 'yml', 'toml', 'ini', 'conf', 'xml',
    # Docs
    'md', 'rst', 'adoc', 'txt',
    # Build
    'makefile', 'cmake', 'gradle', 'maven',
])

# Checked as substrings of the full path; wins over the extension whitelist
EXCLUDE_PATTERNS = (
    'node_modules/', 'dist/', 'build/', '.next/', '.nuxt/',
    'target/', 'bin/', 'obj/', '.git/', '.vscode/', '.idea/',
    '.tmp', '.temp', '.cache', '.log',
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico',
    '.pdf', '.zip', '.tar', '.gz', '.rar',
    '.exe', '.dll', '.so', '.dylib',
    '.env', '.env.local', '.env.production',
    'package-lock.json', 'yarn.lock', 'composer.lock',
    '.json', '.yaml', '.yml', '.toml', '.ini', '.conf', '.xml',
    '.md', '.rst', '.adoc', '.txt',
    '.sh', '.bash', '.zsh', '.fish', '.ps1', '.psm1', '.bat', '.cmd',
)

SPECIAL_FILES = frozenset([
    'dockerfile', 'makefile', 'rakefile', 'gemfile',
    'podfile', 'vagrantfile', 'gruntfile', 'gulpfile',
])


def matches_pattern(path: str, pattern: str) -> bool:
    """
    Check a file against one scope pattern.

    Exact basename match, substring of basename or full path, or a `*` glob
    anchored to the whole basename.
    """
    basename = posixpath.basename(path)
    if basename == pattern:
        return True
    if pattern in basename or pattern in path:
        return True
    if '*' in pattern:
        # only '*' is a wildcard; other glob metacharacters are literal
        escaped = pattern.replace('[', '[[]').replace('?', '[?]')
        return fnmatch.fnmatchcase(basename, escaped)
    return False


class FileFilter:
    """Select the changed files that should be documented"""

    def __init__(
        self,
        documentable_extensions: Iterable[str] = DOCUMENTABLE_EXTENSIONS,
        exclude_patterns: Iterable[str] = EXCLUDE_PATTERNS,
        special_files: Iterable[str] = SPECIAL_FILES,
    ):
        self.documentable_extensions = frozenset(documentable_extensions)
        self.exclude_patterns = tuple(exclude_patterns)
        self.special_files = frozenset(special_files)

    def should_document_file(self, path: str) -> bool:
        if self.matches_exclude_pattern(path):
            logger.debug(f"Excluding {path} - matches exclude pattern")
            return False

        basename = posixpath.basename(path).lower()
        if basename in self.special_files:
            logger.debug(f"Including {path} - special file")
            return True

        extension = posixpath.splitext(basename)[1].lstrip('.')
        if extension not in self.documentable_extensions:
            logger.debug(f"Excluding {path} - not a documentable file type")
            return False
        return True

    def matches_exclude_pattern(self, path: str) -> bool:
        return any(pattern in path for pattern in self.exclude_patterns)

    def filter_by_scope(
        self,
        files: List[ChangedFile],
        scope: Union[ScopeExpr, str, None] = None,
    ) -> List[ChangedFile]:
        """
        Filter files by documentability, then by scope.

        Args:
            files: Changed files of the PR
            scope: ScopeExpr or raw scope string ('all', 'include:a,b', 'exclude:c')

        Returns:
            Active files followed by removed files, each in input order
        """
        scope_expr = self._resolve_scope(scope)
        logger.info(f"Filtering {len(files)} files with scope: {scope_expr}")

        active = [f for f in files if not f.is_removed and self.should_document_file(f.path)]
        removed = [f for f in files if f.is_removed and self.should_document_file(f.path)]
        logger.info(f"Found {len(active)} documentable files and {len(removed)} deleted files")

        if scope_expr.kind != ScopeKind.ALL:
            include = scope_expr.kind == ScopeKind.INCLUDE
            active = self.filter_by_patterns(active, scope_expr.patterns, include)
            removed = self.filter_by_patterns(removed, scope_expr.patterns, include)

        logger.info(f"Final result: {len(active)} active files, {len(removed)} deleted files")
        return active + removed

    def filter_by_patterns(self, files: List[ChangedFile], patterns: Iterable[str], include: bool) -> List[ChangedFile]:
        patterns = list(patterns)
        result = []
        for f in files:
            matched = any(matches_pattern(f.path, p) for p in patterns)
            if matched == include:
                result.append(f)
        return result

    def _resolve_scope(self, scope: Union[ScopeExpr, str, None]) -> ScopeExpr:
        if scope is None:
            return ScopeExpr.all()
        if isinstance(scope, ScopeExpr):
            return scope
        parsed = ScopeExpr.parse(scope)
        if parsed is None:
            logger.warning(f"Invalid scope: {scope}, returning all documentable files")
            return ScopeExpr.all()
        return parsed

    def get_filter_stats(self, original: List[ChangedFile], filtered: List[ChangedFile]) -> Dict:
        """Summary of a filtering pass, for logging"""
        by_extension: Dict[str, int] = {}
        by_status = {'added': 0, 'modified': 0, 'removed': 0}

        for f in filtered:
            if not f.is_removed:
                ext = posixpath.splitext(f.path)[1].lstrip('.') or 'no-extension'
                by_extension[ext] = by_extension.get(ext, 0) + 1
            if f.status in by_status:
                by_status[f.status] += 1

        removed = by_status['removed']
        return {
            'total': len(original),
            'included': len(filtered),
            'excluded': len(original) - len(filtered),
            'active': len(filtered) - removed,
            'deleted': removed,
            'by_extension': by_extension,
            'by_status': by_status,
        }
