#!/usr/bin/env python3
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

"""Domain models for CodeScribe"""

import posixpath
import re
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


DOCS_ROOT = 'docs'
DOC_EXTENSION = '.adoc'

_SCOPE_RE = re.compile(r'^(all|include:\S+|exclude:\S+)$')


def doc_path(source_path: str, command: str) -> str:
    """
    Derive the documentation path for a source file.

    The final extension is stripped and the result is placed under
    ``docs/<command>/``, mirroring the source directory structure:

        >>> doc_path('src/a.js', 'doxai')
        'docs/doxai/src/a.adoc'
    """
    normalized = source_path.lstrip('/')
    if normalized.startswith('./'):
        normalized = normalized[2:]
    stem, _ext = posixpath.splitext(normalized)
    return f"{DOCS_ROOT}/{command}/{stem}{DOC_EXTENSION}"


def docs_branch_name(command: str, pr_number: int) -> str:
    """Deterministic docs branch name for a source PR"""
    return f"docs/{command}-pr-{pr_number}"


def docs_pr_title(command: str, pr_number: int) -> str:
    """Title used both to create and to rediscover the docs PR"""
    return f"docs: Generate documentation for {command} (PR #{pr_number})"


class ScopeKind(str, Enum):
    ALL = 'all'
    INCLUDE = 'include'
    EXCLUDE = 'exclude'


@dataclass(frozen=True)
class ScopeExpr:
    """Scope expression: all | include:<patterns> | exclude:<patterns>"""
    kind: ScopeKind = ScopeKind.ALL
    patterns: Tuple[str, ...] = ()

    @classmethod
    def all(cls) -> "ScopeExpr":
        return cls(ScopeKind.ALL, ())

    @classmethod
    def parse(cls, text: str) -> Optional["ScopeExpr"]:
        """Parse a user supplied scope string, None if the form is not recognized"""
        if not isinstance(text, str):
            return None
        text = text.strip()
        if not _SCOPE_RE.match(text):
            return None
        if text == 'all':
            return cls.all()

        kind_str, raw_patterns = text.split(':', 1)
        patterns = tuple(p.strip() for p in raw_patterns.split(',') if p.strip())
        if not patterns:
            return None
        return cls(ScopeKind(kind_str), patterns)

    def __str__(self) -> str:
        if self.kind == ScopeKind.ALL:
            return 'all'
        return f"{self.kind.value}:{','.join(self.patterns)}"


@dataclass(frozen=True)
class CommandOptions:
    scope: ScopeExpr = field(default_factory=ScopeExpr.all)
    lang: str = 'en'
    # Raw text of --scope as typed, kept for error reporting
    raw_scope: str = 'all'


@dataclass(frozen=True)
class Command:
    """Parsed trigger comment - immutable once created"""
    name: str
    options: CommandOptions
    valid: bool = True
    errors: Tuple[str, ...] = ()
    raw: str = ''

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'scope': str(self.options.scope),
            'lang': self.options.lang,
            'valid': self.valid,
            'errors': list(self.errors),
        }


@dataclass(frozen=True)
class ChangedFile:
    """One entry of a PR file diff"""
    path: str
    status: str = 'modified'  # added, modified, removed, renamed, copied, changed, unchanged
    additions: int = 0
    deletions: int = 0
    previous_path: Optional[str] = None

    @property
    def is_removed(self) -> bool:
        return self.status == 'removed'

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ChangedFile":
        """Create instance from a GitHub `pulls/{n}/files` entry"""
        return cls(
            path=data['filename'],
            status=data.get('status', 'modified'),
            additions=data.get('additions', 0),
            deletions=data.get('deletions', 0),
            previous_path=data.get('previous_filename'),
        )


class DocOrigin(str, Enum):
    DOCS_BRANCH = 'docs_branch'
    BASE_BRANCH = 'base_branch'
    NONE = 'none'


@dataclass
class DocArtifact:
    path: str
    exists: bool = False
    content: Optional[str] = None
    origin: DocOrigin = DocOrigin.NONE


@dataclass
class PRDetails:
    number: int
    title: str = ''
    body: str = ''
    author: str = ''
    created_at: str = ''
    updated_at: str = ''
    merged: bool = False
    merged_at: Optional[str] = None
    merged_by: Optional[str] = None
    base: str = 'main'
    head: str = ''
    merge_commit_sha: Optional[str] = None
    html_url: str = ''

    @property
    def source_ref(self) -> str:
        """Ref the merged source is read from; the head branch may already be deleted"""
        return self.merge_commit_sha or self.head

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PRDetails":
        """Create instance from a GitHub `pulls/{n}` payload"""
        merged_by = data.get('merged_by') or {}
        return cls(
            number=data['number'],
            title=data.get('title') or '',
            body=data.get('body') or '',
            author=(data.get('user') or {}).get('login', ''),
            created_at=data.get('created_at') or '',
            updated_at=data.get('updated_at') or '',
            merged=bool(data.get('merged')),
            merged_at=data.get('merged_at'),
            merged_by=merged_by.get('login'),
            base=data['base']['ref'],
            head=data['head']['ref'],
            merge_commit_sha=data.get('merge_commit_sha'),
            html_url=data.get('html_url') or '',
        )


@dataclass(frozen=True)
class DocsPRRef:
    number: int
    title: str
    url: str
    head_ref: str
    base_ref: str


@dataclass
class DocsBranchState:
    branch_name: str
    created: bool = False
    existing_pr: Optional[DocsPRRef] = None


@dataclass(frozen=True)
class FileWrite:
    path: str
    content: str


@dataclass(frozen=True)
class SkippedEntry:
    source: str
    doc: str
    reason: str


@dataclass(frozen=True)
class FailedEntry:
    file: str
    reason: str


@dataclass
class ProcessingResult:
    """
    Accumulator for one synchronization run.

    Mutated only by the orchestrator while files are processed and
    committed; `freeze()` is called once the run is reported.
    """
    generated: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    failed: List[FailedEntry] = field(default_factory=list)
    files_to_write: List[FileWrite] = field(default_factory=list)
    files_to_delete: List[str] = field(default_factory=list)
    _frozen: bool = field(default=False, repr=False)

    def _check_mutable(self):
        if self._frozen:
            raise RuntimeError("ProcessingResult is frozen after the run is reported")

    def record_write(self, doc: str, content: str, is_update: bool):
        self._check_mutable()
        self.files_to_write.append(FileWrite(doc, content))
        (self.updated if is_update else self.generated).append(doc)

    def record_delete(self, doc: str):
        self._check_mutable()
        self.files_to_delete.append(doc)
        self.deleted.append(doc)

    def record_skip(self, source: str, doc: str, reason: str):
        self._check_mutable()
        self.skipped.append(SkippedEntry(source, doc, reason))

    def record_failure(self, file: str, reason: str):
        self._check_mutable()
        self.failed.append(FailedEntry(file, reason))

    def mark_write_failed(self, doc: str, reason: str):
        """Move a queued write from generated/updated to failed"""
        self._check_mutable()
        for bucket in (self.generated, self.updated):
            if doc in bucket:
                bucket.remove(doc)
        self.failed.append(FailedEntry(doc, reason))

    def mark_delete_failed(self, doc: str, reason: Optional[str]):
        """Drop a queued delete; a reason of None means the doc was already gone"""
        self._check_mutable()
        if doc in self.deleted:
            self.deleted.remove(doc)
        if reason is not None:
            self.failed.append(FailedEntry(doc, reason))

    @property
    def has_changes(self) -> bool:
        return bool(self.files_to_write or self.files_to_delete)

    @property
    def succeeded_count(self) -> int:
        return len(self.generated) + len(self.updated) + len(self.deleted)

    def counts(self) -> Dict[str, int]:
        return {
            'generated': len(self.generated),
            'updated': len(self.updated),
            'deleted': len(self.deleted),
            'skipped': len(self.skipped),
            'failed': len(self.failed),
        }

    def freeze(self):
        self._frozen = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop('_frozen', None)
        data.pop('files_to_write', None)
        return data
