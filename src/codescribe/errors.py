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

"""Custom exceptions for documentation synchronization."""

from typing import Optional


class CodeScribeError(Exception):
    """Base exception for CodeScribe errors."""

    pass


class InvalidCommandError(CodeScribeError):
    """Trigger comment names a known command with invalid options."""

    def __init__(self, command: str, errors: list):
        self.command = command
        self.errors = list(errors)
        super().__init__(f"Invalid !{command} command: {'; '.join(self.errors)}")


class NotFoundError(CodeScribeError, FileNotFoundError):
    """Requested PR, ref or file does not exist."""

    pass


class GitHubAPIError(CodeScribeError):
    """GitHub API returned an error status."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class AIProviderError(CodeScribeError):
    """AI backend failed to produce documentation."""

    kind = "provider error"


class AIRateLimitError(AIProviderError):
    """AI backend rejected the request because of rate limits or quota."""

    kind = "rate limited"


class AISafetyBlockError(AIProviderError):
    """AI backend blocked the prompt or the response with its safety filters."""

    kind = "blocked by safety filters"


class BranchConflictError(CodeScribeError):
    """Documentation branch could not be created because the ref already exists."""

    pass


class CommitBatchError(CodeScribeError):
    """Single-commit batch write failed."""

    pass


class PullRequestExistsError(GitHubAPIError):
    """A pull request already exists between the docs branch and its base."""

    pass


class CatastrophicError(CodeScribeError):
    """Run-level failure: the whole synchronization pass is aborted."""

    def __init__(self, message: str, pr_number: Optional[int] = None):
        self.pr_number = pr_number
        super().__init__(message)
