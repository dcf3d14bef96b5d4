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

"""Markdown bodies for PR comments, docs PR descriptions and commit messages"""

from typing import List, Optional

from codescribe.models import ProcessingResult


def _mention(user: str) -> str:
    return f"@{user} " if user else ''


def _result_sections(result: ProcessingResult, heading: str = "##") -> List[str]:
    sections = [
        (f"Generated Documentation ({len(result.generated)})", [f"- `{p}`" for p in result.generated]),
        (f"Updated Documentation ({len(result.updated)})", [f"- `{p}`" for p in result.updated]),
        (f"Deleted Documentation ({len(result.deleted)})", [f"- `{p}`" for p in result.deleted]),
        (f"Skipped ({len(result.skipped)})", [f"- `{s.doc}`: {s.reason}" for s in result.skipped]),
        (f"Failed Files ({len(result.failed)})", [f"- `{f.file}`: {f.reason}" for f in result.failed]),
    ]
    lines = []
    for title, entries in sections:
        if entries:
            lines += [f"{heading} {title}", *entries, ""]
    return lines


def build_commit_message(command: str, pr_number: int, result: ProcessingResult) -> str:
    counts = result.counts()
    parts = [f"{counts[k]} {k}" for k in ('generated', 'updated', 'deleted') if counts[k]]
    summary = ', '.join(parts) if parts else 'no changes'
    return f"docs: Sync {command} documentation for PR #{pr_number} ({summary})"


def build_pr_body(command: str, pr_number: int, result: ProcessingResult) -> str:
    lines = [
        f"# {command} Documentation Generation",
        "",
        f"Documentation was automatically generated for PR #{pr_number}.",
        "",
        *_result_sections(result),
        "This documentation was automatically generated. Please review and modify the content if needed.",
    ]
    return "\n".join(lines)


def build_docs_pr_update_comment(pr_number: int, result: ProcessingResult) -> str:
    lines = [
        f"🔄 Documentation updated from a new request on PR #{pr_number}.",
        "",
        *_result_sections(result, heading="####"),
    ]
    return "\n".join(lines).rstrip() + "\n"


def build_summary_comment(
    user: str,
    result: ProcessingResult,
    docs_pr_url: Optional[str] = None,
    docs_pr_exists: bool = False,
) -> str:
    """
    Final comment on the originating PR.

    Success when anything was generated, updated or deleted; failure when
    nothing succeeded but something failed; up to date otherwise.
    """
    counts = result.counts()

    if result.succeeded_count > 0:
        lines = [f"✅ {_mention(user)}Documentation generation completed.", ""]
        lines.append(f"Generated: {counts['generated']}, Updated: {counts['updated']}, "
                     f"Deleted: {counts['deleted']}, Skipped: {counts['skipped']}, Failed: {counts['failed']}")
        if docs_pr_url:
            lines += ["", f"Documentation PR: {docs_pr_url}"]
        elif docs_pr_exists:
            lines += ["", "A documentation PR already exists for this branch."]
        if result.failed:
            lines += ["", f"⚠️ {len(result.failed)} files failed to process."]
        return "\n".join(lines)

    if result.failed:
        return "\n".join([
            f"❌ {_mention(user)}Documentation generation failed.",
            "",
            f"Failed to process all files ({len(result.failed)}).",
            f"Main error: {result.failed[0].reason}",
        ])

    lines = [f"✅ {_mention(user)}Documentation is already up to date."]
    if counts['skipped']:
        lines += ["", f"All {counts['skipped']} documentation files are up to date; nothing was changed."]
    if docs_pr_url:
        lines += ["", f"Documentation PR: {docs_pr_url}"]
    return "\n".join(lines)


def build_not_merged_comment(user: str) -> str:
    return (f"⚠️ {_mention(user)}Documentation generation is only possible on merged PRs. "
            f"Please merge the PR and try again.")


def build_no_files_comment(user: str) -> str:
    return f"ℹ️ {_mention(user)}No files to document. Please check your scope option."


def build_invalid_command_comment(user: str, errors: List[str], help_text: str) -> str:
    lines = [f"⚠️ {_mention(user)}Invalid command options:", ""]
    lines += [f"- {error}" for error in errors]
    lines += ["", help_text]
    return "\n".join(lines)


def build_error_comment(user: str, message: str) -> str:
    return f"❌ {_mention(user)}An error occurred during documentation generation: {message}"
