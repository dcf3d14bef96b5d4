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
DocumentationGenerator: synchronize per-file documentation for a merged PR using LangGraph

Workflow:
    validate -> resolve_branch -> process_files -> commit -> publish -> report

`validate` and `resolve_branch` may end the run early (ignored event,
invalid options, unmerged PR, nothing to document). Any exception escaping a
node aborts the run and is re-raised as CatastrophicError after a
best-effort error comment on the originating PR.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, TypedDict
from loguru import logger

from langgraph.graph import StateGraph, END

from codescribe.agents.ai_gateway import AIGateway, clean_generated_doc
from codescribe.agents.prompts import PromptBuilder
from codescribe.core import reporting
from codescribe.core.command_parser import CommandParser
from codescribe.core.file_filter import FileFilter
from codescribe.errors import (
    AIProviderError,
    CatastrophicError,
    CommitBatchError,
    GitHubAPIError,
    InvalidCommandError,
    NotFoundError,
    PullRequestExistsError,
)
from codescribe.models import (
    ChangedFile,
    Command,
    DocArtifact,
    DocOrigin,
    DocsBranchState,
    PRDetails,
    ProcessingResult,
    doc_path,
    docs_branch_name,
    docs_pr_title,
)
from codescribe.tools.event import CommentEvent
from codescribe.tools.github_client import GitHubClient


UP_TO_DATE = 'Documentation is up to date'


# Define state schema for the workflow
class SyncState(TypedDict, total=False):
    """State for one documentation synchronization run"""
    event: CommentEvent             # Input: triggering comment event
    command: Command                # Parsed trigger command
    pr: PRDetails                   # Originating PR
    files: List[ChangedFile]        # Filtered change set (active first, then removed)
    branch: DocsBranchState         # Resolved docs branch
    result: ProcessingResult        # Per-file outcomes and commit queues
    committed: bool                 # Whether anything landed on the docs branch
    docs_pr_url: Optional[str]
    docs_pr_exists: bool            # create_pr reported an already-open PR
    status: str                     # Set when the run ends; early exits set it before END


@dataclass
class RunReport:
    status: str
    command: Optional[str] = None
    pr_number: Optional[int] = None
    docs_branch: Optional[str] = None
    docs_pr_url: Optional[str] = None
    result: Optional[ProcessingResult] = None

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'command': self.command,
            'pr_number': self.pr_number,
            'docs_branch': self.docs_branch,
            'docs_pr_url': self.docs_pr_url,
            'result': self.result.to_dict() if self.result else None,
        }


class DocumentationGenerator:
    """
    LangGraph-based orchestrator for documentation synchronization.

    Files are processed strictly one after another; all writes are batched
    into one commit on the docs branch, with per-file commits as fallback.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        ai_gateway: AIGateway,
        prompt_builder: Optional[PromptBuilder] = None,
        command_parser: Optional[CommandParser] = None,
        file_filter: Optional[FileFilter] = None,
    ):
        self.github = github_client
        self.ai = ai_gateway
        self.prompts = prompt_builder or PromptBuilder()
        self.parser = command_parser or CommandParser()
        self.file_filter = file_filter or FileFilter()

        self.workflow = self._build_workflow()
        logger.debug("DocumentationGenerator workflow built")

    def _build_workflow(self):
        """Build the LangGraph workflow"""
        workflow = StateGraph(SyncState)

        # Add nodes
        workflow.add_node("validate", self._validate)
        workflow.add_node("resolve_branch", self._resolve_branch)
        workflow.add_node("process_files", self._process_files)
        workflow.add_node("commit", self._commit)
        workflow.add_node("publish", self._publish)
        workflow.add_node("report", self._report)

        # Define edges
        workflow.set_entry_point("validate")
        workflow.add_conditional_edges(
            "validate",
            self._continue_unless_done,
            {"continue": "resolve_branch", "done": END}
        )
        workflow.add_conditional_edges(
            "resolve_branch",
            self._continue_unless_done,
            {"continue": "process_files", "done": END}
        )
        workflow.add_edge("process_files", "commit")
        workflow.add_edge("commit", "publish")
        workflow.add_edge("publish", "report")
        workflow.add_edge("report", END)

        return workflow.compile()

    def _continue_unless_done(self, state: SyncState) -> str:
        return "done" if state.get('status') else "continue"

    # ============ Entry point ============

    def run(self, event: CommentEvent) -> RunReport:
        """
        Run one synchronization pass for a comment event.

        Raises:
            CatastrophicError: If the run could not complete
        """
        try:
            state = self.workflow.invoke({'event': event})
        except Exception as e:
            logger.error(f"Documentation generation failed: {e}")
            self._post_error_comment(event, e)
            if isinstance(e, CatastrophicError):
                raise
            raise CatastrophicError(str(e), pr_number=event.pr_number) from e

        command = state.get('command')
        branch = state.get('branch')
        return RunReport(
            status=state['status'],
            command=command.name if command else None,
            pr_number=event.pr_number,
            docs_branch=branch.branch_name if branch else None,
            docs_pr_url=state.get('docs_pr_url'),
            result=state.get('result'),
        )

    def _post_error_comment(self, event: CommentEvent, error: Exception):
        if not event.is_pr_comment:
            return
        try:
            self.github.create_comment(event.pr_number, reporting.build_error_comment(event.sender, str(error)))
        except Exception as comment_error:
            logger.error(f"Failed to create error comment: {comment_error}")

    # ============ Node implementations ============

    def _validate(self, state: SyncState) -> SyncState:
        """
        Node 1: Check the event and parse the command

        Ends the run silently for anything that is not a recognized command on
        a PR; answers invalid options with the help text.
        """
        event = state['event']
        logger.info("[1/6] Validating trigger comment...")

        if not event.is_pr_comment:
            logger.info("  ⊘ This event is not a PR comment")
            return {'status': 'ignored'}

        command = self.parser.parse(event.comment_body)
        if command is None:
            logger.info("  ⊘ Not a documentation generation command")
            return {'status': 'ignored'}

        if not command.valid:
            error = InvalidCommandError(command.name, command.errors)
            logger.warning(f"  ✗ {error}")
            self.github.create_comment(
                event.pr_number,
                reporting.build_invalid_command_comment(
                    event.sender, error.errors, self.parser.get_help(command.name)
                ),
            )
            return {'command': command, 'status': 'invalid_command'}

        if event.comment_id:
            try:
                self.github.add_reaction(event.comment_id, 'eyes')
            except Exception as e:
                logger.warning(f"  Could not add reaction to comment {event.comment_id}: {e}")

        logger.info(f"  ✓ Command: {command.to_dict()}")
        return {'command': command}

    def _resolve_branch(self, state: SyncState) -> SyncState:
        """Node 2: Check the PR, filter its files and resolve the docs branch"""
        event, command = state['event'], state['command']
        pr_number = event.pr_number
        logger.info(f"[2/6] Resolving PR #{pr_number}...")

        pr = self.github.get_pr_details(pr_number)
        if not pr.merged:
            logger.info("  ⊘ PR is not merged")
            self.github.create_comment(pr_number, reporting.build_not_merged_comment(event.sender))
            return {'pr': pr, 'status': 'not_merged'}

        changed = self.github.get_changed_files(pr_number)
        files = self.file_filter.filter_by_scope(changed, command.options.scope)
        logger.info(f"  Filter stats: {self.file_filter.get_filter_stats(changed, files)}")
        if not files:
            logger.info("  ⊘ No files to process")
            self.github.create_comment(pr_number, reporting.build_no_files_comment(event.sender))
            return {'pr': pr, 'files': files, 'status': 'no_files'}

        branch = self.github.create_or_get_docs_branch(
            pr.base,
            docs_branch_name(command.name, pr_number),
            pr_number,
            command.name,
        )
        logger.info(f"  ✓ Docs branch: {branch.branch_name} "
                    f"({'created' if branch.created else 'reused'})")
        return {'pr': pr, 'files': files, 'branch': branch}

    def _process_files(self, state: SyncState) -> SyncState:
        """Node 3: Decide and prepare the documentation change for every file"""
        files, command = state['files'], state['command']
        result = ProcessingResult()
        # doc path -> source file that owns it in this run
        claimed: Dict[str, str] = {}
        logger.info(f"[3/6] Processing {len(files)} files...")

        for i, changed in enumerate(files, 1):
            logger.info(f"  [{i}/{len(files)}] {changed.path} ({changed.status})")
            target = doc_path(changed.path, command.name)
            owner = claimed.setdefault(target, changed.path)
            if owner != changed.path:
                logger.warning(f"  ✗ {target} is already claimed by {owner}")
                if changed.is_removed:
                    result.record_skip(changed.path, target, f"Documentation path is used by {owner}")
                else:
                    result.record_failure(changed.path, f"Documentation path {target} collides with {owner}")
                continue

            try:
                if changed.is_removed:
                    self._process_removed(changed, target, state, result)
                else:
                    self._process_active(changed, target, state, result)
            except AIProviderError as e:
                logger.error(f"  ✗ AI {e.kind} for {changed.path}: {e}")
                result.record_failure(changed.path, f"AI {e.kind}: {e}")
            except Exception as e:
                logger.error(f"  ✗ Error processing file {changed.path}: {e}")
                result.record_failure(changed.path, f"Error occurred: {e}")

        logger.info(f"  ✓ Processed: {result.counts()}")
        return {'result': result}

    def _process_removed(self, changed: ChangedFile, target: str, state: SyncState, result: ProcessingResult):
        branch = state['branch'].branch_name
        if self.github.file_exists(target, branch):
            result.record_delete(target)
            logger.info(f"    Queued deletion of {target}")
        else:
            logger.debug(f"    No documentation to delete for {changed.path}")

    def _process_active(self, changed: ChangedFile, target: str, state: SyncState, result: ProcessingResult):
        command, pr = state['command'], state['pr']
        branch = state['branch'].branch_name

        content = self.github.get_file_content(changed.path, pr.source_ref)
        existing = self._find_existing_doc(target, branch, pr.base)

        if existing.exists and not self.github.has_source_changed(changed.path, target, branch, pr.source_ref):
            logger.info(f"    ⊘ {target} is up to date")
            result.record_skip(changed.path, target, UP_TO_DATE)
            return

        system_prompt, user_prompt = self.prompts.build(
            changed.path, content, pr, command.options.lang,
            existing_doc=existing.content if existing.exists else None,
        )
        if existing.exists:
            logger.info(f"    Updating documentation: {target} (found on {existing.origin.value})")
        else:
            logger.info(f"    Generating documentation: {target}")
        documentation = clean_generated_doc(self.ai.generate(system_prompt, user_prompt))
        result.record_write(target, documentation, is_update=existing.exists)

    def _find_existing_doc(self, target: str, docs_branch: str, base_branch: str) -> DocArtifact:
        """Probe the docs branch first, then the base branch"""
        for ref, origin in ((docs_branch, DocOrigin.DOCS_BRANCH), (base_branch, DocOrigin.BASE_BRANCH)):
            try:
                content = self.github.get_file_content(target, ref)
                return DocArtifact(path=target, exists=True, content=content, origin=origin)
            except NotFoundError:
                continue
        return DocArtifact(path=target)

    def _commit(self, state: SyncState) -> SyncState:
        """
        Node 4: Commit queued writes and deletions

        One batch commit; on failure each entry is committed separately and
        entries that still fail move to the failed list.
        """
        result, command, pr = state['result'], state['command'], state['pr']
        branch = state['branch'].branch_name

        if not result.has_changes:
            logger.info("[4/6] Skipped: no documentation changes to commit")
            return {'committed': False}

        logger.info(f"[4/6] Committing {len(result.files_to_write)} writes and "
                    f"{len(result.files_to_delete)} deletions to {branch}...")
        message = reporting.build_commit_message(command.name, pr.number, result)
        try:
            self.github.commit_multiple_changes(branch, result.files_to_write, result.files_to_delete, message)
            logger.info("  ✓ Batch commit completed")
            return {'committed': True}
        except CommitBatchError as e:
            logger.warning(f"  Batch commit failed, falling back to individual commits: {e}")

        committed = False
        for write in list(result.files_to_write):
            try:
                self.github.commit_file(branch, write.path, write.content, message)
                committed = True
            except Exception as e:
                logger.error(f"  ✗ Failed to commit {write.path}: {e}")
                result.mark_write_failed(write.path, f"Commit failed: {e}")

        for path in list(result.files_to_delete):
            try:
                self.github.delete_file(branch, path, message)
                committed = True
            except NotFoundError:
                logger.debug(f"  {path} already gone")
                result.mark_delete_failed(path, None)
            except Exception as e:
                logger.error(f"  ✗ Failed to delete {path}: {e}")
                result.mark_delete_failed(path, f"Delete failed: {e}")

        logger.info(f"  ✓ Individual commits {'completed' if committed else 'all failed'}")
        return {'committed': committed}

    def _publish(self, state: SyncState) -> SyncState:
        """Node 5: Create the docs PR, or note the update on the existing one"""
        result, command, pr = state['result'], state['command'], state['pr']
        branch = state['branch']
        existing_pr = branch.existing_pr

        if existing_pr is not None:
            if not state.get('committed'):
                logger.info(f"[5/6] Skipped: no new changes for docs PR #{existing_pr.number}")
                return {'docs_pr_url': existing_pr.url}

            logger.info(f"[5/6] Updating existing docs PR #{existing_pr.number}...")
            try:
                self.github.create_comment(
                    existing_pr.number, reporting.build_docs_pr_update_comment(pr.number, result)
                )
            except GitHubAPIError as e:
                logger.warning(f"  Could not comment on docs PR #{existing_pr.number}: {e}")
            return {'docs_pr_url': existing_pr.url}

        if result.succeeded_count == 0:
            logger.info("[5/6] Skipped: nothing to publish")
            if branch.created and not state.get('committed'):
                self._discard_branch(branch.branch_name)
            return {'docs_pr_url': None}

        logger.info(f"[5/6] Creating documentation PR from {branch.branch_name}...")
        try:
            created = self.github.create_pr(
                docs_pr_title(command.name, pr.number),
                reporting.build_pr_body(command.name, pr.number, result),
                branch.branch_name,
                pr.base,
            )
        except PullRequestExistsError:
            logger.info("  A documentation PR already exists for this branch")
            return {'docs_pr_exists': True}

        logger.info(f"  ✓ Created docs PR: {created.get('html_url')}")
        return {'docs_pr_url': created.get('html_url')}

    def _discard_branch(self, branch_name: str):
        """Remove a docs branch this run created but never committed to"""
        try:
            self.github.delete_branch(branch_name)
        except (GitHubAPIError, NotFoundError) as e:
            logger.warning(f"  Could not delete unused branch {branch_name}: {e}")

    def _report(self, state: SyncState) -> SyncState:
        """Node 6: Post exactly one summary comment on the originating PR"""
        event, result = state['event'], state['result']
        logger.info("[6/6] Reporting results...")

        body = reporting.build_summary_comment(
            event.sender,
            result,
            docs_pr_url=state.get('docs_pr_url'),
            docs_pr_exists=state.get('docs_pr_exists', False),
        )
        self.github.create_comment(event.pr_number, body)
        result.freeze()

        logger.info("=" * 60)
        logger.info(f"✅ Documentation sync completed - {result.counts()}")
        logger.info("=" * 60)
        return {'status': 'completed'}
