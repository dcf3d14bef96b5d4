"""
Test DocumentationGenerator end to end against an in-memory GitHub
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
from loguru import logger

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from codescribe.core.generator import DocumentationGenerator
from codescribe.errors import (
    AIRateLimitError,
    CatastrophicError,
    CommitBatchError,
    GitHubAPIError,
    NotFoundError,
    PullRequestExistsError,
)
from codescribe.models import ChangedFile, DocsBranchState, DocsPRRef, PRDetails, docs_pr_title
from codescribe.tools.event import CommentEvent


class FakeGitHub:
    """
    In-memory stand-in for GitHubClient.

    `files` maps ref -> {path: content}; `history` maps (path, ref) -> last
    commit time. Every write advances the clock.
    """

    def __init__(self, pr, changed, files):
        self.pr = pr
        self.changed = changed
        self.files = {ref: dict(contents) for ref, contents in files.items()}
        self.history = {}
        self.clock = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.pulls = []
        self.comments = []
        self.reactions = []
        self.created_branches = []
        self.batch_commits = 0
        self.single_commits = []
        self.deleted_files = []
        self.deleted_branches = []
        self.fail_batch = False
        self.fail_single = set()

        for ref, contents in self.files.items():
            for path in contents:
                self.history[(path, ref)] = self._tick()

    def _tick(self):
        self.clock += timedelta(minutes=1)
        return self.clock

    # Read operations
    def get_pr_details(self, number):
        if number != self.pr.number:
            raise NotFoundError(f"PR #{number} not found")
        return self.pr

    def get_changed_files(self, number):
        return list(self.changed)

    def get_file_content(self, path, ref):
        try:
            return self.files[ref][path]
        except KeyError:
            raise NotFoundError(f"{path} not found at {ref}")

    def file_exists(self, path, ref):
        return path in self.files.get(ref, {})

    def branch_exists(self, name):
        return name in self.files

    def has_source_changed(self, source_path, doc_path, docs_branch, source_ref):
        doc_date = self.history.get((doc_path, docs_branch))
        if doc_date is None:
            return True
        source_date = self.history.get((source_path, source_ref))
        if source_date is None:
            return False
        return source_date > doc_date

    # Branch / PR discovery
    def find_existing_docs_pr(self, source_pr_number, project):
        return self.pulls[0] if self.pulls else None

    def create_or_get_docs_branch(self, base, new_branch, source_pr_number, project):
        existing = self.find_existing_docs_pr(source_pr_number, project)
        if existing:
            return DocsBranchState(existing.head_ref, created=False, existing_pr=existing)
        self.files[new_branch] = dict(self.files[base])
        for (path, ref), date in list(self.history.items()):
            if ref == base:
                self.history[(path, new_branch)] = date
        self.created_branches.append(new_branch)
        return DocsBranchState(new_branch, created=True)

    # Write operations
    def commit_multiple_changes(self, branch, files_to_write, files_to_delete, message):
        if self.fail_batch:
            raise CommitBatchError("tree creation failed")
        self.batch_commits += 1
        now = self._tick()
        for write in files_to_write:
            self.files[branch][write.path] = write.content
            self.history[(write.path, branch)] = now
        for path in files_to_delete:
            del self.files[branch][path]
        return 'commit-sha'

    def commit_file(self, branch, path, content, message):
        if path in self.fail_single:
            raise GitHubAPIError(f"Failed to commit file {path}", status=409)
        self.files[branch][path] = content
        self.history[(path, branch)] = self._tick()
        self.single_commits.append(path)
        return {}

    def delete_file(self, branch, path, message):
        if path not in self.files[branch]:
            raise NotFoundError(f"{path} not found on {branch}")
        del self.files[branch][path]
        self.deleted_files.append(path)
        return {}

    def delete_branch(self, name):
        del self.files[name]
        self.deleted_branches.append(name)

    def create_pr(self, title, body, head, base):
        pr = DocsPRRef(number=100 + len(self.pulls), title=title,
                       url=f"https://github.com/acme/widgets/pull/{100 + len(self.pulls)}",
                       head_ref=head, base_ref=base)
        self.pulls.append(pr)
        return {'number': pr.number, 'html_url': pr.url, 'body': body}

    def create_comment(self, issue_number, body):
        self.comments.append((issue_number, body))
        return {}

    def add_reaction(self, comment_id, content='eyes'):
        self.reactions.append((comment_id, content))
        return {}

    def comments_on(self, number):
        return [body for n, body in self.comments if n == number]


def _merged_pr(number=42):
    return PRDetails(number=number, title='Feature', author='alice', created_at='2025-01-01T00:00:00Z',
                     updated_at='2025-01-02T00:00:00Z', merged=True, merged_by='bob',
                     base='main', head='feature/x', merge_commit_sha='merge1')


def _event(body='!doxai', number=42):
    return CommentEvent(event_name='issue_comment', comment_body=body, comment_id=555,
                        pr_number=number, is_pull_request=True, sender='carol')


def _ai(text='= generated\n'):
    ai = Mock()
    ai.generate.return_value = text
    return ai


def _scenario_github(with_docs=False):
    files = {
        'main': {'src/b.js': 'old'},
        'merge1': {'src/a.js': 'const a = 1;\n'},
    }
    if with_docs:
        files['main']['docs/doxai/src/b.adoc'] = '= b.js\n'
    changed = [
        ChangedFile('src/a.js', 'modified'),
        ChangedFile('src/b.js', 'removed'),
        ChangedFile('logo.png', 'added'),
    ]
    return FakeGitHub(_merged_pr(), changed, files)


def test_pr42_scenario():
    github = _scenario_github(with_docs=True)
    ai = _ai('```asciidoc\n= a.js\n```')
    generator = DocumentationGenerator(github, ai)

    report = generator.run(_event('!doxai --scope exclude:test'))

    assert report.status == 'completed'
    assert report.docs_branch == 'docs/doxai-pr-42'
    assert report.result.generated == ['docs/doxai/src/a.adoc']
    assert report.result.deleted == ['docs/doxai/src/b.adoc']
    assert report.result.failed == []
    assert ai.generate.call_count == 1

    branch = github.files['docs/doxai-pr-42']
    assert branch['docs/doxai/src/a.adoc'] == '= a.js\n'
    assert 'docs/doxai/src/b.adoc' not in branch
    assert github.batch_commits == 1

    assert len(github.pulls) == 1
    assert github.pulls[0].title == docs_pr_title('doxai', 42)
    summaries = github.comments_on(42)
    assert len(summaries) == 1
    assert 'Generated: 1, Updated: 0, Deleted: 1, Skipped: 0, Failed: 0' in summaries[0]
    assert github.pulls[0].url in summaries[0]
    assert github.reactions == [(555, 'eyes')]


def test_removed_file_without_doc_is_silent():
    github = _scenario_github(with_docs=False)
    report = DocumentationGenerator(github, _ai()).run(_event())

    assert report.result.deleted == []
    assert report.result.failed == []
    assert report.result.generated == ['docs/doxai/src/a.adoc']


def test_second_run_is_idempotent():
    github = _scenario_github(with_docs=True)
    ai = _ai()
    generator = DocumentationGenerator(github, ai)

    generator.run(_event())
    second = generator.run(_event())

    assert ai.generate.call_count == 1
    assert second.result.generated == []
    assert second.result.updated == []
    assert [s.doc for s in second.result.skipped] == ['docs/doxai/src/a.adoc']
    # The open docs PR and its branch are reused, no new PR or branch
    assert len(github.pulls) == 1
    assert github.created_branches == ['docs/doxai-pr-42']
    assert github.batch_commits == 1
    assert 'already up to date' in github.comments_on(42)[-1]
    assert github.comments_on(github.pulls[0].number) == []


def test_existing_doc_is_updated_when_source_is_newer():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'modified')],
        {'main': {'docs/doxai/src/a.adoc': '= a.js (old)\n'}, 'merge1': {'src/a.js': 'v2'}},
    )
    # The source commit lands after the existing doc
    github.history[('src/a.js', 'merge1')] = github._tick()
    ai = _ai('= a.js (new)\n')

    report = DocumentationGenerator(github, ai).run(_event())

    assert report.result.updated == ['docs/doxai/src/a.adoc']
    user_prompt = ai.generate.call_args[0][1]
    assert '= a.js (old)' in user_prompt


def test_update_logs_where_existing_doc_was_found():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'modified')],
        {'main': {'docs/doxai/src/a.adoc': '= a.js (old)\n'}, 'merge1': {'src/a.js': 'v2'}},
    )
    github.history[('src/a.js', 'merge1')] = github._tick()
    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    try:
        DocumentationGenerator(github, _ai()).run(_event())
    finally:
        logger.remove(sink_id)

    assert any('Updating documentation: docs/doxai/src/a.adoc (found on docs_branch)' in m for m in messages)


def test_sources_sharing_a_doc_path_are_not_written_twice():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'added'), ChangedFile('src/a.ts', 'added')],
        {'main': {}, 'merge1': {'src/a.js': 'const a = 1;\n', 'src/a.ts': 'const a: number = 1;\n'}},
    )
    ai = _ai()

    report = DocumentationGenerator(github, ai).run(_event())

    assert ai.generate.call_count == 1
    assert report.result.generated == ['docs/doxai/src/a.adoc']
    assert [f.file for f in report.result.failed] == ['src/a.ts']
    assert 'collides with src/a.js' in report.result.failed[0].reason
    assert [w.path for w in report.result.files_to_write] == ['docs/doxai/src/a.adoc']


def test_removed_source_does_not_delete_doc_of_renamed_sibling():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'removed'), ChangedFile('src/a.ts', 'added')],
        {'main': {'docs/doxai/src/a.adoc': '= a.js\n'}, 'merge1': {'src/a.ts': 'const a: number = 1;\n'}},
    )
    github.history[('src/a.ts', 'merge1')] = github._tick()

    report = DocumentationGenerator(github, _ai('= a.ts\n')).run(_event())

    assert report.result.updated == ['docs/doxai/src/a.adoc']
    assert report.result.deleted == []
    assert [s.source for s in report.result.skipped] == ['src/a.js']
    assert github.files['docs/doxai-pr-42']['docs/doxai/src/a.adoc'] == '= a.ts\n'


def test_rerun_after_new_changes_comments_on_existing_docs_pr():
    github = _scenario_github(with_docs=False)
    generator = DocumentationGenerator(github, _ai())
    generator.run(_event())

    github.files['merge1']['src/a.js'] = 'const a = 2;\n'
    github.history[('src/a.js', 'merge1')] = github._tick()
    report = generator.run(_event())

    assert report.result.updated == ['docs/doxai/src/a.adoc']
    assert report.docs_pr_url == github.pulls[0].url
    assert len(github.pulls) == 1
    update_comments = github.comments_on(github.pulls[0].number)
    assert len(update_comments) == 1
    assert 'Documentation updated' in update_comments[0]


def test_invalid_option_posts_help_only():
    github = Mock()
    ai = Mock()

    report = DocumentationGenerator(github, ai).run(_event('!doxai --lang fr'))

    assert report.status == 'invalid_command'
    github.create_comment.assert_called_once()
    number, body = github.create_comment.call_args[0]
    assert number == 42
    assert '--lang' in body
    assert '**Options:**' in body
    github.get_pr_details.assert_not_called()
    github.add_reaction.assert_not_called()
    ai.generate.assert_not_called()


def test_non_command_comments_are_ignored():
    github = Mock()
    generator = DocumentationGenerator(github, Mock())

    assert generator.run(_event('Looks good to me')).status == 'ignored'
    issue_event = CommentEvent(event_name='issue_comment', comment_body='!doxai', pr_number=3,
                               is_pull_request=False)
    assert generator.run(issue_event).status == 'ignored'
    assert github.method_calls == []


def test_unmerged_pr_gets_warning():
    github = _scenario_github()
    github.pr.merged = False

    report = DocumentationGenerator(github, _ai()).run(_event())

    assert report.status == 'not_merged'
    assert 'only possible on merged PRs' in github.comments_on(42)[0]
    assert github.created_branches == []


def test_no_files_in_scope():
    github = _scenario_github()
    report = DocumentationGenerator(github, _ai()).run(_event('!doxai --scope include:nothing-matches'))

    assert report.status == 'no_files'
    assert 'No files to document' in github.comments_on(42)[0]
    assert github.created_branches == []


def test_ai_failures_are_reported_per_file():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'modified'), ChangedFile('src/c.js', 'added')],
        {'main': {}, 'merge1': {'src/a.js': 'a', 'src/c.js': 'c'}},
    )
    ai = Mock()
    ai.generate.side_effect = [AIRateLimitError('quota exceeded'), '= c.js\n']

    report = DocumentationGenerator(github, ai).run(_event())

    assert report.status == 'completed'
    assert report.result.generated == ['docs/doxai/src/c.adoc']
    assert report.result.failed[0].file == 'src/a.js'
    assert report.result.failed[0].reason.startswith('AI rate limited')
    assert '1 files failed to process' in github.comments_on(42)[-1]


def test_all_files_failing_posts_failure_summary():
    github = FakeGitHub(_merged_pr(), [ChangedFile('src/missing.js', 'modified')], {'main': {}, 'merge1': {}})

    report = DocumentationGenerator(github, _ai()).run(_event())

    assert report.result.failed[0].file == 'src/missing.js'
    assert github.pulls == []
    assert github.deleted_branches == ['docs/doxai-pr-42']
    summary = github.comments_on(42)[-1]
    assert 'Documentation generation failed' in summary
    assert 'Main error:' in summary


def test_rerun_after_docs_pr_merged_discards_unused_branch():
    github = _scenario_github(with_docs=True)
    generator = DocumentationGenerator(github, _ai())
    generator.run(_event())

    # The docs PR was merged: its docs are on main and no docs PR is open
    github.files['main'].update(github.files['docs/doxai-pr-42'])
    del github.files['main']['docs/doxai/src/b.adoc']
    for (path, ref), date in list(github.history.items()):
        if ref == 'docs/doxai-pr-42':
            github.history[(path, 'main')] = date
    github.pulls.clear()
    del github.files['docs/doxai-pr-42']

    report = generator.run(_event())

    assert report.result.succeeded_count == 0
    assert [s.doc for s in report.result.skipped] == ['docs/doxai/src/a.adoc']
    assert github.deleted_branches == ['docs/doxai-pr-42']
    assert 'docs/doxai-pr-42' not in github.files
    assert github.pulls == []


def test_branch_reused_from_open_docs_pr_is_kept():
    github = _scenario_github(with_docs=True)
    generator = DocumentationGenerator(github, _ai())
    generator.run(_event())
    generator.run(_event())

    assert github.deleted_branches == []


def test_batch_failure_falls_back_to_single_commits():
    github = FakeGitHub(
        _merged_pr(),
        [ChangedFile('src/a.js', 'modified'), ChangedFile('src/c.js', 'added'), ChangedFile('src/b.js', 'removed')],
        {'main': {'docs/doxai/src/b.adoc': '= b\n'}, 'merge1': {'src/a.js': 'a', 'src/c.js': 'c'}},
    )
    github.fail_batch = True
    github.fail_single = {'docs/doxai/src/c.adoc'}

    report = DocumentationGenerator(github, _ai()).run(_event())

    assert github.single_commits == ['docs/doxai/src/a.adoc']
    assert github.deleted_files == ['docs/doxai/src/b.adoc']
    assert report.result.generated == ['docs/doxai/src/a.adoc']
    assert report.result.deleted == ['docs/doxai/src/b.adoc']
    assert [f.file for f in report.result.failed] == ['docs/doxai/src/c.adoc']
    assert len(github.pulls) == 1


def test_existing_pull_request_is_tolerated():
    github = _scenario_github()
    github.create_pr = Mock(side_effect=PullRequestExistsError('A pull request already exists', status=422))

    report = DocumentationGenerator(github, _ai()).run(_event())

    assert report.status == 'completed'
    assert report.docs_pr_url is None
    assert 'A documentation PR already exists' in github.comments_on(42)[-1]


def test_catastrophic_failure_posts_error_and_raises():
    github = _scenario_github()
    github.get_pr_details = Mock(side_effect=GitHubAPIError('Bad credentials', status=401))

    with pytest.raises(CatastrophicError) as exc_info:
        DocumentationGenerator(github, _ai()).run(_event())

    assert exc_info.value.pr_number == 42
    assert isinstance(exc_info.value.__cause__, GitHubAPIError)
    comments = github.comments_on(42)
    assert len(comments) == 1
    assert 'An error occurred during documentation generation: Bad credentials' in comments[0]


def test_result_is_frozen_after_report():
    github = _scenario_github()
    report = DocumentationGenerator(github, _ai()).run(_event())
    with pytest.raises(RuntimeError):
        report.result.record_skip('x', 'y', 'late')
