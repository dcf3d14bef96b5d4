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

"""GitHub REST operations for documentation branches, commits and pull requests"""

import base64
import time
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import quote

import requests
from git import Repo, InvalidGitRepositoryError, NoSuchPathError
from loguru import logger

from codescribe import config
from codescribe.errors import (
    BranchConflictError,
    CommitBatchError,
    GitHubAPIError,
    NotFoundError,
    PullRequestExistsError,
)
from codescribe.models import (
    ChangedFile,
    DocsBranchState,
    DocsPRRef,
    FileWrite,
    PRDetails,
    docs_branch_name,
    docs_pr_title,
)


PER_PAGE = 100


def detect_github_repo(repo_path: str) -> Optional[str]:
    """
    Detect 'owner/repo' from the origin remote of a local checkout.

    Supports both HTTPS and SSH formats:
    - https://github.com/owner/repo.git
    - git@github.com:owner/repo.git

    Returns:
        Repository in format 'owner/repo' or None if it cannot be determined
    """
    try:
        repo = Repo(repo_path)
        url = repo.remote('origin').url
    except (InvalidGitRepositoryError, NoSuchPathError, ValueError) as e:
        logger.debug(f"Cannot read origin remote from {repo_path}: {e}")
        return None

    if 'github.com' not in url:
        logger.warning(f"Remote URL is not a GitHub repository: {url}")
        return None

    if url.startswith('https://'):
        parts = url.split('github.com/', 1)[1]
    elif url.startswith('git@'):
        parts = url.split('github.com:', 1)[1]
    else:
        logger.warning(f"Unsupported GitHub URL format: {url}")
        return None

    parts = parts.removesuffix('.git').strip('/').split('/')
    if len(parts) >= 2:
        return f"{parts[0]}/{parts[1]}"

    logger.warning(f"Could not parse GitHub repository from URL: {url}")
    return None


def _parse_timestamp(value: str) -> datetime:
    # GitHub returns ISO 8601 with a trailing 'Z'
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class GitHubClient:
    """
    Repository and pull request operations needed by the documentation run.

    Handles:
    - PR metadata, changed files and file content lookups
    - Docs branch discovery and creation
    - Single-commit batch writes, with per-file commit/delete fallbacks
    - Pull request and comment creation
    - Commit-history based change detection
    """

    def __init__(
        self,
        token: Optional[str] = None,
        repo: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (default: GITHUB_TOKEN from config)
            repo: Repository in format 'owner/repo'. If not provided, uses
                  GITHUB_REPO / GITHUB_REPOSITORY, then the local git remote
            api_url: REST API root (default: https://api.github.com)
            timeout: Per-request timeout in seconds
            session: Pre-built requests session (tests inject a fake one)
        """
        self.token = token if token is not None else config.GITHUB_TOKEN
        self.repo = repo or config.repository or detect_github_repo(config.REPO_PATH)
        if not self.repo:
            raise ValueError("GitHub repository is not configured (set GITHUB_REPO or GITHUB_REPOSITORY)")
        self.api_url = (api_url or config.GITHUB_API_URL).rstrip('/')
        self.timeout = timeout or config.REQUEST_TIMEOUT

        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })
        if self.token:
            self.session.headers["Authorization"] = f"token {self.token}"

        logger.debug(f"GitHubClient initialized: repo={self.repo}")

    # ============ HTTP plumbing ============

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a repository-scoped request and return the decoded JSON body"""
        url = f"{self.api_url}/repos/{self.repo}{path}"
        response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if response.status_code >= 400:
            raise GitHubAPIError(
                f"{method} {path} failed ({response.status_code}): {self._error_message(response)}",
                status=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text

        message = data.get('message', '') if isinstance(data, dict) else str(data)
        details = [e.get('message', '') for e in data.get('errors', []) if isinstance(e, dict)] \
            if isinstance(data, dict) else []
        details = [d for d in details if d]
        if details:
            message = f"{message}: {'; '.join(details)}"
        return message

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        page = 1
        while True:
            query = dict(params or {}, per_page=PER_PAGE, page=page)
            items = self._request("GET", path, params=query)
            yield from items
            if len(items) < PER_PAGE:
                return
            page += 1

    # ============ Read operations ============

    def get_pr_details(self, pr_number: int) -> PRDetails:
        try:
            data = self._request("GET", f"/pulls/{pr_number}")
        except NotFoundError:
            raise NotFoundError(f"PR #{pr_number} not found")
        return PRDetails.from_api(data)

    def get_changed_files(self, pr_number: int) -> List[ChangedFile]:
        files = [ChangedFile.from_api(item) for item in self._paginate(f"/pulls/{pr_number}/files")]
        logger.debug(f"PR #{pr_number} has {len(files)} changed file(s)")
        return files

    def get_file_content(self, path: str, ref: str) -> str:
        """
        Read a file at a ref.

        Raises:
            NotFoundError: If the file does not exist at that ref
        """
        data = self._request("GET", f"/contents/{quote(path)}", params={"ref": ref})
        if isinstance(data, list) or data.get('type') != 'file':
            raise GitHubAPIError(f"{path} is not a file at {ref}")

        if data.get('encoding') == 'base64':
            raw = data.get('content', '')
        else:
            # Files over 1 MB come back without inline content
            raw = self._request("GET", f"/git/blobs/{data['sha']}").get('content', '')
        return base64.b64decode(raw).decode('utf-8')

    def file_exists(self, path: str, ref: str) -> bool:
        try:
            self._request("GET", f"/contents/{quote(path)}", params={"ref": ref})
            return True
        except NotFoundError:
            return False

    def _get_file_sha(self, path: str, ref: str) -> Optional[str]:
        try:
            return self._request("GET", f"/contents/{quote(path)}", params={"ref": ref}).get('sha')
        except NotFoundError:
            return None

    def branch_exists(self, branch_name: str) -> bool:
        try:
            self._request("GET", f"/git/ref/heads/{quote(branch_name)}")
            return True
        except NotFoundError:
            return False

    # ============ Change detection ============

    def get_last_commit_date(self, path: str, ref: str) -> Optional[datetime]:
        """Timestamp of the most recent commit touching `path` on `ref`, None if there is none"""
        commits = self._request("GET", "/commits", params={"path": path, "sha": ref, "per_page": 1})
        if not commits:
            return None
        commit = commits[0]['commit']
        stamp = (commit.get('committer') or {}).get('date') or (commit.get('author') or {}).get('date')
        return _parse_timestamp(stamp)

    def has_source_changed(self, source_path: str, doc_path: str, docs_branch: str, source_ref: str) -> bool:
        """
        Decide whether the source was modified after its documentation.

        No doc history means changed; no source history means unchanged.
        Lookup failures are treated as changed so docs never go silently stale.
        """
        try:
            doc_date = self.get_last_commit_date(doc_path, docs_branch)
            if doc_date is None:
                logger.debug(f"No history for {doc_path} on {docs_branch}, treating as changed")
                return True

            source_date = self.get_last_commit_date(source_path, source_ref)
            if source_date is None:
                logger.debug(f"No history for {source_path} on {source_ref}, treating as unchanged")
                return False

            changed = source_date > doc_date
            logger.debug(f"{source_path}: source={source_date.isoformat()} doc={doc_date.isoformat()} changed={changed}")
            return changed
        except Exception as e:
            logger.warning(f"Change detection failed for {source_path}, assuming changed: {e}")
            return True

    # ============ Docs branch / PR discovery ============

    def find_existing_docs_pr(self, source_pr_number: int, project: str) -> Optional[DocsPRRef]:
        """
        Find the open documentation PR for a source PR.

        Matches on the conventional title, the docs branch name, or that name
        with a timestamp suffix; there is no other record linking a docs PR to
        its source PR.
        """
        title = docs_pr_title(project, source_pr_number)
        branch = docs_branch_name(project, source_pr_number)

        try:
            for pr in self._paginate("/pulls", params={"state": "open"}):
                head_ref = pr['head']['ref']
                matches_branch = head_ref == branch or head_ref.startswith(f"{branch}-")
                if pr.get('title') == title or matches_branch:
                    logger.info(f"Found existing documentation PR: #{pr['number']} ({head_ref})")
                    return DocsPRRef(
                        number=pr['number'],
                        title=pr.get('title', ''),
                        url=pr.get('html_url', ''),
                        head_ref=head_ref,
                        base_ref=pr['base']['ref'],
                    )
        except (GitHubAPIError, requests.RequestException) as e:
            logger.error(f"Error finding existing docs PR: {e}")

        return None

    def create_or_get_docs_branch(
        self,
        base_branch: str,
        new_branch: str,
        source_pr_number: int,
        project: str,
    ) -> DocsBranchState:
        """
        Reuse the branch of an open docs PR, or create a fresh docs branch.

        If `new_branch` already exists without a PR, a unix-timestamp suffix is
        appended; if even that name exists it is reused as is.

        Raises:
            BranchConflictError: If the ref appeared between the check and the create
        """
        existing_pr = self.find_existing_docs_pr(source_pr_number, project)
        if existing_pr:
            logger.info(f"Using existing documentation branch: {existing_pr.head_ref}")
            return DocsBranchState(branch_name=existing_pr.head_ref, created=False, existing_pr=existing_pr)

        branch_name = new_branch
        if self.branch_exists(branch_name):
            branch_name = f"{new_branch}-{int(time.time())}"
            logger.info(f"Branch {new_branch} exists but no PR found. Using {branch_name} instead.")
            if self.branch_exists(branch_name):
                logger.info(f"Branch {branch_name} already exists. Using existing branch.")
                return DocsBranchState(branch_name=branch_name, created=False)

        base_sha = self._request("GET", f"/git/ref/heads/{quote(base_branch)}")['object']['sha']
        try:
            self._request("POST", "/git/refs", json={"ref": f"refs/heads/{branch_name}", "sha": base_sha})
        except GitHubAPIError as e:
            if e.status == 422 and 'already exists' in str(e):
                raise BranchConflictError(f"Branch {branch_name} was created concurrently") from e
            raise

        logger.info(f"Branch {branch_name} created from {base_branch} ({base_sha[:7]})")
        return DocsBranchState(branch_name=branch_name, created=True)

    # ============ Write operations ============

    def commit_multiple_changes(
        self,
        branch: str,
        files_to_write: List[FileWrite],
        files_to_delete: List[str],
        message: str,
    ) -> Optional[str]:
        """
        Write and delete several files in one commit through the Git Data API.

        Returns:
            SHA of the new commit, None when there was nothing to commit

        Raises:
            CommitBatchError: If any step fails; the branch is left untouched
        """
        if not files_to_write and not files_to_delete:
            logger.info("Nothing to commit")
            return None

        try:
            head_sha = self._request("GET", f"/git/ref/heads/{quote(branch)}")['object']['sha']
            base_tree = self._request("GET", f"/git/commits/{head_sha}")['tree']['sha']

            tree = [
                {"path": f.path, "mode": "100644", "type": "blob", "content": f.content}
                for f in files_to_write
            ]
            tree += [
                {"path": path, "mode": "100644", "type": "blob", "sha": None}
                for path in files_to_delete
            ]

            new_tree = self._request("POST", "/git/trees", json={"base_tree": base_tree, "tree": tree})['sha']
            commit_sha = self._request(
                "POST", "/git/commits",
                json={"message": message, "tree": new_tree, "parents": [head_sha]},
            )['sha']
            self._request("PATCH", f"/git/refs/heads/{quote(branch)}", json={"sha": commit_sha, "force": False})
        except (GitHubAPIError, requests.RequestException, KeyError) as e:
            raise CommitBatchError(f"Batch commit to {branch} failed: {e}") from e

        logger.info(f"Committed {len(files_to_write)} write(s) and {len(files_to_delete)} delete(s) "
                    f"to {branch} ({commit_sha[:7]})")
        return commit_sha

    def commit_file(self, branch: str, path: str, content: str, message: str) -> Dict[str, Any]:
        payload = {
            "message": message,
            "content": base64.b64encode(content.encode('utf-8')).decode('ascii'),
            "branch": branch,
        }
        sha = self._get_file_sha(path, branch)
        if sha:
            payload["sha"] = sha

        try:
            return self._request("PUT", f"/contents/{quote(path)}", json=payload)
        except GitHubAPIError as e:
            raise GitHubAPIError(f"Failed to commit file {path}: {e}", status=e.status) from e

    def delete_file(self, branch: str, path: str, message: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the file is not present on the branch
        """
        sha = self._get_file_sha(path, branch)
        if sha is None:
            raise NotFoundError(f"{path} not found on {branch}")
        return self._request("DELETE", f"/contents/{quote(path)}",
                             json={"message": message, "sha": sha, "branch": branch})

    def delete_branch(self, branch_name: str):
        self._request("DELETE", f"/git/refs/heads/{quote(branch_name)}")
        logger.info(f"Deleted branch {branch_name}")

    def create_pr(self, title: str, body: str, head: str, base: str) -> Dict[str, Any]:
        """
        Raises:
            PullRequestExistsError: If a PR between head and base is already open
            GitHubAPIError: If a branch is missing or the request is rejected
        """
        try:
            data = self._request("POST", "/pulls", json={"title": title, "body": body, "head": head, "base": base})
        except GitHubAPIError as e:
            if e.status == 422 and 'A pull request already exists' in str(e):
                raise PullRequestExistsError(str(e), status=e.status) from e
            raise

        logger.info(f"Created Pull Request: {data.get('html_url')}")
        return data

    def create_comment(self, issue_number: int, body: str) -> Dict[str, Any]:
        return self._request("POST", f"/issues/{issue_number}/comments", json={"body": body})

    def add_reaction(self, comment_id: int, content: str = "eyes") -> Dict[str, Any]:
        return self._request("POST", f"/issues/comments/{comment_id}/reactions", json={"content": content})
