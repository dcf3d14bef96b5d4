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

"""GitHub Actions event loading"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
from loguru import logger

from codescribe import config


ISSUE_COMMENT = 'issue_comment'


@dataclass
class CommentEvent:
    """The parts of an `issue_comment` payload a run needs"""
    event_name: str
    comment_body: str = ''
    comment_id: Optional[int] = None
    pr_number: Optional[int] = None
    is_pull_request: bool = False
    sender: str = ''

    @property
    def is_pr_comment(self) -> bool:
        return self.event_name == ISSUE_COMMENT and self.is_pull_request and self.pr_number is not None

    @classmethod
    def from_payload(cls, event_name: str, payload: Dict[str, Any]) -> "CommentEvent":
        issue = payload.get('issue') or {}
        comment = payload.get('comment') or {}
        return cls(
            event_name=event_name,
            comment_body=comment.get('body') or '',
            comment_id=comment.get('id'),
            pr_number=issue.get('number'),
            # Issues and PRs share the comment event; only PRs carry this key
            is_pull_request='pull_request' in issue,
            sender=(payload.get('sender') or {}).get('login', ''),
        )

    @classmethod
    def manual(cls, comment_body: str, pr_number: int) -> "CommentEvent":
        """Build an event for a run started outside Actions"""
        return cls(
            event_name=ISSUE_COMMENT,
            comment_body=comment_body,
            pr_number=pr_number,
            is_pull_request=True,
        )


def load_event(event_name: Optional[str] = None, event_path: Optional[str] = None) -> CommentEvent:
    """
    Load the triggering event from the Actions runner.

    Args:
        event_name: Defaults to GITHUB_EVENT_NAME
        event_path: JSON payload file, defaults to GITHUB_EVENT_PATH

    Raises:
        FileNotFoundError: If no payload file is available
    """
    event_name = event_name or config.GITHUB_EVENT_NAME
    event_path = event_path or config.GITHUB_EVENT_PATH
    if not event_path or not Path(event_path).exists():
        raise FileNotFoundError(f"Event payload not found: {event_path or '(GITHUB_EVENT_PATH unset)'}")

    with open(event_path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    event = CommentEvent.from_payload(event_name, payload)
    logger.debug(f"Loaded {event_name} event: pr={event.pr_number} comment={event.comment_id}")
    return event
