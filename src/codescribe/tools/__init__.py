"""
GitHub access for documentation synchronization
"""
from codescribe.tools.event import CommentEvent, load_event
from codescribe.tools.github_client import GitHubClient, detect_github_repo

__all__ = [
    'CommentEvent',
    'load_event',
    'GitHubClient',
    'detect_github_repo',
]
