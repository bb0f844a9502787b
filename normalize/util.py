"""
Normalization utility helpers.
Small helpers to turn raw GitHub payloads into normalize.models entities.
"""
import re
from typing import Dict, Any
from normalize.models import Issue, ReviewEvent, Comment, Commit, AssociatedPullRequest

_FRAGMENT_RE = re.compile(r'#.*$')


def login_of(raw: Dict[str, Any]) -> str:
    """Return the login of the ``user`` (or ``author``) object of a payload, or an empty string."""
    if not isinstance(raw, dict):
        return ''
    user = raw.get('user') or raw.get('author') or {}
    if not isinstance(user, dict):
        return ''
    return user.get('login') or ''


def strip_fragment(url: str) -> str:
    return _FRAGMENT_RE.sub('', url or '')


def normalize_issue(raw: Dict[str, Any]) -> Issue:
    """Create an Issue from a search/issues result. Pull requests carry a ``pull_request`` key."""
    return Issue(
        issue_id=raw.get('id'),
        number=raw.get('number'),
        url=raw.get('html_url') or '',
        api_url=raw.get('url') or '',
        comments_url=raw.get('comments_url') or '',
        title=raw.get('title') or '',
        created_at=raw.get('created_at') or '',
        is_pull_request=bool(raw.get('pull_request')),
        author=login_of(raw),
    )


def normalize_review_event(raw: Dict[str, Any]) -> ReviewEvent:
    return ReviewEvent(
        event_id=raw.get('id'),
        url=raw.get('html_url') or '',
        submitted_at=raw.get('submitted_at') or '',
        author=login_of(raw),
    )


def normalize_comment(raw: Dict[str, Any]) -> Comment:
    return Comment(
        comment_id=raw.get('id'),
        url=raw.get('html_url') or '',
        created_at=raw.get('created_at') or '',
        author=login_of(raw),
    )


def normalize_associated_pr(raw: Dict[str, Any]) -> AssociatedPullRequest:
    return AssociatedPullRequest(
        number=raw.get('number'),
        url=raw.get('html_url') or '',
        title=raw.get('title') or '',
        author=login_of(raw),
    )


def normalize_commit(raw: Dict[str, Any]) -> Commit:
    """Create a Commit from a commit search result. Associated PRs are attached later."""
    commit = raw.get('commit') or {}
    repository = raw.get('repository') or {}
    owner = repository.get('owner') or {}
    return Commit(
        sha=raw.get('sha') or '',
        url=raw.get('html_url') or '',
        authored_at=(commit.get('author') or {}).get('date') or '',
        repository=repository.get('name') or '',
        owner=owner.get('login') or '',
    )
