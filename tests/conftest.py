import sys
import os

import pytest

# Add project root to sys.path so tests can import top-level modules like 'throttle', 'dates', 'notes', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


class FakeGitHubClient:
    """In-memory stand-in for ingest.github.GitHubClient."""

    def __init__(self, created=None, reviewed=None, commented=None, commits=None, pages=None, associated=None, username='alice'):
        self.created = created or []
        self.reviewed = reviewed or []
        self.commented = commented or []
        self.commits = commits or []
        self.pages = pages or {}
        self.associated = associated or {}
        self.username = username
        self.calls = []

    async def get_username(self):
        return self.username

    async def search_issues(self, query, per_page=None):
        self.calls.append(('search_issues', query, per_page))
        if 'reviewed-by:' in query:
            return list(self.reviewed)
        if 'commenter:' in query:
            return list(self.commented)
        return list(self.created)

    async def search_commits(self, query, per_page=None):
        self.calls.append(('search_commits', query, per_page))
        return list(self.commits)

    async def paginate(self, url, params=None, headers=None, per_page=None):
        self.calls.append(('paginate', url))
        result = self.pages.get(url, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def list_pull_requests_associated_with_commit(self, owner, repo, sha):
        self.calls.append(('associated', owner, repo, sha))
        result = self.associated.get(sha, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


def make_issue(number, author, created_at, is_pr=True, repo='acme/app', title=None):
    kind = 'pull' if is_pr else 'issues'
    raw = {
        'id': 1000 + number,
        'number': number,
        'html_url': f'https://github.com/{repo}/{kind}/{number}',
        'url': f'https://api.github.com/repos/{repo}/issues/{number}',
        'comments_url': f'https://api.github.com/repos/{repo}/issues/{number}/comments',
        'title': title or f'Item {number}',
        'created_at': created_at,
        'user': {'login': author},
    }
    if is_pr:
        raw['pull_request'] = {'url': f'https://api.github.com/repos/{repo}/pulls/{number}'}
    return raw


def make_commit(sha, authored_at, repo='app', owner='acme'):
    return {
        'sha': sha,
        'html_url': f'https://github.com/{owner}/{repo}/commit/{sha}',
        'commit': {'author': {'date': authored_at}},
        'repository': {'name': repo, 'owner': {'login': owner}},
    }


@pytest.fixture
def fake_client_class():
    return FakeGitHubClient


@pytest.fixture
def payloads():
    """A small consistent set of GitHub results for user alice around 2021-06-01/02 (Los Angeles)."""
    reviewed_pr = make_issue(20, 'bob', '2021-06-01T16:00:00Z', title='Fix login')
    own_reviewed_pr = make_issue(21, 'alice', '2021-06-01T16:00:00Z')
    commented_issue = make_issue(30, 'carol', '2021-05-20T16:00:00Z', is_pr=False)
    return {
        'created': [make_issue(10, 'alice', '2021-06-01T18:00:00Z', title='Add export')],
        'reviewed': [reviewed_pr, own_reviewed_pr],
        'commented': [commented_issue],
        'commits': [make_commit('abc1234def', '2021-06-01T10:00:00-07:00'), make_commit('fff0000aaa', '2021-06-02T10:00:00-07:00')],
        'pages': {
            'https://api.github.com/repos/acme/app/issues/20/timeline': [
                {'event': 'commented', 'user': {'login': 'alice'}},
                {
                    'event': 'reviewed',
                    'id': 501,
                    'user': {'login': 'alice'},
                    'html_url': 'https://github.com/acme/app/pull/20#pullrequestreview-501',
                    'submitted_at': '2021-06-02T20:00:00Z',
                    'pull_request_url': 'https://api.github.com/repos/acme/app/pulls/20',
                },
                {
                    'event': 'reviewed',
                    'id': 502,
                    'user': {'login': 'carol'},
                    'html_url': 'https://github.com/acme/app/pull/20#pullrequestreview-502',
                    'submitted_at': '2021-06-02T21:00:00Z',
                },
            ],
            'https://api.github.com/repos/acme/app/issues/30/comments': [
                # 06:00 UTC on the 2nd is still the 1st in Los Angeles
                {'id': 701, 'html_url': 'https://github.com/acme/app/issues/30#issuecomment-701', 'created_at': '2021-06-02T06:00:00Z', 'user': {'login': 'alice'}},
                {'id': 702, 'html_url': 'https://github.com/acme/app/issues/30#issuecomment-702', 'created_at': '2021-06-02T07:00:00Z', 'user': {'login': 'bob'}},
            ],
        },
        'associated': {
            'abc1234def': [
                {'number': 10, 'html_url': 'https://github.com/acme/app/pull/10', 'title': 'Add export', 'user': {'login': 'alice'}},
                {'number': 99, 'html_url': 'https://github.com/acme/app/pull/99', 'title': 'Release', 'user': {'login': 'bob'}},
            ],
            'fff0000aaa': [
                {'number': 98, 'html_url': 'https://github.com/acme/app/pull/98', 'title': 'Other', 'user': {'login': 'bob'}},
            ],
        },
    }
