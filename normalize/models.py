"""
Data models for GitHub activity entities, per-day buckets and the merged daily report.
"""

from typing import List, Optional, Dict, Any


class Issue:
    """
    Issue or pull request returned by the search API.
    """
    def __init__(self, issue_id: int, number: int, url: str, api_url: str, comments_url: str, title: str, created_at: str, is_pull_request: bool, author: str):
        self.issue_id = issue_id
        self.number = number
        self.url = url  # html_url, used to join review events back to their PR
        self.api_url = api_url
        self.comments_url = comments_url
        self.title = title
        self.created_at = created_at
        self.is_pull_request = is_pull_request
        self.author = author

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.issue_id,
            'number': self.number,
            'url': self.url,
            'title': self.title,
            'created_at': self.created_at,
            'is_pull_request': self.is_pull_request,
            'author': self.author,
        }


class ReviewEvent:
    """
    A ``reviewed`` event from a pull request timeline, before it is joined to its PR.
    """
    def __init__(self, event_id: int, url: str, submitted_at: str, author: str):
        self.event_id = event_id
        self.url = url
        self.submitted_at = submitted_at
        self.author = author


class Review:
    """
    A review event joined with the pull request it belongs to.
    """
    def __init__(self, review_id: int, url: str, submitted_at: str, pr_url: str, pr_number: int, pr_title: str):
        self.review_id = review_id
        self.url = url
        self.submitted_at = submitted_at
        self.pr_url = pr_url
        self.pr_number = pr_number
        self.pr_title = pr_title

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.review_id,
            'url': self.url,
            'submitted_at': self.submitted_at,
            'pr_url': self.pr_url,
            'pr_number': self.pr_number,
            'pr_title': self.pr_title,
        }


class Comment:
    def __init__(self, comment_id: int, url: str, created_at: str, author: str):
        self.comment_id = comment_id
        self.url = url
        self.created_at = created_at
        self.author = author

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.comment_id, 'url': self.url, 'created_at': self.created_at, 'author': self.author}


class AssociatedPullRequest:
    def __init__(self, number: int, url: str, title: str, author: str):
        self.number = number
        self.url = url
        self.title = title
        self.author = author

    def to_dict(self) -> Dict[str, Any]:
        return {'number': self.number, 'url': self.url, 'title': self.title, 'author': self.author}


class Commit:
    """
    Commit from the commit search API plus the pull requests it belongs to.
    """
    def __init__(self, sha: str, url: str, authored_at: str, repository: str, owner: str, associated_pull_requests: Optional[List[AssociatedPullRequest]] = None):
        self.sha = sha
        self.url = url
        self.authored_at = authored_at
        self.repository = repository
        self.owner = owner
        self.associated_pull_requests = list(associated_pull_requests or [])

    def with_associated_pull_requests(self, prs: List[AssociatedPullRequest]) -> 'Commit':
        """Return a copy of this commit carrying the given pull requests."""
        return Commit(self.sha, self.url, self.authored_at, self.repository, self.owner, prs)

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sha': self.sha,
            'url': self.url,
            'authored_at': self.authored_at,
            'repository': self.repository,
            'owner': self.owner,
            'associated_pull_requests': [pr.to_dict() for pr in self.associated_pull_requests],
        }


class DateRange:
    """
    Search window in GitHub's timestamp format (YYYY-MM-DDTHH:MM:SS+HH:MM).
    two_weeks_before is not used for the searches themselves; it is kept as a lookback reference.
    """
    def __init__(self, start_date: str, end_date: str, two_weeks_before: str):
        self.start_date = start_date
        self.end_date = end_date
        self.two_weeks_before = two_weeks_before

    def __eq__(self, other):
        if not isinstance(other, DateRange):
            return NotImplemented
        return (self.start_date, self.end_date, self.two_weeks_before) == (other.start_date, other.end_date, other.two_weeks_before)

    def __repr__(self):
        return f"DateRange({self.start_date!r}, {self.end_date!r}, two_weeks_before={self.two_weeks_before!r})"


class DayBucket:
    """
    All activity for one calendar day (YYYY-MM-DD in the report timezone).
    """
    def __init__(self, date: str):
        self.date = date
        self.issues: List[Issue] = []
        self.reviews: List[Review] = []
        self.comments: List[Comment] = []
        self.commits: List[Commit] = []

    def is_empty(self) -> bool:
        return not (self.issues or self.reviews or self.comments or self.commits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'issues': [i.to_dict() for i in self.issues],
            'reviews': [r.to_dict() for r in self.reviews],
            'comments': [c.to_dict() for c in self.comments],
            'commits': [c.to_dict() for c in self.commits],
        }


class NoteDay:
    """
    A day whose content comes from the daily-note dump.
    """
    kind = 'note'

    def __init__(self, date: str, text: str):
        self.date = date
        self.text = text

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'date': self.date, 'text': self.text}


class ActivityDay:
    """
    A day whose content comes from GitHub activity.
    """
    kind = 'activity'

    def __init__(self, bucket: DayBucket):
        self.bucket = bucket

    @property
    def date(self) -> str:
        return self.bucket.date

    def to_dict(self) -> Dict[str, Any]:
        data = self.bucket.to_dict()
        data['kind'] = self.kind
        return data
