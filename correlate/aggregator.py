"""
Activity aggregation: search GitHub for a user's issues, reviews, comments and commits in a date
range, cross-reference the results and bucket them by day.

The four searches run one after another through run_sequenced; the follow-up requests
(comments per issue, timeline per reviewed PR, PRs per commit) are fanned out together.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from correlate.bucketing import bucket_by_day
from dates.days import format_day_key
from normalize.models import DateRange, DayBucket, Issue, Review, ReviewEvent, Comment, Commit
from normalize.util import (
    login_of,
    strip_fragment,
    normalize_issue,
    normalize_review_event,
    normalize_comment,
    normalize_commit,
    normalize_associated_pr,
)
from throttle.context import ThrottleContext
from throttle.retry import AbuseLimitError
from throttle.sequencer import run_sequenced

logger = logging.getLogger(__name__)

REVIEW_SEARCH_PAGE_SIZE = 100


class DataInconsistencyError(RuntimeError):
    """Raised when fetched GitHub data contradicts itself, e.g. a review of a PR we never saw."""


def build_query(qualifiers: str, org: Optional[str] = None) -> str:
    return f"org:{org} {qualifiers}" if org else qualifiers


def describe_range(date_range: DateRange) -> str:
    start = format_day_key(date_range.start_date)
    end = format_day_key(date_range.end_date)
    return start if start == end else f"{start} to {end}"


def join_reviews(events: List[ReviewEvent], reviewed_prs: List[Issue]) -> List[Review]:
    """Pair each review event with its pull request by html_url (fragment stripped).

    Raises DataInconsistencyError when a review's pull request is not among reviewed_prs.
    """
    prs_by_url = {pr.url: pr for pr in reviewed_prs}
    reviews: List[Review] = []
    for event in events:
        pr_url = strip_fragment(event.url)
        pr = prs_by_url.get(pr_url)
        if pr is None:
            raise DataInconsistencyError(f"review {event.event_id} points at {pr_url}, which is not among the reviewed pull requests")
        reviews.append(Review(event.event_id, event.url, event.submitted_at, pr.url, pr.number, pr.title))
    return reviews


class ActivityAggregator:
    """Collects one user's GitHub activity per date range.

    client must provide search_issues, search_commits, paginate and
    list_pull_requests_associated_with_commit coroutines (see ingest.github.GitHubClient).
    """

    def __init__(self, client, username: str, tz_name: str, throttle: ThrottleContext, org: Optional[str] = None):
        self.client = client
        self.username = username
        self.tz_name = tz_name
        self.throttle = throttle
        self.org = org

    def _authored_by_user(self, raw) -> bool:
        return login_of(raw) == self.username

    async def search(self, date_range: DateRange):
        """Run the four searches one at a time and return their raw results in query order."""
        window = f"{date_range.start_date}..{date_range.end_date}"
        user = self.username
        return await run_sequenced([
            lambda: self.client.search_issues(build_query(f"author:{user} created:{window}", self.org)),
            lambda: self.client.search_issues(build_query(f"is:pr reviewed-by:{user} created:{window}", self.org), per_page=REVIEW_SEARCH_PAGE_SIZE),
            lambda: self.client.search_issues(build_query(f"commenter:{user} updated:{window}", self.org)),
            lambda: self.client.search_commits(build_query(f"author:{user} author-date:{window}", self.org)),
        ], self.throttle)

    async def _tolerate_abuse(self, coro, description: str) -> list:
        try:
            return await coro
        except AbuseLimitError:
            logger.error("Skipping %s after repeated abuse detection", description)
            return []

    async def _user_comments(self, issue: Issue) -> List[Comment]:
        raw_comments = await self._tolerate_abuse(self.client.paginate(issue.comments_url), f"comments of {issue.url}")
        return [normalize_comment(c) for c in raw_comments if self._authored_by_user(c)]

    async def collect_comments(self, commented: List[Issue]) -> List[Comment]:
        per_issue = await asyncio.gather(*(self._user_comments(issue) for issue in commented))
        return [comment for comments in per_issue for comment in comments]

    async def _user_review_events(self, pr: Issue) -> List[ReviewEvent]:
        raw_events = await self._tolerate_abuse(self.client.paginate(f"{pr.api_url}/timeline"), f"timeline of {pr.url}")
        return [
            normalize_review_event(e) for e in raw_events
            if e.get('event') == 'reviewed' and self._authored_by_user(e)
        ]

    async def collect_reviews(self, reviewed_prs: List[Issue]) -> List[Review]:
        per_pr = await asyncio.gather(*(self._user_review_events(pr) for pr in reviewed_prs))
        events = [event for events in per_pr for event in events]
        return join_reviews(events, reviewed_prs)

    async def _with_user_pull_requests(self, commit: Commit) -> Commit:
        raw_prs = await self._tolerate_abuse(
            self.client.list_pull_requests_associated_with_commit(commit.owner, commit.repository, commit.sha),
            f"pull requests of commit {commit.sha}",
        )
        prs = [normalize_associated_pr(pr) for pr in raw_prs if self._authored_by_user(pr)]
        return commit.with_associated_pull_requests(prs)

    async def collect_commits(self, commits: List[Commit]) -> List[Commit]:
        enriched = await asyncio.gather(*(self._with_user_pull_requests(commit) for commit in commits))
        return [commit for commit in enriched if commit.associated_pull_requests]

    async def collect(self, date_range: DateRange) -> Dict[str, DayBucket]:
        """Return {day key: DayBucket} covering every day of date_range in the report timezone."""
        printable = describe_range(date_range)
        logger.info("Collecting GitHub data from %s", printable)

        created, reviewed, commented, commit_items = await self.search(date_range)
        issues = [normalize_issue(raw) for raw in created]
        # reviews of one's own PRs are not review work
        reviewed_prs = [normalize_issue(raw) for raw in reviewed if not self._authored_by_user(raw)]
        commented_issues = [normalize_issue(raw) for raw in commented]
        commits = [normalize_commit(raw) for raw in commit_items]

        comments, reviews, commits = await asyncio.gather(
            self.collect_comments(commented_issues),
            self.collect_reviews(reviewed_prs),
            self.collect_commits(commits),
        )

        buckets = bucket_by_day(date_range, self.tz_name, issues, reviews, comments, commits)
        logger.info("Finished collecting GitHub data from %s", printable)
        return buckets
