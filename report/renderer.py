"""
Report renderer: turn the ordered daily report into HTML (Jinja2, report/templates/report.html.j2)
or JSON.
"""

from typing import Optional, List, Dict, Any, Mapping, Union
import os
import json

from jinja2 import Environment, FileSystemLoader, select_autoescape

from dates.days import format_activity_heading, format_note_heading
from normalize.models import ActivityDay, DayBucket, NoteDay

GITHUB_URL = 'https://github.com/'
NOTE_BULLET = '• '

Day = Union[NoteDay, ActivityDay]


def note_line_items(text: str) -> List[str]:
    """Non-empty lines of a note with a leading bullet removed."""
    items = []
    for line in (text or '').split('\n'):
        item = line.strip()
        if item.startswith(NOTE_BULLET):
            item = item[len(NOTE_BULLET):]
        if item:
            items.append(item)
    return items


def _updated_pull_requests(bucket: DayBucket) -> List[Dict[str, Any]]:
    """Group the day's commits by pull request, leaving out PRs created the same day.

    PRs are keyed by html_url since numbers repeat across repositories.
    """
    created_urls = {issue.url for issue in bucket.issues}
    by_url: Dict[str, Dict[str, Any]] = {}
    for commit in bucket.commits:
        for pr in commit.associated_pull_requests:
            if pr.url in created_urls:
                continue
            entry = by_url.setdefault(pr.url, {'number': pr.number, 'url': pr.url, 'title': pr.title, 'commits': []})
            entry['commits'].append({'url': commit.url, 'short_sha': commit.short_sha})
    return list(by_url.values())


def _comment_label(url: str) -> str:
    return url[len(GITHUB_URL):] if url.startswith(GITHUB_URL) else url


def _note_context(day: NoteDay) -> Optional[Dict[str, Any]]:
    lines = note_line_items(day.text)
    if not lines:
        return None
    return {'kind': NoteDay.kind, 'date': day.date, 'heading': format_note_heading(day.date), 'lines': lines}


def _activity_context(day: ActivityDay, username: str) -> Optional[Dict[str, Any]]:
    bucket = day.bucket
    if bucket.is_empty():
        return None
    return {
        'kind': ActivityDay.kind,
        'date': day.date,
        'heading': format_activity_heading(day.date),
        'profile_url': f"{GITHUB_URL}{username}?tab=overview&from={day.date}&to={day.date}",
        'issues': [
            {'url': i.url, 'label': 'PR' if i.is_pull_request else 'Issue', 'number': i.number, 'title': i.title}
            for i in bucket.issues
        ],
        'updated_prs': _updated_pull_requests(bucket),
        'reviews': [{'url': r.url, 'pr_number': r.pr_number, 'pr_title': r.pr_title} for r in bucket.reviews],
        'comments': [{'url': c.url, 'label': _comment_label(c.url)} for c in bucket.comments],
    }


def day_context(day: Day, username: str) -> Optional[Dict[str, Any]]:
    """Template context for one day, or None when the day has nothing to show."""
    if isinstance(day, NoteDay):
        return _note_context(day)
    if isinstance(day, ActivityDay):
        return _activity_context(day, username)
    raise TypeError(f"Unsupported day entry: {type(day).__name__}")


def render_html(report: Mapping[str, Day], username: str = '', generated_at: Optional[str] = None, scope: Optional[str] = None) -> str:
    tmpl_dir = os.path.join(os.path.dirname(__file__), 'templates')
    env = Environment(loader=FileSystemLoader(tmpl_dir), autoescape=select_autoescape(['html', 'xml', 'j2']))
    tmpl = env.get_template('report.html.j2')
    days = [ctx for ctx in (day_context(day, username) for day in report.values()) if ctx]
    context = {
        'days': days,
        'username': username,
        'generated_at': generated_at,
        'scope': scope,
    }
    return tmpl.render(**context)


def render_json(report: Mapping[str, Day]) -> str:
    """Export every day of the report, empty ones included, as a JSON array."""
    return json.dumps([day.to_dict() for day in report.values()], indent=2)


def render(
    report: Mapping[str, Day],
    fmt: str = 'html',
    username: str = '',
    generated_at: Optional[str] = None,
    scope: Optional[str] = None,
) -> str:
    fmt_l = (fmt or 'html').lower()
    if fmt_l in ('html', 'htm'):
        return render_html(report, username=username, generated_at=generated_at, scope=scope)
    if fmt_l in ('json', 'js'):
        return render_json(report)
    raise ValueError(f"Unsupported output format: {fmt}")
