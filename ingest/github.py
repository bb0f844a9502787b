"""
GitHub REST client used by the activity aggregator.
Each request goes through the RateLimitController; blocking requests calls run in a worker
thread so many of them can be outstanding on one event loop.
"""
import asyncio
import logging
from typing import List, Dict, Any, Optional
import requests
from throttle.retry import RateLimitController

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
DEFAULT_PER_PAGE = 30
REQUEST_TIMEOUT = 30


class GitHubAPIError(RuntimeError):
    """Raised for any non-throttling error response from GitHub."""

    def __init__(self, status: int, url: str, body: Any = None):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(f"GitHub API returned {status} for {url}")


def _parse_body(resp):
    try:
        return resp.json()
    except ValueError:
        return getattr(resp, 'text', None)


def _page_items(body: Any) -> List[Dict[str, Any]]:
    """Search endpoints wrap results in ``items``; list endpoints return the list itself."""
    if isinstance(body, dict):
        return list(body.get('items') or [])
    if isinstance(body, list):
        return body
    return []


def _next_page_url(resp) -> Optional[str]:
    links = getattr(resp, 'links', None)
    if not isinstance(links, dict):
        return None
    url = (links.get('next') or {}).get('url')
    return url if isinstance(url, str) and url else None


class GitHubClient:
    """Thin async wrapper over the GitHub endpoints the activity report needs."""

    def __init__(self, token: str, controller: RateLimitController, base_url: str = None, per_page: int = DEFAULT_PER_PAGE):
        self.token = token
        self.controller = controller
        self.base_url = (base_url or API_URL).rstrip('/')
        self.per_page = per_page
        self.headers = {
            "Authorization": f"Bearer {self.token}" if self.token else "",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith('http://') or path_or_url.startswith('https://'):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None):
        merged_headers = dict(self.headers)
        merged_headers.update(headers or {})

        async def send():
            return await asyncio.to_thread(requests.get, url, headers=merged_headers, params=params or {}, timeout=REQUEST_TIMEOUT)

        resp = await self.controller.execute(send, f"GET {url}")
        status = getattr(resp, 'status_code', 0)
        if status >= 400:
            raise GitHubAPIError(status, url, _parse_body(resp))
        return resp

    async def paginate(self, path_or_url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        """GET every page of a list or search endpoint and return the concatenated items.

        Follows the ``Link: rel="next"`` header; the next URL already carries the query string.
        """
        url = self._url(path_or_url)
        page_params = dict(params or {})
        page_params.setdefault('per_page', per_page or self.per_page)
        items: List[Dict[str, Any]] = []
        while url:
            resp = await self._get(url, page_params, headers)
            items.extend(_page_items(_parse_body(resp)))
            url = _next_page_url(resp)
            page_params = None
        logger.debug("Fetched %d item(s) from %s", len(items), path_or_url)
        return items

    async def get_authenticated_user(self) -> Dict[str, Any]:
        resp = await self._get(self._url('/user'))
        return _parse_body(resp) or {}

    async def get_username(self) -> str:
        user = await self.get_authenticated_user()
        return user.get('login') or ''

    async def search_issues(self, query: str, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.paginate('/search/issues', {'q': query}, per_page=per_page)

    async def search_commits(self, query: str, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.paginate('/search/commits', {'q': query}, per_page=per_page)

    async def list_pull_requests_associated_with_commit(self, owner: str, repo: str, sha: str) -> List[Dict[str, Any]]:
        return await self.paginate(f'/repos/{owner}/{repo}/commits/{sha}/pulls')
