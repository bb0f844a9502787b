"""
Rate-limit-aware retry policy for GitHub requests.
Distinguishes the primary rate limit from secondary (abuse) limits and feeds the penalty back
into the shared ThrottleContext so later sequenced calls slow down too.
"""

import os
import time
import asyncio
import logging
import email.utils
from datetime import datetime, timezone
from collections.abc import Mapping
from typing import Optional, Dict, Any, Awaitable, Callable

from .context import ThrottleContext

logger = logging.getLogger(__name__)

# retry defaults from environment
DEFAULT_MAX_RETRIES = int(os.getenv("DAYLOG_MAX_RETRIES", "5"))
DEFAULT_MAX_WAIT = float(os.getenv("DAYLOG_MAX_WAIT", "900.0"))

RATE_LIMITED = "rate_limited"
ABUSE_DETECTED = "abuse_detected"

_ABUSE_MARKERS = ("secondary rate limit", "abuse")


class RateLimitExceededError(RuntimeError):
    """Raised when a request is still rate limited after the retry ceiling."""


class AbuseLimitError(RuntimeError):
    """Raised when GitHub flags the same request for abuse a second time."""


def _parse_retry_after(raw_ra: str):
    if not raw_ra:
        return None
    try:
        return float(raw_ra)
    except (TypeError, ValueError):
        try:
            dt = email.utils.parsedate_to_datetime(raw_ra)
        except (TypeError, ValueError):
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        ra = (dt - datetime.now(timezone.utc)).total_seconds()
        return max(0.0, ra)


def _safe_int_from_headers(headers: Dict[str, Any], key: str) -> Optional[int]:
    try:
        val = headers.get(key)
        return int(val) if val is not None else None
    except (TypeError, ValueError):
        return None


def _safe_float_from_headers(headers: Dict[str, Any], key: str) -> Optional[float]:
    try:
        val = headers.get(key)
        return float(val) if val is not None else None
    except (TypeError, ValueError):
        return None


def _parse_rate_headers(resp):
    headers = getattr(resp, 'headers', None)
    if not isinstance(headers, Mapping):
        headers = {}
    ra = _parse_retry_after(headers.get('Retry-After'))
    rl_remaining = _safe_int_from_headers(headers, 'X-RateLimit-Remaining')
    rl_reset = _safe_float_from_headers(headers, 'X-RateLimit-Reset')
    return ra, rl_remaining, rl_reset


def _response_text(resp) -> str:
    text = getattr(resp, 'text', '')
    return text.lower() if isinstance(text, str) else ''


def classify_response(resp) -> Optional[str]:
    """Return RATE_LIMITED, ABUSE_DETECTED or None for a response that is not a throttling signal."""
    status = getattr(resp, 'status_code', 0)
    if status not in (403, 429):
        return None
    ra, rl_remaining, _ = _parse_rate_headers(resp)
    if rl_remaining is not None and rl_remaining <= 0:
        return RATE_LIMITED
    text = _response_text(resp)
    if ra is not None or any(marker in text for marker in _ABUSE_MARKERS):
        return ABUSE_DETECTED
    if status == 429:
        return RATE_LIMITED
    return None


def _compute_wait_seconds(ra: Optional[float], rl_reset: Optional[float], fallback: float, max_wait: float) -> float:
    if ra is not None:
        return min(float(ra), max_wait)
    if rl_reset:
        return min(max(0.0, float(rl_reset) - time.time()), max_wait)
    return min(max(0.0, float(fallback)), max_wait)


class RateLimitController:
    """Retry policy reacting to GitHub throttling signals.

    Rate limited: retried up to ``max_retries`` times; each retry sets the shared delay to
    ``base + retry_count * increment``. Past the ceiling the request fails with RateLimitExceededError.

    Abuse detected: retried once with the shared delay doubled; a second hit fails the request
    with AbuseLimitError.
    """

    def __init__(self, throttle: ThrottleContext, max_retries: Optional[int] = None, max_wait: Optional[float] = None):
        self.throttle = throttle
        self.max_retries = int(max_retries) if max_retries is not None else DEFAULT_MAX_RETRIES
        self.max_wait = float(max_wait) if max_wait is not None else DEFAULT_MAX_WAIT

    def on_rate_limit(self, retry_after: float, retry_count: int, description: str) -> bool:
        if retry_count < self.max_retries:
            logger.warning("Rate-limited by the GitHub API for %s (retry %d of %d); waiting %.1fs", description, retry_count + 1, self.max_retries, retry_after)
            self.throttle.penalize_rate_limit(retry_count)
            return True
        logger.error("Still rate-limited after %d retries for %s", self.max_retries, description)
        return False

    def on_abuse_detected(self, retry_after: float, retry_count: int, description: str) -> bool:
        if retry_count < 1:
            logger.warning("Hit the GitHub abuse limit for %s; retrying once in %.1fs", description, retry_after)
            self.throttle.penalize_abuse()
            return True
        logger.error("Abuse detected for request %s", description)
        return False

    async def execute(self, send: Callable[[], Awaitable[Any]], description: str = "request"):
        """Await ``send()`` until it returns a response that is not a throttling signal.

        Non-throttling responses (including other errors) are returned unchanged for the caller to judge.
        """
        retry_count = 0
        while True:
            resp = await send()
            signal = classify_response(resp)
            if signal is None:
                return resp

            ra, _, rl_reset = _parse_rate_headers(resp)
            wait_seconds = _compute_wait_seconds(ra, rl_reset, self.throttle.delay, self.max_wait)
            if signal == RATE_LIMITED:
                if not self.on_rate_limit(wait_seconds, retry_count, description):
                    raise RateLimitExceededError(f"rate limit retries exhausted for {description}")
            elif not self.on_abuse_detected(wait_seconds, retry_count, description):
                raise AbuseLimitError(f"abuse limit hit twice for {description}")

            await asyncio.sleep(wait_seconds)
            retry_count += 1


__all__ = [
    "RateLimitController",
    "RateLimitExceededError",
    "AbuseLimitError",
    "classify_response",
    "RATE_LIMITED",
    "ABUSE_DETECTED",
]
