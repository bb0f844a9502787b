"""
Adaptive inter-request delay shared by the sequencer and the backoff handler.
One instance is created per run and handed explicitly to every collaborator.
"""
import os
from typing import Optional

# defaults can be driven by environment variables and overridden from the CLI
# - DAYLOG_THROTTLE_BASE: float (seconds between sequenced calls)
# - DAYLOG_THROTTLE_INCREMENT: float (seconds added per rate-limit retry)
DEFAULT_BASE_DELAY = float(os.getenv("DAYLOG_THROTTLE_BASE", "0.5"))
DEFAULT_DELAY_INCREMENT = float(os.getenv("DAYLOG_THROTTLE_INCREMENT", "1.0"))


class ThrottleContext:
    """Holds the current delay (seconds) consulted between sequenced calls."""

    def __init__(self, base_delay: Optional[float] = None, increment: Optional[float] = None):
        self.base_delay = float(base_delay) if base_delay is not None else DEFAULT_BASE_DELAY
        self.increment = float(increment) if increment is not None else DEFAULT_DELAY_INCREMENT
        self.delay = self.base_delay

    def penalize_rate_limit(self, retry_count: int) -> float:
        """Grow the delay additively with the retry count of the penalized request."""
        self.delay = self.base_delay + retry_count * self.increment
        return self.delay

    def penalize_abuse(self) -> float:
        # a zero delay would stay zero when doubled
        self.delay = (self.delay or self.base_delay or self.increment) * 2
        return self.delay

    def __repr__(self):
        return f"ThrottleContext(delay={self.delay}, base_delay={self.base_delay}, increment={self.increment})"
