"""
Throttle package: request pacing and rate-limit backoff shared across a run.
"""

from .context import ThrottleContext
from .sequencer import run_sequenced
from .retry import RateLimitController, RateLimitExceededError, AbuseLimitError

__all__ = ["ThrottleContext", "run_sequenced", "RateLimitController", "RateLimitExceededError", "AbuseLimitError"]
