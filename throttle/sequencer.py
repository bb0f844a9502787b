"""
Run deferred coroutines one at a time with a pause between them.
Used for the search requests, which GitHub limits more tightly than the REST endpoints.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List

from .context import ThrottleContext

logger = logging.getLogger(__name__)


async def run_sequenced(operations: Iterable[Callable[[], Awaitable[Any]]], throttle: ThrottleContext) -> List[Any]:
    """Await each operation in order and return their results in input order.

    An operation is a zero-argument callable returning an awaitable; it is not invoked until the
    previous one has settled and ``throttle.delay`` seconds have passed. The delay is read after
    every completion, so backoff applied while the sequence runs slows down the remaining calls.
    The first exception propagates and the remaining operations are never started.
    """
    results: List[Any] = []
    for index, operation in enumerate(operations):
        results.append(await operation())
        delay = max(0.0, float(throttle.delay))
        logger.debug("Sequenced call %d finished; sleeping %.2fs", index, delay)
        # sleep(0) still yields to the loop between calls
        await asyncio.sleep(delay)
    return results


__all__ = ["run_sequenced"]
