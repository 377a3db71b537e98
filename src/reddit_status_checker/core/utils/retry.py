"""
Purpose: Retry helper with exponential backoff.
Constraints: Utility only; callers decide which exceptions are retriable.
"""

# Imports
import logging
import random
import time
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


# Public API
def backoff_delay(attempt: int, base_delay: float, max_delay: float, jitter: float = 0.0) -> float:
    """Delay before retry number `attempt` (1-based)."""
    delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
    if jitter:
        delay += random.uniform(0, jitter)
    return delay


def retry(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    jitter: float = 0.2,
    exceptions: Iterable[type] = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call `func` until it succeeds or `attempts` run out; re-raise the last error."""
    last_exc: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except tuple(exceptions) as exc:  # type: ignore[arg-type]
            last_exc = exc
            if attempt >= attempts:
                break
            if on_retry:
                on_retry(attempt, exc)
            else:
                logger.debug("Attempt %s/%s failed: %s", attempt, attempts, exc)
            sleep(backoff_delay(attempt, base_delay, max_delay, jitter))
    raise last_exc if last_exc else RuntimeError("retry: failed without exception")
