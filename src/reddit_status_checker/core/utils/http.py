"""
Purpose: HTTP helpers with retry/backoff for the store client.
Constraints: No business logic; callers handle response validation.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import requests

from reddit_status_checker.core.utils.retry import retry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class RetryableStatusError(RuntimeError):
    """A response status worth retrying; keeps the last response for the caller."""

    def __init__(self, response: requests.Response):
        self.response = response
        super().__init__(f"Retryable HTTP status: {response.status_code}")


def request_with_retry(
    method: str,
    url: str,
    *,
    session: Optional[requests.Session] = None,
    retry_on_status: Optional[frozenset] = None,
    attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    jitter: Optional[float] = None,
    sleep: Optional[Callable[[float], None]] = None,
    **kwargs,
) -> requests.Response:
    """Send a request, retrying transport errors and retryable statuses.

    When retries run out on a retryable status the last response is returned
    rather than raised, so callers see the real status and body.
    """
    retry_on_status = retry_on_status if retry_on_status is not None else RETRYABLE_STATUS
    attempts = attempts or int(os.getenv("HTTP_RETRY_ATTEMPTS", "3"))
    base_delay = base_delay if base_delay is not None else float(os.getenv("HTTP_RETRY_BASE_DELAY", "0.5"))
    max_delay = max_delay if max_delay is not None else float(os.getenv("HTTP_RETRY_MAX_DELAY", "5.0"))
    jitter = jitter if jitter is not None else float(os.getenv("HTTP_RETRY_JITTER", "0.2"))
    sender = session or requests

    def _do_request():
        resp = sender.request(method, url, **kwargs)
        if resp.status_code in retry_on_status:
            raise RetryableStatusError(resp)
        return resp

    def _log_retry(attempt: int, exc: Exception) -> None:
        logger.warning("%s %s failed (attempt %s/%s): %s; retrying", method, url, attempt, attempts, exc)

    retry_kwargs = {}
    if sleep is not None:
        retry_kwargs["sleep"] = sleep
    try:
        return retry(
            _do_request,
            attempts=attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            jitter=jitter,
            exceptions=(RetryableStatusError, requests.ConnectionError, requests.Timeout),
            on_retry=_log_retry,
            **retry_kwargs,
        )
    except RetryableStatusError as exc:
        return exc.response


def get_with_retry(url: str, **kwargs) -> requests.Response:
    return request_with_retry("GET", url, **kwargs)


def patch_with_retry(url: str, **kwargs) -> requests.Response:
    return request_with_retry("PATCH", url, **kwargs)
