"""
Purpose: Probe a Reddit post's public JSON through the proxy and classify its status.
Constraints: Never raises for network or payload failures; returns a fallback result instead.
"""

# Imports
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlparse, urlunparse

import requests

from reddit_status_checker.core.models import PostStatus, ProbeResult
from reddit_status_checker.reddit.comments import count_collapsed, finite_number, listing_children, parse_nodes

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 30

INVALID_FORMAT_ERROR = "Invalid Reddit response format"
NOT_FOUND_ERROR = "Post not found (404)"


class InvalidResponseFormat(ValueError):
    pass


# Helpers
def json_endpoint(post_url: str) -> str:
    """Canonical `.json` URL for a post link (query, fragment and trailing slash dropped)."""
    trimmed = (post_url or "").strip()
    if trimmed and "://" not in trimmed:
        trimmed = f"https://{trimmed.lstrip('/')}"
    parsed = urlparse(trimmed)
    if not parsed.netloc:
        raise ValueError(f"Invalid post URL: {post_url!r}")
    path = parsed.path.rstrip("/")
    return urlunparse((parsed.scheme, parsed.netloc, f"{path}.json", "", "", ""))


def classify_post(post: Mapping[str, Any]) -> PostStatus:
    if post.get("removed_by_category"):
        return PostStatus.REMOVED
    if post.get("is_robot_indexable") is False:
        return PostStatus.REMOVED
    return PostStatus.LIVE


def parse_post_payload(payload: Any) -> ProbeResult:
    """Classify a `[post listing, comment listing]` payload.

    Raises InvalidResponseFormat when the shape does not match.
    """
    if not isinstance(payload, list) or len(payload) < 2:
        raise InvalidResponseFormat(INVALID_FORMAT_ERROR)

    post_children = listing_children(payload[0])
    if not post_children or not isinstance(post_children[0], Mapping):
        raise InvalidResponseFormat(INVALID_FORMAT_ERROR)
    post = post_children[0].get("data")
    if not isinstance(post, Mapping):
        raise InvalidResponseFormat(INVALID_FORMAT_ERROR)

    comments_listing = payload[1]
    if not isinstance(comments_listing, Mapping) or not isinstance(comments_listing.get("data"), Mapping):
        raise InvalidResponseFormat(INVALID_FORMAT_ERROR)

    num_comments = finite_number(post.get("num_comments")) or 0

    return ProbeResult(
        status=classify_post(post),
        comment_count=max(0, int(num_comments)),
        collapsed_count=count_collapsed(parse_nodes(listing_children(comments_listing))),
    )


# Public API
class RedditProber:
    """Fetches post JSON through an authenticated forward proxy."""

    def __init__(
        self,
        proxies: Optional[Mapping[str, str]] = None,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.proxies = dict(proxies or {})
        self.timeout = timeout
        self.session = session

    @classmethod
    def from_settings(cls, proxy_settings, timeout: int = DEFAULT_TIMEOUT) -> "RedditProber":
        return cls(proxy_settings.as_requests_proxies(), timeout=timeout)

    def probe(self, post_url: str) -> ProbeResult:
        try:
            endpoint = json_endpoint(post_url)
        except ValueError as exc:
            return ProbeResult.not_found(str(exc))

        logger.debug("Checking %s", endpoint)
        sender = self.session or requests
        try:
            response = sender.get(
                endpoint,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                proxies=self.proxies or None,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return parse_post_payload(response.json())
        except InvalidResponseFormat:
            return ProbeResult.not_found(INVALID_FORMAT_ERROR)
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status == 404:
                return ProbeResult.not_found(NOT_FOUND_ERROR)
            return ProbeResult.not_found(f"HTTP {status}: {exc}")
        except (requests.RequestException, ValueError) as exc:
            # requests' JSONDecodeError is both a RequestException and a ValueError
            return ProbeResult.not_found(str(exc) or type(exc).__name__)
