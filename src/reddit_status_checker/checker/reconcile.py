"""
Purpose: Choose the status to persist from the stored and freshly probed states.
Constraints: Pure function.
"""

from reddit_status_checker.core.models import PostStatus


def reconcile(previous: PostStatus, probed: PostStatus) -> PostStatus:
    """Keep a Live post Live when the probe only says Not Found.

    Not Found is also the prober's fallback for every failure it cannot
    classify, so it is not trusted over a confirmed Live status.
    """
    if previous is PostStatus.LIVE and probed is PostStatus.NOT_FOUND:
        return PostStatus.LIVE
    return probed
