"""
Purpose: Decide which tracked records are due for a re-check.
Constraints: Pure functions; no I/O.
"""

from datetime import datetime, timezone
from typing import Iterable, List

from reddit_status_checker.core.config_models import StalenessSettings
from reddit_status_checker.core.models import PostStatus, TrackedRecord


def hours_since(then: datetime, now: datetime) -> float:
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - then).total_seconds() / 3600.0


def is_stale(record: TrackedRecord, now: datetime, settings: StalenessSettings) -> bool:
    if not record.post_url:
        return False
    if record.last_checked is None:
        return True

    status = record.status
    if status is PostStatus.REMOVED and not settings.recheck_removed:
        return False

    elapsed = hours_since(record.last_checked, now)
    if status is PostStatus.LIVE:
        return elapsed >= settings.live_stale_after_hours
    if status is PostStatus.NOT_FOUND:
        return elapsed >= settings.not_found_stale_after_hours
    # unknown states, and Removed when rechecking is enabled
    return True


def filter_stale(records: Iterable[TrackedRecord], now: datetime, settings: StalenessSettings) -> List[TrackedRecord]:
    """Stale records in their original order."""
    return [record for record in records if is_stale(record, now, settings)]
