"""
Purpose: Airtable field labels and conversion between table rows and checker models.
Constraints: Pure mapping helpers; no network.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from reddit_status_checker.core.models import CheckerUpdate, PostStatus, TrackedRecord

POST_LINK = "Post Link (completed)"
POST_STATUS = "Post Status (Checker)"
COMMENT_AMOUNT = "Comment Amount (Checker)"
COLLAPSED_AMOUNT = "Collapsed Comment Amount (Checker)"
LAST_CHECKED = "Last Checked (Checker)"
CLIENT_NAME = "Client Name"
POST_NUMBER = "Post #"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 instant; naive values are taken as UTC, bad values as absent."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def record_from_api(raw: Mapping[str, Any]) -> TrackedRecord:
    fields = raw.get("fields") or {}
    return TrackedRecord(
        record_id=str(raw.get("id", "")),
        post_url=_text(fields.get(POST_LINK)),
        status=PostStatus.from_field(fields.get(POST_STATUS)),
        last_checked=parse_timestamp(fields.get(LAST_CHECKED)),
        comment_count=_count(fields.get(COMMENT_AMOUNT)),
        collapsed_count=_count(fields.get(COLLAPSED_AMOUNT)),
        client_name=_text(fields.get(CLIENT_NAME)),
        post_number=_text(fields.get(POST_NUMBER)),
    )


def update_payload(update: CheckerUpdate) -> Dict[str, Any]:
    if update.status is PostStatus.UNKNOWN:
        raise ValueError("Unknown is not a storable status")
    return {
        "fields": {
            POST_STATUS: update.status.value,
            COMMENT_AMOUNT: update.comment_count,
            COLLAPSED_AMOUNT: update.collapsed_count,
            LAST_CHECKED: format_timestamp(update.last_checked),
        }
    }
