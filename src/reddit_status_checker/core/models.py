"""
Purpose: Shared data models for cross-module communication.
Constraints: Data containers only; no I/O.
"""

# Imports
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


# Public API
class PostStatus(str, Enum):
    """Checker status as stored in the table."""

    UNKNOWN = "Unknown"
    LIVE = "Live"
    REMOVED = "Removed"
    NOT_FOUND = "Not Found"

    @classmethod
    def from_field(cls, value) -> "PostStatus":
        """Decode a stored field value; absent or unrecognised values map to UNKNOWN."""
        if isinstance(value, str):
            for status in cls:
                if status is not cls.UNKNOWN and status.value == value.strip():
                    return status
        return cls.UNKNOWN


@dataclass
class TrackedRecord:
    """One row of the tracking table, reduced to what the checker reads."""

    record_id: str
    post_url: Optional[str] = None
    status: PostStatus = PostStatus.UNKNOWN
    last_checked: Optional[datetime] = None
    comment_count: int = 0
    collapsed_count: int = 0
    client_name: Optional[str] = None
    post_number: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.client_name or 'Unknown'} - Post #{self.post_number or '?'}"


@dataclass
class ProbeResult:
    status: PostStatus
    comment_count: int = 0
    collapsed_count: int = 0
    error: Optional[str] = None

    @classmethod
    def not_found(cls, error: str) -> "ProbeResult":
        """Fallback result used whenever the true state could not be determined."""
        return cls(status=PostStatus.NOT_FOUND, comment_count=0, collapsed_count=0, error=error)


@dataclass
class CheckerUpdate:
    """Field values written back for one record."""

    status: PostStatus
    comment_count: int
    collapsed_count: int
    last_checked: datetime


@dataclass
class CycleStats:
    """Per-cycle counters; created and discarded by each run."""

    success: int = 0
    errors: int = 0
    skipped: int = 0
    total_records: int = 0
    stale_records: int = 0
    probe_fallbacks: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    statuses: dict = field(default_factory=dict)

    @property
    def checked(self) -> int:
        return self.success + self.errors

    @property
    def duration_seconds(self) -> float:
        if not self.started_at or not self.finished_at:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def record_status(self, status: PostStatus) -> None:
        self.statuses[status.value] = self.statuses.get(status.value, 0) + 1
