"""
Purpose: Event sink for cycle progress, separate from the checking logic.
Constraints: Reporting only; must not change cycle outcomes.
"""

# Imports
import logging
from typing import Callable, Optional

from reddit_status_checker.core.metrics import get_metrics
from reddit_status_checker.core.models import CycleStats, PostStatus, ProbeResult, TrackedRecord

_STATUS_MARKS = {
    PostStatus.LIVE: "✓",
    PostStatus.REMOVED: "✗",
    PostStatus.NOT_FOUND: "⚠",
}


# Public API
class CycleReporter:
    """No-op base; override the events you care about."""

    def cycle_started(self) -> None:
        pass

    def records_loaded(self, total: int, stale: int) -> None:
        pass

    def candidates_truncated(self, limit: int, skipped: int) -> None:
        pass

    def record_started(self, index: int, total: int, record: TrackedRecord) -> None:
        pass

    def record_checked(self, record: TrackedRecord, result: ProbeResult, final_status: PostStatus) -> None:
        pass

    def record_skipped(self, record: TrackedRecord, reason: str) -> None:
        pass

    def record_failed(self, record: TrackedRecord, error: Exception) -> None:
        pass

    def cycle_finished(self, stats: CycleStats) -> None:
        pass


class LoggingReporter(CycleReporter):
    """Writes the operator-facing progress lines and feeds the metrics collector.

    `events`, when given, needs `log_event(event, details, level=..., record_id=...)`
    (a UnifiedLogger); per-record outcomes and the cycle summary go there as
    structured events.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        on_cycle_finished: Optional[Callable[[], None]] = None,
        events=None,
    ):
        self.logger = logger or logging.getLogger("reddit_status_checker.cycle")
        self.on_cycle_finished = on_cycle_finished
        self.events = events

    def cycle_started(self) -> None:
        self.logger.info("📋 Fetching records from Airtable...")

    def records_loaded(self, total: int, stale: int) -> None:
        self.logger.info("✓ Found %s records, %s need checking", total, stale)
        if not stale:
            self.logger.info("No stale records to check.")

    def candidates_truncated(self, limit: int, skipped: int) -> None:
        self.logger.info("Limiting to %s records this cycle (%s deferred)", limit, skipped)

    def record_started(self, index: int, total: int, record: TrackedRecord) -> None:
        self.logger.info("[%s/%s] %s", index, total, record.label)

    def record_checked(self, record: TrackedRecord, result: ProbeResult, final_status: PostStatus) -> None:
        if result.error:
            self.logger.warning("  ⚠ %s: %s", record.record_id, result.error)
        if final_status is not result.status:
            self.logger.info(
                "  Keeping %s (probe said %s)", final_status.value, result.status.value
            )
        self.logger.info(
            "  Status: %s %s | Comments: %s | Collapsed: %s",
            _STATUS_MARKS.get(final_status, "?"),
            final_status.value,
            result.comment_count,
            result.collapsed_count,
        )
        get_metrics().record_probe(result.status.value, fallback=bool(result.error))
        self._event(
            "record_checked",
            {
                "status": final_status.value,
                "probed_status": result.status.value,
                "comment_count": result.comment_count,
                "collapsed_count": result.collapsed_count,
                "error": result.error,
            },
            record_id=record.record_id,
        )

    def record_skipped(self, record: TrackedRecord, reason: str) -> None:
        self.logger.info("  ⚠ Skipping %s: %s", record.record_id, reason)

    def record_failed(self, record: TrackedRecord, error: Exception) -> None:
        self.logger.error(
            "  ✗ Failed to check/update %s: %s",
            record.record_id,
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
        get_metrics().record_error("record")
        self._event("record_failed", {"error": str(error)}, level="ERROR", record_id=record.record_id)

    def cycle_finished(self, stats: CycleStats) -> None:
        self.logger.info("=" * 40)
        self.logger.info("📊 Cycle summary")
        self.logger.info("Records found: %s | stale: %s", stats.total_records, stats.stale_records)
        self.logger.info(
            "Checked: %s | succeeded: %s | errors: %s | deferred: %s | probe fallbacks: %s",
            stats.checked,
            stats.success,
            stats.errors,
            stats.skipped,
            stats.probe_fallbacks,
        )
        if stats.statuses:
            self.logger.info(
                "Statuses: %s",
                ", ".join(f"{name}={count}" for name, count in sorted(stats.statuses.items())),
            )
        self.logger.info("Duration: %.1fs", stats.duration_seconds)
        self.logger.info("=" * 40)
        summary = {
            "success": stats.success,
            "errors": stats.errors,
            "skipped": stats.skipped,
            "total_records": stats.total_records,
            "stale_records": stats.stale_records,
            "duration_seconds": round(stats.duration_seconds, 3),
        }
        get_metrics().record_cycle(summary)
        self._event(
            "cycle_finished",
            dict(summary, probe_fallbacks=stats.probe_fallbacks, statuses=dict(stats.statuses)),
        )
        if self.on_cycle_finished:
            self.on_cycle_finished()

    def _event(self, name: str, details: dict, level: str = "INFO", record_id: Optional[str] = None) -> None:
        if self.events is not None:
            self.events.log_event(name, details, level=level, record_id=record_id)
