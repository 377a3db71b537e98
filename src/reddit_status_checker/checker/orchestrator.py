"""
Purpose: Run one check cycle: list, filter, probe, reconcile, write back.
Constraints: Strictly sequential; per-record failures never abort the cycle.
"""

# Imports
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from reddit_status_checker.checker.reconcile import reconcile
from reddit_status_checker.checker.reporting import CycleReporter
from reddit_status_checker.checker.staleness import filter_stale
from reddit_status_checker.core.config_models import ServerSettings, StalenessSettings
from reddit_status_checker.core.models import CheckerUpdate, CycleStats, TrackedRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CycleInterrupted(Exception):
    """Shutdown was requested between two records; the partial cycle has no result."""


# Public API
class StatusCheckCycle:
    """One pass over the tracking table.

    `store` needs `list_all()` and `update_fields(record_id, CheckerUpdate)`;
    `prober` needs `probe(post_url) -> ProbeResult`.
    """

    def __init__(
        self,
        store,
        prober,
        staleness: StalenessSettings,
        server: ServerSettings,
        *,
        reporter: Optional[CycleReporter] = None,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.prober = prober
        self.staleness = staleness
        self.server = server
        self.reporter = reporter or CycleReporter()
        self.stop_event = stop_event or threading.Event()
        self.clock = clock

    def run_cycle(self) -> CycleStats:
        stats = CycleStats(started_at=self.clock())
        self.reporter.cycle_started()

        records = self.store.list_all()
        candidates = filter_stale(records, self.clock(), self.staleness)
        stats.total_records = len(records)
        stats.stale_records = len(candidates)
        self.reporter.records_loaded(len(records), len(candidates))

        limit = self.server.max_records_to_check
        if limit > 0 and len(candidates) > limit:
            stats.skipped = len(candidates) - limit
            candidates = candidates[:limit]
            self.reporter.candidates_truncated(limit, stats.skipped)

        if not candidates:
            stats.finished_at = self.clock()
            return stats

        delay_seconds = self.server.delay_between_posts_ms / 1000.0
        total = len(candidates)
        for index, record in enumerate(candidates, start=1):
            self._raise_if_stopping()
            self.reporter.record_started(index, total, record)
            if not record.post_url:
                self.reporter.record_skipped(record, "no post URL")
            else:
                self._check_record(record, stats)

            if index < total and delay_seconds > 0:
                if self.stop_event.wait(delay_seconds):
                    raise CycleInterrupted()

        stats.finished_at = self.clock()
        self.reporter.cycle_finished(stats)
        return stats

    def _check_record(self, record: TrackedRecord, stats: CycleStats) -> None:
        try:
            result = self.prober.probe(record.post_url)
            final_status = reconcile(record.status, result.status)
            self.store.update_fields(
                record.record_id,
                CheckerUpdate(
                    status=final_status,
                    comment_count=result.comment_count,
                    collapsed_count=result.collapsed_count,
                    last_checked=self.clock(),
                ),
            )
        except Exception as exc:
            stats.errors += 1
            self.reporter.record_failed(record, exc)
            return

        stats.success += 1
        stats.record_status(final_status)
        if result.error:
            stats.probe_fallbacks += 1
        try:
            self.reporter.record_checked(record, result, final_status)
        except Exception as exc:
            # the write already happened; a reporting failure must not end the cycle
            logger.warning("Reporting failed for %s: %s", record.record_id, exc, exc_info=True)

    def _raise_if_stopping(self) -> None:
        if self.stop_event.is_set():
            raise CycleInterrupted()
