"""
Purpose: Run check cycles once or on a recurring timer with a failure cooldown.
Constraints: Scheduling only; cycle logic lives in the orchestrator.
"""

# Imports
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from reddit_status_checker.checker.orchestrator import CycleInterrupted
from reddit_status_checker.core.models import CycleStats

logger = logging.getLogger(__name__)


@dataclass
class CooldownRetryPolicy:
    """Wait used after a cycle raised instead of completing."""

    cooldown_seconds: float = 300.0

    def delay_after_failure(self, error: Exception, consecutive_failures: int) -> float:
        return self.cooldown_seconds


# Public API
class CycleScheduler:
    def __init__(
        self,
        run_cycle: Callable[[], CycleStats],
        interval_seconds: float,
        *,
        retry_policy: Optional[CooldownRetryPolicy] = None,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self.retry_policy = retry_policy or CooldownRetryPolicy()
        self.stop_event = stop_event or threading.Event()
        self.clock = clock
        self.cycles_completed = 0
        self.cycles_failed = 0

    def stop(self) -> None:
        self.stop_event.set()

    def run_once(self) -> Optional[CycleStats]:
        """Run a single cycle; None when shutdown interrupted it. Other errors propagate."""
        try:
            stats = self.run_cycle()
        except CycleInterrupted:
            logger.info("Cycle interrupted by shutdown request")
            return None
        self.cycles_completed += 1
        return stats

    def run_forever(self) -> None:
        """Run cycles until the stop event is set."""
        consecutive_failures = 0
        while not self.stop_event.is_set():
            started = self.clock()
            logger.info("🔄 Starting check cycle at %s", started.isoformat(timespec="seconds"))
            try:
                stats = self.run_once()
            except Exception as exc:
                consecutive_failures += 1
                self.cycles_failed += 1
                delay = self.retry_policy.delay_after_failure(exc, consecutive_failures)
                logger.exception("❌ Check cycle failed: %s", exc)
                logger.info("Retrying in %.0f minute(s)", delay / 60.0)
            else:
                if stats is None:
                    break
                consecutive_failures = 0
                delay = self.interval_seconds
                logger.info(
                    "✅ Cycle done: %s checked, %s errors. Next check at %s",
                    stats.checked,
                    stats.errors,
                    (self.clock() + timedelta(seconds=delay)).isoformat(timespec="seconds"),
                )
            if self.stop_event.wait(delay):
                break
        logger.info("Scheduler stopped after %s cycle(s)", self.cycles_completed)
