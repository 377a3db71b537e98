#!/usr/bin/env python3
"""
Reddit Status Checker - keeps the checker columns of the tracking table current.

Runs continuously: every CHECK_INTERVAL_MINUTES it re-checks stale posts and
writes status, comment and collapsed-comment counts back to Airtable. Set
RUN_ONCE=true for a single cycle. Stop with Ctrl+C or SIGTERM.
"""

import signal
import sys
import threading
from typing import Any

from reddit_status_checker.airtable.client import AirtableStore
from reddit_status_checker.checker.orchestrator import StatusCheckCycle
from reddit_status_checker.checker.reporting import LoggingReporter
from reddit_status_checker.checker.scheduler import CooldownRetryPolicy, CycleScheduler
from reddit_status_checker.core.config import ConfigError, ConfigManager
from reddit_status_checker.core.logging import UnifiedLogger
from reddit_status_checker.reddit.prober import RedditProber


def install_signal_handlers(stop_event: threading.Event, logger) -> None:
    def _handle(sig: int, frame: Any) -> None:
        logger.info("⚠️  Shutdown requested (%s). Finishing current record...", signal.Signals(sig).name)
        stop_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def build_scheduler(config: ConfigManager, stop_event: threading.Event, unified: UnifiedLogger) -> CycleScheduler:
    timeout = config.server.request_timeout_seconds
    cycle = StatusCheckCycle(
        store=AirtableStore(config.airtable, timeout=timeout),
        prober=RedditProber.from_settings(config.proxy, timeout=timeout),
        staleness=config.staleness,
        server=config.server,
        reporter=LoggingReporter(on_cycle_finished=unified.log_metrics_snapshot, events=unified),
        stop_event=stop_event,
    )
    return CycleScheduler(
        cycle.run_cycle,
        interval_seconds=config.server.check_interval_minutes * 60,
        retry_policy=CooldownRetryPolicy(cooldown_seconds=config.server.failure_cooldown_minutes * 60),
        stop_event=stop_event,
    )


def main() -> int:
    unified = UnifiedLogger("reddit_status_checker")
    logger = unified.get_logger()
    logger.info("🚀 Reddit Status Checker")

    config = ConfigManager().load_env()
    try:
        config.validate()
    except ConfigError as exc:
        print("Configuration errors:", file=sys.stderr)
        for problem in exc.problems:
            print(f"  - {problem}", file=sys.stderr)
        print("\nPlease check your .env file", file=sys.stderr)
        return 1
    logger.info("✓ Configuration validated")
    config.print_summary(logger)

    stop_event = threading.Event()
    install_signal_handlers(stop_event, logger)
    scheduler = build_scheduler(config, stop_event, unified)

    if config.server.run_once:
        try:
            scheduler.run_once()
        except Exception as exc:
            logger.exception("❌ Fatal error: %s", exc)
            return 1
        return 0

    scheduler.run_forever()
    logger.info("👋 Checker stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
