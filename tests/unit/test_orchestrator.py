import threading
from datetime import datetime, timedelta, timezone

import pytest

from reddit_status_checker.checker import orchestrator
from reddit_status_checker.checker.orchestrator import CycleInterrupted, StatusCheckCycle
from reddit_status_checker.checker.reporting import CycleReporter
from reddit_status_checker.core.config_models import ServerSettings, StalenessSettings
from reddit_status_checker.core.models import PostStatus, ProbeResult, TrackedRecord

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def record(record_id, status=PostStatus.UNKNOWN, hours_ago=None, url="auto"):
    return TrackedRecord(
        record_id=record_id,
        post_url=f"https://www.reddit.com/r/t/comments/{record_id}/" if url == "auto" else url,
        status=status,
        last_checked=None if hours_ago is None else NOW - timedelta(hours=hours_ago),
    )


class FakeStore:
    def __init__(self, records, fail_on=()):
        self.records = records
        self.fail_on = set(fail_on)
        self.updates = []

    def list_all(self):
        return list(self.records)

    def update_fields(self, record_id, update):
        if record_id in self.fail_on:
            raise RuntimeError("airtable down")
        self.updates.append((record_id, update))


class FakeProber:
    def __init__(self, results=None, default=None):
        self.results = results or {}
        self.default = default or ProbeResult(PostStatus.LIVE, 3, 1)
        self.calls = []

    def probe(self, post_url):
        self.calls.append(post_url)
        return self.results.get(post_url, self.default)


class RecordingReporter(CycleReporter):
    def __init__(self):
        self.events = []

    def records_loaded(self, total, stale):
        self.events.append(("loaded", total, stale))

    def record_skipped(self, record, reason):
        self.events.append(("skipped", record.record_id))

    def record_failed(self, record, error):
        self.events.append(("failed", record.record_id, str(error)))

    def cycle_finished(self, stats):
        self.events.append(("finished", stats.success, stats.errors))


class RecordingEvent(threading.Event):
    """Never blocks; remembers each requested wait."""

    def __init__(self, stop_after_waits=None):
        super().__init__()
        self.waits = []
        self.stop_after_waits = stop_after_waits

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self.stop_after_waits is not None and len(self.waits) >= self.stop_after_waits:
            self.set()
        return self.is_set()


def make_cycle(store, prober=None, *, max_records=0, delay_ms=2000, stop_event=None, reporter=None):
    return StatusCheckCycle(
        store,
        prober or FakeProber(),
        StalenessSettings(),
        ServerSettings(max_records_to_check=max_records, delay_between_posts_ms=delay_ms),
        reporter=reporter,
        stop_event=stop_event or RecordingEvent(),
        clock=lambda: NOW,
    )


def test_no_stale_candidates_returns_zero_stats_without_writes():
    store = FakeStore([record("a", PostStatus.LIVE, 1), record("b", PostStatus.REMOVED, 100), record("c", url=None)])
    prober = FakeProber()
    stats = make_cycle(store, prober).run_cycle()
    assert (stats.success, stats.errors, stats.skipped) == (0, 0, 0)
    assert store.updates == []
    assert prober.calls == []


def test_update_failure_is_contained():
    store = FakeStore([record(x) for x in "abcde"], fail_on={"c"})
    reporter = RecordingReporter()
    stats = make_cycle(store, reporter=reporter).run_cycle()

    assert (stats.success, stats.errors) == (4, 1)
    assert [rid for rid, _ in store.updates] == ["a", "b", "d", "e"]
    assert ("failed", "c", "airtable down") in reporter.events
    assert reporter.events[-1] == ("finished", 4, 1)


def test_probe_exception_is_contained():
    class ExplodingProber(FakeProber):
        def probe(self, post_url):
            if "/b/" in post_url:
                raise RuntimeError("unexpected")
            return super().probe(post_url)

    store = FakeStore([record("a"), record("b"), record("c")])
    stats = make_cycle(store, ExplodingProber()).run_cycle()
    assert (stats.success, stats.errors) == (2, 1)


def test_reporter_failure_after_write_is_contained():
    class BrokenReporter(RecordingReporter):
        def record_checked(self, record, result, final_status):
            raise RuntimeError("disk full")

    store = FakeStore([record("a"), record("b")])
    reporter = BrokenReporter()
    stats = make_cycle(store, reporter=reporter).run_cycle()

    assert [rid for rid, _ in store.updates] == ["a", "b"]
    assert (stats.success, stats.errors) == (2, 0)
    assert reporter.events[-1] == ("finished", 2, 0)


def test_write_back_uses_reconciled_status_and_current_time():
    live = record("a", PostStatus.LIVE, 20)
    store = FakeStore([live])
    prober = FakeProber(default=ProbeResult.not_found("HTTP 503: proxy"))
    stats = make_cycle(store, prober).run_cycle()

    (record_id, update), = store.updates
    assert record_id == "a"
    assert update.status is PostStatus.LIVE
    assert (update.comment_count, update.collapsed_count) == (0, 0)
    assert update.last_checked == NOW
    assert stats.probe_fallbacks == 1
    assert stats.statuses == {"Live": 1}


def test_max_records_truncates_and_counts_skipped():
    store = FakeStore([record(x) for x in "abcde"])
    stats = make_cycle(store, max_records=2).run_cycle()
    assert [rid for rid, _ in store.updates] == ["a", "b"]
    assert (stats.success, stats.skipped, stats.stale_records) == (2, 3, 5)


def test_pause_between_records_but_not_after_last():
    event = RecordingEvent()
    make_cycle(FakeStore([record(x) for x in "abc"]), delay_ms=1500, stop_event=event).run_cycle()
    assert event.waits == [1.5, 1.5]


def test_zero_delay_does_not_wait():
    event = RecordingEvent()
    make_cycle(FakeStore([record(x) for x in "abc"]), delay_ms=0, stop_event=event).run_cycle()
    assert event.waits == []


def test_record_without_url_is_skipped_without_counting(monkeypatch):
    # let everything through the filter to reach the in-loop guard
    monkeypatch.setattr(orchestrator, "filter_stale", lambda records, now, settings: list(records))
    store = FakeStore([record("a"), record("b", url=None)])
    reporter = RecordingReporter()
    stats = make_cycle(store, reporter=reporter).run_cycle()

    assert (stats.success, stats.errors, stats.skipped) == (1, 0, 0)
    assert [rid for rid, _ in store.updates] == ["a"]
    assert ("skipped", "b") in reporter.events


def test_stop_during_pause_interrupts_cycle():
    store = FakeStore([record(x) for x in "abcd"])
    event = RecordingEvent(stop_after_waits=1)
    with pytest.raises(CycleInterrupted):
        make_cycle(store, stop_event=event).run_cycle()
    assert [rid for rid, _ in store.updates] == ["a"]


def test_stop_before_start_processes_nothing():
    store = FakeStore([record("a")])
    event = RecordingEvent()
    event.set()
    with pytest.raises(CycleInterrupted):
        make_cycle(store, stop_event=event).run_cycle()
    assert store.updates == []


def test_listing_failure_propagates():
    class BrokenStore(FakeStore):
        def list_all(self):
            raise RuntimeError("listing failed")

    with pytest.raises(RuntimeError, match="listing failed"):
        make_cycle(BrokenStore([])).run_cycle()
