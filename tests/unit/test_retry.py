import pytest

from reddit_status_checker.core.utils.retry import backoff_delay, retry


def test_retry_succeeds_after_failures():
    attempts = []
    sleeps = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert retry(flaky, attempts=3, base_delay=1.0, jitter=0, sleep=sleeps.append) == "ok"
    assert sleeps == [1.0, 2.0]


def test_retry_reraises_last_error():
    def always_fail():
        raise TimeoutError("slow")

    with pytest.raises(TimeoutError):
        retry(always_fail, attempts=2, base_delay=0, jitter=0, sleep=lambda _: None)


def test_non_matching_exception_is_not_retried():
    calls = []

    def fail():
        calls.append(1)
        raise KeyError("x")

    with pytest.raises(KeyError):
        retry(fail, attempts=5, exceptions=(ConnectionError,), sleep=lambda _: None)
    assert len(calls) == 1


def test_backoff_is_capped():
    assert backoff_delay(10, base_delay=0.5, max_delay=5.0) == 5.0
