import threading

import pytest

from geotrack.retry import RetryCancelled, RetryConfig, default_config, with_backoff


class Flaky:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"failure {self.calls}")
        return "ok"


def test_default_config_values():
    cfg = default_config()
    assert (cfg.max_retries, cfg.initial_wait, cfg.max_wait) == (3, 1.0, 10.0)


def test_success_on_first_attempt_does_not_sleep():
    waits = []
    op = Flaky(0)
    assert with_backoff(op, RetryConfig(), sleep=waits.append) == "ok"
    assert op.calls == 1
    assert waits == []


def test_success_after_failures():
    waits = []
    op = Flaky(2)
    assert with_backoff(op, RetryConfig(max_retries=3), sleep=waits.append) == "ok"
    assert op.calls == 3
    assert len(waits) == 2


def test_waits_double_and_are_capped():
    waits = []
    op = Flaky(100)
    cfg = RetryConfig(max_retries=3, initial_wait=1.0, max_wait=3.0)
    with pytest.raises(ConnectionError):
        with_backoff(op, cfg, sleep=waits.append)
    assert waits == [1.0, 2.0, 3.0]


def test_last_error_is_raised_after_all_attempts():
    op = Flaky(100)
    cfg = RetryConfig(max_retries=2, initial_wait=0.0, max_wait=0.0)
    with pytest.raises(ConnectionError, match="failure 3"):
        with_backoff(op, cfg, sleep=lambda s: None)
    assert op.calls == cfg.max_retries + 1


def test_zero_retries_means_single_attempt():
    op = Flaky(100)
    with pytest.raises(ConnectionError):
        with_backoff(op, RetryConfig(max_retries=0), sleep=lambda s: None)
    assert op.calls == 1


def test_stop_already_set_cancels_before_retry():
    stop = threading.Event()
    stop.set()
    op = Flaky(100)
    with pytest.raises(RetryCancelled):
        with_backoff(op, RetryConfig(), stop=stop, sleep=lambda s: None)
    assert op.calls == 1


def test_stop_set_during_wait_cancels():
    stop = threading.Event()
    op = Flaky(100)

    def sleeper(seconds):
        stop.set()

    with pytest.raises(RetryCancelled) as info:
        with_backoff(op, RetryConfig(), stop=stop, sleep=sleeper)
    assert op.calls == 1
    assert isinstance(info.value.__cause__, ConnectionError)


def test_stop_event_wait_path_retries_when_not_set():
    stop = threading.Event()
    op = Flaky(1)
    cfg = RetryConfig(max_retries=2, initial_wait=0.0, max_wait=0.0)
    assert with_backoff(op, cfg, stop=stop) == "ok"
    assert op.calls == 2