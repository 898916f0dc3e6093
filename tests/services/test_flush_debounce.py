"""FlushScheduler: coalescing, bounded delay and failure handling."""

import threading

import pytest

from workforce_kernel.services.flush_scheduler import FlushScheduler


class FakeMonotonic:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class Recorder:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures
        self.event = threading.Event()

    def __call__(self) -> None:
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")
        self.event.set()


class TestSynchronousMode:
    def test_zero_debounce_flushes_every_request(self):
        flush = Recorder()
        scheduler = FlushScheduler(flush, debounce_seconds=0, max_delay_seconds=0)

        scheduler.request_flush()
        scheduler.request_flush()

        assert flush.calls == 2
        assert scheduler.flush_count == 2
        assert not scheduler.pending

    def test_failure_stays_dirty_and_retries(self, captured_logs):
        flush = Recorder(failures=1)
        scheduler = FlushScheduler(flush, debounce_seconds=0, max_delay_seconds=0)

        scheduler.request_flush()
        assert scheduler.pending
        assert scheduler.flush_count == 0
        assert any(r["message"] == "store_flush_failed" for r in captured_logs())

        assert scheduler.flush_now() is True
        assert not scheduler.pending
        assert flush.calls == 2


class TestDebounced:
    def test_burst_coalesces_into_one_flush(self):
        flush = Recorder()
        scheduler = FlushScheduler(flush, debounce_seconds=60, max_delay_seconds=120)

        for _ in range(25):
            scheduler.request_flush()
        assert flush.calls == 0
        assert scheduler.pending

        assert scheduler.close() is True
        assert flush.calls == 1

    def test_flush_now_when_clean_is_a_no_op(self):
        flush = Recorder()
        scheduler = FlushScheduler(flush, debounce_seconds=60, max_delay_seconds=120)
        assert scheduler.flush_now() is True
        assert flush.calls == 0

    def test_max_delay_bounds_the_timer(self):
        clock = FakeMonotonic()
        scheduler = FlushScheduler(
            Recorder(), debounce_seconds=2, max_delay_seconds=5, monotonic=clock
        )
        scheduler.request_flush()
        clock.now += 4
        scheduler.request_flush()

        # One second of the five-second budget is left.
        assert scheduler._timer.interval == pytest.approx(1.0)
        scheduler.close()

    def test_close_reports_failure(self):
        scheduler = FlushScheduler(Recorder(failures=1), debounce_seconds=60, max_delay_seconds=60)
        scheduler.request_flush()
        assert scheduler.close() is False
        assert scheduler.pending

    @pytest.mark.slow
    def test_timer_fires(self):
        flush = Recorder()
        scheduler = FlushScheduler(flush, debounce_seconds=0.05, max_delay_seconds=1)
        scheduler.request_flush()
        assert flush.event.wait(timeout=5)
        assert scheduler.flush_count == 1

    def test_negative_delays_refused(self):
        with pytest.raises(ValueError):
            FlushScheduler(Recorder(), debounce_seconds=-1)
