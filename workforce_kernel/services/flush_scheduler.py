"""
FlushScheduler -- debounced, coalesced persistence flushes.

Responsibility:
    Turns a stream of "store changed" notifications into few blob writes.
    A burst of commits inside ``debounce_seconds`` produces one flush;
    ``max_delay_seconds`` bounds how long a continuously busy store can go
    unflushed.

Architecture position:
    Kernel > Services -- wired by the composition root between the record
    store's commit hook and ``PersistenceService.save``.

Invariants enforced:
    - At most one flush runs at a time (flush lock).
    - A failed flush leaves the scheduler dirty; the next request retries.
    - ``debounce_seconds == 0`` flushes synchronously on every request.

Failure modes:
    - Flush exceptions are logged at ERROR and never propagate to the
      committing caller.
"""

import threading
import time
from collections.abc import Callable

from workforce_kernel.logging_config import get_logger

logger = get_logger("services.flush_scheduler")


class FlushScheduler:
    def __init__(
        self,
        flush: Callable[[], None],
        debounce_seconds: float = 0.5,
        max_delay_seconds: float = 5.0,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        if debounce_seconds < 0 or max_delay_seconds < 0:
            raise ValueError("Flush delays must be non-negative")
        self._flush = flush
        self._debounce = debounce_seconds
        self._max_delay = max(max_delay_seconds, debounce_seconds)
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._dirty = False
        self._first_request: float | None = None
        self._closed = False
        self.flush_count = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._dirty

    def request_flush(self) -> None:
        """Mark the store dirty and schedule a flush."""
        if self._debounce == 0:
            with self._lock:
                self._dirty = True
            self.flush_now()
            return

        with self._lock:
            self._dirty = True
            if self._closed:
                return
            now = self._monotonic()
            if self._first_request is None:
                self._first_request = now
            remaining = self._first_request + self._max_delay - now
            delay = max(0.0, min(self._debounce, remaining))
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(delay, self.flush_now)
            self._timer.daemon = True
            self._timer.start()

    def flush_now(self) -> bool:
        """Flush immediately if dirty.  Returns False if the flush failed."""
        with self._flush_lock:
            with self._lock:
                if not self._dirty:
                    return True
                self._dirty = False
                self._first_request = None
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
            started = self._monotonic()
            try:
                self._flush()
            except Exception:
                with self._lock:
                    self._dirty = True
                logger.error("store_flush_failed", exc_info=True)
                return False
            self.flush_count += 1
            logger.debug(
                "store_flush_completed",
                extra={
                    "duration_ms": round((self._monotonic() - started) * 1000, 2),
                    "flush_count": self.flush_count,
                },
            )
            return True

    def close(self) -> bool:
        """Cancel any pending timer and flush outstanding changes."""
        with self._lock:
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        return self.flush_now()
