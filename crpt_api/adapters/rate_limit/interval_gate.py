"""In-memory minimum-interval rate gate.

Notes:
- Per-process only: separate processes each enforce their own interval.
- Thread-safe: the shared timestamp is only touched under a lock.
- The baseline for the next reservation is the instant a caller asked,
  not the instant its call will fire. A burst of concurrent callers can
  therefore schedule more than ``request_limit`` sends inside one window.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from crpt_api.adapters.rate_limit.base import AbstractRateGate, RateWindow


class IntervalRateGate(AbstractRateGate):
    """Rate gate keeping reservations at least ``time_unit / request_limit`` apart.

    Each reservation compares the current instant with the previous
    reservation's instant and returns whatever is missing from the minimum
    interval as a delay.
    """

    def __init__(
        self,
        window: RateWindow,
        *,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        """Initialize the gate so that the first reservation is not delayed.

        Args:
            window: Validated rate window.
            clock: Monotonic time source returning nanoseconds.
        """
        self._window = window
        self._min_interval = window.min_interval_ns
        self._clock = clock
        self._lock = threading.Lock()
        self._last_reserved = clock() - self._min_interval

    @property
    def window(self) -> RateWindow:
        return self._window

    @property
    def min_interval_ns(self) -> int:
        return self._min_interval

    def reserve_slot(self) -> int:
        """Reserve the next slot and return the delay before it may fire.

        The read of the clock, the delay computation and the update of the
        stored instant happen under one lock acquisition, so concurrent
        callers are granted slots in the order they entered it.

        Returns:
            Delay in nanoseconds (0 when the minimum interval already elapsed).
        """
        with self._lock:
            now = self._clock()
            elapsed = now - self._last_reserved
            delay = 0 if elapsed >= self._min_interval else self._min_interval - elapsed
            self._last_reserved = now
            return delay
