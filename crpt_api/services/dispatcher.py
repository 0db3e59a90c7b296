"""Rate-limited dispatcher scheduling delayed sends on a bounded worker pool.

This service owns the only concurrency in the client. For each submission it:
- Reserves a slot on the rate gate and gets back a delay
- Schedules a task on a pool of exactly ``request_limit`` workers that sleeps
  for that delay and then performs one POST through the transport
- Blocks the calling thread on that task alone and converts whatever happened
  into a SubmissionResult

Nothing raised below ``submit`` reaches the caller; every failure becomes a
result with a FailureKind.
"""

from __future__ import annotations

import contextvars
import logging
import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable

from crpt_api.adapters.rate_limit.base import AbstractRateGate, RateWindow
from crpt_api.adapters.rate_limit.interval_gate import IntervalRateGate
from crpt_api.adapters.transport.base import AbstractTransport
from crpt_api.core.errors import TransportAppError
from crpt_api.core.logging import clear_submission_id, set_submission_id
from crpt_api.schemas.submission import FailureKind, Submission, SubmissionResult

logger = logging.getLogger(__name__)

_NANOS_PER_SECOND = 1_000_000_000


class Dispatcher:
    """Submit documents through a transport at a bounded rate.

    Attributes:
        window: Rate window enforced by the gate.
        transport: Transport performing the actual HTTP exchange.
    """

    def __init__(
        self,
        window: RateWindow,
        transport: AbstractTransport,
        *,
        max_pending: int | None = None,
        result_timeout: float | None = None,
        gate: AbstractRateGate | None = None,
        clock: Callable[[], int] = time.monotonic_ns,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create the gate and the worker pool.

        Args:
            window: Validated rate window; its request limit sizes the pool.
            transport: Transport used by the workers.
            max_pending: Maximum submissions in flight at once; extra ones are
                rejected. None queues without bound.
            result_timeout: Seconds a caller waits for its task before giving
                up. None waits until the task finishes.
            gate: Optional gate replacing the default IntervalRateGate.
            clock: Nanosecond clock for the default gate.
            sleep: Function used by workers to wait out their delay.
        """
        self.window = window
        self.transport = transport
        self._gate = gate or IntervalRateGate(window, clock=clock)
        self._result_timeout = result_timeout
        self._sleep = sleep
        self._pending = threading.BoundedSemaphore(max_pending) if max_pending else None
        # Reservation and enqueue happen together so the pool queue follows
        # reservation order, and close() cannot interleave with them.
        self._schedule_lock = threading.Lock()
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=window.request_limit,
            thread_name_prefix="crpt-dispatch",
        )

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Stop accepting submissions and shut the worker pool down.

        Args:
            wait: Block until already scheduled sends have finished. When
                False, queued sends that have not started are cancelled.
        """
        with self._schedule_lock:
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _release_slot(self) -> None:
        if self._pending is not None:
            self._pending.release()

    def _send(self, submission: Submission, delay_ns: int) -> int:
        """Worker body: wait out the reserved delay, then POST once."""
        try:
            if delay_ns > 0:
                self._sleep(delay_ns / _NANOS_PER_SECOND)

            logger.debug("dispatch.sending", extra={"delay_ms": delay_ns / 1_000_000})
            return self.transport.post(submission.payload, submission.signature)
        finally:
            # Give capacity back before the caller is woken up
            self._release_slot()

    def _schedule(self, submission: Submission) -> Future[int]:
        delay_ns = self._gate.reserve_slot()
        logger.debug(
            "dispatch.scheduled",
            extra={"delay_ms": delay_ns / 1_000_000},
        )
        # Run the task inside a copy of the caller's context so logs emitted
        # by the worker carry the submission id.
        ctx = contextvars.copy_context()
        return self._executor.submit(ctx.run, self._send, submission, delay_ns)

    def _wait(self, future: Future[int]) -> SubmissionResult:
        try:
            status_code = future.result(timeout=self._result_timeout)
        except FuturesTimeoutError:
            # A task that has not started yet will never run; one that has
            # started still sends and frees its slot when done.
            if future.cancel():
                self._release_slot()
            logger.warning(
                "dispatch.timeout",
                extra={"timeout_seconds": self._result_timeout},
            )
            return SubmissionResult.failed(FailureKind.TIMEOUT, "timed out waiting for scheduled send")
        except CancelledError:
            self._release_slot()
            logger.warning("dispatch.cancelled")
            return SubmissionResult.failed(FailureKind.CANCELLED, "scheduled send was cancelled")
        except TransportAppError as exc:
            kind = FailureKind.TIMEOUT if exc.timed_out else FailureKind.TRANSPORT
            logger.warning(
                "dispatch.failed",
                extra={"failure": kind.value, "error_code": exc.code},
            )
            return SubmissionResult.failed(kind, exc.message)
        except Exception as exc:
            logger.exception(
                "dispatch.failed",
                extra={"failure": FailureKind.INTERNAL.value, "error_type": type(exc).__name__},
            )
            return SubmissionResult.failed(FailureKind.INTERNAL, str(exc))

        logger.info("dispatch.completed", extra={"status_code": status_code})
        return SubmissionResult.success(status_code)

    def submit(self, submission: Submission) -> SubmissionResult:
        """Send one submission, honoring the rate window, and wait for it.

        Safe to call from any number of threads at once. Each caller blocks
        only on its own scheduled task.

        Args:
            submission: Serialized payload and signature.

        Returns:
            SubmissionResult with the status code, or the failure kind when no
            status was received.
        """
        set_submission_id(submission.submission_id)
        try:
            if self._pending is not None and not self._pending.acquire(blocking=False):
                logger.warning("dispatch.rejected", extra={"reason": "queue_full"})
                return SubmissionResult.failed(FailureKind.REJECTED, "too many pending submissions")

            with self._schedule_lock:
                # A closed dispatcher rejects before touching the gate
                future = None if self._closed else self._schedule(submission)
            if future is None:
                self._release_slot()
                logger.warning("dispatch.rejected", extra={"reason": "shutdown"})
                return SubmissionResult.failed(FailureKind.REJECTED, "dispatcher is closed")

            return self._wait(future)
        finally:
            clear_submission_id()
