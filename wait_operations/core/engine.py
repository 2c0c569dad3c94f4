"""
Wait Engine

Turns an asynchronous server operation into a single terminal result by
polling a ProgressProbe under a TimeoutPolicy.

State machine of one wait:

    NOT_STARTED -> POLLING -> SUCCEEDED | HARD_FAILED | TIMED_OUT | COMMUNICATION_FAILURE

Rules:
- The first poll happens immediately; waiting happens only between polls.
- An instant wait polls once and returns. Unless that poll failed, it
  succeeds even when the operation is still in progress; the observed
  progress is kept in last_report.
- A hard failure stops the wait at once and is never retried.
- Completion is checked before the deadline, so a poll that observes
  completion at or past the deadline still succeeds.
- A communication failure stops the wait; retrying belongs to the transport.
- When the poll interval is longer than the remaining budget, the engine
  waits out the budget and times out without another poll.

Typical usage:
    engine = WaitEngine()
    result = await engine.wait(
        LoadCollectionProbe(transport, "documents"),
        TimeoutPolicy.bounded(30.0, poll_interval=0.5)
    )
    if result.outcome == WaitOutcome.TIMED_OUT:
        ...
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from connection_management.connection_exceptions import ConnectionError
from wait_operations.config import TimeoutPolicy
from wait_operations.core.probes import ProgressProbe
from wait_operations.models.entities import WaitOutcome, WaitResult, WaitState
from wait_operations.utils.progress import WaitProgressTracker

logger = logging.getLogger(__name__)


_OUTCOME_FOR_STATE = {
    WaitState.SUCCEEDED: WaitOutcome.SUCCEEDED,
    WaitState.HARD_FAILED: WaitOutcome.HARD_FAILED,
    WaitState.TIMED_OUT: WaitOutcome.TIMED_OUT,
    WaitState.COMMUNICATION_FAILURE: WaitOutcome.COMMUNICATION_FAILURE,
}


class WaitEngine:
    """
    Bounded-polling wait for long-running server operations.

    The engine holds no per-wait state; every call to wait() owns its own
    tracker, so one engine can serve concurrent waits.

    Args:
        clock: Monotonic clock returning seconds. Defaults to time.monotonic.
        sleep: Coroutine function suspending for a number of seconds.
               Defaults to asyncio.sleep.
        progress_log_every: Log progress at INFO level every N polls,
                            0 to log only at DEBUG level.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        progress_log_every: int = 5
    ):
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._progress_log_every = progress_log_every

    async def wait(self, probe: ProgressProbe, policy: TimeoutPolicy) -> WaitResult:
        """
        Poll `probe` until the operation completes, fails or times out.

        Args:
            probe: Progress probe bound to the triggered operation
            policy: Wait budget and poll cadence

        Returns:
            WaitResult with the terminal outcome
        """
        tracker = WaitProgressTracker(probe.operation, started_at=self._clock())
        tracker.start_polling()

        if policy.is_instant:
            result = await self._poll_once(probe, tracker)
            if result is not None:
                return result
            # The caller opted out of waiting; the progress stays in last_report
            logger.info(
                f"{probe.operation} accepted, not waiting for completion "
                f"({self._last_summary(tracker)})"
            )
            return self._finish(tracker, WaitState.SUCCEEDED)

        deadline = tracker.started_at + policy.timeout
        logger.info(
            f"Waiting for {probe.operation} "
            f"(timeout={policy.timeout}s, poll_interval={policy.poll_interval}s)"
        )

        while True:
            result = await self._poll_once(probe, tracker)
            if result is not None:
                return result

            now = self._clock()
            if now >= deadline:
                return self._timed_out(tracker, policy)

            remaining = deadline - now
            if policy.poll_interval > remaining:
                # No further poll fits in the budget
                await self._sleep(remaining)
                return self._timed_out(tracker, policy)

            await self._sleep(policy.poll_interval)

    async def _poll_once(self, probe: ProgressProbe, tracker: WaitProgressTracker) -> Optional[WaitResult]:
        """
        Issue one poll and classify it.

        Returns:
            A terminal WaitResult, or None when the operation is not complete
        """
        try:
            report = await probe.poll()
        except ConnectionError as e:
            tracker.record_poll(None, self._clock())
            logger.error(f"Polling {probe.operation} failed after {tracker.polls} polls: {e}")
            return self._finish(tracker, WaitState.COMMUNICATION_FAILURE, str(e))

        tracker.record_poll(report, self._clock())
        self._log_progress(tracker)

        if report.has_failed:
            logger.error(f"{probe.operation} failed on poll {tracker.polls}: {report.hard_failure}")
            return self._finish(tracker, WaitState.HARD_FAILED, report.hard_failure)

        if report.is_complete:
            logger.info(f"{probe.operation} complete after {tracker.polls} polls")
            return self._finish(tracker, WaitState.SUCCEEDED)

        return None

    def _timed_out(self, tracker: WaitProgressTracker, policy: TimeoutPolicy) -> WaitResult:
        reason = (
            f"{tracker.operation} did not complete within {policy.timeout}s "
            f"after {tracker.polls} polls ({self._last_summary(tracker)})"
        )
        logger.warning(reason)
        return self._finish(tracker, WaitState.TIMED_OUT, reason)

    def _finish(self, tracker: WaitProgressTracker, state: WaitState, reason: Optional[str] = None) -> WaitResult:
        tracker.finish(state)
        return WaitResult(
            outcome=_OUTCOME_FOR_STATE[state],
            reason=reason,
            polls=tracker.polls,
            elapsed_seconds=self._clock() - tracker.started_at,
            last_report=tracker.last_report
        )

    def _log_progress(self, tracker: WaitProgressTracker) -> None:
        summary = self._last_summary(tracker)
        logger.debug(f"{tracker.operation} poll {tracker.polls}: {summary}")
        if self._progress_log_every and tracker.polls % self._progress_log_every == 0:
            eta = tracker.formatted_eta
            logger.info(
                f"Progress of {tracker.operation}: {summary}, polls={tracker.polls}, "
                f"elapsed={tracker.elapsed:.1f}s" + (f", ETA {eta}" if eta else "")
            )

    @staticmethod
    def _last_summary(tracker: WaitProgressTracker) -> str:
        if tracker.last_report is None:
            return "no progress reported"
        return tracker.last_report.summary()
