"""
Wait Progress Tracking

Tracks the state of a single wait: the poll count, the last report and a
short history of observed progress used to estimate the remaining time.

A tracker lives only as long as one WaitEngine.wait() call; it is never
shared between waits.

Typical usage:
    tracker = WaitProgressTracker("load_collection(documents)", started_at=clock())
    tracker.start_polling()
    tracker.record_poll(report, now=clock())
    print(f"ETA: {tracker.formatted_eta}")
"""

import logging
from collections import deque
from typing import Deque, Optional, Tuple

from wait_operations.models.entities import ProgressReport, WaitState

logger = logging.getLogger(__name__)


TERMINAL_STATES = frozenset({
    WaitState.SUCCEEDED,
    WaitState.HARD_FAILED,
    WaitState.TIMED_OUT,
    WaitState.COMMUNICATION_FAILURE,
})


class WaitProgressTracker:
    """
    Tracks the progress of one wait.

    Progress of a multi-target report is the lowest target percentage,
    since the operation completes only when every target does.

    Attributes:
        operation: Description of the operation being waited on
        started_at: Monotonic timestamp of the start of the wait
    """

    # Number of (time, percentage) samples kept for ETA estimation
    HISTORY_SIZE = 10

    def __init__(self, operation: str, started_at: float):
        self.operation = operation
        self.started_at = started_at
        self.state = WaitState.NOT_STARTED
        self.polls = 0
        self.last_report: Optional[ProgressReport] = None
        self.last_poll_at = started_at
        self.history: Deque[Tuple[float, float]] = deque(maxlen=self.HISTORY_SIZE)

    def start_polling(self) -> None:
        self.state = WaitState.POLLING
        logger.debug(f"Started polling {self.operation}")

    def record_poll(self, report: Optional[ProgressReport], now: float) -> None:
        """
        Record the outcome of one poll.

        Args:
            report: The report returned by the probe, or None if the poll failed
            now: Monotonic timestamp of the poll
        """
        self.polls += 1
        self.last_poll_at = now
        if report is None:
            return
        self.last_report = report
        if report.targets:
            self.history.append((now, float(min(report.per_target_percent))))

    def finish(self, state: WaitState) -> None:
        if state not in TERMINAL_STATES:
            raise ValueError(f"{state} is not a terminal wait state")
        self.state = state

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def elapsed(self) -> float:
        return self.last_poll_at - self.started_at

    @property
    def percentage(self) -> float:
        return self.history[-1][1] if self.history else 0.0

    def estimate_remaining_seconds(self) -> Optional[float]:
        """
        Estimate the remaining time from the observed progress rate.

        Returns:
            Estimated seconds remaining, or None when no rate can be derived
        """
        if len(self.history) < 2:
            return None

        start_time, start_pct = self.history[0]
        end_time, end_pct = self.history[-1]
        time_diff = end_time - start_time
        pct_diff = end_pct - start_pct
        if time_diff <= 0 or pct_diff <= 0:
            return None

        pct_per_second = pct_diff / time_diff
        return (100.0 - end_pct) / pct_per_second

    @property
    def formatted_eta(self) -> Optional[str]:
        """Human-readable estimated time remaining."""
        seconds = self.estimate_remaining_seconds()
        if seconds is None:
            return None
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds/60:.1f} minutes"
        else:
            hours = seconds / 3600
            minutes = (seconds % 3600) / 60
            return f"{int(hours)} hours, {int(minutes)} minutes"
