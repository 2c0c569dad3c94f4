"""
WaitProgressTracker state and ETA estimation.
"""
import pytest

from conftest import report
from wait_operations.models.entities import WaitState
from wait_operations.utils.progress import WaitProgressTracker


def test_tracker_lifecycle():
    tracker = WaitProgressTracker("load_collection(c)", started_at=10.0)
    assert tracker.state == WaitState.NOT_STARTED

    tracker.start_polling()
    tracker.record_poll(report(20), now=11.0)
    assert tracker.state == WaitState.POLLING
    assert tracker.polls == 1
    assert tracker.elapsed == 1.0
    assert not tracker.is_finished

    tracker.finish(WaitState.SUCCEEDED)
    assert tracker.is_finished


def test_finish_rejects_transient_state():
    tracker = WaitProgressTracker("op", started_at=0.0)
    with pytest.raises(ValueError):
        tracker.finish(WaitState.POLLING)


def test_failed_poll_counts_but_keeps_last_report():
    tracker = WaitProgressTracker("op", started_at=0.0)
    tracker.record_poll(report(30), now=1.0)
    tracker.record_poll(None, now=2.0)
    assert tracker.polls == 2
    assert tracker.last_report.per_target_percent == [30]


def test_percentage_is_slowest_target():
    tracker = WaitProgressTracker("op", started_at=0.0)
    tracker.record_poll(report(90, 40), now=1.0)
    assert tracker.percentage == 40.0


def test_eta_from_progress_rate():
    tracker = WaitProgressTracker("op", started_at=0.0)
    tracker.record_poll(report(0), now=0.0)
    assert tracker.estimate_remaining_seconds() is None

    tracker.record_poll(report(25), now=5.0)
    assert tracker.estimate_remaining_seconds() == pytest.approx(15.0)
    assert tracker.formatted_eta == "15.0 seconds"


def test_no_eta_without_progress():
    tracker = WaitProgressTracker("op", started_at=0.0)
    tracker.record_poll(report(50), now=1.0)
    tracker.record_poll(report(50), now=2.0)
    assert tracker.formatted_eta is None


def test_eta_formatting_for_long_waits():
    tracker = WaitProgressTracker("op", started_at=0.0)
    tracker.record_poll(report(0), now=0.0)
    tracker.record_poll(report(1), now=60.0)
    assert tracker.formatted_eta == "1 hours, 39 minutes"
