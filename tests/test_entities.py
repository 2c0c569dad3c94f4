"""
Progress reports, wait results and statuses.
"""
import pytest

from milvus_wait_exceptions import (
    ConnectionError,
    InvalidArgumentError,
    OperationTimeoutError,
    ServerFailedError,
)
from wait_operations.models.entities import (
    CollectionStat,
    PartitionStat,
    ProgressReport,
    StatisticsResult,
    Status,
    StatusCode,
    TargetProgress,
    WaitOutcome,
    WaitResult,
)


def test_target_percent_is_clamped():
    assert TargetProgress(name="a", percent=140).percent == 100
    assert TargetProgress(name="a", percent=-3).percent == 0


def test_empty_report_is_neither_complete_nor_failed():
    report = ProgressReport()
    assert not report.is_complete
    assert not report.has_failed
    assert report.summary() == "no targets visible"


def test_report_complete_only_when_every_target_is_done():
    partial = ProgressReport(targets=[TargetProgress(name="p1", percent=100), TargetProgress(name="p2", percent=99)])
    done = ProgressReport(targets=[TargetProgress(name="p1", percent=100), TargetProgress(name="p2", percent=100)])
    assert partial.per_target_percent == [100, 99]
    assert not partial.is_complete
    assert done.is_complete
    assert partial.summary() == "p1=100%, p2=99%"


def test_failed_report_summary():
    report = ProgressReport(hard_failure="OUT_OF_MEMORY")
    assert report.has_failed
    assert report.summary() == "failed: OUT_OF_MEMORY"


@pytest.mark.parametrize(
    "outcome, code",
    [
        (WaitOutcome.SUCCEEDED, StatusCode.OK),
        (WaitOutcome.TIMED_OUT, StatusCode.TIMEOUT),
        (WaitOutcome.HARD_FAILED, StatusCode.SERVER_FAILED),
        (WaitOutcome.COMMUNICATION_FAILURE, StatusCode.SERVER_FAILED),
    ],
)
def test_status_from_wait_result(outcome, code):
    status = Status.from_wait_result(WaitResult(outcome=outcome, reason="detail", polls=3))
    assert status.code == code


def test_hard_failure_status_carries_server_message():
    result = WaitResult(outcome=WaitOutcome.HARD_FAILED, reason="UNEXPECTED_ERROR: disk full", polls=1)
    assert Status.from_wait_result(result).message == "UNEXPECTED_ERROR: disk full"


@pytest.mark.parametrize(
    "status, error",
    [
        (Status.not_connected(), ConnectionError),
        (Status.server_failed("boom"), ServerFailedError),
        (Status.timeout("slow"), OperationTimeoutError),
        (Status.invalid_argument("empty"), InvalidArgumentError),
    ],
)
def test_raise_for_status(status, error):
    with pytest.raises(error):
        status.raise_for_status()


def test_ok_status_does_not_raise():
    status = Status.ok()
    status.raise_for_status()
    assert status.is_ok
    assert str(status) == "ok"


def test_status_str_includes_message():
    assert str(Status.timeout("still loading")) == "timeout: still loading"


def test_row_count_parsing():
    assert CollectionStat(name="c", statistics={"row_count": "12"}).row_count == 12
    assert CollectionStat(name="c", statistics={"row_count": "n/a"}).row_count == 0
    assert CollectionStat(name="c").row_count == 0


def test_statistics_result_row_count():
    stat = PartitionStat(name="p", collection_name="c", statistics={"row_count": "3"})
    assert StatisticsResult(status=Status.ok(), stat=stat).row_count == 3
    assert StatisticsResult(status=Status.timeout("x")).row_count == 0
