"""
Wait Operation Entities

This module defines Pydantic models for the data flowing through a wait:
progress reports produced by probes, the terminal result of the wait engine,
and the Status returned to callers of the operation manager.

Typical usage:
    from wait_operations import StatusCode

    status = await manager.load_collection("documents", timeout=policy)
    if status.code == StatusCode.TIMEOUT:
        print("Still loading, check again later")
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from milvus_wait_exceptions import (
    ConnectionError,
    InvalidArgumentError,
    OperationTimeoutError,
    ServerFailedError
)


class TargetProgress(BaseModel):
    """
    Completion percentage of one target (collection or partition).

    Attributes:
        name: Name of the collection or partition
        percent: Completion percentage (0-100)
    """
    name: str
    percent: int = 0

    @field_validator('percent')
    @classmethod
    def validate_percent(cls, v):
        """Ensure percent is between 0 and 100."""
        return max(0, min(100, v))


class ProgressReport(BaseModel):
    """
    Point-in-time progress of an asynchronous server operation.

    An empty report (no targets) means the entity is not visible yet; it is
    neither complete nor failed.

    Attributes:
        targets: Ordered per-target progress for the requested entity names
        hard_failure: Terminal server-side error, if one was reported
    """
    targets: List[TargetProgress] = Field(default_factory=list)
    hard_failure: Optional[str] = None

    @property
    def per_target_percent(self) -> List[int]:
        return [target.percent for target in self.targets]

    @property
    def is_complete(self) -> bool:
        """Whether at least one target is listed and every target reached 100."""
        return bool(self.targets) and all(target.percent == 100 for target in self.targets)

    @property
    def has_failed(self) -> bool:
        return self.hard_failure is not None

    def summary(self) -> str:
        """Short human-readable form for logging."""
        if self.hard_failure is not None:
            return f"failed: {self.hard_failure}"
        if not self.targets:
            return "no targets visible"
        return ", ".join(f"{t.name}={t.percent}%" for t in self.targets)


class WaitState(str, Enum):
    """
    States of a single wait.

    NOT_STARTED and POLLING are transient; the remaining states are terminal.
    """
    NOT_STARTED = "not_started"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    HARD_FAILED = "hard_failed"
    TIMED_OUT = "timed_out"
    COMMUNICATION_FAILURE = "communication_failure"


class WaitOutcome(str, Enum):
    """
    Terminal outcome of a wait.

    Attributes:
        SUCCEEDED: The operation completed
        HARD_FAILED: The server reported a terminal error
        TIMED_OUT: The budget elapsed with the operation still incomplete
        COMMUNICATION_FAILURE: A poll could not reach the server
    """
    SUCCEEDED = "succeeded"
    HARD_FAILED = "hard_failed"
    TIMED_OUT = "timed_out"
    COMMUNICATION_FAILURE = "communication_failure"


class WaitResult(BaseModel):
    """
    Result produced by WaitEngine for one wait.

    Attributes:
        outcome: Terminal outcome
        reason: Failure or timeout detail, None on success
        polls: Number of progress polls issued
        elapsed_seconds: Monotonic time spent in the wait
        last_report: The last report received, if any
    """
    outcome: WaitOutcome
    reason: Optional[str] = None
    polls: int = 0
    elapsed_seconds: float = 0.0
    last_report: Optional[ProgressReport] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == WaitOutcome.SUCCEEDED


class StatusCode(str, Enum):
    """Status codes returned by wait-capable operations."""
    OK = "ok"
    NOT_CONNECTED = "not_connected"
    SERVER_FAILED = "server_failed"
    TIMEOUT = "timeout"
    INVALID_ARGUMENT = "invalid_argument"


class Status(BaseModel):
    """
    Terminal status of an operation.

    Attributes:
        code: Status code
        message: Detail for non-OK statuses; carries the server message
                 for SERVER_FAILED
    """
    code: StatusCode = StatusCode.OK
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return self.code == StatusCode.OK

    @classmethod
    def ok(cls) -> "Status":
        return cls()

    @classmethod
    def not_connected(cls, message: str = "Connection is not ready!") -> "Status":
        return cls(code=StatusCode.NOT_CONNECTED, message=message)

    @classmethod
    def server_failed(cls, message: str) -> "Status":
        return cls(code=StatusCode.SERVER_FAILED, message=message)

    @classmethod
    def timeout(cls, message: str) -> "Status":
        return cls(code=StatusCode.TIMEOUT, message=message)

    @classmethod
    def invalid_argument(cls, message: str) -> "Status":
        return cls(code=StatusCode.INVALID_ARGUMENT, message=message)

    @classmethod
    def from_wait_result(cls, result: WaitResult) -> "Status":
        """
        Translate the engine outcome into a Status.

        SUCCEEDED maps to OK, TIMED_OUT to TIMEOUT; hard failures and
        communication failures both surface as SERVER_FAILED.
        """
        if result.outcome == WaitOutcome.SUCCEEDED:
            return cls.ok()
        if result.outcome == WaitOutcome.TIMED_OUT:
            return cls.timeout(result.reason or f"Timed out after {result.polls} polls")
        if result.outcome == WaitOutcome.COMMUNICATION_FAILURE:
            return cls.server_failed(f"Communication failure: {result.reason}")
        return cls.server_failed(result.reason or "Server reported a failure")

    def raise_for_status(self) -> None:
        """
        Raise the exception matching a non-OK status.

        Raises:
            ConnectionError: NOT_CONNECTED
            ServerFailedError: SERVER_FAILED
            OperationTimeoutError: TIMEOUT
            InvalidArgumentError: INVALID_ARGUMENT
        """
        if self.code == StatusCode.OK:
            return
        if self.code == StatusCode.NOT_CONNECTED:
            raise ConnectionError(self.message)
        if self.code == StatusCode.TIMEOUT:
            raise OperationTimeoutError(self.message)
        if self.code == StatusCode.INVALID_ARGUMENT:
            raise InvalidArgumentError(self.message)
        raise ServerFailedError(self.message, reason=self.message)

    def __str__(self) -> str:
        return self.code.value if not self.message else f"{self.code.value}: {self.message}"


class CollectionStat(BaseModel):
    """
    Collection statistics returned by get_collection_statistics().

    Attributes:
        name: Name of the collection
        statistics: Raw key-value statistics reported by the server
    """
    name: str
    statistics: Dict[str, str] = Field(default_factory=dict)

    @property
    def row_count(self) -> int:
        """Row count of the collection, 0 if the server did not report it."""
        value = self.statistics.get("row_count")
        if value is None:
            return 0
        try:
            return int(value)
        except ValueError:
            return 0


class PartitionStat(CollectionStat):
    """
    Partition statistics returned by get_partition_statistics().

    Attributes:
        collection_name: Collection owning the partition
    """
    collection_name: str = ""


class StatisticsResult(BaseModel):
    """
    Result of a statistics operation.

    Attributes:
        status: Terminal status of the operation (including any flush wait)
        stat: Statistics, present only when status is OK
    """
    status: Status
    stat: Optional[Union[PartitionStat, CollectionStat]] = None

    @property
    def row_count(self) -> int:
        return self.stat.row_count if self.stat is not None else 0
