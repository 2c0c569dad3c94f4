"""
Shared fixtures for wait operation tests.

FakeClock replaces time.monotonic and asyncio.sleep so that waits run
instantly and deterministically. FakeTransport is a scriptable in-memory
MilvusTransport that counts every call it receives.
"""
from typing import Dict, List, Optional

import pytest

from connection_management.connection_exceptions import ServerUnavailableError
from connection_management.transport import (
    FlushResponse,
    FlushStateResponse,
    LoadingProgressResponse,
    MilvusTransport,
    ServerStatus,
    StatisticsResponse,
    TargetLoadState,
)
from wait_operations.core.engine import WaitEngine
from wait_operations.core.probes import ProgressProbe
from wait_operations.models.entities import ProgressReport, TargetProgress


class FakeClock:
    """Monotonic clock advanced only by sleep() and tick()."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedProbe(ProgressProbe):
    """
    Probe returning scripted reports in order, repeating the last one.

    A script entry may be an exception instance, which is raised instead.
    """

    def __init__(self, script, name: str = "scripted", clock: Optional[FakeClock] = None, poll_cost: float = 0.0):
        self.script = list(script)
        self.name = name
        self.polls = 0
        self.poll_times: List[float] = []
        self._clock = clock
        self._poll_cost = poll_cost

    @property
    def operation(self) -> str:
        return self.name

    async def poll(self) -> ProgressReport:
        if self._clock is not None:
            self.poll_times.append(self._clock())
            self._clock.tick(self._poll_cost)
        entry = self.script[min(self.polls, len(self.script) - 1)]
        self.polls += 1
        if isinstance(entry, Exception):
            raise entry
        return entry


def report(*percents: int, names: Optional[List[str]] = None) -> ProgressReport:
    names = names or [f"t{i}" for i in range(len(percents))]
    return ProgressReport(
        targets=[TargetProgress(name=n, percent=p) for n, p in zip(names, percents)]
    )


def failed(reason: str = "UNEXPECTED_ERROR: boom") -> ProgressReport:
    return ProgressReport(hard_failure=reason)


class FakeTransport(MilvusTransport):
    """
    In-memory transport.

    Progress is scripted per target name as a list of percentages; each
    progress query consumes one entry and repeats the last one forever.
    """

    def __init__(self):
        self.connected = True
        self.calls: Dict[str, int] = {}
        self.load_status = ServerStatus()
        self.progress_status: List[ServerStatus] = []
        self.progress: Dict[str, List[int]] = {}
        self.visible: Optional[set] = None
        self.flush_response = FlushResponse(segment_ids=[11, 12], flush_ts=42)
        self.flush_states: List[bool] = [True]
        self.flush_state_status = ServerStatus()
        self.statistics = {"row_count": "7"}
        self.statistics_status = ServerStatus()
        self.raise_on: Dict[str, Exception] = {}
        self.flush_state_args = None

    def _record(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        error = self.raise_on.get(name)
        if error is not None:
            raise error

    def count(self, name: str) -> int:
        return self.calls.get(name, 0)

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def load_collection(self, collection_name):
        self._record("load_collection")
        return self.load_status

    async def load_partitions(self, collection_name, partition_names):
        self._record("load_partitions")
        return self.load_status

    def _progress_response(self, names, call_index) -> LoadingProgressResponse:
        if self.progress_status:
            status = self.progress_status[min(call_index, len(self.progress_status) - 1)]
            if not status.is_success:
                return LoadingProgressResponse(status=status)
        targets = []
        for name in names:
            if self.visible is not None and name not in self.visible:
                continue
            script = self.progress.get(name, [0])
            targets.append(TargetLoadState(
                name=name,
                in_memory_percentage=script[min(call_index, len(script) - 1)]
            ))
        return LoadingProgressResponse(targets=targets)

    async def show_collections(self, collection_names):
        index = self.count("show_collections")
        self._record("show_collections")
        return self._progress_response(collection_names, index)

    async def show_partitions(self, collection_name, partition_names):
        index = self.count("show_partitions")
        self._record("show_partitions")
        return self._progress_response(partition_names, index)

    async def flush(self, collection_name):
        self._record("flush")
        return self.flush_response

    async def get_flush_state(self, segment_ids, collection_name, flush_ts):
        index = self.count("get_flush_state")
        self._record("get_flush_state")
        self.flush_state_args = (list(segment_ids), collection_name, flush_ts)
        if not self.flush_state_status.is_success:
            return FlushStateResponse(status=self.flush_state_status)
        return FlushStateResponse(flushed=self.flush_states[min(index, len(self.flush_states) - 1)])

    async def get_collection_statistics(self, collection_name):
        self._record("get_collection_statistics")
        return StatisticsResponse(status=self.statistics_status, statistics=dict(self.statistics))

    async def get_partition_statistics(self, collection_name, partition_name):
        self._record("get_partition_statistics")
        return StatisticsResponse(status=self.statistics_status, statistics=dict(self.statistics))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> WaitEngine:
    return WaitEngine(clock=clock, sleep=clock.sleep)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def unavailable() -> ServerUnavailableError:
    return ServerUnavailableError("Milvus server unavailable: connection refused")
