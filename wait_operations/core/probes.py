"""
Progress Probes

A probe asks the server for the current progress of an asynchronous
operation that has already been triggered, and returns a ProgressReport.
Probes are purely observational: polling any number of times never restarts
or duplicates the underlying work.

A probe raises connection_management.ConnectionError when the server
cannot be reached; errors reported by the server are returned in the
report as hard_failure.

Typical usage:
    probe = LoadPartitionsProbe(transport, "documents", ["2023", "2024"])
    report = await probe.poll()
    print(report.per_target_percent)
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from connection_management.transport import (
    LoadingProgressResponse,
    MilvusTransport,
    ServerStatus
)
from wait_operations.models.entities import ProgressReport, TargetProgress

logger = logging.getLogger(__name__)


class ProgressProbe(ABC):
    """Reports the progress of one triggered server operation."""

    @property
    @abstractmethod
    def operation(self) -> str:
        """Description of the probed operation, used in logs and messages."""

    @abstractmethod
    async def poll(self) -> ProgressReport:
        """
        Query the current progress.

        Returns:
            ProgressReport for the probed entities

        Raises:
            ConnectionError: If the server could not be reached
        """


def _failed_report(status: ServerStatus) -> ProgressReport:
    return ProgressReport(hard_failure=status.describe())


class _LoadProbe(ProgressProbe):
    """Shared mapping of a loading-progress response into a report."""

    def _to_report(self, response: LoadingProgressResponse, requested: List[str]) -> ProgressReport:
        status = response.status
        if status.is_not_found:
            logger.debug(f"{self.operation}: entity not visible yet ({status.describe()})")
            return ProgressReport()
        if not status.is_success:
            if status.is_resource_exhausted:
                logger.error(f"{self.operation}: server is out of resources ({status.describe()})")
            return _failed_report(status)

        # Every requested name is reported; one the server did not list is at 0%
        reported = {target.name: target.in_memory_percentage for target in response.targets}
        missing = [name for name in requested if name not in reported]
        if missing:
            logger.debug(f"{self.operation}: not listed by the server yet: {missing}")
        targets = [
            TargetProgress(name=name, percent=reported.get(name, 0))
            for name in requested
        ]
        return ProgressReport(targets=targets)


class LoadCollectionProbe(_LoadProbe):
    """Loading progress of one collection."""

    def __init__(self, transport: MilvusTransport, collection_name: str):
        self._transport = transport
        self.collection_name = collection_name

    @property
    def operation(self) -> str:
        return f"load_collection({self.collection_name})"

    async def poll(self) -> ProgressReport:
        response = await self._transport.show_collections([self.collection_name])
        return self._to_report(response, [self.collection_name])


class LoadPartitionsProbe(_LoadProbe):
    """Loading progress of a set of partitions of one collection."""

    def __init__(self, transport: MilvusTransport, collection_name: str, partition_names: List[str]):
        self._transport = transport
        self.collection_name = collection_name
        self.partition_names = list(partition_names)

    @property
    def operation(self) -> str:
        return f"load_partitions({self.collection_name}, [{', '.join(self.partition_names)}])"

    async def poll(self) -> ProgressReport:
        response = await self._transport.show_partitions(self.collection_name, self.partition_names)
        return self._to_report(response, self.partition_names)


class FlushStateProbe(ProgressProbe):
    """
    Persistence state of the segments sealed by one flush.

    The server only answers whether every segment is flushed, so the report
    holds a single target at either 0 or 100.
    """

    def __init__(
        self,
        transport: MilvusTransport,
        collection_name: str,
        segment_ids: List[int],
        flush_ts: int
    ):
        self._transport = transport
        self.collection_name = collection_name
        self.segment_ids = list(segment_ids)
        self.flush_ts = flush_ts

    @property
    def operation(self) -> str:
        return f"flush({self.collection_name})"

    async def poll(self) -> ProgressReport:
        response = await self._transport.get_flush_state(
            self.segment_ids, self.collection_name, self.flush_ts
        )
        if not response.status.is_success:
            return _failed_report(response.status)
        percent = 100 if response.flushed else 0
        return ProgressReport(targets=[TargetProgress(name=self.collection_name, percent=percent)])
