"""
Milvus Transport Contract

This module defines the request/response surface that wait operations
depend on. A transport exposes two kinds of calls:

- One-shot trigger calls that start asynchronous server work
  (load_collection, load_partitions, flush).
- Repeatable progress queries that only observe that work
  (show_collections, show_partitions, get_flush_state).

Responses carry a ServerStatus. A transport raises ConnectionError (or a
subclass) only when a request could not be delivered; errors reported by
the server are returned in the status and never raised.

Typical usage:
    transport = PymilvusTransport(settings)
    transport.connect()

    status = await transport.load_collection("documents")
    if status.is_success:
        progress = await transport.show_collections(["documents"])
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Dict, List

from pydantic import BaseModel, Field


class ServerErrorCode(IntEnum):
    """
    Error codes reported by the Milvus server that this package interprets.

    Codes not listed here are still carried verbatim in ServerStatus.code.
    """
    SUCCESS = 0
    UNEXPECTED_ERROR = 1
    CONNECT_FAILED = 2
    COLLECTION_NOT_EXISTS = 4
    OUT_OF_MEMORY = 24
    MEMORY_QUOTA_EXHAUSTED = 53
    COLLECTION_NOT_FOUND = 100
    PARTITION_NOT_FOUND = 200


# Entity is not visible yet, e.g. metadata has not propagated to the proxy
NOT_FOUND_CODES = frozenset({
    ServerErrorCode.COLLECTION_NOT_EXISTS,
    ServerErrorCode.COLLECTION_NOT_FOUND,
    ServerErrorCode.PARTITION_NOT_FOUND,
})

RESOURCE_EXHAUSTED_CODES = frozenset({
    ServerErrorCode.OUT_OF_MEMORY,
    ServerErrorCode.MEMORY_QUOTA_EXHAUSTED,
})


class ServerStatus(BaseModel):
    """
    Status block returned by the server with every response.

    Attributes:
        code: Server error code, 0 on success
        reason: Human-readable message supplied by the server
    """
    code: int = ServerErrorCode.SUCCESS
    reason: str = ""

    @property
    def is_success(self) -> bool:
        return self.code == ServerErrorCode.SUCCESS

    @property
    def is_not_found(self) -> bool:
        return self.code in NOT_FOUND_CODES

    @property
    def is_resource_exhausted(self) -> bool:
        return self.code in RESOURCE_EXHAUSTED_CODES

    def describe(self) -> str:
        """Format the status for log and error messages."""
        try:
            name = ServerErrorCode(self.code).name
        except ValueError:
            name = f"CODE_{self.code}"
        return f"{name}: {self.reason}" if self.reason else name


class TargetLoadState(BaseModel):
    """In-memory percentage of one collection or partition."""
    name: str
    in_memory_percentage: int = 0


class LoadingProgressResponse(BaseModel):
    """Response of show_collections / show_partitions."""
    status: ServerStatus = Field(default_factory=ServerStatus)
    targets: List[TargetLoadState] = Field(default_factory=list)


class FlushResponse(BaseModel):
    """
    Response of a flush trigger.

    Attributes:
        segment_ids: Segments sealed by the flush that must be persisted
        flush_ts: Server timestamp of the flush request
    """
    status: ServerStatus = Field(default_factory=ServerStatus)
    segment_ids: List[int] = Field(default_factory=list)
    flush_ts: int = 0


class FlushStateResponse(BaseModel):
    """Response of a flush-state query."""
    status: ServerStatus = Field(default_factory=ServerStatus)
    flushed: bool = False


class StatisticsResponse(BaseModel):
    """Key-value statistics of a collection or partition."""
    status: ServerStatus = Field(default_factory=ServerStatus)
    statistics: Dict[str, str] = Field(default_factory=dict)


class MilvusTransport(ABC):
    """
    Abstract request/response transport to a Milvus server.

    Implementations are injected into OperationManager and progress probes.
    Every method may raise ConnectionClosedError when the transport is not
    connected and ServerUnavailableError when the server cannot be reached.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the transport has a usable connection."""

    @abstractmethod
    async def load_collection(self, collection_name: str) -> ServerStatus:
        """Trigger loading a collection into query nodes."""

    @abstractmethod
    async def load_partitions(
        self,
        collection_name: str,
        partition_names: List[str]
    ) -> ServerStatus:
        """Trigger loading specific partitions of a collection."""

    @abstractmethod
    async def show_collections(self, collection_names: List[str]) -> LoadingProgressResponse:
        """Report the in-memory percentage of the named collections."""

    @abstractmethod
    async def show_partitions(
        self,
        collection_name: str,
        partition_names: List[str]
    ) -> LoadingProgressResponse:
        """Report the in-memory percentage of the named partitions."""

    @abstractmethod
    async def flush(self, collection_name: str) -> FlushResponse:
        """Trigger a flush of buffered writes of a collection."""

    @abstractmethod
    async def get_flush_state(
        self,
        segment_ids: List[int],
        collection_name: str,
        flush_ts: int
    ) -> FlushStateResponse:
        """Report whether all given segments have been persisted."""

    @abstractmethod
    async def get_collection_statistics(self, collection_name: str) -> StatisticsResponse:
        """Return collection statistics (row count)."""

    @abstractmethod
    async def get_partition_statistics(
        self,
        collection_name: str,
        partition_name: str
    ) -> StatisticsResponse:
        """Return partition statistics (row count)."""
