"""
Pymilvus Transport

This module implements the MilvusTransport contract on top of the PyMilvus
SDK. PyMilvus calls are blocking, so every request runs on a dedicated
ThreadPoolExecutor and is awaited from the event loop.

Errors are split the way the wait engine expects them:
- Errors the server reported (MilvusException with a server code) are
  returned as a ServerStatus inside the response.
- Failures to reach the server raise ServerUnavailableError.
- Calls made before connect() raise ConnectionClosedError.

Typical usage:
    transport = PymilvusTransport(load_settings())
    feedback = transport.connect()
    if feedback.status == ConnectionStatus.SUCCESS:
        manager = OperationManager(transport)
"""

import asyncio
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, List, Optional

from pymilvus import Collection, connections, utility
from pymilvus.client.prepare import Prepare
from pymilvus.exceptions import MilvusException, MilvusUnavailableException
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential
)

from config import MilvusSettings, load_settings
from connection_management.connection_exceptions import (
    ConnectionClosedError,
    ServerUnavailableError
)
from connection_management.transport import (
    FlushResponse,
    FlushStateResponse,
    LoadingProgressResponse,
    MilvusTransport,
    ServerErrorCode,
    ServerStatus,
    StatisticsResponse,
    TargetLoadState
)

logger = logging.getLogger(__name__)


# Message fragments PyMilvus uses when the request never reached the server
_COMMUNICATION_FAILURE_PATTERNS = (
    "connection refused",
    "cannot connect to server",
    "server unavailable",
    "fail connecting to server",
    "deadline exceeded",
    "failed to connect",
)


class ConnectionStatus(str, Enum):
    """
    Defines the possible states of a Milvus connection attempt.
    """
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ConnectionFeedback:
    """
    Provides detailed feedback on the Milvus connection attempt.

    Carries a unique correlation ID for tracing, the connection status,
    and a descriptive message for logging and debugging.
    """
    milvus_connection_id: str
    status: ConnectionStatus
    message: str


def is_communication_failure(error: Exception) -> bool:
    """
    Determine whether a PyMilvus exception means the server was not reached.

    PyMilvus does not provide a dedicated exception type for every transport
    failure, so the message is examined as well.
    """
    if isinstance(error, MilvusUnavailableException):
        return True
    error_message = str(error).lower()
    return any(pattern in error_message for pattern in _COMMUNICATION_FAILURE_PATTERNS)


def status_from_exception(error: MilvusException) -> ServerStatus:
    """Convert a server-reported PyMilvus exception into a ServerStatus."""
    code = getattr(error, "code", ServerErrorCode.UNEXPECTED_ERROR)
    if not isinstance(code, int) or code == ServerErrorCode.SUCCESS:
        code = ServerErrorCode.UNEXPECTED_ERROR
    reason = getattr(error, "message", None) or str(error)
    return ServerStatus(code=code, reason=reason)


def parse_loading_progress(progress: Any) -> int:
    """
    Normalize the value returned by utility.loading_progress() to 0..100.

    Recent PyMilvus versions return {'loading_progress': '45%'}; plain
    numbers and strings are accepted too.
    """
    if isinstance(progress, dict):
        progress = progress.get("loading_progress", 0)
    if isinstance(progress, str):
        progress = progress.strip().rstrip("%") or 0
    try:
        value = int(float(progress))
    except (TypeError, ValueError):
        logger.debug(f"Unrecognized loading progress value: {progress!r}")
        return 0
    return max(0, min(100, value))


class PymilvusTransport(MilvusTransport):
    """
    MilvusTransport implementation backed by PyMilvus.

    Each instance registers its own connection alias with
    pymilvus.connections, so several transports can coexist in one process.
    """

    def __init__(self, config: Optional[MilvusSettings] = None):
        """
        Initialize the transport.

        Args:
            config: MilvusSettings object. If None, default settings are loaded.
        """
        self.config = config or load_settings()
        self._alias = f"milvus-wait-{uuid.uuid4().hex[:12]}"
        self._connected = False
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.connection.executor_workers,
            thread_name_prefix=f"MilvusTransport-{self._alias}"
        )
        logger.debug(f"PymilvusTransport created with alias {self._alias}")

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> ConnectionFeedback:
        """
        Establish the connection, retrying with exponential backoff.

        Returns:
            ConnectionFeedback describing the outcome of the attempt.
        """
        conn = self.config.connection
        milvus_connection_id = f"milvus-conn-{uuid.uuid4()}"
        logger.info(
            f"[{milvus_connection_id}] Connecting to Milvus at {conn.host}:{conn.port} "
            f"(alias={self._alias})"
        )

        retrying = Retrying(
            stop=stop_after_attempt(conn.retry_count + 1),
            wait=wait_exponential(multiplier=conn.retry_interval),
            retry=retry_if_exception_type(MilvusException),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )

        try:
            for attempt in retrying:
                with attempt:
                    connections.connect(
                        alias=self._alias,
                        host=conn.host,
                        port=conn.port,
                        user=conn.user,
                        password=conn.password,
                        secure=conn.secure,
                        timeout=conn.timeout
                    )
        except MilvusException as e:
            logger.error(f"[{milvus_connection_id}] Failed to connect to Milvus: {e}")
            return ConnectionFeedback(
                milvus_connection_id=milvus_connection_id,
                status=ConnectionStatus.FAILURE,
                message=f"Failed to connect to {conn.host}:{conn.port}: {e}"
            )

        self._connected = True
        logger.info(f"[{milvus_connection_id}] Milvus connection established")
        return ConnectionFeedback(
            milvus_connection_id=milvus_connection_id,
            status=ConnectionStatus.SUCCESS,
            message="Milvus connection established successfully."
        )

    def disconnect(self) -> None:
        """Drop the connection alias. The transport can connect again later."""
        if self._connected:
            connections.disconnect(self._alias)
            self._connected = False
            logger.info(f"Disconnected Milvus alias {self._alias}")

    def close(self) -> None:
        """Disconnect and release the worker threads."""
        self.disconnect()
        self._executor.shutdown(wait=True)

    async def _request(self, on_server_error: Callable[[ServerStatus], Any], func: Callable, *args) -> Any:
        """
        Run a blocking PyMilvus call on the executor.

        Server-reported errors are passed to on_server_error to build the
        response; communication failures raise ServerUnavailableError.
        """
        if not self._connected:
            raise ConnectionClosedError("Connection is not ready!")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, partial(func, *args))
        except MilvusException as e:
            if is_communication_failure(e):
                logger.error(f"{func.__name__} could not reach Milvus: {e}")
                raise ServerUnavailableError(f"Milvus server unavailable: {e}") from e
            status = status_from_exception(e)
            logger.debug(f"{func.__name__} returned server error {status.describe()}")
            return on_server_error(status)

    def _collection(self, collection_name: str) -> Collection:
        return Collection(name=collection_name, using=self._alias)

    # Trigger calls

    def _load_collection(self, collection_name: str) -> ServerStatus:
        self._collection(collection_name).load(_async=True)
        return ServerStatus()

    async def load_collection(self, collection_name: str) -> ServerStatus:
        return await self._request(lambda status: status, self._load_collection, collection_name)

    def _load_partitions(self, collection_name: str, partition_names: List[str]) -> ServerStatus:
        self._collection(collection_name).load(partition_names=list(partition_names), _async=True)
        return ServerStatus()

    async def load_partitions(self, collection_name: str, partition_names: List[str]) -> ServerStatus:
        return await self._request(
            lambda status: status, self._load_partitions, collection_name, partition_names
        )

    def _flush(self, collection_name: str) -> FlushResponse:
        # PyMilvus only offers a blocking flush; issue the RPC and let the
        # caller poll the flush state.
        handler = connections._fetch_handler(self._alias)
        request = Prepare.flush_param([collection_name])
        response = handler._stub.Flush(request, timeout=self.config.connection.timeout)
        if response.status.error_code != ServerErrorCode.SUCCESS:
            return FlushResponse(
                status=ServerStatus(code=response.status.error_code, reason=response.status.reason)
            )
        return FlushResponse(
            segment_ids=list(response.coll_segIDs[collection_name].data),
            flush_ts=response.coll_flush_ts[collection_name]
        )

    async def flush(self, collection_name: str) -> FlushResponse:
        return await self._request(lambda status: FlushResponse(status=status), self._flush, collection_name)

    # Progress queries

    def _show_collections(self, collection_names: List[str]) -> LoadingProgressResponse:
        targets = []
        for name in collection_names:
            progress = utility.loading_progress(name, using=self._alias)
            targets.append(TargetLoadState(name=name, in_memory_percentage=parse_loading_progress(progress)))
        return LoadingProgressResponse(targets=targets)

    async def show_collections(self, collection_names: List[str]) -> LoadingProgressResponse:
        return await self._request(
            lambda status: LoadingProgressResponse(status=status),
            self._show_collections,
            collection_names
        )

    def _show_partitions(self, collection_name: str, partition_names: List[str]) -> LoadingProgressResponse:
        targets = []
        for name in partition_names:
            progress = utility.loading_progress(
                collection_name, partition_names=[name], using=self._alias
            )
            targets.append(TargetLoadState(name=name, in_memory_percentage=parse_loading_progress(progress)))
        return LoadingProgressResponse(targets=targets)

    async def show_partitions(self, collection_name: str, partition_names: List[str]) -> LoadingProgressResponse:
        return await self._request(
            lambda status: LoadingProgressResponse(status=status),
            self._show_partitions,
            collection_name,
            partition_names
        )

    def _get_flush_state(self, segment_ids: List[int], collection_name: str, flush_ts: int) -> FlushStateResponse:
        handler = connections._fetch_handler(self._alias)
        flushed = handler.get_flush_state(
            list(segment_ids), collection_name, flush_ts, timeout=self.config.connection.timeout
        )
        return FlushStateResponse(flushed=bool(flushed))

    async def get_flush_state(self, segment_ids: List[int], collection_name: str, flush_ts: int) -> FlushStateResponse:
        return await self._request(
            lambda status: FlushStateResponse(status=status),
            self._get_flush_state,
            segment_ids,
            collection_name,
            flush_ts
        )

    # Statistics

    def _get_collection_statistics(self, collection_name: str) -> StatisticsResponse:
        row_count = self._collection(collection_name).num_entities
        return StatisticsResponse(statistics={"row_count": str(row_count)})

    async def get_collection_statistics(self, collection_name: str) -> StatisticsResponse:
        return await self._request(
            lambda status: StatisticsResponse(status=status),
            self._get_collection_statistics,
            collection_name
        )

    def _get_partition_statistics(self, collection_name: str, partition_name: str) -> StatisticsResponse:
        partition = self._collection(collection_name).partition(partition_name)
        if partition is None:
            return StatisticsResponse(status=ServerStatus(
                code=ServerErrorCode.PARTITION_NOT_FOUND,
                reason=f"partition '{partition_name}' not found in collection '{collection_name}'"
            ))
        return StatisticsResponse(statistics={"row_count": str(partition.num_entities)})

    async def get_partition_statistics(self, collection_name: str, partition_name: str) -> StatisticsResponse:
        return await self._request(
            lambda status: StatisticsResponse(status=status),
            self._get_partition_statistics,
            collection_name,
            partition_name
        )
