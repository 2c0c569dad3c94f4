"""
Operation Manager

Provides the wait-capable operations of the client: loading a collection,
loading partitions, and reading collection or partition statistics after a
flush. Each operation sends its trigger request once and then, if the caller
asked to wait, hands a probe to the WaitEngine.

The `timeout` argument of every operation selects the waiting behavior:
- None: fire and forget. The trigger is sent and OK is returned without
  polling (statistics are read without flushing first).
- TimeoutPolicy.instant(): the trigger is sent and progress is checked once.
  OK is returned unless that check reports a failure.
- TimeoutPolicy.bounded(...) or a number of seconds: progress is polled
  until the operation completes, fails or the budget elapses.

Failures are returned as a Status; nothing is raised for server errors,
timeouts or communication failures.

Typical usage from external projects:

    transport = PymilvusTransport(settings)
    transport.connect()
    manager = OperationManager(transport)

    status = await manager.load_collection(
        "documents",
        timeout=TimeoutPolicy.bounded(60.0, poll_interval=1.0)
    )
    if not status.is_ok:
        print(f"Load did not finish: {status}")
"""

import logging
from typing import List, Optional, Union

from connection_management.connection_exceptions import ConnectionClosedError, ConnectionError
from connection_management.transport import MilvusTransport, StatisticsResponse
from wait_operations.config import TimeoutPolicy, WaitOperationConfig
from wait_operations.core.engine import WaitEngine
from wait_operations.core.probes import (
    FlushStateProbe,
    LoadCollectionProbe,
    LoadPartitionsProbe,
    ProgressProbe
)
from wait_operations.models.entities import (
    CollectionStat,
    PartitionStat,
    StatisticsResult,
    Status,
    WaitOutcome
)

logger = logging.getLogger(__name__)


Timeout = Union[TimeoutPolicy, float, int, None]


class OperationManager:
    """
    Wait-capable Milvus operations with asyncio support.

    Example:
        ```python
        manager = OperationManager(transport, config=WaitOperationConfig(default_poll_interval=1.0))

        # Wait up to 30 seconds, polling every second
        status = await manager.load_partitions("documents", ["2024"], timeout=30)

        # Flush, wait until persisted, then read the row count
        result = await manager.get_collection_statistics("documents", timeout=10)
        print(result.row_count)
        ```
    """

    def __init__(
        self,
        transport: MilvusTransport,
        engine: Optional[WaitEngine] = None,
        config: Optional[WaitOperationConfig] = None
    ):
        """
        Initialize OperationManager with injected dependencies.

        Args:
            transport: Transport used for trigger calls and progress queries
            engine: Wait engine. If None, one is built from the configuration.
            config: Configuration for wait operations. If None, uses defaults.
        """
        self._transport = transport
        self._config = config or WaitOperationConfig()
        self._engine = engine or WaitEngine(progress_log_every=self._config.progress_log_every)

        logger.debug(
            f"OperationManager initialized with default_poll_interval="
            f"{self._config.default_poll_interval}s"
        )

    def _resolve_policy(self, timeout: Timeout) -> Optional[TimeoutPolicy]:
        if timeout is None or isinstance(timeout, TimeoutPolicy):
            return timeout
        return self._config.policy_for(float(timeout))

    def _communication_status(self, operation: str, error: ConnectionError) -> Status:
        if isinstance(error, ConnectionClosedError) or not self._transport.is_connected:
            logger.error(f"{operation}: not connected: {error}")
            return Status.not_connected(str(error))
        logger.error(f"{operation}: communication failure: {error}")
        return Status.server_failed(f"Communication failure: {error}")

    async def _wait(self, probe: ProgressProbe, policy: TimeoutPolicy) -> Status:
        result = await self._engine.wait(probe, policy)
        if result.outcome == WaitOutcome.COMMUNICATION_FAILURE and not self._transport.is_connected:
            return Status.not_connected(result.reason or "Connection is not ready!")
        return Status.from_wait_result(result)

    async def load_collection(self, collection_name: str, timeout: Timeout = None) -> Status:
        """
        Load collection data into the memory of query nodes.

        Args:
            collection_name: Name of the collection
            timeout: Waiting behavior, see module documentation

        Returns:
            Status of the load (OK, SERVER_FAILED, TIMEOUT or NOT_CONNECTED)
        """
        operation = f"load_collection({collection_name})"
        if not self._transport.is_connected:
            return Status.not_connected()

        policy = self._resolve_policy(timeout)
        try:
            status = await self._transport.load_collection(collection_name)
        except ConnectionError as e:
            return self._communication_status(operation, e)

        if not status.is_success:
            logger.error(f"{operation} rejected by server: {status.describe()}")
            return Status.server_failed(status.describe())

        if policy is None:
            logger.info(f"{operation} triggered, not waiting for completion")
            return Status.ok()

        return await self._wait(LoadCollectionProbe(self._transport, collection_name), policy)

    async def load_partitions(
        self,
        collection_name: str,
        partition_names: List[str],
        timeout: Timeout = None
    ) -> Status:
        """
        Load specific partitions of a collection into the memory of query nodes.

        Args:
            collection_name: Name of the collection
            partition_names: Names of the partitions to load, must not be empty
            timeout: Waiting behavior, see module documentation

        Returns:
            Status of the load
        """
        if not partition_names:
            return Status.invalid_argument("partition_names cannot be empty")

        operation = f"load_partitions({collection_name}, {list(partition_names)})"
        if not self._transport.is_connected:
            return Status.not_connected()

        policy = self._resolve_policy(timeout)
        try:
            status = await self._transport.load_partitions(collection_name, list(partition_names))
        except ConnectionError as e:
            return self._communication_status(operation, e)

        if not status.is_success:
            logger.error(f"{operation} rejected by server: {status.describe()}")
            return Status.server_failed(status.describe())

        if policy is None:
            logger.info(f"{operation} triggered, not waiting for completion")
            return Status.ok()

        probe = LoadPartitionsProbe(self._transport, collection_name, partition_names)
        return await self._wait(probe, policy)

    async def _flush_and_wait(self, collection_name: str, policy: TimeoutPolicy) -> Status:
        """Flush a collection once and wait until its sealed segments are persisted."""
        operation = f"flush({collection_name})"
        try:
            response = await self._transport.flush(collection_name)
        except ConnectionError as e:
            return self._communication_status(operation, e)

        if not response.status.is_success:
            logger.error(f"{operation} rejected by server: {response.status.describe()}")
            return Status.server_failed(response.status.describe())

        logger.debug(f"{operation} sealed {len(response.segment_ids)} segments")
        probe = FlushStateProbe(
            self._transport, collection_name, response.segment_ids, response.flush_ts
        )
        return await self._wait(probe, policy)

    def _statistics_status(self, operation: str, response: StatisticsResponse) -> Status:
        if not response.status.is_success:
            logger.error(f"{operation} rejected by server: {response.status.describe()}")
            return Status.server_failed(response.status.describe())
        return Status.ok()

    async def get_collection_statistics(
        self,
        collection_name: str,
        timeout: Timeout = None
    ) -> StatisticsResult:
        """
        Get collection statistics, currently the row count.

        When a timeout is given the collection is flushed first and the
        statistics are read once every sealed segment is persisted.

        Args:
            collection_name: Name of the collection
            timeout: Waiting behavior for the flush; None skips the flush

        Returns:
            StatisticsResult with the status and, when OK, the statistics
        """
        operation = f"get_collection_statistics({collection_name})"
        if not self._transport.is_connected:
            return StatisticsResult(status=Status.not_connected())

        policy = self._resolve_policy(timeout)
        if policy is not None:
            status = await self._flush_and_wait(collection_name, policy)
            if not status.is_ok:
                return StatisticsResult(status=status)

        try:
            response = await self._transport.get_collection_statistics(collection_name)
        except ConnectionError as e:
            return StatisticsResult(status=self._communication_status(operation, e))

        status = self._statistics_status(operation, response)
        if not status.is_ok:
            return StatisticsResult(status=status)
        return StatisticsResult(
            status=status,
            stat=CollectionStat(name=collection_name, statistics=response.statistics)
        )

    async def get_partition_statistics(
        self,
        collection_name: str,
        partition_name: str,
        timeout: Timeout = None
    ) -> StatisticsResult:
        """
        Get partition statistics, currently the row count.

        When a timeout is given the owning collection is flushed first.

        Args:
            collection_name: Name of the collection
            partition_name: Name of the partition
            timeout: Waiting behavior for the flush; None skips the flush

        Returns:
            StatisticsResult with the status and, when OK, the statistics
        """
        operation = f"get_partition_statistics({collection_name}, {partition_name})"
        if not self._transport.is_connected:
            return StatisticsResult(status=Status.not_connected())

        policy = self._resolve_policy(timeout)
        if policy is not None:
            status = await self._flush_and_wait(collection_name, policy)
            if not status.is_ok:
                return StatisticsResult(status=status)

        try:
            response = await self._transport.get_partition_statistics(collection_name, partition_name)
        except ConnectionError as e:
            return StatisticsResult(status=self._communication_status(operation, e))

        status = self._statistics_status(operation, response)
        if not status.is_ok:
            return StatisticsResult(status=status)
        return StatisticsResult(
            status=status,
            stat=PartitionStat(
                name=partition_name,
                collection_name=collection_name,
                statistics=response.statistics
            )
        )
