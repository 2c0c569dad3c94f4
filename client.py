"""
Milvus Client

This module provides the blocking client interface for wait-capable Milvus
operations. Each method runs the corresponding OperationManager coroutine to
completion, so the calling thread is suspended between polls.

Asyncio applications should use OperationManager directly through
`client.operations`.

Typical usage:
    with MilvusClient("config.yaml") as client:
        status = client.load_collection("documents", timeout=30)
        status.raise_for_status()

        stats = client.get_collection_statistics("documents", timeout=10)
        print(stats.row_count)
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Union

from config import MilvusSettings, load_settings
from connection_management import (
    ConnectionInitializationError,
    ConnectionStatus,
    MilvusTransport,
    PymilvusTransport
)
from milvus_wait_exceptions import ConfigurationError
from wait_operations import (
    OperationManager,
    StatisticsResult,
    Status,
    TimeoutPolicy,
    WaitOperationConfig
)

# Logger setup
logger = logging.getLogger(__name__)


Timeout = Union[TimeoutPolicy, float, int, None]


class MilvusClient:
    """
    Blocking client for wait-capable Milvus operations.

    Every operation accepts an optional `timeout`:
    - None returns as soon as the server accepted the request
    - TimeoutPolicy.instant() checks progress once and fails only on errors
    - a TimeoutPolicy.bounded(...) or a number of seconds polls until the
      operation completes, fails or the budget elapses

    Methods run their coroutine with asyncio.run and cannot be called from a
    thread with a running event loop; async callers must use `client.operations`.
    """

    def __init__(
        self,
        config: Optional[Union[MilvusSettings, str, Path]] = None,
        transport: Optional[MilvusTransport] = None
    ):
        """
        Initialize the Milvus client.

        Args:
            config: Either a MilvusSettings object or a path to a config YAML file.
                   If None, default configuration will be used.
            transport: Transport to use. If None, a PymilvusTransport is created
                       from the configuration; call connect() before use.
        """
        if config is None:
            self.config = load_settings()
        elif isinstance(config, (str, Path)):
            self.config = load_settings(str(config))
        elif isinstance(config, MilvusSettings):
            self.config = config
        else:
            raise ConfigurationError("Invalid configuration type. Expected MilvusSettings, str, Path, or None.")

        self._transport = transport or PymilvusTransport(self.config)
        self.operations = OperationManager(
            self._transport,
            config=WaitOperationConfig.from_settings(self.config.wait)
        )

        logger.info("MilvusClient initialized successfully")

    @property
    def transport(self) -> MilvusTransport:
        return self._transport

    def connect(self) -> None:
        """
        Connect the underlying PymilvusTransport.

        Raises:
            ConnectionInitializationError: If the connection cannot be established
        """
        if not isinstance(self._transport, PymilvusTransport):
            logger.debug("Injected transport manages its own connection")
            return
        feedback = self._transport.connect()
        if feedback.status != ConnectionStatus.SUCCESS:
            raise ConnectionInitializationError(feedback.message)

    def load_collection(self, collection_name: str, timeout: Timeout = None) -> Status:
        """Load a collection into query nodes, optionally waiting for completion."""
        return asyncio.run(self.operations.load_collection(collection_name, timeout=timeout))

    def load_partitions(
        self,
        collection_name: str,
        partition_names: List[str],
        timeout: Timeout = None
    ) -> Status:
        """Load partitions of a collection, optionally waiting for completion."""
        return asyncio.run(
            self.operations.load_partitions(collection_name, partition_names, timeout=timeout)
        )

    def get_collection_statistics(self, collection_name: str, timeout: Timeout = None) -> StatisticsResult:
        """Get collection statistics; with a timeout, flush and wait first."""
        return asyncio.run(
            self.operations.get_collection_statistics(collection_name, timeout=timeout)
        )

    def get_partition_statistics(
        self,
        collection_name: str,
        partition_name: str,
        timeout: Timeout = None
    ) -> StatisticsResult:
        """Get partition statistics; with a timeout, flush and wait first."""
        return asyncio.run(
            self.operations.get_partition_statistics(collection_name, partition_name, timeout=timeout)
        )

    def close(self):
        """Close the client and release all resources"""
        if isinstance(self._transport, PymilvusTransport):
            self._transport.close()
        logger.info("MilvusClient connection closed")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
