"""
Wait Operations Module

Turns long-running Milvus server operations into synchronous results:
- Loading a collection or a set of partitions into query nodes
- Flushing buffered writes before reading collection or partition statistics
- Bounded polling with a deterministic timeout and poll cadence
- Fast failure on server-side terminal errors such as resource exhaustion
- Outcomes returned as Status values rather than raised

Typical usage from external projects:

    from wait_operations import OperationManager, TimeoutPolicy, StatusCode

    manager = OperationManager(transport)

    status = await manager.load_collection(
        "documents",
        timeout=TimeoutPolicy.bounded(60.0, poll_interval=0.5)
    )
    if status.code == StatusCode.TIMEOUT:
        print("Collection is still loading")
"""

# Core manager (primary interface)
from .core.manager import OperationManager

# Engine and probes
from .core.engine import WaitEngine
from .core.probes import (
    ProgressProbe,
    LoadCollectionProbe,
    LoadPartitionsProbe,
    FlushStateProbe
)

# Configuration
from .config import TimeoutPolicy, WaitMode, WaitOperationConfig, DEFAULT_POLL_INTERVAL

# Models
from .models.entities import (
    TargetProgress,
    ProgressReport,
    WaitState,
    WaitOutcome,
    WaitResult,
    StatusCode,
    Status,
    CollectionStat,
    PartitionStat,
    StatisticsResult
)

# Utilities
from .utils.progress import WaitProgressTracker

__all__ = [
    # Primary interface
    'OperationManager',

    # Engine and probes
    'WaitEngine',
    'ProgressProbe',
    'LoadCollectionProbe',
    'LoadPartitionsProbe',
    'FlushStateProbe',

    # Configuration
    'TimeoutPolicy',
    'WaitMode',
    'WaitOperationConfig',
    'DEFAULT_POLL_INTERVAL',

    # Models
    'TargetProgress',
    'ProgressReport',
    'WaitState',
    'WaitOutcome',
    'WaitResult',
    'StatusCode',
    'Status',
    'CollectionStat',
    'PartitionStat',
    'StatisticsResult',

    # Utilities
    'WaitProgressTracker'
]
