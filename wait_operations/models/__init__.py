"""
Wait Operation Models

Contains Pydantic models for progress reports, wait results and statuses.
"""

from .entities import (
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

__all__ = [
    'TargetProgress',
    'ProgressReport',
    'WaitState',
    'WaitOutcome',
    'WaitResult',
    'StatusCode',
    'Status',
    'CollectionStat',
    'PartitionStat',
    'StatisticsResult'
]
