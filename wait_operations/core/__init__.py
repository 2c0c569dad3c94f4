"""
Core wait operations: probes, the wait engine and the operation manager.
"""

from .probes import ProgressProbe, LoadCollectionProbe, LoadPartitionsProbe, FlushStateProbe
from .engine import WaitEngine
from .manager import OperationManager

__all__ = [
    'ProgressProbe',
    'LoadCollectionProbe',
    'LoadPartitionsProbe',
    'FlushStateProbe',
    'WaitEngine',
    'OperationManager'
]
