"""
Connection Management Module

This module provides the transport layer used by wait operations:
- The MilvusTransport contract: one-shot trigger calls and repeatable
  progress queries
- Response models carrying the server status of every call
- A PyMilvus-backed transport running blocking SDK calls off the event loop
- Exceptions that separate communication failures from server errors
"""

from .transport import (
    MilvusTransport,
    ServerErrorCode,
    ServerStatus,
    TargetLoadState,
    LoadingProgressResponse,
    FlushResponse,
    FlushStateResponse,
    StatisticsResponse
)
from .milvus_connector import PymilvusTransport, ConnectionStatus, ConnectionFeedback
from .connection_exceptions import (
    ConnectionError,
    ConnectionClosedError,
    ConnectionInitializationError,
    ServerUnavailableError
)

__all__ = [
    'MilvusTransport',
    'ServerErrorCode',
    'ServerStatus',
    'TargetLoadState',
    'LoadingProgressResponse',
    'FlushResponse',
    'FlushStateResponse',
    'StatisticsResponse',
    'PymilvusTransport',
    'ConnectionStatus',
    'ConnectionFeedback',
    'ConnectionError',
    'ConnectionClosedError',
    'ConnectionInitializationError',
    'ServerUnavailableError',
]
