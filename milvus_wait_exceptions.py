"""
Milvus Wait Operations Exceptions

This module defines custom exceptions for the milvus_wait package.
Wait operations report their outcome as a Status value; these exceptions
are raised by Status.raise_for_status() and by the transport layer.
"""

from typing import Optional


class MilvusWaitError(Exception):
    """Base exception for all milvus_wait errors"""
    pass


class ConnectionError(MilvusWaitError):
    """Raised when the Milvus server cannot be reached"""
    pass


class ConfigurationError(MilvusWaitError):
    """Raised when configuration is invalid or missing"""
    pass


class InvalidArgumentError(MilvusWaitError):
    """Raised when an operation is called with invalid arguments"""
    pass


class ServerFailedError(MilvusWaitError):
    """
    Raised when the server reported an error for an operation.

    Attributes:
        reason: The message reported by the server
    """
    def __init__(self, message: str, reason: str = ""):
        super().__init__(message)
        self.reason = reason


class OperationTimeoutError(MilvusWaitError):
    """
    Raised when waiting for an operation gave up before it completed.

    The operation itself may still complete later on the server.

    Attributes:
        timeout_seconds: The wait budget that elapsed
    """
    def __init__(self, message: str, timeout_seconds: Optional[float] = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
