"""
Connection Management Exceptions

This module defines specialized exceptions for the transport layer.

A transport raises these exceptions when a request cannot be delivered to
the server or no response comes back. Server-side errors that arrive in a
response are not exceptions; they are reported through ServerStatus.
"""

from milvus_wait_exceptions import ConnectionError as BaseConnectionError


class ConnectionError(BaseConnectionError):
    """
    Base exception for all connection-related errors.

    Progress probes let this exception propagate; the wait engine classifies
    it as a communication failure and stops polling.
    """
    pass


class ConnectionClosedError(ConnectionError):
    """
    Raised when attempting to use a transport that is not connected.

    Operations map this exception to the NOT_CONNECTED status.
    """
    pass


class ConnectionInitializationError(ConnectionError):
    """
    Raised when a connection to the server cannot be established.

    Raised by connect() once every configured attempt has failed.
    """
    pass


class ServerUnavailableError(ConnectionError):
    """
    Raised when a request could not reach the Milvus server.

    This exception distinguishes communication failures from errors the
    server reported explicitly, which never raise.
    """
    pass
