"""
Point-to-point line chat client.
"""

from .connection import Connection, ConnectionState
from .errors import (ChatError, ConnectError, ConnectionClosedError,
                     ReceiveIoError, SendIoError)
from .session import OutputSink, QueueInput, Session

__version__ = "1.0.0"

__all__ = [
    "ChatError",
    "ConnectError",
    "Connection",
    "ConnectionClosedError",
    "ConnectionState",
    "OutputSink",
    "QueueInput",
    "ReceiveIoError",
    "SendIoError",
    "Session",
]
