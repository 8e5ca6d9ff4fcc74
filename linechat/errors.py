"""
Errors raised by the line-relay engine.
"""


class ChatError(Exception):
    pass


class ConnectError(ChatError):
    """The TCP connection to the chat server could not be established."""

    def __init__(self, host, port, reason):
        super().__init__(f"unable to connect to {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class ConnectionClosedError(ChatError):
    """Read or write attempted after the connection was shut down."""


class ReceiveIoError(ChatError):
    pass


class SendIoError(ChatError):
    pass
