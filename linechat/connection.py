"""
A single TCP connection to the chat server and its shutdown protocol.

Both relay loops share one Connection. Whichever side ends the session
(user, peer, I/O error or an outside caller) goes through shutdown(), which
tears everything down once and wakes up the other loop by shutting the
socket down under its blocking read.
"""

import enum
import logging
import socket
import threading

from .channel import LineReader, LineWriter
from .errors import ConnectError, ConnectionClosedError

log = logging.getLogger(__name__)


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Connection:
    def __init__(self, sock: socket.socket):
        self._state = ConnectionState.CONNECTING
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._listeners = []
        self._sock = sock
        self.address = sock.getpeername()
        self._reader = LineReader(sock.makefile("rb"))
        self._writer = LineWriter(sock.makefile("wb"))
        self._state = ConnectionState.OPEN

    @classmethod
    def connect(cls, host: str, port: int, timeout=None):
        """Open a connection, or raise ConnectError leaving nothing open."""
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            log.info("connect to %s:%s failed: %s", host, port, e)
            raise ConnectError(host, port, e) from e
        try:
            # the timeout only bounds the connect itself
            sock.settimeout(None)
            connection = cls(sock)
        except OSError as e:
            sock.close()
            raise ConnectError(host, port, e) from e
        log.info("connected to %s:%s", host, port)
        return connection

    @property
    def state(self) -> ConnectionState:
        return self._state

    def add_close_listener(self, callback):
        """Register callback(connection), called once after teardown."""
        self._listeners.append(callback)

    def wait_closed(self, timeout=None) -> bool:
        return self._closed.wait(timeout)

    def _check_open(self):
        if self._state is not ConnectionState.OPEN:
            raise ConnectionClosedError(f"connection is {self._state.value}")

    def read_line(self):
        self._check_open()
        return self._reader.read_line()

    def write_line(self, line: str):
        self._check_open()
        self._writer.write_line(line)

    def shutdown(self):
        with self._lock:
            if self._state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
                return
            self._state = ConnectionState.CLOSING
        log.info("shutting down connection to %s", self.address)

        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            # already reset or disconnected by the peer
            log.debug("socket shutdown: %s", e)
        for name, close in (("outbound channel", self._writer.close),
                            ("inbound channel", self._reader.close),
                            ("socket", self._sock.close)):
            try:
                close()
            except Exception as e:
                log.warning("error closing %s: %s", name, e)

        with self._lock:
            self._state = ConnectionState.CLOSED

        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                log.exception("close listener %r failed", listener)
        # waiters wake only once every listener has been told
        self._closed.set()
