"""
One chat session: a Connection plus its receive and send threads.

Front-ends plug in an input source (any iterable of text lines) and an
OutputSink. The core does not care whether those are a terminal or a
browser page.
"""

import logging
import queue
import threading

from .connection import Connection, ConnectionState
from .errors import ConnectError
from .loops import receive_loop, send_loop

log = logging.getLogger(__name__)


class OutputSink:
    """Where a session delivers received lines and lifecycle notices."""

    def write_line(self, line: str):
        raise NotImplementedError

    def connected(self, address):
        pass

    def connection_closed(self):
        pass

    def connect_failed(self, error: ConnectError):
        pass

    def error(self, error: Exception):
        pass


class QueueInput:
    """
    Input source fed from another thread, e.g. an event loop handling
    text-field submissions. Iteration blocks until text is put or the
    source is closed.
    """

    _END = object()

    def __init__(self):
        self._queue = queue.Queue()
        self._closed = False

    def put(self, text: str):
        if not self._closed:
            self._queue.put(text)

    def close(self):
        if not self._closed:
            self._closed = True
            self._queue.put(self._END)

    def __iter__(self):
        while True:
            item = self._queue.get()
            if item is self._END:
                return
            yield item


class Session:
    def __init__(self, connection: Connection, source, sink: OutputSink):
        self.connection = connection
        self.source = source
        self.sink = sink
        connection.add_close_listener(lambda conn: sink.connection_closed())
        if hasattr(source, "close"):
            # ends a send loop parked on an event-fed source
            connection.add_close_listener(lambda conn: source.close())
        self.receiver = threading.Thread(
            target=receive_loop, args=(connection, sink),
            name="chat-receive", daemon=True)
        # the send thread may sit in a blocking stdin read forever
        self.sender = threading.Thread(
            target=send_loop, args=(connection, source, sink),
            name="chat-send", daemon=True)

    @classmethod
    def open(cls, host, port, source, sink: OutputSink, timeout=None):
        """Connect and start both loops. Raises ConnectError, starting nothing."""
        try:
            connection = Connection.connect(host, port, timeout=timeout)
        except ConnectError as e:
            sink.connect_failed(e)
            raise
        try:
            sink.connected(connection.address)
            session = cls(connection, source, sink)
        except Exception:
            connection.shutdown()
            raise
        session.start()
        return session

    def start(self):
        self.receiver.start()
        self.sender.start()

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    def close(self):
        self.connection.shutdown()

    def wait(self, timeout=None) -> bool:
        """Block until the connection is closed and the receive loop returned."""
        if not self.connection.wait_closed(timeout):
            return False
        self.receiver.join(timeout)
        return not self.receiver.is_alive()
