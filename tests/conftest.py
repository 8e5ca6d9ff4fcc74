import socket
import threading

import pytest

from linechat.connection import Connection
from linechat.session import OutputSink

TIMEOUT = 5


class Peer:
    """Loopback stand-in for the chat server, driven from the test."""

    def __init__(self):
        self.listener = socket.create_server(("127.0.0.1", 0))
        self.listener.settimeout(TIMEOUT)
        self.host, self.port = self.listener.getsockname()[:2]
        self.conn = None
        self._reader = None

    def accept(self):
        self.conn, _ = self.listener.accept()
        self.conn.settimeout(TIMEOUT)
        self._reader = self.conn.makefile("rb")
        return self

    def send_raw(self, data: bytes):
        self.conn.sendall(data)

    def send_line(self, text: str):
        self.send_raw(text.encode("latin-1") + b"\n")

    def recv_raw_line(self) -> bytes:
        return self._reader.readline()

    def recv_line(self):
        raw = self.recv_raw_line()
        if not raw:
            return None
        return raw.decode("latin-1").rstrip("\n")

    def close_connection(self):
        if self._reader is not None:
            self._reader.close()
        if self.conn is not None:
            self.conn.close()

    def close(self):
        self.close_connection()
        self.listener.close()


class RecordingSink(OutputSink):
    def __init__(self):
        self.lines = []
        self.errors = []
        self.failures = []
        self.addresses = []
        self.closed_count = 0
        self.closed = threading.Event()
        self._lock = threading.Lock()
        self._line_arrived = threading.Condition(self._lock)

    def write_line(self, line):
        with self._lock:
            self.lines.append(line)
            self._line_arrived.notify_all()

    def connected(self, address):
        self.addresses.append(address)

    def connection_closed(self):
        with self._lock:
            self.closed_count += 1
        self.closed.set()

    def connect_failed(self, error):
        self.failures.append(error)

    def error(self, error):
        self.errors.append(error)

    def wait_for_lines(self, count, timeout=TIMEOUT):
        with self._lock:
            return self._line_arrived.wait_for(lambda: len(self.lines) >= count, timeout)


@pytest.fixture
def peer():
    p = Peer()
    yield p
    p.close()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def connection(peer, sink):
    """An open Connection to the peer, already accepted on the peer side."""
    conn = Connection.connect(peer.host, peer.port, timeout=TIMEOUT)
    conn.add_close_listener(lambda c: sink.connection_closed())
    peer.accept()
    yield conn
    conn.shutdown()


@pytest.fixture
def closed_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
