"""
Line-oriented reader and writer over a byte stream.

Text travels as ISO-8859-1 so every byte value 0-255 survives the trip,
one line per '\\n'.
"""

import logging
from typing import BinaryIO, Optional

from .errors import ConnectionClosedError

log = logging.getLogger(__name__)

ENCODING = "latin-1"
TERMINATOR = b"\n"


def decode_line(raw: bytes) -> str:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode(ENCODING)


def encode_line(line: str) -> bytes:
    if "\n" in line or "\r" in line:
        raise ValueError("a line cannot contain line-break characters")
    # unmappable characters go out as '?'
    return line.encode(ENCODING, errors="replace") + TERMINATOR


class LineReader:
    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.closed = False

    def read_line(self) -> Optional[str]:
        """Block until a full line arrives. Returns None at end of stream."""
        if self.closed:
            raise ConnectionClosedError("line reader is closed")
        try:
            raw = self._stream.readline()
        except ValueError as e:
            # the underlying file was closed under us
            raise ConnectionClosedError("line reader is closed") from e
        if not raw:
            return None
        return decode_line(raw)

    def close(self):
        if self.closed:
            return
        self.closed = True
        self._stream.close()


class LineWriter:
    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.closed = False

    def write_line(self, line: str):
        if self.closed:
            raise ConnectionClosedError("line writer is closed")
        data = encode_line(line)
        try:
            self._stream.write(data)
            self._stream.flush()
        except ValueError as e:
            raise ConnectionClosedError("line writer is closed") from e
        log.debug("sent %d bytes", len(data))

    def close(self):
        if self.closed:
            return
        self.closed = True
        self._stream.close()
