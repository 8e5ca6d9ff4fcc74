"""
The two relay loops of a chat session.

receive_loop: peer -> connection -> output sink
send_loop:    input source -> connection -> peer

Each runs on its own thread and ends the session through
Connection.shutdown() when its side is done.
"""

import logging
import re

from .connection import Connection, ConnectionState
from .errors import ConnectionClosedError, ReceiveIoError, SendIoError

log = logging.getLogger(__name__)

EXIT_COMMAND = "exit"

# only real line breaks; str.splitlines would also split on \x85 and friends
LINE_BREAK = re.compile(r"\r\n|\r|\n")


def is_exit_command(text: str) -> bool:
    return text.strip().lower() == EXIT_COMMAND


def receive_loop(connection: Connection, sink):
    try:
        while True:
            line = connection.read_line()
            if line is None:
                log.info("server closed the connection")
                break
            sink.write_line(line)
    except (OSError, ConnectionClosedError) as e:
        # a local shutdown also lands here; only report real failures
        if connection.state is ConnectionState.OPEN:
            log.warning("receive failed: %s", e)
            sink.error(ReceiveIoError(f"receive error: {e}"))
    finally:
        connection.shutdown()


def send_loop(connection: Connection, source, sink=None):
    try:
        for text in source:
            text = text.rstrip("\r\n")
            if is_exit_command(text):
                log.info("exit command received")
                break
            # a pasted block goes out one line per line break
            for line in LINE_BREAK.split(text):
                if line.strip():
                    connection.write_line(line)
        else:
            log.info("local input exhausted")
    except (OSError, ConnectionClosedError, ValueError) as e:
        # ValueError: undecodable local input
        if connection.state is ConnectionState.OPEN:
            log.warning("send failed: %s", e)
            if sink is not None:
                sink.error(SendIoError(f"error sending message: {e}"))
    finally:
        connection.shutdown()
