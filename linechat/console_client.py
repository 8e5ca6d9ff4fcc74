#!/usr/bin/env python3
"""
Console chat client.

Lines typed on stdin go to the server, lines from the server are printed.
Type "exit" (any case) or send end-of-input to leave.

Usage:
  python -m linechat.console_client [host] [port]
"""

import argparse
import sys

from . import config
from .errors import ConnectError
from .session import OutputSink, Session


class ConsoleSink(OutputSink):
    def write_line(self, line: str):
        print(line, flush=True)

    def connected(self, address):
        print(f"Connected to {address[0]} on port: {address[1]}", flush=True)

    def connection_closed(self):
        print("Connection closed.", flush=True)

    def connect_failed(self, error):
        print("Error: Unable to connect to server.", file=sys.stderr)
        print(f"[{error.reason}]", file=sys.stderr)

    def error(self, error):
        print(f"[{error}]", file=sys.stderr)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Point-to-point chat client")
    p.add_argument("host", nargs="?", default=config.DEFAULT_HOST)
    p.add_argument("port", nargs="?", type=int, default=config.DEFAULT_PORT)
    p.add_argument("--timeout", type=float, default=config.CONNECT_TIMEOUT,
                   help="connect timeout in seconds")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config.configure_logging(args.log_level)

    sink = ConsoleSink()
    try:
        session = Session.open(args.host, args.port, sys.stdin, sink,
                               timeout=args.timeout)
    except ConnectError:
        return 1

    try:
        session.wait()
    except KeyboardInterrupt:
        session.close()
        session.wait(timeout=config.CONNECT_TIMEOUT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
