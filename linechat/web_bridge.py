#!/usr/bin/env python3
"""
Browser front-end for the chat client, built on aiohttp:
 - serves static/index.html (a text field and a scrollback area)
 - speaks WebSocket at /ws
 - every ws connection runs one chat Session against the TCP server and
   relays lines both ways.

The relay threads never touch the websocket. They post events to the
event loop, which is the only place the page state is updated from.

Usage:
  python -m linechat.web_bridge --tcp-host 127.0.0.1 --tcp-port 2000 --http-port 8765
"""

import argparse
import asyncio
import contextlib
import functools
import logging
import os

from aiohttp import web, WSMsgType

from . import config
from .errors import ConnectError
from .session import OutputSink, QueueInput, Session

log = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


class WebSink(OutputSink):
    def __init__(self, loop: asyncio.AbstractEventLoop, outbox: asyncio.Queue):
        self._loop = loop
        self._outbox = outbox

    def _post(self, event):
        self._loop.call_soon_threadsafe(self._outbox.put_nowait, event)

    def write_line(self, line):
        self._post({"type": "line", "text": line})

    def connected(self, address):
        self._post({"type": "connected", "host": address[0], "port": address[1]})

    def connection_closed(self):
        self._post({"type": "closed", "text": "Connection closed."})

    def connect_failed(self, error):
        self._post({"type": "error", "text": "Unable to connect to server.",
                    "detail": str(error.reason)})

    def error(self, error):
        self._post({"type": "error", "text": str(error)})


async def forward_events(ws: web.WebSocketResponse, outbox: asyncio.Queue):
    while True:
        event = await outbox.get()
        try:
            await ws.send_json(event)
        except (ConnectionResetError, RuntimeError) as e:
            log.debug("page went away, dropping %s event: %s", event["type"], e)
            return


async def websocket_handler(request):
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    # page-chosen servers only when the operator opted in
    params = request.rel_url.query if request.app["allow_target_override"] else {}
    host = params.get("host", request.app["tcp_host"])
    try:
        port = int(params.get("port", request.app["tcp_port"]))
    except ValueError:
        await ws.send_json({"type": "error", "text": "Invalid port."})
        await ws.close()
        return ws

    loop = asyncio.get_running_loop()
    outbox = asyncio.Queue()
    source = QueueInput()
    sink = WebSink(loop, outbox)

    # connecting blocks, keep it off the event loop
    try:
        session = await loop.run_in_executor(None, functools.partial(
            Session.open, host, port, source, sink,
            timeout=request.app["connect_timeout"]))
    except ConnectError:
        # connect_failed was posted before the executor future resolved
        while not outbox.empty():
            await ws.send_json(outbox.get_nowait())
        await ws.close()
        return ws

    pump = asyncio.create_task(forward_events(ws, outbox))
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                # after the session ended this is a no-op
                source.put(msg.data)
            elif msg.type == WSMsgType.ERROR:
                log.warning("websocket error: %s", ws.exception())
                break
    finally:
        # window closed: cancel the session from outside
        await loop.run_in_executor(None, session.close)
        await loop.run_in_executor(None, session.wait, request.app["connect_timeout"])
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump
        await ws.close()
    return ws


async def index(request):
    return web.FileResponse(os.path.join(STATIC_DIR, "index.html"))


def create_app(tcp_host=config.DEFAULT_HOST, tcp_port=config.DEFAULT_PORT,
               connect_timeout=config.CONNECT_TIMEOUT, allow_target_override=False):
    app = web.Application()
    app["tcp_host"] = tcp_host
    app["tcp_port"] = tcp_port
    app["connect_timeout"] = connect_timeout
    app["allow_target_override"] = allow_target_override
    app.router.add_get("/", index)
    app.router.add_get("/ws", websocket_handler)
    app.router.add_static("/static", STATIC_DIR)
    return app


def run_app(tcp_host, tcp_port, http_host, http_port, connect_timeout,
            allow_target_override=False):
    app = create_app(tcp_host, tcp_port, connect_timeout, allow_target_override)
    web.run_app(app, host=http_host, port=http_port)


def main(argv=None):
    p = argparse.ArgumentParser(description="Browser front-end for the chat client")
    p.add_argument("--tcp-host", default=config.DEFAULT_HOST)
    p.add_argument("--tcp-port", type=int, default=config.DEFAULT_PORT)
    p.add_argument("--http-host", default=config.HTTP_HOST)
    p.add_argument("--http-port", type=int, default=config.HTTP_PORT)
    p.add_argument("--timeout", type=float, default=config.CONNECT_TIMEOUT)
    p.add_argument("--allow-target-override", action="store_true",
                   help="let the page pick the chat server with ?host=&port=")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    args = p.parse_args(argv)
    config.configure_logging(args.log_level)
    run_app(args.tcp_host, args.tcp_port, args.http_host, args.http_port, args.timeout,
            args.allow_target_override)


if __name__ == "__main__":
    main()
