"""
Runtime defaults. Any of them can be overridden from the environment or a
.env file in the working directory.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_HOST = os.getenv("CHAT_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("CHAT_PORT", 2000))
CONNECT_TIMEOUT = float(os.getenv("CHAT_CONNECT_TIMEOUT", 10))
HTTP_HOST = os.getenv("CHAT_HTTP_HOST", "0.0.0.0")
HTTP_PORT = int(os.getenv("CHAT_HTTP_PORT", 8765))
LOG_LEVEL = os.getenv("CHAT_LOG_LEVEL", "WARNING")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"


def configure_logging(level=LOG_LEVEL):
    # diagnostics go to stderr so they never mix with chat output
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
