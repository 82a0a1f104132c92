"""Logging setup and structured request log lines.

Everything goes to stderr: under the stdio transport stdout carries nothing
but JSON-RPC messages.
"""

import json
import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one JSON object per line, e.g. ``{"event": "request_start", "method": "tools/call", ...}``."""
    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str, ensure_ascii=False))
