"""Newline-delimited JSON-RPC over stdin/stdout.

stdout carries nothing but JSON messages, one per line. Logs go to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, Any, Dict, Optional, TextIO, Union

from simple_mcp.dispatcher import Dispatcher, failure
from simple_mcp.errors import ParseError

logger = logging.getLogger(__name__)


def write_message(stream: TextIO, message: Dict[str, Any]) -> None:
    stream.write(json.dumps(message) + "\n")
    stream.flush()


def serve_stdio(
    dispatcher: Dispatcher,
    stdin: Optional[IO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Answer messages from ``stdin`` until it reaches EOF.

    ``stdin`` defaults to the raw byte stream, so a line that is not valid
    UTF-8 gets a parse error instead of ending the loop.
    """
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout

    logger.info("MCP server listening on stdio")
    for raw in stdin:
        line = _decode(raw)
        if line is None:
            logger.warning("Discarding stdin line that is not valid UTF-8")
            write_message(stdout, failure(None, ParseError("Parse error")))
            continue
        line = line.strip()
        if not line:
            continue
        reply = dispatcher.handle_raw(line)
        if reply is not None:
            write_message(stdout, reply)
    logger.info("stdin closed, shutting down")


def _decode(raw: Union[str, bytes]) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
