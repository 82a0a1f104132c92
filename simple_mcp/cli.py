"""Command line entry point: ``simple-mcp`` or ``python -m simple_mcp``.

Examples::

    simple-mcp                          # Streamable HTTP + SSE on :8888
    simple-mcp --port 9000 --log-level DEBUG
    simple-mcp --transport stdio        # for clients that spawn the server

Then, against the HTTP transport::

    curl -i -X POST -H "Content-Type: application/json" \\
         -d '{"jsonrpc": "2.0", "id": 1, "method": "tools/call",
              "params": {"name": "add_to_counter", "arguments": {"amount": 5}}}' \\
         http://localhost:8888/mcp
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from simple_mcp import __version__
from simple_mcp.app import create_app
from simple_mcp.config import ServerSettings
from simple_mcp.dispatcher import Dispatcher
from simple_mcp.log import configure_logging
from simple_mcp.stdio import serve_stdio

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="simple-mcp", description="Simple stateful MCP server")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--transport", choices=["http", "stdio"], default=None, help="transport to serve (default: http)")
    parser.add_argument("--host", default=None, help="interface to bind the HTTP server to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to run the server on (default: 8888)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR (default: INFO)")
    parser.add_argument(
        "--no-log-payloads",
        dest="log_payloads",
        action="store_false",
        default=None,
        help="leave request params out of the request log",
    )
    return parser


def load_settings(argv: Optional[List[str]] = None) -> ServerSettings:
    """Environment first, then any flags given on the command line."""
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    return ServerSettings(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings(argv)
    configure_logging(settings.log_level)
    dispatcher = Dispatcher(log_payloads=settings.log_payloads)

    if settings.transport == "stdio":
        serve_stdio(dispatcher)
        return 0

    logger.info("Starting MCP server on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(dispatcher),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0
