"""A small stateful MCP server: a counter, a message log, and three transports."""

__version__ = "1.0.0"

from simple_mcp.dispatcher import Dispatcher  # noqa: E402
from simple_mcp.state import ServerState, StateStore  # noqa: E402

__all__ = ["Dispatcher", "ServerState", "StateStore", "__version__"]
