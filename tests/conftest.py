from datetime import datetime, timezone

import pytest

from simple_mcp.dispatcher import Dispatcher
from simple_mcp.state import StateStore

FIXED_NOW = datetime(2026, 10, 18, 9, 15, 2, 123000, tzinfo=timezone.utc)
FIXED_ISO = "2026-10-18T09:15:02.123Z"


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def dispatcher(store):
    return Dispatcher(store=store, clock=lambda: FIXED_NOW)


@pytest.fixture
def call(dispatcher):
    """Send one request through the dispatcher and return the full response."""
    counter = iter(range(1, 10_000))

    def _call(method, params=None):
        message = {"jsonrpc": "2.0", "id": next(counter), "method": method}
        if params is not None:
            message["params"] = params
        return dispatcher.dispatch(message)

    return _call


@pytest.fixture
def call_tool(call):
    """Call a tool and return the text of its first content item."""

    def _call_tool(name, arguments=None):
        response = call("tools/call", {"name": name, "arguments": arguments or {}})
        assert "error" not in response, response
        return response["result"]["content"][0]["text"]

    return _call_tool


@pytest.fixture
def fixed_iso():
    return FIXED_ISO
