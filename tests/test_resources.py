"""Tests for the counter and messages resources."""

import pytest

from simple_mcp.resources import resolve_resource


def read_text(call, uri):
    response = call("resources/read", {"uri": uri})
    assert "error" not in response, response
    return response["result"]["contents"][0]["text"]


def test_counter_resource_reflects_current_value(call, call_tool):
    assert read_text(call, "mcp://resource/counter") == "Current counter value: 0"
    call_tool("add_to_counter", {"amount": 12})
    assert read_text(call, "mcp://resource/counter") == "Current counter value: 12"


def test_messages_resource_is_full_log_in_call_order(call, call_tool, fixed_iso):
    call_tool("add_to_counter", {"amount": 1})
    call_tool("get_message_count")
    call_tool("send_message", {"message": "hi"})
    call_tool("get_time")
    call_tool("reset_counter")

    assert read_text(call, "mcp://resource/messages") == "\n".join(
        [
            "Added 1: 0 → 1",
            f"[{fixed_iso}] hi",
            f"Time requested: {fixed_iso}",
            "Counter reset to 0",
        ]
    )


def test_messages_resource_empty(call):
    assert read_text(call, "mcp://resource/messages") == ""


def test_read_echoes_requested_uri_and_mime_type(call):
    response = call("resources/read", {"uri": "mcp://resource/counter"})
    content = response["result"]["contents"][0]
    assert content["uri"] == "mcp://resource/counter"
    assert content["mimeType"] == "text/plain"


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("mcp://resource/counter", "counter"),
        ("mcp://resource/messages", "messages"),
        ("https://example.com/anything/counter", "counter"),
        ("counter", "counter"),
        ("mcp://resource/messages/", "messages"),
        ("mcp://resource/nothing", None),
        ("", None),
    ],
)
def test_resolve_resource(dispatcher, uri, expected):
    resource = resolve_resource(dispatcher.resources, uri)
    if expected is None:
        assert resource is None
    else:
        assert resource.name == expected
