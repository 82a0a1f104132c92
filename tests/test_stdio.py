"""Tests for the newline-delimited stdio transport."""

import io
import json

from simple_mcp.errors import PARSE_ERROR
from simple_mcp.stdio import serve_stdio


def run(dispatcher, *lines):
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    serve_stdio(dispatcher, stdin=stdin, stdout=stdout)
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


def test_one_reply_per_request_line(dispatcher):
    replies = run(
        dispatcher,
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}),
        json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
        "",
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/call",
                    "params": {"name": "add_to_counter", "arguments": {"amount": 5}}}),
        json.dumps({"jsonrpc": "2.0", "id": 3, "method": "resources/read",
                    "params": {"uri": "mcp://resource/counter"}}),
    )
    assert [r["id"] for r in replies] == [1, 2, 3]
    assert replies[1]["result"]["content"][0]["text"] == "Successfully added 5 to counter. New value: 5"
    assert replies[2]["result"]["contents"][0]["text"] == "Current counter value: 5"


def test_garbage_line_gets_parse_error_and_loop_continues(dispatcher):
    replies = run(
        dispatcher,
        "this is not json",
        json.dumps({"jsonrpc": "2.0", "id": 8, "method": "ping"}),
    )
    assert replies[0]["error"]["code"] == PARSE_ERROR
    assert replies[1] == {"jsonrpc": "2.0", "id": 8, "result": {}}


def test_non_ascii_survives_round_trip(dispatcher):
    replies = run(
        dispatcher,
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/call",
                    "params": {"name": "add_to_counter", "arguments": {"amount": 1}}}),
        json.dumps({"jsonrpc": "2.0", "id": 2, "method": "resources/read",
                    "params": {"uri": "mcp://resource/messages"}}),
    )
    assert replies[1]["result"]["contents"][0]["text"] == "Added 1: 0 → 1"


def test_invalid_utf8_line_gets_parse_error_and_loop_continues(dispatcher):
    ping = json.dumps({"jsonrpc": "2.0", "id": 2, "method": "ping"}).encode()
    stdin = io.BytesIO(b"\xff\xfe garbage\n" + ping + b"\n")
    stdout = io.StringIO()
    serve_stdio(dispatcher, stdin=stdin, stdout=stdout)

    replies = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert replies[0]["error"]["code"] == PARSE_ERROR
    assert replies[0]["id"] is None
    assert replies[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


def test_malformed_initialize_does_not_stop_the_loop(dispatcher):
    replies = run(
        dispatcher,
        json.dumps({"jsonrpc": "2.0", "id": 7, "method": "initialize", "params": {"clientInfo": "x"}}),
        json.dumps({"jsonrpc": "2.0", "id": 8, "method": "ping"}),
    )
    assert replies[0]["id"] == 7
    assert "result" in replies[0]
    assert replies[1] == {"jsonrpc": "2.0", "id": 8, "result": {}}
