"""Starlette application: Streamable HTTP, HTTP+SSE, health and info routes."""

from __future__ import annotations

import logging
from typing import Optional

from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route
from starlette.types import ASGIApp, Receive, Scope, Send

from simple_mcp.dispatcher import Dispatcher
from simple_mcp.sse import SseSessionManager
from simple_mcp.tools import format_number, iso_timestamp, utc_now

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"
SSE_PATH = "/sse"
SSE_MESSAGE_PATH = "/sse/message"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Mcp-Session-Id",
}


def _dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


async def mcp_endpoint(request: Request) -> Response:
    body = await request.body()
    reply = _dispatcher(request).handle_raw(body)
    if reply is None:
        return Response(status_code=202, headers=CORS_HEADERS)
    return JSONResponse(reply, headers=CORS_HEADERS)


async def sse_endpoint(request: Request) -> Response:
    sessions: SseSessionManager = request.app.state.sse_sessions
    session = sessions.open()
    return EventSourceResponse(sessions.events(session), headers=CORS_HEADERS)


async def sse_message_endpoint(request: Request) -> Response:
    sessions: SseSessionManager = request.app.state.sse_sessions
    session_id = request.query_params.get("sessionId")
    if not session_id:
        return PlainTextResponse("Missing sessionId", status_code=400, headers=CORS_HEADERS)
    session = sessions.get(session_id)
    if session is None:
        return PlainTextResponse("Session not found", status_code=404, headers=CORS_HEADERS)

    body = await request.body()
    reply = _dispatcher(request).handle_raw(body)
    if reply is not None:
        session.send(reply)
    return PlainTextResponse("Accepted", status_code=202, headers=CORS_HEADERS)


async def health(request: Request) -> Response:
    state = _dispatcher(request).store.read()
    return JSONResponse(
        {
            "status": "ok",
            "timestamp": iso_timestamp(utc_now()),
            "transport": {"sse": SSE_PATH, "streamable_http": MCP_PATH},
            "state": {"counter": state.counter, "messageCount": len(state.messages)},
        },
        headers=CORS_HEADERS,
    )


async def index(request: Request) -> Response:
    dispatcher = _dispatcher(request)
    state = dispatcher.store.read()
    lines = [
        "# Simple FastMCP Server",
        "",
        "## Endpoints",
        "",
        f"- `{SSE_PATH}` - Server-Sent Events transport",
        f"- `{MCP_PATH}` - Streamable HTTP transport",
        "- `/health` - Health check",
        "",
        "## Tools Available",
        "",
    ]
    for i, tool in enumerate(dispatcher.tools.values(), 1):
        lines.append(f"{i}. **{tool.name}** - {tool.description}")
    lines += ["", "## Resources Available", ""]
    for i, resource in enumerate(dispatcher.resources.values(), 1):
        lines.append(f"{i}. **{resource.name}** ({resource.uri}) - {resource.description}")
    lines += [
        "",
        "## Current State",
        "",
        f"- Counter: {format_number(state.counter)}",
        f"- Messages stored: {len(state.messages)}",
        "",
        "## Usage",
        "",
        "Connect your MCP client to one of the transport endpoints above.",
        "",
    ]
    return PlainTextResponse("\n".join(lines), headers=CORS_HEADERS)


class PreflightMiddleware:
    """Answers OPTIONS on any path, known or not, as a CORS preflight."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers=CORS_HEADERS)
            await response(scope, receive, send)
            return
        await self.app(scope, receive, send)


async def not_found(request: Request, exc: HTTPException) -> Response:
    return PlainTextResponse("Not found", status_code=404, headers=CORS_HEADERS)


def create_app(dispatcher: Optional[Dispatcher] = None) -> Starlette:
    routes = [
        Route("/", index, methods=["GET"]),
        Route("/health", health, methods=["GET"]),
        Route(MCP_PATH, mcp_endpoint, methods=["POST"]),
        Route(MCP_PATH + "/", mcp_endpoint, methods=["POST"]),
        Route(SSE_PATH, sse_endpoint, methods=["GET"]),
        Route(SSE_MESSAGE_PATH, sse_message_endpoint, methods=["POST"]),
    ]
    app = Starlette(
        routes=routes,
        middleware=[Middleware(PreflightMiddleware)],
        exception_handlers={404: not_found},
    )
    app.state.dispatcher = dispatcher if dispatcher is not None else Dispatcher()
    app.state.sse_sessions = SseSessionManager(SSE_MESSAGE_PATH)
    return app
