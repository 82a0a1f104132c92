"""JSON-RPC dispatch for the MCP methods this server speaks.

Every transport funnels messages through ``Dispatcher.handle_raw`` (or
``dispatch`` when it already holds a decoded object) and writes back whatever
comes out. ``None`` means the message was a notification and gets no reply.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Annotated, Any, Callable, Dict, Literal, Optional, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationError

from simple_mcp import __version__
from simple_mcp.errors import (
    InternalError,
    InvalidParams,
    InvalidRequest,
    McpError,
    MethodNotFound,
    ParseError,
)
from simple_mcp.log import log_event
from simple_mcp.resources import ResourceDescriptor, build_resource_registry, resolve_resource
from simple_mcp.state import StateStore
from simple_mcp.tools import Clock, ToolDescriptor, build_tool_registry, utc_now

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"
SERVER_NAME = "Simple FastMCP Server"

RequestId = Union[int, float, str, None]


class JsonRpcRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"]
    id: Union[StrictInt, Annotated[StrictFloat, AllowInfNan(False)], StrictStr, None] = None
    method: StrictStr
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set or self.id is None


def _echoable_id(raw: Any) -> RequestId:
    """The id to put on an error reply when the request itself failed validation."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, float) and not math.isfinite(raw):
        return None
    if isinstance(raw, (int, float, str)):
        return raw
    return None


def success(request_id: RequestId, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def failure(request_id: RequestId, error: McpError) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": error.to_dict()}


class Dispatcher:
    """Owns the state store and both registries, and answers JSON-RPC messages."""

    def __init__(
        self,
        store: Optional[StateStore] = None,
        clock: Clock = utc_now,
        log_payloads: bool = True,
    ):
        self.store = store if store is not None else StateStore()
        self.tools: Dict[str, ToolDescriptor] = build_tool_registry(self.store, clock)
        self.resources: Dict[str, ResourceDescriptor] = build_resource_registry(self.store)
        self.log_payloads = log_payloads
        self._methods: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "initialize": self.initialize,
            "ping": self.ping,
            "tools/list": self.list_tools,
            "tools/call": self.call_tool,
            "resources/list": self.list_resources,
            "resources/templates/list": self.list_resource_templates,
            "resources/read": self.read_resource,
        }

    # -- entry points ---------------------------------------------------------

    def handle_raw(self, body: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        try:
            message = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log_event(logger, "parse_error", logging.WARNING, error=str(e))
            return failure(None, ParseError("Parse error"))
        return self.dispatch(message)

    def dispatch(self, message: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(message, dict):
            return failure(None, InvalidRequest("Invalid Request: expected a JSON-RPC request object"))

        request_id = _echoable_id(message.get("id"))
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as e:
            log_event(logger, "invalid_request", logging.WARNING, id=request_id, error=str(e))
            return failure(request_id, InvalidRequest("Invalid Request"))

        if request.is_notification:
            log_event(logger, "notification", method=request.method)
            return None

        fields: Dict[str, Any] = {"method": request.method, "id": request.id}
        if self.log_payloads:
            fields["params"] = request.params
        log_event(logger, "request_start", **fields)

        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise MethodNotFound(f"Method not found: {request.method}")
            result = handler(request.params or {})
        except McpError as e:
            log_event(
                logger,
                "request_error",
                logging.WARNING,
                method=request.method,
                id=request.id,
                code=e.code,
                message=e.message,
            )
            return failure(request.id, e)
        except Exception as e:
            logger.exception("Unhandled error in %s", request.method)
            return failure(request.id, InternalError(f"Internal error: {e}"))

        log_event(logger, "request_success", method=request.method, id=request.id)
        return success(request.id, result)

    # -- methods --------------------------------------------------------------

    def initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client = params.get("clientInfo")
        if not isinstance(client, dict):
            client = {}
        logger.info(
            "Client %s %s requested protocol %s",
            client.get("name", "unknown"),
            client.get("version", ""),
            params.get("protocolVersion"),
        )
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    def list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [tool.describe() for tool in self.tools.values()]}

    def call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParams("Invalid params: 'name' must be a string")
        tool = self.tools.get(name)
        if tool is None:
            raise MethodNotFound(f"Tool not found: {name}")

        args = tool.validate(params.get("arguments"))
        try:
            return tool.handler(args)
        except McpError:
            raise
        except Exception as e:
            logger.exception("Tool %s failed", name)
            raise InternalError(f"Error executing tool {name}: {e}") from e

    def list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"resources": [resource.describe() for resource in self.resources.values()]}

    def list_resource_templates(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"resourceTemplates": []}

    def read_resource(self, params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str):
            raise InvalidParams("Invalid params: 'uri' must be a string")
        resource = resolve_resource(self.resources, uri)
        if resource is None:
            raise MethodNotFound(f"Resource not found: {uri}")
        try:
            return resource.read(uri)
        except Exception as e:
            logger.exception("Resource %s failed", resource.name)
            raise InternalError(f"Error reading resource {uri}: {e}") from e
