"""Read-only resources exposing the server state."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from simple_mcp.state import StateStore
from simple_mcp.tools import format_number


class ResourceDescriptor:
    def __init__(
        self,
        name: str,
        title: str,
        description: str,
        uri: str,
        handler: Callable[[], str],
        mime_type: str = "text/plain",
    ):
        self.name = name
        self.title = title
        self.description = description
        self.uri = uri
        self.mime_type = mime_type
        self.handler = handler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "uri": self.uri,
            "mimeType": self.mime_type,
        }

    def read(self, requested_uri: Optional[str] = None) -> Dict[str, Any]:
        """Compute the contents now. The reply echoes the URI the client asked for."""
        return {
            "contents": [
                {
                    "uri": requested_uri or self.uri,
                    "mimeType": self.mime_type,
                    "text": self.handler(),
                }
            ]
        }


def resolve_resource(registry: Dict[str, ResourceDescriptor], uri: str) -> Optional[ResourceDescriptor]:
    """Find the resource for ``uri``: exact URI match first, then trailing path segment."""
    for resource in registry.values():
        if resource.uri == uri:
            return resource
    segment = uri.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return registry.get(segment)


def build_resource_registry(store: StateStore) -> Dict[str, ResourceDescriptor]:
    def counter_text() -> str:
        return f"Current counter value: {format_number(store.read().counter)}"

    def messages_text() -> str:
        return "\n".join(store.read().messages)

    resources = [
        ResourceDescriptor(
            "counter",
            "Counter",
            "Current counter value",
            "mcp://resource/counter",
            counter_text,
        ),
        ResourceDescriptor(
            "messages",
            "Messages",
            "Message history",
            "mcp://resource/messages",
            messages_text,
        ),
    ]
    return {r.name: r for r in resources}
