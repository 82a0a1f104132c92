"""Sessions for the HTTP+SSE transport.

A client opens ``GET /sse`` and receives an ``endpoint`` event naming the URL
to POST its JSON-RPC messages to. Replies to those POSTs are pushed back on
the open stream as ``message`` events.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)


class SseSession:
    def __init__(self, session_id: str):
        self.id = session_id
        self.outbox: asyncio.Queue = asyncio.Queue()

    def send(self, message: Dict[str, Any]) -> None:
        self.outbox.put_nowait(message)


class SseSessionManager:
    def __init__(self, message_path: str = "/sse/message"):
        self.message_path = message_path
        self._sessions: Dict[str, SseSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self) -> SseSession:
        session = SseSession(uuid.uuid4().hex)
        self._sessions[session.id] = session
        logger.info("SSE session %s opened (%d active)", session.id, len(self._sessions))
        return session

    def get(self, session_id: str) -> Optional[SseSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("SSE session %s closed (%d active)", session_id, len(self._sessions))

    def endpoint_for(self, session: SseSession) -> str:
        return f"{self.message_path}?sessionId={session.id}"

    async def events(self, session: SseSession) -> AsyncIterator[Dict[str, str]]:
        """Event source for one session; runs until the client disconnects."""
        try:
            yield {"event": "endpoint", "data": self.endpoint_for(session)}
            while True:
                message = await session.outbox.get()
                yield {"event": "message", "data": json.dumps(message, ensure_ascii=False)}
        finally:
            self.close(session.id)
