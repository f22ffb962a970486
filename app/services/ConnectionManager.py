"""Registry of connected WebSocket sessions and best-effort broadcast.

Sockets carry no identity: every session receives every event. Delivery is
at most once with no acknowledgement, retry or backlog, so a client that
reconnects has to re-fetch state over REST.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict

from fastapi import WebSocket

from app.constants.constants import RealtimeEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        # {session_id: {"ws": WebSocket, "connected_at": datetime}}
        self._connections: Dict[str, Dict[str, Any]] = {}

    async def connect(self, ws: WebSocket) -> str:
        """Accept the socket and register it under a fresh session id."""
        await ws.accept()
        session_id = uuid.uuid4().hex[:12]
        self._connections[session_id] = {"ws": ws, "connected_at": datetime.utcnow()}
        logger.info("Realtime: %s connected (%d total)", session_id, len(self._connections))
        return session_id

    def disconnect(self, session_id: str) -> None:
        if self._connections.pop(session_id, None) is not None:
            logger.info("Realtime: %s disconnected (%d total)", session_id, len(self._connections))

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def send(self, session_id: str, event: str, data: Any = None) -> None:
        info = self._connections.get(session_id)
        if info:
            await info["ws"].send_json({"event": event, "data": data})

    async def broadcast(self, event: RealtimeEvent, data: Any = None) -> int:
        """Send an event to every session and return how many sends succeeded."""
        name = event.value if isinstance(event, RealtimeEvent) else str(event)
        payload = {"event": name, "data": data}
        delivered = 0
        dead = []
        for session_id, info in list(self._connections.items()):
            try:
                await info["ws"].send_json(payload)
                delivered += 1
            except Exception as exc:
                logger.debug("WebSocket send failed for %s: %s", session_id, exc)
                dead.append(session_id)
        for session_id in dead:
            self.disconnect(session_id)
        logger.info("Realtime: broadcast %s to %d session(s)", name, delivered)
        return delivered


connection_manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    """FastAPI dependency returning the process-wide registry."""
    return connection_manager
