"""WebSocket router: one broadcast channel shared by every client."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.ConnectionManager import connection_manager

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def realtime_socket(ws: WebSocket):
    """
    Register the socket and keep it open until the client leaves.
    Clients only listen; a text frame "ping" is answered with a pong event
    and anything else is ignored.
    """
    session_id = await connection_manager.connect(ws)
    try:
        while True:
            data = await ws.receive_text()
            if data.strip().lower() == "ping":
                await connection_manager.send(session_id, "pong")
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.warning("Realtime WS error for %s: %s", session_id, exc)
    finally:
        connection_manager.disconnect(session_id)
