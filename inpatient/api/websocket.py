"""
WebSocket endpoint.
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
import logging

from inpatient.core.websocket_manager import manager

router = APIRouter()
logger = logging.getLogger("inpatient.websocket")


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Real-time change notifications.

    The server pushes `{"type": ...}` events after every committed
    allocation change. Clients may send `{"action": "ping"}` to keep the
    connection alive.
    """
    await manager.connect(websocket)

    try:
        while websocket.client_state == WebSocketState.CONNECTED:
            data = await websocket.receive_json()
            if data.get("action") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)
