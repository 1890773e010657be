"""
WebSocket connection manager.
Broadcasts allocation changes to connected clients.
"""
from typing import List
from fastapi import WebSocket
import logging

logger = logging.getLogger("inpatient.websocket")


class ConnectionManager:
    """
    Keeps the active WebSocket connections.

    Dead connections are dropped on the first failed send; a failed
    broadcast never reaches the operation that triggered it.
    """

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"WebSocket connected. Total connections: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"WebSocket disconnected. Total connections: {len(self.active_connections)}")

    async def broadcast(self, message: dict) -> None:
        """
        Sends a message to every connected client.

        Args:
            message: JSON-serializable event with a `type` key
        """
        disconnected: List[WebSocket] = []

        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Error sending message: {e}")
                disconnected.append(connection)

        for conn in disconnected:
            self.disconnect(conn)

    def get_connection_count(self) -> int:
        return len(self.active_connections)


# Global manager instance
manager = ConnectionManager()
