import asyncio
import uuid
from typing import Dict, Iterable, List, Optional

from fastapi import WebSocket

from logging_config import get_logger
from signaling import Delivery

logger = get_logger(__name__)


class ConnectionManager:
    """Channel layer: one open WebSocket per connection id."""

    def __init__(self):
        # Format: {connection_id: websocket}
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = str(uuid.uuid4())
        self.active_connections[connection_id] = websocket
        logger.debug(f"Accepted connection {connection_id} (active: {len(self.active_connections)})")
        return connection_id

    def disconnect(self, connection_id: str):
        if self.active_connections.pop(connection_id, None) is not None:
            logger.debug(f"Dropped connection {connection_id} (active: {len(self.active_connections)})")

    def get(self, connection_id: str) -> Optional[WebSocket]:
        return self.active_connections.get(connection_id)

    async def _send_all(self, websocket: WebSocket, deliveries: List[Delivery]):
        # frames for one target keep their order
        for delivery in deliveries:
            await websocket.send_json({"event": delivery.event, "args": list(delivery.args)})

    async def deliver(self, deliveries: Iterable[Delivery]):
        """Write deliveries to their targets concurrently.

        A failed or stalled target does not hold back the others.
        """
        by_target: Dict[str, List[Delivery]] = {}
        for delivery in deliveries:
            by_target.setdefault(delivery.target, []).append(delivery)

        targets = []
        send_tasks = []
        for target, frames in by_target.items():
            websocket = self.get(target)
            if websocket is None:
                logger.debug(f"Skipping {len(frames)} frame(s) to {target}: connection gone")
                continue
            targets.append(target)
            send_tasks.append(self._send_all(websocket, frames))

        if not send_tasks:
            return
        results = await asyncio.gather(*send_tasks, return_exceptions=True)
        for target, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning(f"Error sending to connection {target}: {result}")


connection_manager = ConnectionManager()
