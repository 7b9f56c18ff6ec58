import os
from typing import List

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from backend import registry
from connections import connection_manager
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATIC_DIR
from events import JOIN_ROOM
from logging_config import get_logger, setup_logging
from membership import RoomMembership
from routers.rooms import rooms_router
from schemas.frames import ChannelFrame
from signaling import Delivery, MalformedEventError, SignalingRouter

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI(title="Room signaling relay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

signaling_router = SignalingRouter(registry)
membership = RoomMembership(registry)

logger.info("FastAPI application initialized")


def handle_frame(connection_id: str, data: str) -> List[Delivery]:
    """Decode one inbound frame and return the deliveries it produces.

    Malformed frames fail on their own; the connection stays open.
    """
    try:
        frame = ChannelFrame.model_validate_json(data)
    except ValidationError as e:
        logger.warning(f"Dropping malformed frame from connection {connection_id}: {e.error_count()} error(s)")
        return []

    try:
        # one event resolves and mutates the registry as a single step
        with registry.lock:
            if frame.event == JOIN_ROOM:
                return membership.join(connection_id, frame.args)
            if signaling_router.handles(frame.event):
                return signaling_router.route(connection_id, frame.event, frame.args)
    except MalformedEventError as e:
        logger.warning(f"Dropping event from connection {connection_id}: {e}")
        return []

    logger.warning(f"Dropping unknown event {frame.event!r} from connection {connection_id}")
    return []


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket channel for one participant connection.

    Frames are JSON text objects: {"event": "<name>", "args": [...]}.
    Binary frames are dropped.
    """
    connection_id = await connection_manager.connect(websocket)
    logger.info(f"WebSocket connection accepted: {connection_id}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected for connection {connection_id}")
                break

            data = message.get("text")
            if data is None:
                logger.warning(f"Dropping non-text frame from connection {connection_id}")
                continue

            try:
                await connection_manager.deliver(handle_frame(connection_id, data))
            except Exception as e:
                logger.error(f"Error handling frame from connection {connection_id}: {e}", exc_info=True)
    finally:
        # Cleanup on disconnect: the socket is gone, the rest of the room is told
        connection_manager.disconnect(connection_id)
        with registry.lock:
            deliveries = membership.disconnect(connection_id)
        await connection_manager.deliver(deliveries)


# Mounted last so API and WebSocket routes take precedence
if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
    logger.info(f"Serving static files from {STATIC_DIR}")
