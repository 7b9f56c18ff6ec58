from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request

from backend import registry
from logging_config import get_logger
from schemas.rooms import ActiveRoomsResponse, ParticipantInfo, RoomDetailsResponse, RoomSummary

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=ActiveRoomsResponse)
async def list_rooms():
    """Rooms that currently have at least one joined participant."""
    rooms = registry.rooms()
    logger.debug(f"Active rooms requested: {len(rooms)} rooms")
    return ActiveRoomsResponse(
        rooms=[RoomSummary(room_id=room_id, participant_count=count) for room_id, count in sorted(rooms.items())]
    )


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request = None):
    """
    Get room details including each participant's current flags.

    Returns:
    - room_id: Room identifier as supplied at join
    - participant_count: Number of joined connections
    - participants: connection_id, display_name, is_muted, is_camera_on, joined_at
    """
    client_host = request.client.host if request and request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    participants = registry.room_participants(room_id)
    if not participants:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    participants.sort(key=lambda p: p.joined_at)
    return RoomDetailsResponse(
        room_id=room_id,
        participant_count=len(participants),
        participants=[ParticipantInfo(**asdict(p)) for p in participants],
    )
