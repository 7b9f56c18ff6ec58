from pydantic import BaseModel


class ParticipantInfo(BaseModel):
    connection_id: str
    display_name: str
    is_muted: bool
    is_camera_on: bool
    joined_at: str

class RoomSummary(BaseModel):
    room_id: str
    participant_count: int

class ActiveRoomsResponse(BaseModel):
    rooms: list[RoomSummary]

class RoomDetailsResponse(BaseModel):
    room_id: str
    participant_count: int
    participants: list[ParticipantInfo]
