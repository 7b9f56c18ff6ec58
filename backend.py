import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from constants import DEFAULT_DISPLAY_NAME
from logging_config import get_logger

logger = get_logger(__name__)


def resolve_display_name(display_name) -> str:
    if isinstance(display_name, str) and display_name.strip():
        return display_name.strip()
    return DEFAULT_DISPLAY_NAME


@dataclass
class Participant:
    connection_id: str
    room_id: str
    display_name: str = DEFAULT_DISPLAY_NAME
    is_muted: bool = False
    is_camera_on: bool = True
    joined_at: str = field(default_factory=lambda: datetime.now().isoformat())


class ConnectionRegistry:
    """In-memory registry of joined connections.

    Every per-connection field lives on a single Participant record keyed by
    connection id, so removing a connection is one delete. Rooms are not
    stored; they are derived by filtering records on ``room_id``.
    """

    def __init__(self):
        self._participants: Dict[str, Participant] = {}
        self.lock = threading.RLock()
        logger.info("Initializing in-memory connection registry")

    def register(self, connection_id: str, room_id: str, display_name: Optional[str] = None) -> Tuple[Participant, bool]:
        """Add a connection to a room. Returns (participant, created).

        A connection that is already registered keeps its existing record.
        """
        with self.lock:
            existing = self._participants.get(connection_id)
            if existing is not None:
                logger.debug(f"Connection {connection_id} already registered in room {existing.room_id}")
                return existing, False
            participant = Participant(
                connection_id=connection_id,
                room_id=room_id,
                display_name=resolve_display_name(display_name),
            )
            self._participants[connection_id] = participant
            logger.debug(f"Registered connection {connection_id} in room {room_id} as {participant.display_name}")
            return participant, True

    def get(self, connection_id: str) -> Optional[Participant]:
        with self.lock:
            return self._participants.get(connection_id)

    def set_muted(self, connection_id: str, value: bool) -> Optional[Participant]:
        with self.lock:
            participant = self._participants.get(connection_id)
            if participant is not None:
                participant.is_muted = value
            return participant

    def set_camera_on(self, connection_id: str, value: bool) -> Optional[Participant]:
        with self.lock:
            participant = self._participants.get(connection_id)
            if participant is not None:
                participant.is_camera_on = value
            return participant

    def remove(self, connection_id: str) -> Optional[Participant]:
        with self.lock:
            participant = self._participants.pop(connection_id, None)
        if participant is not None:
            logger.debug(f"Removed connection {connection_id} from room {participant.room_id}")
        return participant

    def room_members(self, room_id: str) -> Set[str]:
        """Get all connection IDs in a room."""
        with self.lock:
            return {conn_id for conn_id, p in self._participants.items() if p.room_id == room_id}

    def room_participants(self, room_id: str) -> List[Participant]:
        with self.lock:
            return [p for p in self._participants.values() if p.room_id == room_id]

    def rooms(self) -> Dict[str, int]:
        """Room id -> member count, for every non-empty room."""
        counts: Dict[str, int] = {}
        with self.lock:
            for participant in self._participants.values():
                counts[participant.room_id] = counts.get(participant.room_id, 0) + 1
        return counts

    def clear(self):
        with self.lock:
            self._participants.clear()

    def __len__(self):
        with self.lock:
            return len(self._participants)

    def __contains__(self, connection_id):
        with self.lock:
            return connection_id in self._participants


registry = ConnectionRegistry()
