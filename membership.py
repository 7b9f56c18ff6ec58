from typing import List

from backend import ConnectionRegistry
from events import CAMERA_STATUS, JOIN_ROOM, MUTE_STATUS, USER_CONNECTED, USER_DISCONNECTED
from logging_config import get_logger
from signaling import Delivery, MalformedEventError, check_arity, require_str

logger = get_logger(__name__)


class RoomMembership:
    """Join and disconnect handling for a connection.

    Connected (unregistered) -> Joined -> Disconnected. Disconnected is
    terminal; the channel layer stops feeding events once it is reached.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def join(self, connection_id: str, args) -> List[Delivery]:
        args = list(args)
        # display name may be omitted entirely
        if len(args) == 1:
            args.append(None)
        check_arity(JOIN_ROOM, args, 2)
        room_id, display_name = args
        require_str(JOIN_ROOM, "room id", room_id)
        if not room_id:
            raise MalformedEventError(f"{JOIN_ROOM}: room id must not be empty")

        participant, created = self.registry.register(connection_id, room_id, display_name)
        if not created:
            logger.warning(f"Ignoring repeated join from {connection_id}, already in room {participant.room_id}")
            return []
        logger.info(f"{participant.display_name} ({connection_id}) joined room {room_id}")

        others = [p for p in self.registry.room_participants(room_id) if p.connection_id != connection_id]

        # announce the registered name: stripped, or "Guest" when blank
        deliveries = [
            Delivery(other.connection_id, USER_CONNECTED, (connection_id, participant.display_name))
            for other in others
        ]
        # Snapshot of every existing participant's current flags for the newcomer
        for other in others:
            deliveries.append(Delivery(connection_id, MUTE_STATUS, (other.connection_id, other.is_muted)))
            deliveries.append(Delivery(connection_id, CAMERA_STATUS, (other.connection_id, other.is_camera_on)))
        return deliveries

    def disconnect(self, connection_id: str) -> List[Delivery]:
        participant = self.registry.get(connection_id)
        if participant is None:
            logger.debug(f"Connection {connection_id} closed before joining a room")
            return []

        others = self.registry.room_members(participant.room_id) - {connection_id}
        self.registry.remove(connection_id)
        logger.info(f"{participant.display_name} ({connection_id}) left room {participant.room_id}")
        return [Delivery(member, USER_DISCONNECTED, (connection_id,)) for member in others]
