from typing import Any, List, NamedTuple, Tuple

from backend import ConnectionRegistry
from events import ANSWER, CAMERA_STATUS, CHAT_MESSAGE, ICE_CANDIDATE, MUTE_STATUS, OFFER
from logging_config import get_logger

logger = get_logger(__name__)


class MalformedEventError(ValueError):
    """An inbound event that cannot be routed: unknown name, wrong arity or argument type."""


class Delivery(NamedTuple):
    """One outbound frame for one connection."""
    target: str
    event: str
    args: Tuple[Any, ...]


def check_arity(event: str, args, expected: int):
    if len(args) != expected:
        raise MalformedEventError(f"{event} expects {expected} argument(s), got {len(args)}")


def require_str(event: str, name: str, value):
    if not isinstance(value, str):
        raise MalformedEventError(f"{event}: {name} must be a string")


def require_bool(event: str, name: str, value):
    if not isinstance(value, bool):
        raise MalformedEventError(f"{event}: {name} must be a boolean")


class SignalingRouter:
    """Resolves the targets of inbound events and shapes the forwarded frames.

    Routing never suspends: each call reads/updates the registry and returns
    the deliveries to write, so one event is handled to completion before the
    next one touches the registry.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._handlers = {
            OFFER: self._offer,
            ANSWER: self._answer,
            ICE_CANDIDATE: self._ice_candidate,
            CHAT_MESSAGE: self._chat_message,
            MUTE_STATUS: self._mute_status,
            CAMERA_STATUS: self._camera_status,
        }

    def handles(self, event: str) -> bool:
        return event in self._handlers

    def route(self, sender_id: str, event: str, args) -> List[Delivery]:
        handler = self._handlers.get(event)
        if handler is None:
            raise MalformedEventError(f"Unknown event: {event!r}")
        return handler(sender_id, list(args))

    def _targeted(self, sender_id: str, event: str, args, include_name: bool = False) -> List[Delivery]:
        check_arity(event, args, 2)
        payload, target_id = args
        require_str(event, "target id", target_id)

        sender = self.registry.get(sender_id)
        if sender is None:
            logger.debug(f"Dropping {event} from unregistered connection {sender_id}")
            return []
        if target_id == sender_id:
            logger.debug(f"Dropping {event} addressed by {sender_id} to itself")
            return []
        if target_id not in self.registry:
            logger.debug(f"Dropping {event} from {sender_id}: unknown target {target_id}")
            return []

        forwarded = (payload, sender_id, sender.display_name) if include_name else (payload, sender_id)
        logger.debug(f"Relaying {event} from {sender_id} to {target_id}")
        return [Delivery(target_id, event, forwarded)]

    def _offer(self, sender_id, args):
        # target has not heard of the sender yet, so the offer carries its name
        return self._targeted(sender_id, OFFER, args, include_name=True)

    def _answer(self, sender_id, args):
        return self._targeted(sender_id, ANSWER, args)

    def _ice_candidate(self, sender_id, args):
        return self._targeted(sender_id, ICE_CANDIDATE, args)

    def _chat_message(self, sender_id, args):
        check_arity(CHAT_MESSAGE, args, 1)
        text = args[0]
        require_str(CHAT_MESSAGE, "text", text)

        sender = self.registry.get(sender_id)
        if sender is None:
            logger.debug(f"Dropping chat message from unregistered connection {sender_id}")
            return []

        members = self.registry.room_members(sender.room_id)
        logger.debug(f"Broadcasting chat message from {sender_id} to {len(members)} members of room {sender.room_id}")
        return [Delivery(member, CHAT_MESSAGE, (text, sender.display_name)) for member in members]

    def _flag_change(self, sender_id, event, args, update) -> List[Delivery]:
        check_arity(event, args, 1)
        value = args[0]
        require_bool(event, "flag", value)

        sender = update(sender_id, value)
        if sender is None:
            logger.debug(f"Dropping {event} from unregistered connection {sender_id}")
            return []

        others = self.registry.room_members(sender.room_id) - {sender_id}
        logger.debug(f"{event} for {sender_id} set to {value}, notifying {len(others)} members")
        return [Delivery(member, event, (sender_id, value)) for member in others]

    def _mute_status(self, sender_id, args):
        return self._flag_change(sender_id, MUTE_STATUS, args, self.registry.set_muted)

    def _camera_status(self, sender_id, args):
        return self._flag_change(sender_id, CAMERA_STATUS, args, self.registry.set_camera_on)
