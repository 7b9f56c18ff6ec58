"""
Client-side ownership of per-peer handshake sessions.

A participant keeps one session per remote connection id. The session itself
(media negotiation, tracks, rendering) is supplied by the caller through a
factory; this module only decides when sessions are opened, fed and torn down
in response to relay events, and which relay events go back out.
"""
from typing import Any, Callable, Dict, List, Optional, Protocol

from events import (
    ANSWER,
    CAMERA_STATUS,
    ICE_CANDIDATE,
    MUTE_STATUS,
    OFFER,
    USER_CONNECTED,
    USER_DISCONNECTED,
)
from logging_config import get_logger

logger = get_logger(__name__)


class PeerSession(Protocol):
    def produce_offer(self) -> Any: ...

    def produce_answer(self, remote_offer: Any) -> Any: ...

    def apply_remote_answer(self, answer: Any) -> None: ...

    def apply_remote_candidate(self, candidate: Any) -> None: ...

    def close(self) -> None: ...


# factory(remote_id, on_local_candidate) -> PeerSession
SessionFactory = Callable[[str, Callable[[Any], None]], PeerSession]
# emit(event, *args) sends one frame to the relay
Emit = Callable[..., None]


class PeerSessions:
    """Explicit map of remote connection id -> PeerSession owned by the local participant."""

    def __init__(self, factory: SessionFactory, emit: Emit):
        self._factory = factory
        self._emit = emit
        self.sessions: Dict[str, PeerSession] = {}
        self.names: Dict[str, str] = {}
        self.muted: Dict[str, bool] = {}
        self.camera_on: Dict[str, bool] = {}
        # candidates that arrived before their session existed
        self._pending: Dict[str, List[Any]] = {}
        self._handlers = {
            USER_CONNECTED: self.on_user_connected,
            OFFER: self.on_offer,
            ANSWER: self.on_answer,
            ICE_CANDIDATE: self.on_ice_candidate,
            MUTE_STATUS: self.on_mute_status,
            CAMERA_STATUS: self.on_camera_status,
            USER_DISCONNECTED: self.on_user_disconnected,
        }

    def handle(self, event: str, args) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"No peer handling for event {event}")
            return
        handler(*args)

    def get(self, remote_id: str) -> Optional[PeerSession]:
        return self.sessions.get(remote_id)

    def _open(self, remote_id: str) -> PeerSession:
        session = self.sessions.get(remote_id)
        if session is None:
            session = self._factory(remote_id, lambda candidate: self._emit(ICE_CANDIDATE, candidate, remote_id))
            self.sessions[remote_id] = session
            logger.debug(f"Opened peer session for {remote_id}")
        for candidate in self._pending.pop(remote_id, []):
            session.apply_remote_candidate(candidate)
        return session

    def on_user_connected(self, remote_id: str, display_name: str):
        self.names[remote_id] = display_name
        session = self._open(remote_id)
        self._emit(OFFER, session.produce_offer(), remote_id)

    def on_offer(self, offer, remote_id: str, display_name: str):
        self.names[remote_id] = display_name
        session = self._open(remote_id)
        self._emit(ANSWER, session.produce_answer(offer), remote_id)

    def on_answer(self, answer, remote_id: str):
        session = self.sessions.get(remote_id)
        if session is None:
            logger.debug(f"Answer from {remote_id} without a session, ignoring")
            return
        session.apply_remote_answer(answer)

    def on_ice_candidate(self, candidate, remote_id: str):
        session = self.sessions.get(remote_id)
        if session is None:
            self._pending.setdefault(remote_id, []).append(candidate)
            return
        session.apply_remote_candidate(candidate)

    def on_mute_status(self, remote_id: str, is_muted: bool):
        self.muted[remote_id] = is_muted

    def on_camera_status(self, remote_id: str, is_on: bool):
        self.camera_on[remote_id] = is_on

    def on_user_disconnected(self, remote_id: str):
        session = self.sessions.pop(remote_id, None)
        for state in (self.names, self.muted, self.camera_on, self._pending):
            state.pop(remote_id, None)
        if session is not None:
            session.close()
            logger.debug(f"Closed peer session for {remote_id}")
