# client -> server
JOIN_ROOM = "join-room"
CHAT_MESSAGE = "chat-message" # also server -> client
MUTE_STATUS = "mute-status" # also server -> client
CAMERA_STATUS = "camera-status" # also server -> client

# target-addressed, both directions
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"

# server -> client
USER_CONNECTED = "user-connected"
USER_DISCONNECTED = "user-disconnected"

TARGETED_EVENTS = (OFFER, ANSWER, ICE_CANDIDATE)

# Frame shape on the wire: {"event": "<name>", "args": [...]}
# Inbound arity per event (positional args):
# - join-room: room_id, display_name
# - offer / answer / ice-candidate: payload, target_id
# - chat-message: text
# - mute-status / camera-status: flag
