import time


def wait_for_room(client, room_id, count, timeout=2.0):
    """Poll room details until the room has `count` participants; return them."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        response = client.get(f"/rooms/{room_id}")
        if count == 0 and response.status_code == 404:
            return []
        if response.status_code == 200 and response.json()["participant_count"] == count:
            return response.json()["participants"]
        time.sleep(0.01)
    raise AssertionError(f"room {room_id} never reached {count} participants")


def ids_by_name(participants):
    return {p["display_name"]: p["connection_id"] for p in participants}


def frame(event, *args):
    return {"event": event, "args": list(args)}
