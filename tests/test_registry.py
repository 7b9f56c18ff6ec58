from backend import Participant


def test_register_uses_default_flags(fresh_registry):
    participant, created = fresh_registry.register("c1", "room", "Alice")

    assert created
    assert participant == fresh_registry.get("c1")
    assert participant.room_id == "room"
    assert participant.display_name == "Alice"
    assert participant.is_muted is False
    assert participant.is_camera_on is True


def test_blank_or_missing_display_name_becomes_guest(fresh_registry):
    fresh_registry.register("c1", "room", "")
    fresh_registry.register("c2", "room", None)
    fresh_registry.register("c3", "room", "   ")

    assert {fresh_registry.get(c).display_name for c in ("c1", "c2", "c3")} == {"Guest"}


def test_register_twice_keeps_original_membership(fresh_registry):
    fresh_registry.register("c1", "room-a", "Alice")
    fresh_registry.set_muted("c1", True)

    participant, created = fresh_registry.register("c1", "room-b", "Other")

    assert not created
    assert participant.room_id == "room-a"
    assert participant.is_muted is True
    assert fresh_registry.room_members("room-a") == {"c1"}
    assert fresh_registry.room_members("room-b") == set()
    assert len(fresh_registry) == 1


def test_get_unknown_connection(fresh_registry):
    assert fresh_registry.get("missing") is None
    assert "missing" not in fresh_registry


def test_flag_updates(fresh_registry):
    fresh_registry.register("c1", "room", "Alice")

    fresh_registry.set_muted("c1", True)
    fresh_registry.set_camera_on("c1", False)

    participant = fresh_registry.get("c1")
    assert participant.is_muted is True
    assert participant.is_camera_on is False


def test_flag_updates_on_unknown_connection_are_noops(fresh_registry):
    assert fresh_registry.set_muted("ghost", True) is None
    assert fresh_registry.set_camera_on("ghost", False) is None
    assert "ghost" not in fresh_registry
    assert len(fresh_registry) == 0


def test_remove_drops_record_and_flags(fresh_registry):
    fresh_registry.register("c1", "room", "Alice")
    fresh_registry.set_muted("c1", True)

    removed = fresh_registry.remove("c1")

    assert isinstance(removed, Participant)
    assert removed.is_muted is True
    assert fresh_registry.get("c1") is None
    assert fresh_registry.room_members("room") == set()
    assert fresh_registry.remove("c1") is None


def test_room_members_tracks_joins_and_removals(fresh_registry):
    fresh_registry.register("a", "x", "A")
    fresh_registry.register("b", "x", "B")
    fresh_registry.register("c", "y", "C")
    fresh_registry.register("d", "x", "D")
    fresh_registry.remove("b")

    assert fresh_registry.room_members("x") == {"a", "d"}
    assert fresh_registry.room_members("y") == {"c"}
    assert fresh_registry.room_members("z") == set()
    assert fresh_registry.rooms() == {"x": 2, "y": 1}


def test_room_participants_and_clear(fresh_registry):
    fresh_registry.register("a", "x", "A")
    fresh_registry.register("b", "x", "B")

    assert {p.connection_id for p in fresh_registry.room_participants("x")} == {"a", "b"}

    fresh_registry.clear()
    assert fresh_registry.rooms() == {}
