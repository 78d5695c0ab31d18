"""Tests for the room registry and room state machine."""

import pytest

from backend import CommandResult, Room, RoomRegistry
from connections import Connection


class TestRoomRegistry:
    """Tests for RoomRegistry."""

    def test_get_or_create_creates_with_defaults(self):
        registry = RoomRegistry()
        room, created = registry.get_or_create("movie-night", "h1")
        assert created is True
        assert room.name == "movie-night"
        assert room.video_ref is None
        assert room.playing is False
        assert room.position_seconds == 0
        assert room.host_id == "h1"
        assert "movie-night" in registry
        assert len(registry) == 1

    def test_get_or_create_returns_existing(self):
        registry = RoomRegistry()
        first, _ = registry.get_or_create("r", "h1")
        second, created = registry.get_or_create("r", "other")
        assert created is False
        assert second is first
        assert second.host_id == "h1"

    def test_get_absent_room(self):
        assert RoomRegistry().get("nope") is None

    def test_delete(self):
        registry = RoomRegistry()
        registry.get_or_create("r", "h1")
        assert registry.delete("r") is True
        assert registry.get("r") is None
        assert registry.delete("r") is False

    def test_registries_are_isolated(self):
        a, b = RoomRegistry(), RoomRegistry()
        a.get_or_create("shared-name", "h1")
        assert "shared-name" not in b
        assert b.names() == []


class TestRoomMembership:
    """Tests for Room membership and successor selection."""

    def test_members_keep_join_order(self):
        room = Room("r", "a")
        for cid in ("a", "b", "c"):
            room.add_member(Connection(cid))
        assert room.member_ids == ["a", "b", "c"]
        assert len(room) == 3
        assert "b" in room

    def test_successor_is_earliest_joined_remaining(self):
        room = Room("r", "a")
        for cid in ("a", "b", "c"):
            room.add_member(Connection(cid))
        room.remove_member("a")
        assert room.successor() == "b"

    def test_successor_of_empty_room(self):
        assert Room("r", "a").successor() is None

    def test_remove_unknown_member(self):
        assert Room("r", "a").remove_member("ghost") is False


class TestGuardedCommands:
    """Host-only transport mutations."""

    @pytest.fixture
    def room(self):
        room = Room("r", "host")
        room.add_member(Connection("host"))
        room.add_member(Connection("guest"))
        return room

    def test_set_video_resets_transport(self, room):
        room.play("host", 30.0)
        result = room.set_video("host", "/videos/a.mp4")
        assert result is CommandResult.APPLIED
        assert room.video_ref == "/videos/a.mp4"
        assert room.playing is False
        assert room.position_seconds == 0

    def test_play_pause_seek(self, room):
        assert room.play("host", 12.5).applied
        assert (room.playing, room.position_seconds) == (True, 12.5)
        assert room.seek("host", 40).applied
        assert (room.playing, room.position_seconds) == (True, 40)
        assert room.pause("host", 41.0).applied
        assert (room.playing, room.position_seconds) == (False, 41.0)

    @pytest.mark.parametrize("command,value", [
        ("set_video", "/videos/b.mp4"),
        ("play", 5.0),
        ("pause", 5.0),
        ("seek", 5.0),
    ])
    def test_non_host_is_rejected(self, room, command, value):
        before = room.snapshot()
        result = getattr(room, command)("guest", value)
        assert result is CommandResult.NOT_HOST
        assert not result.applied
        assert room.snapshot() == before

    def test_set_host(self, room):
        room.set_host("guest")
        assert room.is_host("guest")
        assert not room.is_host("host")

    def test_reset_playback(self, room):
        room.set_video("host", "x.mp4")
        room.play("host", 3)
        room.reset_playback()
        assert (room.video_ref, room.playing, room.position_seconds) == (None, False, 0)
        assert room.host_id == "host"


class TestSnapshots:
    """Wire shapes of room snapshots."""

    def test_snapshot_uses_camel_case(self):
        room = Room("r", "h1")
        assert room.snapshot().to_wire() == {
            "videoRef": None,
            "playing": False,
            "positionSeconds": 0.0,
            "hostId": "h1",
        }

    def test_summary_includes_name_and_member_count(self):
        room = Room("r", "h1")
        room.add_member(Connection("h1"))
        wire = room.summary().to_wire()
        assert wire["name"] == "r"
        assert wire["memberCount"] == 1
        assert wire["hostId"] == "h1"
