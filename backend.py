from enum import Enum
from typing import Dict, List, Optional, Tuple

from connections import Connection
from logging_config import get_logger
from schemas.rooms import RoomSnapshot, RoomSummary

logger = get_logger(__name__)


class CommandResult(str, Enum):
    """Outcome of a client event. Anything but APPLIED means no state change and no broadcast."""
    APPLIED = "applied"
    NOT_HOST = "not_host"
    NO_ROOM = "no_room"
    INVALID_PAYLOAD = "invalid_payload"

    @property
    def applied(self) -> bool:
        return self is CommandResult.APPLIED


class Room:
    """Playback state and membership of one named room.

    Transport mutations are guarded: only the connection whose id equals
    host_id may change video_ref, playing or position_seconds.
    """

    def __init__(self, name: str, host_id: str):
        self.name = name
        self.video_ref: Optional[str] = None
        self.playing = False
        self.position_seconds = 0.0
        self.host_id = host_id
        # connection id -> Connection, in join order
        self.members: Dict[str, Connection] = {}

    def __repr__(self):
        return f"Room(name={self.name!r}, host_id={self.host_id!r}, members={len(self.members)})"

    def __len__(self):
        return len(self.members)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.members

    @property
    def member_ids(self) -> List[str]:
        return list(self.members)

    def add_member(self, connection: Connection):
        self.members[connection.id] = connection

    def remove_member(self, connection_id: str) -> bool:
        return self.members.pop(connection_id, None) is not None

    def is_host(self, connection_id: str) -> bool:
        return connection_id == self.host_id

    def set_host(self, connection_id: str):
        logger.info(f"Host for room '{self.name}' is now {connection_id} (was {self.host_id})")
        self.host_id = connection_id

    def successor(self) -> Optional[str]:
        """Earliest-joined member still present, or None when the room is empty."""
        return next(iter(self.members), None)

    def _guard(self, sender_id: str) -> CommandResult:
        if not self.is_host(sender_id):
            return CommandResult.NOT_HOST
        return CommandResult.APPLIED

    def set_video(self, sender_id: str, video_ref: Optional[str]) -> CommandResult:
        result = self._guard(sender_id)
        if result.applied:
            self.video_ref = video_ref
            self.playing = False
            self.position_seconds = 0.0
        return result

    def play(self, sender_id: str, position_seconds: float) -> CommandResult:
        result = self._guard(sender_id)
        if result.applied:
            self.playing = True
            self.position_seconds = position_seconds
        return result

    def pause(self, sender_id: str, position_seconds: float) -> CommandResult:
        result = self._guard(sender_id)
        if result.applied:
            self.playing = False
            self.position_seconds = position_seconds
        return result

    def seek(self, sender_id: str, position_seconds: float) -> CommandResult:
        result = self._guard(sender_id)
        if result.applied:
            self.position_seconds = position_seconds
        return result

    def reset_playback(self):
        self.video_ref = None
        self.playing = False
        self.position_seconds = 0.0

    def snapshot(self) -> RoomSnapshot:
        return RoomSnapshot(
            video_ref=self.video_ref,
            playing=self.playing,
            position_seconds=self.position_seconds,
            host_id=self.host_id,
        )

    def summary(self) -> RoomSummary:
        return RoomSummary(
            name=self.name,
            member_count=len(self.members),
            **self.snapshot().model_dump(),
        )


class RoomRegistry:
    """Process-scoped mapping of room name to Room.

    A room is present exactly while it has members: created on first join,
    deleted by the caller when its last member leaves.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        logger.info("Initializing in-memory RoomRegistry")

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_name: str) -> bool:
        return room_name in self._rooms

    def get(self, room_name: str) -> Optional[Room]:
        return self._rooms.get(room_name)

    def get_or_create(self, room_name: str, host_id: str) -> Tuple[Room, bool]:
        room = self._rooms.get(room_name)
        if room is not None:
            return room, False
        room = Room(room_name, host_id)
        self._rooms[room_name] = room
        logger.info(f"Creating new room '{room_name}' with host {host_id}")
        return room, True

    def delete(self, room_name: str) -> bool:
        deleted = self._rooms.pop(room_name, None) is not None
        if deleted:
            logger.info(f"Room '{room_name}' is empty, deleting state")
        return deleted

    def names(self) -> List[str]:
        return list(self._rooms)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())
