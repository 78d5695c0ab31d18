from typing import Any, Callable, Dict, Optional

from backend import CommandResult, Room, RoomRegistry
from broadcaster import BroadcastRouter
from connections import Connection
from logging_config import get_logger
from schemas import events
from schemas.events import parse_position, parse_text
from schemas.rooms import ChatMessage

logger = get_logger(__name__)


class SessionCoordinator:
    """Translates client events into room state changes and fan-out.

    Handlers never await: a mutation and the broadcasts it causes are queued
    on the member connections in one step, so per-room order is arrival order.
    Every handler reports a CommandResult instead of raising.
    """

    def __init__(self, registry: RoomRegistry, broadcaster: Optional[BroadcastRouter] = None):
        self.registry = registry
        self.broadcaster = broadcaster or BroadcastRouter()
        self._handlers: Dict[str, Callable[[Connection, Any], CommandResult]] = {
            events.JOIN: self._on_join,
            events.LEAVE: lambda connection, data: self.leave(connection),
            events.BECOME_HOST: lambda connection, data: self.become_host(connection),
            events.SET_VIDEO: self._on_set_video,
            events.PLAY: self._position_handler(self.play),
            events.PAUSE: self._position_handler(self.pause),
            events.SEEK: self._position_handler(self.seek),
            events.CHAT_MESSAGE: self._on_chat_message,
        }

    # -- dispatch ---------------------------------------------------------

    def dispatch(self, connection: Connection, event_type: str, data: Any = None) -> CommandResult:
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.warning(f"Ignoring unknown event '{event_type}' from connection {connection.id}")
            return CommandResult.INVALID_PAYLOAD
        logger.debug(f"Received {event_type} from connection {connection.id} in room {connection.room!r}")
        return handler(connection, data)

    def _invalid(self, connection: Connection, event_type: str, data: Any) -> CommandResult:
        logger.warning(f"Ignoring {event_type} from connection {connection.id}: malformed payload {data!r}")
        return CommandResult.INVALID_PAYLOAD

    def _on_join(self, connection: Connection, data: Any) -> CommandResult:
        room_name = parse_text(data)
        if room_name is None:
            return self._invalid(connection, events.JOIN, data)
        return self.join(connection, room_name)

    def _on_set_video(self, connection: Connection, data: Any) -> CommandResult:
        video_ref = parse_text(data)
        if video_ref is None:
            return self._invalid(connection, events.SET_VIDEO, data)
        return self.set_video(connection, video_ref)

    def _on_chat_message(self, connection: Connection, data: Any) -> CommandResult:
        text = parse_text(data)
        if text is None:
            return self._invalid(connection, events.CHAT_MESSAGE, data)
        return self.chat_message(connection, text)

    def _position_handler(self, command: Callable[[Connection, float], CommandResult]):
        def handle(connection: Connection, data: Any) -> CommandResult:
            position = parse_position(data)
            if position is None:
                return self._invalid(connection, command.__name__, data)
            return command(connection, position)
        return handle

    # -- lifecycle --------------------------------------------------------

    def connect(self, connection: Connection):
        logger.info(f"User connected: {connection.id}")
        self.broadcaster.send(connection, events.CONNECTED, {"id": connection.id})

    def disconnect(self, connection: Connection) -> CommandResult:
        logger.info(f"User disconnected: {connection.id}")
        return self._leave(connection)

    def leave(self, connection: Connection) -> CommandResult:
        return self._leave(connection)

    def join(self, connection: Connection, room_name: str) -> CommandResult:
        logger.info(f"User {connection.id} trying to join room '{room_name}'")
        # Re-joining the current room keeps membership and host as they are
        room = self._current_room(connection) if connection.room == room_name else None
        if room is None:
            self._leave(connection)
            room, created = self.registry.get_or_create(room_name, connection.id)
            room.add_member(connection)
            connection.room = room_name
            if not created:
                logger.info(f"User {connection.id} joined existing room '{room_name}' ({len(room)} members)")

        snapshot = room.snapshot().to_wire()
        self.broadcaster.send(connection, events.ROOM_STATE, snapshot)
        self.broadcaster.emit(room, events.NEW_HOST, room.host_id)
        return CommandResult.APPLIED

    def _leave(self, connection: Connection) -> CommandResult:
        room = self._current_room(connection)
        connection.room = None
        if room is None:
            return CommandResult.NO_ROOM

        room.remove_member(connection.id)
        logger.info(f"User {connection.id} left room '{room.name}' ({len(room)} remaining)")

        if not room.members:
            self.registry.delete(room.name)
            return CommandResult.APPLIED
        if not room.is_host(connection.id):
            return CommandResult.APPLIED

        # Host left: earliest-joined remaining member takes over, playback resets
        successor = room.successor()
        logger.info(f"Host {connection.id} left room '{room.name}', new host is {successor}")
        room.set_host(successor)
        room.reset_playback()
        self.broadcaster.emit(room, events.NEW_HOST, successor)
        self.broadcaster.emit(room, events.VIDEO_SET, None)
        return CommandResult.APPLIED

    def _current_room(self, connection: Connection) -> Optional[Room]:
        if connection.room is None:
            return None
        room = self.registry.get(connection.room)
        if room is None or connection.id not in room:
            return None
        return room

    # -- host authority and transport commands ----------------------------

    def become_host(self, connection: Connection) -> CommandResult:
        room = self._current_room(connection)
        if room is None:
            return self._dropped(connection, events.BECOME_HOST, CommandResult.NO_ROOM)
        room.set_host(connection.id)
        self.broadcaster.emit(room, events.NEW_HOST, room.host_id)
        return CommandResult.APPLIED

    def set_video(self, connection: Connection, video_ref: str) -> CommandResult:
        room = self._current_room(connection)
        if room is None:
            return self._dropped(connection, events.SET_VIDEO, CommandResult.NO_ROOM)
        result = room.set_video(connection.id, video_ref)
        if not result.applied:
            return self._dropped(connection, events.SET_VIDEO, result)
        logger.info(f"Host {connection.id} set video for room '{room.name}' to: {video_ref}")
        self.broadcaster.emit(room, events.VIDEO_SET, video_ref)
        return result

    def play(self, connection: Connection, position_seconds: float) -> CommandResult:
        return self._transport(connection, events.PLAY, events.PLAYED, Room.play, position_seconds)

    def pause(self, connection: Connection, position_seconds: float) -> CommandResult:
        return self._transport(connection, events.PAUSE, events.PAUSED, Room.pause, position_seconds)

    def seek(self, connection: Connection, position_seconds: float) -> CommandResult:
        return self._transport(connection, events.SEEK, events.SEEKED, Room.seek, position_seconds)

    def _transport(
        self,
        connection: Connection,
        event_type: str,
        notice: str,
        mutate: Callable[[Room, str, float], CommandResult],
        position_seconds: float,
    ) -> CommandResult:
        room = self._current_room(connection)
        if room is None:
            return self._dropped(connection, event_type, CommandResult.NO_ROOM)
        result = mutate(room, connection.id, position_seconds)
        if not result.applied:
            return self._dropped(connection, event_type, result)
        # The sender already applied this locally; only followers are told
        self.broadcaster.emit(room, notice, position_seconds, exclude=connection.id)
        return result

    def _dropped(self, connection: Connection, event_type: str, result: CommandResult) -> CommandResult:
        logger.debug(f"Dropped {event_type} from connection {connection.id}: {result.value}")
        return result

    # -- chat -------------------------------------------------------------

    def chat_message(self, connection: Connection, text: str) -> CommandResult:
        room = self._current_room(connection)
        if room is None:
            return self._dropped(connection, events.CHAT_MESSAGE, CommandResult.NO_ROOM)
        message = ChatMessage(sender_id=connection.id, text=text).to_wire()
        self.broadcaster.emit(room, events.CHAT_MESSAGE, message)
        return CommandResult.APPLIED
