from typing import Any, Optional

from backend import Room
from connections import Connection
from logging_config import get_logger

logger = get_logger(__name__)


class BroadcastRouter:
    """Delivers server events to one connection or to the members of a room."""

    def send(self, connection: Connection, event: str, data: Any = None) -> bool:
        return connection.send(event, data)

    def emit(self, room: Room, event: str, data: Any = None, exclude: Optional[str] = None) -> int:
        """Send to every member of room, skipping the connection id in exclude. Returns recipient count."""
        recipients = 0
        for connection_id, connection in list(room.members.items()):
            if connection_id == exclude:
                continue
            if connection.send(event, data):
                recipients += 1
        logger.debug(f"Broadcast {event} to {recipients} connections in room '{room.name}'")
        return recipients
