import asyncio
import uuid
from typing import Any, List, Optional

from fastapi import WebSocket
from logging_config import get_logger

logger = get_logger(__name__)


class Connection:
    """One client channel.

    Outbound events are queued without blocking and written to the socket by
    pump(), so handlers can mutate room state and fan out in a single step.
    """

    def __init__(self, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self.room: Optional[str] = None
        self.closed = False
        self._outbox: asyncio.Queue = asyncio.Queue()

    def __repr__(self):
        return f"Connection(id={self.id!r}, room={self.room!r})"

    def send(self, event: str, data: Any = None) -> bool:
        if self.closed:
            logger.debug(f"Dropping {event} for closed connection {self.id}")
            return False
        self._outbox.put_nowait({"type": event, "data": data})
        return True

    def close(self):
        if self.closed:
            return
        self.closed = True
        # Wake the writer so it can exit
        self._outbox.put_nowait(None)

    def drain(self) -> List[dict]:
        """Pop every queued message without waiting."""
        messages = []
        while True:
            try:
                message = self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                break
            if message is not None:
                messages.append(message)
        return messages

    async def pump(self, websocket: WebSocket):
        """Write queued events to the socket in order until closed."""
        sent = 0
        while True:
            message = await self._outbox.get()
            if message is None:
                break
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                # Peer went away before delivery; nothing to retry
                logger.warning(f"Error sending {message['type']} to connection {self.id}: {e}")
                self.closed = True
                break
        logger.debug(f"Writer for connection {self.id} stopped after {sent} messages")
