from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, TypeAdapter, ValidationError
from typing import Annotated, Any, Optional, Union


# Client -> server
JOIN = "join"
LEAVE = "leave"
BECOME_HOST = "become-host"
SET_VIDEO = "set-video"
PLAY = "play"
PAUSE = "pause"
SEEK = "seek"
CHAT_MESSAGE = "chat-message"

# Server -> client
CONNECTED = "connected"
ROOM_STATE = "room-state"
NEW_HOST = "new-host"
VIDEO_SET = "video-set"
PLAYED = "played"
PAUSED = "paused"
SEEKED = "seeked"


class ClientEvent(BaseModel):
    """Inbound frame: {"type": <event name>, "data": <payload>}."""
    type: StrictStr
    data: Any = None


Position = Union[
    Annotated[StrictInt, Field(ge=0)],
    Annotated[StrictFloat, Field(ge=0, allow_inf_nan=False)],
]

text_payload = TypeAdapter(StrictStr)
position_payload = TypeAdapter(Position)


def parse_position(data: Any) -> Optional[float]:
    """Return the position in seconds, or None unless the payload is a finite non-negative number."""
    try:
        return float(position_payload.validate_python(data))
    except (ValidationError, OverflowError):
        return None


def parse_text(data: Any) -> Optional[str]:
    try:
        return text_payload.validate_python(data)
    except ValidationError:
        return None
