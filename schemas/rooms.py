from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class WireModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class RoomSnapshot(WireModel):
    video_ref: Optional[str] = None
    playing: bool = False
    position_seconds: float = 0.0
    host_id: str

class RoomSummary(RoomSnapshot):
    name: str
    member_count: int

class ChatMessage(WireModel):
    sender_id: str
    text: str

class UploadResponse(WireModel):
    video_path: str
