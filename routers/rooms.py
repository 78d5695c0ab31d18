from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomSummary
from typing import List
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=List[RoomSummary], response_model_by_alias=True)
async def list_rooms(request: Request):
    """Every live room with its playback state and member count."""
    registry = request.app.state.registry
    rooms = [room.summary() for room in registry.rooms()]
    logger.debug(f"Listing {len(rooms)} rooms")
    return rooms


@rooms_router.get("/{room_name}", response_model=RoomSummary, response_model_by_alias=True)
async def get_room_details(room_name: str, request: Request):
    """
    Get one room's state.

    Returns:
    - name: Room name
    - hostId: Connection id holding transport authority
    - videoRef: Selected video, or null
    - playing / positionSeconds: Last transport state set by the host
    - memberCount: Connections currently joined
    """
    room = request.app.state.registry.get(room_name)
    if room is None:
        logger.info(f"Room details failed: Room '{room_name}' not found")
        raise HTTPException(status_code=404, detail="Room not found")
    return room.summary()
