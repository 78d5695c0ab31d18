from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from routers.rooms import rooms_router
from routers.videos import VideoFiles, videos_router
from backend import RoomRegistry
from broadcaster import BroadcastRouter
from connections import Connection
from schemas.events import ClientEvent
from session import SessionCoordinator
from storage import VideoStore
from constants import ALLOWED_ORIGINS, LOG_FILE, LOG_LEVEL, VIDEO_DIR
from logging_config import get_logger, setup_logging
from typing import Optional
from contextlib import asynccontextmanager
import asyncio
import json

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


async def websocket_endpoint(websocket: WebSocket):
    """One synchronized-playback session.

    Frames are JSON objects {"type": <event>, "data": <payload>} in both
    directions. The connection's id is sent first as a "connected" event.
    """
    coordinator: SessionCoordinator = websocket.app.state.coordinator
    await websocket.accept()

    connection = Connection()
    writer = asyncio.create_task(connection.pump(websocket))
    coordinator.connect(connection)

    try:
        message_count = 0
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            message_count += 1
            data = message.get("text")
            if data is None:
                logger.warning(f"Ignoring non-text frame #{message_count} from connection {connection.id}")
                continue
            try:
                event = ClientEvent.model_validate(json.loads(data))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Ignoring malformed frame #{message_count} from connection {connection.id}: {e}")
                continue
            coordinator.dispatch(connection, event.type, event.data)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected normally for connection {connection.id}")
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.id}: {e}", exc_info=True)
    finally:
        coordinator.disconnect(connection)
        connection.close()
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.video_store.ensure_directory()
    yield


async def index():
    return "Watch Party Server is running!"


def create_app(registry: Optional[RoomRegistry] = None, video_store: Optional[VideoStore] = None) -> FastAPI:
    """Build the application around one room registry and one video store."""
    app = FastAPI(lifespan=lifespan)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.registry = registry if registry is not None else RoomRegistry()
    app.state.video_store = video_store or VideoStore(VIDEO_DIR)
    app.state.coordinator = SessionCoordinator(app.state.registry, BroadcastRouter())

    app.add_api_route("/", index, methods=["GET"], response_class=PlainTextResponse)
    app.include_router(rooms_router)
    app.include_router(videos_router)
    app.add_api_websocket_route("/ws", websocket_endpoint)
    app.mount(
        app.state.video_store.url_prefix,
        VideoFiles(directory=app.state.video_store.directory, check_dir=False),
        name="videos",
    )

    logger.info("FastAPI application initialized")
    return app


# Served by uvicorn as "app:app"; the video directory is created at startup, not on import
app = create_app()
