from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.staticfiles import StaticFiles
from schemas.rooms import UploadResponse
from storage import VideoStore
from logging_config import get_logger

logger = get_logger(__name__)

videos_router = APIRouter(tags=["videos"])


class VideoFiles(StaticFiles):
    """Static video files playable in the browser and embeddable cross-origin."""

    def file_response(self, full_path, stat_result, scope, status_code=200):
        response = super().file_response(full_path, stat_result, scope, status_code)
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        media_type = VideoStore.media_type_for(str(full_path))
        if media_type:
            response.headers["Content-Type"] = media_type
        return response


@videos_router.post("/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_video(request: Request, video: Optional[UploadFile] = File(None)):
    """Store one video and return the path to pass to set-video."""
    client_host = request.client.host if request.client else "unknown"
    if video is None:
        logger.warning(f"Upload from {client_host} rejected: no file")
        raise HTTPException(status_code=400, detail="No file uploaded or invalid file type.")

    store: VideoStore = request.app.state.video_store
    logger.info(f"Upload from {client_host}: {video.filename!r}, content type {video.content_type}")
    if not store.is_allowed(video.filename, video.content_type):
        logger.error(f"Rejected file: {video.filename}, mimetype: {video.content_type}")
        raise HTTPException(status_code=400, detail="Not an allowed video file type!")

    try:
        video_path = await store.save(video)
    except OSError as e:
        logger.error(f"Error storing upload {video.filename!r}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to store video")
    finally:
        await video.close()
    return UploadResponse(video_path=video_path)
